"""HTTP retrieval of feed documents."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "archive-reader/0.1"


def fetch_document(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: Optional[str] = DEFAULT_USER_AGENT,
) -> bytes:
    """Download a feed document and return its raw bytes."""
    logger.info("Fetching feed document %s", url)
    headers = {"User-Agent": user_agent} if user_agent else None
    try:
        response = requests.get(url, timeout=timeout, headers=headers)
    except requests.RequestException as exc:
        raise FetchError(url, str(exc)) from exc

    if not 200 <= response.status_code < 300:
        raise FetchError(url, f"HTTP {response.status_code}", status=response.status_code)

    logger.debug("Fetched %d bytes from %s", len(response.content), url)
    return response.content
