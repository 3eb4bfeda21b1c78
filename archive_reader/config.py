"""Configuration loading for archive_reader."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from .resolver import DEFAULT_MAX_DOCUMENTS
from .transport import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


@dataclass
class FetchConfig:
    timeout: float = DEFAULT_TIMEOUT
    max_documents: int = DEFAULT_MAX_DOCUMENTS
    user_agent: Optional[str] = DEFAULT_USER_AGENT


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class AppConfig:
    fetch: FetchConfig = field(default_factory=FetchConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    workers: int = 2


def _resolve_path(base_path: Path, target_path: str) -> str:
    """Resolve a path relative to the base config file if it's not absolute."""
    target = Path(target_path)
    if target.is_absolute():
        return str(target)
    return str((base_path.parent / target).resolve())


def _positive(value: str, name: str, cast):
    try:
        parsed = cast(value)
    except ValueError:
        raise ValueError(f"Config <{name}> must be a number, got {value!r}")
    if parsed <= 0:
        raise ValueError(f"Config <{name}> must be positive, got {value!r}")
    return parsed


def parse_app_config(path: str) -> AppConfig:
    """Parse the application configuration XML."""
    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    tree = ET.parse(config_path)
    root = tree.getroot()

    fetch = FetchConfig()
    timeout = root.findtext("timeout")
    if timeout:
        fetch.timeout = _positive(timeout.strip(), "timeout", float)
    max_documents = root.findtext("max-documents")
    if max_documents:
        fetch.max_documents = _positive(max_documents.strip(), "max-documents", int)
    user_agent_node = root.find("user-agent")
    if user_agent_node is not None:
        fetch.user_agent = (user_agent_node.text or "").strip() or None

    workers = _positive(root.findtext("workers", "2").strip(), "workers", int)

    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = log_node.findtext("level", "INFO")
        log_file = log_node.findtext("file")
        if log_file:
            logging_config.file = _resolve_path(config_path, log_file)

    return AppConfig(fetch=fetch, logging=logging_config, workers=workers)
