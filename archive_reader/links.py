"""Recovery of Atom link relations from feed extension elements."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .models import ALTERNATE, LinkRelation

logger = logging.getLogger(__name__)

ATOM_NAMESPACE = "http://www.w3.org/2005/Atom"

_LENGTH_PATTERN = re.compile(r"\+?[0-9]+")


def _parse_length(value: Optional[str]) -> Optional[int]:
    """Parse an unsigned decimal length, returning None when malformed."""
    if value is None or not _LENGTH_PATTERN.fullmatch(value):
        return None
    return int(value)


def _attributes(element: Any) -> Mapping[str, str]:
    attrs = getattr(element, "attrs", None)
    if attrs is None and isinstance(element, Mapping):
        attrs = element
    return attrs or {}


def find_extension(
    namespaces: Mapping[str, str],
    extensions: Mapping[str, Mapping[str, Sequence[Any]]],
    uri: str,
    name: str,
) -> List[Any]:
    """Return every extension element with the given namespace URI and name.

    A namespace may be bound to several prefixes in one document, so all
    matching prefixes are searched in declaration order.
    """
    found: List[Any] = []
    for prefix, namespace in namespaces.items():
        if namespace != uri:
            continue
        elements = extensions.get(prefix, {}).get(name)
        if elements:
            found.extend(elements)
    return found


def extract_links(
    namespaces: Mapping[str, str],
    extensions: Mapping[str, Mapping[str, Sequence[Any]]],
) -> Dict[str, List[LinkRelation]]:
    """Group the Atom ``<link>`` elements of a document by relation name.

    Elements without ``href`` are skipped and a malformed ``length`` is
    dropped, so this never fails on hostile input.
    """
    result: Dict[str, List[LinkRelation]] = {}
    for element in find_extension(namespaces, extensions, ATOM_NAMESPACE, "link"):
        attrs = _attributes(element)
        href = attrs.get("href")
        if href is None:
            logger.debug("Skipping Atom link without href: %s", dict(attrs))
            continue
        relation = attrs.get("rel", ALTERNATE)
        result.setdefault(relation, []).append(
            LinkRelation(
                href=href,
                relation=relation,
                media_type=attrs.get("type"),
                language=attrs.get("hreflang"),
                title=attrs.get("title"),
                length=_parse_length(attrs.get("length")),
            )
        )
    return result
