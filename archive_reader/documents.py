"""Feed document parsing using feedparser."""

from __future__ import annotations

import io
import logging
from typing import Dict, List, Optional, Tuple
from urllib.parse import urljoin, urlsplit
from xml.etree import ElementTree as ET

import feedparser

from .errors import ParseError
from .models import Entry, ExtensionElement, ExtensionMap, FeedDocument

logger = logging.getLogger(__name__)

RSS_1_NAMESPACE = "http://purl.org/rss/1.0/"
RDF_NAMESPACE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"


def parse_document(data: bytes, url: str) -> FeedDocument:
    """Parse raw feed bytes into a FeedDocument.

    Entries come from feedparser; relative entry links are resolved against
    ``url``. Namespaces and top-level extension elements come from a strict
    XML pass; when that pass fails on a document feedparser still accepts,
    the document is returned without extensions.
    """
    parsed = feedparser.parse(data)
    version = parsed.get("version") or ""

    if not version and not parsed.entries:
        reason = parsed.get("bozo_exception") or "not a recognised RSS or Atom feed"
        raise ParseError(url, str(reason))

    if parsed.get("bozo"):
        logger.warning(
            "Feed %s has formatting issues: %s", url, parsed.get("bozo_exception")
        )

    try:
        namespaces, extensions = _read_extensions(data)
    except ET.ParseError as exc:
        logger.warning("Ignoring extension elements of %s: %s", url, exc)
        namespaces, extensions = dict(parsed.get("namespaces") or {}), {}

    entries = _extract_entries(parsed.entries, url)
    logger.info("Parsed %d entries from %s (%s)", len(entries), url, version or "unknown")

    return FeedDocument(
        url=url,
        entries=entries,
        namespaces=namespaces,
        extensions=extensions,
        title=parsed.feed.get("title", ""),
        version=version,
    )


def _extract_entries(items: list, url: str) -> List[Entry]:
    entries: List[Entry] = []
    for item in items:
        link = _entry_link(item, url)
        title = item.get("title", "")
        body = _entry_body(item)
        if not link and not body:
            logger.debug("Skipping entry without link or content in %s: %r", url, title)
            continue
        entries.append(Entry(title=title, uri=link, body_html=body))
    return entries


def _entry_link(item, url: str) -> Optional[str]:
    """Return the entry's link target, ignoring ids feedparser promotes to links."""
    link = item.get("link")
    if not link:
        return None
    try:
        resolved = urljoin(url, link)
        scheme = urlsplit(resolved).scheme
    except ValueError:
        logger.debug("Dropping malformed entry link %r in %s", link, url)
        return None
    if item.get("guidislink") and scheme not in ("http", "https"):
        return None
    return resolved


def _entry_body(item) -> Optional[str]:
    content = item.get("content")
    if content:
        try:
            return content[0].get("value") or None
        except (TypeError, KeyError, IndexError, AttributeError):
            return None
    return item.get("summary") or None


def _split_tag(tag: str) -> Tuple[Optional[str], str]:
    if tag.startswith("{"):
        uri, _, local = tag[1:].partition("}")
        return uri, local
    return None, tag


def _to_element(node: ET.Element) -> ExtensionElement:
    children: Dict[str, List[ExtensionElement]] = {}
    for child in node:
        _, local = _split_tag(child.tag)
        children.setdefault(local, []).append(_to_element(child))
    _, local = _split_tag(node.tag)
    text = node.text.strip() if node.text and node.text.strip() else None
    return ExtensionElement(
        name=local, value=text, attrs=dict(node.attrib), children=children
    )


def _feed_container(root: ET.Element) -> ET.Element:
    """Return the element whose children carry feed-level metadata."""
    _, local = _split_tag(root.tag)
    if local == "rss":
        channel = root.find("channel")
        if channel is not None:
            return channel
    if root.tag == f"{{{RDF_NAMESPACE}}}RDF":
        channel = root.find(f"{{{RSS_1_NAMESPACE}}}channel")
        if channel is not None:
            return channel
    return root


def _read_extensions(data: bytes) -> Tuple[Dict[str, str], ExtensionMap]:
    """Collect declared namespace prefixes and namespaced feed-level elements."""
    namespaces: Dict[str, str] = {}
    root = None
    for event, item in ET.iterparse(io.BytesIO(data), events=("start-ns", "start")):
        if event == "start-ns":
            prefix, uri = item
            namespaces.setdefault(prefix, uri)
        elif root is None:
            root = item

    extensions: ExtensionMap = {}
    if root is None:
        return namespaces, extensions

    prefix_by_uri: Dict[str, str] = {}
    for prefix, uri in namespaces.items():
        prefix_by_uri.setdefault(uri, prefix)

    for node in _feed_container(root):
        if not isinstance(node.tag, str):
            continue
        uri, local = _split_tag(node.tag)
        if uri is None:
            continue
        prefix = prefix_by_uri.get(uri)
        if prefix is None:
            continue
        extensions.setdefault(prefix, {}).setdefault(local, []).append(_to_element(node))
    return namespaces, extensions
