from typing import Iterable, Optional, Sequence, Tuple

import pytest

from archive_reader.models import Entry, FeedDocument

ATOM_NS = "http://www.w3.org/2005/Atom"


def _rss_item(title: str, link: Optional[str], body: Optional[str]) -> str:
    parts = [f"<title>{title}</title>"]
    if link:
        parts.append(f"<link>{link}</link>")
    if body:
        parts.append(f"<description><![CDATA[{body}]]></description>")
    return "<item>" + "".join(parts) + "</item>"


def build_rss(
    items: Iterable[Tuple[str, Optional[str], Optional[str]]] = (),
    links: Sequence[dict] = (),
    prefix: str = "atom",
    extra: str = "",
) -> bytes:
    """Return an RSS 2.0 document with Atom links under ``prefix``."""
    link_xml = ""
    for attrs in links:
        rendered = " ".join(f'{key}="{value}"' for key, value in attrs.items())
        link_xml += f"<{prefix}:link {rendered}/>"
    items_xml = "".join(_rss_item(*item) for item in items)
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<rss version="2.0" xmlns:{prefix}="{ATOM_NS}">'
        "<channel><title>Example</title><link>https://example.com/</link>"
        "<description>Example feed</description>"
        f"{link_xml}{extra}{items_xml}"
        "</channel></rss>"
    ).encode("utf-8")


@pytest.fixture
def make_rss():
    return build_rss


@pytest.fixture
def make_document():
    def _make(url: str, titles: Sequence[str] = (), links: Sequence[dict] = ()):
        return FeedDocument(
            url=url,
            entries=[Entry(title=title, uri=f"{url}#{title}") for title in titles],
            namespaces={"atom": ATOM_NS},
            extensions={"atom": {"link": [{**attrs} for attrs in links]}},
        )

    return _make
