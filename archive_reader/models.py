"""Shared data models for archive_reader."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

ALTERNATE = "alternate"


@dataclass(frozen=True)
class LinkRelation:
    """A typed Atom link recovered from a feed document."""

    href: str
    relation: str = ALTERNATE
    media_type: Optional[str] = None
    language: Optional[str] = None
    title: Optional[str] = None
    length: Optional[int] = None


@dataclass(frozen=True)
class ExtensionElement:
    """Opaque namespaced element found at the top level of a feed."""

    name: str
    value: Optional[str] = None
    attrs: Mapping[str, str] = field(default_factory=dict)
    children: Mapping[str, List["ExtensionElement"]] = field(default_factory=dict)


@dataclass(frozen=True)
class Display:
    """What the presentation layer should show for an entry."""

    kind: str  # "uri" or "html"
    value: str


@dataclass(frozen=True)
class Entry:
    """Single syndicated item taken from a feed document."""

    title: str = ""
    uri: Optional[str] = None
    body_html: Optional[str] = None

    def display(self) -> Optional[Display]:
        if self.uri:
            return Display("uri", self.uri)
        if self.body_html:
            return Display("html", self.body_html)
        return None


ExtensionMap = Dict[str, Dict[str, List[ExtensionElement]]]


@dataclass
class FeedDocument:
    """A parsed feed document as consumed by the archive resolver."""

    url: str
    entries: List[Entry]
    namespaces: Dict[str, str] = field(default_factory=dict)
    extensions: ExtensionMap = field(default_factory=dict)
    title: str = ""
    version: str = ""


class ChainEnd(enum.Enum):
    """Reason an archive chain traversal stopped."""

    EXHAUSTED = "exhausted"
    COMPLETE = "complete"
    CYCLE = "cycle"
    AMBIGUOUS = "ambiguous"
    LIMIT = "limit"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class HistoryAssembly:
    """Entries stitched together from every document of an archive chain.

    Entries from the requested (newest) document come first, followed by the
    entries of each older archive document in the order they were fetched.
    """

    entries: Tuple[Entry, ...]
    documents: Tuple[str, ...]
    end: ChainEnd = ChainEnd.EXHAUSTED
    first: Optional[LinkRelation] = None
    last: Optional[LinkRelation] = None
    next_archive: Optional[LinkRelation] = None

    def chronological(self) -> Tuple[Entry, ...]:
        """Return the entries oldest first."""
        return tuple(reversed(self.entries))
