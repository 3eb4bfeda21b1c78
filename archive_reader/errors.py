"""Exception types raised while fetching and resolving feed archives."""

from __future__ import annotations

import enum
from typing import Optional


class ArchiveReaderError(Exception):
    """Base class for archive_reader failures."""


class FetchError(ArchiveReaderError):
    """Raised when a feed document cannot be downloaded."""

    def __init__(self, url: str, message: str, status: Optional[int] = None):
        super().__init__(f"Failed to fetch {url}: {message}")
        self.url = url
        self.status = status


class ParseError(ArchiveReaderError):
    """Raised when downloaded bytes are not a recognised feed document."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Invalid feed document at {url}: {message}")
        self.url = url


class ResolveErrorKind(enum.Enum):
    FETCH = "fetch"
    INVALID_DOCUMENT = "invalid-document"


class ResolveError(ArchiveReaderError):
    """Raised when any hop of an archive chain fails.

    ``position`` is the zero-based index of the failing document in the chain
    (0 is the requested feed itself).
    """

    def __init__(self, url: str, position: int, cause: ArchiveReaderError):
        super().__init__(f"Archive chain failed at document {position} ({url}): {cause}")
        self.url = url
        self.position = position
        self.cause = cause

    @property
    def kind(self) -> ResolveErrorKind:
        if isinstance(self.cause, ParseError):
            return ResolveErrorKind.INVALID_DOCUMENT
        return ResolveErrorKind.FETCH
