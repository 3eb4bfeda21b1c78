"""Paginated view over a resolved feed history."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from .models import Entry

logger = logging.getLogger(__name__)


class HistoryModel:
    """Current position within an ordered sequence of entries.

    ``load``, ``advance`` and ``retreat`` are the only mutators. Moves past
    either end leave the position unchanged and return None.
    """

    def __init__(self, entries: Iterable[Entry] = ()):
        self._entries: List[Entry] = list(entries)
        self._index = 0

    def load(self, entries: Iterable[Entry]) -> None:
        """Replace the entries and rewind to the first one."""
        self._entries = list(entries)
        self._index = 0
        logger.debug("History loaded with %d entries", len(self._entries))

    def current(self) -> Optional[Entry]:
        if not self._entries:
            return None
        return self._entries[self._index]

    def advance(self) -> Optional[Entry]:
        if self._index + 1 >= len(self._entries):
            return None
        self._index += 1
        return self._entries[self._index]

    def retreat(self) -> Optional[Entry]:
        if self._index == 0 or not self._entries:
            return None
        self._index -= 1
        return self._entries[self._index]

    @property
    def index(self) -> int:
        return self._index

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    @property
    def at_start(self) -> bool:
        return self._index == 0

    @property
    def at_end(self) -> bool:
        return self._index + 1 >= len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
