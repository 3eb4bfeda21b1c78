"""Bridge between presentation events and the feed history."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from typing import Optional, Protocol

from .errors import ResolveError
from .history import HistoryModel
from .models import Display, Entry, HistoryAssembly
from .resolver import ArchiveChainResolver

logger = logging.getLogger(__name__)


class Presentation(Protocol):
    """Callbacks the controller uses to update whatever displays entries."""

    def load_entry(self, title: str, display: Display) -> None: ...

    def on_resolve_error(self, error: ResolveError) -> None: ...


class NavigationController:
    """Owns the history and applies load/next/previous requests to it.

    All state changes happen on the event loop thread. Feed resolution runs
    on a worker thread; only its finished, immutable result crosses back.
    A new ``request_feed`` cancels any load still in flight, and results of
    superseded loads are discarded even if they complete later.
    """

    def __init__(
        self,
        presentation: Presentation,
        resolver: Optional[ArchiveChainResolver] = None,
        history: Optional[HistoryModel] = None,
        max_workers: int = 2,
    ):
        self.presentation = presentation
        self.resolver = resolver if resolver is not None else ArchiveChainResolver()
        self.history = history if history is not None else HistoryModel()
        self.assembly: Optional[HistoryAssembly] = None
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="archive-reader"
        )
        self._pending: Optional[asyncio.Task] = None
        self._generation = 0

    def request_feed(self, url: str) -> asyncio.Task:
        """Start loading the feed at ``url``; must be called from the event loop."""
        if self._pending is not None and not self._pending.done():
            logger.info("Cancelling in-flight feed load in favour of %s", url)
            self._pending.cancel()

        self._generation += 1
        loop = asyncio.get_running_loop()
        self._pending = loop.create_task(self._load(url, self._generation))
        return self._pending

    async def _load(self, url: str, generation: int) -> Optional[HistoryAssembly]:
        loop = asyncio.get_running_loop()
        try:
            assembly = await loop.run_in_executor(
                self._executor, self.resolver.resolve, url
            )
        except ResolveError as exc:
            if generation != self._generation:
                logger.debug("Dropping error from superseded load of %s", url)
                return None
            logger.error("Could not load feed %s: %s", url, exc)
            self.presentation.on_resolve_error(exc)
            return None

        if generation != self._generation:
            logger.debug("Dropping result of superseded load of %s", url)
            return None

        self.assembly = assembly
        self.history.load(assembly.entries)
        logger.info("Loaded %d entries for %s", len(self.history), url)
        self._show(self.history.current())
        return assembly

    def next_entry(self) -> Optional[Entry]:
        entry = self.history.advance()
        self._show(entry)
        return entry

    def previous_entry(self) -> Optional[Entry]:
        entry = self.history.retreat()
        self._show(entry)
        return entry

    def _show(self, entry: Optional[Entry]) -> None:
        if entry is None:
            return
        display = entry.display()
        if display is None:
            return
        self.presentation.load_entry(entry.title, display)

    def close(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._executor.shutdown(wait=False)
