"""Interactive terminal presentation for browsing a feed history."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Callable, Optional, TextIO

from .errors import ResolveError
from .history import HistoryModel
from .models import Display
from .navigation import NavigationController
from .renderers import build_entry_text

logger = logging.getLogger(__name__)

PROMPT = "[n]ext [p]revious [o]pen URL [q]uit> "
HELP = "Commands: n (next), p (previous), o URL (open feed), q (quit)"


class ConsolePresentation:
    """Writes the current entry and load errors to a text stream."""

    def __init__(self, history: HistoryModel, stream: Optional[TextIO] = None):
        self.history = history
        self.stream = stream or sys.stdout

    def load_entry(self, title: str, display: Display) -> None:
        text = build_entry_text(
            title, display, position=self.history.index + 1, total=len(self.history)
        )
        print(text.rstrip(), file=self.stream)

    def on_resolve_error(self, error: ResolveError) -> None:
        print(f"Could not load feed: {error}", file=self.stream)


async def browse(
    controller: NavigationController,
    url: str,
    reader: Callable[[str], str] = input,
    stream: Optional[TextIO] = None,
) -> None:
    """Load ``url`` and step through its history until the user quits."""
    stream = stream or sys.stdout
    loop = asyncio.get_running_loop()

    await controller.request_feed(url)
    while True:
        try:
            line = await loop.run_in_executor(None, reader, PROMPT)
        except EOFError:
            break

        command, _, argument = line.strip().partition(" ")
        command = command.lower()
        if command in ("q", "quit"):
            break
        if command in ("n", "next"):
            if controller.next_entry() is None:
                print("Already at the oldest entry.", file=stream)
        elif command in ("p", "prev", "previous"):
            if controller.previous_entry() is None:
                print("Already at the newest entry.", file=stream)
        elif command in ("o", "open") and argument.strip():
            await controller.request_feed(argument.strip())
        else:
            print(HELP, file=stream)
    logger.debug("Leaving console browser")
