"""Rendering helpers for resolved histories."""

from __future__ import annotations

import dataclasses
import json
from typing import Sequence

from .models import Display, Entry, HistoryAssembly
from .templating import get_environment


def build_history_json(entries: Sequence[Entry]) -> str:
    """Serialise entries as a JSON array."""
    payload = [dataclasses.asdict(entry) for entry in entries]
    return json.dumps(payload, indent=2, ensure_ascii=False)


def build_history_text(
    assembly: HistoryAssembly, entries: Sequence[Entry] | None = None
) -> str:
    """Render a plain-text listing of a resolved history."""
    env = get_environment()
    template = env.get_template("history.txt.j2")
    return template.render(
        entries=list(assembly.entries if entries is None else entries),
        documents=assembly.documents,
        end=assembly.end.value,
        first=assembly.first,
        last=assembly.last,
    )


def build_entry_text(title: str, display: Display, position: int, total: int) -> str:
    """Render a single entry for the console browser."""
    env = get_environment()
    template = env.get_template("entry.txt.j2")
    return template.render(
        title=title, display=display, position=position, total=total
    )
