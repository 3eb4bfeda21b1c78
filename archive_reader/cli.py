"""Command-line interface for the archive_reader application."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import functools
import logging
import pprint
from pathlib import Path
from typing import List, Optional

from .config import AppConfig, FetchConfig, parse_app_config
from .console import ConsolePresentation, browse
from .errors import ResolveError
from .history import HistoryModel
from .navigation import NavigationController
from .renderers import build_history_json, build_history_text
from .resolver import ArchiveChainResolver
from .transport import fetch_document

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Read the complete history of a paged RSS or Atom feed."
    )
    parser.add_argument("url", help="URL of the feed to load.")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to an XML configuration file.",
    )

    # Overrides for logging/debugging
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )

    parser.add_argument(
        "--format",
        choices=("json", "text"),
        default="json",
        help="Output format for the resolved history.",
    )
    parser.add_argument(
        "--oldest-first",
        action="store_true",
        help="Print entries in chronological order instead of newest first.",
    )
    parser.add_argument(
        "--browse",
        action="store_true",
        help="Step through the history interactively.",
    )
    return parser


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Send log records to stderr and, when given, to ``log_file`` as well.

    Any handlers installed earlier are replaced.
    """
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    logger.debug(
        "Logging at %s to %s",
        logging.getLevelName(level),
        log_file or "the console only",
    )


def build_resolver(fetch: FetchConfig) -> ArchiveChainResolver:
    """Create a resolver that fetches with the configured timeout and agent."""
    fetcher = functools.partial(
        fetch_document, timeout=fetch.timeout, user_agent=fetch.user_agent
    )
    return ArchiveChainResolver(fetcher=fetcher, max_documents=fetch.max_documents)


async def _browse(url: str, app_config: AppConfig) -> None:
    history = HistoryModel()
    controller = NavigationController(
        ConsolePresentation(history),
        resolver=build_resolver(app_config.fetch),
        history=history,
        max_workers=app_config.workers,
    )
    try:
        await browse(controller, url)
    finally:
        controller.close()


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = parse_app_config(args.config) if args.config else AppConfig()

        # Determine logging settings (CLI overrides Config)
        log_level = args.log_level or app_config.logging.level
        log_file = args.log_file or app_config.logging.file

        configure_logging(log_level, log_file)
        logger.debug(
            "Active Configuration:\n%s", pprint.pformat(dataclasses.asdict(app_config))
        )

        if args.browse:
            asyncio.run(_browse(args.url, app_config))
            return 0

        assembly = build_resolver(app_config.fetch).resolve(args.url)
    except ValueError as exc:
        parser.error(str(exc))
    except ResolveError as exc:
        logger.error("%s", exc)
        return 1
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 1

    entries = assembly.chronological() if args.oldest_first else assembly.entries
    if args.format == "text":
        print(build_history_text(assembly, entries))
    else:
        print(build_history_json(entries))
    return 0
