"""Archive chain traversal for paged (RFC 5005) feeds."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional
from urllib.parse import urldefrag, urljoin

from .documents import parse_document
from .errors import FetchError, ParseError, ResolveError
from .links import extract_links, find_extension
from .models import ChainEnd, Entry, FeedDocument, HistoryAssembly, LinkRelation
from .transport import fetch_document

logger = logging.getLogger(__name__)

HISTORY_NAMESPACE = "http://purl.org/syndication/history/1.0"
PREV_ARCHIVE = "prev-archive"
NEXT_ARCHIVE = "next-archive"
DEFAULT_MAX_DOCUMENTS = 50

Fetcher = Callable[[str], bytes]
Parser = Callable[[bytes, str], FeedDocument]


class ArchiveChain:
    """URLs visited during one resolution, in fetch order."""

    def __init__(self) -> None:
        self._urls: List[str] = []
        self._seen = set()

    @staticmethod
    def _key(url: str) -> str:
        try:
            return urldefrag(url)[0]
        except ValueError:
            return url

    def visit(self, url: str) -> None:
        self._urls.append(url)
        self._seen.add(self._key(url))

    def __contains__(self, url: object) -> bool:
        return isinstance(url, str) and self._key(url) in self._seen

    def __len__(self) -> int:
        return len(self._urls)

    @property
    def urls(self) -> tuple:
        return tuple(self._urls)


def _join(base: str, href: str) -> Optional[str]:
    """Resolve ``href`` against ``base``, returning None for malformed URLs."""
    try:
        return urljoin(base, href)
    except ValueError as exc:
        logger.warning("Ignoring malformed link %r in %s: %s", href, base, exc)
        return None


def _resolved(link: Optional[LinkRelation], base: str) -> Optional[LinkRelation]:
    if link is None:
        return None
    href = _join(base, link.href)
    if href is None:
        return None
    if href == link.href:
        return link
    return LinkRelation(
        href=href,
        relation=link.relation,
        media_type=link.media_type,
        language=link.language,
        title=link.title,
        length=link.length,
    )


def _first(links: Dict[str, List[LinkRelation]], relation: str) -> Optional[LinkRelation]:
    group = links.get(relation)
    return group[0] if group else None


def is_complete_feed(document: FeedDocument) -> bool:
    """Whether the document declares itself a complete feed (``fh:complete``)."""
    return bool(
        find_extension(
            document.namespaces, document.extensions, HISTORY_NAMESPACE, "complete"
        )
    )


class ArchiveChainResolver:
    """Fetch a feed and every older archive document it links to.

    Resolution is all-or-nothing: the first fetch or parse failure raises
    ResolveError and discards whatever was collected before it.
    """

    def __init__(
        self,
        fetcher: Fetcher = fetch_document,
        parser: Parser = parse_document,
        max_documents: int = DEFAULT_MAX_DOCUMENTS,
    ):
        if max_documents < 1:
            raise ValueError("max_documents must be at least 1.")
        self._fetch = fetcher
        self._parse = parser
        self.max_documents = max_documents

    def _load(self, url: str, position: int) -> FeedDocument:
        try:
            data = self._fetch(url)
            return self._parse(data, url)
        except (FetchError, ParseError) as exc:
            logger.warning("Archive chain failed at document %d (%s): %s", position, url, exc)
            raise ResolveError(url, position, exc) from exc

    def resolve(self, seed_url: str) -> HistoryAssembly:
        """Return the full history reachable from ``seed_url``."""
        chain = ArchiveChain()
        entries: List[Entry] = []
        seed_links: Dict[str, List[LinkRelation]] = {}
        end = ChainEnd.EXHAUSTED
        url = seed_url

        while True:
            document = self._load(url, len(chain))
            chain.visit(url)
            entries.extend(document.entries)
            links = extract_links(document.namespaces, document.extensions)

            if len(chain) == 1:
                seed_links = links
                if is_complete_feed(document):
                    logger.info("Feed %s is complete; not following archives", url)
                    end = ChainEnd.COMPLETE
                    break

            archives = links.get(PREV_ARCHIVE, [])
            if not archives:
                end = ChainEnd.EXHAUSTED
                break
            if len(archives) > 1:
                logger.warning(
                    "Document %s advertises %d prev-archive links; stopping chain",
                    url,
                    len(archives),
                )
                end = ChainEnd.AMBIGUOUS
                break

            next_url = _join(url, archives[0].href)
            if next_url is None:
                end = ChainEnd.MALFORMED
                break
            if next_url in chain:
                logger.info("Archive chain cycles back to %s; stopping", next_url)
                end = ChainEnd.CYCLE
                break
            if len(chain) >= self.max_documents:
                logger.warning(
                    "Archive chain reached %d documents; not fetching %s",
                    self.max_documents,
                    next_url,
                )
                end = ChainEnd.LIMIT
                break

            logger.debug("Following prev-archive from %s to %s", url, next_url)
            url = next_url

        logger.info(
            "Resolved %d entries from %d documents starting at %s (%s)",
            len(entries),
            len(chain),
            seed_url,
            end.value,
        )
        return HistoryAssembly(
            entries=tuple(entries),
            documents=chain.urls,
            end=end,
            first=_resolved(_first(seed_links, "first"), seed_url),
            last=_resolved(_first(seed_links, "last"), seed_url),
            next_archive=_resolved(_first(seed_links, NEXT_ARCHIVE), seed_url),
        )
