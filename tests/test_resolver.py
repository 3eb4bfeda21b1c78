import pytest

from archive_reader.documents import parse_document
from archive_reader.errors import FetchError, ParseError, ResolveError, ResolveErrorKind
from archive_reader.history import HistoryModel
from archive_reader.models import ChainEnd, FeedDocument
from archive_reader.resolver import ArchiveChain, ArchiveChainResolver


def _resolver(documents, calls=None, **kwargs):
    """Resolver whose fetcher serves prepared FeedDocuments by URL."""

    def fetch(url):
        if calls is not None:
            calls.append(url)
        if url not in documents:
            raise FetchError(url, "HTTP 404", status=404)
        return url.encode("utf-8")

    def parse(data, url):
        document = documents[url]
        if isinstance(document, Exception):
            raise document
        return document

    return ArchiveChainResolver(fetcher=fetch, parser=parse, **kwargs)


def _prev(href):
    return {"rel": "prev-archive", "href": href}


def test_single_document_without_paging(make_document):
    docs = {"https://x/feed": make_document("https://x/feed", ["a", "b"])}

    assembly = _resolver(docs).resolve("https://x/feed")

    assert [entry.title for entry in assembly.entries] == ["a", "b"]
    assert assembly.documents == ("https://x/feed",)
    assert assembly.end is ChainEnd.EXHAUSTED


def test_follows_prev_archive_newest_document_first(make_document):
    docs = {
        "https://x/feed": make_document(
            "https://x/feed", ["n1", "n2"], [_prev("https://x/archive/2")]
        ),
        "https://x/archive/2": make_document(
            "https://x/archive/2", ["m1"], [_prev("https://x/archive/1")]
        ),
        "https://x/archive/1": make_document("https://x/archive/1", ["o1", "o2"]),
    }

    assembly = _resolver(docs).resolve("https://x/feed")

    assert [entry.title for entry in assembly.entries] == ["n1", "n2", "m1", "o1", "o2"]
    assert [entry.title for entry in assembly.chronological()] == [
        "o2",
        "o1",
        "m1",
        "n2",
        "n1",
    ]
    assert assembly.documents == (
        "https://x/feed",
        "https://x/archive/2",
        "https://x/archive/1",
    )


def test_cycle_visits_each_document_once(make_document):
    calls = []
    docs = {
        "https://x/a": make_document("https://x/a", ["a"], [_prev("https://x/b")]),
        "https://x/b": make_document("https://x/b", ["b"], [_prev("https://x/a")]),
    }

    assembly = _resolver(docs, calls).resolve("https://x/a")

    assert calls == ["https://x/a", "https://x/b"]
    assert [entry.title for entry in assembly.entries] == ["a", "b"]
    assert assembly.end is ChainEnd.CYCLE


def test_self_reference_ignoring_fragment_is_a_cycle(make_document):
    calls = []
    docs = {
        "https://x/a": make_document("https://x/a", ["a"], [_prev("https://x/a#top")]),
    }

    assembly = _resolver(docs, calls).resolve("https://x/a")

    assert calls == ["https://x/a"]
    assert assembly.end is ChainEnd.CYCLE


def test_ambiguous_prev_archive_is_not_followed(make_document, caplog):
    calls = []
    docs = {
        "https://x/feed": make_document(
            "https://x/feed",
            ["a"],
            [_prev("https://x/archive/1"), _prev("https://x/archive/2")],
        ),
    }

    with caplog.at_level("WARNING"):
        assembly = _resolver(docs, calls).resolve("https://x/feed")

    assert calls == ["https://x/feed"]
    assert assembly.end is ChainEnd.AMBIGUOUS
    assert "2 prev-archive links" in caplog.text


def test_relative_prev_archive_resolves_against_document_url(make_document):
    docs = {
        "https://x/feeds/main.xml": make_document(
            "https://x/feeds/main.xml", ["new"], [_prev("archive/1.xml")]
        ),
        "https://x/feeds/archive/1.xml": make_document(
            "https://x/feeds/archive/1.xml", ["old"]
        ),
    }

    assembly = _resolver(docs).resolve("https://x/feeds/main.xml")

    assert [entry.title for entry in assembly.entries] == ["new", "old"]


def test_chain_length_cap(make_document):
    docs = {
        f"https://x/{index}": make_document(
            f"https://x/{index}", [str(index)], [_prev(f"https://x/{index + 1}")]
        )
        for index in range(10)
    }
    calls = []

    assembly = _resolver(docs, calls, max_documents=3).resolve("https://x/0")

    assert calls == ["https://x/0", "https://x/1", "https://x/2"]
    assert assembly.end is ChainEnd.LIMIT


def test_invalid_max_documents():
    with pytest.raises(ValueError):
        ArchiveChainResolver(max_documents=0)


def test_complete_feed_does_not_follow_archives(make_document):
    calls = []
    document = make_document("https://x/feed", ["a"], [_prev("https://x/old")])
    document.namespaces["fh"] = "http://purl.org/syndication/history/1.0"
    document.extensions["fh"] = {"complete": [{}]}

    assembly = _resolver({"https://x/feed": document}, calls).resolve("https://x/feed")

    assert calls == ["https://x/feed"]
    assert assembly.end is ChainEnd.COMPLETE


def test_seed_document_terminal_links(make_document):
    docs = {
        "https://x/feed": make_document(
            "https://x/feed",
            ["a"],
            [
                {"rel": "first", "href": "/feed"},
                {"rel": "last", "href": "https://x/archive/0"},
                {"rel": "next-archive", "href": "https://x/archive/9"},
            ],
        ),
    }

    assembly = _resolver(docs).resolve("https://x/feed")

    assert assembly.first.href == "https://x/feed"
    assert assembly.first.relation == "first"
    assert assembly.last.href == "https://x/archive/0"
    assert assembly.next_archive.href == "https://x/archive/9"


def test_fetch_failure_mid_chain_discards_everything(make_document):
    docs = {
        "https://x/feed": make_document(
            "https://x/feed", ["a"], [_prev("https://x/missing")]
        ),
    }

    with pytest.raises(ResolveError) as excinfo:
        _resolver(docs).resolve("https://x/feed")

    error = excinfo.value
    assert error.position == 1
    assert error.url == "https://x/missing"
    assert error.kind is ResolveErrorKind.FETCH
    assert isinstance(error.__cause__, FetchError)


def test_parse_failure_is_invalid_document():
    docs = {"https://x/feed": ParseError("https://x/feed", "not a feed")}

    with pytest.raises(ResolveError) as excinfo:
        _resolver(docs).resolve("https://x/feed")

    assert excinfo.value.position == 0
    assert excinfo.value.kind is ResolveErrorKind.INVALID_DOCUMENT


def test_archive_chain_membership_ignores_fragment():
    chain = ArchiveChain()
    chain.visit("https://x/a#frag")

    assert "https://x/a" in chain
    assert "https://x/b" not in chain
    assert chain.urls == ("https://x/a#frag",)


def test_end_to_end_single_document(make_rss):
    feed = make_rss(items=[("Only", "https://example/1", None)])
    resolver = ArchiveChainResolver(
        fetcher=lambda url: feed, parser=parse_document
    )

    assembly = resolver.resolve("https://example/feed")

    assert len(assembly.entries) == 1
    assert assembly.entries[0].uri == "https://example/1"


def test_end_to_end_two_documents(make_rss):
    pages = {
        "https://example/feed": make_rss(
            items=[
                ("D1 first", "https://example/d1/1", None),
                ("D1 second", "https://example/d1/2", None),
            ],
            links=[{"rel": "prev-archive", "href": "https://example/archive/2"}],
        ),
        "https://example/archive/2": make_rss(
            items=[
                ("D2 first", "https://example/d2/1", None),
                ("D2 second", "https://example/d2/2", None),
                ("D2 third", "https://example/d2/3", None),
            ],
        ),
    }
    resolver = ArchiveChainResolver(fetcher=pages.__getitem__, parser=parse_document)

    assembly = resolver.resolve("https://example/feed")

    assert [entry.title for entry in assembly.entries] == [
        "D1 first",
        "D1 second",
        "D2 first",
        "D2 second",
        "D2 third",
    ]
    assert assembly.end is ChainEnd.EXHAUSTED


def test_feed_document_defaults():
    document = FeedDocument(url="https://x/feed", entries=[])

    assert document.namespaces == {}
    assert document.extensions == {}


def test_malformed_prev_archive_ends_chain(make_document, caplog):
    calls = []
    docs = {
        "https://x/feed": make_document(
            "https://x/feed", ["a"], [_prev("http://[bad"), {"rel": "last", "href": "http://[bad"}]
        ),
    }

    with caplog.at_level("WARNING"):
        assembly = _resolver(docs, calls).resolve("https://x/feed")

    assert calls == ["https://x/feed"]
    assert assembly.end is ChainEnd.MALFORMED
    assert assembly.last is None
    assert [entry.title for entry in assembly.entries] == ["a"]
    assert "Ignoring malformed link" in caplog.text


def test_end_to_end_malformed_links_do_not_escape(make_rss):
    feed = make_rss(
        items=[("Broken link", "http://[bad", "<p>body</p>")],
        links=[{"rel": "prev-archive", "href": "http://[bad"}],
    )
    resolver = ArchiveChainResolver(fetcher=lambda url: feed, parser=parse_document)

    assembly = resolver.resolve("https://example/feed")

    assert assembly.end is ChainEnd.MALFORMED
    assert assembly.entries[0].uri is None


def test_end_to_end_single_document_history_navigation(make_rss):
    feed = make_rss(items=[("Only", "https://example/1", None)])
    resolver = ArchiveChainResolver(fetcher=lambda url: feed, parser=parse_document)
    history = HistoryModel()

    history.load(resolver.resolve("https://example/feed").entries)

    assert len(history) == 1
    assert history.current().uri == "https://example/1"
    assert history.advance() is None
    assert history.current().uri == "https://example/1"


def test_end_to_end_two_documents_history_navigation(make_rss):
    pages = {
        "https://example/feed": make_rss(
            items=[("D1 a", "https://example/d1/a", None), ("D1 b", "https://example/d1/b", None)],
            links=[{"rel": "prev-archive", "href": "/archive/2"}],
        ),
        "https://example/archive/2": make_rss(
            items=[
                ("D2 a", "https://example/d2/a", None),
                ("D2 b", "https://example/d2/b", None),
                ("D2 c", "https://example/d2/c", None),
            ],
        ),
    }
    resolver = ArchiveChainResolver(fetcher=pages.__getitem__, parser=parse_document)
    history = HistoryModel()

    history.load(resolver.resolve("https://example/feed").entries)

    assert len(history) == 5
    assert history.current().title == "D1 a"
    titles = [history.advance().title for _ in range(4)]
    assert titles == ["D1 b", "D2 a", "D2 b", "D2 c"]
    assert history.advance() is None
