"""Shared test fixtures and configuration."""

from collections.abc import Callable, Iterable, Sequence
import json
import os
from pathlib import Path
import sqlite3

import pytest

from crawl_search.adapters.repository import AbstractCorpusCounter, AbstractDocumentStore, AbstractTokenIndex
from crawl_search.adapters.sqlite_store import initialize_schema
from crawl_search.config import get_settings
from crawl_search.domain.search import Document, PhraseHit, TermMatch


TEST_ENV = {
    "CRAWL_DB_PATH": "crawler-test.db",
    "SEARCH_RESULT_LIMIT": "50",
    "SUGGESTION_LIMIT": "50",
    "TRIGRAM_THRESHOLD": "3",
    "BACKEND_TIMEOUT_SECONDS": "5",
    "LOG_LEVEL": "info",
    "LOG_JSON": "true",
}

# Set environment variables immediately when conftest.py is loaded
for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Pin the test environment and drop cached settings between tests."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_document(doc_id: str, **fields) -> Document:
    defaults = {
        "url": f"https://example.com/{doc_id}",
        "host": "example.com",
        "status": 200,
        "type": "html",
        "data": f"page {doc_id}",
    }
    defaults.update(fields)
    return Document(id=doc_id, **defaults)


class FakeCrawlStore(AbstractTokenIndex, AbstractDocumentStore, AbstractCorpusCounter):
    """In-memory token index, document store and counter that records calls."""

    def __init__(
        self,
        *,
        matches: Iterable[TermMatch] = (),
        documents: Iterable[Document] = (),
        phrases: Iterable[PhraseHit] = (),
        total: int | None = None,
    ) -> None:
        self.matches = list(matches)
        self.documents = {document.id: document for document in documents}
        self.phrases = list(phrases)
        self.total = total
        self.lookup_calls: list[list[str]] = []
        self.bulk_get_calls: list[list[str]] = []
        self.text_query_calls: list[tuple[str, int]] = []

    async def lookup_terms(self, terms: Sequence[str]) -> list[TermMatch]:
        self.lookup_calls.append(list(terms))
        wanted = set(terms)
        return [match for match in self.matches if match.term in wanted]

    async def bulk_get(self, ids: Sequence[str]) -> list[Document]:
        self.bulk_get_calls.append(list(ids))
        # Reverse to prove callers do not rely on store order
        return [self.documents[doc_id] for doc_id in reversed(ids) if doc_id in self.documents]

    async def text_query(self, term: str, limit: int) -> list[PhraseHit]:
        self.text_query_calls.append((term, limit))
        return sorted(self.phrases, key=lambda hit: hit.relevance, reverse=True)[:limit]

    async def count(self) -> int:
        return len(self.documents) if self.total is None else self.total


@pytest.fixture
def fake_store_factory() -> Callable[..., FakeCrawlStore]:
    return FakeCrawlStore


@pytest.fixture
def document_factory() -> Callable[..., Document]:
    return make_document


@pytest.fixture
def crawl_db(tmp_path: Path) -> Callable[..., Path]:
    """Write pages, token rows and phrases into a fresh SQLite crawl database."""

    def build(
        *,
        pages: Iterable[Document] = (),
        tokens: Iterable[tuple[str, str, float]] = (),
        phrases: Iterable[tuple[str, str]] = (),
    ) -> Path:
        db_path = tmp_path / "crawler.db"
        initialize_schema(db_path)
        conn = sqlite3.connect(db_path)
        try:
            conn.executemany(
                "INSERT INTO pages (id, url, host, status, type, data, links) VALUES (?, ?, ?, ?, ?, ?, ?)",
                [
                    (
                        page.id,
                        page.url,
                        page.host,
                        page.status,
                        page.type,
                        page.data,
                        json.dumps([link.model_dump() for link in page.links]),
                    )
                    for page in pages
                ],
            )
            conn.executemany("INSERT INTO tokens (page, term, weight) VALUES (?, ?, ?)", list(tokens))
            conn.executemany("INSERT INTO phrases (page, phrase) VALUES (?, ?)", list(phrases))
            conn.commit()
        finally:
            conn.close()
        return db_path

    return build
