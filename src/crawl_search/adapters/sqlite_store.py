"""SQLite-backed token index and document store for crawl search.

The crawler's index builder owns the writes; this adapter opens the database
read-only and serves:
- ``tokens``: precomputed (page, term, weight) rows
- ``pages``: crawled page records, links stored as JSON
- ``phrases``: FTS5 table used for relevance-ranked suggestions
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
import logging
from pathlib import Path
import sqlite3
import threading
from typing import Any, TypeVar

import orjson

from crawl_search.adapters.repository import AbstractCorpusCounter, AbstractDocumentStore, AbstractTokenIndex
from crawl_search.domain.errors import SearchBackendUnavailableError
from crawl_search.domain.search import Document, DocumentId, PhraseHit, TermMatch


logger = logging.getLogger(__name__)

_T = TypeVar("_T")

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS pages (
        id TEXT PRIMARY KEY,
        url TEXT NOT NULL,
        host TEXT NOT NULL,
        status INTEGER NOT NULL DEFAULT 0,
        type TEXT NOT NULL DEFAULT 'other',
        data TEXT NOT NULL DEFAULT '',
        links TEXT NOT NULL DEFAULT '[]'
    ) WITHOUT ROWID;

    CREATE TABLE IF NOT EXISTS tokens (
        page TEXT NOT NULL,
        term TEXT NOT NULL,
        weight REAL NOT NULL CHECK (weight >= 0)
    );

    CREATE INDEX IF NOT EXISTS idx_tokens_term ON tokens(term);

    CREATE VIRTUAL TABLE IF NOT EXISTS phrases USING fts5(page UNINDEXED, phrase);
"""

_PAGE_COLUMNS = ("id", "url", "host", "status", "type", "data", "links")


def apply_read_pragmas(
    conn: sqlite3.Connection,
    *,
    cache_size_kb: int = -65536,
    mmap_size_bytes: int = 134217728,
    busy_timeout_ms: int | None = 30000,
) -> None:
    """Apply read-optimized PRAGMAs and lock the connection to queries."""
    if busy_timeout_ms is not None:
        conn.execute(f"PRAGMA busy_timeout = {busy_timeout_ms}")
    conn.execute(f"PRAGMA cache_size = {cache_size_kb}")
    conn.execute(f"PRAGMA mmap_size = {mmap_size_bytes}")
    conn.execute("PRAGMA temp_store = MEMORY")
    conn.execute("PRAGMA query_only = 1")


def initialize_schema(db_path: str | Path) -> None:
    """Create the tables the index builder populates.

    Safe to call on an existing database.
    """
    conn = sqlite3.connect(db_path)
    try:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    finally:
        conn.close()


def build_fts_query(term: str) -> str:
    """Quote each word so user punctuation is never read as FTS5 syntax.

    Words are OR-ed so any of them can match.
    """
    words = term.split()
    return " OR ".join('"' + word.replace('"', '""') + '"' for word in words)


def _row_to_document(row: sqlite3.Row | tuple) -> Document:
    record: dict[str, Any] = dict(zip(_PAGE_COLUMNS, row, strict=True))
    record["links"] = orjson.loads(record["links"] or "[]")
    return Document.model_validate(record)


class SQLiteConnectionPool:
    """Thread-local read connections, closable from any thread."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._local = threading.local()
        self._lock = threading.Lock()
        self._connections: list[sqlite3.Connection] = []

    @contextmanager
    def get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get a thread-local connection."""
        conn = getattr(self._local, "connection", None)
        if conn is None:
            conn = self._create_connection()
            self._local.connection = conn
        yield conn

    def _create_connection(self) -> sqlite3.Connection:
        # Fail instead of silently creating an empty database
        uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
        conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
        apply_read_pragmas(conn)
        with self._lock:
            self._connections.append(conn)
        return conn

    def close_all(self) -> None:
        with self._lock:
            connections, self._connections = self._connections, []
        for conn in connections:
            try:
                conn.close()
            except sqlite3.Error as exc:
                logger.warning("Failed to close SQLite connection for %s: %s", self.db_path, exc)
        self._local = threading.local()


class SqliteCrawlStore(AbstractTokenIndex, AbstractDocumentStore, AbstractCorpusCounter):
    """Token index, document store and corpus counter over one SQLite file."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self._pool = SQLiteConnectionPool(self.db_path)

    async def lookup_terms(self, terms: Sequence[str]) -> list[TermMatch]:
        distinct = list(dict.fromkeys(terms))
        if not distinct:
            return []
        return await self._run("lookup_terms", self._lookup_terms_sync, distinct)

    async def bulk_get(self, ids: Sequence[DocumentId]) -> list[Document]:
        distinct = list(dict.fromkeys(ids))
        if not distinct:
            return []
        return await self._run("bulk_get", self._bulk_get_sync, distinct)

    async def text_query(self, term: str, limit: int) -> list[PhraseHit]:
        fts_query = build_fts_query(term)
        if not fts_query or limit <= 0:
            return []
        return await self._run("text_query", self._text_query_sync, fts_query, limit)

    async def count(self) -> int:
        return await self._run("count", self._count_sync)

    def close(self) -> None:
        self._pool.close_all()

    async def _run(self, operation: str, func: Callable[..., _T], *args: Any) -> _T:
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.Error as exc:
            logger.error("SQLite %s failed on %s: %s", operation, self.db_path, exc)
            raise SearchBackendUnavailableError(operation) from exc

    def _lookup_terms_sync(self, terms: list[str]) -> list[TermMatch]:
        placeholders = ", ".join("?" for _ in terms)
        query = f"SELECT page, term, weight FROM tokens WHERE term IN ({placeholders})"
        with self._pool.get_connection() as conn:
            rows = conn.execute(query, terms).fetchall()
        return [TermMatch(page=page, term=term, weight=weight) for page, term, weight in rows]

    def _bulk_get_sync(self, ids: list[DocumentId]) -> list[Document]:
        placeholders = ", ".join("?" for _ in ids)
        query = f"SELECT {', '.join(_PAGE_COLUMNS)} FROM pages WHERE id IN ({placeholders})"
        with self._pool.get_connection() as conn:
            return [_row_to_document(row) for row in conn.execute(query, ids)]

    def _text_query_sync(self, fts_query: str, limit: int) -> list[PhraseHit]:
        # bm25() is lower-is-better; negate it so higher relevance sorts first
        query = (
            "SELECT phrase, -bm25(phrases) AS relevance FROM phrases "
            "WHERE phrases MATCH ? ORDER BY relevance DESC LIMIT ?"
        )
        with self._pool.get_connection() as conn:
            rows = conn.execute(query, (fts_query, limit)).fetchall()
        return [PhraseHit(phrase=phrase, relevance=relevance) for phrase, relevance in rows]

    def _count_sync(self) -> int:
        with self._pool.get_connection() as conn:
            row = conn.execute("SELECT COUNT(*) FROM pages").fetchone()
        return int(row[0]) if row else 0
