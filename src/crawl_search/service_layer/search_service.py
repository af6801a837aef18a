"""Search service orchestration layer.

Combines query normalization, ranking, hydration and suggestions behind the
two calls the HTTP layer uses: ``search`` and ``suggest``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
import logging
from typing import TypeVar

from crawl_search.adapters.repository import AbstractCorpusCounter, AbstractDocumentStore, AbstractTokenIndex
from crawl_search.config import Settings
from crawl_search.domain.errors import SearchBackendUnavailableError
from crawl_search.domain.search import Document
from crawl_search.observability.metrics import BACKEND_ERRORS, SEARCH_LATENCY, SEARCH_REQUESTS, track_latency
from crawl_search.observability.tracing import create_span
from crawl_search.search.analyzers import TextNormalizer
from crawl_search.search.hydration import ResultHydrator
from crawl_search.search.ranking import DEFAULT_RESULT_LIMIT, RankingEngine
from crawl_search.search.suggestions import DEFAULT_SUGGESTION_LIMIT, SuggestionEngine


logger = logging.getLogger(__name__)

_T = TypeVar("_T")

DEFAULT_TIMEOUT_SECONDS = 10.0


class SearchService:
    """High-level search orchestration service.

    Holds no per-request state, so one instance can serve concurrent calls.
    Every store round trip runs under the call's deadline; a missed deadline
    or store failure surfaces as ``SearchBackendUnavailableError``.
    """

    def __init__(
        self,
        token_index: AbstractTokenIndex,
        document_store: AbstractDocumentStore,
        corpus_counter: AbstractCorpusCounter,
        *,
        normalizer: TextNormalizer | None = None,
        ranking_engine: RankingEngine | None = None,
        suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize search service with dependencies.

        Args:
            token_index: Source of precomputed term-weight rows
            document_store: Page records and the phrase index
            corpus_counter: Reports corpus size for IDF scoring
            normalizer: Query normalizer, defaults to the standard pipeline
            ranking_engine: Ranking engine, defaults to a 50-row limit
            suggestion_limit: Phrases fetched per suggestion query
            timeout: Default per-call deadline in seconds
        """
        self.token_index = token_index
        self.corpus_counter = corpus_counter
        self.normalizer = normalizer or TextNormalizer()
        self.ranking_engine = ranking_engine or RankingEngine(limit=DEFAULT_RESULT_LIMIT)
        self.hydrator = ResultHydrator(document_store)
        self.suggestion_engine = SuggestionEngine(document_store, limit=suggestion_limit)
        self.timeout = timeout

    @classmethod
    def from_settings(cls, store: AbstractTokenIndex, settings: Settings) -> SearchService:
        """Build a service over a store that implements all three ports."""
        if not isinstance(store, AbstractDocumentStore) or not isinstance(store, AbstractCorpusCounter):
            raise TypeError("store must implement the token index, document store and corpus counter ports")
        return cls(
            store,
            store,
            store,
            normalizer=TextNormalizer(trigram_threshold=settings.trigram_threshold),
            ranking_engine=RankingEngine(limit=settings.search_result_limit),
            suggestion_limit=settings.suggestion_limit,
            timeout=settings.backend_timeout_seconds,
        )

    async def search(self, term: str, *, timeout: float | None = None) -> list[Document]:
        """Return documents for ``term`` in descending relevance.

        Empty or stopword-only queries and queries with no matches yield an
        empty list.
        """
        with create_span("search.query", attributes={"search.term_length": len(term)}) as span:
            with track_latency(SEARCH_LATENCY, operation="search"):
                documents = await self._guarded("search", self._search(term), timeout)
            span.set_attribute("search.result_count", len(documents))
        return documents

    async def suggest(self, term: str, *, timeout: float | None = None) -> list[str]:
        """Return distinct cleaned phrases related to ``term``."""
        with create_span("search.suggest", attributes={"search.term_length": len(term)}) as span:
            with track_latency(SEARCH_LATENCY, operation="suggest"):
                phrases = await self._guarded("suggest", self.suggestion_engine.suggest(term), timeout)
            span.set_attribute("search.result_count", len(phrases))
        return phrases

    async def _search(self, term: str) -> list[Document]:
        terms = self.normalizer.normalize(term)
        if not terms:
            logger.debug("Query normalized to no terms; returning empty result")
            return []

        matches, total = await asyncio.gather(
            self.token_index.lookup_terms(terms),
            self.corpus_counter.count(),
        )
        candidates = self.ranking_engine.score(terms, matches, total)
        logger.debug(
            "Ranked %d candidates from %d match rows (%d terms, corpus=%d)",
            len(candidates),
            len(matches),
            len(terms),
            total,
        )
        return await self.hydrator.hydrate([candidate.id for candidate in candidates])

    async def _guarded(self, operation: str, call: Awaitable[_T], timeout: float | None) -> _T:
        deadline = self.timeout if timeout is None else timeout
        try:
            result = await asyncio.wait_for(call, timeout=deadline)
        except asyncio.TimeoutError as exc:
            logger.warning("%s exceeded its %.3fs deadline", operation, deadline)
            SEARCH_REQUESTS.labels(operation=operation, status="error").inc()
            BACKEND_ERRORS.labels(operation=operation).inc()
            raise SearchBackendUnavailableError(operation) from exc
        except SearchBackendUnavailableError:
            SEARCH_REQUESTS.labels(operation=operation, status="error").inc()
            BACKEND_ERRORS.labels(operation=operation).inc()
            raise
        SEARCH_REQUESTS.labels(operation=operation, status="ok").inc()
        return result
