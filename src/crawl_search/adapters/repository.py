"""Repository abstractions for the stores the search core reads from.

Defines the search infrastructure layer following the Repository Pattern.
The core only reads through these ports; it never writes the index.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from crawl_search.domain.search import Document, DocumentId, PhraseHit, TermMatch


class AbstractTokenIndex(ABC):
    """Precomputed (document, term, weight) rows."""

    @abstractmethod
    async def lookup_terms(self, terms: Sequence[str]) -> list[TermMatch]:
        """Return every stored row whose term is one of ``terms``.

        No ordering is promised.
        """
        raise NotImplementedError


class AbstractDocumentStore(ABC):
    """Crawled page records plus their full-text phrase index."""

    @abstractmethod
    async def bulk_get(self, ids: Sequence[DocumentId]) -> list[Document]:
        """Fetch documents for ``ids`` in a single round trip.

        Missing ids are left out and the result order is unspecified.
        """
        raise NotImplementedError

    @abstractmethod
    async def text_query(self, term: str, limit: int) -> list[PhraseHit]:
        """Return up to ``limit`` phrases matching ``term``, most relevant first."""
        raise NotImplementedError


class AbstractCorpusCounter(ABC):
    """Reports corpus size for IDF scoring."""

    @abstractmethod
    async def count(self) -> int:
        raise NotImplementedError
