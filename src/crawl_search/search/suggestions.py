"""Query suggestions from the phrase index."""

from __future__ import annotations

from collections.abc import Iterable

from crawl_search.adapters.repository import AbstractDocumentStore


DEFAULT_SUGGESTION_LIMIT = 50


def collapse_repeated_words(phrase: str) -> str:
    """Drop repeated words, keeping each at its first position."""
    return " ".join(dict.fromkeys(phrase.split()))


def unique_phrases(phrases: Iterable[str]) -> list[str]:
    """Clean each phrase and keep the first copy of every distinct result."""
    cleaned = (collapse_repeated_words(phrase) for phrase in phrases)
    return [phrase for phrase in dict.fromkeys(cleaned) if phrase]


class SuggestionEngine:
    """Suggest phrases for a partial query using the store's full-text relevance."""

    def __init__(self, document_store: AbstractDocumentStore, *, limit: int = DEFAULT_SUGGESTION_LIMIT) -> None:
        self.document_store = document_store
        self.limit = limit

    async def suggest(self, term: str) -> list[str]:
        if not term.strip():
            return []
        hits = await self.document_store.text_query(term, self.limit)
        return unique_phrases(hit.phrase for hit in hits)
