"""Domain layer: value objects and errors shared across the search core."""

from crawl_search.domain.errors import CrawlSearchError, SearchBackendUnavailableError
from crawl_search.domain.search import Document, DocumentId, Link, PhraseHit, TermMatch


__all__ = [
    "CrawlSearchError",
    "Document",
    "DocumentId",
    "Link",
    "PhraseHit",
    "SearchBackendUnavailableError",
    "TermMatch",
]
