"""Relevance ranking over precomputed token-index rows."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import math

from crawl_search.domain.search import DocumentId, TermMatch


DEFAULT_RESULT_LIMIT = 50


@dataclass(frozen=True)
class Candidate:
    """A scored match row produced by the ranking engine."""

    id: DocumentId
    score: float


def query_idf(total: int, match_count: int) -> float:
    """Single inverse document frequency factor shared by the whole query.

    Callers must ensure ``total`` is positive.
    """
    return 1.0 + math.log(total / (1 + match_count))


class RankingEngine:
    """Score match rows against a query term list and keep the best ``limit``.

    Rows are scored one by one and never merged per document, so a page with
    several strong rows can appear more than once in the output. Hydration
    collapses those repeats.
    """

    def __init__(self, *, limit: int = DEFAULT_RESULT_LIMIT) -> None:
        self.limit = limit

    def score(self, terms: Sequence[str], matches: Sequence[TermMatch], total: int) -> list[Candidate]:
        """Return the top candidates, best first, ties in retrieval order."""

        if total <= 0:
            return []

        idf = query_idf(total, len(matches))
        candidates = [
            Candidate(id=match.page, score=sum(match.weight for term in terms if term == match.term) * idf)
            for match in matches
        ]
        # sorted() is stable, also with reverse=True
        candidates = sorted(candidates, key=lambda candidate: candidate.score, reverse=True)
        return candidates[: self.limit]

    def rank(self, terms: Sequence[str], matches: Sequence[TermMatch], total: int) -> list[DocumentId]:
        return [candidate.id for candidate in self.score(terms, matches, total)]
