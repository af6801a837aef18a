"""Domain models for crawl search.

Following Cosmic Python principles:
- Value Objects are immutable (frozen=True)
- No infrastructure dependencies

Documents mirror the page records written by the crawler; term matches are
the precomputed rows produced by the index builder.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


DocumentId = str


class TermMatch(BaseModel):
    """One precomputed (document, term) weight row from the token index."""

    model_config = ConfigDict(frozen=True)

    page: DocumentId
    term: str
    weight: float


class Link(BaseModel):
    """Outbound link discovered on a crawled page."""

    model_config = ConfigDict(frozen=True)

    source: str
    source_host: str
    host: str
    url: str


class Document(BaseModel):
    """A crawled page as stored by the crawler.

    Only ``id`` matters to search; the rest is carried through to callers.
    """

    model_config = ConfigDict(frozen=True)

    id: DocumentId
    url: str
    host: str
    status: int = 0
    type: Literal["html", "error", "other"] = "other"
    data: str = ""
    links: list[Link] = Field(default_factory=list)


class PhraseHit(BaseModel):
    """Full-text query result: an indexed phrase and the store's relevance."""

    model_config = ConfigDict(frozen=True)

    phrase: str
    relevance: float
