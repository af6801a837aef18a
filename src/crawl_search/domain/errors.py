"""Exceptions raised by the search core."""

from __future__ import annotations


class CrawlSearchError(Exception):
    """Base class for crawl-search failures."""


class SearchBackendUnavailableError(CrawlSearchError):
    """The token index or document store could not answer.

    The message stays generic so store details never reach end users; the
    underlying error is chained as ``__cause__``.
    """

    def __init__(self, operation: str) -> None:
        super().__init__("search backend unavailable")
        self.operation = operation
