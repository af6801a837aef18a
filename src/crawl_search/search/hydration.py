"""Resolve ranked document ids into full page records."""

from __future__ import annotations

from collections.abc import Sequence
import logging

from crawl_search.adapters.repository import AbstractDocumentStore
from crawl_search.domain.search import Document, DocumentId


logger = logging.getLogger(__name__)


class ResultHydrator:
    """Turn an ordered id list into ordered documents with one batch lookup.

    The output follows the input order, keeps each id only at its first
    occurrence and drops ids the store no longer has (pages deleted after
    indexing).
    """

    def __init__(self, document_store: AbstractDocumentStore) -> None:
        self.document_store = document_store

    async def hydrate(self, ids: Sequence[DocumentId]) -> list[Document]:
        # dict.fromkeys keeps first-occurrence order
        distinct_ids = list(dict.fromkeys(ids))
        if not distinct_ids:
            return []

        fetched = await self.document_store.bulk_get(distinct_ids)
        # Lookup only; iteration order of this map is never used
        by_id: dict[DocumentId, Document] = {document.id: document for document in fetched}

        documents = [by_id[doc_id] for doc_id in distinct_ids if doc_id in by_id]
        missing = len(distinct_ids) - len(documents)
        if missing:
            logger.debug("Hydration skipped %d ids missing from the document store", missing)
        return documents
