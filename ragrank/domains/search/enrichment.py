"""
Result Enrichment - Attach parent-document display names to results.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .models import EnrichedResult, FusedResult

if TYPE_CHECKING:
    from .contracts import DocumentMetadataStore

logger = logging.getLogger(__name__)

__all__ = ["ResultEnricher"]


class ResultEnricher:
    """
    Joins results with document metadata using one batch lookup.

    Never changes result count or order: results whose parent document is
    missing get ``source_name=None``.
    """

    def __init__(self, store: DocumentMetadataStore) -> None:
        self._store = store

    async def enrich(self, results: list[FusedResult]) -> list[EnrichedResult]:
        """Enrich results with their parent document names."""
        if not results:
            return []

        document_ids = list(dict.fromkeys(r.parent_document_id for r in results))

        try:
            names = await self._store.get_document_names(document_ids)
        except Exception as e:
            logger.warning("Document metadata lookup failed, names omitted: %s", e)
            names = {}

        missing = len(set(document_ids) - names.keys())
        if missing:
            logger.debug("%d parent documents missing during enrichment", missing)

        return [
            EnrichedResult(**r.model_dump(), source_name=names.get(r.parent_document_id))
            for r in results
        ]
