"""
Document Aggregator - Collapse chunk matches into ranked parent documents.

Used when the consumer wants whole documents rather than chunks. Documents
are ordered by their best (first-seen) chunk, not by an aggregate score.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ragrank.config.errors import RetrievalError, SearchError

from .models import Candidate

if TYPE_CHECKING:
    from .contracts import EmbeddingProvider, VectorIndex

logger = logging.getLogger(__name__)

__all__ = ["DocumentAggregator", "distinct_parent_ids"]


def distinct_parent_ids(candidates: Iterable[Candidate], limit: int) -> list[str]:
    """
    First-occurrence parent ids from a ranked chunk stream.

    Example:
        parents [A, B, A, C, A, D] with limit 3 -> [A, B, C]
    """
    seen: set[str] = set()
    document_ids: list[str] = []
    for candidate in candidates:
        if candidate.parent_document_id in seen:
            continue
        seen.add(candidate.parent_document_id)
        document_ids.append(candidate.parent_document_id)
        if len(document_ids) >= limit:
            break
    return document_ids


class DocumentAggregator:
    """Finds the most relevant parent documents for a query."""

    def __init__(
        self,
        embedder: EmbeddingProvider,
        vector_index: VectorIndex,
        over_fetch: int = 5,
        similarity_threshold: float = 0.5,
    ) -> None:
        """
        Initialize aggregator.

        Args:
            embedder: Query embedding provider
            vector_index: Chunk-level vector index
            over_fetch: Chunks fetched per desired document
            similarity_threshold: Minimum chunk cosine similarity
        """
        self._embedder = embedder
        self._vector = vector_index
        self.over_fetch = over_fetch
        self.similarity_threshold = similarity_threshold

    async def find_relevant_documents(
        self,
        query: str,
        tenant_id: str,
        desired_document_count: int = 3,
    ) -> list[str]:
        """
        Rank parent documents by their best matching chunk.

        Raises:
            SearchError: If desired_document_count < 1
            RetrievalError: If embedding or vector search fails
        """
        if desired_document_count < 1:
            raise SearchError(
                "desired_document_count must be >= 1",
                details={"desired_document_count": desired_document_count},
            )

        chunk_limit = desired_document_count * self.over_fetch

        try:
            embedding = await self._embedder.embed(query)
            chunks = await self._vector.match_chunks(
                query_embedding=embedding,
                similarity_threshold=self.similarity_threshold,
                max_results=chunk_limit,
                tenant_id=tenant_id,
            )
        except Exception as e:
            logger.error("Document discovery failed for tenant %s: %s", tenant_id, e)
            raise RetrievalError(
                "Document discovery failed",
                details={"tenant_id": tenant_id, "cause": str(e)},
            ) from e

        document_ids = distinct_parent_ids(chunks, desired_document_count)

        logger.info(
            "Found relevant documents: query='%s' chunks=%d documents=%d",
            query[:50],
            len(chunks),
            len(document_ids),
        )
        return document_ids
