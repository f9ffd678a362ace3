"""
Candidate Dispatcher - Concurrent fan-out to the vector and full-text indexes.

Failure handling is asymmetric:
- Full-text failure is logged and replaced by an empty list
- Embedding or vector index failure is raised as RetrievalError
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ragrank.config.errors import RetrievalError

from .models import Candidate

if TYPE_CHECKING:
    from .contracts import EmbeddingProvider, FullTextIndex, VectorIndex

logger = logging.getLogger(__name__)

__all__ = ["CandidateDispatcher"]


class CandidateDispatcher:
    """
    Issues both index queries for one search.

    Example:
        >>> dispatcher = CandidateDispatcher(embedder, vector_index, text_index)
        >>> vector, text = await dispatcher.dispatch("refund policy", "acme", 40)
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        vector_index: VectorIndex,
        text_index: FullTextIndex,
    ) -> None:
        self._embedder = embedder
        self._vector = vector_index
        self._text = text_index

    async def dispatch(
        self,
        query: str,
        tenant_id: str,
        candidate_limit: int,
        vector_threshold: float = 0.0,
        text_threshold: float = 0.0,
    ) -> tuple[list[Candidate], list[Candidate]]:
        """
        Fetch candidates from both indexes.

        The full-text query starts immediately; the vector query starts once
        the query embedding resolves.

        Args:
            query: Query text
            tenant_id: Tenant scope applied to both indexes
            candidate_limit: Max rows requested from each index
            vector_threshold: Minimum cosine similarity
            text_threshold: Minimum lexical rank

        Returns:
            (vector_candidates, text_candidates)

        Raises:
            RetrievalError: If embedding or vector search fails
        """
        text_task = asyncio.create_task(
            self._text_search(query, tenant_id, candidate_limit, text_threshold)
        )

        try:
            vector_candidates = await self._vector_search(
                query, tenant_id, candidate_limit, vector_threshold
            )
        except Exception as e:
            text_task.cancel()
            logger.error("Vector retrieval failed for tenant %s: %s", tenant_id, e)
            raise RetrievalError(
                "Vector retrieval failed",
                details={"tenant_id": tenant_id, "cause": str(e)},
            ) from e

        text_candidates = await text_task

        logger.info(
            "Candidates retrieved: query='%s' vector=%d text=%d",
            query[:50],
            len(vector_candidates),
            len(text_candidates),
        )
        return vector_candidates, text_candidates

    async def _vector_search(
        self,
        query: str,
        tenant_id: str,
        limit: int,
        threshold: float,
    ) -> list[Candidate]:
        """Embed the query, then run the vector index query."""
        embedding = await self._embedder.embed(query)
        logger.debug("Query embedded: dimension=%d", len(embedding))
        return await self._vector.match_chunks(
            query_embedding=embedding,
            similarity_threshold=threshold,
            max_results=limit,
            tenant_id=tenant_id,
        )

    async def _text_search(
        self,
        query: str,
        tenant_id: str,
        limit: int,
        threshold: float,
    ) -> list[Candidate]:
        """Run the full-text query, degrading to no results on failure."""
        try:
            return await self._text.search_chunks(
                query_text=query,
                rank_threshold=threshold,
                max_results=limit,
                tenant_id=tenant_id,
            )
        except Exception as e:
            logger.warning("Full-text search failed, continuing with vector only: %s", e)
            return []
