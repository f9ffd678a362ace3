"""
Hybrid Search Engine - Vector + full-text retrieval with adaptive reranking.

Pipeline:
- Concurrent fan-out to the vector and full-text indexes
- Reciprocal Rank Fusion (RRF)
- Confidence-gated cross-encoder reranking
- Batch enrichment with parent document names

Every stage returns a new list; nothing is mutated between stages.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ragrank.config.errors import RetrievalError, SearchError

from .aggregator import DocumentAggregator
from .dispatcher import CandidateDispatcher
from .enrichment import ResultEnricher
from .fusion import RankFusionEngine
from .models import EngineConfig, EnrichedResult, FusedResult, ScoreScale, SearchOptions
from .reranker import AdaptiveReranker

if TYPE_CHECKING:
    from .contracts import (
        DocumentMetadataStore,
        EmbeddingProvider,
        FullTextIndex,
        RerankingService,
        VectorIndex,
    )

logger = logging.getLogger(__name__)

__all__ = ["HybridSearchEngine"]


class HybridSearchEngine:
    """
    Hybrid search combining vector and keyword approaches.

    All collaborators are injected; the engine holds no per-query state.

    Example:
        >>> engine = HybridSearchEngine(embedder, faiss_index, sqlite_repo, sqlite_repo)
        >>> results = await engine.search("refund policy", "acme", SearchOptions(top_k=3))
        >>> doc_ids = await engine.find_relevant_documents("refund policy", "acme", 3)
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        vector_index: VectorIndex,
        text_index: FullTextIndex,
        document_store: DocumentMetadataStore,
        reranking_service: RerankingService | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        """
        Initialize hybrid search engine.

        Args:
            embedder: Query embedding provider
            vector_index: Tenant-scoped vector index
            text_index: Tenant-scoped full-text index
            document_store: Parent document metadata lookup
            reranking_service: Cross-encoder reranker (None disables reranking)
            config: Tuning constants (RRF k, rerank skip thresholds, over-fetch)
        """
        self.config = config or EngineConfig()
        self._embedder = embedder
        self._vector = vector_index

        self._dispatcher = CandidateDispatcher(embedder, vector_index, text_index)
        self._fusion = RankFusionEngine(k=self.config.rrf_k)
        self._reranker = AdaptiveReranker(
            reranking_service,
            skip_similarity=self.config.rerank_skip_similarity,
            skip_max_pool=self.config.rerank_skip_max_pool,
        )
        self._enricher = ResultEnricher(document_store)
        self._aggregator = DocumentAggregator(
            embedder,
            vector_index,
            over_fetch=self.config.document_over_fetch,
            similarity_threshold=self.config.document_similarity_threshold,
        )

    async def search(
        self,
        query: str,
        tenant_id: str,
        options: SearchOptions | None = None,
    ) -> list[EnrichedResult]:
        """
        Execute hybrid search.

        Args:
            query: Natural-language query
            tenant_id: Tenant scope
            options: Per-call tuning (defaults to SearchOptions())

        Returns:
            At most ``options.top_k`` enriched results, best first

        Raises:
            SearchError: If query or tenant_id is empty
            RetrievalError: If the embedding provider or vector index fails
        """
        self._validate(query, tenant_id)
        options = options or SearchOptions()

        logger.info(
            "Hybrid search: query='%s' tenant=%s top_k=%d pool=%d rerank=%s",
            query[:50],
            tenant_id,
            options.top_k,
            options.rerank_pool_size,
            options.use_reranking and self._reranker.available,
        )

        candidate_limit = options.rerank_pool_size * self.config.candidate_multiplier
        vector_candidates, text_candidates = await self._dispatcher.dispatch(
            query,
            tenant_id,
            candidate_limit,
            vector_threshold=options.vector_threshold,
            text_threshold=options.text_threshold,
        )

        fused = self._fusion.fuse(vector_candidates, text_candidates, k=options.rrf_k)

        outcome = await self._reranker.rerank(
            query,
            fused,
            top_k=options.top_k,
            min_relevance_score=options.min_relevance_score,
            pool_size=options.rerank_pool_size,
            use_reranking=options.use_reranking,
        )

        results = await self._enricher.enrich(outcome.results)

        logger.info(
            "Hybrid search complete: query='%s' fused=%d results=%d decision=%s",
            query[:50],
            len(fused),
            len(results),
            outcome.decision.value,
        )
        return results

    async def find_relevant_documents(
        self,
        query: str,
        tenant_id: str,
        desired_document_count: int = 3,
    ) -> list[str]:
        """
        Find whole parent documents for long-context consumers.

        Returns:
            Distinct document ids ordered by their best chunk's rank
        """
        self._validate(query, tenant_id)
        return await self._aggregator.find_relevant_documents(
            query, tenant_id, desired_document_count
        )

    async def search_in_document(
        self,
        query: str,
        document_id: str,
        tenant_id: str,
        top_k: int = 5,
        vector_threshold: float = 0.3,
    ) -> list[EnrichedResult]:
        """
        Vector search restricted to chunks of one parent document.

        Results carry cosine similarity as their relevance score.
        """
        self._validate(query, tenant_id)
        if top_k < 1:
            raise SearchError("top_k must be >= 1", details={"top_k": top_k})

        try:
            embedding = await self._embedder.embed(query)
            candidates = await self._vector.match_chunks(
                query_embedding=embedding,
                similarity_threshold=vector_threshold,
                max_results=top_k * self.config.candidate_multiplier,
                tenant_id=tenant_id,
            )
        except Exception as e:
            logger.error("Document search failed for %s: %s", document_id, e)
            raise RetrievalError(
                "Document search failed",
                details={"document_id": document_id, "cause": str(e)},
            ) from e

        in_document = [c for c in candidates if c.parent_document_id == document_id]
        results = [
            FusedResult(
                id=c.id,
                parent_document_id=c.parent_document_id,
                content=c.content,
                metadata=c.metadata,
                similarity_score=c.score,
                relevance_score=c.score,
                score_scale=ScoreScale.COSINE,
                vector_rank=rank,
                positional_index=c.positional_index,
                page_number=c.page_number,
                rank=rank,
            )
            for rank, c in enumerate(in_document[:top_k], 1)
        ]
        return await self._enricher.enrich(results)

    @staticmethod
    def _validate(query: str, tenant_id: str) -> None:
        if not query or not query.strip():
            raise SearchError("Query must not be empty")
        if not tenant_id:
            raise SearchError("Tenant id is required")
