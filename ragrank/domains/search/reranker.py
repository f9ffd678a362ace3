"""
Adaptive Reranker - Conditionally re-scores the fused candidate pool.

Branches:
- reranked: pool sent to the cross-encoder, scores on a 0-1 relevance scale
- skipped_confident: confident top hit with a small pool, cosine scores used
- fallback_ordinal: service call failed, pool order kept with 1/(index+1) scores
- fusion_only: reranking off or unavailable, RRF scores with a capped floor
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .models import (
    FusedResult,
    RerankDecision,
    RerankDocument,
    RerankOutcome,
    ScoreScale,
)

if TYPE_CHECKING:
    from .contracts import RerankingService

logger = logging.getLogger(__name__)

__all__ = ["AdaptiveReranker", "RRF_SCORE_FLOOR"]

# RRF scores sit around 0.003-0.03, so a 0-1 threshold is capped here
RRF_SCORE_FLOOR = 0.01


class AdaptiveReranker:
    """
    Decides whether the expensive reranking pass is worth paying for.

    Reranking runs when ``top_similarity < skip_similarity`` or the pool holds
    more than ``skip_max_pool`` candidates.

    Example:
        >>> reranker = AdaptiveReranker(cohere_service)
        >>> outcome = await reranker.rerank("refund policy", fused, top_k=5)
        >>> outcome.decision
        <RerankDecision.RERANKED: 'reranked'>
    """

    def __init__(
        self,
        service: RerankingService | None = None,
        skip_similarity: float = 0.85,
        skip_max_pool: int = 5,
    ) -> None:
        """
        Initialize reranker.

        Args:
            service: Cross-encoder reranking service (None disables reranking)
            skip_similarity: Top cosine similarity at or above which reranking may be skipped
            skip_max_pool: Largest pool for which reranking may be skipped
        """
        self._service = service
        self.skip_similarity = skip_similarity
        self.skip_max_pool = skip_max_pool

    @property
    def available(self) -> bool:
        """Whether a reranking service is configured and enabled."""
        return self._service is not None and self._service.is_enabled()

    def needs_reranking(self, pool: list[FusedResult]) -> bool:
        """Confidence heuristic over the rerank pool."""
        top_similarity = pool[0].similarity_score if pool else 0.0
        return top_similarity < self.skip_similarity or len(pool) > self.skip_max_pool

    async def rerank(
        self,
        query: str,
        fused: list[FusedResult],
        top_k: int,
        min_relevance_score: float = 0.0,
        pool_size: int = 20,
        use_reranking: bool = True,
    ) -> RerankOutcome:
        """
        Select, score, filter and truncate the rerank pool.

        Args:
            query: Original query text
            fused: Fused results, best first
            top_k: Maximum results to return
            min_relevance_score: Caller threshold on a 0-1 scale
            pool_size: Number of fused results eligible for reranking
            use_reranking: Caller opt-out for the reranking pass

        Returns:
            RerankOutcome with the branch taken and the final results
        """
        pool = fused[:pool_size]
        service = self._service

        if not pool or not use_reranking or service is None or not service.is_enabled():
            return self._fusion_only(pool, top_k, min_relevance_score)

        if not self.needs_reranking(pool):
            logger.info(
                "Skipping reranking (high confidence): top_similarity=%.3f pool=%d",
                pool[0].similarity_score,
                len(pool),
            )
            results = [
                r.model_copy(
                    update={
                        "relevance_score": r.similarity_score,
                        "score_scale": ScoreScale.COSINE,
                    }
                )
                for r in pool
            ]
            return RerankOutcome(
                decision=RerankDecision.SKIPPED_CONFIDENT,
                results=self._filter(results, min_relevance_score, top_k),
            )

        return await self._rerank_pool(service, query, pool, top_k, min_relevance_score)

    async def _rerank_pool(
        self,
        service: RerankingService,
        query: str,
        pool: list[FusedResult],
        top_k: int,
        min_relevance_score: float,
    ) -> RerankOutcome:
        """Send the pool to the reranking service, falling back on failure."""
        logger.info(
            "Applying reranking: pool=%d top_k=%d top_similarity=%.3f",
            len(pool),
            top_k,
            pool[0].similarity_score,
        )
        documents = [RerankDocument(id=r.id, text=r.content) for r in pool]

        try:
            scores = await service.rerank(query, documents, top_n=top_k)
        except Exception as e:
            logger.warning("Reranking failed, keeping fused order: %s", e)
            return self._ordinal_fallback(pool, top_k, min_relevance_score)

        results: list[FusedResult] = []
        seen: set[int] = set()
        for score in scores:
            # Scores are keyed by pool position, not by id or response order
            if score.index >= len(pool) or score.index in seen:
                logger.warning("Ignoring rerank score for unknown index %d", score.index)
                continue
            seen.add(score.index)
            results.append(
                pool[score.index].model_copy(
                    update={
                        "relevance_score": score.relevance_score,
                        "score_scale": ScoreScale.RERANKER,
                    }
                )
            )
        results.sort(key=lambda r: r.relevance_score, reverse=True)

        filtered = self._filter(results, min_relevance_score, top_k)
        logger.info(
            "Reranking complete: scored=%d kept=%d (min_relevance=%.2f)",
            len(results),
            len(filtered),
            min_relevance_score,
        )
        return RerankOutcome(decision=RerankDecision.RERANKED, results=filtered)

    def _ordinal_fallback(
        self,
        pool: list[FusedResult],
        top_k: int,
        min_relevance_score: float,
    ) -> RerankOutcome:
        results = [
            r.model_copy(
                update={
                    "relevance_score": 1.0 / (index + 1),
                    "score_scale": ScoreScale.ORDINAL,
                }
            )
            for index, r in enumerate(pool)
        ]
        return RerankOutcome(
            decision=RerankDecision.FALLBACK_ORDINAL,
            results=self._filter(results, min_relevance_score, top_k),
        )

    def _fusion_only(
        self,
        pool: list[FusedResult],
        top_k: int,
        min_relevance_score: float,
    ) -> RerankOutcome:
        floor = min(RRF_SCORE_FLOOR, min_relevance_score)
        results = self._filter(pool, floor, top_k)
        logger.info("No reranking, using RRF scores: kept=%d floor=%.4f", len(results), floor)
        return RerankOutcome(decision=RerankDecision.FUSION_ONLY, results=results)

    @staticmethod
    def _filter(
        results: list[FusedResult],
        threshold: float,
        top_k: int,
    ) -> list[FusedResult]:
        return [r for r in results if r.relevance_score >= threshold][:top_k]
