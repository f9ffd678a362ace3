"""
Rank Fusion - Reciprocal Rank Fusion of vector and full-text candidates.

Each candidate at 1-based rank r in a source list contributes 1 / (k + r).
Candidates found by both indexes receive the sum of both contributions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .models import Candidate, FusedResult, ScoreScale

logger = logging.getLogger(__name__)

__all__ = ["RankFusionEngine", "rrf_contribution"]


def rrf_contribution(rank: int, k: int) -> float:
    """RRF score for a 1-based rank."""
    return 1.0 / (k + rank)


@dataclass
class _FusionEntry:
    candidate: Candidate
    order: int
    vector_rank: int | None = None
    text_rank: int | None = None
    vector_score: float = 0.0
    text_score: float = 0.0

    @property
    def combined(self) -> float:
        return self.vector_score + self.text_score


class RankFusionEngine:
    """
    Merges two ranked candidate lists into one ranking.

    Raw index scores are never compared across lists; only rank positions are.
    Equal fused scores keep first-seen order, vector list first.

    Example:
        >>> engine = RankFusionEngine(k=60)
        >>> fused = engine.fuse(vector_candidates, text_candidates)
    """

    def __init__(self, k: int = 60) -> None:
        """
        Args:
            k: RRF constant; larger values flatten differences between top ranks
        """
        if k < 1:
            raise ValueError("RRF constant k must be >= 1")
        self.k = k

    def fuse(
        self,
        vector_candidates: list[Candidate],
        text_candidates: list[Candidate],
        k: int | None = None,
    ) -> list[FusedResult]:
        """
        Fuse both lists.

        Args:
            vector_candidates: Vector index rows, best first
            text_candidates: Full-text index rows, best first
            k: Optional per-call override of the RRF constant

        Returns:
            Fused results, descending by fused score, ranked 1..N
        """
        rrf_k = k or self.k
        entries: dict[str, _FusionEntry] = {}

        for rank, candidate in enumerate(vector_candidates, 1):
            if candidate.id in entries:
                # Duplicate row from the index; keep the better rank
                continue
            entries[candidate.id] = _FusionEntry(
                candidate=candidate,
                order=len(entries),
                vector_rank=rank,
                vector_score=rrf_contribution(rank, rrf_k),
            )

        for rank, candidate in enumerate(text_candidates, 1):
            entry = entries.get(candidate.id)
            if entry is None:
                entry = _FusionEntry(candidate=candidate, order=len(entries))
                entries[candidate.id] = entry
            elif entry.text_rank is not None:
                continue
            entry.text_rank = rank
            entry.text_score = rrf_contribution(rank, rrf_k)

        ordered = sorted(entries.values(), key=lambda e: (-e.combined, e.order))

        fused = [
            self._to_result(entry, rank) for rank, entry in enumerate(ordered, 1)
        ]

        logger.debug(
            "RRF fusion: vector=%d text=%d -> fused=%d (k=%d)",
            len(vector_candidates),
            len(text_candidates),
            len(fused),
            rrf_k,
        )
        return fused

    @staticmethod
    def _to_result(entry: _FusionEntry, rank: int) -> FusedResult:
        candidate = entry.candidate
        # Text-only matches have no cosine similarity; carry the (zero) vector contribution
        similarity = candidate.score if entry.vector_rank is not None else entry.vector_score
        return FusedResult(
            id=candidate.id,
            parent_document_id=candidate.parent_document_id,
            content=candidate.content,
            metadata=candidate.metadata,
            similarity_score=similarity,
            fusion_score=entry.combined,
            relevance_score=entry.combined,
            score_scale=ScoreScale.RRF,
            vector_rank=entry.vector_rank,
            text_rank=entry.text_rank,
            positional_index=candidate.positional_index,
            page_number=candidate.page_number,
            rank=rank,
        )
