"""
Search Models - Data types for search domain.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ScoreScale(str, Enum):
    """Which stage last wrote a result's relevance score."""

    RRF = "rrf"  # Reciprocal rank fusion, ~0.003-0.03
    COSINE = "cosine"  # Vector similarity, 0-1
    RERANKER = "reranker"  # Cross-encoder relevance, 0-1
    ORDINAL = "ordinal"  # Synthetic 1/(index+1)


class Candidate(BaseModel):
    """Chunk row returned by either index. Score meaning is index-specific."""

    id: str
    parent_document_id: str
    content: str
    positional_index: int = 0
    page_number: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    score: float = 0.0

    model_config = {"frozen": True}


class FusedResult(BaseModel):
    """Candidate after rank fusion (and possibly reranking)."""

    id: str
    parent_document_id: str
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    similarity_score: float = 0.0
    fusion_score: float = 0.0
    relevance_score: float = 0.0
    score_scale: ScoreScale = ScoreScale.RRF
    vector_rank: int | None = None
    text_rank: int | None = None
    positional_index: int = 0
    page_number: int | None = None
    rank: int = 0

    model_config = {"frozen": True}


class EnrichedResult(FusedResult):
    """Fused result joined with its parent document's display name."""

    source_name: str | None = None


class SearchOptions(BaseModel):
    """Per-call search tuning."""

    top_k: int = Field(default=5, ge=1)
    min_relevance_score: float = Field(default=0.0, ge=0.0, le=1.0)
    rerank_pool_size: int = Field(default=20, ge=1)
    use_reranking: bool = True
    vector_threshold: float = 0.0
    text_threshold: float = 0.0
    rrf_k: int | None = Field(default=None, ge=1)

    model_config = {"frozen": True}


class EngineConfig(BaseModel):
    """Engine-wide tuning constants, fixed at construction."""

    rrf_k: int = Field(default=60, ge=1)
    rerank_skip_similarity: float = 0.85
    rerank_skip_max_pool: int = Field(default=5, ge=0)
    candidate_multiplier: int = Field(default=2, ge=1)
    document_over_fetch: int = Field(default=5, ge=1)
    document_similarity_threshold: float = 0.5

    model_config = {"frozen": True}


class RerankDocument(BaseModel):
    """Document sent to the reranking service."""

    id: str
    text: str


class RerankScore(BaseModel):
    """Relevance score for the document at ``index`` in the request."""

    index: int = Field(..., ge=0)
    relevance_score: float


class RerankDecision(str, Enum):
    """Which branch the adaptive reranker took."""

    RERANKED = "reranked"
    SKIPPED_CONFIDENT = "skipped_confident"
    FALLBACK_ORDINAL = "fallback_ordinal"
    FUSION_ONLY = "fusion_only"


class RerankOutcome(BaseModel):
    """Filtered, ordered results plus the branch that produced them."""

    decision: RerankDecision
    results: list[FusedResult]
