"""
Search Domain - Hybrid retrieval and ranking.

This domain handles:
- Concurrent vector + full-text candidate retrieval
- Reciprocal Rank Fusion
- Confidence-gated cross-encoder reranking
- Parent document enrichment
- Whole-document discovery
"""

from .aggregator import DocumentAggregator, distinct_parent_ids
from .contracts import (
    DocumentMetadataStore,
    EmbeddingProvider,
    FullTextIndex,
    RerankingService,
    VectorIndex,
)
from .dispatcher import CandidateDispatcher
from .enrichment import ResultEnricher
from .fusion import RankFusionEngine
from .hybrid_search import HybridSearchEngine
from .models import (
    Candidate,
    EngineConfig,
    EnrichedResult,
    FusedResult,
    RerankDecision,
    RerankDocument,
    RerankOutcome,
    RerankScore,
    ScoreScale,
    SearchOptions,
)
from .reranker import AdaptiveReranker

__all__ = [
    # Contracts
    "EmbeddingProvider",
    "VectorIndex",
    "FullTextIndex",
    "RerankingService",
    "DocumentMetadataStore",
    # Models
    "Candidate",
    "FusedResult",
    "EnrichedResult",
    "ScoreScale",
    "SearchOptions",
    "EngineConfig",
    "RerankDocument",
    "RerankScore",
    "RerankDecision",
    "RerankOutcome",
    # Implementations
    "CandidateDispatcher",
    "RankFusionEngine",
    "AdaptiveReranker",
    "ResultEnricher",
    "DocumentAggregator",
    "distinct_parent_ids",
    "HybridSearchEngine",
]
