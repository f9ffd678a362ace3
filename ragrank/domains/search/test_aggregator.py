"""
Tests for document aggregation and result enrichment.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from ragrank.config.errors import RetrievalError, SearchError

from .aggregator import DocumentAggregator, distinct_parent_ids
from .enrichment import ResultEnricher
from .models import Candidate, FusedResult


def chunks_for(parents: list[str]) -> list[Candidate]:
    return [
        Candidate(id=f"chunk-{i}", parent_document_id=parent, content=f"Chunk {i}", score=0.9 - i * 0.05)
        for i, parent in enumerate(parents)
    ]


def fused_for(parents: list[str]) -> list[FusedResult]:
    return [
        FusedResult(id=f"chunk-{i}", parent_document_id=parent, content=f"Chunk {i}", rank=i + 1)
        for i, parent in enumerate(parents)
    ]


# --- distinct_parent_ids Tests ---


def test_first_occurrence_order_capped() -> None:
    """Test [A, B, A, C, A, D] with 3 desired documents gives [A, B, C]."""
    chunks = chunks_for(["A", "B", "A", "C", "A", "D"])
    assert distinct_parent_ids(chunks, 3) == ["A", "B", "C"]


def test_exhausted_stream_returns_fewer() -> None:
    """Test fewer distinct parents than requested returns all of them."""
    chunks = chunks_for(["A", "A", "B"])
    assert distinct_parent_ids(chunks, 5) == ["A", "B"]


def test_empty_stream() -> None:
    assert distinct_parent_ids([], 3) == []


# --- DocumentAggregator Tests ---


@pytest.fixture
def embedder() -> AsyncMock:
    mock = AsyncMock()
    mock.embed.return_value = [0.5, 0.5]
    return mock


async def test_over_fetches_chunks(embedder: AsyncMock) -> None:
    """Test chunk limit is desired count times the over-fetch factor."""
    vector_index = AsyncMock()
    vector_index.match_chunks.return_value = chunks_for(["A", "B", "A", "C", "A", "D"])
    aggregator = DocumentAggregator(embedder, vector_index, over_fetch=5, similarity_threshold=0.5)

    result = await aggregator.find_relevant_documents("refund policy", "acme", 3)

    assert result == ["A", "B", "C"]
    vector_index.match_chunks.assert_awaited_once_with(
        query_embedding=[0.5, 0.5],
        similarity_threshold=0.5,
        max_results=15,
        tenant_id="acme",
    )


async def test_no_matches_returns_empty(embedder: AsyncMock) -> None:
    vector_index = AsyncMock()
    vector_index.match_chunks.return_value = []
    aggregator = DocumentAggregator(embedder, vector_index)

    assert await aggregator.find_relevant_documents("q", "acme") == []


async def test_vector_failure_raises(embedder: AsyncMock) -> None:
    """Test document discovery has no degraded mode."""
    vector_index = AsyncMock()
    vector_index.match_chunks.side_effect = ConnectionError("down")
    aggregator = DocumentAggregator(embedder, vector_index)

    with pytest.raises(RetrievalError):
        await aggregator.find_relevant_documents("q", "acme")


async def test_invalid_count_rejected(embedder: AsyncMock) -> None:
    aggregator = DocumentAggregator(embedder, AsyncMock())
    with pytest.raises(SearchError):
        await aggregator.find_relevant_documents("q", "acme", 0)


# --- ResultEnricher Tests ---


async def test_enrichment_uses_single_batch_lookup() -> None:
    """Test one lookup with the distinct parent ids in first-seen order."""
    store = AsyncMock()
    store.get_document_names.return_value = {"A": "Refunds.pdf", "B": "Shipping.pdf"}
    enricher = ResultEnricher(store)

    results = await enricher.enrich(fused_for(["A", "B", "A", "A"]))

    store.get_document_names.assert_awaited_once_with(["A", "B"])
    assert [r.source_name for r in results] == [
        "Refunds.pdf",
        "Shipping.pdf",
        "Refunds.pdf",
        "Refunds.pdf",
    ]


async def test_missing_parent_kept_with_no_name() -> None:
    """Test results whose parent was deleted keep their position."""
    store = AsyncMock()
    store.get_document_names.return_value = {"A": "Refunds.pdf"}
    enricher = ResultEnricher(store)

    results = await enricher.enrich(fused_for(["GONE", "A"]))

    assert [r.id for r in results] == ["chunk-0", "chunk-1"]
    assert results[0].source_name is None
    assert results[1].source_name == "Refunds.pdf"


async def test_lookup_failure_tolerated() -> None:
    """Test a failing metadata store leaves names empty."""
    store = AsyncMock()
    store.get_document_names.side_effect = ConnectionError("db down")
    enricher = ResultEnricher(store)

    results = await enricher.enrich(fused_for(["A", "B"]))

    assert len(results) == 2
    assert all(r.source_name is None for r in results)


async def test_empty_results_skip_lookup() -> None:
    store = AsyncMock()
    enricher = ResultEnricher(store)

    assert await enricher.enrich([]) == []
    store.get_document_names.assert_not_called()


async def test_enrichment_preserves_scores() -> None:
    """Test enrichment copies every fused field."""
    store = AsyncMock()
    store.get_document_names.return_value = {}
    fused = FusedResult(
        id="c",
        parent_document_id="A",
        content="x",
        similarity_score=0.8,
        fusion_score=0.03,
        relevance_score=0.7,
        rank=4,
        page_number=2,
    )

    [result] = await ResultEnricher(store).enrich([fused])

    assert result.relevance_score == 0.7
    assert result.fusion_score == 0.03
    assert result.rank == 4
    assert result.page_number == 2
