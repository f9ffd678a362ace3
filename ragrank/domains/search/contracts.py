"""
Search Contracts - Interfaces for the external collaborators of the search domain.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from .models import Candidate, RerankDocument, RerankScore


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Contract for text embedding."""

    async def embed(self, text: str) -> list[float]:
        """Embed text into a fixed-dimension vector."""
        ...


@runtime_checkable
class VectorIndex(Protocol):
    """Contract for tenant-scoped vector similarity search."""

    async def match_chunks(
        self,
        query_embedding: Sequence[float],
        similarity_threshold: float,
        max_results: int,
        tenant_id: str,
    ) -> list[Candidate]:
        """Return chunks ordered by descending cosine similarity."""
        ...


@runtime_checkable
class FullTextIndex(Protocol):
    """Contract for tenant-scoped lexical search."""

    async def search_chunks(
        self,
        query_text: str,
        rank_threshold: float,
        max_results: int,
        tenant_id: str,
    ) -> list[Candidate]:
        """Return chunks ordered by descending lexical rank."""
        ...


@runtime_checkable
class RerankingService(Protocol):
    """Contract for cross-encoder reranking."""

    def is_enabled(self) -> bool:
        """Whether the service is configured and may be called."""
        ...

    async def rerank(
        self,
        query: str,
        documents: list[RerankDocument],
        top_n: int | None = None,
    ) -> list[RerankScore]:
        """
        Score documents against the query.

        Returns:
            Up to ``top_n`` scores, each keyed by its index in ``documents``
        """
        ...


@runtime_checkable
class DocumentMetadataStore(Protocol):
    """Contract for parent-document display metadata."""

    async def get_document_names(self, document_ids: Sequence[str]) -> dict[str, str]:
        """Batch lookup of display names. Missing ids are absent from the result."""
        ...
