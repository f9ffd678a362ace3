"""
FAISS Index - Tenant-scoped vector similarity search over chunks.

Features:
- Async-compatible operations
- One inner-product index per tenant (cosine on normalized vectors)
- Index persistence
- Chunk metadata stored alongside vectors
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import faiss
import numpy as np

from ragrank.domains.search.models import Candidate

logger = logging.getLogger(__name__)

__all__ = ["FAISSIndex"]


class FAISSIndex:
    """
    FAISS vector index implementing the chunk vector search primitive.

    Tenants never share an index, so results cannot cross tenants.

    Example:
        >>> index = FAISSIndex(dimension=384)
        >>> await index.add_chunks("acme", embeddings, chunks)
        >>> results = await index.match_chunks(query_embedding, 0.3, 10, "acme")
    """

    def __init__(self, dimension: int = 384) -> None:
        """
        Initialize FAISS index.

        Args:
            dimension: Vector dimension (384 for MiniLM, 768 for MPNet)
        """
        self.dimension = dimension
        self._indexes: dict[str, faiss.Index] = {}
        self._chunks: dict[str, list[dict[str, Any]]] = {}

    def _get_index(self, tenant_id: str) -> faiss.Index:
        """Get or create a tenant's index."""
        if tenant_id not in self._indexes:
            self._indexes[tenant_id] = faiss.IndexFlatIP(self.dimension)
            self._chunks[tenant_id] = []
        return self._indexes[tenant_id]

    def _prepare(self, vectors: np.ndarray | Sequence[float]) -> np.ndarray:
        """Reshape, cast and L2-normalize vectors for inner product search."""
        array = np.asarray(vectors, dtype="float32")
        if array.ndim == 1:
            array = array.reshape(1, -1)
        if array.shape[1] != self.dimension:
            raise ValueError(
                f"Expected vectors of dimension {self.dimension}, got {array.shape[1]}"
            )
        array = np.ascontiguousarray(array)
        faiss.normalize_L2(array)
        return array

    async def add_chunks(
        self,
        tenant_id: str,
        vectors: np.ndarray,
        chunks: list[Candidate],
    ) -> None:
        """
        Add chunk vectors for a tenant.

        Args:
            tenant_id: Owning tenant
            vectors: numpy array of shape (n, dimension)
            chunks: Chunk rows (same length as vectors); scores are ignored
        """
        if len(vectors) != len(chunks):
            raise ValueError("vectors and chunks must have the same length")

        prepared = self._prepare(vectors)
        index = self._get_index(tenant_id)

        await asyncio.to_thread(index.add, prepared)
        self._chunks[tenant_id].extend(c.model_dump(exclude={"score"}) for c in chunks)

        logger.debug("Added %d vectors for tenant %s", len(chunks), tenant_id)

    async def match_chunks(
        self,
        query_embedding: Sequence[float],
        similarity_threshold: float,
        max_results: int,
        tenant_id: str,
    ) -> list[Candidate]:
        """
        Search a tenant's chunks by cosine similarity.

        Args:
            query_embedding: Query vector of shape (dimension,)
            similarity_threshold: Minimum cosine similarity
            max_results: Number of results
            tenant_id: Tenant scope

        Returns:
            Candidates ordered by descending similarity
        """
        index = self._indexes.get(tenant_id)
        if index is None or index.ntotal == 0 or max_results < 1:
            return []

        query_vector = self._prepare(query_embedding)

        scores, indices = await asyncio.to_thread(
            index.search, query_vector, min(max_results, index.ntotal)
        )

        chunks = self._chunks[tenant_id]
        results = []
        for score, idx in zip(scores[0], indices[0]):
            if idx < 0 or idx >= len(chunks) or score < similarity_threshold:
                continue
            results.append(Candidate(**chunks[idx], score=float(score)))

        return results

    async def save(self, path: str | Path) -> None:
        """
        Save all tenant indexes to disk.

        Args:
            path: Directory to save index
        """
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)

        tenants = sorted(self._indexes)
        for position, tenant_id in enumerate(tenants):
            index_path = path / f"tenant_{position}.bin"
            await asyncio.to_thread(
                faiss.write_index, self._indexes[tenant_id], str(index_path)
            )

        metadata = {
            "dimension": self.dimension,
            "tenants": [
                {"tenant_id": t, "file": f"tenant_{i}.bin", "chunks": self._chunks[t]}
                for i, t in enumerate(tenants)
            ],
        }
        await asyncio.to_thread(self._write_json, path / "metadata.json", metadata)

        logger.info("Index saved to %s (%d tenants, %d vectors)", path, len(tenants), self.size)

    @staticmethod
    def _write_json(path: Path, data: dict[str, Any]) -> None:
        """Write JSON file (sync helper for to_thread)."""
        with open(path, "w") as f:
            json.dump(data, f)

    async def load(self, path: str | Path) -> None:
        """
        Load tenant indexes from disk.

        Args:
            path: Directory containing saved index
        """
        path = Path(path)

        data = await asyncio.to_thread(self._read_json, path / "metadata.json")
        self.dimension = data["dimension"]
        self._indexes = {}
        self._chunks = {}

        for tenant in data["tenants"]:
            index = await asyncio.to_thread(faiss.read_index, str(path / tenant["file"]))
            self._indexes[tenant["tenant_id"]] = index
            self._chunks[tenant["tenant_id"]] = tenant["chunks"]

        logger.info("Index loaded from %s (%d vectors)", path, self.size)

    @staticmethod
    def _read_json(path: Path) -> dict[str, Any]:
        """Read JSON file (sync helper for to_thread)."""
        with open(path) as f:
            result: dict[str, Any] = json.load(f)
            return result

    @property
    def size(self) -> int:
        """Get number of vectors across all tenants."""
        return sum(index.ntotal for index in self._indexes.values())
