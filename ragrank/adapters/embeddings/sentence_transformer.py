"""
Sentence Transformer Embedder - Local query embedding.

The model is loaded lazily on first use and encoding runs in a worker
thread so the event loop is never blocked.
"""

from __future__ import annotations

import asyncio
import logging

from sentence_transformers import SentenceTransformer

from ragrank.config.errors import EmbeddingError

logger = logging.getLogger(__name__)

__all__ = ["SentenceTransformerEmbedder"]


class SentenceTransformerEmbedder:
    """
    Embedding provider backed by a sentence-transformers model.

    Example:
        >>> embedder = SentenceTransformerEmbedder("all-MiniLM-L6-v2", dimension=384)
        >>> vector = await embedder.embed("refund policy")
    """

    def __init__(
        self,
        model_name: str = "all-MiniLM-L6-v2",
        dimension: int = 384,
    ) -> None:
        """
        Args:
            model_name: Sentence transformer model name
            dimension: Expected vector dimension
        """
        self.model_name = model_name
        self.dimension = dimension
        self._model: SentenceTransformer | None = None

    def _get_model(self) -> SentenceTransformer:
        """Get or load the model."""
        if self._model is None:
            self._model = SentenceTransformer(self.model_name)
            logger.info("Embedding model loaded: %s", self.model_name)
        return self._model

    async def embed(self, text: str) -> list[float]:
        """
        Embed text into a normalized vector.

        Raises:
            EmbeddingError: If encoding fails or the dimension is wrong
        """
        try:
            model = self._get_model()
            vector = await asyncio.to_thread(model.encode, text, normalize_embeddings=True)
        except Exception as e:
            raise EmbeddingError(
                "Embedding failed", details={"model": self.model_name, "cause": str(e)}
            ) from e

        values = [float(v) for v in vector]
        if len(values) != self.dimension:
            raise EmbeddingError(
                f"Expected dimension {self.dimension}, got {len(values)}",
                details={"model": self.model_name},
            )
        return values
