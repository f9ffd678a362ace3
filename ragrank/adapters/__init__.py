"""
Adapters - External service integrations.

All external API calls are wrapped here to isolate domains from third-party changes.
"""

from .cohere import CohereReranker
from .embeddings import SentenceTransformerEmbedder
from .faiss import FAISSIndex
from .sqlite import SQLiteRepository

__all__ = [
    "SentenceTransformerEmbedder",
    "FAISSIndex",
    "SQLiteRepository",
    "CohereReranker",
]
