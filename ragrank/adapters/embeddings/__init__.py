"""
Embeddings Adapter - Query embedding via sentence-transformers.
"""

from .sentence_transformer import SentenceTransformerEmbedder

__all__ = ["SentenceTransformerEmbedder"]
