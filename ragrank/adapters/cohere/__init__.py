"""
Cohere Adapter - Cross-encoder reranking service.
"""

from .reranker import CohereReranker

__all__ = ["CohereReranker"]
