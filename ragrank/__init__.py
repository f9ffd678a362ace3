"""
RagRank - Hybrid retrieval and ranking engine for retrieval-augmented generation.

Example:
    >>> from ragrank.domains.search import HybridSearchEngine
    >>> engine = HybridSearchEngine(embedder, vector_index, text_index, document_store)
    >>> results = await engine.search("refund policy", tenant_id="acme")
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
