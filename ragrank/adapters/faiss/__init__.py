"""
FAISS Adapter - Tenant-scoped vector similarity search.
"""

from .index import FAISSIndex

__all__ = ["FAISSIndex"]
