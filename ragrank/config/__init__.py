"""
Configuration - Application settings and error taxonomy.
"""

from .errors import (
    EmbeddingError,
    ErrorCode,
    RagRankError,
    RerankError,
    RetrievalError,
    SearchError,
    StorageError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "RagRankError",
    "SearchError",
    "RetrievalError",
    "EmbeddingError",
    "RerankError",
    "StorageError",
]
