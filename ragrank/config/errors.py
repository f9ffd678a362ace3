"""
Error Taxonomy - Consistent error codes across the retrieval engine.

Usage:
    from ragrank.config.errors import ErrorCode, RagRankError

    raise RagRankError(ErrorCode.SEARCH_INDEX_UNAVAILABLE, "Vector index unreachable")
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # Search errors
    SEARCH_INVALID_QUERY = "SEARCH_INVALID_QUERY"
    SEARCH_INDEX_UNAVAILABLE = "SEARCH_INDEX_UNAVAILABLE"

    # Embedding errors
    EMBEDDING_FAILED = "EMBEDDING_FAILED"

    # Reranking errors
    RERANK_UNAVAILABLE = "RERANK_UNAVAILABLE"

    # Storage errors
    STORAGE_CONNECTION_FAILED = "STORAGE_CONNECTION_FAILED"
    STORAGE_READ_FAILED = "STORAGE_READ_FAILED"


class RagRankError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to API-friendly dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


# Domain-specific exceptions for cleaner imports
class SearchError(RagRankError):
    """Invalid search request."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.SEARCH_INVALID_QUERY, message, details)


class RetrievalError(RagRankError):
    """Load-bearing retrieval path (embedding or vector index) failed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.SEARCH_INDEX_UNAVAILABLE, message, details)


class EmbeddingError(RagRankError):
    """Embedding provider errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.EMBEDDING_FAILED, message, details)


class RerankError(RagRankError):
    """Reranking service errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.RERANK_UNAVAILABLE, message, details)


class StorageError(RagRankError):
    """Storage/database errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: ErrorCode = ErrorCode.STORAGE_READ_FAILED,
    ) -> None:
        super().__init__(code, message, details)
