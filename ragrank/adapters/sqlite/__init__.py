"""
SQLite Adapter - Chunk storage, full-text search and document metadata.
"""

from .repository import SQLiteRepository

__all__ = ["SQLiteRepository"]
