"""
SQLite Repository - Chunk storage with FTS5 search.

Features:
- Async operations via aiosqlite
- Tenant-scoped full-text search with FTS5 (BM25 ranking)
- Batch lookup of parent document names
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import aiosqlite

from ragrank.config.errors import ErrorCode, StorageError
from ragrank.domains.search.models import Candidate

logger = logging.getLogger(__name__)

__all__ = ["SQLiteRepository", "build_match_expression"]

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)


def build_match_expression(query: str) -> str | None:
    """
    Convert free text into an FTS5 MATCH expression.

    Every word must match (implicit AND). Words are quoted so punctuation and
    FTS5 operators in user input cannot break the query.
    """
    tokens = _TOKEN_RE.findall(query)
    if not tokens:
        return None
    return " ".join(f'"{token}"' for token in tokens)


class SQLiteRepository:
    """
    SQLite repository for documents and chunks.

    Example:
        >>> repo = SQLiteRepository("data/ragrank.db")
        >>> await repo.initialize()
        >>> await repo.insert_document("doc-1", "acme", "Refund Policy.pdf")
        >>> results = await repo.search_chunks("refund policy", 0.0, 20, "acme")
    """

    def __init__(self, db_path: str | Path) -> None:
        """
        Initialize repository.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection: aiosqlite.Connection | None = None

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is None:
            try:
                self._connection = await aiosqlite.connect(str(self.db_path))
            except Exception as e:
                raise StorageError(
                    f"Cannot open database {self.db_path}",
                    details={"cause": str(e)},
                    code=ErrorCode.STORAGE_CONNECTION_FAILED,
                ) from e
            self._connection.row_factory = aiosqlite.Row
        return self._connection

    async def initialize(self) -> None:
        """Initialize database schema."""
        conn = await self._get_connection()

        await conn.executescript("""
            -- Parent documents
            CREATE TABLE IF NOT EXISTS documents (
                id TEXT PRIMARY KEY,
                tenant_id TEXT NOT NULL,
                name TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );

            -- Chunks
            CREATE TABLE IF NOT EXISTS chunks (
                row_id INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                document_id TEXT NOT NULL,
                tenant_id TEXT NOT NULL,
                content TEXT NOT NULL,
                chunk_index INTEGER NOT NULL DEFAULT 0,
                page_number INTEGER,
                metadata TEXT
            );

            -- FTS5 virtual table for full-text search
            CREATE VIRTUAL TABLE IF NOT EXISTS chunks_fts USING fts5(
                content,
                content='chunks',
                content_rowid='row_id',
                tokenize='porter'
            );

            -- Triggers to keep FTS in sync
            CREATE TRIGGER IF NOT EXISTS chunks_ai AFTER INSERT ON chunks BEGIN
                INSERT INTO chunks_fts(rowid, content) VALUES (new.row_id, new.content);
            END;

            CREATE TRIGGER IF NOT EXISTS chunks_ad AFTER DELETE ON chunks BEGIN
                INSERT INTO chunks_fts(chunks_fts, rowid, content)
                VALUES ('delete', old.row_id, old.content);
            END;

            CREATE TRIGGER IF NOT EXISTS chunks_au AFTER UPDATE ON chunks BEGIN
                INSERT INTO chunks_fts(chunks_fts, rowid, content)
                VALUES ('delete', old.row_id, old.content);
                INSERT INTO chunks_fts(rowid, content) VALUES (new.row_id, new.content);
            END;

            -- Indexes
            CREATE INDEX IF NOT EXISTS idx_documents_tenant ON documents(tenant_id);
            CREATE INDEX IF NOT EXISTS idx_chunks_tenant ON chunks(tenant_id);
            CREATE INDEX IF NOT EXISTS idx_chunks_document ON chunks(document_id);
        """)

        await conn.commit()
        logger.info("Database initialized: %s", self.db_path)

    async def insert_document(self, document_id: str, tenant_id: str, name: str) -> None:
        """Insert a parent document."""
        conn = await self._get_connection()
        await conn.execute(
            "INSERT INTO documents (id, tenant_id, name) VALUES (?, ?, ?)",
            (document_id, tenant_id, name),
        )
        await conn.commit()

    async def insert_chunk(self, tenant_id: str, chunk: Candidate) -> None:
        """Insert a chunk; its score is ignored."""
        conn = await self._get_connection()
        await conn.execute(
            """
            INSERT INTO chunks (id, document_id, tenant_id, content, chunk_index, page_number, metadata)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                chunk.id,
                chunk.parent_document_id,
                tenant_id,
                chunk.content,
                chunk.positional_index,
                chunk.page_number,
                json.dumps(chunk.metadata) if chunk.metadata else None,
            ),
        )
        await conn.commit()

    async def search_chunks(
        self,
        query_text: str,
        rank_threshold: float,
        max_results: int,
        tenant_id: str,
    ) -> list[Candidate]:
        """
        Full-text search using FTS5.

        Args:
            query_text: Search query
            rank_threshold: Minimum rank (negated BM25, higher is better)
            max_results: Maximum results
            tenant_id: Tenant scope

        Returns:
            Matching chunks ordered by descending rank
        """
        match = build_match_expression(query_text)
        if match is None:
            return []

        conn = await self._get_connection()
        cursor = await conn.execute(
            """
            SELECT c.*, -bm25(chunks_fts) AS text_rank
            FROM chunks_fts
            JOIN chunks c ON chunks_fts.rowid = c.row_id
            WHERE chunks_fts MATCH ? AND c.tenant_id = ?
            ORDER BY text_rank DESC
            LIMIT ?
            """,
            (match, tenant_id, max_results),
        )
        rows = await cursor.fetchall()

        return [
            self._row_to_candidate(row)
            for row in rows
            if row["text_rank"] >= rank_threshold
        ]

    async def get_document_names(self, document_ids: Sequence[str]) -> dict[str, str]:
        """Batch lookup of document names; missing ids are omitted."""
        if not document_ids:
            return {}

        conn = await self._get_connection()
        placeholders = ", ".join("?" for _ in document_ids)
        cursor = await conn.execute(
            f"SELECT id, name FROM documents WHERE id IN ({placeholders})",
            tuple(document_ids),
        )
        rows = await cursor.fetchall()
        return {row["id"]: row["name"] for row in rows}

    async def get_chunk_count(self, tenant_id: str | None = None) -> int:
        """Get chunk count, optionally for one tenant."""
        conn = await self._get_connection()
        if tenant_id:
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM chunks WHERE tenant_id = ?", (tenant_id,)
            )
        else:
            cursor = await conn.execute("SELECT COUNT(*) FROM chunks")
        row = await cursor.fetchone()
        return row[0] if row else 0

    @staticmethod
    def _row_to_candidate(row: aiosqlite.Row) -> Candidate:
        metadata: dict[str, Any] = json.loads(row["metadata"]) if row["metadata"] else {}
        return Candidate(
            id=row["id"],
            parent_document_id=row["document_id"],
            content=row["content"],
            positional_index=row["chunk_index"],
            page_number=row["page_number"],
            metadata=metadata,
            score=float(row["text_rank"]),
        )

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None
