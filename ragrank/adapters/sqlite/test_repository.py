"""Tests for SQLite Repository."""

import pytest
from pathlib import Path

from ragrank.domains.search.models import Candidate

from .repository import SQLiteRepository, build_match_expression


def make_chunk(chunk_id: str, document_id: str, content: str, index: int = 0) -> Candidate:
    return Candidate(
        id=chunk_id,
        parent_document_id=document_id,
        content=content,
        positional_index=index,
        page_number=index + 1,
        metadata={"section": "policy"},
    )


@pytest.fixture
async def repo(tmp_path: Path):
    """Create a test repository with temporary database."""
    db_path = tmp_path / "test.db"
    repo = SQLiteRepository(db_path)
    await repo.initialize()
    yield repo
    await repo.close()


@pytest.fixture
async def seeded_repo(repo: SQLiteRepository):
    """Repository with chunks for two tenants."""
    await repo.insert_document("doc-refunds", "acme", "Refunds.pdf")
    await repo.insert_document("doc-shipping", "acme", "Shipping.pdf")
    await repo.insert_document("doc-other", "globex", "Globex Refunds.pdf")

    await repo.insert_chunk(
        "acme", make_chunk("c1", "doc-refunds", "Refund policy: refunds are issued within 14 days.")
    )
    await repo.insert_chunk(
        "acme", make_chunk("c2", "doc-shipping", "Shipping takes five business days.", 1)
    )
    await repo.insert_chunk(
        "acme", make_chunk("c3", "doc-refunds", "Store credit may replace a refund.", 2)
    )
    await repo.insert_chunk(
        "globex", make_chunk("g1", "doc-other", "Refund policy for Globex customers.")
    )
    return repo


def test_match_expression_quotes_tokens():
    """Test every word becomes a quoted term."""
    assert build_match_expression("refund policy") == '"refund" "policy"'


def test_match_expression_strips_operators():
    """Test FTS5 syntax in user input is neutralized."""
    assert build_match_expression('refund* OR "policy" -(x)') == '"refund" "OR" "policy" "x"'


def test_match_expression_empty():
    assert build_match_expression("  ?! ") is None


async def test_initialize_creates_tables(repo: SQLiteRepository):
    """Test that initialize creates all required tables."""
    conn = await repo._get_connection()
    cursor = await conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table'"
    )
    tables = {row[0] for row in await cursor.fetchall()}

    assert "documents" in tables
    assert "chunks" in tables
    assert "chunks_fts" in tables


async def test_initialize_is_idempotent(repo: SQLiteRepository):
    await repo.initialize()
    assert await repo.get_chunk_count() == 0


async def test_search_chunks(seeded_repo: SQLiteRepository):
    """Test full-text search returns ranked tenant chunks."""
    results = await seeded_repo.search_chunks("refund policy", 0.0, 10, "acme")

    assert [r.id for r in results] == ["c1"]
    result = results[0]
    assert result.parent_document_id == "doc-refunds"
    assert result.page_number == 1
    assert result.metadata == {"section": "policy"}
    assert result.score > 0


async def test_search_uses_stemming(seeded_repo: SQLiteRepository):
    """Test porter stemming matches refund and refunds."""
    results = await seeded_repo.search_chunks("refunds", 0.0, 10, "acme")

    assert {r.id for r in results} == {"c1", "c3"}
    scores = [r.score for r in results]
    assert scores == sorted(scores, reverse=True)


async def test_search_is_tenant_scoped(seeded_repo: SQLiteRepository):
    """Test chunks of other tenants are never returned."""
    acme = await seeded_repo.search_chunks("refund", 0.0, 10, "acme")
    globex = await seeded_repo.search_chunks("refund", 0.0, 10, "globex")

    assert "g1" not in {r.id for r in acme}
    assert [r.id for r in globex] == ["g1"]


async def test_search_respects_limit(seeded_repo: SQLiteRepository):
    results = await seeded_repo.search_chunks("refund", 0.0, 1, "acme")
    assert len(results) == 1


async def test_search_threshold_filters(seeded_repo: SQLiteRepository):
    results = await seeded_repo.search_chunks("refund", 1e9, 10, "acme")
    assert results == []


async def test_search_without_terms(seeded_repo: SQLiteRepository):
    assert await seeded_repo.search_chunks("???", 0.0, 10, "acme") == []


async def test_get_document_names(seeded_repo: SQLiteRepository):
    """Test batch lookup omits unknown ids."""
    names = await seeded_repo.get_document_names(["doc-refunds", "doc-shipping", "missing"])

    assert names == {"doc-refunds": "Refunds.pdf", "doc-shipping": "Shipping.pdf"}


async def test_get_document_names_empty(repo: SQLiteRepository):
    assert await repo.get_document_names([]) == {}


async def test_deleted_document_disappears_from_lookup(seeded_repo: SQLiteRepository):
    """Test a deleted parent leaves chunks searchable but unnamed."""
    conn = await seeded_repo._get_connection()
    await conn.execute("DELETE FROM documents WHERE id = ?", ("doc-refunds",))
    await conn.commit()

    names = await seeded_repo.get_document_names(["doc-refunds"])
    results = await seeded_repo.search_chunks("refund policy", 0.0, 10, "acme")

    assert names == {}
    assert [r.id for r in results] == ["c1"]


async def test_get_chunk_count(seeded_repo: SQLiteRepository):
    assert await seeded_repo.get_chunk_count() == 4
    assert await seeded_repo.get_chunk_count("acme") == 3
    assert await seeded_repo.get_chunk_count("globex") == 1
