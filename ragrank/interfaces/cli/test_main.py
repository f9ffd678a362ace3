"""
Tests for the command-line interface.
"""

from __future__ import annotations

import importlib
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest
from typer.testing import CliRunner

from ragrank.config import Settings
from ragrank.config.errors import RetrievalError
from ragrank.domains.search import EnrichedResult, ScoreScale

# The package re-exports the ``main`` function, which shadows the submodule
# attribute, so load the module itself.
cli = importlib.import_module("ragrank.interfaces.cli.main")

runner = CliRunner()


@pytest.fixture
def engine(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    """Replace adapter wiring with a mocked engine."""
    mock = AsyncMock()

    @asynccontextmanager
    async def fake_engine(settings):
        yield mock

    monkeypatch.setattr(cli, "_engine", fake_engine)
    return mock


def test_version() -> None:
    result = runner.invoke(cli.app, ["version"])
    assert result.exit_code == 0
    assert "RagRank v1.0.0" in result.output


def test_search_prints_results(engine: AsyncMock) -> None:
    engine.search.return_value = [
        EnrichedResult(
            id="c1",
            parent_document_id="doc-1",
            content="Refunds are issued within 14 days.",
            relevance_score=0.91,
            score_scale=ScoreScale.RERANKER,
            rank=1,
            page_number=3,
            source_name="Refunds.pdf",
        )
    ]

    result = runner.invoke(
        cli.app, ["search", "refund policy", "--tenant", "acme", "--top-k", "3", "--no-rerank"]
    )

    assert result.exit_code == 0
    assert "Refunds.pdf" in result.output
    _, tenant, options = engine.search.call_args.args
    assert tenant == "acme"
    assert options.top_k == 3
    assert options.use_reranking is False


def test_search_no_results(engine: AsyncMock) -> None:
    engine.search.return_value = []

    result = runner.invoke(cli.app, ["search", "refund policy", "--tenant", "acme"])

    assert result.exit_code == 0
    assert "No results found" in result.output


def test_search_error_exits_nonzero(engine: AsyncMock) -> None:
    engine.search.side_effect = RetrievalError("Vector search failed")

    result = runner.invoke(cli.app, ["search", "refund policy", "--tenant", "acme"])

    assert result.exit_code == 1


def test_documents_lists_ids(engine: AsyncMock) -> None:
    engine.find_relevant_documents.return_value = ["doc-1", "doc-7"]

    result = runner.invoke(cli.app, ["documents", "refund policy", "--tenant", "acme", "-n", "2"])

    assert result.exit_code == 0
    assert "1. doc-1" in result.output
    assert "2. doc-7" in result.output
    engine.find_relevant_documents.assert_awaited_once_with("refund policy", "acme", 2)


def test_init_creates_database(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Test init builds the schema and reports the chunk count."""
    settings = Settings(_env_file=None, data_dir=tmp_path, db_path=tmp_path / "ragrank.db")
    monkeypatch.setattr(cli, "get_settings", lambda: settings)

    result = runner.invoke(cli.app, ["init"])

    assert result.exit_code == 0
    assert "Initialization complete" in result.output
    assert "Indexed chunks: 0" in result.output
    assert (tmp_path / "ragrank.db").exists()
