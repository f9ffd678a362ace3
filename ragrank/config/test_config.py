"""
Tests for settings and error taxonomy.
"""

from __future__ import annotations

import pytest

from .errors import (
    ErrorCode,
    RagRankError,
    RerankError,
    RetrievalError,
    SearchError,
    StorageError,
)
from .settings import Settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test default retrieval tuning values."""
    monkeypatch.delenv("RAGRANK_COHERE_API_KEY", raising=False)
    settings = Settings(_env_file=None)

    assert settings.rrf_k == 60
    assert settings.rerank_skip_similarity == 0.85
    assert settings.cohere_api_key is None
    assert settings.cache_max_temperature == 0.2


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test RAGRANK_ prefixed variables override defaults."""
    monkeypatch.setenv("RAGRANK_RRF_K", "30")
    monkeypatch.setenv("RAGRANK_COHERE_API_KEY", "secret")

    settings = Settings(_env_file=None)

    assert settings.rrf_k == 30
    assert settings.cohere_api_key == "secret"


def test_engine_config_from_settings() -> None:
    settings = Settings(_env_file=None, rrf_k=10, candidate_multiplier=3)
    config = settings.engine_config()

    assert config.rrf_k == 10
    assert config.candidate_multiplier == 3
    assert config.document_over_fetch == 5


def test_response_cache_from_settings() -> None:
    """Test cache limits and eligibility come from settings."""
    settings = Settings(
        _env_file=None,
        cache_max_size=50,
        cache_ttl_seconds=120.0,
        cache_max_temperature=0.5,
    )
    cache = settings.response_cache()

    stats = cache.stats()
    assert stats["max_size"] == 50
    assert stats["ttl_seconds"] == 120.0
    assert cache.is_cacheable(0.5) is True
    assert cache.is_cacheable(0.6) is False


def test_error_to_dict() -> None:
    error = SearchError("Query must not be empty", details={"field": "query"})

    assert error.to_dict() == {
        "code": "SEARCH_INVALID_QUERY",
        "message": "Query must not be empty",
        "details": {"field": "query"},
    }


def test_domain_errors_carry_codes() -> None:
    assert RetrievalError("x").code == ErrorCode.SEARCH_INDEX_UNAVAILABLE
    assert RerankError("x").code == ErrorCode.RERANK_UNAVAILABLE
    assert isinstance(RerankError("x"), RagRankError)
    assert RerankError("x").details == {}


def test_storage_error_code_override() -> None:
    assert StorageError("x").code == ErrorCode.STORAGE_READ_FAILED
    error = StorageError("x", code=ErrorCode.STORAGE_CONNECTION_FAILED)
    assert error.code == ErrorCode.STORAGE_CONNECTION_FAILED
