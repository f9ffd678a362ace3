"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables (prefix ``RAGRANK_``) and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from ragrank.domains.orchestration.cache import ResponseCache
    from ragrank.domains.search.models import EngineConfig


class Settings(BaseSettings):
    """Application settings."""

    # Paths
    data_dir: Path = Path("data")
    db_path: Path = Path("data/ragrank.db")
    faiss_index_path: Path = Path("data/indices/faiss")

    # Embeddings
    embedding_model: str = "all-MiniLM-L6-v2"
    embedding_dimension: int = 384

    # Retrieval tuning
    rrf_k: int = 60
    rerank_skip_similarity: float = 0.85
    rerank_skip_max_pool: int = 5
    candidate_multiplier: int = 2
    document_over_fetch: int = 5
    document_similarity_threshold: float = 0.5

    # Cohere reranking (disabled when no key is configured)
    cohere_api_key: str | None = None
    cohere_model: str = "rerank-english-v3.0"
    cohere_base_url: str = "https://api.cohere.com"
    rerank_timeout_seconds: float = 30.0

    # Response cache
    cache_max_size: int = 1000
    cache_ttl_seconds: float = 3600.0
    cache_max_temperature: float = 0.2

    model_config = SettingsConfigDict(
        env_prefix="RAGRANK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def engine_config(self) -> EngineConfig:
        """Build the search engine tuning block from these settings."""
        from ragrank.domains.search.models import EngineConfig

        return EngineConfig(
            rrf_k=self.rrf_k,
            rerank_skip_similarity=self.rerank_skip_similarity,
            rerank_skip_max_pool=self.rerank_skip_max_pool,
            candidate_multiplier=self.candidate_multiplier,
            document_over_fetch=self.document_over_fetch,
            document_similarity_threshold=self.document_similarity_threshold,
        )

    def response_cache(self) -> ResponseCache:
        """Build the generated-answer cache from these settings."""
        from ragrank.domains.orchestration.cache import ResponseCache

        return ResponseCache(
            max_size=self.cache_max_size,
            ttl_seconds=self.cache_ttl_seconds,
            max_cacheable_temperature=self.cache_max_temperature,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
