"""
Cohere Reranker - Cross-encoder reranking via the Cohere rerank API.

Features:
- Async HTTP client
- Availability flag (disabled when no API key is configured)
- Retries with exponential backoff on transport errors
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ragrank.config.errors import RerankError
from ragrank.domains.search.models import RerankDocument, RerankScore

logger = logging.getLogger(__name__)

__all__ = ["CohereReranker"]


class CohereReranker:
    """
    Cohere rerank client implementing the reranking service contract.

    Example:
        >>> reranker = CohereReranker(api_key="...")
        >>> if reranker.is_enabled():
        ...     scores = await reranker.rerank("refund policy", documents, top_n=5)
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "rerank-english-v3.0",
        base_url: str = "https://api.cohere.com",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize Cohere reranker.

        Args:
            api_key: Cohere API key (reranking disabled if None)
            model: Rerank model name
            base_url: API base URL
            timeout: Request timeout in seconds
            client: Pre-built HTTP client (mainly for tests)
        """
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key
        self._client = client

        if api_key:
            logger.info("Cohere reranking initialized: model=%s", model)
        else:
            logger.info("Cohere API key not configured, reranking disabled")

    def is_enabled(self) -> bool:
        """Whether reranking is available."""
        return bool(self._api_key)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def rerank(
        self,
        query: str,
        documents: list[RerankDocument],
        top_n: int | None = None,
    ) -> list[RerankScore]:
        """
        Rerank documents by relevance to the query.

        Args:
            query: Query text
            documents: Documents to score
            top_n: Number of scores to return (defaults to all)

        Returns:
            Scores keyed by document index, best first

        Raises:
            RerankError: If reranking is disabled or the API call fails
        """
        if not self.is_enabled():
            raise RerankError("Cohere reranking is not configured")
        if not documents:
            return []

        payload: dict[str, Any] = {
            "model": self.model,
            "query": query,
            "documents": [doc.text for doc in documents],
            "top_n": min(top_n or len(documents), len(documents)),
        }

        logger.info(
            "Reranking documents with Cohere: count=%d top_n=%d",
            len(documents),
            payload["top_n"],
        )

        try:
            data = await self._post_rerank(payload)
        except httpx.HTTPStatusError as e:
            raise RerankError(
                f"Cohere rerank returned HTTP {e.response.status_code}",
                details={"status": e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise RerankError("Cohere rerank request failed", details={"cause": str(e)}) from e
        except ValueError as e:
            raise RerankError("Cohere rerank returned invalid JSON") from e

        if not isinstance(data, dict):
            raise RerankError("Malformed Cohere rerank response")
        try:
            scores = [
                RerankScore(index=item["index"], relevance_score=item["relevance_score"])
                for item in data.get("results", [])
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise RerankError("Malformed Cohere rerank response") from e

        logger.info("Reranking complete: original=%d reranked=%d", len(documents), len(scores))
        return scores

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        reraise=True,
    )
    async def _post_rerank(self, payload: dict[str, Any]) -> dict[str, Any]:
        client = await self._get_client()
        response = await client.post("/v2/rerank", json=payload)
        response.raise_for_status()
        result: dict[str, Any] = response.json()
        return result

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
