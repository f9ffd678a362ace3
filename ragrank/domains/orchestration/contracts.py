"""
Orchestration Contracts - Interfaces for orchestration domain.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from .models import ChatMessage


@runtime_checkable
class ChatProvider(Protocol):
    """Contract for the answer generator."""

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        model: str,
        temperature: float,
    ) -> str:
        """
        Generate an answer.

        Args:
            messages: Conversation window
            model: Model identifier
            temperature: Sampling temperature

        Returns:
            Generated answer text
        """
        ...


@runtime_checkable
class AnswerCache(Protocol):
    """Contract for generated-answer caching."""

    def is_cacheable(self, temperature: float) -> bool:
        """Whether requests at this temperature may be cached."""
        ...

    async def get(
        self,
        messages: Sequence[ChatMessage],
        model: str,
        temperature: float,
    ) -> str | None:
        """Get cached answer."""
        ...

    async def set(
        self,
        messages: Sequence[ChatMessage],
        model: str,
        temperature: float,
        response: str,
    ) -> None:
        """Cache an answer."""
        ...
