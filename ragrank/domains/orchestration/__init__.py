"""
Orchestration Domain - Answer generation support.

This domain handles:
- Response caching for near-deterministic requests
- Cache-aware chat provider wrapping
"""

from .cache import DEFAULT_TEMPERATURE, CachingChatProvider, ResponseCache
from .contracts import AnswerCache, ChatProvider
from .models import CacheEntry, ChatCompletion, ChatMessage

__all__ = [
    # Contracts
    "ChatProvider",
    "AnswerCache",
    # Models
    "ChatMessage",
    "CacheEntry",
    "ChatCompletion",
    # Implementations
    "ResponseCache",
    "CachingChatProvider",
    "DEFAULT_TEMPERATURE",
]
