"""
Orchestration Models - Data types for the answer cache.
"""

from __future__ import annotations

from pydantic import BaseModel


class ChatMessage(BaseModel):
    """One turn of the conversation window."""

    role: str  # system, user, assistant
    content: str

    model_config = {"frozen": True}


class CacheEntry(BaseModel):
    """Cached answer text with its insertion time (cache clock seconds)."""

    response: str
    created_at: float


class ChatCompletion(BaseModel):
    """Answer returned by a (possibly cached) chat provider."""

    content: str
    model: str
    finish_reason: str = "stop"
    cached: bool = False
