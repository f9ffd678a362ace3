"""
CLI Interface - Command-line tools for RagRank.

Provides commands for:
- Hybrid chunk search
- Whole-document discovery
- Database initialization
"""

from .main import app, main

__all__ = ["app", "main"]
