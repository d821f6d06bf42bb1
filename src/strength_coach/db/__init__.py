"""Persistence for generated suggestions."""

from .suggestion_cache import (
    SuggestionCacheEntry,
    SuggestionCacheRepository,
    compute_sessions_hash,
)

__all__ = ["SuggestionCacheEntry", "SuggestionCacheRepository", "compute_sessions_hash"]
