"""Dependency injection for API routes."""

from functools import lru_cache

from fastapi import Depends

from ..analysis.cache import AnalysisCache
from ..analysis.performance import PerformanceAnalyzer
from ..config import get_settings
from ..db.suggestion_cache import SuggestionCacheRepository
from ..recommendations.cycles import CycleRecommender
from ..recommendations.suggestions import SuggestionService


def get_analysis_cache() -> AnalysisCache:
    """Analysis cache scoped to one request and its session history."""
    return AnalysisCache()


@lru_cache
def get_suggestion_cache() -> SuggestionCacheRepository:
    """Get the persisted suggestion cache."""
    settings = get_settings()
    return SuggestionCacheRepository(
        settings.suggestion_cache_path,
        ttl_seconds=settings.suggestion_cache_ttl_seconds,
    )


def get_suggestion_service(
    analysis_cache: AnalysisCache = Depends(get_analysis_cache),
) -> SuggestionService:
    """Get a suggestion service for one request."""
    return SuggestionService(
        cache_repository=get_suggestion_cache(),
        analyzer=PerformanceAnalyzer(cache=analysis_cache),
    )


def get_cycle_recommender(
    analysis_cache: AnalysisCache = Depends(get_analysis_cache),
) -> CycleRecommender:
    """Get a cycle recommender for one request."""
    return CycleRecommender(analyzer=PerformanceAnalyzer(cache=analysis_cache))
