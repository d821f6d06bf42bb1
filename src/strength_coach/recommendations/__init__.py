"""Suggestion, cycle and deload recommendation services."""

from .cycles import CycleRecommender, get_default_recommendation
from .deload import DeloadRecommendation, detect_deload_need, recommend_deload
from .local import calculate_local_suggestion, get_local_suggestions
from .suggestions import SuggestionService

__all__ = [
    "CycleRecommender",
    "DeloadRecommendation",
    "SuggestionService",
    "calculate_local_suggestion",
    "detect_deload_need",
    "get_default_recommendation",
    "get_local_suggestions",
    "recommend_deload",
]
