"""Exercise analysis API routes."""

import logging

from fastapi import APIRouter, Depends

from ..deps import get_analysis_cache
from ...analysis.cache import AnalysisCache
from ...analysis.performance import PerformanceAnalyzer
from ...analysis.sufficiency import has_enough_history_for_plateau_detection
from ...catalog.exercises import ExerciseCatalog
from ...models.requests import DeloadRequest, ExerciseAnalysisRequest, HistoryRequest
from ...recommendations.deload import DeloadRecommendation, recommend_deload

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/exercises/{exercise_id}")
async def analyze_exercise(
    exercise_id: str,
    request: ExerciseAnalysisRequest,
    cache: AnalysisCache = Depends(get_analysis_cache),
):
    """
    Analyze ten weeks of history for one exercise.

    Args:
        exercise_id: Catalog ID of the exercise
        request: Sessions, optional rep target and custom exercises

    Returns:
        The exercise analysis
    """
    analyzer = PerformanceAnalyzer(
        cache=cache,
        catalog=ExerciseCatalog(custom_exercises=request.custom_exercises),
    )
    analysis = analyzer.analyze(
        exercise_id,
        request.sessions,
        target_reps=request.target_reps,
        enable_plateau_detection=request.enable_plateau_detection,
    )
    logger.info(f"Analyzed {exercise_id}: {analysis.progress_status.value}")
    return analysis.to_dict()


@router.post("/sufficiency")
async def check_history_sufficiency(request: HistoryRequest):
    """Whether the history is long enough for plateau detection."""
    return {"enoughHistory": has_enough_history_for_plateau_detection(request.sessions)}


@router.post("/deload", response_model=DeloadRecommendation)
async def check_deload(
    request: DeloadRequest,
    cache: AnalysisCache = Depends(get_analysis_cache),
):
    """
    Decide whether a recovery week is due.

    Raises:
        CycleNotFoundError: The cycle state names an unknown cycle
    """
    analyzer = PerformanceAnalyzer(
        cache=cache,
        catalog=ExerciseCatalog(custom_exercises=request.custom_exercises),
    )
    return recommend_deload(request.sessions, request.cycle_state, analyzer=analyzer)
