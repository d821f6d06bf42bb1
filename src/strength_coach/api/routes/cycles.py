"""Training cycle API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..deps import get_cycle_recommender
from ...exceptions import CycleNotFoundError
from ...models.cycles import (
    get_current_phase,
    get_cycle_by_id,
    get_total_weeks_completed,
    is_cycle_complete,
    list_cycles,
)
from ...models.requests import CurrentPhaseRequest, CycleRecommendationRequest
from ...models.sessions import ExerciseType
from ...models.suggestions import CycleRecommendation
from ...recommendations.cycles import CycleRecommender

router = APIRouter()


@router.get("")
async def get_cycles(
    cycle_type: Optional[ExerciseType] = Query(default=None, alias="type"),
):
    """List predefined training cycles, optionally by type."""
    return {"cycles": [cycle.to_dict() for cycle in list_cycles(cycle_type)]}


@router.get("/{cycle_id}")
async def get_cycle(cycle_id: str):
    """
    Get one training cycle.

    Raises:
        CycleNotFoundError: Unknown cycle id
    """
    cycle = get_cycle_by_id(cycle_id)
    if cycle is None:
        raise CycleNotFoundError(cycle_id)
    return cycle.to_dict()


@router.post("/current-phase")
async def get_cycle_progress(request: CurrentPhaseRequest):
    """Resolve the active phase and progress of a user's cycle."""
    state = request.cycle_state
    cycle = get_cycle_by_id(state.cycle_config_id)
    if cycle is None:
        raise CycleNotFoundError(state.cycle_config_id)

    phase = get_current_phase(cycle, state)
    return {
        "cycleId": cycle.id,
        "phase": phase.to_dict() if phase else None,
        "totalWeeksCompleted": get_total_weeks_completed(state, cycle),
        "totalWeeks": cycle.total_weeks,
        "isComplete": is_cycle_complete(cycle, state),
    }


@router.post("/recommendation", response_model=CycleRecommendation)
async def recommend_cycle(
    request: CycleRecommendationRequest,
    recommender: CycleRecommender = Depends(get_cycle_recommender),
):
    """Recommend a training cycle from history, experience and goal."""
    return await recommender.recommend(
        request.sessions,
        request.experience_level,
        request.workout_goal,
        current_cycle_id=request.current_cycle_id,
    )
