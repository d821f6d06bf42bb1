"""API request bodies."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..catalog.exercises import ExerciseInfo
from .cycles import UserCycleState
from .goals import ExperienceLevel, WorkoutGoal
from .profile import UserProfile
from .sessions import WorkoutSession, WorkoutTemplate, to_camel


class ExerciseAnalysisRequest(BaseModel):
    """Request for a ten-week exercise analysis."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "sessions": [],
                "targetReps": 8,
            }
        },
    )

    sessions: List[WorkoutSession] = Field(default_factory=list)
    target_reps: Optional[int] = Field(default=None, ge=1, description="Rep target")
    enable_plateau_detection: Optional[bool] = Field(
        default=None,
        description="Force plateau detection on or off; history decides when omitted",
    )
    custom_exercises: List[ExerciseInfo] = Field(default_factory=list)


class HistoryRequest(BaseModel):
    """A bare session history."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sessions: List[WorkoutSession] = Field(default_factory=list)


class SuggestionsRequest(BaseModel):
    """Request for pre-workout suggestions."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    template: WorkoutTemplate
    sessions: List[WorkoutSession] = Field(default_factory=list)
    profile: UserProfile = Field(default_factory=UserProfile)


class CurrentPhaseRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    cycle_state: UserCycleState


class CycleRecommendationRequest(BaseModel):
    """Request for a training cycle recommendation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sessions: List[WorkoutSession] = Field(default_factory=list)
    experience_level: ExperienceLevel = Field(default=ExperienceLevel.INTERMEDIATE)
    workout_goal: WorkoutGoal = Field(default=WorkoutGoal.BUILD)
    current_cycle_id: Optional[str] = Field(default=None)


class DeloadRequest(BaseModel):
    """Request for a deload check."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sessions: List[WorkoutSession] = Field(default_factory=list)
    cycle_state: Optional[UserCycleState] = Field(default=None)
    custom_exercises: List[ExerciseInfo] = Field(default_factory=list)
