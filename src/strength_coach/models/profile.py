"""User profile model."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..catalog.exercises import ExerciseInfo
from .cycles import UserCycleState
from .goals import ExperienceLevel, WorkoutGoal
from .sessions import WeightEntry, WeightUnit, to_camel


class UserProfile(BaseModel):
    """Settings of the user that shape suggestions.

    ``cycle_state`` and ``custom_exercises`` are optional; weight entries feed
    the body-weight trend.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    workout_goal: WorkoutGoal = Field(default=WorkoutGoal.BUILD)
    experience_level: ExperienceLevel = Field(default=ExperienceLevel.INTERMEDIATE)
    weight_unit: WeightUnit = Field(default=WeightUnit.LBS)
    cycle_state: Optional[UserCycleState] = Field(default=None)
    weight_entries: List[WeightEntry] = Field(default_factory=list)
    custom_exercises: List[ExerciseInfo] = Field(default_factory=list)
