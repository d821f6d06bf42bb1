"""Workout session, template and body-weight data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def to_naive_utc(value: datetime) -> datetime:
    """Normalize a datetime to naive UTC so aware and naive values compare."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utc_now() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class WeightUnit(str, Enum):
    """Unit used for weights."""
    LBS = "lbs"
    KG = "kg"


class ExerciseType(str, Enum):
    """Kind of exercise or set."""
    STRENGTH = "strength"
    CARDIO = "cardio"


class CompletedSet(BaseModel):
    """A single logged set."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    type: ExerciseType = Field(default=ExerciseType.STRENGTH, description="Set kind")
    weight: float = Field(default=0.0, description="Load lifted")
    reps: int = Field(default=0, description="Repetitions completed")
    unit: WeightUnit = Field(default=WeightUnit.LBS, description="Weight unit")
    completed_at: Optional[datetime] = Field(default=None, description="When the set was logged")

    @property
    def is_strength(self) -> bool:
        return self.type == ExerciseType.STRENGTH


class SessionExercise(BaseModel):
    """An exercise entry inside a session, with its logged sets."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    exercise_id: str = Field(..., description="Exercise catalog ID")
    type: ExerciseType = Field(default=ExerciseType.STRENGTH)
    target_sets: Optional[int] = Field(default=None)
    target_reps: Optional[int] = Field(default=None)
    sets: List[CompletedSet] = Field(default_factory=list)

    def strength_sets(self) -> List[CompletedSet]:
        """Return only the strength sets of this entry."""
        return [s for s in self.sets if s.is_strength]


class WorkoutSession(BaseModel):
    """A workout session. Incomplete sessions have no ``completed_at``."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(..., description="Session ID")
    name: Optional[str] = Field(default=None)
    template_id: Optional[str] = Field(default=None)
    started_at: datetime = Field(..., description="Session start time")
    completed_at: Optional[datetime] = Field(default=None, description="Completion time")
    exercises: List[SessionExercise] = Field(default_factory=list)
    mood: Optional[int] = Field(default=None, ge=1, le=5, description="Post-workout mood, 1-5")

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def started_at_utc(self) -> datetime:
        return to_naive_utc(self.started_at)


class WeightEntry(BaseModel):
    """A body-weight log entry."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    date: datetime
    weight: float
    unit: WeightUnit = WeightUnit.LBS


class TemplateExercise(BaseModel):
    """An exercise slot in a workout template."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    exercise_id: str
    type: ExerciseType = ExerciseType.STRENGTH
    target_sets: Optional[int] = None
    target_reps: Optional[int] = None
    rest_seconds: Optional[int] = None


class WorkoutTemplate(BaseModel):
    """A reusable workout plan."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    name: str = ""
    exercises: List[TemplateExercise] = Field(default_factory=list)

    def strength_exercises(self) -> List[TemplateExercise]:
        """Template exercises that receive weight/rep suggestions."""
        return [ex for ex in self.exercises if ex.type == ExerciseType.STRENGTH]


def count_completed_sessions(sessions: List[WorkoutSession]) -> int:
    """Count completed sessions across the whole history."""
    return sum(1 for s in sessions if s.is_completed)
