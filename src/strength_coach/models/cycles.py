"""
Training cycle (periodization) model.

A cycle is a fixed sequence of phases. The user's position inside a cycle is
a ``UserCycleState``; a phase index past the last phase means the cycle is
complete and there is no current phase. Everything here is pure lookup.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .goals import ExperienceLevel, WorkoutGoal
from .sessions import ExerciseType, to_camel


class PhaseType(str, Enum):
    """Phase kinds. Strength and cardio cycles share ``deload``."""
    # Strength
    BASELINE = "baseline"
    ACCUMULATION = "accumulation"
    INTENSIFICATION = "intensification"
    REALIZATION = "realization"
    # Cardio
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"
    # Both
    DELOAD = "deload"


@dataclass(frozen=True)
class PhaseConfig:
    """One phase of a training cycle.

    Rep range is set only for strength phases.
    """

    type: PhaseType
    name: str
    description: str
    duration_weeks: int
    intensity_description: str
    guidance: str
    rep_range_min: Optional[int] = None
    rep_range_max: Optional[int] = None

    @property
    def is_strength(self) -> bool:
        return self.rep_range_min is not None and self.rep_range_max is not None

    @property
    def rep_range(self) -> Optional[str]:
        if not self.is_strength:
            return None
        return f"{self.rep_range_min}-{self.rep_range_max}"

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "type": self.type.value,
            "name": self.name,
            "description": self.description,
            "duration_weeks": self.duration_weeks,
            "intensity_description": self.intensity_description,
            "guidance": self.guidance,
        }
        if self.is_strength:
            result["rep_range_min"] = self.rep_range_min
            result["rep_range_max"] = self.rep_range_max
        return result


@dataclass(frozen=True)
class TrainingCycleConfig:
    """A predefined training cycle."""

    id: str
    name: str
    description: str
    cycle_type: ExerciseType
    phases: Tuple[PhaseConfig, ...]
    recommended_for_experience: Tuple[ExperienceLevel, ...] = field(default_factory=tuple)
    recommended_for_goals: Tuple[WorkoutGoal, ...] = field(default_factory=tuple)

    @property
    def total_weeks(self) -> int:
        return sum(p.duration_weeks for p in self.phases)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "cycle_type": self.cycle_type.value,
            "total_weeks": self.total_weeks,
            "phases": [p.to_dict() for p in self.phases],
            "recommended_for_experience": [e.value for e in self.recommended_for_experience],
            "recommended_for_goals": [g.value for g in self.recommended_for_goals],
        }


class UserCycleState(BaseModel):
    """The user's position within a cycle."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    cycle_config_id: str = Field(..., description="ID of the cycle being followed")
    cycle_start_date: Optional[datetime] = Field(default=None)
    current_phase_index: int = Field(default=0, ge=0)
    current_week_in_phase: int = Field(default=0, ge=0)


# ============================================================================
# Predefined Strength Cycles
# ============================================================================

BEGINNER_4_WEEK_CYCLE = TrainingCycleConfig(
    id="beginner-4",
    name="Beginner (4 weeks)",
    description="Simple 4-week cycle for new lifters. Build foundation then recover.",
    cycle_type=ExerciseType.STRENGTH,
    recommended_for_experience=(ExperienceLevel.BEGINNER,),
    recommended_for_goals=(WorkoutGoal.BUILD, WorkoutGoal.MAINTAIN),
    phases=(
        PhaseConfig(
            type=PhaseType.BASELINE,
            name="Foundation",
            description="Learn movements, establish working weights",
            duration_weeks=1,
            rep_range_min=10,
            rep_range_max=12,
            intensity_description="Light to moderate",
            guidance="Focus on form and technique. Suggest conservative weights. RPE 6-7.",
        ),
        PhaseConfig(
            type=PhaseType.ACCUMULATION,
            name="Build",
            description="Increase work capacity with moderate weights",
            duration_weeks=1,
            rep_range_min=8,
            rep_range_max=10,
            intensity_description="Moderate",
            guidance="Gradual progression. Add 5-10% when hitting all reps easily. RPE 7.",
        ),
        PhaseConfig(
            type=PhaseType.ACCUMULATION,
            name="Build",
            description="Continue building with slightly more intensity",
            duration_weeks=1,
            rep_range_min=8,
            rep_range_max=10,
            intensity_description="Moderate to challenging",
            guidance="Push a bit harder. Small weight increases allowed. RPE 7-8.",
        ),
        PhaseConfig(
            type=PhaseType.DELOAD,
            name="Recovery",
            description="Active recovery week, reduce load",
            duration_weeks=1,
            rep_range_min=10,
            rep_range_max=15,
            intensity_description="Light",
            guidance="Reduce all weights 30-40%. Focus on movement quality and recovery. RPE 5-6.",
        ),
    ),
)

INTERMEDIATE_6_WEEK_CYCLE = TrainingCycleConfig(
    id="intermediate-6",
    name="Intermediate (6 weeks)",
    description="Block periodization with volume, strength and peak phases.",
    cycle_type=ExerciseType.STRENGTH,
    recommended_for_experience=(ExperienceLevel.INTERMEDIATE,),
    recommended_for_goals=(WorkoutGoal.BUILD,),
    phases=(
        PhaseConfig(
            type=PhaseType.ACCUMULATION,
            name="Volume",
            description="Build work capacity with moderate weights and higher volume",
            duration_weeks=2,
            rep_range_min=8,
            rep_range_max=12,
            intensity_description="Moderate",
            guidance="Higher volume focus. 3-4 sets per exercise. Moderate weight progression. RPE 7.",
        ),
        PhaseConfig(
            type=PhaseType.INTENSIFICATION,
            name="Strength",
            description="Reduce volume, increase intensity",
            duration_weeks=2,
            rep_range_min=5,
            rep_range_max=8,
            intensity_description="Heavy",
            guidance="Push for heavier weights. Lower rep targets. Allow longer rest. RPE 8.",
        ),
        PhaseConfig(
            type=PhaseType.REALIZATION,
            name="Peak",
            description="Test strength, attempt PRs",
            duration_weeks=1,
            rep_range_min=3,
            rep_range_max=5,
            intensity_description="Very heavy",
            guidance="PR attempts encouraged. Low volume, high intensity. Full recovery between sets. RPE 9.",
        ),
        PhaseConfig(
            type=PhaseType.DELOAD,
            name="Recovery",
            description="Active recovery",
            duration_weeks=1,
            rep_range_min=10,
            rep_range_max=15,
            intensity_description="Light",
            guidance="Light weights, focus on mobility and form. RPE 5.",
        ),
    ),
)

ADVANCED_8_WEEK_CYCLE = TrainingCycleConfig(
    id="advanced-8",
    name="Advanced (8 weeks)",
    description="Comprehensive periodization with multiple training blocks.",
    cycle_type=ExerciseType.STRENGTH,
    recommended_for_experience=(ExperienceLevel.ADVANCED,),
    recommended_for_goals=(WorkoutGoal.BUILD,),
    phases=(
        PhaseConfig(
            type=PhaseType.ACCUMULATION,
            name="Hypertrophy",
            description="High volume, moderate intensity for muscle growth",
            duration_weeks=2,
            rep_range_min=8,
            rep_range_max=12,
            intensity_description="Moderate",
            guidance="High volume focus. 4+ sets. Moderate weights. Focus on time under tension. RPE 7.",
        ),
        PhaseConfig(
            type=PhaseType.INTENSIFICATION,
            name="Strength",
            description="Build maximal strength",
            duration_weeks=2,
            rep_range_min=4,
            rep_range_max=6,
            intensity_description="Heavy",
            guidance="Heavier weights, lower reps. Push intensity. Longer rest periods. RPE 8.",
        ),
        PhaseConfig(
            type=PhaseType.ACCUMULATION,
            name="Volume",
            description="Return to volume work at higher weights",
            duration_weeks=2,
            rep_range_min=6,
            rep_range_max=10,
            intensity_description="Moderate to heavy",
            guidance="Moderate to high volume. Build from previous strength block. RPE 7-8.",
        ),
        PhaseConfig(
            type=PhaseType.REALIZATION,
            name="Peak",
            description="Maximize performance, test limits",
            duration_weeks=1,
            rep_range_min=1,
            rep_range_max=3,
            intensity_description="Maximal",
            guidance="Max effort attempts. Minimal volume. Full recovery. RPE 9-10.",
        ),
        PhaseConfig(
            type=PhaseType.DELOAD,
            name="Recovery",
            description="Complete recovery before next cycle",
            duration_weeks=1,
            rep_range_min=12,
            rep_range_max=15,
            intensity_description="Very light",
            guidance="Very light weights. Focus on movement quality and recovery. RPE 5.",
        ),
    ),
)

# ============================================================================
# Predefined Cardio Cycles
# ============================================================================

CARDIO_4_WEEK_CYCLE = TrainingCycleConfig(
    id="cardio-4",
    name="Cardio Base (4 weeks)",
    description="Build aerobic base with progressive intensity.",
    cycle_type=ExerciseType.CARDIO,
    recommended_for_experience=(ExperienceLevel.BEGINNER, ExperienceLevel.INTERMEDIATE),
    recommended_for_goals=(WorkoutGoal.LOSE, WorkoutGoal.MAINTAIN),
    phases=(
        PhaseConfig(
            type=PhaseType.EASY,
            name="Easy",
            description="Low intensity, build aerobic base",
            duration_weeks=1,
            intensity_description="Zone 1-2, conversational pace",
            guidance="Keep heart rate low. Focus on consistency over speed. Can hold conversation.",
        ),
        PhaseConfig(
            type=PhaseType.MODERATE,
            name="Moderate",
            description="Increase duration and moderate intensity",
            duration_weeks=1,
            intensity_description="Zone 2-3, comfortable but challenging",
            guidance="Comfortable but challenging. Breathing harder but controlled.",
        ),
        PhaseConfig(
            type=PhaseType.HARD,
            name="Hard",
            description="Higher intensity, test limits",
            duration_weeks=1,
            intensity_description="Zone 3-4, pushing pace",
            guidance="Push pace. Include tempo or interval work. Challenging effort.",
        ),
        PhaseConfig(
            type=PhaseType.DELOAD,
            name="Recovery",
            description="Active recovery",
            duration_weeks=1,
            intensity_description="Zone 1-2, very easy",
            guidance="Very easy pace. Reduce duration. Recovery focus.",
        ),
    ),
)

CARDIO_6_WEEK_CYCLE = TrainingCycleConfig(
    id="cardio-6",
    name="Cardio Performance (6 weeks)",
    description="Progressive cardio training for improved performance.",
    cycle_type=ExerciseType.CARDIO,
    recommended_for_experience=(ExperienceLevel.INTERMEDIATE, ExperienceLevel.ADVANCED),
    recommended_for_goals=(WorkoutGoal.LOSE, WorkoutGoal.MAINTAIN),
    phases=(
        PhaseConfig(
            type=PhaseType.EASY,
            name="Base",
            description="Establish aerobic foundation",
            duration_weeks=2,
            intensity_description="Zone 2, easy effort",
            guidance="Build aerobic base. Longer, slower sessions. Focus on consistency.",
        ),
        PhaseConfig(
            type=PhaseType.MODERATE,
            name="Build",
            description="Progressive overload on cardio",
            duration_weeks=2,
            intensity_description="Zone 2-3, steady state",
            guidance="Increase duration or intensity gradually. Steady challenging effort.",
        ),
        PhaseConfig(
            type=PhaseType.HARD,
            name="Peak",
            description="High intensity work",
            duration_weeks=1,
            intensity_description="Zone 4-5, high effort",
            guidance="Interval training, tempo work. Push limits. Shorter but intense.",
        ),
        PhaseConfig(
            type=PhaseType.DELOAD,
            name="Recovery",
            description="Active recovery",
            duration_weeks=1,
            intensity_description="Zone 1-2, recovery",
            guidance="Easy effort. Reduced duration. Focus on recovery.",
        ),
    ),
)

PREDEFINED_CYCLES: Tuple[TrainingCycleConfig, ...] = (
    BEGINNER_4_WEEK_CYCLE,
    INTERMEDIATE_6_WEEK_CYCLE,
    ADVANCED_8_WEEK_CYCLE,
    CARDIO_4_WEEK_CYCLE,
    CARDIO_6_WEEK_CYCLE,
)

DEFAULT_CYCLE_BY_TYPE: Dict[ExerciseType, TrainingCycleConfig] = {
    ExerciseType.STRENGTH: BEGINNER_4_WEEK_CYCLE,
    ExerciseType.CARDIO: CARDIO_4_WEEK_CYCLE,
}


# ============================================================================
# Lookups
# ============================================================================

def get_current_phase(
    config: TrainingCycleConfig,
    state: UserCycleState,
) -> Optional[PhaseConfig]:
    """Return the active phase, or None once the cycle is complete."""
    if state.current_phase_index >= len(config.phases):
        return None
    return config.phases[state.current_phase_index]


def get_total_weeks_completed(state: UserCycleState, config: TrainingCycleConfig) -> int:
    """Weeks of all finished phases plus weeks into the current one."""
    finished = config.phases[: state.current_phase_index]
    return sum(p.duration_weeks for p in finished) + state.current_week_in_phase


def is_cycle_complete(config: TrainingCycleConfig, state: UserCycleState) -> bool:
    return state.current_phase_index >= len(config.phases)


def get_cycle_by_id(cycle_id: str) -> Optional[TrainingCycleConfig]:
    for cycle in PREDEFINED_CYCLES:
        if cycle.id == cycle_id:
            return cycle
    return None


def list_cycles(cycle_type: Optional[ExerciseType] = None) -> List[TrainingCycleConfig]:
    """All predefined cycles, optionally filtered by type."""
    if cycle_type is None:
        return list(PREDEFINED_CYCLES)
    return [c for c in PREDEFINED_CYCLES if c.cycle_type == cycle_type]


def get_default_cycle(
    experience: ExperienceLevel,
    goal: WorkoutGoal,
    cycle_type: ExerciseType = ExerciseType.STRENGTH,
) -> TrainingCycleConfig:
    """
    Pick the default cycle for a user.

    The first cycle of ``cycle_type`` recommended for both the experience
    level and the goal wins; otherwise the fixed default of that type.
    """
    for cycle in list_cycles(cycle_type):
        if experience in cycle.recommended_for_experience and goal in cycle.recommended_for_goals:
            return cycle
    return DEFAULT_CYCLE_BY_TYPE[cycle_type]
