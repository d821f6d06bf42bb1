"""Training goals and experience levels."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class WorkoutGoal(str, Enum):
    """Overall training goal."""
    BUILD = "build"
    LOSE = "lose"
    MAINTAIN = "maintain"


class ExperienceLevel(str, Enum):
    """Lifting experience level."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


@dataclass(frozen=True)
class GoalInfo:
    """Static description of a training goal."""

    goal: WorkoutGoal
    name: str
    description: str
    use_progressive_overload: bool
    default_rep_range: str
    guidance: str


WORKOUT_GOALS: Dict[WorkoutGoal, GoalInfo] = {
    WorkoutGoal.BUILD: GoalInfo(
        goal=WorkoutGoal.BUILD,
        name="Build Muscle",
        description="Progressive overload to gain strength and size",
        use_progressive_overload=True,
        default_rep_range="6-12 reps",
        guidance=(
            "Focus on progressive overload. Follow the current phase's guidance for "
            "weight adjustments and rep ranges. Aim to increase weight or reps over time."
        ),
    ),
    WorkoutGoal.LOSE: GoalInfo(
        goal=WorkoutGoal.LOSE,
        name="Lose Weight",
        description="Preserve muscle while in caloric deficit",
        use_progressive_overload=False,
        default_rep_range="6-10 reps",
        guidance=(
            "Maintain current working weights to preserve muscle mass during caloric "
            "deficit. Do NOT suggest weight increases. Keep weights heavy (6-10 reps) "
            "to signal muscle retention. Prioritize form and recovery."
        ),
    ),
    WorkoutGoal.MAINTAIN: GoalInfo(
        goal=WorkoutGoal.MAINTAIN,
        name="Maintain",
        description="Keep current fitness level steady",
        use_progressive_overload=False,
        default_rep_range="8-12 reps",
        guidance=(
            "Maintain consistent weights and volume. No progression needed. Keep rep "
            "ranges moderate (8-12 reps) and suggest the same weights as previous sessions."
        ),
    ),
}


EXPERIENCE_GUIDANCE: Dict[ExperienceLevel, str] = {
    ExperienceLevel.BEGINNER: """EXPERIENCE LEVEL: Beginner (Less than 1 year of training)
- Neuromuscular adaptations allow faster progression
- Can expect 5-10% weight increases when progressing
- Focus on form while progressing, technique is still developing""",
    ExperienceLevel.INTERMEDIATE: """EXPERIENCE LEVEL: Intermediate (1-2 years of training)
- Moderate progression rate expected
- Can expect 2-5% weight increases when progressing
- May need to cycle rep ranges to continue progress""",
    ExperienceLevel.ADVANCED: """EXPERIENCE LEVEL: Advanced (2+ years of consistent training)
- Progression is slow and hard-earned
- Expect only 1-2.5% weight increases at most
- Volume manipulation matters more than linear weight increases
- Small PRs are significant achievements at this level""",
}


def get_goal_info(goal: WorkoutGoal) -> GoalInfo:
    """Look up the static info for a goal."""
    return WORKOUT_GOALS[goal]


def get_experience_guidance(level: ExperienceLevel) -> str:
    """Progression guidance text for an experience level."""
    return EXPERIENCE_GUIDANCE[level]
