"""
Deterministic local suggestions.

Computes a weight/rep suggestion from recent sessions alone. Used as the
fallback whenever generation fails, and usable on its own.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from ..analysis.outliers import filter_outliers, median
from ..analysis.performance import PerformanceAnalyzer, round_half_up
from ..models.analysis import ExerciseAnalysis, ProgressStatus, unknown_status
from ..models.cycles import PhaseConfig, PhaseType
from ..models.goals import ExperienceLevel, WorkoutGoal
from ..models.profile import UserProfile
from ..models.sessions import CompletedSet, WeightUnit, WorkoutSession, WorkoutTemplate
from ..models.suggestions import (
    Confidence,
    ExerciseSuggestion,
    RepRangeChange,
    SuggestionSource,
)

DEFAULT_TARGET_REPS = 10
RECENT_SESSION_LIMIT = 10
WORKING_SESSION_SAMPLE = 5

WEIGHT_ROUNDING = {WeightUnit.LBS: 2.5, WeightUnit.KG: 1.25}

PLATEAU_WEIGHT_FACTOR = 0.9
DECLINING_WEIGHT_FACTOR = 0.875
DELOAD_WEIGHT_FACTOR = 0.7
INTENSIFICATION_WEIGHT_FACTOR = 1.05


@dataclass(frozen=True)
class LocalSuggestionContext:
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    workout_goal: WorkoutGoal = WorkoutGoal.BUILD
    weight_unit: WeightUnit = WeightUnit.LBS
    current_phase: Optional[PhaseConfig] = None


def round_weight(weight: float, unit: WeightUnit) -> float:
    """Round to the nearest plate increment of the unit."""
    increment = WEIGHT_ROUNDING[unit]
    return round_half_up(weight / increment) * increment


def progression_increment(experience: ExperienceLevel, unit: WeightUnit) -> float:
    if unit == WeightUnit.KG:
        return 2.5 if experience == ExperienceLevel.BEGINNER else 1.25
    return 5.0 if experience == ExperienceLevel.BEGINNER else 2.5


def collect_recent_session_sets(
    exercise_id: str,
    sessions: List[WorkoutSession],
    limit: int = RECENT_SESSION_LIMIT,
) -> List[List[CompletedSet]]:
    """Strength sets per session for an exercise, newest completed sessions first."""
    completed = sorted(
        (s for s in sessions if s.is_completed),
        key=lambda s: s.started_at_utc,
        reverse=True,
    )
    per_session: List[List[CompletedSet]] = []
    for session in completed[:limit]:
        for entry in session.exercises:
            if entry.exercise_id != exercise_id:
                continue
            strength_sets = entry.strength_sets()
            if strength_sets:
                per_session.append(strength_sets)
    return per_session


def _working_weight_and_reps(
    recent_session_sets: Sequence[Sequence[CompletedSet]],
) -> Tuple[float, float]:
    max_weights = []
    avg_reps = []
    for sets in recent_session_sets[:WORKING_SESSION_SAMPLE]:
        kept = filter_outliers(list(sets), lambda s: s.weight)
        if not kept:
            continue
        top = max(s.weight for s in kept)
        reps = sum(s.reps for s in kept) / len(kept)
        if top > 0:
            max_weights.append(top)
        if reps > 0:
            avg_reps.append(reps)
    return median(max_weights), median(avg_reps)


def calculate_local_suggestion(
    exercise_id: str,
    analysis: ExerciseAnalysis,
    context: LocalSuggestionContext,
    target_reps: Optional[int],
    recent_session_sets: Sequence[Sequence[CompletedSet]],
    exercise_name: Optional[str] = None,
) -> ExerciseSuggestion:
    """
    Suggest weight and reps for one exercise without the generator.

    Args:
        exercise_id: Exercise to suggest for
        analysis: Progress analysis of the exercise
        context: Experience, goal, unit and current phase
        target_reps: Template rep target (10 when unset)
        recent_session_sets: Strength sets per recent session, newest first
        exercise_name: Display name for the reasoning text

    Returns:
        ExerciseSuggestion with ``source=local``
    """
    name = exercise_name or analysis.exercise_name or exercise_id
    target = target_reps or DEFAULT_TARGET_REPS
    unit = context.weight_unit

    working_weight, median_reps = _working_weight_and_reps(recent_session_sets)
    working_reps = round_half_up(median_reps) or target

    if working_weight == 0:
        return ExerciseSuggestion(
            exercise_id=exercise_id,
            suggested_weight=0,
            suggested_reps=target,
            reasoning=f"Start light and establish your working weight for {name}",
            confidence=Confidence.LOW,
            progress_status=ProgressStatus.INSUFFICIENT_DATA,
            source=SuggestionSource.LOCAL,
        )

    status = analysis.progress_status
    technique_tip = None
    rep_range_change = None

    if status == ProgressStatus.IMPROVING:
        if context.experience_level == ExperienceLevel.ADVANCED:
            working_reps = min(working_reps + 1, target + 3)
            reasoning = f"Progressing well, adding 1 rep for {name}"
        else:
            increment = progression_increment(context.experience_level, unit)
            working_weight += increment
            reasoning = f"Progressing well, adding {increment:g} {unit.value} for {name}"
    elif status == ProgressStatus.PLATEAU:
        previous_reps = working_reps
        working_weight *= PLATEAU_WEIGHT_FACTOR
        working_reps += 2
        reasoning = f"Plateau detected, reducing weight 10% and increasing reps for {name}"
        technique_tip = "Break the plateau with lighter weight and more reps, controlling each rep"
        rep_range_change = RepRangeChange(
            from_range=f"{previous_reps} reps",
            to_range=f"{working_reps} reps",
            reason="Higher volume at lower load to restart progress",
        )
    elif status == ProgressStatus.DECLINING:
        working_weight *= DECLINING_WEIGHT_FACTOR
        reasoning = f"Performance declining, reducing weight 12.5% for recovery on {name}"
    elif status == ProgressStatus.INSUFFICIENT_DATA:
        reasoning = f"Continue with your current weight for {name}"
    else:
        raise unknown_status(status)

    phase = context.current_phase
    if phase is not None:
        if phase.type == PhaseType.DELOAD:
            working_weight *= DELOAD_WEIGHT_FACTOR
            working_reps = max(target, 10)
            reasoning = f"Deload phase, reducing weight ~30% for {name}"
        elif phase.type == PhaseType.ACCUMULATION:
            working_reps = max(working_reps, target)
            if phase.is_strength:
                working_reps = min(working_reps, phase.rep_range_max)
        elif phase.type in (PhaseType.INTENSIFICATION, PhaseType.REALIZATION):
            working_weight *= INTENSIFICATION_WEIGHT_FACTOR
            if phase.is_strength:
                working_reps = max(phase.rep_range_min, min(working_reps, phase.rep_range_max))
            else:
                working_reps = max(3, working_reps - 2)

    working_weight = max(0.0, round_weight(working_weight, unit))
    working_reps = max(1, working_reps)

    return ExerciseSuggestion(
        exercise_id=exercise_id,
        suggested_weight=working_weight,
        suggested_reps=working_reps,
        reasoning=reasoning,
        confidence=Confidence.LOW if status == ProgressStatus.INSUFFICIENT_DATA else Confidence.MEDIUM,
        progress_status=status,
        technique_tip=technique_tip,
        rep_range_change=rep_range_change,
        source=SuggestionSource.LOCAL,
    )


def get_local_suggestions(
    template: WorkoutTemplate,
    sessions: List[WorkoutSession],
    profile: UserProfile,
    analyzer: Optional[PerformanceAnalyzer] = None,
    current_phase: Optional[PhaseConfig] = None,
    now: Optional[datetime] = None,
) -> List[ExerciseSuggestion]:
    """Local suggestions for every strength exercise of a template."""
    analyzer = analyzer or PerformanceAnalyzer()
    context = LocalSuggestionContext(
        experience_level=profile.experience_level,
        workout_goal=profile.workout_goal,
        weight_unit=profile.weight_unit,
        current_phase=current_phase,
    )

    suggestions = []
    for template_exercise in template.strength_exercises():
        analysis = analyzer.analyze(
            template_exercise.exercise_id,
            sessions,
            target_reps=template_exercise.target_reps,
            now=now,
        )
        suggestions.append(calculate_local_suggestion(
            template_exercise.exercise_id,
            analysis,
            context,
            template_exercise.target_reps,
            collect_recent_session_sets(template_exercise.exercise_id, sessions),
        ))
    return suggestions
