"""Build per-exercise suggestion requests and render them into prompts."""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..analysis.body_weight import BodyWeightTrend, calculate_body_weight_trend
from ..analysis.performance import (
    PerformanceAnalyzer,
    build_analysis_context,
    status_label,
)
from ..catalog.exercises import ExerciseCatalog
from ..models.analysis import ExerciseAnalysis, ProgressStatus
from ..models.cycles import PhaseConfig, get_current_phase, get_cycle_by_id
from ..models.goals import (
    ExperienceLevel,
    WorkoutGoal,
    get_experience_guidance,
    get_goal_info,
)
from ..models.profile import UserProfile
from ..models.sessions import WeightUnit, WorkoutSession, WorkoutTemplate
from .prompts import (
    BODY_WEIGHT_CONTEXT,
    PLATEAU_FIELDS,
    PLATEAU_INSTRUCTIONS,
    SUGGESTION_SYSTEM,
    SUGGESTION_USER,
    VOLUME_GUIDANCE,
)

logger = logging.getLogger(__name__)

RECENT_SET_LIMIT = 10


@dataclass(frozen=True)
class RecentSet:
    """A raw logged set, stamped with its session's start time."""

    date: datetime
    weight: float
    reps: int
    unit: WeightUnit

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "weight": self.weight,
            "reps": self.reps,
            "unit": self.unit.value,
        }


@dataclass
class ExerciseSuggestionRequest:
    """Everything the generator needs to suggest one exercise."""

    exercise_id: str
    exercise_name: str
    analysis: ExerciseAnalysis
    training_guidance: str
    weight_unit: WeightUnit = WeightUnit.LBS
    target_sets: Optional[int] = None
    target_reps: Optional[int] = None
    recent_sets: List[RecentSet] = field(default_factory=list)
    body_weight_trend: Optional[BodyWeightTrend] = None
    current_phase: Optional[PhaseConfig] = None
    workout_goal: WorkoutGoal = WorkoutGoal.BUILD
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE

    @property
    def progress_status(self) -> ProgressStatus:
        return self.analysis.progress_status

    @property
    def requires_plateau_guidance(self) -> bool:
        return self.analysis.progress_status == ProgressStatus.PLATEAU

    def to_prompt_context(self) -> Dict[str, Any]:
        """Exercise block serialized into the prompt."""
        return {
            "exerciseId": self.exercise_id,
            "exerciseName": self.exercise_name,
            "targetSets": self.target_sets,
            "targetReps": self.target_reps,
            "recentPerformance": [s.to_dict() for s in self.recent_sets],
            "progressStatus": status_label(self.progress_status),
            "plateauSignals": self.analysis.plateau_signals.describe(),
            "estimated1RMTrend": round(self.analysis.estimated_1rm_trend, 1),
        }


def collect_recent_sets(
    exercise_id: str,
    sessions: List[WorkoutSession],
    limit: int = RECENT_SET_LIMIT,
) -> List[RecentSet]:
    """Most recent strength sets of an exercise across the supplied sessions."""
    collected: List[RecentSet] = []
    for session in sessions:
        for entry in session.exercises:
            if entry.exercise_id != exercise_id:
                continue
            for completed in entry.strength_sets():
                collected.append(RecentSet(
                    date=session.started_at_utc,
                    weight=completed.weight,
                    reps=completed.reps,
                    unit=completed.unit,
                ))

    collected.sort(key=lambda s: s.date, reverse=True)
    return collected[:limit]


def resolve_current_phase(profile: UserProfile) -> Optional[PhaseConfig]:
    """Current phase of the profile's cycle, if any."""
    state = profile.cycle_state
    if state is None:
        return None
    config = get_cycle_by_id(state.cycle_config_id)
    if config is None:
        logger.warning(f"Unknown training cycle '{state.cycle_config_id}', ignoring phase")
        return None
    return get_current_phase(config, state)


def build_training_guidance(
    goal: WorkoutGoal,
    experience: ExperienceLevel,
    phase: Optional[PhaseConfig] = None,
) -> str:
    """
    Guidance text selected by goal, experience level and current phase.

    Without a phase the goal's default guidance and rep range are used.
    """
    goal_info = get_goal_info(goal)
    parts = [
        f"TRAINING GOAL: {goal_info.name}",
        get_experience_guidance(experience),
        VOLUME_GUIDANCE,
    ]

    if phase is None:
        parts.append(goal_info.guidance)
        parts.append(f"Target rep range: {goal_info.default_rep_range}")
        return "\n\n".join(parts)

    phase_lines = [
        f"CURRENT PHASE: {phase.name} ({phase.type.value})",
        f"- Goal: {phase.description}",
        f"- Intensity: {phase.intensity_description}",
    ]
    if phase.rep_range:
        phase_lines.append(f"- Target rep range: {phase.rep_range}")
    phase_lines.append(f"- Guidance: {phase.guidance}")
    parts.append("\n".join(phase_lines))

    if not goal_info.use_progressive_overload:
        parts.append(goal_info.guidance)

    return "\n\n".join(parts)


def build_body_weight_context(trend: Optional[BodyWeightTrend]) -> str:
    if trend is None:
        return ""
    recent = ", ".join(
        f"{e.date.strftime('%b %d')}: {e.weight:g}{trend.unit.value}" for e in trend.recent
    )
    return BODY_WEIGHT_CONTEXT.format(
        current_weight=trend.current_weight,
        unit=trend.unit.value,
        direction=trend.direction.value,
        change=trend.change,
        change_percent=trend.change_percent,
        recent_entries=recent,
    )


def build_suggestion_requests(
    template: WorkoutTemplate,
    sessions: List[WorkoutSession],
    profile: UserProfile,
    analyzer: Optional[PerformanceAnalyzer] = None,
    now: Optional[datetime] = None,
) -> List[ExerciseSuggestionRequest]:
    """
    One request per strength exercise of the template, in template order.

    Args:
        template: Workout template to suggest for
        sessions: Session history
        profile: User profile (goal, experience, unit, cycle, weights)
        analyzer: Analyzer to use; plateau detection is gated on history
        now: Reference time

    Returns:
        List of ExerciseSuggestionRequest
    """
    analyzer = analyzer or PerformanceAnalyzer()
    phase = resolve_current_phase(profile)
    guidance = build_training_guidance(profile.workout_goal, profile.experience_level, phase)
    body_weight = calculate_body_weight_trend(profile.weight_entries, profile.weight_unit, now)
    catalog = ExerciseCatalog(custom_exercises=profile.custom_exercises)

    requests = []
    for template_exercise in template.strength_exercises():
        analysis = analyzer.analyze(
            template_exercise.exercise_id,
            sessions,
            target_reps=template_exercise.target_reps,
            now=now,
        )
        requests.append(ExerciseSuggestionRequest(
            exercise_id=template_exercise.exercise_id,
            exercise_name=catalog.name_for(template_exercise.exercise_id),
            analysis=analysis,
            training_guidance=guidance,
            weight_unit=profile.weight_unit,
            target_sets=template_exercise.target_sets,
            target_reps=template_exercise.target_reps,
            recent_sets=collect_recent_sets(template_exercise.exercise_id, sessions),
            body_weight_trend=body_weight,
            current_phase=phase,
            workout_goal=profile.workout_goal,
            experience_level=profile.experience_level,
        ))
    return requests


def render_suggestion_prompt(request: ExerciseSuggestionRequest) -> Tuple[str, str]:
    """Render a request into (system, user) prompt text."""
    plateau = request.requires_plateau_guidance
    user = SUGGESTION_USER.format(
        training_guidance=request.training_guidance,
        body_weight_context=build_body_weight_context(request.body_weight_trend),
        analysis_context=build_analysis_context([request.analysis], request.weight_unit.value),
        exercise_context=json.dumps(request.to_prompt_context(), indent=2),
        plateau_instructions=PLATEAU_INSTRUCTIONS if plateau else "",
        exercise_id=request.exercise_id,
        plateau_fields=PLATEAU_FIELDS if plateau else "",
        weight_unit=request.weight_unit.value,
    )
    return SUGGESTION_SYSTEM, user
