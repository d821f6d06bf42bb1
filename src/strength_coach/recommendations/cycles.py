"""
Training cycle recommendation.

Aggregates the session history, asks the generator to pick a cycle from the
predefined catalog, and falls back to a deterministic recommendation by
experience level when history is short or generation fails.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from ..analysis.performance import PerformanceAnalyzer
from ..analysis.sufficiency import has_enough_history_for_plateau_detection
from ..config import get_settings
from ..llm.orchestrator import GenerationOutcome, generate_with_fallback
from ..llm.parsing import parse_model
from ..llm.prompts import CYCLE_RECOMMENDATION_SYSTEM, CYCLE_RECOMMENDATION_USER
from ..llm.providers import LLMClient, ModelType, get_llm_client
from ..models.analysis import ProgressStatus
from ..models.cycles import PREDEFINED_CYCLES, get_cycle_by_id
from ..models.goals import ExperienceLevel, WorkoutGoal
from ..models.sessions import ExerciseType, WorkoutSession, to_naive_utc, utc_now
from ..models.suggestions import Confidence, CycleRecommendation, SuggestionSource

logger = logging.getLogger(__name__)

MIN_SESSIONS_FOR_GENERATED = 3
WEEKLY_AVERAGE_WEEKS = 8
CYCLE_MAX_TOKENS = 400


@dataclass(frozen=True)
class CycleRecommendationInput:
    """History aggregate behind a cycle recommendation."""

    experience_level: ExperienceLevel
    workout_goal: WorkoutGoal
    total_completed: int
    weekly_average: float
    plateau_count: int
    is_cardio_primary: bool
    current_cycle_id: Optional[str] = None

    @property
    def has_plateaus(self) -> bool:
        return self.plateau_count > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "experience_level": self.experience_level.value,
            "workout_goal": self.workout_goal.value,
            "total_completed": self.total_completed,
            "weekly_average": self.weekly_average,
            "plateau_count": self.plateau_count,
            "is_cardio_primary": self.is_cardio_primary,
            "current_cycle_id": self.current_cycle_id,
        }


def aggregate_cycle_recommendation_data(
    sessions: List[WorkoutSession],
    experience_level: ExperienceLevel,
    workout_goal: WorkoutGoal,
    current_cycle_id: Optional[str] = None,
    analyzer: Optional[PerformanceAnalyzer] = None,
    now: Optional[datetime] = None,
) -> CycleRecommendationInput:
    """Summarize the history for the cycle prompt."""
    now = to_naive_utc(now) if now else utc_now()
    analyzer = analyzer or PerformanceAnalyzer()
    completed = [s for s in sessions if s.is_completed]

    cutoff = now - timedelta(weeks=WEEKLY_AVERAGE_WEEKS)
    recent = [s for s in completed if to_naive_utc(s.completed_at) >= cutoff]
    weekly_average = round(len(recent) / WEEKLY_AVERAGE_WEEKS, 1)

    cardio_only = [
        s for s in completed
        if any(e.type == ExerciseType.CARDIO for e in s.exercises)
        and not any(e.type == ExerciseType.STRENGTH for e in s.exercises)
    ]
    is_cardio_primary = bool(completed) and len(cardio_only) > len(completed) / 2

    strength_ids = []
    for session in completed:
        for entry in session.exercises:
            if entry.type == ExerciseType.STRENGTH and entry.exercise_id not in strength_ids:
                strength_ids.append(entry.exercise_id)

    enabled = has_enough_history_for_plateau_detection(sessions, now)
    plateau_count = sum(
        1 for exercise_id in strength_ids
        if analyzer.analyze(exercise_id, sessions, enable_plateau_detection=enabled, now=now).progress_status
        == ProgressStatus.PLATEAU
    )

    return CycleRecommendationInput(
        experience_level=experience_level,
        workout_goal=workout_goal,
        total_completed=len(completed),
        weekly_average=weekly_average,
        plateau_count=plateau_count,
        is_cardio_primary=is_cardio_primary,
        current_cycle_id=current_cycle_id,
    )


def get_default_recommendation(
    experience_level: ExperienceLevel,
    is_cardio_primary: bool = False,
) -> CycleRecommendation:
    """Deterministic recommendation by experience level."""
    if is_cardio_primary:
        if experience_level == ExperienceLevel.BEGINNER:
            return CycleRecommendation(
                recommended_cycle_id="cardio-4",
                reasoning="A 4-week cardio cycle builds base fitness with structured progression.",
                confidence=Confidence.MEDIUM,
                source=SuggestionSource.LOCAL,
            )
        return CycleRecommendation(
            recommended_cycle_id="cardio-6",
            reasoning="A 6-week cardio cycle gives more time for endurance building and peak performance.",
            confidence=Confidence.MEDIUM,
            source=SuggestionSource.LOCAL,
        )

    if experience_level == ExperienceLevel.BEGINNER:
        return CycleRecommendation(
            recommended_cycle_id="beginner-4",
            reasoning="A 4-week cycle gives beginners quick feedback and steady progression.",
            alternative_id="intermediate-6",
            alternative_reason="If you want more time to build strength before deloading.",
            confidence=Confidence.HIGH,
            source=SuggestionSource.LOCAL,
        )
    if experience_level == ExperienceLevel.INTERMEDIATE:
        return CycleRecommendation(
            recommended_cycle_id="intermediate-6",
            reasoning="A 6-week cycle balances progression and recovery with distinct volume and strength phases.",
            alternative_id="advanced-8",
            alternative_reason="If you want more complex periodization and longer mesocycles.",
            confidence=Confidence.HIGH,
            source=SuggestionSource.LOCAL,
        )
    if experience_level == ExperienceLevel.ADVANCED:
        return CycleRecommendation(
            recommended_cycle_id="advanced-8",
            reasoning="An 8-week cycle allows hypertrophy, strength and peaking phases.",
            alternative_id="intermediate-6",
            alternative_reason="If you prefer shorter cycles with more frequent deloads.",
            confidence=Confidence.HIGH,
            source=SuggestionSource.LOCAL,
        )
    raise ValueError(f"Unhandled experience level: {experience_level!r}")


def format_cycle_catalog() -> str:
    lines = []
    for cycle in PREDEFINED_CYCLES:
        phases = " -> ".join(p.name for p in cycle.phases)
        experience = ", ".join(e.value for e in cycle.recommended_for_experience)
        goals = ", ".join(g.value for g in cycle.recommended_for_goals)
        lines.append(
            f'- {cycle.id}: "{cycle.name}" ({cycle.total_weeks} weeks, {cycle.cycle_type.value}) '
            f"- {cycle.description}\n  Phases: {phases}\n"
            f"  Recommended for: {experience} experience, {goals} goals"
        )
    return "\n".join(lines)


def render_cycle_prompt(data: CycleRecommendationInput) -> Tuple[str, str]:
    """Render (system, user) prompt text for a cycle recommendation."""
    plateaus = f"Yes ({data.plateau_count} exercises)" if data.has_plateaus else "No"
    current = (
        f"Currently using: {data.current_cycle_id}"
        if data.current_cycle_id
        else "Not currently using a structured cycle"
    )
    user = CYCLE_RECOMMENDATION_USER.format(
        experience_level=data.experience_level.value,
        workout_goal=data.workout_goal.value,
        training_focus="Cardio-primary" if data.is_cardio_primary else "Strength-focused",
        total_completed=data.total_completed,
        weekly_average=data.weekly_average,
        plateaus=plateaus,
        current_cycle=current,
    )
    return CYCLE_RECOMMENDATION_SYSTEM.format(cycle_catalog=format_cycle_catalog()), user


def is_valid_recommendation(candidate: Optional[CycleRecommendation]) -> bool:
    return candidate is not None and get_cycle_by_id(candidate.recommended_cycle_id) is not None


class CycleRecommender:
    """Generator-backed cycle recommendation with deterministic default."""

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        analyzer: Optional[PerformanceAnalyzer] = None,
        max_attempts: Optional[int] = None,
    ):
        self._llm_client = llm_client
        # None means a fresh analyzer per call
        self.analyzer = analyzer
        self.max_attempts = max_attempts if max_attempts is not None else get_settings().llm_max_attempts

    def _get_client(self) -> LLMClient:
        if self._llm_client is None:
            self._llm_client = get_llm_client()
        return self._llm_client

    async def _generate(self, data: CycleRecommendationInput) -> str:
        system, user = render_cycle_prompt(data)
        return await self._get_client().completion(
            system=system,
            user=user,
            model=ModelType.FAST,
            max_tokens=CYCLE_MAX_TOKENS,
        )

    async def recommend(
        self,
        sessions: List[WorkoutSession],
        experience_level: ExperienceLevel,
        workout_goal: WorkoutGoal,
        current_cycle_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CycleRecommendation:
        """
        Recommend a training cycle.

        Args:
            sessions: Session history
            experience_level: User's experience level
            workout_goal: User's training goal
            current_cycle_id: Cycle the user follows now, if any
            now: Reference time

        Returns:
            A recommendation naming a predefined cycle
        """
        completed = sum(1 for s in sessions if s.is_completed)
        if completed < MIN_SESSIONS_FOR_GENERATED:
            return get_default_recommendation(experience_level)

        data = aggregate_cycle_recommendation_data(
            sessions, experience_level, workout_goal, current_cycle_id, self.analyzer, now
        )
        fallback = get_default_recommendation(experience_level, data.is_cardio_primary)

        outcome: GenerationOutcome[CycleRecommendation] = await generate_with_fallback(
            data,
            generate=self._generate,
            parse=lambda raw: parse_model(raw, CycleRecommendation, None),
            validate=is_valid_recommendation,
            fallback=fallback,
            max_attempts=self.max_attempts,
        )

        if outcome.used_fallback:
            logger.warning(
                f"Cycle recommendation fell back to default after {outcome.attempts} "
                f"attempts: {outcome.describe_failures()}"
            )
            return outcome.value

        return outcome.value.model_copy(update={"source": SuggestionSource.GENERATED})
