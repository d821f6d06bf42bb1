"""
Deload (recovery week) detection.

A hybrid strategy: the cycle schedules recovery weeks, and a set of reactive
triggers (plateaus, strength decline, low mood, time since the last recovery
week, accumulated fatigue) can call for one early. Exercise status comes from
the performance analyzer, so plateau triggers only fire once the history is
long enough for plateau detection.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..analysis.performance import PerformanceAnalyzer
from ..exceptions import CycleNotFoundError
from ..models.analysis import ExerciseAnalysis, ProgressStatus
from ..models.cycles import PhaseType, TrainingCycleConfig, UserCycleState, get_cycle_by_id
from ..models.sessions import ExerciseType, WorkoutSession, to_camel, to_naive_utc, utc_now

logger = logging.getLogger(__name__)

MIN_RECENT_SESSIONS = 3
RECENT_WINDOW_DAYS = 14
MOOD_SAMPLE_SIZE = 10
MIN_MOOD_SAMPLES = 3
LOW_MOOD_SIGNAL = 3.0
ABANDONED_SAMPLE_SIZE = 10
ABANDONED_AFTER_HOURS = 24
VOLUME_DROP_RATIO = 0.8
FALLBACK_SESSION_SPAN = 20
MAX_PLATEAU_NAMES = 3


class DeloadTriggerType(str, Enum):
    PLATEAU_DETECTED = "plateau_detected"
    PERFORMANCE_DECLINE = "performance_decline"
    MOOD_DECLINE = "mood_decline"
    MAX_WEEKS_REACHED = "max_weeks_reached"
    FATIGUE_ACCUMULATION = "fatigue_accumulation"


class DeloadUrgency(str, Enum):
    IMMEDIATE = "immediate"
    SOON = "soon"
    OPTIONAL = "optional"


@dataclass(frozen=True)
class DeloadTrigger:
    """One reactive trigger and the threshold it fires at."""

    type: DeloadTriggerType
    threshold: float
    description: str


@dataclass(frozen=True)
class DeloadStrategy:
    triggers: Tuple[DeloadTrigger, ...]
    max_weeks_without_deload: int


DEFAULT_DELOAD_STRATEGY = DeloadStrategy(
    triggers=(
        DeloadTrigger(
            DeloadTriggerType.PLATEAU_DETECTED, 3,
            "Multiple exercises showing no progress",
        ),
        DeloadTrigger(
            DeloadTriggerType.PERFORMANCE_DECLINE, 5,
            "Strength declining across exercises",
        ),
        DeloadTrigger(
            DeloadTriggerType.MOOD_DECLINE, 2.5,
            "Consistently low workout enjoyment",
        ),
        DeloadTrigger(
            DeloadTriggerType.MAX_WEEKS_REACHED, 6,
            "Extended training without recovery week",
        ),
        DeloadTrigger(
            DeloadTriggerType.FATIGUE_ACCUMULATION, 3,
            "Multiple signs of accumulated fatigue",
        ),
    ),
    max_weeks_without_deload=8,
)

SUGGESTED_ACTIONS = {
    DeloadUrgency.IMMEDIATE: "Consider taking a deload week now. Reduce weights by 40-50% and focus on recovery.",
    DeloadUrgency.SOON: "Plan a deload week within the next 1-2 weeks to prevent overtraining.",
    DeloadUrgency.OPTIONAL: "A deload week could help. Consider it if you continue to feel fatigued.",
}


class DeloadRecommendation(BaseModel):
    """Whether to take a recovery week, and why."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    should_deload: bool = Field(default=False)
    urgency: DeloadUrgency = Field(default=DeloadUrgency.OPTIONAL)
    reasons: List[str] = Field(default_factory=list)
    triggered_by: List[DeloadTriggerType] = Field(default_factory=list)
    suggested_action: Optional[str] = Field(default=None)
    weeks_since_last_deload: int = Field(default=0, ge=0)


def _strength_exercise_ids(sessions: List[WorkoutSession]) -> List[str]:
    ids: List[str] = []
    for session in sessions:
        if not session.is_completed:
            continue
        for entry in session.exercises:
            if entry.type == ExerciseType.STRENGTH and entry.exercise_id not in ids:
                ids.append(entry.exercise_id)
    return ids


def _analyze_strength_exercises(
    sessions: List[WorkoutSession],
    analyzer: PerformanceAnalyzer,
    now: datetime,
) -> List[ExerciseAnalysis]:
    targets: Dict[str, Optional[int]] = {
        exercise_id: None for exercise_id in _strength_exercise_ids(sessions)
    }
    return analyzer.analyze_many(targets, sessions, now=now)


def calculate_average_mood(sessions: List[WorkoutSession]) -> Optional[float]:
    """Mean mood of the ten most recently completed sessions that logged one.

    None with fewer than three such sessions.
    """
    rated = sorted(
        (s for s in sessions if s.is_completed and s.mood is not None),
        key=lambda s: to_naive_utc(s.completed_at),
        reverse=True,
    )[:MOOD_SAMPLE_SIZE]
    if len(rated) < MIN_MOOD_SAMPLES:
        return None
    return sum(s.mood for s in rated) / len(rated)


def _total_sets(session: WorkoutSession) -> int:
    return sum(len(entry.sets) for entry in session.exercises)


def _completed_between(
    sessions: List[WorkoutSession],
    start: datetime,
    end: Optional[datetime] = None,
) -> List[WorkoutSession]:
    window = []
    for session in sessions:
        if not session.is_completed:
            continue
        completed = to_naive_utc(session.completed_at)
        if completed >= start and (end is None or completed < end):
            window.append(session)
    return window


def count_fatigue_signals(
    sessions: List[WorkoutSession],
    analyses: List[ExerciseAnalysis],
    now: datetime,
) -> List[str]:
    """
    Collect fatigue signals from the history.

    Args:
        sessions: Full history, incomplete sessions included
        analyses: Strength exercise analyses over the same history
        now: Reference time

    Returns:
        Labels of the signals that fired
    """
    signals: List[str] = []

    declining = [a for a in analyses if a.progress_status == ProgressStatus.DECLINING]
    if len(declining) >= 2:
        signals.append(f"Declining performance in {len(declining)} exercises")

    mood = calculate_average_mood(sessions)
    if mood is not None and mood < LOW_MOOD_SIGNAL:
        signals.append("Low workout enjoyment")

    newest = sorted(sessions, key=lambda s: s.started_at_utc, reverse=True)[:ABANDONED_SAMPLE_SIZE]
    stale_before = now - timedelta(hours=ABANDONED_AFTER_HOURS)
    abandoned = [s for s in newest if not s.is_completed and s.started_at_utc < stale_before]
    if len(abandoned) >= 2:
        signals.append("Multiple abandoned workouts")

    two_weeks_ago = now - timedelta(days=RECENT_WINDOW_DAYS)
    four_weeks_ago = now - timedelta(days=RECENT_WINDOW_DAYS * 2)
    recent = _completed_between(sessions, two_weeks_ago)
    older = _completed_between(sessions, four_weeks_ago, two_weeks_ago)
    if len(recent) >= 2 and len(older) >= 2:
        recent_sets = sum(_total_sets(s) for s in recent) / len(recent)
        older_sets = sum(_total_sets(s) for s in older) / len(older)
        if recent_sets < older_sets * VOLUME_DROP_RATIO:
            signals.append("Reduced workout volume")

    return signals


def detect_deload_need(
    sessions: List[WorkoutSession],
    weeks_since_last_deload: int,
    current_phase_is_deload: bool = False,
    strategy: DeloadStrategy = DEFAULT_DELOAD_STRATEGY,
    analyzer: Optional[PerformanceAnalyzer] = None,
    now: Optional[datetime] = None,
) -> DeloadRecommendation:
    """
    Decide whether the user should take a recovery week.

    Nothing is recommended during a deload phase or with fewer than three
    sessions completed in the last two weeks. Otherwise urgency follows the
    number of triggers that fired: three or more, or reaching the strategy's
    maximum weeks without a deload, is immediate; two is soon; one is
    optional.
    """
    if current_phase_is_deload:
        return DeloadRecommendation(weeks_since_last_deload=weeks_since_last_deload)

    now = to_naive_utc(now) if now else utc_now()
    recent = _completed_between(sessions, now - timedelta(days=RECENT_WINDOW_DAYS))
    if len(recent) < MIN_RECENT_SESSIONS:
        return DeloadRecommendation(weeks_since_last_deload=weeks_since_last_deload)

    analyzer = analyzer or PerformanceAnalyzer()
    analyses = _analyze_strength_exercises(sessions, analyzer, now)

    triggered_by: List[DeloadTriggerType] = []
    reasons: List[str] = []

    for trigger in strategy.triggers:
        if trigger.type == DeloadTriggerType.PLATEAU_DETECTED:
            names = [a.exercise_name for a in analyses if a.progress_status == ProgressStatus.PLATEAU]
            if len(names) >= trigger.threshold:
                triggered_by.append(trigger.type)
                more = "..." if len(names) > MAX_PLATEAU_NAMES else ""
                reasons.append(
                    f"{len(names)} exercises on plateau: {', '.join(names[:MAX_PLATEAU_NAMES])}{more}"
                )

        elif trigger.type == DeloadTriggerType.PERFORMANCE_DECLINE:
            trends = [
                a.estimated_1rm_trend for a in analyses
                if a.progress_status != ProgressStatus.INSUFFICIENT_DATA
            ]
            average_trend = sum(trends) / len(trends) if trends else 0.0
            if average_trend < -trigger.threshold:
                triggered_by.append(trigger.type)
                reasons.append(f"Performance declining {abs(average_trend):.1f}% on average")

        elif trigger.type == DeloadTriggerType.MOOD_DECLINE:
            mood = calculate_average_mood(sessions)
            if mood is not None and mood < trigger.threshold:
                triggered_by.append(trigger.type)
                reasons.append(f"Low workout enjoyment ({mood:.1f}/5 average)")

        elif trigger.type == DeloadTriggerType.MAX_WEEKS_REACHED:
            if weeks_since_last_deload >= trigger.threshold:
                triggered_by.append(trigger.type)
                reasons.append(f"{weeks_since_last_deload} weeks since last recovery week")

        elif trigger.type == DeloadTriggerType.FATIGUE_ACCUMULATION:
            signals = count_fatigue_signals(sessions, analyses, now)
            if len(signals) >= trigger.threshold:
                triggered_by.append(trigger.type)
                reasons.append(f"Multiple fatigue signals: {', '.join(signals)}")

    if len(triggered_by) >= 3 or weeks_since_last_deload >= strategy.max_weeks_without_deload:
        urgency = DeloadUrgency.IMMEDIATE
    elif len(triggered_by) == 2:
        urgency = DeloadUrgency.SOON
    else:
        urgency = DeloadUrgency.OPTIONAL
    should_deload = bool(triggered_by) or urgency == DeloadUrgency.IMMEDIATE

    if should_deload:
        logger.info(
            f"Deload recommended ({urgency.value}): "
            f"{', '.join(t.value for t in triggered_by) or 'schedule'}"
        )

    return DeloadRecommendation(
        should_deload=should_deload,
        urgency=urgency,
        reasons=reasons,
        triggered_by=triggered_by,
        suggested_action=SUGGESTED_ACTIONS[urgency] if should_deload else None,
        weeks_since_last_deload=weeks_since_last_deload,
    )


def calculate_weeks_since_deload(
    sessions: List[WorkoutSession],
    cycle_state: Optional[UserCycleState] = None,
    cycle: Optional[TrainingCycleConfig] = None,
) -> int:
    """
    Weeks of training since the last recovery week.

    With a cycle position, counts the weeks of phases after the last deload
    phase up to the current one, plus the weeks into the current phase; zero
    while in a deload phase. Without one, estimates from the span between the
    newest completed session and the 21st newest.
    """
    if cycle_state is not None and cycle is not None and cycle.phases:
        current = min(cycle_state.current_phase_index, len(cycle.phases) - 1)
        last_deload = -1
        for index in range(current, -1, -1):
            if cycle.phases[index].type == PhaseType.DELOAD:
                last_deload = index
                break

        if last_deload == current:
            return 0
        weeks = sum(p.duration_weeks for p in cycle.phases[last_deload + 1:current])
        return weeks + cycle_state.current_week_in_phase

    completed = sorted(
        (s for s in sessions if s.is_completed),
        key=lambda s: to_naive_utc(s.completed_at),
        reverse=True,
    )
    if len(completed) < 2:
        return 0

    newest = to_naive_utc(completed[0].completed_at)
    oldest = to_naive_utc(completed[min(len(completed) - 1, FALLBACK_SESSION_SPAN)].completed_at)
    return (newest - oldest).days // 7


def recommend_deload(
    sessions: List[WorkoutSession],
    cycle_state: Optional[UserCycleState] = None,
    analyzer: Optional[PerformanceAnalyzer] = None,
    now: Optional[datetime] = None,
) -> DeloadRecommendation:
    """
    Deload recommendation for a history and an optional cycle position.

    Raises:
        CycleNotFoundError: ``cycle_state`` names an unknown cycle
    """
    cycle = None
    in_deload = False
    if cycle_state is not None:
        cycle = get_cycle_by_id(cycle_state.cycle_config_id)
        if cycle is None:
            raise CycleNotFoundError(cycle_state.cycle_config_id)
        if cycle_state.current_phase_index < len(cycle.phases):
            in_deload = cycle.phases[cycle_state.current_phase_index].type == PhaseType.DELOAD

    weeks = calculate_weeks_since_deload(sessions, cycle_state, cycle)
    return detect_deload_need(
        sessions,
        weeks,
        current_phase_is_deload=in_deload,
        analyzer=analyzer,
        now=now,
    )

