"""
Exercise Performance Analysis

Ten-week rolling analysis of a single exercise: weekly aggregation,
percentage trends, plateau signals and an overall progress status.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from ..catalog.exercises import ExerciseCatalog
from ..models.analysis import (
    ExerciseAnalysis,
    PlateauSignals,
    ProgressStatus,
    SessionSummary,
    WeeklyPerformance,
    unknown_status,
)
from ..models.sessions import (
    CompletedSet,
    WorkoutSession,
    count_completed_sessions,
    to_naive_utc,
    utc_now,
)
from .cache import AnalysisCache
from .sufficiency import (
    ANALYSIS_WINDOW_DAYS,
    MAX_WEEK_BUCKET,
    has_enough_history_for_plateau_detection,
    week_bucket,
)

logger = logging.getLogger(__name__)


MIN_SESSIONS_FOR_TREND = 2
MIN_SESSIONS_FOR_STATUS = 3
MIN_SESSIONS_FOR_SIGNALS = 4
SIGNAL_SAMPLE_SIZE = 6
REP_TARGET_SAMPLE_SIZE = 4
RECENT_SUMMARY_COUNT = 5

SAME_WEIGHT_TOLERANCE = 0.025
STALLED_1RM_TOLERANCE = 0.03
REP_TARGET_BUFFER = 1


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def estimate_one_rep_max(weight: float, reps: int) -> float:
    """
    Estimate a one-rep max with the Epley formula.

    1RM = weight * (1 + reps / 30); a single rep is the weight itself.
    """
    if weight <= 0 or reps <= 0:
        return 0.0
    if reps == 1:
        return float(weight)
    return weight * (1 + reps / 30)


@dataclass(frozen=True)
class SessionRecord:
    """Strength sets of one exercise entry in one completed session."""

    date: datetime
    sets: Sequence[CompletedSet]

    @property
    def max_weight(self) -> float:
        return max(s.weight for s in self.sets)

    @property
    def avg_reps(self) -> float:
        return sum(s.reps for s in self.sets) / len(self.sets)

    @property
    def estimated_1rm(self) -> float:
        return estimate_one_rep_max(self.max_weight, round_half_up(self.avg_reps))

    def summary(self) -> SessionSummary:
        return SessionSummary(
            date=self.date,
            max_weight=self.max_weight,
            avg_reps=self.avg_reps,
            estimated_1rm=self.estimated_1rm,
        )


def collect_session_records(
    exercise_id: str,
    sessions: List[WorkoutSession],
    now: datetime,
) -> List[SessionRecord]:
    """
    Qualifying records for an exercise, newest first.

    A record is one exercise entry of a completed session started within the
    analysis window that holds at least one strength set.
    """
    cutoff = now - timedelta(days=ANALYSIS_WINDOW_DAYS)
    records: List[SessionRecord] = []

    for session in sessions:
        if not session.is_completed:
            continue
        started = session.started_at_utc
        if started < cutoff:
            continue
        for entry in session.exercises:
            if entry.exercise_id != exercise_id:
                continue
            strength_sets = entry.strength_sets()
            if strength_sets:
                records.append(SessionRecord(date=started, sets=strength_sets))

    records.sort(key=lambda r: r.date, reverse=True)
    return records


def aggregate_weekly_performance(
    records: List[SessionRecord],
    now: datetime,
) -> List[WeeklyPerformance]:
    """Bucket records by weeks ago (0-10) and aggregate each populated bucket."""
    buckets: Dict[int, List[SessionRecord]] = {}
    for record in records:
        bucket = min(week_bucket(record.date, now), MAX_WEEK_BUCKET)
        buckets.setdefault(bucket, []).append(record)

    weekly: List[WeeklyPerformance] = []
    for weeks_ago in range(MAX_WEEK_BUCKET + 1):
        week_records = buckets.get(weeks_ago)
        if not week_records:
            continue

        all_sets = [s for r in week_records for s in r.sets]
        avg_weight = sum(s.weight for s in all_sets) / len(all_sets)
        avg_reps = sum(s.reps for s in all_sets) / len(all_sets)
        max_weight = max(s.weight for s in all_sets)

        weekly.append(WeeklyPerformance(
            weeks_ago=weeks_ago,
            sessions=len(week_records),
            avg_weight=avg_weight,
            avg_reps=avg_reps,
            max_weight=max_weight,
            total_sets=len(all_sets),
            estimated_1rm=estimate_one_rep_max(max_weight, round_half_up(avg_reps)),
        ))

    return weekly


def _percent_change(newest: float, oldest: float) -> float:
    if oldest == 0:
        return 0.0
    return (newest - oldest) / oldest * 100


def calculate_trends(weekly: List[WeeklyPerformance]) -> Dict[str, float]:
    """Percent change of the newest populated week against the oldest."""
    if len(weekly) < 2:
        return {"weight": 0.0, "reps": 0.0, "estimated_1rm": 0.0}

    newest, oldest = weekly[0], weekly[-1]
    return {
        "weight": _percent_change(newest.avg_weight, oldest.avg_weight),
        "reps": _percent_change(newest.avg_reps, oldest.avg_reps),
        "estimated_1rm": _percent_change(newest.estimated_1rm, oldest.estimated_1rm),
    }


def detect_plateau_signals(
    records: List[SessionRecord],
    target_reps: Optional[int] = None,
) -> PlateauSignals:
    """
    Evaluate the plateau heuristics over the most recent sessions.

    Args:
        records: Qualifying records, newest first
        target_reps: Rep target; the failed-rep signal needs a positive one

    Returns:
        PlateauSignals, all false with fewer than 4 records
    """
    if len(records) < MIN_SESSIONS_FOR_SIGNALS:
        return PlateauSignals()

    sample = records[:SIGNAL_SAMPLE_SIZE]

    reference_weight = sample[0].max_weight
    weight_tolerance = reference_weight * SAME_WEIGHT_TOLERANCE
    same_weight_count = sum(
        1 for r in sample if abs(r.max_weight - reference_weight) <= weight_tolerance
    )

    failed_rep_target = False
    if target_reps and target_reps > 0:
        failed = [
            r for r in records[:REP_TARGET_SAMPLE_SIZE]
            if r.avg_reps < target_reps - REP_TARGET_BUFFER
        ]
        failed_rep_target = len(failed) >= 2

    reference_1rm = sample[0].estimated_1rm
    rm_tolerance = reference_1rm * STALLED_1RM_TOLERANCE
    stalled_count = sum(
        1 for r in sample if abs(r.estimated_1rm - reference_1rm) <= rm_tolerance
    )

    return PlateauSignals(
        same_weight_repeated=same_weight_count >= MIN_SESSIONS_FOR_SIGNALS,
        failed_rep_target=failed_rep_target,
        stalled_1rm=stalled_count >= MIN_SESSIONS_FOR_SIGNALS,
    )


def determine_progress_status(
    signals: PlateauSignals,
    estimated_1rm_trend: float,
    session_count: int,
) -> ProgressStatus:
    """Overall status; the first matching rule wins."""
    if session_count < MIN_SESSIONS_FOR_STATUS:
        return ProgressStatus.INSUFFICIENT_DATA
    if estimated_1rm_trend < -5:
        return ProgressStatus.DECLINING
    if estimated_1rm_trend > 0:
        return ProgressStatus.IMPROVING

    signal_count = signals.count()
    if signal_count >= 2:
        return ProgressStatus.PLATEAU
    if signal_count == 1 and estimated_1rm_trend < -2:
        return ProgressStatus.PLATEAU
    return ProgressStatus.IMPROVING


def analyze_exercise(
    exercise_id: str,
    sessions: List[WorkoutSession],
    target_reps: Optional[int] = None,
    enable_plateau_detection: bool = True,
    *,
    cache: Optional[AnalysisCache] = None,
    catalog: Optional[ExerciseCatalog] = None,
    now: Optional[datetime] = None,
) -> ExerciseAnalysis:
    """
    Analyze the last ten weeks of one exercise.

    Args:
        exercise_id: Exercise to analyze
        sessions: Full session history (incomplete sessions are ignored)
        target_reps: Rep target used by the failed-rep signal
        enable_plateau_detection: False skips signals, status is never plateau
        cache: Optional analysis cache keyed by completed-session count
        catalog: Exercise catalog for display names
        now: Reference time, defaults to current UTC time

    Returns:
        ExerciseAnalysis
    """
    session_count = count_completed_sessions(sessions)
    if cache is not None:
        cached = cache.get(exercise_id, session_count, target_reps, enable_plateau_detection)
        if cached is not None:
            logger.debug(f"Analysis cache hit for {exercise_id} at {session_count} sessions")
            return cached

    now = to_naive_utc(now) if now else utc_now()
    catalog = catalog or ExerciseCatalog()
    exercise_name = catalog.name_for(exercise_id)

    records = collect_session_records(exercise_id, sessions, now)
    recent_sessions = [r.summary() for r in records[:RECENT_SUMMARY_COUNT]]

    if len(records) < MIN_SESSIONS_FOR_TREND:
        analysis = ExerciseAnalysis(
            exercise_id=exercise_id,
            exercise_name=exercise_name,
            progress_status=ProgressStatus.INSUFFICIENT_DATA,
            recent_sessions=recent_sessions,
        )
    else:
        weekly = aggregate_weekly_performance(records, now)
        trends = calculate_trends(weekly)

        if enable_plateau_detection:
            signals = detect_plateau_signals(records, target_reps)
        else:
            signals = PlateauSignals()

        analysis = ExerciseAnalysis(
            exercise_id=exercise_id,
            exercise_name=exercise_name,
            progress_status=determine_progress_status(
                signals, trends["estimated_1rm"], len(records)
            ),
            weekly_performance=weekly,
            plateau_signals=signals,
            weight_trend=trends["weight"],
            reps_trend=trends["reps"],
            estimated_1rm_trend=trends["estimated_1rm"],
            recent_sessions=recent_sessions,
        )

    if cache is not None:
        cache.set(analysis, session_count, target_reps, enable_plateau_detection)
    return analysis


def status_label(status: ProgressStatus) -> str:
    """Prompt label for a status."""
    if status == ProgressStatus.IMPROVING:
        return "IMPROVING"
    if status == ProgressStatus.PLATEAU:
        return "PLATEAU"
    if status == ProgressStatus.DECLINING:
        return "DECLINING"
    if status == ProgressStatus.INSUFFICIENT_DATA:
        return "INSUFFICIENT DATA"
    raise unknown_status(status)


def build_analysis_context(analyses: List[ExerciseAnalysis], unit: str = "lbs") -> str:
    """Render analyses as a text block for generator prompts."""
    if not analyses:
        return ""

    blocks = []
    for analysis in analyses:
        week_lines = [
            f"Week {w.weeks_ago} ago: {w.max_weight:g}{unit} x {w.avg_reps:.1f} reps "
            f"(1RM: {w.estimated_1rm:.0f})"
            for w in analysis.weekly_performance
        ]
        trend = analysis.estimated_1rm_trend
        lines = [
            f"  {analysis.exercise_name} ({analysis.exercise_id}):",
            f"    Status: {status_label(analysis.progress_status)}",
            *(f"    {line}" for line in (week_lines or ["No weekly data"])),
            f"    1RM Trend: {'+' if trend > 0 else ''}{trend:.1f}%",
        ]
        fired = analysis.plateau_signals.describe()
        if fired:
            lines.append(f"    Plateau Signals: {', '.join(fired)}")
        blocks.append("\n".join(lines))

    return "EXERCISE ANALYSIS (10-week history):\n" + "\n\n".join(blocks)


class PerformanceAnalyzer:
    """
    Analyzer bound to a cache and a catalog.

    When ``enable_plateau_detection`` is left as None, the history
    sufficiency gate decides.
    """

    def __init__(
        self,
        cache: Optional[AnalysisCache] = None,
        catalog: Optional[ExerciseCatalog] = None,
    ):
        self.cache = cache if cache is not None else AnalysisCache()
        self.catalog = catalog or ExerciseCatalog()

    def analyze(
        self,
        exercise_id: str,
        sessions: List[WorkoutSession],
        target_reps: Optional[int] = None,
        enable_plateau_detection: Optional[bool] = None,
        now: Optional[datetime] = None,
    ) -> ExerciseAnalysis:
        if enable_plateau_detection is None:
            enable_plateau_detection = has_enough_history_for_plateau_detection(sessions, now)
        return analyze_exercise(
            exercise_id,
            sessions,
            target_reps,
            enable_plateau_detection,
            cache=self.cache,
            catalog=self.catalog,
            now=now,
        )

    def analyze_many(
        self,
        targets: Dict[str, Optional[int]],
        sessions: List[WorkoutSession],
        now: Optional[datetime] = None,
    ) -> List[ExerciseAnalysis]:
        """Analyze several exercises, ``targets`` maps id to rep target."""
        enabled = has_enough_history_for_plateau_detection(sessions, now)
        return [
            self.analyze(exercise_id, sessions, target, enabled, now)
            for exercise_id, target in targets.items()
        ]
