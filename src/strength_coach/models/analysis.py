"""Exercise progress analysis data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List


class ProgressStatus(str, Enum):
    """Progress state of a single exercise.

    Closed set: every consumer must handle all four members.
    """
    IMPROVING = "improving"
    PLATEAU = "plateau"
    DECLINING = "declining"
    INSUFFICIENT_DATA = "insufficient_data"


def unknown_status(status: Any) -> ValueError:
    """Error for a status value that fell through an exhaustive branch."""
    return ValueError(f"Unhandled progress status: {status!r}")


@dataclass(frozen=True)
class WeeklyPerformance:
    """Aggregated performance for one week bucket."""

    weeks_ago: int              # 0 = current week
    sessions: int
    avg_weight: float
    avg_reps: float
    max_weight: float
    total_sets: int
    estimated_1rm: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "weeks_ago": self.weeks_ago,
            "sessions": self.sessions,
            "avg_weight": round(self.avg_weight, 2),
            "avg_reps": round(self.avg_reps, 2),
            "max_weight": self.max_weight,
            "total_sets": self.total_sets,
            "estimated_1rm": round(self.estimated_1rm, 2),
        }


@dataclass(frozen=True)
class PlateauSignals:
    """Independent plateau heuristics."""

    same_weight_repeated: bool = False
    failed_rep_target: bool = False
    stalled_1rm: bool = False

    def count(self) -> int:
        """Number of signals that fired."""
        return sum([self.same_weight_repeated, self.failed_rep_target, self.stalled_1rm])

    def describe(self) -> List[str]:
        """Human-readable labels of the fired signals."""
        labels = []
        if self.same_weight_repeated:
            labels.append("same weight 4+ sessions")
        if self.failed_rep_target:
            labels.append("missed rep targets")
        if self.stalled_1rm:
            labels.append("stalled 1RM")
        return labels

    def to_dict(self) -> Dict[str, bool]:
        return {
            "same_weight_repeated": self.same_weight_repeated,
            "failed_rep_target": self.failed_rep_target,
            "stalled_1rm": self.stalled_1rm,
        }


@dataclass(frozen=True)
class SessionSummary:
    """Per-session summary used for recent-history context."""

    date: datetime
    max_weight: float
    avg_reps: float
    estimated_1rm: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "max_weight": self.max_weight,
            "avg_reps": round(self.avg_reps, 2),
            "estimated_1rm": round(self.estimated_1rm, 2),
        }


@dataclass(frozen=True)
class ExerciseAnalysis:
    """Ten-week progress analysis for one exercise."""

    exercise_id: str
    exercise_name: str
    progress_status: ProgressStatus
    weekly_performance: List[WeeklyPerformance] = field(default_factory=list)
    plateau_signals: PlateauSignals = field(default_factory=PlateauSignals)
    weight_trend: float = 0.0           # % change, newest vs oldest week
    reps_trend: float = 0.0
    estimated_1rm_trend: float = 0.0
    recent_sessions: List[SessionSummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "exercise_id": self.exercise_id,
            "exercise_name": self.exercise_name,
            "progress_status": self.progress_status.value,
            "weekly_performance": [w.to_dict() for w in self.weekly_performance],
            "plateau_signals": self.plateau_signals.to_dict(),
            "weight_trend": round(self.weight_trend, 2),
            "reps_trend": round(self.reps_trend, 2),
            "estimated_1rm_trend": round(self.estimated_1rm_trend, 2),
            "recent_sessions": [s.to_dict() for s in self.recent_sessions],
        }
