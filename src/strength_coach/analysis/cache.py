"""
In-memory cache of exercise analyses.

All entries share one epoch: the number of completed sessions in the whole
history when they were computed. Completing any session changes the count,
so every entry goes stale at once, including entries for exercises that the
new session never touched.

Entries are keyed by exercise, rep target and whether plateau detection
ran, so a cached plateau never answers a request with detection disabled.
An epoch only identifies one history: give each independent history its own
cache.
"""

from typing import Dict, Optional, Tuple

from ..models.analysis import ExerciseAnalysis

CacheKey = Tuple[str, Optional[int], bool]


class AnalysisCache:
    """Epoch-tagged analysis cache owned by the caller."""

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, ExerciseAnalysis] = {}
        self._epoch: Optional[int] = None

    @property
    def epoch(self) -> Optional[int]:
        """Completed-session count the current entries were computed at."""
        return self._epoch

    def get(
        self,
        exercise_id: str,
        session_count: int,
        target_reps: Optional[int] = None,
        plateau_detection: bool = True,
    ) -> Optional[ExerciseAnalysis]:
        """Return a cached analysis, or None.

        A ``session_count`` that differs from the stored epoch drops every
        entry before missing.
        """
        if self._epoch is None:
            return None
        if self._epoch != session_count:
            self.clear()
            return None
        return self._entries.get((exercise_id, target_reps, plateau_detection))

    def set(
        self,
        analysis: ExerciseAnalysis,
        session_count: int,
        target_reps: Optional[int] = None,
        plateau_detection: bool = True,
    ) -> None:
        if self._epoch != session_count:
            self._entries = {}
            self._epoch = session_count
        self._entries[(analysis.exercise_id, target_reps, plateau_detection)] = analysis

    def clear(self) -> None:
        self._entries = {}
        self._epoch = None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, exercise_id: str) -> bool:
        return any(key[0] == exercise_id for key in self._entries)
