"""History sufficiency gate for plateau detection."""

from datetime import datetime, timedelta
from typing import List, Optional

from ..models.sessions import WorkoutSession, to_naive_utc, utc_now


# Rolling window shared with the performance analyzer
ANALYSIS_WINDOW_DAYS = 70
MAX_WEEK_BUCKET = 10

MIN_SESSIONS_FOR_PLATEAU = 10
MIN_DISTINCT_WEEKS_FOR_PLATEAU = 8


def week_bucket(started_at: datetime, now: datetime) -> int:
    """Weeks elapsed since ``started_at``: whole days // 7, floored at 0."""
    elapsed_days = (now - to_naive_utc(started_at)).days
    return max(0, elapsed_days // 7)


def has_enough_history_for_plateau_detection(
    sessions: List[WorkoutSession],
    now: Optional[datetime] = None,
) -> bool:
    """
    Decide whether plateau detection can be trusted.

    Requires at least 10 completed sessions started within the last 70 days,
    spread over at least 8 distinct week buckets (0-10).

    Args:
        sessions: Full session history
        now: Reference time, defaults to current UTC time

    Returns:
        True when the history is long and regular enough
    """
    now = to_naive_utc(now) if now else utc_now()
    cutoff = now - timedelta(days=ANALYSIS_WINDOW_DAYS)

    recent = [
        s for s in sessions
        if s.is_completed and s.started_at_utc >= cutoff
    ]
    if len(recent) < MIN_SESSIONS_FOR_PLATEAU:
        return False

    weeks = {
        bucket for bucket in (week_bucket(s.started_at, now) for s in recent)
        if bucket <= MAX_WEEK_BUCKET
    }
    return len(weeks) >= MIN_DISTINCT_WEEKS_FOR_PLATEAU
