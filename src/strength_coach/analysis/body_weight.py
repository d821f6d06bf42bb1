"""Body-weight trend over the recent weeks."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from ..models.sessions import WeightEntry, WeightUnit, to_naive_utc, utc_now


BODY_WEIGHT_WINDOW_DAYS = 60
TREND_THRESHOLD = 1.0


class WeightTrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass(frozen=True)
class BodyWeightTrend:
    """Change between the oldest and newest entry in the window."""

    current_weight: float
    change: float
    change_percent: float
    direction: WeightTrendDirection
    unit: WeightUnit
    entries: int
    recent: List[WeightEntry]     # newest first, at most 5

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_weight": self.current_weight,
            "change": round(self.change, 2),
            "change_percent": round(self.change_percent, 2),
            "direction": self.direction.value,
            "unit": self.unit.value,
            "entries": self.entries,
        }


def calculate_body_weight_trend(
    entries: List[WeightEntry],
    unit: WeightUnit = WeightUnit.LBS,
    now: Optional[datetime] = None,
) -> Optional[BodyWeightTrend]:
    """
    Compute the body-weight trend of the last 60 days.

    Returns None with fewer than 2 entries in the window. Direction is
    ``up`` above +1 and ``down`` below -1 (in the user's unit).
    """
    now = to_naive_utc(now) if now else utc_now()
    cutoff = now - timedelta(days=BODY_WEIGHT_WINDOW_DAYS)

    recent = sorted(
        (e for e in entries if to_naive_utc(e.date) >= cutoff),
        key=lambda e: to_naive_utc(e.date),
        reverse=True,
    )
    if len(recent) < 2:
        return None

    newest, oldest = recent[0], recent[-1]
    change = newest.weight - oldest.weight
    change_percent = (change / oldest.weight) * 100 if oldest.weight > 0 else 0.0

    if change > TREND_THRESHOLD:
        direction = WeightTrendDirection.UP
    elif change < -TREND_THRESHOLD:
        direction = WeightTrendDirection.DOWN
    else:
        direction = WeightTrendDirection.STABLE

    return BodyWeightTrend(
        current_weight=newest.weight,
        change=change,
        change_percent=change_percent,
        direction=direction,
        unit=unit,
        entries=len(recent),
        recent=recent[:5],
    )
