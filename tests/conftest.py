"""Pytest configuration and fixtures."""

import json
from datetime import datetime, timedelta
from typing import List, Optional, Sequence
from unittest.mock import AsyncMock, MagicMock

import pytest

from strength_coach.models.sessions import (
    CompletedSet,
    ExerciseType,
    SessionExercise,
    TemplateExercise,
    WorkoutSession,
    WorkoutTemplate,
)

# Fixed reference time for every time-dependent test
NOW = datetime(2026, 3, 2, 12, 0, 0)


def make_session(
    session_id: str,
    days_ago: float,
    exercises: Optional[dict] = None,
    completed: bool = True,
    now: datetime = NOW,
) -> WorkoutSession:
    """
    Build a session.

    Args:
        session_id: Session ID
        days_ago: Start time relative to ``now``
        exercises: Map of exercise id to a list of (weight, reps) tuples
        completed: Whether the session has a completion time
    """
    started = now - timedelta(days=days_ago)
    entries = []
    for exercise_id, sets in (exercises or {}).items():
        entries.append(SessionExercise(
            exercise_id=exercise_id,
            sets=[CompletedSet(weight=w, reps=r) for w, r in sets],
        ))
    return WorkoutSession(
        id=session_id,
        started_at=started,
        completed_at=started + timedelta(hours=1) if completed else None,
        exercises=entries,
    )


def make_history(
    exercise_id: str,
    points: Sequence[tuple],
    now: datetime = NOW,
) -> List[WorkoutSession]:
    """Sessions from ``(days_ago, weight, reps)`` points, one set each."""
    return [
        make_session(f"s{i}", days_ago, {exercise_id: [(weight, reps)]}, now=now)
        for i, (days_ago, weight, reps) in enumerate(points)
    ]


def suggestion_json(exercise_id: str, weight: float = 185, reps: int = 8, **extra) -> str:
    """Generator-style suggestion payload."""
    item = {
        "exerciseId": exercise_id,
        "suggestedWeight": weight,
        "suggestedReps": reps,
        "reasoning": "Steady progress",
        "confidence": "high",
        "progressStatus": "improving",
    }
    item.update(extra)
    return json.dumps({"suggestions": [item]})


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def plateau_history() -> List[WorkoutSession]:
    """225 lbs for five sessions within ten days, reps stuck around 7."""
    return make_history("bench-press", [
        (0, 225, 7),
        (2, 225, 7),
        (4, 225, 6),
        (7, 225, 7),
        (9, 225, 7),
    ])


@pytest.fixture
def improving_history() -> List[WorkoutSession]:
    return make_history("bench-press", [
        (0, 205, 8),
        (7, 195, 8),
        (14, 185, 8),
    ])


@pytest.fixture
def push_template() -> WorkoutTemplate:
    return WorkoutTemplate(
        id="push-day",
        name="Push Day",
        exercises=[
            TemplateExercise(exercise_id="bench-press", target_sets=3, target_reps=8),
            TemplateExercise(exercise_id="treadmill", type=ExerciseType.CARDIO),
            TemplateExercise(exercise_id="overhead-press", target_sets=3, target_reps=10),
        ],
    )


@pytest.fixture
def mock_llm_client():
    """LLM client whose completion is an AsyncMock."""
    client = MagicMock()
    client.completion = AsyncMock()
    return client
