"""Tests for training cycle recommendations."""

import json
from datetime import timedelta

import pytest

from strength_coach.models.goals import ExperienceLevel, WorkoutGoal
from strength_coach.models.sessions import (
    CompletedSet,
    ExerciseType,
    SessionExercise,
    WorkoutSession,
)
from strength_coach.models.suggestions import Confidence, SuggestionSource
from strength_coach.recommendations.cycles import (
    CycleRecommender,
    aggregate_cycle_recommendation_data,
    get_default_recommendation,
    render_cycle_prompt,
)

from conftest import NOW, make_history


def cardio_session(session_id: str, days_ago: int) -> WorkoutSession:
    started = NOW - timedelta(days=days_ago)
    return WorkoutSession(
        id=session_id,
        started_at=started,
        completed_at=started + timedelta(minutes=40),
        exercises=[SessionExercise(
            exercise_id="treadmill",
            type=ExerciseType.CARDIO,
            sets=[CompletedSet(type=ExerciseType.CARDIO)],
        )],
    )


def recommendation_json(cycle_id: str) -> str:
    return json.dumps({
        "recommendedCycleId": cycle_id,
        "reasoning": "Fits your schedule.",
        "alternativeId": "beginner-4",
        "alternativeReason": "Shorter feedback loop.",
        "confidence": "high",
    })


class TestDefaultRecommendation:

    @pytest.mark.parametrize("level,cycle_id,alternative", [
        (ExperienceLevel.BEGINNER, "beginner-4", "intermediate-6"),
        (ExperienceLevel.INTERMEDIATE, "intermediate-6", "advanced-8"),
        (ExperienceLevel.ADVANCED, "advanced-8", "intermediate-6"),
    ])
    def test_strength(self, level, cycle_id, alternative):
        recommendation = get_default_recommendation(level)

        assert recommendation.recommended_cycle_id == cycle_id
        assert recommendation.alternative_id == alternative
        assert recommendation.confidence == Confidence.HIGH
        assert recommendation.source == SuggestionSource.LOCAL

    def test_cardio(self):
        assert get_default_recommendation(ExperienceLevel.BEGINNER, True).recommended_cycle_id == "cardio-4"
        assert get_default_recommendation(ExperienceLevel.ADVANCED, True).recommended_cycle_id == "cardio-6"


class TestAggregation:

    def test_summary(self, improving_history):
        sessions = improving_history + [cardio_session("c1", 80)]

        data = aggregate_cycle_recommendation_data(
            sessions, ExperienceLevel.INTERMEDIATE, WorkoutGoal.BUILD, "beginner-4", now=NOW,
        )

        assert data.total_completed == 4
        # Three sessions inside the last eight weeks
        assert data.weekly_average == 0.4
        assert not data.is_cardio_primary
        assert data.plateau_count == 0

    def test_cardio_primary(self):
        sessions = [cardio_session(f"c{i}", i) for i in range(3)] + make_history("squat", [(5, 300, 5)])

        data = aggregate_cycle_recommendation_data(
            sessions, ExperienceLevel.BEGINNER, WorkoutGoal.LOSE, now=NOW,
        )

        assert data.is_cardio_primary

    def test_prompt(self, improving_history):
        data = aggregate_cycle_recommendation_data(
            improving_history, ExperienceLevel.ADVANCED, WorkoutGoal.BUILD, now=NOW,
        )

        system, user = render_cycle_prompt(data)

        for cycle_id in ("beginner-4", "intermediate-6", "advanced-8", "cardio-4", "cardio-6"):
            assert cycle_id in system
        assert "Experience level: advanced" in user
        assert "Not currently using a structured cycle" in user
        assert "Has plateaus: No" in user


class TestCycleRecommender:
    """Tests for the orchestrated recommendation."""

    @pytest.mark.asyncio
    async def test_short_history_uses_default(self, mock_llm_client):
        recommender = CycleRecommender(llm_client=mock_llm_client)
        sessions = make_history("squat", [(0, 300, 5), (3, 300, 5)])

        recommendation = await recommender.recommend(
            sessions, ExperienceLevel.BEGINNER, WorkoutGoal.BUILD, now=NOW,
        )

        assert recommendation.recommended_cycle_id == "beginner-4"
        assert recommendation.source == SuggestionSource.LOCAL
        mock_llm_client.completion.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_generated(self, mock_llm_client, improving_history):
        mock_llm_client.completion.return_value = recommendation_json("advanced-8")
        recommender = CycleRecommender(llm_client=mock_llm_client)

        recommendation = await recommender.recommend(
            improving_history, ExperienceLevel.ADVANCED, WorkoutGoal.BUILD, now=NOW,
        )

        assert recommendation.recommended_cycle_id == "advanced-8"
        assert recommendation.alternative_id == "beginner-4"
        assert recommendation.source == SuggestionSource.GENERATED
        mock_llm_client.completion.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_cycle_falls_back(self, mock_llm_client, improving_history):
        mock_llm_client.completion.return_value = recommendation_json("mega-12")
        recommender = CycleRecommender(llm_client=mock_llm_client)

        recommendation = await recommender.recommend(
            improving_history, ExperienceLevel.INTERMEDIATE, WorkoutGoal.BUILD, now=NOW,
        )

        assert recommendation.recommended_cycle_id == "intermediate-6"
        assert recommendation.source == SuggestionSource.LOCAL
        assert mock_llm_client.completion.await_count == 3

    @pytest.mark.asyncio
    async def test_cardio_fallback(self, mock_llm_client):
        mock_llm_client.completion.side_effect = RuntimeError("down")
        recommender = CycleRecommender(llm_client=mock_llm_client, max_attempts=2)
        sessions = [cardio_session(f"c{i}", i * 2) for i in range(4)]

        recommendation = await recommender.recommend(
            sessions, ExperienceLevel.INTERMEDIATE, WorkoutGoal.LOSE, now=NOW,
        )

        assert recommendation.recommended_cycle_id == "cardio-6"
        assert mock_llm_client.completion.await_count == 2
