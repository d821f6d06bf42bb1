"""Tests for deterministic local suggestions."""

import pytest

from strength_coach.models.analysis import ExerciseAnalysis, ProgressStatus
from strength_coach.models.cycles import get_cycle_by_id
from strength_coach.models.goals import ExperienceLevel
from strength_coach.models.profile import UserProfile
from strength_coach.models.sessions import CompletedSet, WeightUnit
from strength_coach.models.suggestions import Confidence, SuggestionSource
from strength_coach.recommendations.local import (
    LocalSuggestionContext,
    calculate_local_suggestion,
    collect_recent_session_sets,
    get_local_suggestions,
    round_weight,
)

from conftest import NOW, make_history, make_session


def analysis_with(status: ProgressStatus) -> ExerciseAnalysis:
    return ExerciseAnalysis(
        exercise_id="bench-press",
        exercise_name="Barbell Bench Press",
        progress_status=status,
    )


def sets_of(weight, reps, sessions=3, per_session=3):
    return [[CompletedSet(weight=weight, reps=reps)] * per_session for _ in range(sessions)]


class TestRounding:

    @pytest.mark.parametrize("weight,unit,expected", [
        (101.2, WeightUnit.LBS, 100.0),
        (101.25, WeightUnit.LBS, 102.5),
        (141.75, WeightUnit.LBS, 142.5),
        (80.6, WeightUnit.KG, 80.0),
        (80.7, WeightUnit.KG, 81.25),
    ])
    def test_plate_increments(self, weight, unit, expected):
        assert round_weight(weight, unit) == expected


class TestCalculateLocalSuggestion:
    """Tests for the status- and phase-driven adjustments."""

    def test_no_history(self):
        suggestion = calculate_local_suggestion(
            "bench-press",
            analysis_with(ProgressStatus.INSUFFICIENT_DATA),
            LocalSuggestionContext(),
            target_reps=8,
            recent_session_sets=[],
        )

        assert suggestion.suggested_weight == 0
        assert suggestion.suggested_reps == 8
        assert suggestion.confidence == Confidence.LOW
        assert suggestion.progress_status == ProgressStatus.INSUFFICIENT_DATA
        assert suggestion.source == SuggestionSource.LOCAL
        assert "Barbell Bench Press" in suggestion.reasoning

    def test_default_target_reps(self):
        suggestion = calculate_local_suggestion(
            "bench-press",
            analysis_with(ProgressStatus.INSUFFICIENT_DATA),
            LocalSuggestionContext(),
            target_reps=None,
            recent_session_sets=[],
        )

        assert suggestion.suggested_reps == 10

    def test_improving_intermediate_adds_small_increment(self):
        suggestion = calculate_local_suggestion(
            "bench-press",
            analysis_with(ProgressStatus.IMPROVING),
            LocalSuggestionContext(experience_level=ExperienceLevel.INTERMEDIATE),
            target_reps=8,
            recent_session_sets=sets_of(200, 8),
        )

        assert suggestion.suggested_weight == 202.5
        assert suggestion.suggested_reps == 8
        assert suggestion.confidence == Confidence.MEDIUM

    def test_improving_beginner_kg(self):
        suggestion = calculate_local_suggestion(
            "bench-press",
            analysis_with(ProgressStatus.IMPROVING),
            LocalSuggestionContext(
                experience_level=ExperienceLevel.BEGINNER,
                weight_unit=WeightUnit.KG,
            ),
            target_reps=8,
            recent_session_sets=sets_of(60, 8),
        )

        assert suggestion.suggested_weight == 62.5

    def test_improving_advanced_adds_rep(self):
        suggestion = calculate_local_suggestion(
            "bench-press",
            analysis_with(ProgressStatus.IMPROVING),
            LocalSuggestionContext(experience_level=ExperienceLevel.ADVANCED),
            target_reps=8,
            recent_session_sets=sets_of(300, 8),
        )

        assert suggestion.suggested_weight == 300
        assert suggestion.suggested_reps == 9

    def test_plateau(self):
        suggestion = calculate_local_suggestion(
            "bench-press",
            analysis_with(ProgressStatus.PLATEAU),
            LocalSuggestionContext(),
            target_reps=8,
            recent_session_sets=sets_of(200, 8),
        )

        assert suggestion.suggested_weight == 180
        assert suggestion.suggested_reps == 10
        assert suggestion.technique_tip
        assert suggestion.rep_range_change.from_range == "8 reps"
        assert suggestion.rep_range_change.to_range == "10 reps"

    def test_declining(self):
        suggestion = calculate_local_suggestion(
            "bench-press",
            analysis_with(ProgressStatus.DECLINING),
            LocalSuggestionContext(),
            target_reps=8,
            recent_session_sets=sets_of(200, 8),
        )

        assert suggestion.suggested_weight == 175

    def test_deload_phase(self):
        deload = get_cycle_by_id("beginner-4").phases[3]

        suggestion = calculate_local_suggestion(
            "bench-press",
            analysis_with(ProgressStatus.IMPROVING),
            LocalSuggestionContext(current_phase=deload),
            target_reps=8,
            recent_session_sets=sets_of(200, 8),
        )

        assert suggestion.suggested_weight == 142.5
        assert suggestion.suggested_reps == 10
        assert "Deload" in suggestion.reasoning

    def test_intensification_phase_clamps_reps(self):
        strength = get_cycle_by_id("intermediate-6").phases[1]

        suggestion = calculate_local_suggestion(
            "bench-press",
            analysis_with(ProgressStatus.INSUFFICIENT_DATA),
            LocalSuggestionContext(current_phase=strength),
            target_reps=10,
            recent_session_sets=sets_of(200, 10),
        )

        assert suggestion.suggested_weight == 210
        assert suggestion.suggested_reps == 8

    def test_outlier_set_ignored(self):
        session = [CompletedSet(weight=w, reps=8) for w in (200, 200, 200, 200, 200, 200, 45)]

        suggestion = calculate_local_suggestion(
            "bench-press",
            analysis_with(ProgressStatus.INSUFFICIENT_DATA),
            LocalSuggestionContext(),
            target_reps=8,
            recent_session_sets=[session],
        )

        assert suggestion.suggested_weight == 200


class TestRecentSessionSets:

    def test_completed_sessions_newest_first(self):
        sessions = make_history("bench-press", [(7, 190, 8), (0, 200, 8)])
        sessions.append(make_session("open", 1, {"bench-press": [(500, 1)]}, completed=False))

        per_session = collect_recent_session_sets("bench-press", sessions)

        assert [s[0].weight for s in per_session] == [200, 190]

    def test_limit_applies_to_sessions(self):
        sessions = make_history("squat", [(i, 300, 5) for i in range(12)])
        sessions.append(make_session("far", 20, {"bench-press": [(200, 8)]}))

        assert collect_recent_session_sets("bench-press", sessions) == []


class TestGetLocalSuggestions:

    def test_one_per_strength_exercise(self, push_template, improving_history):
        suggestions = get_local_suggestions(push_template, improving_history, UserProfile(), now=NOW)

        assert [s.exercise_id for s in suggestions] == ["bench-press", "overhead-press"]
        # Median of the recent top sets (195) plus one increment
        assert suggestions[0].suggested_weight == 197.5
        assert suggestions[1].suggested_weight == 0
