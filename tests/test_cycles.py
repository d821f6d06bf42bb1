"""Tests for the training cycle catalog and goal guidance."""

import pytest
from pydantic import ValidationError

from strength_coach.models.cycles import (
    PREDEFINED_CYCLES,
    PhaseType,
    UserCycleState,
    get_current_phase,
    get_cycle_by_id,
    get_default_cycle,
    get_total_weeks_completed,
    is_cycle_complete,
    list_cycles,
)
from strength_coach.models.goals import (
    ExperienceLevel,
    WorkoutGoal,
    get_experience_guidance,
    get_goal_info,
)
from strength_coach.models.sessions import ExerciseType


class TestCycleCatalog:
    """Tests for predefined cycles."""

    def test_catalog_ids(self):
        assert [c.id for c in PREDEFINED_CYCLES] == [
            "beginner-4", "intermediate-6", "advanced-8", "cardio-4", "cardio-6",
        ]

    @pytest.mark.parametrize("cycle_id,weeks", [
        ("beginner-4", 4),
        ("intermediate-6", 6),
        ("advanced-8", 8),
        ("cardio-4", 4),
        ("cardio-6", 6),
    ])
    def test_total_weeks(self, cycle_id, weeks):
        assert get_cycle_by_id(cycle_id).total_weeks == weeks

    def test_every_cycle_ends_with_deload(self):
        for cycle in PREDEFINED_CYCLES:
            assert cycle.phases[-1].type == PhaseType.DELOAD

    def test_strength_phases_carry_rep_ranges(self):
        for cycle in list_cycles(ExerciseType.STRENGTH):
            for phase in cycle.phases:
                assert phase.is_strength
                assert phase.rep_range_min <= phase.rep_range_max

    def test_cardio_phases_have_no_rep_range(self):
        for cycle in list_cycles(ExerciseType.CARDIO):
            for phase in cycle.phases:
                assert phase.rep_range is None
                assert "rep_range_min" not in phase.to_dict()

    def test_unknown_cycle(self):
        assert get_cycle_by_id("nope") is None

    def test_list_by_type(self):
        assert [c.id for c in list_cycles(ExerciseType.CARDIO)] == ["cardio-4", "cardio-6"]
        assert len(list_cycles()) == 5

    def test_to_dict(self):
        data = get_cycle_by_id("intermediate-6").to_dict()

        assert data["total_weeks"] == 6
        assert data["cycle_type"] == "strength"
        assert data["phases"][1]["type"] == "intensification"


class TestCycleProgress:
    """Tests for position tracking within a cycle."""

    def test_current_phase(self):
        cycle = get_cycle_by_id("intermediate-6")
        state = UserCycleState(cycle_config_id="intermediate-6", current_phase_index=1)

        assert get_current_phase(cycle, state).name == "Strength"

    def test_past_last_phase(self):
        cycle = get_cycle_by_id("beginner-4")
        state = UserCycleState(cycle_config_id="beginner-4", current_phase_index=4)

        assert get_current_phase(cycle, state) is None
        assert is_cycle_complete(cycle, state)

    def test_weeks_completed(self):
        cycle = get_cycle_by_id("intermediate-6")
        state = UserCycleState(
            cycle_config_id="intermediate-6",
            current_phase_index=2,
            current_week_in_phase=1,
        )

        assert get_total_weeks_completed(state, cycle) == 5
        assert not is_cycle_complete(cycle, state)

    def test_negative_index_rejected(self):
        with pytest.raises(ValidationError):
            UserCycleState(cycle_config_id="beginner-4", current_phase_index=-1)

    def test_camel_case_input(self):
        state = UserCycleState.model_validate({
            "cycleConfigId": "advanced-8",
            "currentPhaseIndex": 3,
            "currentWeekInPhase": 0,
        })

        assert state.current_phase_index == 3


class TestDefaultCycle:

    @pytest.mark.parametrize("experience,goal,expected", [
        (ExperienceLevel.BEGINNER, WorkoutGoal.BUILD, "beginner-4"),
        (ExperienceLevel.BEGINNER, WorkoutGoal.MAINTAIN, "beginner-4"),
        (ExperienceLevel.INTERMEDIATE, WorkoutGoal.BUILD, "intermediate-6"),
        (ExperienceLevel.ADVANCED, WorkoutGoal.BUILD, "advanced-8"),
        (ExperienceLevel.INTERMEDIATE, WorkoutGoal.LOSE, "beginner-4"),
    ])
    def test_strength_defaults(self, experience, goal, expected):
        assert get_default_cycle(experience, goal).id == expected

    def test_cardio_defaults(self):
        assert get_default_cycle(
            ExperienceLevel.ADVANCED, WorkoutGoal.LOSE, ExerciseType.CARDIO
        ).id == "cardio-6"
        assert get_default_cycle(
            ExperienceLevel.ADVANCED, WorkoutGoal.BUILD, ExerciseType.CARDIO
        ).id == "cardio-4"


class TestGoals:

    def test_goal_info(self):
        assert get_goal_info(WorkoutGoal.BUILD).use_progressive_overload
        assert not get_goal_info(WorkoutGoal.MAINTAIN).use_progressive_overload

    def test_experience_guidance(self):
        for level in ExperienceLevel:
            assert get_experience_guidance(level)
