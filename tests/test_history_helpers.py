"""Tests for the sufficiency gate, outlier filter and body-weight trend."""

from datetime import timedelta

from strength_coach.analysis.body_weight import (
    WeightTrendDirection,
    calculate_body_weight_trend,
)
from strength_coach.analysis.outliers import filter_outliers, median
from strength_coach.analysis.sufficiency import (
    has_enough_history_for_plateau_detection,
    week_bucket,
)
from strength_coach.models.sessions import WeightEntry, WeightUnit

from conftest import NOW, make_session


def weekly_sessions(count, spacing_days=7, completed=True):
    return [
        make_session(f"w{i}", i * spacing_days, {"squat": [(300, 5)]}, completed=completed)
        for i in range(count)
    ]


class TestWeekBucket:

    def test_whole_weeks(self):
        assert week_bucket(NOW - timedelta(days=6, hours=23), NOW) == 0
        assert week_bucket(NOW - timedelta(days=7), NOW) == 1
        assert week_bucket(NOW - timedelta(days=69), NOW) == 9

    def test_future_clamps_to_zero(self):
        assert week_bucket(NOW + timedelta(days=3), NOW) == 0


class TestHistorySufficiency:
    """Tests for the plateau detection gate."""

    def test_ten_sessions_over_ten_weeks(self):
        assert has_enough_history_for_plateau_detection(weekly_sessions(10), NOW)

    def test_too_few_sessions(self):
        assert not has_enough_history_for_plateau_detection(weekly_sessions(9), NOW)

    def test_too_few_distinct_weeks(self):
        # Twelve sessions packed into two weeks
        sessions = weekly_sessions(12, spacing_days=1)

        assert not has_enough_history_for_plateau_detection(sessions, NOW)

    def test_incomplete_sessions_do_not_count(self):
        sessions = weekly_sessions(9) + [make_session("open", 1, completed=False)]

        assert not has_enough_history_for_plateau_detection(sessions, NOW)

    def test_sessions_outside_window_do_not_count(self):
        sessions = weekly_sessions(9) + [make_session("old", 75)]

        assert not has_enough_history_for_plateau_detection(sessions, NOW)

    def test_empty_history(self):
        assert not has_enough_history_for_plateau_detection([], NOW)

    def test_exactly_eight_weeks(self):
        # Ten sessions, two of them doubling up on weeks 0 and 1
        sessions = weekly_sessions(8) + [make_session("x1", 1), make_session("x2", 8)]

        assert has_enough_history_for_plateau_detection(sessions, NOW)

    def test_seven_weeks(self):
        sessions = weekly_sessions(7) + [make_session(f"x{d}", d) for d in (1, 2, 3)]

        assert len(sessions) == 10
        assert not has_enough_history_for_plateau_detection(sessions, NOW)



class TestOutliers:

    def test_median(self):
        assert median([3, 1, 2]) == 2
        assert median([1, 2, 3, 4]) == 2.5
        assert median([]) == 0

    def test_drops_far_values(self):
        values = [100, 100, 100, 100, 100, 100, 300]

        assert filter_outliers(values, lambda v: v) == [100] * 6

    def test_small_samples_untouched(self):
        assert filter_outliers([100, 400], lambda v: v) == [100, 400]

    def test_zero_spread_untouched(self):
        assert filter_outliers([50, 50, 50], lambda v: v) == [50, 50, 50]


class TestBodyWeightTrend:
    """Tests for the 60-day body-weight trend."""

    def entry(self, days_ago, weight):
        return WeightEntry(date=NOW - timedelta(days=days_ago), weight=weight)

    def test_gaining(self):
        entries = [self.entry(30, 180), self.entry(10, 181), self.entry(0, 182.5)]

        trend = calculate_body_weight_trend(entries, WeightUnit.LBS, NOW)

        assert trend.direction == WeightTrendDirection.UP
        assert trend.current_weight == 182.5
        assert trend.change == 2.5
        assert trend.entries == 3
        assert trend.recent[0].weight == 182.5

    def test_losing(self):
        entries = [self.entry(0, 176), self.entry(40, 180)]

        trend = calculate_body_weight_trend(entries, WeightUnit.LBS, NOW)

        assert trend.direction == WeightTrendDirection.DOWN

    def test_stable_within_threshold(self):
        entries = [self.entry(20, 80), self.entry(0, 80.5)]

        trend = calculate_body_weight_trend(entries, WeightUnit.KG, NOW)

        assert trend.direction == WeightTrendDirection.STABLE
        assert trend.unit == WeightUnit.KG

    def test_needs_two_entries_in_window(self):
        entries = [self.entry(0, 180), self.entry(90, 200)]

        assert calculate_body_weight_trend(entries, WeightUnit.LBS, NOW) is None
