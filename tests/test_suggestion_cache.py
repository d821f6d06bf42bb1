"""Tests for the SQLite suggestion cache."""

import sqlite3
from datetime import timedelta

import pytest

from strength_coach.db.suggestion_cache import (
    SuggestionCacheRepository,
    compute_profile_fingerprint,
    compute_sessions_hash,
)
from strength_coach.exceptions import CacheError
from strength_coach.models.goals import ExperienceLevel
from strength_coach.models.profile import UserProfile
from strength_coach.models.sessions import WeightUnit
from strength_coach.models.suggestions import ExerciseSuggestion, SuggestionSource

from conftest import NOW, make_history, make_session


@pytest.fixture
def repo(tmp_path):
    return SuggestionCacheRepository(tmp_path / "suggestions.db", ttl_seconds=3600)


@pytest.fixture
def suggestions():
    return [
        ExerciseSuggestion(exercise_id="bench-press", suggested_weight=210, suggested_reps=8),
        ExerciseSuggestion(exercise_id="overhead-press", suggested_weight=95, suggested_reps=10),
    ]


class TestSessionsHash:

    def test_format(self):
        sessions = [
            make_session("a", 0, {"bench-press": [(200, 8)], "squat": [(300, 5)]}),
            make_session("b", 2),
        ]

        assert compute_sessions_hash(sessions) == "a:2:done|b:0:done"

    def test_only_first_ten_sessions(self):
        sessions = make_history("squat", [(i, 300, 5) for i in range(15)])

        assert compute_sessions_hash(sessions).count("|") == 9
        assert compute_sessions_hash(sessions) == compute_sessions_hash(sessions[:10])

    def test_input_order_does_not_matter(self):
        sessions = make_history("squat", [(i, 300, 5) for i in range(12)])

        assert compute_sessions_hash(list(reversed(sessions))) == compute_sessions_hash(sessions)

    def test_new_session_changes_oldest_first_history(self):
        oldest_first = list(reversed(make_history("squat", [(i + 1, 300, 5) for i in range(12)])))
        newer = oldest_first + [make_session("fresh", 0, {"squat": [(305, 5)]})]

        assert compute_sessions_hash(newer) != compute_sessions_hash(oldest_first)
        assert compute_sessions_hash(newer).startswith("fresh:1:done|")

    def test_completion_changes_hash(self):
        open_session = make_session("a", 0, {"squat": [(300, 5)]}, completed=False)
        done_session = make_session("a", 0, {"squat": [(300, 5)]})

        assert compute_sessions_hash([open_session]) == "a:1:open"
        assert compute_sessions_hash([done_session]) == "a:1:done"

    def test_empty(self):
        assert compute_sessions_hash([]) == ""


class TestRawEntries:
    """Tests for get/save with explicit keys."""

    def test_save_and_get(self, repo):
        repo.save("key", "h1", {"value": 1}, now=NOW)

        entry = repo.get("key", "h1", now=NOW + timedelta(minutes=5))

        assert entry.payload == {"value": 1}
        assert entry.created_at == NOW

    def test_missing(self, repo):
        assert repo.get("nope", "h1", now=NOW) is None

    def test_expired(self, repo):
        repo.save("key", "h1", [1], now=NOW)

        assert repo.get("key", "h1", now=NOW + timedelta(hours=2)) is None

    def test_hash_mismatch(self, repo):
        repo.save("key", "h1", [1], now=NOW)

        assert repo.get("key", "h2", now=NOW) is None

    def test_save_replaces(self, repo):
        repo.save("key", "h1", [1], now=NOW)
        repo.save("key", "h2", [2], now=NOW)

        assert repo.get("key", "h2", now=NOW).payload == [2]

    def test_unserializable_payload(self, repo):
        with pytest.raises(CacheError):
            repo.save("key", "h1", {"when": object()}, now=NOW)

    def test_corrupt_row(self, repo):
        with sqlite3.connect(str(repo.db_path)) as conn:
            conn.execute(
                "INSERT INTO suggestion_cache VALUES (?, ?, ?, ?)",
                ("key", "h1", "{not json", NOW.isoformat()),
            )

        with pytest.raises(CacheError):
            repo.get("key", "h1", now=NOW)


class TestMaintenance:

    def test_delete(self, repo):
        repo.save("key", "h1", [1], now=NOW)

        assert repo.delete("key") is True
        assert repo.delete("key") is False

    def test_delete_template_covers_every_profile(self, repo, suggestions, improving_history):
        repo.save_suggestions("push-day", improving_history, suggestions, now=NOW)
        repo.save_suggestions(
            "push-day", improving_history, suggestions, now=NOW,
            profile=UserProfile(weight_unit=WeightUnit.KG),
        )
        repo.save_suggestions("push-day-2", improving_history, suggestions, now=NOW)

        assert repo.delete_template("push-day") == 2
        assert repo.get_suggestions("push-day-2", improving_history, now=NOW) == suggestions
        assert repo.delete_template("push-day") == 0

    def test_clear(self, repo):
        repo.save("a", "h", [1], now=NOW)
        repo.save("b", "h", [1], now=NOW)

        assert repo.clear() == 2
        assert repo.get("a", "h", now=NOW) is None

    def test_cleanup_expired(self, repo):
        repo.save("old", "h", [1], now=NOW - timedelta(hours=3))
        repo.save("fresh", "h", [1], now=NOW)

        assert repo.cleanup_expired(now=NOW) == 1
        assert repo.get("fresh", "h", now=NOW) is not None


class TestSuggestionApi:
    """Tests for the template-keyed convenience methods."""

    def test_round_trip(self, repo, suggestions, improving_history):
        repo.save_suggestions("push-day", improving_history, suggestions, now=NOW)

        cached = repo.get_suggestions("push-day", improving_history, now=NOW)

        assert cached == suggestions
        assert cached[0].source == SuggestionSource.GENERATED

    def test_new_session_invalidates(self, repo, suggestions, improving_history):
        repo.save_suggestions("push-day", improving_history, suggestions, now=NOW)
        newer = [make_session("fresh", 0, {"bench-press": [(210, 8)]})] + improving_history

        assert repo.get_suggestions("push-day", newer, now=NOW) is None

    def test_corrupt_entry_is_a_miss(self, repo, improving_history):
        with sqlite3.connect(str(repo.db_path)) as conn:
            conn.execute(
                "INSERT INTO suggestion_cache VALUES (?, ?, ?, ?)",
                (
                    repo.key_for_template("push-day"),
                    compute_sessions_hash(improving_history),
                    "{not json",
                    NOW.isoformat(),
                ),
            )

        assert repo.get_suggestions("push-day", improving_history, now=NOW) is None

    def test_invalid_payload_is_a_miss(self, repo, improving_history):
        repo.save(
            repo.key_for_template("push-day"),
            compute_sessions_hash(improving_history),
            [{"exerciseId": "bench-press"}],
            now=NOW,
        )

        assert repo.get_suggestions("push-day", improving_history, now=NOW) is None

    def test_profile_is_part_of_key(self, repo, suggestions, improving_history):
        repo.save_suggestions("push-day", improving_history, suggestions, now=NOW, profile=UserProfile())

        kg = UserProfile(weight_unit=WeightUnit.KG)

        assert repo.get_suggestions("push-day", improving_history, now=NOW, profile=kg) is None
        assert repo.get_suggestions("push-day", improving_history, now=NOW) == suggestions

    def test_profile_fingerprint(self):
        default = compute_profile_fingerprint(None)

        assert default == compute_profile_fingerprint(UserProfile())
        assert len(default) == 16
        assert default != compute_profile_fingerprint(UserProfile(experience_level=ExperienceLevel.BEGINNER))
