"""
Unit tests for the exercise tracking domain logic.

These tests verify the core business rules without touching
external services (no database, no HTTP).

Testing philosophy:
- Test behavior, not implementation
- Each test should have a clear "given/when/then" structure
- Use descriptive names that explain what we're testing
"""

import dataclasses
import typing
from datetime import date, datetime, timezone

import pytest

from exercise_tracker.core.tracking.dates import InvalidDateError, today_utc
from exercise_tracker.core.tracking.models import (
    MAX_INT32,
    Exercise,
    ExerciseLog,
    LogQuery,
    User,
    ValidationError,
    parse_positive_int,
)


# ---------------------------------------------------------------------------
# User Tests
# ---------------------------------------------------------------------------

class TestUser:
    """Tests for the User model."""

    def test_user_keeps_username(self):
        user = User(username="alice")
        assert user.username == "alice"
        assert user.id is None

    def test_user_rejects_blank_username(self):
        """A username of only whitespace is as good as none."""
        with pytest.raises(ValidationError, match="Username is required"):
            User(username="   ")


# ---------------------------------------------------------------------------
# Exercise Tests
# ---------------------------------------------------------------------------

class TestExercise:
    """Tests for the Exercise model."""

    def test_date_defaults_to_today(self):
        exercise = Exercise(user_id="u1", description="run", duration=30)
        assert exercise.date == today_utc()

    def test_default_date_is_computed_per_instance(self, monkeypatch):
        """The default must not be frozen when the class is defined."""
        from exercise_tracker.core.tracking import dates

        class FrozenDatetime(datetime):
            @classmethod
            def now(cls, tz=None):
                return datetime(2000, 1, 1, 12, 0, tzinfo=timezone.utc)

        first = Exercise(user_id="u1", description="run", duration=30)
        monkeypatch.setattr(dates, "datetime", FrozenDatetime)
        second = Exercise.from_input(user_id="u1", description="swim", duration="20")

        assert first.date != date(2000, 1, 1)
        assert second.date == date(2000, 1, 1)

    def test_rejects_empty_description(self):
        with pytest.raises(ValidationError, match="Description"):
            Exercise(user_id="u1", description="", duration=30)

    def test_rejects_non_positive_duration(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            Exercise(user_id="u1", description="run", duration=0)

    def test_rejects_oversized_duration(self):
        with pytest.raises(ValidationError, match="at most"):
            Exercise(user_id="u1", description="run", duration=MAX_INT32 + 1)

    def test_date_field_is_annotated_as_a_date(self):
        hints = typing.get_type_hints(Exercise)
        date_field = next(f for f in dataclasses.fields(Exercise) if f.name == "date")

        assert hints["date"] is date
        assert date_field.type is date

    def test_from_input_parses_date_and_duration(self):
        exercise = Exercise.from_input(
            user_id="u1",
            description="run",
            duration="45",
            exercise_date="2023-01-15",
        )

        assert exercise.duration == 45
        assert exercise.date == date(2023, 1, 15)

    def test_from_input_reports_bad_date_before_bad_duration(self):
        with pytest.raises(InvalidDateError):
            Exercise.from_input(
                user_id="u1",
                description="run",
                duration="abc",
                exercise_date="not-a-date",
            )

    def test_from_input_treats_blank_date_as_missing(self):
        exercise = Exercise.from_input(
            user_id="u1", description="run", duration="10", exercise_date=""
        )
        assert exercise.date == today_utc()


class TestParsePositiveInt:
    """Tests for duration and limit coercion."""

    @pytest.mark.parametrize("raw, expected", [("30", 30), (" 7 ", 7), ("15.0", 15)])
    def test_accepts_whole_numbers(self, raw, expected):
        assert parse_positive_int(raw, "Duration") == expected

    @pytest.mark.parametrize("raw", ["abc", "12.5", "nan", "inf", ""])
    def test_rejects_non_integers(self, raw):
        with pytest.raises(ValidationError, match="whole number"):
            parse_positive_int(raw, "Duration")

    def test_rejects_negative(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            parse_positive_int("-5", "Limit")

    def test_accepts_largest_storable_value(self):
        assert parse_positive_int(str(MAX_INT32), "Duration") == MAX_INT32

    @pytest.mark.parametrize("raw", ["2147483648", "99999999999999999999", "1e30"])
    def test_rejects_values_too_large_to_store(self, raw):
        with pytest.raises(ValidationError, match="at most"):
            parse_positive_int(raw, "Duration")


# ---------------------------------------------------------------------------
# Log Query Tests
# ---------------------------------------------------------------------------

class TestLogQuery:
    """Tests for log filter parsing."""

    def test_no_params_means_no_filters(self):
        query = LogQuery.from_params()

        assert not query.has_date_range
        assert query.limit is None

    def test_parses_all_params(self):
        query = LogQuery.from_params(date_from="2023-01-01", date_to="2023-01-31", limit="5")

        assert query.date_from == date(2023, 1, 1)
        assert query.date_to == date(2023, 1, 31)
        assert query.limit == 5
        assert query.has_date_range

    def test_single_bound_is_a_date_range(self):
        assert LogQuery.from_params(date_to="2023-01-31").has_date_range

    def test_blank_params_are_ignored(self):
        query = LogQuery.from_params(date_from="", date_to=" ", limit="")

        assert not query.has_date_range
        assert query.limit is None

    def test_malformed_date_is_rejected(self):
        with pytest.raises(InvalidDateError):
            LogQuery.from_params(date_from="yesterday-ish")

    def test_zero_limit_is_rejected(self):
        with pytest.raises(ValidationError, match="Limit"):
            LogQuery(limit=0)

    def test_oversized_limit_is_rejected(self):
        with pytest.raises(ValidationError, match="Limit must be at most"):
            LogQuery.from_params(limit="99999999999999999999")


class TestExerciseLog:
    def test_count_reflects_exercises(self):
        user = User(username="bob", id="u1")
        log = ExerciseLog(
            user=user,
            exercises=[
                Exercise(user_id="u1", description="run", duration=30),
                Exercise(user_id="u1", description="row", duration=20),
            ],
        )

        assert log.count == 2

    def test_empty_log(self):
        assert ExerciseLog(user=User(username="bob")).count == 0
