"""
Domain models for exercise tracking.

These models represent the core business concepts. They have no dependencies
on FastAPI or MongoDB; identifiers are plain strings here and the repositories
translate them to and from the store's native ObjectIds.
"""

import datetime as dt
from dataclasses import dataclass, field
from typing import Optional

from .dates import parse_optional_date, today_utc

# Largest value a 32-bit BSON int holds; MongoDB rejects wider integers
MAX_INT32 = 2**31 - 1


class ValidationError(ValueError):
    """Raised when input fails a domain rule (missing field, bad number)."""
    pass


def parse_positive_int(value: str, name: str) -> int:
    """
    Coerce a form/query string to a positive integer.

    Whole-number floats like "30.0" are accepted; anything else
    (fractions, words, zero, negatives, values above MAX_INT32) is rejected.
    """
    text = str(value).strip()
    try:
        number = int(text)
    except ValueError:
        try:
            as_float = float(text)
        except ValueError:
            raise ValidationError(f"{name} must be a whole number")
        if not as_float.is_integer():
            raise ValidationError(f"{name} must be a whole number")
        number = int(as_float)

    if number <= 0:
        raise ValidationError(f"{name} must be greater than zero")
    if number > MAX_INT32:
        raise ValidationError(f"{name} must be at most {MAX_INT32}")
    return number


@dataclass
class User:
    """A registered user. Only the username is user-supplied."""
    username: str
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.username or not self.username.strip():
            raise ValidationError("Username is required")


@dataclass
class Exercise:
    """
    A single logged exercise.

    `user_id` is a plain reference to a User looked up at creation time.
    Deleting a user would not remove its exercises.
    """
    user_id: str
    description: str
    duration: int  # minutes
    date: dt.date = field(default_factory=today_utc)
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.description or not self.description.strip():
            raise ValidationError("Description is required")
        if isinstance(self.duration, bool) or not isinstance(self.duration, int):
            raise ValidationError("Duration must be a whole number")
        if self.duration <= 0:
            raise ValidationError("Duration must be greater than zero")
        if self.duration > MAX_INT32:
            raise ValidationError(f"Duration must be at most {MAX_INT32}")

    @classmethod
    def from_input(
        cls,
        user_id: str,
        description: str,
        duration: str,
        exercise_date: Optional[str] = None,
    ) -> "Exercise":
        """
        Build an exercise from raw form values.

        The date defaults to today when omitted. Date parsing runs before
        duration parsing so a bad date is reported first.
        """
        parsed_date = parse_optional_date(exercise_date)
        minutes = parse_positive_int(duration, "Duration")

        if parsed_date is None:
            return cls(user_id=user_id, description=description, duration=minutes)
        return cls(
            user_id=user_id,
            description=description,
            duration=minutes,
            date=parsed_date,
        )


@dataclass(frozen=True)
class LogQuery:
    """
    Filters for an exercise log request.

    Both date bounds are inclusive. The limit is applied after sorting
    by date ascending, so it keeps the earliest entries.
    """
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    limit: Optional[int] = None

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit <= 0:
            raise ValidationError("Limit must be greater than zero")
        if self.limit is not None and self.limit > MAX_INT32:
            raise ValidationError(f"Limit must be at most {MAX_INT32}")

    @property
    def has_date_range(self) -> bool:
        return self.date_from is not None or self.date_to is not None

    @classmethod
    def from_params(
        cls,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> "LogQuery":
        """Parse raw query-string values. Blank values are treated as absent."""
        parsed_limit = None
        if limit is not None and limit.strip():
            parsed_limit = parse_positive_int(limit, "Limit")

        return cls(
            date_from=parse_optional_date(date_from),
            date_to=parse_optional_date(date_to),
            limit=parsed_limit,
        )


@dataclass
class ExerciseLog:
    """A user's exercises after filtering, in ascending date order."""
    user: User
    exercises: list[Exercise] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.exercises)
