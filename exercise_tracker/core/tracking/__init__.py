"""
Exercise tracking logic.

Contains the domain models, input validation, and calendar date handling.
"""

from .dates import (
    InvalidDateError,
    format_date_string,
    parse_calendar_date,
    today_utc,
)
from .models import (
    Exercise,
    ExerciseLog,
    LogQuery,
    User,
    ValidationError,
)

__all__ = [
    "Exercise",
    "ExerciseLog",
    "InvalidDateError",
    "LogQuery",
    "User",
    "ValidationError",
    "format_date_string",
    "parse_calendar_date",
    "today_utc",
]
