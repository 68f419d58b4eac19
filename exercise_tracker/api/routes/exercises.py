"""
Exercise logging endpoints.

Exercises are added per user from HTML form fields and read back as a
log filtered by date range and capped by a limit. Dates are rendered in
the short "Sun Jan 15 2023" form.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Form, HTTPException, Query, status
from pydantic import BaseModel, Field

from ...core.tracking.dates import InvalidDateError, format_date_string
from ...core.tracking.models import Exercise, ExerciseLog, LogQuery, ValidationError
from ...infrastructure.mongo.repositories import UserNotFoundError
from ..dependencies import ExerciseRepositoryDep, UserRepositoryDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class ExerciseResponse(BaseModel):
    """The user an exercise was added to, with the exercise fields."""
    id: str = Field(serialization_alias="_id", description="User identifier")
    username: str = Field(description="Username of the owner")
    date: str = Field(description="Exercise date, e.g. 'Sun Jan 15 2023'")
    duration: int = Field(description="Duration in minutes")
    description: str = Field(description="What was done")


class LogEntry(BaseModel):
    """Single exercise in a log."""
    description: str
    duration: int
    date: str


class ExerciseLogResponse(BaseModel):
    """A user's filtered exercise log."""
    id: str = Field(serialization_alias="_id", description="User identifier")
    username: str = Field(description="Username of the owner")
    count: int = Field(description="Number of entries returned")
    log: list[LogEntry] = Field(description="Exercises in ascending date order")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/{user_id}/exercises",
    response_model=ExerciseResponse,
    status_code=status.HTTP_200_OK,
    summary="Add an exercise",
    description="Record an exercise for a user. The date defaults to today.",
)
async def add_exercise(
    user_id: str,
    description: Annotated[Optional[str], Form()] = None,
    duration: Annotated[Optional[str], Form()] = None,
    exercise_date: Annotated[Optional[str], Form(alias="date")] = None,
    users: UserRepositoryDep = None,
    exercises: ExerciseRepositoryDep = None,
) -> ExerciseResponse:
    """
    Add an exercise to a user's log.

    Checks run in order: required fields, user lookup, date, duration.
    Nothing is written unless all of them pass.
    """
    if not (description and description.strip()) or not (duration and duration.strip()):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Description and duration are required",
        )

    try:
        user = await users.get(user_id)
    except UserNotFoundError:
        logger.warning("Exercise for unknown user", extra={"user_id": user_id})
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    try:
        exercise = Exercise.from_input(
            user_id=user.id,
            description=description,
            duration=duration,
            exercise_date=exercise_date,
        )
    except InvalidDateError as e:
        logger.warning(
            "Rejected exercise date",
            extra={"user_id": user_id, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid date format",
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    try:
        saved = await exercises.add(exercise)
    except Exception as e:
        logger.error(
            "Error saving exercise",
            extra={"user_id": user_id, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save exercise",
        )

    logger.info(
        "Exercise added",
        extra={"user_id": user.id, "exercise_id": saved.id}
    )

    return ExerciseResponse(
        id=user.id,
        username=user.username,
        date=format_date_string(saved.date),
        duration=saved.duration,
        description=saved.description,
    )


@router.get(
    "/{user_id}/logs",
    response_model=ExerciseLogResponse,
    status_code=status.HTTP_200_OK,
    summary="Get a user's exercise log",
    description="Exercises sorted by date, optionally filtered by `from`/`to` and capped by `limit`",
)
async def get_logs(
    user_id: str,
    date_from: Annotated[Optional[str], Query(alias="from")] = None,
    date_to: Annotated[Optional[str], Query(alias="to")] = None,
    limit: Annotated[Optional[str], Query()] = None,
    users: UserRepositoryDep = None,
    exercises: ExerciseRepositoryDep = None,
) -> ExerciseLogResponse:
    """
    Retrieve a user's exercise log.

    `from` and `to` are inclusive calendar dates. Malformed dates or
    limits are rejected the same way the exercise form rejects them.
    """
    try:
        user = await users.get(user_id)
    except UserNotFoundError:
        logger.warning("Log requested for unknown user", extra={"user_id": user_id})
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    try:
        query = LogQuery.from_params(date_from=date_from, date_to=date_to, limit=limit)
    except InvalidDateError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid date format",
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    try:
        found = await exercises.find_for_user(user.id, query)
    except Exception as e:
        logger.error(
            "Error fetching exercise log",
            extra={"user_id": user_id, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not fetch exercise log",
        )

    exercise_log = ExerciseLog(user=user, exercises=found)

    return ExerciseLogResponse(
        id=user.id,
        username=user.username,
        count=exercise_log.count,
        log=[
            LogEntry(
                description=exercise.description,
                duration=exercise.duration,
                date=format_date_string(exercise.date),
            )
            for exercise in exercise_log.exercises
        ],
    )
