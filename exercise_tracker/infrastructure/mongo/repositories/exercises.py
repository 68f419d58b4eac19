"""
MongoDB repository for exercises.

Exercise dates are calendar dates, but BSON has no date-only type, so
they are stored as midnight UTC datetimes. That keeps range queries and
sorting on the server.
"""

import logging
from datetime import date, datetime, time, timezone

from pymongo import ASCENDING

from exercise_tracker.core.tracking.models import Exercise, LogQuery

from .users import DocumentDatabase, to_object_id

logger = logging.getLogger(__name__)

EXERCISES_COLLECTION = "exercises"


def date_to_storage(value: date) -> datetime:
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def date_from_storage(value: datetime) -> date:
    # pymongo returns naive UTC datetimes unless tz_aware is set
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.date()


class ExerciseRepository:
    """
    Repository for exercise persistence.

    The user reference is stored as an ObjectId in `user_id`. The
    repository does not check that the user exists; callers look the
    user up first.
    """

    def __init__(self, database: DocumentDatabase) -> None:
        self._collection = database[EXERCISES_COLLECTION]

    async def ensure_indexes(self) -> None:
        await self._collection.create_index([("user_id", ASCENDING), ("date", ASCENDING)])

    async def add(self, exercise: Exercise) -> Exercise:
        """Insert an exercise and return it with its generated id."""
        document = {
            "user_id": to_object_id(exercise.user_id),
            "description": exercise.description,
            "duration": exercise.duration,
            "date": date_to_storage(exercise.date),
        }
        result = await self._collection.insert_one(document)

        logger.debug(
            "Inserted exercise",
            extra={"exercise_id": str(result.inserted_id), "user_id": exercise.user_id}
        )

        return Exercise(
            user_id=exercise.user_id,
            description=exercise.description,
            duration=exercise.duration,
            date=exercise.date,
            id=str(result.inserted_id),
        )

    async def find_for_user(self, user_id: str, query: LogQuery) -> list[Exercise]:
        """
        Load a user's exercises matching the query.

        Results are sorted by date ascending (insertion order breaks ties)
        before the limit is applied.
        """
        filter_: dict = {"user_id": to_object_id(user_id)}

        if query.has_date_range:
            date_range = {}
            if query.date_from is not None:
                date_range["$gte"] = date_to_storage(query.date_from)
            if query.date_to is not None:
                date_range["$lte"] = date_to_storage(query.date_to)
            filter_["date"] = date_range

        cursor = self._collection.find(filter_).sort([("date", ASCENDING), ("_id", ASCENDING)])
        if query.limit is not None:
            cursor = cursor.limit(query.limit)

        documents = await cursor.to_list()
        return [self._to_exercise(document) for document in documents]

    @staticmethod
    def _to_exercise(document: dict) -> Exercise:
        return Exercise(
            user_id=str(document["user_id"]),
            description=document["description"],
            duration=int(document["duration"]),
            date=date_from_storage(document["date"]),
            id=str(document["_id"]),
        )
