"""
MongoDB repository for users.

Translates between the User domain model and documents in the `users`
collection. Username uniqueness is enforced by a unique index, so a
duplicate insert surfaces as a pymongo DuplicateKeyError.
"""

import logging
from typing import Any, Protocol

from bson import ObjectId
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from exercise_tracker.core.tracking.models import User

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"


class DocumentDatabase(Protocol):
    """
    Protocol for MongoDB databases.

    Using a protocol means tests can provide the in-memory mock without
    a running server.
    """

    def __getitem__(self, name: str) -> Any: ...


class UserNotFoundError(Exception):
    """Raised when a requested user doesn't exist."""
    pass


class DuplicateUsernameError(Exception):
    """Raised when a username is already taken."""
    pass


def to_object_id(user_id: str) -> ObjectId:
    """
    Convert a user id string to an ObjectId.

    A malformed id cannot match any stored user, so it is reported
    as not found rather than as a separate error.
    """
    if not ObjectId.is_valid(user_id):
        raise UserNotFoundError(f"User {user_id} not found")
    return ObjectId(user_id)


class UserRepository:
    """
    Repository for user persistence.

    - create: Persist a new user
    - get: Load a user by ID
    - list_all: All users in insertion order
    """

    def __init__(self, database: DocumentDatabase) -> None:
        self._collection = database[USERS_COLLECTION]

    async def ensure_indexes(self) -> None:
        await self._collection.create_index("username", unique=True)

    async def create(self, user: User) -> User:
        try:
            result = await self._collection.insert_one({"username": user.username})
        except DuplicateKeyError:
            logger.warning(
                "Username already exists",
                extra={"username": user.username}
            )
            raise DuplicateUsernameError(f"Username {user.username!r} is taken")

        return User(username=user.username, id=str(result.inserted_id))

    async def get(self, user_id: str) -> User:
        document = await self._collection.find_one({"_id": to_object_id(user_id)})
        if document is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return self._to_user(document)

    async def list_all(self) -> list[User]:
        # ObjectIds are generated in increasing order, so sorting on _id
        # returns users in insertion order
        cursor = self._collection.find({}, {"username": 1}).sort("_id", ASCENDING)
        documents = await cursor.to_list()
        logger.debug("Loaded users", extra={"count": len(documents)})
        return [self._to_user(document) for document in documents]

    @staticmethod
    def _to_user(document: dict) -> User:
        return User(username=document["username"], id=str(document["_id"]))
