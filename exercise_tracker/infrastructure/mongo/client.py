"""
MongoDB client management.

Provides the client factory used by the application lifespan. Includes a
mock mode with an in-memory document store for local development and tests.

Using the repository pattern means most code never touches this module
directly - it goes through UserRepository and ExerciseRepository, which
handle the translation between domain models and documents.
"""

import copy
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Union

from bson import ObjectId
from pymongo import ASCENDING, AsyncMongoClient
from pymongo.errors import DuplicateKeyError
from pymongo.results import InsertOneResult

logger = logging.getLogger(__name__)


@dataclass
class MongoConfig:
    """Configuration for the MongoDB connection."""
    uri: str
    database: str = "exercise_tracker"
    server_selection_timeout_ms: int = 5000


# ---------------------------------------------------------------------------
# Mock Store for Local Development
# ---------------------------------------------------------------------------

SortSpec = Union[str, list[tuple[str, int]]]


def _as_bson(value: Any) -> Any:
    """
    Normalize a value the way a BSON round trip does.

    The driver returns datetimes as naive UTC, so aware datetimes are
    converted and stripped of their timezone. Integers wider than 64 bits
    are rejected, as BSON encoding rejects them.
    """
    if isinstance(value, int) and not -2**63 <= value < 2**63:
        raise OverflowError("MongoDB can only handle up to 8-byte ints")
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _matches(document: dict, filter_: dict) -> bool:
    """
    Evaluate a MongoDB-style filter against a document.

    Supports equality and the $gte/$lte/$gt/$lt/$eq operators, which is
    all the repositories need.
    """
    for key, condition in filter_.items():
        value = document.get(key)
        condition = (
            {op: _as_bson(operand) for op, operand in condition.items()}
            if isinstance(condition, dict) else _as_bson(condition)
        )
        if isinstance(condition, dict) and any(k.startswith("$") for k in condition):
            for op, operand in condition.items():
                if value is None:
                    return False
                if op == "$gte" and not value >= operand:
                    return False
                if op == "$lte" and not value <= operand:
                    return False
                if op == "$gt" and not value > operand:
                    return False
                if op == "$lt" and not value < operand:
                    return False
                if op == "$eq" and not value == operand:
                    return False
        elif value != condition:
            return False
    return True


def _project(document: dict, projection: Optional[dict]) -> dict:
    """Apply an inclusion projection. `_id` is always kept."""
    if not projection:
        return copy.deepcopy(document)
    keep = {key for key, flag in projection.items() if flag}
    keep.add("_id")
    return {key: copy.deepcopy(value) for key, value in document.items() if key in keep}


class MockCursor:
    """
    Mock async cursor.

    Implements just enough of pymongo's AsyncCursor to support the
    repositories: sort, limit, and to_list.
    """

    def __init__(self, documents: list[dict]) -> None:
        self._documents = documents
        self._limit = 0

    def sort(self, key_or_list: SortSpec, direction: Optional[int] = None) -> "MockCursor":
        if isinstance(key_or_list, str):
            keys = [(key_or_list, direction or ASCENDING)]
        else:
            keys = list(key_or_list)

        # Stable sort, so apply the least significant key first
        for key, key_direction in reversed(keys):
            self._documents.sort(
                key=lambda doc: doc.get(key),
                reverse=key_direction < 0,
            )
        return self

    def limit(self, limit: int) -> "MockCursor":
        # Matches pymongo: a limit of 0 means no limit
        self._limit = limit
        return self

    async def to_list(self, length: Optional[int] = None) -> list[dict]:
        documents = self._documents
        if self._limit:
            documents = documents[:self._limit]
        if length is not None:
            documents = documents[:length]
        return documents


class MockCollection:
    """
    Mock async collection storing documents in insertion order.

    Unique indexes are honoured on insert so duplicate-key behaviour
    matches a real server.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._documents: list[dict] = []
        self._unique_keys: list[str] = []

    async def create_index(self, keys: SortSpec, unique: bool = False, **kwargs: Any) -> str:
        if isinstance(keys, str):
            fields = [keys]
        else:
            fields = [key for key, _ in keys]

        if unique and len(fields) == 1 and fields[0] not in self._unique_keys:
            self._unique_keys.append(fields[0])

        index_name = "_".join(f"{field}_1" for field in fields)
        logger.debug(
            "Mock index created",
            extra={"collection": self.name, "index": index_name, "unique": unique}
        )
        return index_name

    async def insert_one(self, document: dict) -> InsertOneResult:
        for key in self._unique_keys:
            if any(existing.get(key) == document.get(key) for existing in self._documents):
                raise DuplicateKeyError(
                    f"E11000 duplicate key error collection: {self.name} "
                    f"index: {key}_1 dup key: {{ {key}: {document.get(key)!r} }}"
                )

        if "_id" not in document:
            document["_id"] = ObjectId()

        stored = {key: _as_bson(value) for key, value in document.items()}
        self._documents.append(copy.deepcopy(stored))
        return InsertOneResult(document["_id"], acknowledged=True)

    async def find_one(self, filter_: Optional[dict] = None, projection: Optional[dict] = None) -> Optional[dict]:
        for document in self._documents:
            if _matches(document, filter_ or {}):
                return _project(document, projection)
        return None

    def find(self, filter_: Optional[dict] = None, projection: Optional[dict] = None) -> MockCursor:
        matched = [
            _project(document, projection)
            for document in self._documents
            if _matches(document, filter_ or {})
        ]
        return MockCursor(matched)

    async def count_documents(self, filter_: dict) -> int:
        return sum(1 for document in self._documents if _matches(document, filter_))


class MockDatabase:
    """Mock database that creates collections on first access."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._collections: dict[str, MockCollection] = {}

    def __getitem__(self, name: str) -> MockCollection:
        if name not in self._collections:
            self._collections[name] = MockCollection(name)
        return self._collections[name]

    async def command(self, command: str) -> dict:
        """Answer `ping`. Other commands are not supported."""
        if command != "ping":
            raise NotImplementedError(f"Mock database does not support {command!r}")
        return {"ok": 1.0}


class MockMongoClient:
    """
    Mock MongoDB client for local development.

    Stores data in memory. Not suitable for production, but perfect for:
    - Local development
    - API tests
    - CI environments
    """

    def __init__(self) -> None:
        self._databases: dict[str, MockDatabase] = {}
        logger.info("Initialized mock MongoDB client (in-memory)")

    def __getitem__(self, name: str) -> MockDatabase:
        if name not in self._databases:
            self._databases[name] = MockDatabase(name)
        return self._databases[name]

    @property
    def admin(self) -> MockDatabase:
        return self["admin"]

    async def close(self) -> None:
        """Close client (no-op for mock)."""
        logger.debug("Mock MongoDB client close")


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_mongo_client(
    config: Optional[MongoConfig] = None,
    mock_mode: bool = False,
) -> Union[AsyncMongoClient, MockMongoClient]:
    """
    Create a MongoDB client based on configuration.

    Returns either a real AsyncMongoClient or the in-memory mock.
    Creating the real client does not open a connection; the driver
    connects lazily on first operation.

    Args:
        config: MongoDB configuration (required if not mock_mode)
        mock_mode: If True, return the in-memory mock
    """
    if mock_mode:
        return MockMongoClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    client = AsyncMongoClient(
        config.uri,
        serverSelectionTimeoutMS=config.server_selection_timeout_ms,
    )
    logger.debug("Created MongoDB client", extra={"database": config.database})
    return client
