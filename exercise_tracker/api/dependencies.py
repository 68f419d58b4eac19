"""
FastAPI dependency injection.

Dependencies provide repositories to route handlers.
The MongoDB client is created once in the application lifespan and kept
on `app.state`; repositories are cheap wrappers built per request.
"""

from typing import Annotated

from fastapi import Depends, Request

from ..infrastructure.mongo.repositories import ExerciseRepository, UserRepository
from ..infrastructure.mongo.repositories.users import DocumentDatabase


def get_database(request: Request) -> DocumentDatabase:
    """Provide the database opened by the application lifespan."""
    return request.app.state.database


def get_user_repository(
    database: Annotated[DocumentDatabase, Depends(get_database)],
) -> UserRepository:
    return UserRepository(database)


def get_exercise_repository(
    database: Annotated[DocumentDatabase, Depends(get_database)],
) -> ExerciseRepository:
    return ExerciseRepository(database)


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
UserRepositoryDep = Annotated[UserRepository, Depends(get_user_repository)]
ExerciseRepositoryDep = Annotated[ExerciseRepository, Depends(get_exercise_repository)]
