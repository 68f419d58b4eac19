"""
User registration endpoints.

Users have a single user-supplied field, `username`, which must be unique.
The identifier is serialized as `_id`, the key clients of this API expect.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Form, HTTPException, status
from pydantic import BaseModel, Field

from ...core.tracking.models import User, ValidationError
from ..dependencies import UserRepositoryDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    """A registered user."""
    username: str = Field(description="Unique username")
    id: str = Field(serialization_alias="_id", description="User identifier")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Create a user",
    description="Register a new user from the `username` form field",
)
async def create_user(
    username: Annotated[Optional[str], Form()] = None,
    repository: UserRepositoryDep = None,
) -> UserResponse:
    """
    Register a new user.

    Any persistence failure, including a taken username, is reported as
    a generic server error.
    """
    try:
        user = User(username=username or "")
    except ValidationError as e:
        logger.warning("Rejected user registration", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    try:
        saved = await repository.create(user)
    except Exception as e:
        logger.error(
            "Error creating user",
            extra={"username": user.username, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not create user",
        )

    logger.info("User created", extra={"user_id": saved.id})

    return UserResponse(username=saved.username, id=saved.id)


@router.get(
    "",
    response_model=list[UserResponse],
    status_code=status.HTTP_200_OK,
    summary="List users",
    description="Retrieve every registered user in registration order",
)
async def list_users(
    repository: UserRepositoryDep = None,
) -> list[UserResponse]:
    try:
        users = await repository.list_all()
    except Exception as e:
        logger.error("Error fetching users", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not fetch users",
        )

    return [UserResponse(username=user.username, id=user.id) for user in users]
