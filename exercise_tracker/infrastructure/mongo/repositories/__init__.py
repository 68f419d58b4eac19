"""
Repository pattern implementations for MongoDB.

Repositories translate between domain models and documents.
"""

from .exercises import ExerciseRepository
from .users import DuplicateUsernameError, UserNotFoundError, UserRepository

__all__ = [
    "DuplicateUsernameError",
    "ExerciseRepository",
    "UserNotFoundError",
    "UserRepository",
]
