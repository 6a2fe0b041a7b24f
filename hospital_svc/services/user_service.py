"""
Service layer for user accounts.

Architecture:
    API Layer (routers) → UserService → UserRepository → Database
"""
import sqlite3
import logging
from typing import List, Optional

from repositories import UserRepository
from schemas import UserCreate, UserResponse
from core.exceptions import DatabaseError, DuplicateUserError, UserNotFoundError

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user account operations."""

    def __init__(self, user_repository: UserRepository):
        """
        Args:
            user_repository: UserRepository instance for data access.
                Injected via core.dependencies.get_user_service().
        """
        self._repo = user_repository

    def create_user(self, payload: UserCreate) -> UserResponse:
        """
        Create a user account.

        Raises:
            DuplicateUserError: If the email is already registered.
        """
        logger.info(f"Creating user with role {payload.role.value}")

        try:
            created = self._repo.add(
                name=payload.name,
                email=payload.email.lower(),
                role=payload.role.value,
                mobile_number=payload.mobile_number,
            )
        except sqlite3.Error as e:
            raise DatabaseError(operation="create_user", error=str(e)) from e

        if created is None:
            logger.warning("User email already registered")
            raise DuplicateUserError(email=payload.email.lower())

        logger.info(f"User created (id={created['id']})")
        return UserResponse.model_validate(created)

    def get_users(self, role: Optional[str] = None) -> List[UserResponse]:
        return [UserResponse.model_validate(u) for u in self._repo.get_all(role=role)]

    def get_user(self, user_id: int) -> UserResponse:
        """
        Raises:
            UserNotFoundError: If no user has this id.
        """
        user = self._repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(resource_id=user_id)
        return UserResponse.model_validate(user)
