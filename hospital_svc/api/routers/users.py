"""
Users router - account records that patient, requester and doctor ids point at.

Accounts are created by admins; any authenticated caller can read their
own record through /me.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from schemas import UserCreate, UserEnvelope, UserListEnvelope
from services import UserService
from models.user import Role
from core.auth import CurrentUser, require_permission
from core.dependencies import get_user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.post(
    "",
    response_model=UserEnvelope,
    status_code=201,
    summary="Create a user",
    description="Create a user account. Emails are unique (case-insensitive); a duplicate returns 409.",
    dependencies=[Depends(require_permission("users.manage"))],
)
async def create_user(
    payload: UserCreate,
    user_service: UserService = Depends(get_user_service)
):
    user = user_service.create_user(payload)
    return UserEnvelope(user=user, message="User created successfully")


@router.get(
    "",
    response_model=UserListEnvelope,
    summary="List users",
    description="List user accounts, optionally filtered by role.",
    dependencies=[Depends(require_permission("users.manage"))],
)
async def list_users(
    role: Optional[Role] = Query(None, description="Only return users holding this role"),
    user_service: UserService = Depends(get_user_service)
):
    users = user_service.get_users(role=role.value if role else None)
    return UserListEnvelope(users=users)


@router.get(
    "/me",
    response_model=UserEnvelope,
    summary="Get the current user",
)
async def get_me(
    user: CurrentUser = Depends(require_permission("users.self")),
    user_service: UserService = Depends(get_user_service)
):
    return UserEnvelope(user=user_service.get_user(user.id))


@router.get(
    "/{user_id}",
    response_model=UserEnvelope,
    summary="Get a user",
    description="Admins can read any account; other callers only their own.",
    dependencies=[Depends(require_permission("users.manage", self_param="user_id"))],
)
async def get_user(
    user_id: int,
    user_service: UserService = Depends(get_user_service)
):
    return UserEnvelope(user=user_service.get_user(user_id))
