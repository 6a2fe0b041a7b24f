"""
Authentication module for Hospital Service API.

Bearer tokens are issued by the hospital's auth service; this API only
verifies them and gates routes by the caller's role. Tokens are HS256 JWTs
carrying ``{"id": <user id>, "role": <role>, "name": <display name>}``.

Usage in routers:
    router = APIRouter(prefix="/api/v1/lab-tests")

    @router.post("", dependencies=[Depends(require_permission("lab_tests.create"))])
    async def create_lab_test(...): ...

    @router.get("")
    async def list_lab_tests(user: CurrentUser = Depends(require_permission("lab_tests.read"))):
        ...
"""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import JWT_ALGORITHM, JWT_SECRET, TOKEN_TTL_MINUTES
from core.datetime_utils import utc_now
from core.logging_config import bind_caller
from core.permission_registry import get_permission, list_roles

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(
    auto_error=False,  # We'll handle the error ourselves for better messages
    description="JWT issued by the auth service. Send as 'Authorization: Bearer <token>'.",
)


@dataclass(frozen=True)
class CurrentUser:
    """Identity decoded from a verified bearer token."""
    id: int
    role: str
    name: Optional[str] = None


def create_access_token(
    user_id: int,
    role: str,
    name: Optional[str] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """
    Mint a signed bearer token.

    Used by seeding scripts and tests; production tokens come from the auth service.
    """
    ttl = expires_minutes if expires_minutes is not None else TOKEN_TTL_MINUTES
    payload: Dict[str, Any] = {
        "id": user_id,
        "role": role,
        "name": name,
        "exp": utc_now() + timedelta(minutes=ttl),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> CurrentUser:
    """
    Verify a bearer token and return the caller's identity.

    Raises:
        HTTPException: 401 if the token is invalid, expired or malformed.
    """
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return CurrentUser(
            id=int(payload["id"]),
            role=str(payload["role"]),
            name=payload.get("name"),
        )
    except (jwt.InvalidTokenError, KeyError, TypeError, ValueError) as e:
        logger.warning("Token verification failed", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> CurrentUser:
    """
    Resolve the authenticated caller from the Authorization header.

    Raises:
        HTTPException: 401 Unauthorized if the token is missing or invalid.
        HTTPException: 403 Forbidden if the token carries an unknown role.
    """
    if credentials is None or not credentials.credentials:
        logger.warning("API request without bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = decode_access_token(credentials.credentials)
    if user.role not in list_roles():
        logger.warning("Token with unknown role", extra={"user_id": user.id, "role": user.role})
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Access denied. Unknown role: {user.role}",
        )

    request.state.caller_role = user.role
    bind_caller(user.id, user.role)
    return user


def require_permission(permission: str, self_param: Optional[str] = None) -> Callable:
    """
    Build a dependency that admits callers whose role holds ``permission``.

    Args:
        permission: Permission name declared in core/permissions.yaml.
            Resolved eagerly so a typo fails at import time.
        self_param: Optional path parameter naming a user id; a caller whose
            own id matches it is admitted regardless of role.
    """
    definition = get_permission(permission)

    async def dependency(
        request: Request,
        user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if definition.allows(user.role):
            return user

        if self_param is not None and str(request.path_params.get(self_param)) == str(user.id):
            return user

        logger.warning(
            "Access denied - insufficient permissions",
            extra={"user_id": user.id, "role": user.role, "permission": permission}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=(
                f"Access denied. Required role: {' or '.join(definition.roles)}. "
                f"Your role: {user.role}"
            ),
        )

    return dependency
