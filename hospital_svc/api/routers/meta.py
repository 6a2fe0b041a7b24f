"""
Meta router - role and permission definitions.

Exposes the permission registry loaded from core/permissions.yaml so
front-ends can decide which views to offer a role without hardcoding
the allow-lists.

No authentication required for read-only metadata access.
"""
import logging
from typing import List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from core.permission_registry import (
    PermissionDefinition,
    get_permission,
    list_permissions,
    list_roles,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/meta",
    tags=["Metadata"],
    # No authentication - these are public read-only endpoints
)


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class PermissionResponse(BaseModel):
    """Single permission definition for API response."""
    name: str
    roles: List[str]
    any_authenticated: bool


class PermissionsListResponse(BaseModel):
    roles: List[str]
    permissions: List[PermissionResponse]


def _permission_to_response(permission: PermissionDefinition) -> PermissionResponse:
    return PermissionResponse(
        name=permission.name,
        roles=list(permission.roles),
        any_authenticated=permission.any_authenticated,
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/permissions",
    response_model=PermissionsListResponse,
    summary="List roles and permissions",
    description="All known roles and every permission with the roles it admits."
)
async def list_permission_definitions() -> PermissionsListResponse:
    return PermissionsListResponse(
        roles=list(list_roles()),
        permissions=[_permission_to_response(p) for p in list_permissions()],
    )


@router.get(
    "/permissions/{permission_name}",
    response_model=PermissionResponse,
    summary="Get a single permission",
    description="Returns 404 for permission names not declared in the registry."
)
async def get_permission_definition(permission_name: str) -> PermissionResponse:
    try:
        permission = get_permission(permission_name)
    except KeyError:
        logger.info(f"Unknown permission requested: {permission_name}")
        raise HTTPException(status_code=404, detail=f"Permission '{permission_name}' not found")
    return _permission_to_response(permission)
