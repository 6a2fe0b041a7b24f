"""
Central permission registry - single source of truth for role gating.

This module provides:
- YAML-based loading and validation of permissions.yaml
- PermissionDefinition dataclass (name -> allowed roles)
- Read-only lookup used by core.auth.require_permission()

YAML access is encapsulated here - no other module should read permissions.yaml directly.

Usage:
    from core.permission_registry import get_permission, is_allowed

    get_permission("lab_tests.create").roles    # ("admin", "doctor")
    is_allowed("lab_tests.create", "patient")   # False
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

logger = logging.getLogger(__name__)

AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class PermissionDefinition:
    """
    Immutable role allow-list for one operation.

    Attributes:
        name: Dotted permission name (e.g. "lab_inventory.manage")
        roles: Roles allowed to perform the operation
        any_authenticated: True when every authenticated caller is allowed
    """
    name: str
    roles: Tuple[str, ...]
    any_authenticated: bool = False

    def allows(self, role: str) -> bool:
        """Check whether a role may perform this operation."""
        return self.any_authenticated or role in self.roles


# =============================================================================
# YAML CONFIGURATION LOADING & VALIDATION
# =============================================================================

def _get_config_path() -> Path:
    """Get the path to the permissions configuration file."""
    return Path(__file__).parent / "permissions.yaml"


def _load_yaml_config() -> Dict[str, Any]:
    """
    Load and parse the YAML configuration file.

    Raises:
        FileNotFoundError: If permissions.yaml is not found
        yaml.YAMLError: If YAML parsing fails
    """
    config_path = _get_config_path()
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except FileNotFoundError:
        logger.error("Permissions config file not found", extra={"path": str(config_path)})
        raise
    except yaml.YAMLError as e:
        logger.error("Failed to parse permissions config", extra={"path": str(config_path), "error": str(e)})
        raise


def _parse_permission(name: str, raw: Any, known_roles: Tuple[str, ...]) -> PermissionDefinition:
    """
    Validate and parse a single permission entry.

    Raises:
        ValueError: If the entry is neither a role list nor "authenticated",
            or references an unknown role
    """
    if raw == AUTHENTICATED:
        return PermissionDefinition(name=name, roles=known_roles, any_authenticated=True)

    if not isinstance(raw, list) or not raw:
        raise ValueError(
            f"Permission '{name}' must be a non-empty list of roles or '{AUTHENTICATED}'"
        )

    unknown = [role for role in raw if role not in known_roles]
    if unknown:
        raise ValueError(f"Permission '{name}' references unknown roles: {unknown}")

    return PermissionDefinition(name=name, roles=tuple(raw))


@lru_cache(maxsize=1)
def _load_registry() -> Tuple[Tuple[str, ...], Dict[str, PermissionDefinition]]:
    """
    Load and cache roles and permission definitions from YAML.

    Cached so the YAML file is read exactly once per process.
    """
    config = _load_yaml_config()

    known_roles = tuple(config.get("roles", []))
    if not known_roles:
        raise ValueError("permissions.yaml must declare at least one role")

    permissions: Dict[str, PermissionDefinition] = {}
    for name, raw in (config.get("permissions") or {}).items():
        permissions[name] = _parse_permission(name, raw, known_roles)

    logger.debug("Permission registry loaded", extra={"permissions": len(permissions)})
    return known_roles, permissions


# =============================================================================
# PUBLIC API
# =============================================================================

def list_roles() -> Tuple[str, ...]:
    """All role names known to the system."""
    roles, _ = _load_registry()
    return roles


def list_permissions() -> List[PermissionDefinition]:
    """All permission definitions, sorted by name."""
    _, permissions = _load_registry()
    return [permissions[name] for name in sorted(permissions)]


def get_permission(name: str) -> PermissionDefinition:
    """
    Look up a permission by name.

    Raises:
        KeyError: If the permission is not declared in permissions.yaml
    """
    _, permissions = _load_registry()
    try:
        return permissions[name]
    except KeyError:
        raise KeyError(f"Unknown permission '{name}'") from None


def is_allowed(name: str, role: str) -> bool:
    """Check whether a role holds the named permission."""
    return get_permission(name).allows(role)
