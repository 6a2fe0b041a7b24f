"""
Core module for application configuration, logging, and shared infrastructure.

This module provides:
- Settings: Application configuration via pydantic-settings
- Dependency injection: FastAPI Depends() functions for services and repositories
- Exceptions: Domain-specific exception classes with HTTP status codes
- Datetime utilities: UTC-first datetime handling
- Permission registry: role allow-lists loaded from permissions.yaml
"""
from core.config import settings, Settings

# Dependency injection - import functions for FastAPI Depends()
from core.dependencies import get_database, reset_database

# Exception classes for consistent error handling
from core.exceptions import (
    HospitalServiceError,
    NotFoundError,
    DuplicateError,
    InvalidOperationError,
    InvalidStatusTransitionError,
    DatabaseError,
    setup_exception_handlers,
)

# UTC datetime utilities
from core.datetime_utils import (
    utc_now,
    today_utc,
    to_utc,
    format_iso,
    now_iso,
)
from core.config import (
    DATABASE_PATH,
    API_HOST,
    API_PORT,
    API_RELOAD,
    CORS_ORIGINS,
)

# Permission registry exports
from core.permission_registry import (
    PermissionDefinition,
    get_permission,
    list_permissions,
    list_roles,
    is_allowed,
)

__all__ = [
    # Settings
    "settings",
    "Settings",
    # Dependency injection
    "get_database",
    "reset_database",
    # Exceptions
    "HospitalServiceError",
    "NotFoundError",
    "DuplicateError",
    "InvalidOperationError",
    "InvalidStatusTransitionError",
    "DatabaseError",
    "setup_exception_handlers",
    # Datetime utilities
    "utc_now",
    "today_utc",
    "to_utc",
    "format_iso",
    "now_iso",
    # Config exports
    "DATABASE_PATH",
    "API_HOST",
    "API_PORT",
    "API_RELOAD",
    "CORS_ORIGINS",
    # Permission registry
    "PermissionDefinition",
    "get_permission",
    "list_permissions",
    "list_roles",
    "is_allowed",
]
