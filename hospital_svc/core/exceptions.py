"""
Shared exception classes and error handling utilities for Hospital Service API.

This module provides:
- Custom exception hierarchy for domain-specific errors
- Consistent error response formatting
- Exception handlers for FastAPI integration

Usage:
    from core.exceptions import LabTestNotFoundError

    # In service layer - raise domain exceptions
    raise LabTestNotFoundError(resource_id=12)

    # In FastAPI - register handlers via setup_exception_handlers(app)
"""
import logging
import sqlite3
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION CLASSES
# =============================================================================

class HospitalServiceError(Exception):
    """
    Base exception for all Hospital Service domain errors.

    Provides consistent error structure with status code and detail message.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any
    ):
        """
        Initialize the exception.

        Args:
            detail: Human-readable error message. Uses class default if not provided.
            status_code: HTTP status code. Uses class default if not provided.
            **kwargs: Additional context to include in error response.
        """
        self.detail = detail or self.__class__.detail
        self.status_code = status_code or self.__class__.status_code
        self.context = {key: value for key, value in kwargs.items() if value is not None}
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result: Dict[str, Any] = {"detail": self.detail}
        if self.context:
            result["context"] = self.context
        return result


# =============================================================================
# NOT FOUND (404)
# =============================================================================

class NotFoundError(HospitalServiceError):
    """Raised when a requested record does not exist (or is not visible to the caller)."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Resource not found"
    resource = "Resource"

    def __init__(self, resource_id: Optional[int] = None, **kwargs: Any):
        super().__init__(detail=f"{self.resource} not found", resource_id=resource_id, **kwargs)


class UserNotFoundError(NotFoundError):
    resource = "User"


class PatientNotFoundError(NotFoundError):
    resource = "Patient"


class DoctorNotFoundError(NotFoundError):
    resource = "Doctor"


class InventoryItemNotFoundError(NotFoundError):
    resource = "Inventory item"


class LabTestNotFoundError(NotFoundError):
    resource = "Lab test"


class LeaveRequestNotFoundError(NotFoundError):
    resource = "Leave request"


class AppointmentNotFoundError(NotFoundError):
    resource = "Appointment"


class PrescriptionNotFoundError(NotFoundError):
    resource = "Prescription"


class NotificationNotFoundError(NotFoundError):
    resource = "Notification"


# =============================================================================
# CONFLICTS (409)
# =============================================================================

class DuplicateError(HospitalServiceError):
    """Raised when a record violates a uniqueness rule."""

    status_code = status.HTTP_409_CONFLICT
    detail = "Resource already exists"


class DuplicateUserError(DuplicateError):
    """Raised when a user with the same email already exists."""

    def __init__(self, email: Optional[str] = None, **kwargs: Any):
        detail = f"User with email '{email}' already exists" if email else "User already exists"
        super().__init__(detail=detail, email=email, **kwargs)


class DuplicateInventoryItemError(DuplicateError):
    """Raised when adding a lab inventory item whose name is already taken."""

    def __init__(self, name: Optional[str] = None, **kwargs: Any):
        detail = f"Item '{name}' already exists" if name else "Item already exists"
        super().__init__(detail=detail, name=name, **kwargs)


class DuplicateLicenseError(DuplicateError):
    """Raised when a doctor's license number is already registered."""

    def __init__(self, license_number: Optional[str] = None, **kwargs: Any):
        super().__init__(
            detail=f"License number '{license_number}' is already registered",
            license_number=license_number,
            **kwargs
        )


class AppointmentConflictError(DuplicateError):
    """Raised when the doctor already has an active appointment in the slot."""

    detail = "Doctor is not available at this time"


class InvalidStatusTransitionError(HospitalServiceError):
    """Raised when a lifecycle status change is not allowed from the current status."""

    status_code = status.HTTP_409_CONFLICT
    detail = "Status transition not allowed"

    def __init__(self, current: Optional[str] = None, target: Optional[str] = None, **kwargs: Any):
        detail = (
            f"Cannot move from '{current}' to '{target}'"
            if current and target else self.__class__.detail
        )
        super().__init__(detail=detail, current=current, target=target, **kwargs)


# =============================================================================
# INVALID OPERATIONS (400)
# =============================================================================

class InvalidOperationError(HospitalServiceError):
    """Raised when a request is well-formed but cannot be applied."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid operation"


class InsufficientStockError(InvalidOperationError):
    """Raised when removing more units than an item holds."""

    detail = "Not enough stock to remove"


class LeaveNotPendingError(InvalidOperationError):
    """Raised when modifying or reviewing a leave request that is no longer pending."""

    detail = "Only pending leave requests can be modified"


# =============================================================================
# DATABASE EXCEPTIONS (500)
# =============================================================================

class DatabaseError(HospitalServiceError):
    """Raised when a database operation fails. The raw driver message is kept in context."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Database operation failed"

    def __init__(self, operation: Optional[str] = None, error: Optional[str] = None, **kwargs: Any):
        detail = f"Database error during {operation}" if operation else self.__class__.detail
        super().__init__(detail=detail, operation=operation, error=error, **kwargs)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def hospital_service_exception_handler(
    request: Request,
    exc: HospitalServiceError
) -> JSONResponse:
    """Log a domain error and return its standardized JSON response."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"HospitalServiceError: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "context": exc.context
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def sqlite_exception_handler(
    request: Request,
    exc: sqlite3.Error
) -> JSONResponse:
    """Convert a driver error that escaped the service layer into a DatabaseError response."""
    return await hospital_service_exception_handler(
        request,
        DatabaseError(operation=f"{request.method} {request.url.path}", error=str(exc))
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions with a 500 response carrying the raw message.

    Logs the full traceback for debugging.
    """
    logger.exception(
        f"Unhandled exception: {exc}",
        extra={
            "path": request.url.path,
            "method": request.method
        }
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc) or "An internal server error occurred"}
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Example:
        app = FastAPI()
        setup_exception_handlers(app)
    """
    app.add_exception_handler(HospitalServiceError, hospital_service_exception_handler)
    app.add_exception_handler(sqlite3.Error, sqlite_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
