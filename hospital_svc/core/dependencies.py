"""
FastAPI Dependency Injection configuration for Hospital Service API.

Architecture Flow:
    API Layer (Routers)
         ↓ Depends()
    Service Layer (Business Logic)
         ↓ Injected
    Repository Layer (Data Access)
         ↓ Injected
    Database (SQLite Connection)

Usage in Routers:
    from core.dependencies import get_lab_inventory_service

    @router.get("")
    async def list_items(service: LabInventoryService = Depends(get_lab_inventory_service)):
        return service.get_items()

Testing:
    # Point every repository at a temporary database
    app.dependency_overrides[get_database] = lambda: test_database
"""
import logging
from typing import Optional

from fastapi import Depends

from core.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# DATABASE DEPENDENCY
# =============================================================================

# Imported lazily to avoid circular imports with repositories
_database_instance: Optional["Database"] = None


def get_database() -> "Database":
    """
    Get the database instance (created once, then shared).

    The database is initialized with WAL mode and a busy timeout.
    """
    global _database_instance

    if _database_instance is None:
        from repositories.base import Database

        logger.info(f"Initializing database: {settings.database_path}")
        _database_instance = Database(
            db_path=settings.database_path,
            busy_timeout=settings.hospital_svc_db_busy_timeout
        )
        logger.info("Database initialized successfully")

    return _database_instance


def reset_database() -> None:
    """Reset the database instance (for testing only)."""
    global _database_instance
    _database_instance = None


# =============================================================================
# REPOSITORY DEPENDENCIES
# =============================================================================
# Each repository receives the database through Depends(get_database), so a
# single override of get_database redirects the whole graph.

def get_user_repository(db=Depends(get_database)) -> "UserRepository":
    from repositories import UserRepository
    return UserRepository(db=db)


def get_doctor_repository(db=Depends(get_database)) -> "DoctorRepository":
    from repositories import DoctorRepository
    return DoctorRepository(db=db)


def get_inventory_repository(db=Depends(get_database)) -> "InventoryRepository":
    from repositories import InventoryRepository
    return InventoryRepository(db=db)


def get_lab_inventory_repository(db=Depends(get_database)) -> "LabInventoryRepository":
    from repositories import LabInventoryRepository
    return LabInventoryRepository(db=db)


def get_lab_test_repository(db=Depends(get_database)) -> "LabTestRepository":
    from repositories import LabTestRepository
    return LabTestRepository(db=db)


def get_leave_repository(db=Depends(get_database)) -> "LeaveRepository":
    from repositories import LeaveRepository
    return LeaveRepository(db=db)


def get_appointment_repository(db=Depends(get_database)) -> "AppointmentRepository":
    from repositories import AppointmentRepository
    return AppointmentRepository(db=db)


def get_prescription_repository(db=Depends(get_database)) -> "PrescriptionRepository":
    from repositories import PrescriptionRepository
    return PrescriptionRepository(db=db)


def get_notification_repository(db=Depends(get_database)) -> "NotificationRepository":
    from repositories import NotificationRepository
    return NotificationRepository(db=db)


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_notification_service(
    notification_repo=Depends(get_notification_repository),
    user_repo=Depends(get_user_repository),
) -> "NotificationService":
    """
    Get a NotificationService.

    Also injected into every service that raises notifications.
    """
    from services import NotificationService
    return NotificationService(notification_repository=notification_repo, user_repository=user_repo)


def get_user_service(user_repo=Depends(get_user_repository)) -> "UserService":
    from services import UserService
    return UserService(user_repository=user_repo)


def get_doctor_service(
    doctor_repo=Depends(get_doctor_repository),
    user_repo=Depends(get_user_repository),
) -> "DoctorService":
    from services import DoctorService
    return DoctorService(doctor_repository=doctor_repo, user_repository=user_repo)


def get_inventory_service(inventory_repo=Depends(get_inventory_repository)) -> "InventoryService":
    from services import InventoryService
    return InventoryService(inventory_repository=inventory_repo)


def get_lab_inventory_service(
    lab_inventory_repo=Depends(get_lab_inventory_repository),
    notification_service=Depends(get_notification_service),
) -> "LabInventoryService":
    """
    Get a LabInventoryService with its repository and notification service.

    Returns:
        LabInventoryService: Service for lab stock and stock alerts.
    """
    from services import LabInventoryService
    return LabInventoryService(
        lab_inventory_repository=lab_inventory_repo,
        notification_service=notification_service,
    )


def get_lab_test_service(
    lab_test_repo=Depends(get_lab_test_repository),
    user_repo=Depends(get_user_repository),
    notification_service=Depends(get_notification_service),
) -> "LabTestService":
    from services import LabTestService
    return LabTestService(
        lab_test_repository=lab_test_repo,
        user_repository=user_repo,
        notification_service=notification_service,
    )


def get_leave_service(
    leave_repo=Depends(get_leave_repository),
    notification_service=Depends(get_notification_service),
) -> "LeaveService":
    from services import LeaveService
    return LeaveService(leave_repository=leave_repo, notification_service=notification_service)


def get_appointment_service(
    appointment_repo=Depends(get_appointment_repository),
    doctor_repo=Depends(get_doctor_repository),
    user_repo=Depends(get_user_repository),
    notification_service=Depends(get_notification_service),
) -> "AppointmentService":
    from services import AppointmentService
    return AppointmentService(
        appointment_repository=appointment_repo,
        doctor_repository=doctor_repo,
        user_repository=user_repo,
        notification_service=notification_service,
    )


def get_prescription_service(
    prescription_repo=Depends(get_prescription_repository),
    doctor_repo=Depends(get_doctor_repository),
    user_repo=Depends(get_user_repository),
    notification_service=Depends(get_notification_service),
) -> "PrescriptionService":
    from services import PrescriptionService
    return PrescriptionService(
        prescription_repository=prescription_repo,
        doctor_repository=doctor_repo,
        user_repository=user_repo,
        notification_service=notification_service,
    )
