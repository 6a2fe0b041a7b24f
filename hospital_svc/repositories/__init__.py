"""
Repository layer for database access.

This module contains all database access operations, encapsulating SQL and data persistence logic.
"""
from repositories.base import Database
from repositories.user_repository import UserRepository
from repositories.doctor_repository import DoctorRepository
from repositories.inventory_repository import InventoryRepository
from repositories.lab_inventory_repository import LabInventoryRepository
from repositories.lab_test_repository import LabTestRepository
from repositories.leave_repository import LeaveRepository
from repositories.appointment_repository import AppointmentRepository
from repositories.prescription_repository import PrescriptionRepository
from repositories.notification_repository import NotificationRepository

__all__ = [
    "Database",
    "UserRepository",
    "DoctorRepository",
    "InventoryRepository",
    "LabInventoryRepository",
    "LabTestRepository",
    "LeaveRepository",
    "AppointmentRepository",
    "PrescriptionRepository",
    "NotificationRepository",
]
