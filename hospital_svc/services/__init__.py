"""
Service layer for business logic.

This module contains all business logic and orchestration services.
"""
from services.notification_service import NotificationService
from services.user_service import UserService
from services.doctor_service import DoctorService
from services.inventory_service import InventoryService
from services.lab_inventory_service import LabInventoryService
from services.lab_test_service import LabTestService
from services.leave_service import LeaveService
from services.appointment_service import AppointmentService
from services.prescription_service import PrescriptionService

__all__ = [
    "NotificationService",
    "UserService",
    "DoctorService",
    "InventoryService",
    "LabInventoryService",
    "LabTestService",
    "LeaveService",
    "AppointmentService",
    "PrescriptionService",
]
