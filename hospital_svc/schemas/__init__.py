"""
Pydantic schemas for API request/response validation.

This module contains all Pydantic models used at API boundaries.
"""
from schemas.common import DataListResponse, DataResponse, MessageResponse
from schemas.user import UserCreate, UserResponse, UserEnvelope, UserListEnvelope
from schemas.doctor import (
    DoctorCreate,
    DoctorResponse,
    DoctorEnvelope,
    DoctorListEnvelope,
    ScheduleUpdate,
)
from schemas.inventory import (
    InventoryItemCreate,
    InventoryItemUpdate,
    InventoryItemResponse,
    InventoryEnvelope,
    InventoryListEnvelope,
    LowStockEnvelope,
)
from schemas.lab_inventory import (
    LabItemCreate,
    LabItemUpdate,
    LabItemResponse,
    LabItemEnvelope,
    LabItemListEnvelope,
    StockAdjustment,
)
from schemas.lab_test import (
    LabTestCreate,
    LabTestResultsUpdate,
    LabTestStatusUpdate,
    LabTestResponse,
    LabTestEnvelope,
    LabTestListEnvelope,
)
from schemas.leave import (
    LeaveCreate,
    LeaveUpdate,
    LeaveReview,
    LeaveResponse,
    LeaveEnvelope,
    LeaveListEnvelope,
)
from schemas.appointment import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentStatusUpdate,
    AppointmentResponse,
)
from schemas.prescription import (
    Medicine,
    PrescriptionCreate,
    PrescriptionUpdate,
    PrescriptionStatusUpdate,
    PrescriptionResponse,
)
from schemas.notification import NotificationResponse

__all__ = [
    # Envelopes
    "DataResponse",
    "DataListResponse",
    "MessageResponse",
    # Users
    "UserCreate",
    "UserResponse",
    "UserEnvelope",
    "UserListEnvelope",
    # Doctors
    "DoctorCreate",
    "DoctorResponse",
    "DoctorEnvelope",
    "DoctorListEnvelope",
    "ScheduleUpdate",
    # Inventory
    "InventoryItemCreate",
    "InventoryItemUpdate",
    "InventoryItemResponse",
    "InventoryEnvelope",
    "InventoryListEnvelope",
    "LowStockEnvelope",
    # Lab inventory
    "LabItemCreate",
    "LabItemUpdate",
    "LabItemResponse",
    "LabItemEnvelope",
    "LabItemListEnvelope",
    "StockAdjustment",
    # Lab tests
    "LabTestCreate",
    "LabTestResultsUpdate",
    "LabTestStatusUpdate",
    "LabTestResponse",
    "LabTestEnvelope",
    "LabTestListEnvelope",
    # Leave requests
    "LeaveCreate",
    "LeaveUpdate",
    "LeaveReview",
    "LeaveResponse",
    "LeaveEnvelope",
    "LeaveListEnvelope",
    # Appointments
    "AppointmentCreate",
    "AppointmentUpdate",
    "AppointmentStatusUpdate",
    "AppointmentResponse",
    # Prescriptions
    "Medicine",
    "PrescriptionCreate",
    "PrescriptionUpdate",
    "PrescriptionStatusUpdate",
    "PrescriptionResponse",
    # Notifications
    "NotificationResponse",
]
