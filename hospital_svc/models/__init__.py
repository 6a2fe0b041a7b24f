"""
Domain models for the hospital service.

Enumerations and the pure rules derived from them (stock status, lab test
transitions, leave day counts). Persistence lives in repositories/.
"""
from models.appointment import AppointmentStatus
from models.doctor import Weekday
from models.inventory import InventoryCategory
from models.lab_inventory import StockOperation, StockStatus, compute_stock_status
from models.lab_test import LabTestStatus, LabTestType, Priority
from models.leave import LeaveStatus, LeaveType, compute_total_days
from models.notification import NotificationType, RelatedModel
from models.prescription import PrescriptionStatus
from models.user import Role

__all__ = [
    "AppointmentStatus",
    "InventoryCategory",
    "LabTestStatus",
    "LabTestType",
    "LeaveStatus",
    "LeaveType",
    "NotificationType",
    "Priority",
    "PrescriptionStatus",
    "RelatedModel",
    "Role",
    "StockOperation",
    "StockStatus",
    "Weekday",
    "compute_stock_status",
    "compute_total_days",
]
