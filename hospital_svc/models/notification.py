"""
Domain model for in-app notifications.
"""
from enum import Enum


class NotificationType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class RelatedModel(str, Enum):
    """Kind of record a notification points at."""

    LAB_TEST = "LabTest"
    LAB_INVENTORY = "LabInventory"
    APPOINTMENT = "Appointment"
    PRESCRIPTION = "Prescription"
    LEAVE = "Leave"


# Maximum notifications returned to a user in one listing
NOTIFICATION_LIST_LIMIT = 50
