"""
Domain model for appointments.
"""
from enum import Enum
from typing import FrozenSet


class AppointmentStatus(str, Enum):
    SCHEDULED = "Scheduled"
    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "No-Show"


# Appointments in these states no longer occupy the doctor's slot
CLOSED_STATUSES: FrozenSet[AppointmentStatus] = frozenset({
    AppointmentStatus.CANCELLED,
    AppointmentStatus.COMPLETED,
})
