"""
Domain model for prescriptions.
"""
from enum import Enum
from typing import FrozenSet


class PrescriptionStatus(str, Enum):
    PENDING = "pending"
    SENT_TO_PHARMACY = "sent-to-pharmacy"
    IN_PROGRESS = "in-progress"
    DISPENSED = "dispensed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Prescriptions the pharmacy still has to act on
PHARMACY_QUEUE: FrozenSet[PrescriptionStatus] = frozenset({
    PrescriptionStatus.SENT_TO_PHARMACY,
    PrescriptionStatus.IN_PROGRESS,
})

# Moving into one of these stamps who dispensed and when
DISPENSING_STATUSES: FrozenSet[PrescriptionStatus] = frozenset({
    PrescriptionStatus.DISPENSED,
    PrescriptionStatus.COMPLETED,
})
