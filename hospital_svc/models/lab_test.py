"""
Domain model for lab tests and their lifecycle.

    Requested ──► In Progress ──► Completed (via results)
        │              │
        └──► Cancelled ◄┘

Completion happens only through result entry; status updates cover sample
collection and cancellation.
"""
from enum import Enum
from typing import Dict, FrozenSet


class LabTestStatus(str, Enum):
    REQUESTED = "Requested"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class LabTestType(str, Enum):
    BLOOD_TEST = "Blood Test"
    URINE_TEST = "Urine Test"
    X_RAY = "X-Ray"
    MRI = "MRI"
    CT_SCAN = "CT Scan"
    ULTRASOUND = "Ultrasound"


class Priority(str, Enum):
    NORMAL = "Normal"
    URGENT = "Urgent"
    EMERGENCY = "Emergency"


# Status moves allowed through the status endpoint
STATUS_TRANSITIONS: Dict[LabTestStatus, FrozenSet[LabTestStatus]] = {
    LabTestStatus.REQUESTED: frozenset({LabTestStatus.IN_PROGRESS, LabTestStatus.CANCELLED}),
    LabTestStatus.IN_PROGRESS: frozenset({LabTestStatus.CANCELLED}),
    LabTestStatus.COMPLETED: frozenset(),
    LabTestStatus.CANCELLED: frozenset(),
}


def can_transition(current: LabTestStatus, target: LabTestStatus) -> bool:
    """Check whether a lab test may move from ``current`` to ``target``."""
    return target in STATUS_TRANSITIONS.get(current, frozenset())


def can_record_results(current: LabTestStatus) -> bool:
    """Results may be entered (or corrected) on any test that was not cancelled."""
    return current != LabTestStatus.CANCELLED
