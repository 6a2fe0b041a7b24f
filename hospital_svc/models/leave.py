"""
Domain model for leave requests.
"""
from datetime import date
from enum import Enum


class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class LeaveType(str, Enum):
    ANNUAL = "Annual Leave"
    SICK = "Sick Leave"
    EMERGENCY = "Emergency Leave"
    PARENTAL = "Maternity/Paternity Leave"
    STUDY = "Study Leave"
    COMPASSIONATE = "Compassionate Leave"
    PERSONAL = "Personal Leave"


REASON_MAX_LENGTH = 500
COMMENTS_MAX_LENGTH = 300


def compute_total_days(start_date: date, end_date: date) -> int:
    """
    Inclusive number of days covered by a leave request.

    Examples:
        >>> compute_total_days(date(2025, 3, 1), date(2025, 3, 1))
        1
        >>> compute_total_days(date(2025, 3, 1), date(2025, 3, 5))
        5
    """
    return abs((end_date - start_date).days) + 1
