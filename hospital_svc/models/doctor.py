"""
Domain model for doctor profiles.
"""
from enum import Enum


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


DEFAULT_MAX_PATIENTS_PER_DAY = 20
