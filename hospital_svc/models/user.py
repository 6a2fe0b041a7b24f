"""
Domain model for user accounts.

Users are the referents of every patient, requester, doctor and reviewer id
in the system. Accounts are created by admins; credentials live with the
auth service that issues bearer tokens.
"""
from enum import Enum


class Role(str, Enum):
    """Role tag on a user account; gates which API operations are reachable."""

    ADMIN = "admin"
    DOCTOR = "doctor"
    LAB_TECHNICIAN = "lab_technician"
    PATIENT = "patient"
    PHARMACIST = "pharmacist"
    STAFF = "staff"
