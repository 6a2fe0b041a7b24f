"""
Service layer for doctor profiles.
"""
import sqlite3
import logging
from typing import List

from repositories import DoctorRepository, UserRepository
from schemas import DoctorCreate, DoctorResponse, ScheduleUpdate
from core.exceptions import (
    DatabaseError,
    DoctorNotFoundError,
    DuplicateLicenseError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


class DoctorService:
    """Service layer for doctor profile operations."""

    def __init__(self, doctor_repository: DoctorRepository, user_repository: UserRepository):
        self._repo = doctor_repository
        self._user_repo = user_repository

    def get_doctors(self) -> List[DoctorResponse]:
        """Active doctors with their user's name, email and mobile number."""
        return [DoctorResponse.model_validate(d) for d in self._repo.get_all_active()]

    def get_doctor(self, doctor_id: int) -> DoctorResponse:
        doctor = self._repo.get_by_id(doctor_id)
        if doctor is None:
            raise DoctorNotFoundError(resource_id=doctor_id)
        return DoctorResponse.model_validate(doctor)

    def create_doctor(self, payload: DoctorCreate) -> DoctorResponse:
        """
        Register a doctor profile for an existing user.

        Raises:
            UserNotFoundError: If the user account does not exist.
            DuplicateLicenseError: If the license number is already registered.
        """
        if not self._user_repo.exists(payload.user_id):
            raise UserNotFoundError(resource_id=payload.user_id)

        data = payload.model_dump(mode="json")
        try:
            created = self._repo.add(
                user_id=data["user_id"],
                specialization=data["specialization"],
                license_number=data["license_number"],
                qualifications=data["qualifications"],
                experience=data["experience"],
                schedule=data["schedule"],
                max_patients_per_day=data["max_patients_per_day"],
            )
        except sqlite3.Error as e:
            raise DatabaseError(operation="create_doctor", error=str(e)) from e

        if created is None:
            raise DuplicateLicenseError(license_number=payload.license_number)

        logger.info(f"Doctor profile created (id={created['id']}, user_id={payload.user_id})")
        return DoctorResponse.model_validate(created)

    def update_schedule(self, doctor_id: int, payload: ScheduleUpdate) -> DoctorResponse:
        schedule = payload.model_dump(mode="json")["schedule"]
        try:
            updated = self._repo.update_schedule(doctor_id, schedule)
        except sqlite3.Error as e:
            raise DatabaseError(operation="update_doctor_schedule", error=str(e)) from e

        if updated is None:
            raise DoctorNotFoundError(resource_id=doctor_id)

        logger.info(f"Schedule updated for doctor {doctor_id} ({len(schedule)} slot(s))")
        return DoctorResponse.model_validate(updated)
