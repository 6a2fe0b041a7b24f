"""
Service layer for appointments.

A doctor's date/time slot can hold one open appointment; cancelled and
completed appointments free the slot.
"""
import sqlite3
import logging
from datetime import date
from typing import Any, Dict, List

from repositories import AppointmentRepository, DoctorRepository, UserRepository
from schemas import AppointmentCreate, AppointmentResponse, AppointmentStatusUpdate, AppointmentUpdate
from services.notification_service import NotificationService
from models.appointment import CLOSED_STATUSES, AppointmentStatus
from models.notification import RelatedModel
from core.datetime_utils import parse_date, today_utc
from core.exceptions import (
    AppointmentConflictError,
    AppointmentNotFoundError,
    DatabaseError,
    DoctorNotFoundError,
    PatientNotFoundError,
)

logger = logging.getLogger(__name__)

_CLOSED = [status.value for status in CLOSED_STATUSES]


class AppointmentService:
    """Service layer for appointment booking and lifecycle."""

    def __init__(
        self,
        appointment_repository: AppointmentRepository,
        doctor_repository: DoctorRepository,
        user_repository: UserRepository,
        notification_service: NotificationService,
    ):
        self._repo = appointment_repository
        self._doctor_repo = doctor_repository
        self._user_repo = user_repository
        self._notifications = notification_service

    @staticmethod
    def _to_response(rows: List[Dict[str, Any]]) -> List[AppointmentResponse]:
        return [AppointmentResponse.model_validate(row) for row in rows]

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_appointments(self) -> List[AppointmentResponse]:
        return self._to_response(self._repo.get_all())

    def get_appointment(self, appointment_id: int) -> AppointmentResponse:
        appointment = self._repo.get_by_id(appointment_id)
        if appointment is None:
            raise AppointmentNotFoundError(resource_id=appointment_id)
        return AppointmentResponse.model_validate(appointment)

    def get_by_patient(self, patient_id: int) -> List[AppointmentResponse]:
        """A patient's appointments, most recent date first."""
        return self._to_response(self._repo.get_all(patient_id=patient_id, newest_first=True))

    def get_by_doctor(self, doctor_id: int) -> List[AppointmentResponse]:
        return self._to_response(self._repo.get_all(doctor_id=doctor_id))

    def get_today(self) -> List[AppointmentResponse]:
        """Appointments on the current UTC date, by time."""
        return self._to_response(self._repo.get_all(on_date=today_utc()))

    def get_upcoming(self) -> List[AppointmentResponse]:
        """Open appointments from today onwards."""
        return self._to_response(self._repo.get_all(from_date=today_utc(), exclude_statuses=_CLOSED))

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def create_appointment(self, payload: AppointmentCreate) -> AppointmentResponse:
        """
        Book an appointment and notify the doctor.

        Raises:
            PatientNotFoundError: If the patient does not exist.
            DoctorNotFoundError: If the doctor does not exist.
            AppointmentConflictError: If the doctor's slot is already taken.
        """
        if not self._user_repo.exists(payload.patient_id):
            raise PatientNotFoundError(resource_id=payload.patient_id)

        doctor = self._doctor_repo.get_by_id(payload.doctor_id)
        if doctor is None:
            raise DoctorNotFoundError(resource_id=payload.doctor_id)

        if self._repo.find_in_slot(payload.doctor_id, payload.date, payload.time, exclude_statuses=_CLOSED):
            logger.warning(
                "Appointment slot already taken",
                extra={"doctor_id": payload.doctor_id, "date": str(payload.date), "time": payload.time}
            )
            raise AppointmentConflictError(
                doctor_id=payload.doctor_id, date=str(payload.date), time=payload.time
            )

        try:
            created = self._repo.add(
                patient_id=payload.patient_id,
                doctor_id=payload.doctor_id,
                appointment_date=payload.date,
                time=payload.time,
                reason=payload.reason,
                notes=payload.notes,
                status=AppointmentStatus.SCHEDULED.value,
            )
        except sqlite3.Error as e:
            raise DatabaseError(operation="create_appointment", error=str(e)) from e

        logger.info(f"Appointment created (id={created['id']}, doctor={payload.doctor_id})")
        self._notifications.notify_users(
            [doctor["user_id"]],
            title="New Appointment Scheduled",
            message=(
                f"You have a new appointment scheduled with {created['patient_name']} "
                f"on {created['date']} at {created['time']}."
            ),
            related_model=RelatedModel.APPOINTMENT.value,
            related_id=created["id"],
        )
        return AppointmentResponse.model_validate(created)

    def update_appointment(self, appointment_id: int, payload: AppointmentUpdate) -> AppointmentResponse:
        """
        Apply a partial update; moving to another slot re-checks availability.

        Raises:
            AppointmentNotFoundError: If the appointment does not exist.
            AppointmentConflictError: If the new slot is taken.
        """
        current = self._repo.get_by_id(appointment_id)
        if current is None:
            raise AppointmentNotFoundError(resource_id=appointment_id)

        changes = {
            key: value
            for key, value in payload.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if "status" in changes:
            changes["status"] = changes["status"].value

        new_status = changes.get("status", current["status"])
        moved = "date" in changes or "time" in changes
        reopened = current["status"] in _CLOSED
        if new_status not in _CLOSED and (moved or reopened):
            self._ensure_slot_free(
                current["doctor_id"],
                changes.get("date", parse_date(current["date"])),
                changes.get("time", current["time"]),
                appointment_id,
            )

        try:
            updated = self._repo.update(appointment_id, changes)
        except sqlite3.Error as e:
            raise DatabaseError(operation="update_appointment", error=str(e)) from e

        if updated is None:
            raise AppointmentNotFoundError(resource_id=appointment_id)
        return AppointmentResponse.model_validate(updated)

    def update_status(self, appointment_id: int, payload: AppointmentStatusUpdate) -> AppointmentResponse:
        """
        Change the status; confirming notifies the patient.

        Reopening a cancelled or completed appointment re-checks its slot.

        Raises:
            AppointmentNotFoundError: If the appointment does not exist.
            AppointmentConflictError: If the slot was taken in the meantime.
        """
        current = self._repo.get_by_id(appointment_id)
        if current is None:
            raise AppointmentNotFoundError(resource_id=appointment_id)

        if current["status"] in _CLOSED and payload.status.value not in _CLOSED:
            self._ensure_slot_free(
                current["doctor_id"], parse_date(current["date"]), current["time"], appointment_id
            )

        try:
            updated = self._repo.update(appointment_id, {"status": payload.status.value})
        except sqlite3.Error as e:
            raise DatabaseError(operation="update_appointment_status", error=str(e)) from e

        if updated is None:
            raise AppointmentNotFoundError(resource_id=appointment_id)

        logger.info(f"Appointment {appointment_id} status -> {payload.status.value}")
        if payload.status == AppointmentStatus.CONFIRMED:
            self._notifications.notify_users(
                [updated["patient_id"]],
                title="Appointment Confirmed",
                message=(
                    f"Your appointment with Dr. {updated['doctor_name']} on {updated['date']} "
                    f"at {updated['time']} has been confirmed."
                ),
                related_model=RelatedModel.APPOINTMENT.value,
                related_id=appointment_id,
            )
        return AppointmentResponse.model_validate(updated)

    def _ensure_slot_free(self, doctor_id: int, appointment_date: date, time: str, appointment_id: int) -> None:
        if self._repo.find_in_slot(
            doctor_id, appointment_date, time,
            exclude_statuses=_CLOSED, exclude_id=appointment_id,
        ):
            raise AppointmentConflictError(doctor_id=doctor_id, date=str(appointment_date), time=time)

    def delete_appointment(self, appointment_id: int) -> None:
        try:
            deleted = self._repo.delete(appointment_id)
        except sqlite3.Error as e:
            raise DatabaseError(operation="delete_appointment", error=str(e)) from e

        if not deleted:
            raise AppointmentNotFoundError(resource_id=appointment_id)
        logger.info(f"Appointment {appointment_id} deleted")
