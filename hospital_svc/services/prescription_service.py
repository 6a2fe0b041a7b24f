"""
Service layer for prescriptions and the pharmacy queue.
"""
import sqlite3
import logging
from typing import Any, Dict, List

from repositories import DoctorRepository, PrescriptionRepository, UserRepository
from schemas import (
    PrescriptionCreate,
    PrescriptionResponse,
    PrescriptionStatusUpdate,
    PrescriptionUpdate,
)
from services.notification_service import NotificationService
from models.notification import RelatedModel
from models.prescription import DISPENSING_STATUSES, PHARMACY_QUEUE, PrescriptionStatus
from models.user import Role
from core.auth import CurrentUser
from core.datetime_utils import now_iso
from core.exceptions import (
    DatabaseError,
    DoctorNotFoundError,
    PatientNotFoundError,
    PrescriptionNotFoundError,
)

logger = logging.getLogger(__name__)


class PrescriptionService:
    """Service layer for prescription operations."""

    def __init__(
        self,
        prescription_repository: PrescriptionRepository,
        doctor_repository: DoctorRepository,
        user_repository: UserRepository,
        notification_service: NotificationService,
    ):
        self._repo = prescription_repository
        self._doctor_repo = doctor_repository
        self._user_repo = user_repository
        self._notifications = notification_service

    @staticmethod
    def _to_response(rows: List[Dict[str, Any]]) -> List[PrescriptionResponse]:
        return [PrescriptionResponse.model_validate(row) for row in rows]

    def _update(self, prescription_id: int, changes: Dict[str, Any], operation: str) -> Dict[str, Any]:
        try:
            updated = self._repo.update(prescription_id, changes)
        except sqlite3.Error as e:
            raise DatabaseError(operation=operation, error=str(e)) from e

        if updated is None:
            raise PrescriptionNotFoundError(resource_id=prescription_id)
        return updated

    def get_prescriptions(self) -> List[PrescriptionResponse]:
        return self._to_response(self._repo.get_all())

    def get_prescription(self, prescription_id: int) -> PrescriptionResponse:
        prescription = self._repo.get_by_id(prescription_id)
        if prescription is None:
            raise PrescriptionNotFoundError(resource_id=prescription_id)
        return PrescriptionResponse.model_validate(prescription)

    def get_by_patient(self, patient_id: int) -> List[PrescriptionResponse]:
        return self._to_response(self._repo.get_all(patient_id=patient_id))

    def get_by_doctor(self, doctor_id: int) -> List[PrescriptionResponse]:
        return self._to_response(self._repo.get_all(doctor_id=doctor_id))

    def get_pharmacy_queue(self) -> List[PrescriptionResponse]:
        """Prescriptions sent to the pharmacy and not yet dispensed."""
        statuses = sorted(status.value for status in PHARMACY_QUEUE)
        return self._to_response(self._repo.get_all(statuses=statuses))

    def create_prescription(self, payload: PrescriptionCreate) -> PrescriptionResponse:
        """
        Raises:
            PatientNotFoundError: If the patient does not exist.
            DoctorNotFoundError: If the doctor does not exist.
        """
        if not self._user_repo.exists(payload.patient_id):
            raise PatientNotFoundError(resource_id=payload.patient_id)
        if self._doctor_repo.get_by_id(payload.doctor_id) is None:
            raise DoctorNotFoundError(resource_id=payload.doctor_id)

        data = payload.model_dump(mode="json")
        try:
            created = self._repo.add(
                patient_id=data["patient_id"],
                doctor_id=data["doctor_id"],
                medicines=data["medicines"],
                diagnosis=data["diagnosis"],
                notes=data["notes"],
                appointment_id=data["appointment_id"],
                status=PrescriptionStatus.PENDING.value,
            )
        except sqlite3.Error as e:
            raise DatabaseError(operation="create_prescription", error=str(e)) from e

        logger.info(
            f"Prescription created (id={created['id']})",
            extra={"medicines": len(created["medicines"])}
        )
        return PrescriptionResponse.model_validate(created)

    def update_prescription(self, prescription_id: int, payload: PrescriptionUpdate) -> PrescriptionResponse:
        changes = {
            key: value
            for key, value in payload.model_dump(mode="json", exclude_unset=True).items()
            if value is not None
        }
        return PrescriptionResponse.model_validate(
            self._update(prescription_id, changes, "update_prescription")
        )

    def send_to_pharmacy(self, prescription_id: int) -> PrescriptionResponse:
        """Queue the prescription for the pharmacy and notify every pharmacist."""
        updated = self._update(
            prescription_id,
            {"status": PrescriptionStatus.SENT_TO_PHARMACY.value},
            "send_prescription_to_pharmacy",
        )

        logger.info(f"Prescription {prescription_id} sent to pharmacy")
        self._notifications.notify_roles(
            [Role.PHARMACIST.value],
            title="New Prescription Available",
            message=(
                f"A new prescription has been sent by Dr. {updated['doctor_name']} "
                f"for patient {updated['patient_name']}."
            ),
            related_model=RelatedModel.PRESCRIPTION.value,
            related_id=prescription_id,
        )
        return PrescriptionResponse.model_validate(updated)

    def update_status(
        self,
        prescription_id: int,
        payload: PrescriptionStatusUpdate,
        user: CurrentUser,
    ) -> PrescriptionResponse:
        """Change the status; dispensing stamps the caller and the time."""
        changes: Dict[str, Any] = {"status": payload.status.value}
        if payload.status in DISPENSING_STATUSES:
            changes["dispensed_by"] = user.id
            changes["dispensed_at"] = now_iso()

        updated = self._update(prescription_id, changes, "update_prescription_status")
        logger.info(f"Prescription {prescription_id} status -> {payload.status.value}")
        return PrescriptionResponse.model_validate(updated)

    def delete_prescription(self, prescription_id: int) -> None:
        try:
            deleted = self._repo.delete(prescription_id)
        except sqlite3.Error as e:
            raise DatabaseError(operation="delete_prescription", error=str(e)) from e

        if not deleted:
            raise PrescriptionNotFoundError(resource_id=prescription_id)
        logger.info(f"Prescription {prescription_id} deleted")
