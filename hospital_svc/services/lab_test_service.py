"""
Service layer for lab tests.

Visibility is role based: lab technicians see the tests they requested,
patients see their own tests, every other role sees all tests. A test the
caller cannot see is reported as not found.
"""
import sqlite3
import logging
from typing import Any, Dict, List, Optional

from repositories import LabTestRepository, UserRepository
from schemas import LabTestCreate, LabTestResponse, LabTestResultsUpdate, LabTestStatusUpdate
from services.notification_service import NotificationService
from models.lab_test import LabTestStatus, can_record_results, can_transition
from models.notification import RelatedModel
from models.user import Role
from core.auth import CurrentUser
from core.datetime_utils import now_iso
from core.exceptions import (
    DatabaseError,
    InvalidStatusTransitionError,
    LabTestNotFoundError,
    PatientNotFoundError,
)

logger = logging.getLogger(__name__)


def visibility_filter(user: CurrentUser) -> Dict[str, Optional[int]]:
    """Repository filters restricting lab tests to what ``user`` may see."""
    if user.role == Role.LAB_TECHNICIAN.value:
        return {"requested_by": user.id}
    if user.role == Role.PATIENT.value:
        return {"patient_id": user.id}
    return {}


def is_visible(test: Dict[str, Any], user: CurrentUser) -> bool:
    return all(test[key] == value for key, value in visibility_filter(user).items())


class LabTestService:
    """Service layer for lab test requests, results and status changes."""

    def __init__(
        self,
        lab_test_repository: LabTestRepository,
        user_repository: UserRepository,
        notification_service: NotificationService,
    ):
        self._repo = lab_test_repository
        self._user_repo = user_repository
        self._notifications = notification_service

    def _get_visible(self, test_id: int, user: CurrentUser) -> Dict[str, Any]:
        test = self._repo.get_by_id(test_id)
        if test is None or not is_visible(test, user):
            raise LabTestNotFoundError(resource_id=test_id)
        return test

    def get_lab_tests(self, user: CurrentUser) -> List[LabTestResponse]:
        """Lab tests visible to the caller, newest first."""
        tests = self._repo.get_all(**visibility_filter(user))
        return [LabTestResponse.model_validate(t) for t in tests]

    def get_lab_test(self, test_id: int, user: CurrentUser) -> LabTestResponse:
        return LabTestResponse.model_validate(self._get_visible(test_id, user))

    def create_lab_test(self, payload: LabTestCreate, user: CurrentUser) -> LabTestResponse:
        """
        Request a lab test on behalf of the caller.

        Raises:
            PatientNotFoundError: If the patient does not exist.
        """
        if not self._user_repo.exists(payload.patient_id):
            raise PatientNotFoundError(resource_id=payload.patient_id)

        try:
            created = self._repo.add(
                name=payload.name,
                patient_id=payload.patient_id,
                requested_by=user.id,
                test_type=payload.test_type.value,
                priority=payload.priority.value,
                notes=payload.notes,
                status=LabTestStatus.REQUESTED.value,
            )
        except sqlite3.Error as e:
            raise DatabaseError(operation="create_lab_test", error=str(e)) from e

        logger.info(
            f"Lab test requested (id={created['id']})",
            extra={"test_type": created["test_type"], "priority": created["priority"]}
        )
        return LabTestResponse.model_validate(created)

    def update_results(self, test_id: int, payload: LabTestResultsUpdate, user: CurrentUser) -> LabTestResponse:
        """
        Record results, completing the test, and notify the requester.

        Raises:
            LabTestNotFoundError: If the test does not exist.
            InvalidStatusTransitionError: If the test was cancelled.
        """
        test = self._repo.get_by_id(test_id)
        if test is None:
            raise LabTestNotFoundError(resource_id=test_id)

        current = LabTestStatus(test["status"])
        if not can_record_results(current):
            raise InvalidStatusTransitionError(current=current.value, target=LabTestStatus.COMPLETED.value)

        try:
            updated = self._repo.update(test_id, {
                "results": payload.results,
                "findings": payload.findings,
                "status": LabTestStatus.COMPLETED.value,
                "result_date": now_iso(),
            })
        except sqlite3.Error as e:
            raise DatabaseError(operation="update_lab_test_results", error=str(e)) from e

        if updated is None:
            raise LabTestNotFoundError(resource_id=test_id)

        logger.info(f"Lab test {test_id} completed by user {user.id}")
        self._notifications.notify_users(
            [updated["requested_by"]],
            title="Lab Results Ready",
            message=f"Results for {updated['name']} ({updated['patient_name'] or 'patient'}) are available.",
            related_model=RelatedModel.LAB_TEST.value,
            related_id=test_id,
        )
        return LabTestResponse.model_validate(updated)

    def update_status(self, test_id: int, payload: LabTestStatusUpdate, user: CurrentUser) -> LabTestResponse:
        """
        Move a test to In Progress (sample collected) or Cancelled.

        Raises:
            LabTestNotFoundError: If the test does not exist.
            InvalidStatusTransitionError: If the move is not allowed.
        """
        test = self._repo.get_by_id(test_id)
        if test is None:
            raise LabTestNotFoundError(resource_id=test_id)

        current = LabTestStatus(test["status"])
        target = payload.status
        if not can_transition(current, target):
            raise InvalidStatusTransitionError(current=current.value, target=target.value)

        changes: Dict[str, Any] = {"status": target.value}
        if target == LabTestStatus.IN_PROGRESS and not test["sample_collection_date"]:
            changes["sample_collection_date"] = now_iso()

        try:
            updated = self._repo.update(test_id, changes)
        except sqlite3.Error as e:
            raise DatabaseError(operation="update_lab_test_status", error=str(e)) from e

        if updated is None:
            raise LabTestNotFoundError(resource_id=test_id)

        logger.info(f"Lab test {test_id}: {current.value} -> {target.value} (by user {user.id})")
        if target == LabTestStatus.IN_PROGRESS:
            self._notifications.notify_users(
                [updated["requested_by"]],
                title="Sample Collected",
                message=f"The sample for {updated['name']} has been collected and is being processed.",
                related_model=RelatedModel.LAB_TEST.value,
                related_id=test_id,
            )
        return LabTestResponse.model_validate(updated)
