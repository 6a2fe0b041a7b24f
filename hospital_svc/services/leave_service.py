"""
Service layer for leave requests.

Requesters (doctors and other staff) manage their own requests while they
are pending; admins list everything and approve or reject.
"""
import sqlite3
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from repositories import LeaveRepository
from schemas import LeaveCreate, LeaveResponse, LeaveReview, LeaveUpdate
from services.notification_service import NotificationService
from models.leave import LeaveStatus
from models.notification import NotificationType, RelatedModel
from core.auth import CurrentUser
from core.datetime_utils import now_iso, parse_date
from core.exceptions import (
    DatabaseError,
    InvalidOperationError,
    LeaveNotPendingError,
    LeaveRequestNotFoundError,
)

logger = logging.getLogger(__name__)


class LeaveService:
    """Service layer for leave request operations."""

    def __init__(self, leave_repository: LeaveRepository, notification_service: NotificationService):
        self._repo = leave_repository
        self._notifications = notification_service

    def _get_own(self, leave_id: int, user: CurrentUser) -> Dict[str, Any]:
        leave = self._repo.get_by_id(leave_id)
        if leave is None or leave["doctor_id"] != user.id:
            raise LeaveRequestNotFoundError(resource_id=leave_id)
        return leave

    def create_request(self, payload: LeaveCreate, user: CurrentUser) -> LeaveResponse:
        """Submit a leave request for the caller."""
        try:
            created = self._repo.add(
                doctor_id=user.id,
                doctor_name=user.name or f"User {user.id}",
                leave_type=payload.leave_type.value,
                start_date=payload.start_date,
                end_date=payload.end_date,
                reason=payload.reason,
            )
        except sqlite3.Error as e:
            raise DatabaseError(operation="create_leave_request", error=str(e)) from e

        logger.info(
            f"Leave request submitted (id={created['id']}, user={user.id})",
            extra={"total_days": created["total_days"]}
        )
        return LeaveResponse.model_validate(created)

    def get_my_requests(self, user: CurrentUser) -> List[LeaveResponse]:
        return [LeaveResponse.model_validate(r) for r in self._repo.get_by_doctor(user.id)]

    def get_request(self, leave_id: int, user: CurrentUser) -> LeaveResponse:
        """
        Raises:
            LeaveRequestNotFoundError: If missing or not the caller's.
        """
        return LeaveResponse.model_validate(self._get_own(leave_id, user))

    def update_request(self, leave_id: int, payload: LeaveUpdate, user: CurrentUser) -> LeaveResponse:
        """
        Edit one of the caller's pending requests.

        Raises:
            LeaveRequestNotFoundError: If missing or not the caller's.
            LeaveNotPendingError: If the request was already reviewed.
            InvalidOperationError: If the merged date range ends before it starts.
        """
        leave = self._get_own(leave_id, user)
        if leave["status"] != LeaveStatus.PENDING.value:
            raise LeaveNotPendingError(leave_id=leave_id, status=leave["status"])

        changes = {
            key: value
            for key, value in payload.model_dump(mode="json", exclude_unset=True).items()
            if value is not None
        }
        start = parse_date(changes.get("start_date", leave["start_date"]))
        end = parse_date(changes.get("end_date", leave["end_date"]))
        if end < start:
            raise InvalidOperationError(detail="end_date must be on or after start_date")

        try:
            updated = self._repo.update(leave_id, changes)
        except sqlite3.Error as e:
            raise DatabaseError(operation="update_leave_request", error=str(e)) from e

        if updated is None:
            raise LeaveRequestNotFoundError(resource_id=leave_id)
        return LeaveResponse.model_validate(updated)

    def delete_request(self, leave_id: int, user: CurrentUser) -> None:
        """
        Withdraw one of the caller's pending requests.

        Raises:
            LeaveRequestNotFoundError: If missing or not the caller's.
            LeaveNotPendingError: If the request was already reviewed.
        """
        leave = self._get_own(leave_id, user)
        if leave["status"] != LeaveStatus.PENDING.value:
            raise LeaveNotPendingError(
                detail="Only pending leave requests can be deleted",
                leave_id=leave_id,
                status=leave["status"],
            )

        try:
            self._repo.delete(leave_id)
        except sqlite3.Error as e:
            raise DatabaseError(operation="delete_leave_request", error=str(e)) from e

        logger.info(f"Leave request {leave_id} withdrawn by user {user.id}")

    def get_all_requests(
        self,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[LeaveResponse]:
        """Every leave request (admin view); the date filter needs both bounds."""
        rows = self._repo.get_all(status=status, start_date=start_date, end_date=end_date)
        return [LeaveResponse.model_validate(r) for r in rows]

    def review_request(self, leave_id: int, payload: LeaveReview, reviewer: CurrentUser) -> LeaveResponse:
        """
        Approve or reject a pending request and notify the requester.

        Raises:
            LeaveRequestNotFoundError: If the request does not exist.
            LeaveNotPendingError: If it was already reviewed.
        """
        leave = self._repo.get_by_id(leave_id)
        if leave is None:
            raise LeaveRequestNotFoundError(resource_id=leave_id)
        if leave["status"] != LeaveStatus.PENDING.value:
            raise LeaveNotPendingError(
                detail="Leave request has already been reviewed",
                leave_id=leave_id,
                status=leave["status"],
            )

        try:
            updated = self._repo.update(leave_id, {
                "status": payload.status,
                "approved_by": reviewer.id,
                "approval_comments": payload.approval_comments,
                "reviewed_at": now_iso(),
            })
        except sqlite3.Error as e:
            raise DatabaseError(operation="review_leave_request", error=str(e)) from e

        if updated is None:
            raise LeaveRequestNotFoundError(resource_id=leave_id)

        logger.info(f"Leave request {leave_id} {payload.status.lower()} by user {reviewer.id}")

        approved = payload.status == LeaveStatus.APPROVED.value
        message = (
            f"Your {updated['leave_type']} request from {updated['start_date']} to "
            f"{updated['end_date']} has been {payload.status.lower()}."
        )
        if payload.approval_comments:
            message += f" Comments: {payload.approval_comments}"
        self._notifications.notify_users(
            [updated["doctor_id"]],
            title=f"Leave Request {payload.status}",
            message=message,
            notification_type=NotificationType.INFO if approved else NotificationType.WARNING,
            related_model=RelatedModel.LEAVE.value,
            related_id=leave_id,
        )
        return LeaveResponse.model_validate(updated)
