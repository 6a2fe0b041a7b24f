"""
Service layer for in-app notifications.

Other services call the fan-out helpers (notify_users / notify_roles) after
their own write has committed. Fan-out is best effort: a database failure is
logged and swallowed so it never fails the operation that triggered it.
"""
import sqlite3
import logging
from typing import Iterable, List, Optional

from repositories import NotificationRepository, UserRepository
from schemas import NotificationResponse
from models.notification import NOTIFICATION_LIST_LIMIT, NotificationType
from core.auth import CurrentUser
from core.exceptions import DatabaseError, NotificationNotFoundError

logger = logging.getLogger(__name__)


class NotificationService:
    """Notification listing for the caller and role-based fan-out for other services."""

    def __init__(
        self,
        notification_repository: NotificationRepository,
        user_repository: UserRepository,
    ):
        self._repo = notification_repository
        self._user_repo = user_repository

    # -------------------------------------------------------------------------
    # Fan-out (best effort)
    # -------------------------------------------------------------------------

    def notify_users(
        self,
        user_ids: Iterable[int],
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.INFO,
        related_model: Optional[str] = None,
        related_id: Optional[int] = None,
    ) -> int:
        """
        Create one notification per recipient.

        Returns:
            Number of notifications created (0 if the write failed).
        """
        recipients = sorted(set(user_ids))
        try:
            created = self._repo.add_many(
                recipients,
                title=title,
                message=message,
                notification_type=NotificationType(notification_type).value,
                related_model=related_model,
                related_id=related_id,
            )
        except sqlite3.Error:
            logger.exception(
                "Failed to create notifications",
                extra={"title": title, "recipients": len(recipients)}
            )
            return 0

        logger.info(f"Notification '{title}' sent to {created} user(s)")
        return created

    def notify_roles(
        self,
        roles: Iterable[str],
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.INFO,
        related_model: Optional[str] = None,
        related_id: Optional[int] = None,
    ) -> int:
        """Notify every active user holding one of ``roles``."""
        roles = list(roles)
        try:
            user_ids = self._user_repo.get_active_ids_by_roles(roles)
        except sqlite3.Error:
            logger.exception("Failed to resolve notification recipients", extra={"roles": roles})
            return 0

        return self.notify_users(
            user_ids,
            title=title,
            message=message,
            notification_type=notification_type,
            related_model=related_model,
            related_id=related_id,
        )

    # -------------------------------------------------------------------------
    # Caller's notifications
    # -------------------------------------------------------------------------

    def get_my_notifications(self, user: CurrentUser) -> List[NotificationResponse]:
        """The caller's most recent notifications, newest first."""
        rows = self._repo.get_for_user(user.id, NOTIFICATION_LIST_LIMIT)
        return [NotificationResponse.model_validate(row) for row in rows]

    def mark_as_read(self, notification_id: int, user: CurrentUser) -> NotificationResponse:
        """
        Raises:
            NotificationNotFoundError: If the notification does not exist or
                belongs to someone else.
        """
        try:
            row = self._repo.mark_read(notification_id, user.id)
        except sqlite3.Error as e:
            raise DatabaseError(operation="mark_notification_read", error=str(e)) from e

        if row is None:
            raise NotificationNotFoundError(resource_id=notification_id)
        return NotificationResponse.model_validate(row)

    def mark_all_as_read(self, user: CurrentUser) -> int:
        try:
            count = self._repo.mark_all_read(user.id)
        except sqlite3.Error as e:
            raise DatabaseError(operation="mark_all_notifications_read", error=str(e)) from e

        logger.info(f"Marked {count} notification(s) read for user {user.id}")
        return count

    def delete_notification(self, notification_id: int, user: CurrentUser) -> None:
        try:
            deleted = self._repo.delete(notification_id, user.id)
        except sqlite3.Error as e:
            raise DatabaseError(operation="delete_notification", error=str(e)) from e

        if not deleted:
            raise NotificationNotFoundError(resource_id=notification_id)
