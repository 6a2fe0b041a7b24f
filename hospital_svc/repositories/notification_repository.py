"""
Repository for in-app notifications.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from repositories.base import Database, row_to_dict
from core.datetime_utils import now_iso

logger = logging.getLogger(__name__)

_COLUMNS = "id, user_id, title, message, type, read, related_model, related_id, created_at"


class NotificationRepository:
    """Repository for notification CRUD operations."""

    def __init__(self, db: Database):
        self._db = db

    def add_many(
        self,
        user_ids: Iterable[int],
        title: str,
        message: str,
        notification_type: str = "info",
        related_model: Optional[str] = None,
        related_id: Optional[int] = None,
    ) -> int:
        """
        Insert one notification per recipient in a single transaction.

        Returns:
            Number of notifications created.
        """
        now = now_iso()
        rows = [
            (user_id, title, message, notification_type, related_model, related_id, now)
            for user_id in user_ids
        ]
        if not rows:
            return 0

        conn = self._db.get_connection()
        try:
            conn.executemany("""
                INSERT INTO notifications
                (user_id, title, message, type, related_model, related_id, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, rows)
            conn.commit()
            return len(rows)
        finally:
            conn.close()

    def get_for_user(self, user_id: int, limit: int) -> List[Dict[str, Any]]:
        """A user's notifications, newest first."""
        conn = self._db.get_connection()
        try:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM notifications WHERE user_id = ? "
                "ORDER BY created_at DESC, id DESC LIMIT ?",
                (user_id, limit),
            ).fetchall()
            return [row_to_dict(row, bool_fields=("read",)) for row in rows]
        finally:
            conn.close()

    def mark_read(self, notification_id: int, user_id: int) -> Optional[Dict[str, Any]]:
        """Mark one of the user's notifications as read. None if it is not theirs."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                "UPDATE notifications SET read = 1 WHERE id = ? AND user_id = ?",
                (notification_id, user_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(f"SELECT {_COLUMNS} FROM notifications WHERE id = ?", (notification_id,)).fetchone()
            conn.commit()
            return row_to_dict(row, bool_fields=("read",))
        finally:
            conn.close()

    def mark_all_read(self, user_id: int) -> int:
        """Mark every unread notification of the user as read. Returns the count changed."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                "UPDATE notifications SET read = 1 WHERE user_id = ? AND read = 0", (user_id,)
            )
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    def delete(self, notification_id: int, user_id: int) -> bool:
        """Delete one of the user's notifications. False if it is not theirs."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                "DELETE FROM notifications WHERE id = ? AND user_id = ?", (notification_id, user_id)
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()
