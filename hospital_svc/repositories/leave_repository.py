"""
Repository for leave request database operations.

``total_days`` is derived from the date range and recomputed on every write.
"""
import sqlite3
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from repositories.base import Database, row_to_dict
from models.leave import compute_total_days
from core.datetime_utils import format_date, now_iso, parse_date

logger = logging.getLogger(__name__)

_SELECT = """
    SELECT l.id, l.doctor_id, l.doctor_name, l.leave_type, l.start_date, l.end_date,
           l.reason, l.status, l.approved_by, l.approval_comments, l.submitted_at,
           l.reviewed_at, l.total_days, l.created_at, l.updated_at,
           a.name AS approved_by_name
    FROM leave_requests l
    LEFT JOIN users a ON l.approved_by = a.id
"""

UPDATABLE_FIELDS = (
    "leave_type", "start_date", "end_date", "reason",
    "status", "approved_by", "approval_comments", "reviewed_at",
)


class LeaveRepository:
    """Repository for leave request CRUD operations."""

    def __init__(self, db: Database):
        self._db = db

    def add(
        self,
        doctor_id: int,
        doctor_name: str,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> Dict[str, Any]:
        """Insert a pending leave request and return it."""
        conn = self._db.get_connection()
        cursor = conn.cursor()
        now = now_iso()

        try:
            cursor.execute("""
                INSERT INTO leave_requests
                (doctor_id, doctor_name, leave_type, start_date, end_date, reason,
                 status, submitted_at, total_days, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, 'Pending', ?, ?, ?, ?)
            """, (
                doctor_id,
                doctor_name,
                leave_type,
                format_date(start_date),
                format_date(end_date),
                reason,
                now,
                compute_total_days(start_date, end_date),
                now,
                now,
            ))
            leave_id = cursor.lastrowid

            cursor.execute(_SELECT + " WHERE l.id = ?", (leave_id,))
            row = cursor.fetchone()
            conn.commit()
            return row_to_dict(row)
        finally:
            conn.close()

    def get_by_id(self, leave_id: int) -> Optional[Dict[str, Any]]:
        conn = self._db.get_connection()
        try:
            return row_to_dict(conn.execute(_SELECT + " WHERE l.id = ?", (leave_id,)).fetchone())
        finally:
            conn.close()

    def get_by_doctor(self, doctor_id: int) -> List[Dict[str, Any]]:
        """A requester's own leave requests, most recently submitted first."""
        conn = self._db.get_connection()
        try:
            rows = conn.execute(
                _SELECT + " WHERE l.doctor_id = ? ORDER BY l.submitted_at DESC, l.id DESC",
                (doctor_id,),
            ).fetchall()
            return [row_to_dict(row) for row in rows]
        finally:
            conn.close()

    def get_all(
        self,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        """
        All leave requests, most recently submitted first.

        The date filter matches requests whose start date falls within
        [start_date, end_date] and is applied only when both bounds are given.
        """
        query = _SELECT + " WHERE 1=1"
        params: List[Any] = []

        if status:
            query += " AND l.status = ?"
            params.append(status)

        if start_date and end_date:
            query += " AND l.start_date >= ? AND l.start_date <= ?"
            params.extend([format_date(start_date), format_date(end_date)])

        query += " ORDER BY l.submitted_at DESC, l.id DESC"

        conn = self._db.get_connection()
        try:
            return [row_to_dict(row) for row in conn.execute(query, params).fetchall()]
        finally:
            conn.close()

    def update(self, leave_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply a partial update and recompute ``total_days``.

        Returns None if the request does not exist.
        """
        conn = self._db.get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute("SELECT start_date, end_date FROM leave_requests WHERE id = ?", (leave_id,))
            current = cursor.fetchone()
            if current is None:
                return None

            values_by_field: Dict[str, Any] = {}
            for key in UPDATABLE_FIELDS:
                if key not in changes:
                    continue
                value = changes[key]
                if key in ("start_date", "end_date"):
                    value = format_date(parse_date(value))
                values_by_field[key] = value

            start = parse_date(values_by_field.get("start_date", current["start_date"]))
            end = parse_date(values_by_field.get("end_date", current["end_date"]))
            values_by_field["total_days"] = compute_total_days(start, end)
            values_by_field["updated_at"] = now_iso()

            assignments = ", ".join(f"{key} = ?" for key in values_by_field)
            cursor.execute(
                f"UPDATE leave_requests SET {assignments} WHERE id = ?",
                list(values_by_field.values()) + [leave_id],
            )

            cursor.execute(_SELECT + " WHERE l.id = ?", (leave_id,))
            row = cursor.fetchone()
            conn.commit()
            return row_to_dict(row)
        except sqlite3.Error:
            conn.rollback()
            raise
        finally:
            conn.close()

    def delete(self, leave_id: int) -> bool:
        """Delete a leave request. Returns False if it did not exist."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute("DELETE FROM leave_requests WHERE id = ?", (leave_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()
