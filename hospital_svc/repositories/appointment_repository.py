"""
Repository for appointment database operations.
"""
import sqlite3
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from repositories.base import Database, row_to_dict
from core.datetime_utils import format_date, now_iso

logger = logging.getLogger(__name__)

_SELECT = """
    SELECT a.id, a.patient_id, a.doctor_id, a.date, a.time, a.status, a.reason,
           a.notes, a.reminder_sent, a.created_at, a.updated_at,
           p.name AS patient_name,
           d.user_id AS doctor_user_id, d.specialization AS doctor_specialization,
           du.name AS doctor_name
    FROM appointments a
    LEFT JOIN users p ON a.patient_id = p.id
    LEFT JOIN doctors d ON a.doctor_id = d.id
    LEFT JOIN users du ON d.user_id = du.id
"""

UPDATABLE_FIELDS = ("date", "time", "status", "reason", "notes", "reminder_sent")


def _to_dict(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    return row_to_dict(row, bool_fields=("reminder_sent",))


class AppointmentRepository:
    """Repository for appointment CRUD operations."""

    def __init__(self, db: Database):
        self._db = db

    def add(
        self,
        patient_id: int,
        doctor_id: int,
        appointment_date: date,
        time: str,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        status: str = "Scheduled",
    ) -> Dict[str, Any]:
        """Insert an appointment and return it with names resolved."""
        conn = self._db.get_connection()
        cursor = conn.cursor()
        now = now_iso()

        try:
            cursor.execute("""
                INSERT INTO appointments
                (patient_id, doctor_id, date, time, status, reason, notes, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (patient_id, doctor_id, format_date(appointment_date), time, status, reason, notes, now, now))
            appointment_id = cursor.lastrowid

            cursor.execute(_SELECT + " WHERE a.id = ?", (appointment_id,))
            row = cursor.fetchone()
            conn.commit()
            return _to_dict(row)
        finally:
            conn.close()

    def get_by_id(self, appointment_id: int) -> Optional[Dict[str, Any]]:
        conn = self._db.get_connection()
        try:
            return _to_dict(conn.execute(_SELECT + " WHERE a.id = ?", (appointment_id,)).fetchone())
        finally:
            conn.close()

    def get_all(
        self,
        patient_id: Optional[int] = None,
        doctor_id: Optional[int] = None,
        on_date: Optional[date] = None,
        from_date: Optional[date] = None,
        exclude_statuses: Iterable[str] = (),
        newest_first: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Appointments matching the given filters, ordered by date then time.

        Args:
            patient_id: Keep only this patient's appointments.
            doctor_id: Keep only this doctor's appointments.
            on_date: Keep only appointments on this calendar date.
            from_date: Keep only appointments on or after this date.
            exclude_statuses: Drop appointments in any of these statuses.
            newest_first: Reverse the date ordering.
        """
        query = _SELECT + " WHERE 1=1"
        params: List[Any] = []

        if patient_id is not None:
            query += " AND a.patient_id = ?"
            params.append(patient_id)

        if doctor_id is not None:
            query += " AND a.doctor_id = ?"
            params.append(doctor_id)

        if on_date is not None:
            query += " AND a.date = ?"
            params.append(format_date(on_date))

        if from_date is not None:
            query += " AND a.date >= ?"
            params.append(format_date(from_date))

        excluded = list(exclude_statuses)
        if excluded:
            query += f" AND a.status NOT IN ({', '.join('?' for _ in excluded)})"
            params.extend(excluded)

        direction = "DESC" if newest_first else "ASC"
        query += f" ORDER BY a.date {direction}, a.time {direction}, a.id {direction}"

        conn = self._db.get_connection()
        try:
            return [_to_dict(row) for row in conn.execute(query, params).fetchall()]
        finally:
            conn.close()

    def find_in_slot(
        self,
        doctor_id: int,
        appointment_date: date,
        time: str,
        exclude_statuses: Iterable[str] = (),
        exclude_id: Optional[int] = None,
    ) -> Optional[Dict[str, Any]]:
        """First appointment occupying a doctor's date/time slot, if any."""
        query = "SELECT id FROM appointments WHERE doctor_id = ? AND date = ? AND time = ?"
        params: List[Any] = [doctor_id, format_date(appointment_date), time]

        excluded = list(exclude_statuses)
        if excluded:
            query += f" AND status NOT IN ({', '.join('?' for _ in excluded)})"
            params.extend(excluded)

        if exclude_id is not None:
            query += " AND id != ?"
            params.append(exclude_id)

        conn = self._db.get_connection()
        try:
            row = conn.execute(query + " LIMIT 1", params).fetchone()
            return row_to_dict(row)
        finally:
            conn.close()

    def update(self, appointment_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply a partial update. Returns None if the appointment does not exist."""
        fields = [key for key in UPDATABLE_FIELDS if key in changes]
        values: List[Any] = []
        for key in fields:
            value = changes[key]
            if key == "date":
                value = format_date(value)
            elif key == "reminder_sent":
                value = int(bool(value))
            values.append(value)

        assignments = ", ".join(f"{key} = ?" for key in fields + ["updated_at"])
        values.extend([now_iso(), appointment_id])

        conn = self._db.get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(f"UPDATE appointments SET {assignments} WHERE id = ?", values)
            if cursor.rowcount == 0:
                return None

            cursor.execute(_SELECT + " WHERE a.id = ?", (appointment_id,))
            row = cursor.fetchone()
            conn.commit()
            return _to_dict(row)
        finally:
            conn.close()

    def delete(self, appointment_id: int) -> bool:
        """Delete an appointment. Returns False if it did not exist."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute("DELETE FROM appointments WHERE id = ?", (appointment_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()
