"""
Repository for doctor profile database operations.

Doctor profiles extend a user account (name, email and mobile number live
on the user and are joined in on every read).
"""
import sqlite3
import logging
from typing import Any, Dict, List, Optional

from repositories.base import Database, row_to_dict, to_json
from core.datetime_utils import now_iso

logger = logging.getLogger(__name__)

_SELECT = """
    SELECT d.id, d.user_id, d.specialization, d.license_number, d.qualifications,
           d.experience, d.schedule, d.max_patients_per_day, d.is_active,
           d.created_at, d.updated_at,
           u.name AS user_name, u.email AS user_email, u.mobile_number AS user_mobile_number
    FROM doctors d
    INNER JOIN users u ON d.user_id = u.id
"""


class DoctorRepository:
    """Repository for doctor CRUD operations."""

    def __init__(self, db: Database):
        self._db = db

    @staticmethod
    def _to_dict(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
        data = row_to_dict(row, json_fields=("qualifications", "schedule"), bool_fields=("is_active",))
        if data is None:
            return None
        data["user"] = {
            "id": data["user_id"],
            "name": data.pop("user_name"),
            "email": data.pop("user_email"),
            "mobile_number": data.pop("user_mobile_number"),
        }
        return data

    def add(
        self,
        user_id: int,
        specialization: str,
        license_number: str,
        qualifications: List[Dict[str, Any]],
        experience: int,
        schedule: List[Dict[str, Any]],
        max_patients_per_day: int,
    ) -> Optional[Dict[str, Any]]:
        """
        Insert a doctor profile and return it with user details joined.

        Returns:
            The created doctor, or None if the license number is already registered.
        """
        conn = self._db.get_connection()
        cursor = conn.cursor()
        now = now_iso()

        try:
            cursor.execute("""
                INSERT INTO doctors
                (user_id, specialization, license_number, qualifications, experience,
                 schedule, max_patients_per_day, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                user_id,
                specialization,
                license_number,
                to_json(qualifications),
                experience,
                to_json(schedule),
                max_patients_per_day,
                now,
                now,
            ))
            doctor_id = cursor.lastrowid

            cursor.execute(_SELECT + " WHERE d.id = ?", (doctor_id,))
            row = cursor.fetchone()
            conn.commit()
            return self._to_dict(row)
        except sqlite3.IntegrityError:
            # license_number UNIQUE
            return None
        finally:
            conn.close()

    def get_by_id(self, doctor_id: int) -> Optional[Dict[str, Any]]:
        conn = self._db.get_connection()
        try:
            return self._to_dict(conn.execute(_SELECT + " WHERE d.id = ?", (doctor_id,)).fetchone())
        finally:
            conn.close()

    def get_all_active(self) -> List[Dict[str, Any]]:
        """Active doctors, ordered by the doctor's name."""
        conn = self._db.get_connection()
        try:
            rows = conn.execute(_SELECT + " WHERE d.is_active = 1 ORDER BY u.name ASC, d.id ASC").fetchall()
            return [self._to_dict(row) for row in rows]
        finally:
            conn.close()

    def update_schedule(self, doctor_id: int, schedule: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Replace a doctor's weekly schedule. Returns None if the doctor does not exist."""
        conn = self._db.get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute(
                "UPDATE doctors SET schedule = ?, updated_at = ? WHERE id = ?",
                (to_json(schedule), now_iso(), doctor_id),
            )
            if cursor.rowcount == 0:
                return None

            cursor.execute(_SELECT + " WHERE d.id = ?", (doctor_id,))
            row = cursor.fetchone()
            conn.commit()
            return self._to_dict(row)
        finally:
            conn.close()
