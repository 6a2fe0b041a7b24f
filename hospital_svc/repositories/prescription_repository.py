"""
Repository for prescription database operations.

Medicines are stored as a JSON array on the prescription row.
"""
import sqlite3
import logging
from typing import Any, Dict, Iterable, List, Optional

from repositories.base import Database, row_to_dict, to_json
from core.datetime_utils import now_iso

logger = logging.getLogger(__name__)

_SELECT = """
    SELECT r.id, r.patient_id, r.doctor_id, r.appointment_id, r.medicines, r.diagnosis,
           r.notes, r.status, r.dispensed_by, r.dispensed_at, r.created_at, r.updated_at,
           p.name AS patient_name,
           du.name AS doctor_name, d.specialization AS doctor_specialization,
           x.name AS dispensed_by_name
    FROM prescriptions r
    LEFT JOIN users p ON r.patient_id = p.id
    LEFT JOIN doctors d ON r.doctor_id = d.id
    LEFT JOIN users du ON d.user_id = du.id
    LEFT JOIN users x ON r.dispensed_by = x.id
"""

UPDATABLE_FIELDS = (
    "appointment_id", "medicines", "diagnosis", "notes", "status", "dispensed_by", "dispensed_at",
)


def _to_dict(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    return row_to_dict(row, json_fields=("medicines",))


class PrescriptionRepository:
    """Repository for prescription CRUD operations."""

    def __init__(self, db: Database):
        self._db = db

    def add(
        self,
        patient_id: int,
        doctor_id: int,
        medicines: List[Dict[str, Any]],
        diagnosis: str,
        notes: str = "",
        appointment_id: Optional[int] = None,
        status: str = "pending",
    ) -> Dict[str, Any]:
        """Insert a prescription and return it with names resolved."""
        conn = self._db.get_connection()
        cursor = conn.cursor()
        now = now_iso()

        try:
            cursor.execute("""
                INSERT INTO prescriptions
                (patient_id, doctor_id, appointment_id, medicines, diagnosis, notes, status,
                 created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                patient_id, doctor_id, appointment_id, to_json(medicines),
                diagnosis, notes, status, now, now,
            ))
            prescription_id = cursor.lastrowid

            cursor.execute(_SELECT + " WHERE r.id = ?", (prescription_id,))
            row = cursor.fetchone()
            conn.commit()
            return _to_dict(row)
        finally:
            conn.close()

    def get_by_id(self, prescription_id: int) -> Optional[Dict[str, Any]]:
        conn = self._db.get_connection()
        try:
            return _to_dict(conn.execute(_SELECT + " WHERE r.id = ?", (prescription_id,)).fetchone())
        finally:
            conn.close()

    def get_all(
        self,
        patient_id: Optional[int] = None,
        doctor_id: Optional[int] = None,
        statuses: Iterable[str] = (),
    ) -> List[Dict[str, Any]]:
        """Prescriptions matching the filters, newest first."""
        query = _SELECT + " WHERE 1=1"
        params: List[Any] = []

        if patient_id is not None:
            query += " AND r.patient_id = ?"
            params.append(patient_id)

        if doctor_id is not None:
            query += " AND r.doctor_id = ?"
            params.append(doctor_id)

        wanted = list(statuses)
        if wanted:
            query += f" AND r.status IN ({', '.join('?' for _ in wanted)})"
            params.extend(wanted)

        query += " ORDER BY r.created_at DESC, r.id DESC"

        conn = self._db.get_connection()
        try:
            return [_to_dict(row) for row in conn.execute(query, params).fetchall()]
        finally:
            conn.close()

    def update(self, prescription_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply a partial update. Returns None if the prescription does not exist."""
        fields = [key for key in UPDATABLE_FIELDS if key in changes]
        values: List[Any] = [
            to_json(changes[key]) if key == "medicines" else changes[key]
            for key in fields
        ]
        assignments = ", ".join(f"{key} = ?" for key in fields + ["updated_at"])
        values.extend([now_iso(), prescription_id])

        conn = self._db.get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(f"UPDATE prescriptions SET {assignments} WHERE id = ?", values)
            if cursor.rowcount == 0:
                return None

            cursor.execute(_SELECT + " WHERE r.id = ?", (prescription_id,))
            row = cursor.fetchone()
            conn.commit()
            return _to_dict(row)
        finally:
            conn.close()

    def delete(self, prescription_id: int) -> bool:
        """Delete a prescription. Returns False if it did not exist."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute("DELETE FROM prescriptions WHERE id = ?", (prescription_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()
