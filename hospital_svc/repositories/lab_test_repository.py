"""
Repository for lab test database operations.
"""
import sqlite3
import logging
from typing import Any, Dict, List, Optional

from repositories.base import Database, row_to_dict
from core.datetime_utils import now_iso

logger = logging.getLogger(__name__)

# Patient and requester names are resolved via JOIN on every read
_SELECT = """
    SELECT t.id, t.name, t.patient_id, t.requested_by, t.test_type, t.status,
           t.results, t.findings, t.notes, t.sample_collection_date, t.result_date,
           t.priority, t.created_at, t.updated_at,
           p.name AS patient_name, r.name AS requested_by_name
    FROM lab_tests t
    LEFT JOIN users p ON t.patient_id = p.id
    LEFT JOIN users r ON t.requested_by = r.id
"""

UPDATABLE_FIELDS = (
    "status", "results", "findings", "notes", "sample_collection_date", "result_date", "priority",
)


class LabTestRepository:
    """Repository for lab test CRUD operations."""

    def __init__(self, db: Database):
        self._db = db

    def add(
        self,
        name: str,
        patient_id: int,
        requested_by: int,
        test_type: str,
        priority: str,
        notes: Optional[str] = None,
        status: str = "Requested",
    ) -> Dict[str, Any]:
        """Insert a lab test and return it with names resolved."""
        conn = self._db.get_connection()
        cursor = conn.cursor()
        now = now_iso()

        try:
            cursor.execute("""
                INSERT INTO lab_tests
                (name, patient_id, requested_by, test_type, status, notes, priority, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (name, patient_id, requested_by, test_type, status, notes, priority, now, now))
            test_id = cursor.lastrowid

            cursor.execute(_SELECT + " WHERE t.id = ?", (test_id,))
            row = cursor.fetchone()
            conn.commit()
            return row_to_dict(row)
        finally:
            conn.close()

    def get_by_id(self, test_id: int) -> Optional[Dict[str, Any]]:
        conn = self._db.get_connection()
        try:
            return row_to_dict(conn.execute(_SELECT + " WHERE t.id = ?", (test_id,)).fetchone())
        finally:
            conn.close()

    def get_all(
        self,
        patient_id: Optional[int] = None,
        requested_by: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Lab tests, newest first.

        Args:
            patient_id: Keep only tests for this patient (optional).
            requested_by: Keep only tests requested by this user (optional).
        """
        query = _SELECT + " WHERE 1=1"
        params: List[Any] = []

        if patient_id is not None:
            query += " AND t.patient_id = ?"
            params.append(patient_id)

        if requested_by is not None:
            query += " AND t.requested_by = ?"
            params.append(requested_by)

        query += " ORDER BY t.created_at DESC, t.id DESC"

        conn = self._db.get_connection()
        try:
            return [row_to_dict(row) for row in conn.execute(query, params).fetchall()]
        finally:
            conn.close()

    def update(self, test_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply a partial update. Returns None if the test does not exist."""
        fields = [key for key in UPDATABLE_FIELDS if key in changes]
        assignments = ", ".join(f"{key} = ?" for key in fields + ["updated_at"])
        values: List[Any] = [changes[key] for key in fields] + [now_iso(), test_id]

        conn = self._db.get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(f"UPDATE lab_tests SET {assignments} WHERE id = ?", values)
            if cursor.rowcount == 0:
                return None

            cursor.execute(_SELECT + " WHERE t.id = ?", (test_id,))
            row = cursor.fetchone()
            conn.commit()
            return row_to_dict(row)
        except sqlite3.Error:
            conn.rollback()
            raise
        finally:
            conn.close()
