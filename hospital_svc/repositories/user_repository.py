"""
Repository for user account database operations.

Architecture:
    UserRepository is the data access layer for users.
    It should be injected via core.dependencies.get_user_repository().

All SQL is encapsulated in this repository - no SQL in service or API layers.
"""
import sqlite3
import logging
from typing import Any, Dict, Iterable, List, Optional

from repositories.base import Database, row_to_dict
from core.datetime_utils import now_iso

logger = logging.getLogger(__name__)

_COLUMNS = "id, name, email, role, mobile_number, is_active, created_at, updated_at"


class UserRepository:
    """Repository for user CRUD operations."""

    def __init__(self, db: Database):
        """
        Initialize the user repository.

        Args:
            db: Database instance for data access.
                Injected via core.dependencies.get_user_repository().
        """
        self._db = db

    @staticmethod
    def _to_dict(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
        return row_to_dict(row, bool_fields=("is_active",))

    def add(
        self,
        name: str,
        email: str,
        role: str,
        mobile_number: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Insert a user and return the created record.

        Returns:
            The created user dict, or None if the email is already taken
            (UNIQUE constraint violation).
        """
        conn = self._db.get_connection()
        cursor = conn.cursor()
        now = now_iso()

        try:
            cursor.execute("""
                INSERT INTO users (name, email, role, mobile_number, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (name, email, role, mobile_number, now, now))
            user_id = cursor.lastrowid

            cursor.execute(f"SELECT {_COLUMNS} FROM users WHERE id = ?", (user_id,))
            row = cursor.fetchone()
            conn.commit()
            return self._to_dict(row)
        except sqlite3.IntegrityError:
            return None
        finally:
            conn.close()

    def get_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        """Get a user by id, or None if not found."""
        conn = self._db.get_connection()
        try:
            row = conn.execute(f"SELECT {_COLUMNS} FROM users WHERE id = ?", (user_id,)).fetchone()
            return self._to_dict(row)
        finally:
            conn.close()

    def exists(self, user_id: int, role: Optional[str] = None) -> bool:
        """
        Check that a user exists (optionally holding a specific role).

        Used to validate patient and requester references before insert.
        """
        query = "SELECT 1 FROM users WHERE id = ?"
        params: List[Any] = [user_id]
        if role:
            query += " AND role = ?"
            params.append(role)

        conn = self._db.get_connection()
        try:
            return conn.execute(query, params).fetchone() is not None
        finally:
            conn.close()

    def get_all(self, role: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get all users sorted by name, optionally filtered by role."""
        query = f"SELECT {_COLUMNS} FROM users"
        params: List[Any] = []
        if role:
            query += " WHERE role = ?"
            params.append(role)
        query += " ORDER BY name ASC, id ASC"

        conn = self._db.get_connection()
        try:
            rows = conn.execute(query, params).fetchall()
            return [self._to_dict(row) for row in rows]
        finally:
            conn.close()

    def get_active_ids_by_roles(self, roles: Iterable[str]) -> List[int]:
        """Ids of every active user holding one of the given roles (notification fan-out)."""
        roles = list(roles)
        if not roles:
            return []
        placeholders = ", ".join("?" for _ in roles)

        conn = self._db.get_connection()
        try:
            rows = conn.execute(
                f"SELECT id FROM users WHERE is_active = 1 AND role IN ({placeholders}) ORDER BY id",
                roles,
            ).fetchall()
            return [row["id"] for row in rows]
        finally:
            conn.close()
