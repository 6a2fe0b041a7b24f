"""
Repository for laboratory inventory and its stock history.

Every write goes through this repository, and every write recomputes the
item's ``status`` from ``current_stock`` and ``min_required`` before the row
is persisted. History entries are only ever inserted, in the same
transaction as the stock change they describe.
"""
import sqlite3
import logging
from typing import Any, Dict, List, Optional

from repositories.base import Database, row_to_dict
from models.lab_inventory import StockOperation, compute_stock_status
from core.datetime_utils import now_iso

logger = logging.getLogger(__name__)

_COLUMNS = "id, name, current_stock, min_required, status, updated_by, created_at, updated_at"
_HISTORY_COLUMNS = "id, quantity, operation, date, updated_by, notes"


class LabInventoryRepository:
    """Repository for lab inventory items with status derivation on persist."""

    def __init__(self, db: Database):
        """
        Initialize the lab inventory repository.

        Args:
            db: Database instance for data access.
                Injected via core.dependencies.get_lab_inventory_repository().
        """
        self._db = db

    def _fetch_item(self, cursor: sqlite3.Cursor, item_id: int, with_history: bool) -> Optional[Dict[str, Any]]:
        cursor.execute(f"SELECT {_COLUMNS} FROM lab_inventory WHERE id = ?", (item_id,))
        item = row_to_dict(cursor.fetchone())
        if item is None or not with_history:
            return item

        cursor.execute(
            f"SELECT {_HISTORY_COLUMNS} FROM lab_stock_history WHERE item_id = ? ORDER BY id ASC",
            (item_id,),
        )
        item["stock_history"] = [dict(row) for row in cursor.fetchall()]
        return item

    @staticmethod
    def _append_history(
        cursor: sqlite3.Cursor,
        item_id: int,
        quantity: float,
        operation: StockOperation,
        updated_by: Optional[int],
        notes: Optional[str],
        timestamp: str,
    ) -> None:
        cursor.execute(f"""
            INSERT INTO lab_stock_history (item_id, quantity, operation, date, updated_by, notes)
            VALUES (?, ?, ?, ?, ?, ?)
        """, (item_id, quantity, StockOperation(operation).value, timestamp, updated_by, notes))

    def add(
        self,
        name: str,
        current_stock: float,
        min_required: float,
        updated_by: Optional[int] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Insert an item together with its "Initial stock" history entry.

        Returns:
            The created item with history, or None if the name is taken
            (UNIQUE constraint violation).
        """
        conn = self._db.get_connection()
        cursor = conn.cursor()
        now = now_iso()
        status = compute_stock_status(current_stock, min_required)

        try:
            cursor.execute("""
                INSERT INTO lab_inventory
                (name, current_stock, min_required, status, updated_by, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (name, current_stock, min_required, status.value, updated_by, now, now))
            item_id = cursor.lastrowid

            self._append_history(
                cursor, item_id, current_stock, StockOperation.ADD, updated_by, "Initial stock", now
            )

            item = self._fetch_item(cursor, item_id, with_history=True)
            conn.commit()
            return item
        except sqlite3.IntegrityError:
            conn.rollback()
            return None
        finally:
            conn.close()

    def get_by_id(self, item_id: int, with_history: bool = True) -> Optional[Dict[str, Any]]:
        conn = self._db.get_connection()
        try:
            return self._fetch_item(conn.cursor(), item_id, with_history)
        finally:
            conn.close()

    def get_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        conn = self._db.get_connection()
        try:
            row = conn.execute(f"SELECT {_COLUMNS} FROM lab_inventory WHERE name = ?", (name,)).fetchone()
            return row_to_dict(row)
        finally:
            conn.close()

    def get_all(self) -> List[Dict[str, Any]]:
        """All items sorted by name (history omitted)."""
        conn = self._db.get_connection()
        try:
            rows = conn.execute(f"SELECT {_COLUMNS} FROM lab_inventory ORDER BY name ASC").fetchall()
            return [row_to_dict(row) for row in rows]
        finally:
            conn.close()

    def get_low_stock(self) -> List[Dict[str, Any]]:
        """Items below their minimum, most urgent status first, then by name."""
        conn = self._db.get_connection()
        try:
            rows = conn.execute(f"""
                SELECT {_COLUMNS} FROM lab_inventory
                WHERE current_stock < min_required
                ORDER BY CASE status WHEN 'critical' THEN 0 WHEN 'low' THEN 1 ELSE 2 END,
                         name ASC
            """).fetchall()
            return [row_to_dict(row) for row in rows]
        finally:
            conn.close()

    def save(
        self,
        item_id: int,
        current_stock: float,
        min_required: float,
        updated_by: Optional[int] = None,
        operation: Optional[StockOperation] = None,
        quantity: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Persist new stock figures, recomputing status, and optionally append
        a history entry describing the adjustment.

        Returns:
            The updated item with history, or None if it does not exist.
        """
        conn = self._db.get_connection()
        cursor = conn.cursor()
        now = now_iso()
        status = compute_stock_status(current_stock, min_required)

        try:
            cursor.execute("""
                UPDATE lab_inventory
                SET current_stock = ?, min_required = ?, status = ?, updated_by = ?, updated_at = ?
                WHERE id = ?
            """, (current_stock, min_required, status.value, updated_by, now, item_id))
            if cursor.rowcount == 0:
                conn.rollback()
                return None

            if operation is not None:
                self._append_history(cursor, item_id, quantity, operation, updated_by, notes, now)

            item = self._fetch_item(cursor, item_id, with_history=True)
            conn.commit()
            return item
        except sqlite3.Error:
            conn.rollback()
            raise
        finally:
            conn.close()
