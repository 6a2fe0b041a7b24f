"""
Repository for general hospital inventory (medication, equipment, supplies).
"""
import sqlite3
import logging
from typing import Any, Dict, List, Optional

from repositories.base import Database, row_to_dict, to_json
from core.datetime_utils import now_iso

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, name, category, quantity, min_stock_level, unit, price, supplier, "
    "last_restocked, expiry_date, is_active, created_at, updated_at"
)

# Columns a caller may change through update()
UPDATABLE_FIELDS = (
    "name", "category", "quantity", "min_stock_level", "unit", "price",
    "supplier", "last_restocked", "expiry_date", "is_active",
)


class InventoryRepository:
    """Repository for inventory item CRUD operations."""

    def __init__(self, db: Database):
        self._db = db

    @staticmethod
    def _to_dict(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
        return row_to_dict(row, json_fields=("supplier",), bool_fields=("is_active",))

    def add(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Insert an inventory item and return the stored record."""
        conn = self._db.get_connection()
        cursor = conn.cursor()
        now = now_iso()

        try:
            cursor.execute("""
                INSERT INTO inventory_items
                (name, category, quantity, min_stock_level, unit, price, supplier,
                 last_restocked, expiry_date, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                item["name"],
                item["category"],
                item["quantity"],
                item["min_stock_level"],
                item["unit"],
                item["price"],
                to_json(item.get("supplier")),
                item.get("last_restocked"),
                item.get("expiry_date"),
                now,
                now,
            ))
            item_id = cursor.lastrowid

            cursor.execute(f"SELECT {_COLUMNS} FROM inventory_items WHERE id = ?", (item_id,))
            row = cursor.fetchone()
            conn.commit()
            return self._to_dict(row)
        finally:
            conn.close()

    def get_by_id(self, item_id: int) -> Optional[Dict[str, Any]]:
        conn = self._db.get_connection()
        try:
            row = conn.execute(f"SELECT {_COLUMNS} FROM inventory_items WHERE id = ?", (item_id,)).fetchone()
            return self._to_dict(row)
        finally:
            conn.close()

    def get_active(self, category: Optional[str] = None, low_stock_only: bool = False) -> List[Dict[str, Any]]:
        """
        Active items sorted by name.

        Args:
            category: Keep only this category (optional).
            low_stock_only: Keep only items at or below their minimum level.
        """
        query = f"SELECT {_COLUMNS} FROM inventory_items WHERE is_active = 1"
        params: List[Any] = []

        if category:
            query += " AND category = ?"
            params.append(category)

        if low_stock_only:
            query += " AND quantity <= min_stock_level"

        query += " ORDER BY name ASC, id ASC"

        conn = self._db.get_connection()
        try:
            rows = conn.execute(query, params).fetchall()
            return [self._to_dict(row) for row in rows]
        finally:
            conn.close()

    def update(self, item_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply a partial update. Returns None if the item does not exist.

        Unknown keys in ``changes`` are ignored.
        """
        fields = [key for key in UPDATABLE_FIELDS if key in changes]
        values: List[Any] = []
        for key in fields:
            value = changes[key]
            if key == "supplier":
                value = to_json(value)
            elif key == "is_active":
                value = int(bool(value))
            values.append(value)

        assignments = ", ".join(f"{key} = ?" for key in fields + ["updated_at"])
        values.extend([now_iso(), item_id])

        conn = self._db.get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(f"UPDATE inventory_items SET {assignments} WHERE id = ?", values)
            if cursor.rowcount == 0:
                return None

            cursor.execute(f"SELECT {_COLUMNS} FROM inventory_items WHERE id = ?", (item_id,))
            row = cursor.fetchone()
            conn.commit()
            return self._to_dict(row)
        finally:
            conn.close()
