"""
Service layer for the general hospital inventory.
"""
import sqlite3
import logging
from typing import List, Optional

from repositories import InventoryRepository
from schemas import InventoryItemCreate, InventoryItemResponse, InventoryItemUpdate
from core.exceptions import DatabaseError, InventoryItemNotFoundError

logger = logging.getLogger(__name__)

# Fields a client may explicitly clear with null
NULLABLE_FIELDS = {"supplier", "last_restocked", "expiry_date"}


class InventoryService:
    """Service layer for inventory item operations."""

    def __init__(self, inventory_repository: InventoryRepository):
        self._repo = inventory_repository

    def get_items(self, category: Optional[str] = None, low_stock: bool = False) -> List[InventoryItemResponse]:
        """
        Active items sorted by name.

        Args:
            category: Keep only this category.
            low_stock: Keep only items at or below their minimum stock level.
        """
        items = self._repo.get_active(category=category, low_stock_only=low_stock)
        return [InventoryItemResponse.model_validate(item) for item in items]

    def get_low_stock_items(self) -> List[InventoryItemResponse]:
        return self.get_items(low_stock=True)

    def create_item(self, payload: InventoryItemCreate) -> InventoryItemResponse:
        try:
            created = self._repo.add(payload.model_dump(mode="json"))
        except sqlite3.Error as e:
            raise DatabaseError(operation="create_inventory_item", error=str(e)) from e

        logger.info(f"Inventory item created: {created['name']} (id={created['id']})")
        return InventoryItemResponse.model_validate(created)

    def update_item(self, item_id: int, payload: InventoryItemUpdate) -> InventoryItemResponse:
        """
        Apply the fields present in the request.

        Raises:
            InventoryItemNotFoundError: If the item does not exist.
        """
        changes = {
            key: value
            for key, value in payload.model_dump(mode="json", exclude_unset=True).items()
            if value is not None or key in NULLABLE_FIELDS
        }
        try:
            updated = self._repo.update(item_id, changes)
        except sqlite3.Error as e:
            raise DatabaseError(operation="update_inventory_item", error=str(e)) from e

        if updated is None:
            raise InventoryItemNotFoundError(resource_id=item_id)

        logger.info(f"Inventory item {item_id} updated: {sorted(changes)}")
        return InventoryItemResponse.model_validate(updated)
