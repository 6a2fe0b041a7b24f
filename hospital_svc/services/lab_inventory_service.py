"""
Service layer for laboratory inventory.

Stock changes are applied here and persisted through LabInventoryRepository,
which derives the item's status on every save. After a save this service
raises alerts:

- status became ``low`` (stock was at or above the minimum before):
  warning to every lab technician
- status is ``critical``: critical alert to every admin and lab technician

Architecture:
    API Layer (routers) → LabInventoryService → LabInventoryRepository → Database
                                  ↓
                          NotificationService
"""
import sqlite3
import logging
from typing import List

from repositories import LabInventoryRepository
from schemas import LabItemCreate, LabItemResponse, LabItemUpdate
from services.notification_service import NotificationService
from models.lab_inventory import StockOperation, StockStatus, default_history_note, format_quantity
from models.notification import NotificationType, RelatedModel
from models.user import Role
from core.auth import CurrentUser
from core.exceptions import (
    DatabaseError,
    DuplicateInventoryItemError,
    InsufficientStockError,
    InventoryItemNotFoundError,
)

logger = logging.getLogger(__name__)


class LabInventoryService:
    """Service layer for lab inventory items and stock alerts."""

    def __init__(
        self,
        lab_inventory_repository: LabInventoryRepository,
        notification_service: NotificationService,
    ):
        """
        Args:
            lab_inventory_repository: Data access for items and stock history.
            notification_service: Used to alert staff when stock runs low.
        """
        self._repo = lab_inventory_repository
        self._notifications = notification_service

    def get_items(self) -> List[LabItemResponse]:
        """All items sorted by name."""
        return [LabItemResponse.model_validate(item) for item in self._repo.get_all()]

    def get_item(self, item_id: int) -> LabItemResponse:
        """
        Get an item with its full stock history.

        Raises:
            InventoryItemNotFoundError: If the item does not exist.
        """
        item = self._repo.get_by_id(item_id, with_history=True)
        if item is None:
            raise InventoryItemNotFoundError(resource_id=item_id)
        return LabItemResponse.model_validate(item)

    def get_low_stock_items(self) -> List[LabItemResponse]:
        """Items below their minimum, critical first, then by name."""
        return [LabItemResponse.model_validate(item) for item in self._repo.get_low_stock()]

    def add_item(self, payload: LabItemCreate, actor: CurrentUser) -> LabItemResponse:
        """
        Add a new item and record its initial stock in the history.

        Raises:
            DuplicateInventoryItemError: If an item with this name exists.
        """
        logger.info(f"Adding lab inventory item: {payload.name}")

        if self._repo.get_by_name(payload.name) is not None:
            raise DuplicateInventoryItemError(name=payload.name)

        try:
            created = self._repo.add(
                name=payload.name,
                current_stock=payload.current_stock,
                min_required=payload.min_required,
                updated_by=actor.id,
            )
        except sqlite3.Error as e:
            logger.error(f"Database error adding lab inventory item: {e}", exc_info=True)
            raise DatabaseError(operation="add_lab_inventory_item", error=str(e)) from e

        # Lost a race with a concurrent insert of the same name
        if created is None:
            raise DuplicateInventoryItemError(name=payload.name)

        logger.info(
            f"Lab inventory item created: {created['name']} (id={created['id']})",
            extra={"status": created["status"]}
        )
        return LabItemResponse.model_validate(created)

    def update_item(self, item_id: int, payload: LabItemUpdate, actor: CurrentUser) -> LabItemResponse:
        """
        Update thresholds or stock for an item.

        ``current_stock`` overwrites the stock level with no history entry;
        otherwise ``operation`` adds or removes units and is recorded in the
        stock history.

        Raises:
            InventoryItemNotFoundError: If the item does not exist.
            InsufficientStockError: If a removal exceeds the stock on hand.
        """
        item = self._repo.get_by_id(item_id, with_history=False)
        if item is None:
            raise InventoryItemNotFoundError(resource_id=item_id)

        old_stock = item["current_stock"]
        min_required = payload.min_required if payload.min_required is not None else item["min_required"]
        new_stock = old_stock
        operation = None
        quantity = None
        notes = None

        if payload.current_stock is not None:
            new_stock = payload.current_stock
        elif payload.operation is not None:
            operation = payload.operation.type
            quantity = payload.operation.quantity
            if operation == StockOperation.ADD:
                new_stock = old_stock + quantity
            else:
                if old_stock < quantity:
                    raise InsufficientStockError(
                        item_id=item_id, current_stock=old_stock, requested=quantity
                    )
                new_stock = old_stock - quantity
            notes = payload.notes or default_history_note(operation, quantity)

        try:
            updated = self._repo.save(
                item_id,
                current_stock=new_stock,
                min_required=min_required,
                updated_by=actor.id,
                operation=operation,
                quantity=quantity,
                notes=notes,
            )
        except sqlite3.Error as e:
            logger.error(f"Database error updating lab inventory item {item_id}: {e}", exc_info=True)
            raise DatabaseError(operation="update_lab_inventory_item", error=str(e)) from e

        if updated is None:
            raise InventoryItemNotFoundError(resource_id=item_id)

        logger.info(
            f"Lab inventory item {item_id} updated: {old_stock} -> {new_stock}",
            extra={"status": updated["status"], "operation": operation.value if operation else None}
        )
        self._raise_stock_alerts(updated, old_stock)
        return LabItemResponse.model_validate(updated)

    def _raise_stock_alerts(self, item: dict, old_stock: float) -> None:
        status = StockStatus(item["status"])

        if status == StockStatus.LOW and old_stock >= item["min_required"]:
            self._notifications.notify_roles(
                [Role.LAB_TECHNICIAN.value],
                title="Low Inventory Alert",
                message=(
                    f"{item['name']} is running low. Current stock: {format_quantity(item['current_stock'])}, "
                    f"Minimum required: {format_quantity(item['min_required'])}"
                ),
                notification_type=NotificationType.WARNING,
                related_model=RelatedModel.LAB_INVENTORY.value,
                related_id=item["id"],
            )
        elif status == StockStatus.CRITICAL:
            self._notifications.notify_roles(
                [Role.ADMIN.value, Role.LAB_TECHNICIAN.value],
                title="CRITICAL Inventory Alert",
                message=(
                    f"{item['name']} is critically low. Current stock: {format_quantity(item['current_stock'])}, "
                    f"Minimum required: {format_quantity(item['min_required'])}"
                ),
                notification_type=NotificationType.CRITICAL,
                related_model=RelatedModel.LAB_INVENTORY.value,
                related_id=item["id"],
            )
