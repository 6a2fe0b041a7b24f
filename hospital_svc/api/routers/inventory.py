"""
Inventory router - general hospital supplies and equipment.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from schemas import (
    InventoryEnvelope,
    InventoryItemCreate,
    InventoryItemUpdate,
    InventoryListEnvelope,
    LowStockEnvelope,
)
from services import InventoryService
from models.inventory import InventoryCategory
from core.auth import require_permission
from core.dependencies import get_inventory_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/inventory", tags=["Inventory"])


@router.get(
    "",
    response_model=InventoryListEnvelope,
    summary="List inventory items",
    description="Active items sorted by name, optionally filtered by category or low stock.",
    dependencies=[Depends(require_permission("inventory.read"))],
)
async def list_inventory(
    category: Optional[InventoryCategory] = Query(None, description="Only items in this category"),
    low_stock: bool = Query(False, description="Only items at or below their minimum stock level"),
    inventory_service: InventoryService = Depends(get_inventory_service)
):
    items = inventory_service.get_items(
        category=category.value if category else None,
        low_stock=low_stock,
    )
    return InventoryListEnvelope(inventory=items)


@router.get(
    "/low-stock",
    response_model=LowStockEnvelope,
    summary="List low-stock items",
    dependencies=[Depends(require_permission("inventory.manage"))],
)
async def list_low_stock(inventory_service: InventoryService = Depends(get_inventory_service)):
    return LowStockEnvelope(low_stock_items=inventory_service.get_low_stock_items())


@router.post(
    "",
    response_model=InventoryEnvelope,
    status_code=201,
    summary="Create an inventory item",
    dependencies=[Depends(require_permission("inventory.manage"))],
)
async def create_item(
    payload: InventoryItemCreate,
    inventory_service: InventoryService = Depends(get_inventory_service)
):
    return InventoryEnvelope(inventory=inventory_service.create_item(payload))


@router.put(
    "/{item_id}",
    response_model=InventoryEnvelope,
    summary="Update an inventory item",
    description="Apply the fields present in the body. Returns 404 if the item does not exist.",
    dependencies=[Depends(require_permission("inventory.manage"))],
)
async def update_item(
    item_id: int,
    payload: InventoryItemUpdate,
    inventory_service: InventoryService = Depends(get_inventory_service)
):
    return InventoryEnvelope(inventory=inventory_service.update_item(item_id, payload))
