"""
Lab inventory router - laboratory consumables and their stock status.

Every item carries a derived ``status`` (critical / low / adequate) that is
recomputed from ``current_stock`` and ``min_required`` whenever the item is
saved. Manual stock adjustments are appended to the item's stock history.

Architecture:
    HTTP Request → Router (this file) → LabInventoryService → LabInventoryRepository → Database
"""
import logging

from fastapi import APIRouter, Depends

from schemas import LabItemCreate, LabItemEnvelope, LabItemListEnvelope, LabItemUpdate
from services import LabInventoryService
from core.auth import CurrentUser, require_permission
from core.dependencies import get_lab_inventory_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/lab/inventory", tags=["Lab Inventory"])


@router.get(
    "",
    response_model=LabItemListEnvelope,
    response_model_exclude_none=True,
    summary="List lab inventory",
    description="All lab items sorted by name.",
    dependencies=[Depends(require_permission("lab_inventory.read"))],
)
async def list_items(service: LabInventoryService = Depends(get_lab_inventory_service)):
    return LabItemListEnvelope(items=service.get_items())


@router.get(
    "/low-stock",
    response_model=LabItemListEnvelope,
    response_model_exclude_none=True,
    summary="List low-stock lab items",
    description="Items below their minimum, critical first, then by name.",
    dependencies=[Depends(require_permission("lab_inventory.read"))],
)
async def list_low_stock(service: LabInventoryService = Depends(get_lab_inventory_service)):
    return LabItemListEnvelope(items=service.get_low_stock_items())


@router.get(
    "/{item_id}",
    response_model=LabItemEnvelope,
    summary="Get a lab item with its stock history",
    dependencies=[Depends(require_permission("lab_inventory.read"))],
)
async def get_item(
    item_id: int,
    service: LabInventoryService = Depends(get_lab_inventory_service)
):
    return LabItemEnvelope(item=service.get_item(item_id))


@router.post(
    "",
    response_model=LabItemEnvelope,
    status_code=201,
    summary="Add a lab item",
    description="Names are unique; a duplicate returns 409. The opening stock is recorded in the history.",
)
async def add_item(
    payload: LabItemCreate,
    user: CurrentUser = Depends(require_permission("lab_inventory.manage")),
    service: LabInventoryService = Depends(get_lab_inventory_service)
):
    item = service.add_item(payload, user)
    return LabItemEnvelope(item=item, message="Item added successfully")


@router.put(
    "/{item_id}",
    response_model=LabItemEnvelope,
    summary="Update a lab item",
    description="Set the stock directly or apply an add/remove operation. "
                "Removing more than is in stock returns 400.",
)
async def update_item(
    item_id: int,
    payload: LabItemUpdate,
    user: CurrentUser = Depends(require_permission("lab_inventory.manage")),
    service: LabInventoryService = Depends(get_lab_inventory_service)
):
    """
    Update a lab item.

    - **current_stock**: overwrite the stock level (no history entry)
    - **min_required**: new minimum threshold
    - **operation**: `{"type": "add" | "remove", "quantity": n}`, recorded in history
    - **notes**: history note (defaults to "Added n units" / "Removed n units")

    Status is recomputed on save; alerts go out when stock turns low or critical.
    """
    item = service.update_item(item_id, payload, user)
    return LabItemEnvelope(item=item, message="Item updated successfully")
