"""
Pydantic schemas for laboratory inventory.

``status`` is never accepted from clients; it is derived from
``current_stock`` and ``min_required`` whenever an item is saved.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.lab_inventory import StockOperation, StockStatus


class LabItemCreate(BaseModel):
    """Schema for adding a lab consumable."""
    name: str = Field(..., min_length=1, max_length=200, description="Unique item name", examples=["EDTA tubes"])
    current_stock: float = Field(..., ge=0, examples=[120])
    min_required: float = Field(..., gt=0, examples=[50])


class StockAdjustment(BaseModel):
    """A manual add/remove applied to the current stock."""
    type: StockOperation
    quantity: float = Field(..., gt=0)


class LabItemUpdate(BaseModel):
    """
    Schema for updating a lab item.

    ``current_stock`` overwrites the stock level directly; otherwise
    ``operation`` adjusts it and is recorded in the stock history.
    """
    current_stock: Optional[float] = Field(None, ge=0)
    min_required: Optional[float] = Field(None, gt=0)
    operation: Optional[StockAdjustment] = None
    notes: Optional[str] = Field(None, max_length=500)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "operation": {"type": "remove", "quantity": 30},
            "notes": "Used for morning blood draws"
        }
    })


class StockHistoryEntry(BaseModel):
    id: int
    quantity: float
    operation: StockOperation
    date: str
    updated_by: Optional[int] = None
    notes: Optional[str] = None


class LabItemResponse(BaseModel):
    id: int
    name: str
    current_stock: float
    min_required: float
    status: StockStatus
    updated_by: Optional[int] = None
    created_at: str
    updated_at: str
    stock_history: Optional[List[StockHistoryEntry]] = None

    model_config = ConfigDict(from_attributes=True)


class LabItemEnvelope(BaseModel):
    item: LabItemResponse
    message: Optional[str] = None


class LabItemListEnvelope(BaseModel):
    items: List[LabItemResponse]
