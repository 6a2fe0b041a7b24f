"""
Pydantic schemas for the general hospital inventory.
"""
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.inventory import InventoryCategory


class Supplier(BaseModel):
    name: Optional[str] = None
    contact: Optional[str] = None
    email: Optional[str] = None


class InventoryItemCreate(BaseModel):
    """Schema for adding an item to the general inventory."""
    name: str = Field(..., min_length=1, max_length=200, examples=["Paracetamol 500mg"])
    category: InventoryCategory
    quantity: int = Field(..., ge=0)
    min_stock_level: int = Field(..., ge=0)
    unit: str = Field(..., min_length=1, max_length=50, examples=["tablets"])
    price: float = Field(..., ge=0)
    supplier: Optional[Supplier] = None
    last_restocked: Optional[date] = None
    expiry_date: Optional[date] = None


class InventoryItemUpdate(BaseModel):
    """Partial update; only the fields sent are changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[InventoryCategory] = None
    quantity: Optional[int] = Field(None, ge=0)
    min_stock_level: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=50)
    price: Optional[float] = Field(None, ge=0)
    supplier: Optional[Supplier] = None
    last_restocked: Optional[date] = None
    expiry_date: Optional[date] = None
    is_active: Optional[bool] = None


class InventoryItemResponse(BaseModel):
    id: int
    name: str
    category: InventoryCategory
    quantity: int
    min_stock_level: int
    unit: str
    price: float
    supplier: Optional[Supplier] = None
    last_restocked: Optional[str] = None
    expiry_date: Optional[str] = None
    is_active: bool
    created_at: str
    updated_at: str

    model_config = ConfigDict(from_attributes=True)


class InventoryEnvelope(BaseModel):
    inventory: InventoryItemResponse


class InventoryListEnvelope(BaseModel):
    inventory: List[InventoryItemResponse]


class LowStockEnvelope(BaseModel):
    low_stock_items: List[InventoryItemResponse]
