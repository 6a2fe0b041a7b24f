"""
Domain model for the general hospital inventory.
"""
from enum import Enum


class InventoryCategory(str, Enum):
    MEDICATION = "Medication"
    EQUIPMENT = "Equipment"
    SUPPLIES = "Supplies"
    LAB_MATERIALS = "Lab Materials"


def is_low_stock(quantity: float, min_stock_level: float) -> bool:
    """General inventory counts an item as low once it reaches its minimum level."""
    return quantity <= min_stock_level
