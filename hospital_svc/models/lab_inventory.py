"""
Domain model for laboratory inventory.

The stock status of an item is derived state: it is recomputed from
``current_stock`` and ``min_required`` every time the item is persisted, so
it is always consistent with those two fields at rest.
"""
from enum import Enum

# At or below this fraction of the minimum an item is critical
CRITICAL_RATIO = 0.25


class StockStatus(str, Enum):
    """Adequacy of a lab inventory item's stock level."""

    ADEQUATE = "adequate"
    LOW = "low"
    CRITICAL = "critical"


class StockOperation(str, Enum):
    """Kind of manual stock adjustment recorded in an item's history."""

    ADD = "add"
    REMOVE = "remove"


# Sort order for low-stock listings: most urgent first
STATUS_SEVERITY = {
    StockStatus.CRITICAL: 0,
    StockStatus.LOW: 1,
    StockStatus.ADEQUATE: 2,
}


def compute_stock_status(current_stock: float, min_required: float) -> StockStatus:
    """
    Derive the stock status from the two driving fields.

    Examples:
        >>> compute_stock_status(2, 10)
        <StockStatus.CRITICAL: 'critical'>
        >>> compute_stock_status(9, 10)
        <StockStatus.LOW: 'low'>
        >>> compute_stock_status(10, 10)
        <StockStatus.ADEQUATE: 'adequate'>
    """
    if current_stock <= min_required * CRITICAL_RATIO:
        return StockStatus.CRITICAL
    if current_stock < min_required:
        return StockStatus.LOW
    return StockStatus.ADEQUATE


def format_quantity(quantity: float) -> str:
    """Render whole amounts without a trailing ".0"."""
    return str(int(quantity)) if float(quantity).is_integer() else str(quantity)


def default_history_note(operation: StockOperation, quantity: float) -> str:
    """Note recorded for a stock adjustment when the caller gives none."""
    amount = format_quantity(quantity)
    if operation == StockOperation.ADD:
        return f"Added {amount} units"
    return f"Removed {amount} units"
