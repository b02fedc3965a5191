"""SQLAlchemy models for the inventory database"""

from .inventory import InventoryItem
from .movements import Entry, EntryItem, Dispatch, DispatchItem, Recovery, RecoveryItem
from .cyclic import CyclicInventoryTask, CyclicInventoryItem
from .orders import Order, OrderItem

__all__ = [
    "InventoryItem",
    "Entry",
    "EntryItem",
    "Dispatch",
    "DispatchItem",
    "Recovery",
    "RecoveryItem",
    "CyclicInventoryTask",
    "CyclicInventoryItem",
    "Order",
    "OrderItem",
]
