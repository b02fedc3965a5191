"""Stock ledger, movement engine and cyclic counting services"""

from .stock_ledger import StockLedger
from .entries import EntryService
from .dispatches import DispatchService
from .recoveries import RecoveryService
from .cyclic_inventory import CyclicInventoryService
from .inventory import InventoryService
from .orders import OrderService

__all__ = [
    "StockLedger",
    "EntryService",
    "DispatchService",
    "RecoveryService",
    "CyclicInventoryService",
    "InventoryService",
    "OrderService",
]
