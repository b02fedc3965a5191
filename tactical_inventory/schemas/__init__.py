"""Pydantic schemas and domain enums"""

from .common import (
    Site, RecoveryDestination, StockStatus, DispatchStatus, CyclicTaskStatus, OrderStatus, DISCARD
)

__all__ = [
    "Site",
    "RecoveryDestination",
    "StockStatus",
    "DispatchStatus",
    "CyclicTaskStatus",
    "OrderStatus",
    "DISCARD",
]
