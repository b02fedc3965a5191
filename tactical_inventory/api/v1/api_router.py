"""
Main API Router - Consolidates all module routes
"""

from fastapi import APIRouter

from tactical_inventory.api.v1 import (
    cyclic_inventory, dispatches, entries, inventory, orders, recoveries
)

api_router = APIRouter()

api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
api_router.include_router(entries.router, prefix="/entries", tags=["entries"])
api_router.include_router(dispatches.router, prefix="/dispatches", tags=["dispatches"])
api_router.include_router(recoveries.router, prefix="/recoveries", tags=["recoveries"])
api_router.include_router(cyclic_inventory.router, prefix="/cyclic-inventory", tags=["cyclic-inventory"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
