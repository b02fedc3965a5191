"""
Purchase Orders API endpoints
"""

from typing import List

from fastapi import APIRouter, Depends, status

from tactical_inventory.api import deps
from tactical_inventory.schemas.orders import OrderCreate, OrderOut
from tactical_inventory.services.stock.orders import OrderService

router = APIRouter()
get_service = deps.service(OrderService)


@router.get("/", response_model=List[OrderOut])
def list_orders(service: OrderService = Depends(get_service)):
    return service.list_orders()


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, service: OrderService = Depends(get_service)):
    return service.get_order(order_id)


@router.post("/", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(order_data: OrderCreate, service: OrderService = Depends(get_service)):
    """
    Raise a supplier order. Stock is not touched until the goods arrive as an entry.
    """
    return service.create_order(order_data)
