"""
Inventory API endpoints
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from tactical_inventory.api import deps
from tactical_inventory.schemas.common import Site
from tactical_inventory.schemas.inventory import ItemCreate, ItemUpdate, ReorderSuggestion, StockRecord
from tactical_inventory.services.stock.inventory import InventoryService

router = APIRouter()
get_service = deps.service(InventoryService)


@router.get("/reorder-suggestions", response_model=List[ReorderSuggestion])
def reorder_suggestions(
    site: Optional[Site] = Depends(deps.get_optional_site),
    service: InventoryService = Depends(get_service),
):
    """
    Items below their minimum, with the quantity needed to reach it.
    """
    return service.reorder_suggestions(site)


@router.get("/{site}", response_model=List[StockRecord])
def list_stock(
    site: Site = Depends(deps.get_site),
    service: InventoryService = Depends(get_service),
):
    return service.list_stock(site)


@router.get("/{site}/items/{item_id}", response_model=StockRecord)
def get_item(
    item_id: int,
    site: Site = Depends(deps.get_site),
    service: InventoryService = Depends(get_service),
):
    return service.get_item(site, item_id)


@router.post("/{site}/items", response_model=StockRecord, status_code=status.HTTP_201_CREATED)
def create_item(
    item_data: ItemCreate,
    site: Site = Depends(deps.get_site),
    service: InventoryService = Depends(get_service),
):
    """
    Register an item at a site with empty stock.
    """
    return service.create_item(site, item_data)


@router.put("/{site}/items/{item_id}", response_model=StockRecord)
def update_item(
    item_id: int,
    item_data: ItemUpdate,
    site: Site = Depends(deps.get_site),
    service: InventoryService = Depends(get_service),
):
    return service.update_item(site, item_id, item_data)


@router.delete("/{site}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    item_id: int,
    site: Site = Depends(deps.get_site),
    service: InventoryService = Depends(get_service),
):
    service.delete_item(site, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
