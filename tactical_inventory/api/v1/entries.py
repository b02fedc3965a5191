"""
Entries API endpoints
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from tactical_inventory.api import deps
from tactical_inventory.schemas.common import Site
from tactical_inventory.schemas.movements import EntryCreate, EntryOut, EntryUpdate, MovementResult
from tactical_inventory.services.stock.entries import EntryService

router = APIRouter()
get_service = deps.service(EntryService)


@router.get("/", response_model=List[EntryOut])
def list_entries(
    site: Optional[Site] = Depends(deps.get_optional_site),
    service: EntryService = Depends(get_service),
):
    return service.list_entries(site)


@router.get("/{entry_id}", response_model=EntryOut)
def get_entry(entry_id: int, service: EntryService = Depends(get_service)):
    return service.get_entry(entry_id)


@router.post("/", response_model=MovementResult, status_code=status.HTTP_201_CREATED)
def create_entry(entry_data: EntryCreate, service: EntryService = Depends(get_service)):
    """
    Receive stock into the new-units pool of a site.
    """
    return service.create_entry(entry_data)


@router.put("/{entry_id}", response_model=MovementResult)
def update_entry(
    entry_id: int,
    entry_data: EntryUpdate,
    service: EntryService = Depends(get_service),
):
    return service.update_entry(entry_id, entry_data)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(entry_id: int, service: EntryService = Depends(get_service)):
    service.delete_entry(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
