"""
Dispatches API endpoints
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from tactical_inventory.api import deps
from tactical_inventory.schemas.common import DispatchStatus, Site
from tactical_inventory.schemas.movements import (
    DispatchCreate, DispatchOut, DispatchUpdate, MovementResult
)
from tactical_inventory.services.stock.dispatches import DispatchService

router = APIRouter()
get_service = deps.service(DispatchService)


@router.get("/", response_model=List[DispatchOut])
def list_dispatches(
    status_filter: Optional[DispatchStatus] = Query(None, alias="status"),
    site: Optional[Site] = Depends(deps.get_optional_site),
    service: DispatchService = Depends(get_service),
):
    return service.list_dispatches(site, status_filter)


@router.get("/{dispatch_id}", response_model=DispatchOut)
def get_dispatch(dispatch_id: int, service: DispatchService = Depends(get_service)):
    return service.get_dispatch(dispatch_id)


@router.post("/", response_model=MovementResult, status_code=status.HTTP_201_CREATED)
def create_dispatch(dispatch_data: DispatchCreate, service: DispatchService = Depends(get_service)):
    """
    Issue stock to an employee.

    Dispatching more than is on hand is accepted; each short line comes
    back in ``warnings``.
    """
    return service.create_dispatch(dispatch_data)


@router.put("/{dispatch_id}", response_model=MovementResult)
def update_dispatch(
    dispatch_id: int,
    dispatch_data: DispatchUpdate,
    service: DispatchService = Depends(get_service),
):
    return service.update_dispatch(dispatch_id, dispatch_data)


@router.delete("/{dispatch_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_dispatch(dispatch_id: int, service: DispatchService = Depends(get_service)):
    service.delete_dispatch(dispatch_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{dispatch_id}/approve", response_model=DispatchOut)
def approve_dispatch(
    dispatch_id: int,
    current_user: str = Depends(deps.get_current_user),
    service: DispatchService = Depends(get_service),
):
    return service.approve_dispatch(dispatch_id, approved_by=current_user)
