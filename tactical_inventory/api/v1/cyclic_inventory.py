"""
Cyclic Inventory API endpoints
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from tactical_inventory.api import deps
from tactical_inventory.schemas.common import CyclicTaskStatus, Site
from tactical_inventory.schemas.cyclic import (
    CompleteTaskRequest, CountUpdate, CyclicItemOut, CyclicStats, CyclicTaskCreate, CyclicTaskOut
)
from tactical_inventory.services.stock.cyclic_inventory import CyclicInventoryService

router = APIRouter()
get_service = deps.service(CyclicInventoryService)


@router.get("/stats", response_model=CyclicStats)
def get_stats(service: CyclicInventoryService = Depends(get_service)):
    return service.get_stats()


@router.get("/", response_model=List[CyclicTaskOut])
def list_tasks(
    status_filter: Optional[CyclicTaskStatus] = Query(None, alias="status"),
    site: Optional[Site] = Depends(deps.get_optional_site),
    service: CyclicInventoryService = Depends(get_service),
):
    return service.list_tasks(status_filter, site)


@router.get("/{task_id}", response_model=CyclicTaskOut)
def get_task(task_id: int, service: CyclicInventoryService = Depends(get_service)):
    return service.get_task(task_id)


@router.post("/", response_model=CyclicTaskOut, status_code=status.HTTP_201_CREATED)
def create_task(task_data: CyclicTaskCreate, service: CyclicInventoryService = Depends(get_service)):
    """
    Create a count task; theoretical stock is captured now.
    """
    task_id = service.create_task(task_data)
    return service.get_task(task_id)


@router.put("/{task_id}/items/{line_id}", response_model=CyclicItemOut)
def record_count(
    task_id: int,
    line_id: int,
    count: CountUpdate,
    service: CyclicInventoryService = Depends(get_service),
):
    return service.record_count(task_id, line_id, count.physical_count)


@router.post("/{task_id}/complete", response_model=CyclicTaskOut)
def complete_task(
    task_id: int,
    completion: Optional[CompleteTaskRequest] = None,
    current_user: str = Depends(deps.get_current_user),
    service: CyclicInventoryService = Depends(get_service),
):
    """
    Close a count task, optionally recording a last batch of counts first.
    """
    counts = completion.counts if completion else None
    return service.complete_task(task_id, completed_by=current_user, counts=counts)
