"""
Recoveries API endpoints
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from tactical_inventory.api import deps
from tactical_inventory.schemas.common import Site
from tactical_inventory.schemas.movements import MovementResult, RecoveryCreate, RecoveryOut
from tactical_inventory.services.stock.recoveries import RecoveryService

router = APIRouter()
get_service = deps.service(RecoveryService)


@router.get("/", response_model=List[RecoveryOut])
def list_recoveries(
    site: Optional[Site] = Depends(deps.get_optional_site),
    service: RecoveryService = Depends(get_service),
):
    return service.list_recoveries(site)


@router.get("/{recovery_id}", response_model=RecoveryOut)
def get_recovery(recovery_id: int, service: RecoveryService = Depends(get_service)):
    return service.get_recovery(recovery_id)


@router.post("/", response_model=MovementResult, status_code=status.HTTP_201_CREATED)
def create_recovery(recovery_data: RecoveryCreate, service: RecoveryService = Depends(get_service)):
    """
    Record returned equipment; each line names a site or ``Desecho``.
    """
    return service.create_recovery(recovery_data)
