"""Airport transfer search and transfer-owner vehicle onboarding."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from lydian_travel.core.security import require_roles
from lydian_travel.dependencies import get_db
from lydian_travel.models.user import User
from lydian_travel.schemas.transfer import (
    TransferRouteResponse,
    TransferSearchResponse,
    TransferVehicleResponse,
    TransferVehicleSubmission,
)
from lydian_travel.services.transfer_service import TransferService

router = APIRouter(prefix="/transfers", tags=["transfers"])

_transfer_owner = require_roles("transfer_owner")


@router.get("/search", response_model=TransferSearchResponse)
def search_transfers(
    *,
    db: Session = Depends(get_db),
    from_location: Optional[str] = Query(None, alias="from"),
    to_location: Optional[str] = Query(None, alias="to"),
    passengers: Optional[int] = Query(None, ge=1, le=60),
    is_vip: bool = Query(False, alias="isVIP"),
    region: Optional[str] = Query(None),
):
    """Search active transfer routes, falling back to the built-in catalog."""

    service = TransferService(db)
    return service.search_transfers(
        from_location=from_location,
        to_location=to_location,
        passengers=passengers,
        is_vip=is_vip,
        region=region,
    )


@router.post(
    "/vehicles",
    response_model=List[TransferVehicleResponse],
    status_code=status.HTTP_201_CREATED,
)
def submit_transfer_vehicle(
    submission: TransferVehicleSubmission,
    current_user: User = Depends(_transfer_owner),
    db: Session = Depends(get_db),
):
    service = TransferService(db)
    return service.submit_vehicle(current_user, submission)


@router.get("/mine", response_model=List[TransferRouteResponse])
def list_my_transfers(
    current_user: User = Depends(_transfer_owner),
    db: Session = Depends(get_db),
):
    service = TransferService(db)
    return service.list_owner_transfers(current_user)


@router.get("/vehicles/mine", response_model=List[TransferVehicleResponse])
def list_my_transfer_vehicles(
    current_user: User = Depends(_transfer_owner),
    db: Session = Depends(get_db),
):
    service = TransferService(db)
    return service.list_owner_vehicles(current_user)


@router.get("/vehicles/{vehicle_id}", response_model=TransferVehicleResponse)
def get_transfer_vehicle(vehicle_id: int, db: Session = Depends(get_db)):
    service = TransferService(db)
    return service.get_vehicle(vehicle_id)


@router.get("/{transfer_id}", response_model=TransferRouteResponse)
def get_transfer(transfer_id: int, db: Session = Depends(get_db)):
    service = TransferService(db)
    return service.get_transfer(transfer_id)


__all__ = ["router"]
