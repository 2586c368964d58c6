"""Car rental vehicles listed by vehicle owners."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from lydian_travel.core.security import get_current_user, require_roles
from lydian_travel.dependencies import get_db
from lydian_travel.models.user import User
from lydian_travel.schemas.vehicle import (
    RentalQuote,
    RentalQuoteRequest,
    VehicleResponse,
    VehicleSubmission,
    VehicleUpdate,
)
from lydian_travel.services.vehicle_service import VehicleService

router = APIRouter(prefix="/vehicles", tags=["vehicles"])

_vehicle_owner = require_roles("vehicle_owner")


@router.post("", response_model=VehicleResponse, status_code=status.HTTP_201_CREATED)
def submit_vehicle(
    submission: VehicleSubmission,
    current_user: User = Depends(_vehicle_owner),
    db: Session = Depends(get_db),
):
    service = VehicleService(db)
    return service.submit_vehicle(current_user, submission)


@router.get("", response_model=List[VehicleResponse])
def search_vehicles(
    *,
    db: Session = Depends(get_db),
    city: Optional[str] = Query(None, description="Filter by pick-up city"),
    transmission: Optional[str] = Query(None, description="manual, automatic or semi_automatic"),
    min_seats: Optional[int] = Query(None, ge=1),
):
    service = VehicleService(db)
    return service.search_vehicles(city=city, transmission=transmission, min_seats=min_seats)


@router.get("/mine", response_model=List[VehicleResponse])
def list_my_vehicles(
    current_user: User = Depends(_vehicle_owner),
    db: Session = Depends(get_db),
):
    service = VehicleService(db)
    return service.list_owner_vehicles(current_user)


@router.get("/{vehicle_id}", response_model=VehicleResponse)
def get_vehicle(vehicle_id: int, db: Session = Depends(get_db)):
    service = VehicleService(db)
    return service.get_vehicle(vehicle_id)


@router.patch("/{vehicle_id}", response_model=VehicleResponse)
def update_vehicle(
    vehicle_id: int,
    payload: VehicleUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = VehicleService(db)
    return service.update_vehicle(vehicle_id, current_user, payload)


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vehicle(
    vehicle_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = VehicleService(db)
    service.delete_vehicle(vehicle_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{vehicle_id}/quote", response_model=RentalQuote)
def quote_vehicle(vehicle_id: int, payload: RentalQuoteRequest, db: Session = Depends(get_db)):
    """Price a rental without creating a booking."""

    service = VehicleService(db)
    return service.quote(
        vehicle_id,
        payload.pick_up_date,
        payload.drop_off_date,
        include_driver=payload.include_driver,
        include_gps=payload.include_gps,
        include_child_seat=payload.include_child_seat,
    )


__all__ = ["router"]
