from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from lydian_travel.models.vehicle import RentalVehicle


def list_vehicles(
    db: Session,
    *,
    city: Optional[str] = None,
    transmission: Optional[str] = None,
    min_seats: Optional[int] = None,
    status_filter: Optional[str] = "active",
) -> List[RentalVehicle]:
    query = db.query(RentalVehicle)

    if status_filter is not None:
        query = query.filter(RentalVehicle.status == status_filter)
    if city:
        query = query.filter(func.lower(RentalVehicle.city).contains(city.lower()))
    if transmission:
        query = query.filter(RentalVehicle.transmission == transmission)
    if min_seats is not None:
        query = query.filter(RentalVehicle.seats >= min_seats)

    return query.order_by(RentalVehicle.daily_rate, RentalVehicle.id_vehicle).all()


def list_owner_vehicles(db: Session, owner_id: int) -> List[RentalVehicle]:
    return (
        db.query(RentalVehicle)
        .filter(RentalVehicle.id_owner == owner_id)
        .order_by(RentalVehicle.id_vehicle)
        .all()
    )


def get_vehicle(db: Session, vehicle_id: int) -> Optional[RentalVehicle]:
    return db.query(RentalVehicle).filter(RentalVehicle.id_vehicle == vehicle_id).first()


def plate_exists(db: Session, plate: str) -> bool:
    return db.query(RentalVehicle.id_vehicle).filter(RentalVehicle.plate == plate).first() is not None


def create_vehicle(db: Session, vehicle_data: Dict[str, Any]) -> RentalVehicle:
    vehicle = RentalVehicle(**vehicle_data)
    db.add(vehicle)
    db.flush()
    return vehicle


def delete_vehicle(db: Session, vehicle: RentalVehicle) -> None:
    db.delete(vehicle)
    db.flush()
