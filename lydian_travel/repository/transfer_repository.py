from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from lydian_travel.models.transfer import AirportTransfer, TransferVehicle


def search_transfers(
    db: Session,
    *,
    from_location: Optional[str] = None,
    to_location: Optional[str] = None,
    region: Optional[str] = None,
) -> List[AirportTransfer]:
    query = (
        db.query(AirportTransfer)
        .options(selectinload(AirportTransfer.vehicles))
        .filter(AirportTransfer.is_active.is_(True))
    )

    if from_location:
        query = query.filter(func.lower(AirportTransfer.from_location).contains(from_location.lower()))
    if to_location:
        query = query.filter(func.lower(AirportTransfer.to_location).contains(to_location.lower()))
    if region:
        query = query.filter(func.lower(AirportTransfer.region).contains(region.lower()))

    return query.order_by(AirportTransfer.distance).all()


def get_transfer(db: Session, transfer_id: int) -> Optional[AirportTransfer]:
    return (
        db.query(AirportTransfer)
        .options(selectinload(AirportTransfer.vehicles))
        .filter(AirportTransfer.id_transfer == transfer_id)
        .first()
    )


def find_route(db: Session, from_location: str, to_location: str) -> Optional[AirportTransfer]:
    return (
        db.query(AirportTransfer)
        .filter(
            func.lower(AirportTransfer.from_location) == from_location.lower(),
            func.lower(AirportTransfer.to_location) == to_location.lower(),
        )
        .first()
    )


def list_owner_transfers(db: Session, owner_id: int) -> List[AirportTransfer]:
    return (
        db.query(AirportTransfer)
        .options(selectinload(AirportTransfer.vehicles))
        .filter(AirportTransfer.id_owner == owner_id)
        .order_by(AirportTransfer.id_transfer)
        .all()
    )


def list_owner_vehicles(db: Session, owner_id: int) -> List[TransferVehicle]:
    return (
        db.query(TransferVehicle)
        .join(TransferVehicle.transfer)
        .filter(AirportTransfer.id_owner == owner_id)
        .order_by(TransferVehicle.id_transfer_vehicle)
        .all()
    )


def get_vehicle(db: Session, vehicle_id: int) -> Optional[TransferVehicle]:
    return (
        db.query(TransferVehicle)
        .filter(TransferVehicle.id_transfer_vehicle == vehicle_id)
        .first()
    )


def plate_exists(db: Session, plate: str) -> bool:
    return (
        db.query(TransferVehicle.id_transfer_vehicle)
        .filter(TransferVehicle.plate == plate)
        .first()
        is not None
    )


def create_transfer(db: Session, transfer: AirportTransfer) -> AirportTransfer:
    db.add(transfer)
    db.flush()
    return transfer


def create_vehicle(db: Session, vehicle: TransferVehicle) -> TransferVehicle:
    db.add(vehicle)
    db.flush()
    return vehicle
