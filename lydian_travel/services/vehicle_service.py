import logging
import math
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lydian_travel.models.user import User
from lydian_travel.models.vehicle import RentalVehicle
from lydian_travel.repository import booking_repository, vehicle_repository
from lydian_travel.schemas.vehicle import RentalQuote, VehicleSubmission, VehicleUpdate
from lydian_travel.services.booking_utils import ensure_utc, to_money

logger = logging.getLogger(__name__)

WEEKLY_RATE_DAYS = 7
MONTHLY_RATE_DAYS = 30


def rental_days(pick_up: datetime, drop_off: datetime) -> int:
    """Whole rental days between pick-up and drop-off; a started day counts in full."""
    seconds = (ensure_utc(drop_off) - ensure_utc(pick_up)).total_seconds()
    if seconds <= 0:
        return 0
    return max(1, math.ceil(seconds / 86400))


def quote_rental(
    vehicle: RentalVehicle,
    pick_up: datetime,
    drop_off: datetime,
    *,
    include_driver: bool = False,
    include_gps: bool = False,
    include_child_seat: bool = False,
) -> RentalQuote:
    days = rental_days(pick_up, drop_off)
    daily_rate = to_money(vehicle.daily_rate)

    discount = 0
    if days >= MONTHLY_RATE_DAYS:
        discount = vehicle.monthly_discount or 0
    elif days >= WEEKLY_RATE_DAYS:
        discount = vehicle.weekly_discount or 0

    rental_total = to_money(daily_rate * days * (Decimal(100 - discount) / Decimal(100)))

    fees = vehicle.extra_fees or {}
    per_day_extras = Decimal("0")
    for flag, key in ((include_driver, "driver"), (include_gps, "gps"), (include_child_seat, "child_seat")):
        if flag:
            per_day_extras += Decimal(str(fees.get(key, 0) or 0))
    extras_total = to_money(per_day_extras * days)

    return RentalQuote(
        days=days,
        daily_rate=daily_rate,
        discount_percentage=discount,
        rental_total=rental_total,
        extras_total=extras_total,
        deposit=to_money(vehicle.deposit or 0),
        total_price=to_money(rental_total + extras_total),
        currency=vehicle.currency,
    )


class VehicleService:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self, message: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("%s: %s", message, exc)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=message,
            ) from exc

    def submit_vehicle(self, owner: User, submission: VehicleSubmission) -> RentalVehicle:
        if vehicle_repository.plate_exists(self.db, submission.plate):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A vehicle with this plate already exists",
            )

        vehicle_data = submission.model_dump()
        vehicle_data["extra_fees"] = submission.extra_fees.model_dump(mode="json")
        vehicle_data["id_owner"] = owner.id_user
        vehicle_data["status"] = "pending_review"

        vehicle = vehicle_repository.create_vehicle(self.db, vehicle_data)
        self._commit("Could not save vehicle")
        self.db.refresh(vehicle)
        logger.info("Vehicle %s submitted by user %s", vehicle.plate, owner.id_user)
        return vehicle

    def list_owner_vehicles(self, owner: User) -> List[RentalVehicle]:
        return vehicle_repository.list_owner_vehicles(self.db, owner.id_user)

    def search_vehicles(
        self,
        *,
        city: Optional[str] = None,
        transmission: Optional[str] = None,
        min_seats: Optional[int] = None,
    ) -> List[RentalVehicle]:
        return vehicle_repository.list_vehicles(
            self.db, city=city, transmission=transmission, min_seats=min_seats
        )

    def get_vehicle(self, vehicle_id: int) -> RentalVehicle:
        vehicle = vehicle_repository.get_vehicle(self.db, vehicle_id)
        if vehicle is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vehicle not found")
        return vehicle

    def get_owned_vehicle(self, vehicle_id: int, user: User) -> RentalVehicle:
        vehicle = self.get_vehicle(vehicle_id)
        if user.role != "admin" and vehicle.id_owner != user.id_user:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return vehicle

    def update_vehicle(self, vehicle_id: int, user: User, payload: VehicleUpdate) -> RentalVehicle:
        vehicle = self.get_owned_vehicle(vehicle_id, user)
        update_data = payload.model_dump(exclude_unset=True)

        min_days = update_data.get("min_rental_days", vehicle.min_rental_days)
        max_days = update_data.get("max_rental_days", vehicle.max_rental_days)
        if max_days < min_days:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Maximum rental days must be greater than or equal to minimum rental days",
            )
        if payload.extra_fees is not None:
            update_data["extra_fees"] = payload.extra_fees.model_dump(mode="json")

        for field, value in update_data.items():
            setattr(vehicle, field, value)

        self._commit("Could not update vehicle")
        self.db.refresh(vehicle)
        return vehicle

    def delete_vehicle(self, vehicle_id: int, user: User) -> None:
        vehicle = self.get_owned_vehicle(vehicle_id, user)
        if booking_repository.list_listing_bookings(
            self.db, listing="vehicle", listing_ids=[vehicle.id_vehicle]
        ):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Vehicle has bookings and cannot be deleted",
            )
        vehicle_repository.delete_vehicle(self.db, vehicle)
        self._commit("Could not delete vehicle")

    def quote(
        self,
        vehicle_id: int,
        pick_up: datetime,
        drop_off: datetime,
        **extras: bool,
    ) -> RentalQuote:
        vehicle = self.get_vehicle(vehicle_id)
        if rental_days(pick_up, drop_off) <= 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Drop-off date must be after pick-up date",
            )
        return quote_rental(vehicle, pick_up, drop_off, **extras)
