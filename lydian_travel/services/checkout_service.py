"""Listing-specific checkout: property stays, car rentals and airport transfers."""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lydian_travel.core.config import Settings, settings
from lydian_travel.core.error_handlers import AvailabilityConflictError
from lydian_travel.models.booking import Booking, BookingType
from lydian_travel.models.user import User
from lydian_travel.repository import booking_repository, property_repository, transfer_repository, vehicle_repository
from lydian_travel.schemas.booking import (
    CarBookingCreate,
    ConflictingBooking,
    PropertyBookingCreate,
    TransferBookingCreate,
)
from lydian_travel.services.booking_service import BookingService
from lydian_travel.services.booking_utils import (
    PriceBreakdown,
    calculate_booking_price,
    calculate_nights,
    ensure_utc,
    utcnow,
    validate_booking_dates,
)
from lydian_travel.services.email_service import EmailService
from lydian_travel.services.transfer_service import transfer_price
from lydian_travel.services.vehicle_service import quote_rental

logger = logging.getLogger(__name__)


def _conflict_payload(bookings: List[Booking]) -> List[dict]:
    return [ConflictingBooking.model_validate(booking).model_dump(mode="json") for booking in bookings]


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class CheckoutService:
    def __init__(
        self,
        db: Session,
        *,
        email_service: Optional[EmailService] = None,
        config: Optional[Settings] = None,
    ):
        self.db = db
        self._settings = config or settings
        self.bookings = BookingService(db, email_service=email_service, config=self._settings)

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

    def _finalize(self, booking: Booking, message: str) -> Booking:
        self._commit(message)
        self.db.refresh(booking)
        logger.info(
            "%s booking %s created for user %s",
            booking.booking_type,
            booking.booking_reference,
            booking.id_user,
        )
        self.bookings.notify_created(booking)
        return booking

    @staticmethod
    def _guest_fields(payload) -> dict:
        return payload.model_dump(
            include={"guest_name", "guest_email", "guest_phone", "special_requests", "payment_method"},
            exclude_none=True,
        )

    def create_property_booking(
        self,
        user: User,
        payload: PropertyBookingCreate,
        *,
        now: Optional[datetime] = None,
    ) -> Tuple[Booking, PriceBreakdown]:
        check_in = ensure_utc(payload.check_in_date)
        check_out = ensure_utc(payload.check_out_date)
        error = validate_booking_dates(check_in, check_out, now=now)
        if error:
            raise _bad_request(error)

        rental_property = property_repository.get_property(self.db, payload.property_id)
        if rental_property is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
        if rental_property.status != "active":
            raise _bad_request("Property is not available")
        if payload.guest_count > rental_property.max_guests:
            raise _bad_request(f"Property can accommodate maximum {rental_property.max_guests} guests")

        conflicts = booking_repository.find_conflicting_bookings(
            self.db,
            listing="property",
            listing_id=rental_property.id_property,
            start=check_in,
            end=check_out,
        )
        if conflicts:
            raise AvailabilityConflictError(
                "Property is not available for selected dates", _conflict_payload(conflicts)
            )

        nights = calculate_nights(check_in, check_out)
        if nights < rental_property.min_stay:
            raise _bad_request(f"Minimum stay is {rental_property.min_stay} nights")

        price = calculate_booking_price(
            rental_property.base_price,
            nights,
            self._settings.BOOKING_TAX_RATE,
            self._settings.BOOKING_SERVICE_FEE_RATE,
            rental_property.cleaning_fee or 0,
        )
        booking = self.bookings.build_booking(
            user,
            {
                **self._guest_fields(payload),
                "booking_type": BookingType.PROPERTY,
                "id_property": rental_property.id_property,
                "check_in_date": check_in,
                "check_out_date": check_out,
                "guest_count": payload.guest_count,
                "total_amount": price.total_price,
                "currency": rental_property.currency,
                "details": {
                    "item_name": rental_property.name,
                    "nights": nights,
                    "base_price": str(price.base_price),
                    "cleaning_fee": str(price.cleaning_fee),
                },
            },
        )
        return self._finalize(booking, "Could not create booking"), price

    def create_car_booking(
        self,
        user: User,
        payload: CarBookingCreate,
        *,
        now: Optional[datetime] = None,
    ) -> Booking:
        pick_up = ensure_utc(payload.pick_up_date)
        drop_off = ensure_utc(payload.drop_off_date)
        error = validate_booking_dates(pick_up, drop_off, now=now)
        if error:
            raise _bad_request(error)

        vehicle = vehicle_repository.get_vehicle(self.db, payload.vehicle_id)
        if vehicle is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vehicle not found")
        if vehicle.status != "active":
            raise _bad_request("Vehicle is not available")

        quote = quote_rental(
            vehicle,
            pick_up,
            drop_off,
            include_driver=payload.include_driver,
            include_gps=payload.include_gps,
            include_child_seat=payload.include_child_seat,
        )
        if quote.days < vehicle.min_rental_days:
            raise _bad_request(f"Minimum rental period is {vehicle.min_rental_days} days")
        if quote.days > vehicle.max_rental_days:
            raise _bad_request(f"Maximum rental period is {vehicle.max_rental_days} days")

        conflicts = booking_repository.find_conflicting_bookings(
            self.db,
            listing="vehicle",
            listing_id=vehicle.id_vehicle,
            start=pick_up,
            end=drop_off,
        )
        if conflicts:
            raise AvailabilityConflictError(
                "Vehicle is not available for selected dates", _conflict_payload(conflicts)
            )

        booking = self.bookings.build_booking(
            user,
            {
                **self._guest_fields(payload),
                "booking_type": BookingType.CAR,
                "id_vehicle": vehicle.id_vehicle,
                "check_in_date": pick_up,
                "check_out_date": drop_off,
                "guest_count": 1,
                "total_amount": quote.total_price,
                "currency": quote.currency,
                "details": {
                    "item_name": vehicle.display_name,
                    "days": quote.days,
                    "daily_rate": str(quote.daily_rate),
                    "discount_percentage": quote.discount_percentage,
                    "extras_total": str(quote.extras_total),
                    "deposit": str(quote.deposit),
                    "include_driver": payload.include_driver,
                    "include_gps": payload.include_gps,
                    "include_child_seat": payload.include_child_seat,
                },
            },
        )
        return self._finalize(booking, "Could not create booking")

    def create_transfer_booking(
        self,
        user: User,
        payload: TransferBookingCreate,
        *,
        now: Optional[datetime] = None,
    ) -> Booking:
        pickup = ensure_utc(payload.pickup_datetime)
        if pickup < (ensure_utc(now) if now is not None else utcnow()):
            raise _bad_request("Pickup time cannot be in the past")

        vehicle = transfer_repository.get_vehicle(self.db, payload.transfer_vehicle_id)
        if vehicle is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transfer vehicle not found")
        transfer = vehicle.transfer
        if transfer is None or not transfer.is_active:
            raise _bad_request("Transfer is not available")
        if payload.passengers > vehicle.capacity:
            raise _bad_request(f"Vehicle can accommodate maximum {vehicle.capacity} passengers")

        price = transfer_price(vehicle, payload.is_vip)
        booking = self.bookings.build_booking(
            user,
            {
                **self._guest_fields(payload),
                "booking_type": BookingType.TRANSFER,
                "id_transfer_vehicle": vehicle.id_transfer_vehicle,
                "check_in_date": pickup,
                "guest_count": payload.passengers,
                "total_amount": price,
                "details": {
                    "item_name": f"{transfer.from_location} - {transfer.to_location}",
                    "vehicle_name": vehicle.name,
                    "is_vip": payload.is_vip,
                    "flight_number": payload.flight_number,
                },
            },
        )
        transfer.booking_count = (transfer.booking_count or 0) + 1
        return self._finalize(booking, "Could not create booking")
