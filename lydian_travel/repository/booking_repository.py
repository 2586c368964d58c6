from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from lydian_travel.models.booking import Booking, BookingStatus, PaymentStatus

_LISTING_COLUMNS = {
    "property": Booking.id_property,
    "vehicle": Booking.id_vehicle,
    "transfer_vehicle": Booking.id_transfer_vehicle,
}


def get_booking(db: Session, booking_id: int, *, user_id: Optional[int] = None) -> Optional[Booking]:
    query = db.query(Booking).filter(Booking.id_booking == booking_id)
    if user_id is not None:
        query = query.filter(Booking.id_user == user_id)
    return query.first()


def get_booking_by_reference(db: Session, reference: str) -> Optional[Booking]:
    return db.query(Booking).filter(Booking.booking_reference == reference).first()


def reference_exists(db: Session, reference: str) -> bool:
    return (
        db.query(Booking.id_booking).filter(Booking.booking_reference == reference).first()
        is not None
    )


def create_booking(db: Session, booking_data: Dict[str, Any]) -> Booking:
    booking = Booking(**booking_data)
    db.add(booking)
    db.flush()
    return booking


def list_user_bookings(
    db: Session,
    user_id: int,
    *,
    status_filter: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[Booking]:
    query = db.query(Booking).filter(Booking.id_user == user_id)

    if status_filter is not None:
        query = query.filter(Booking.status == status_filter)
    if start_date is not None:
        query = query.filter(Booking.created_at >= start_date)
    if end_date is not None:
        query = query.filter(Booking.created_at <= end_date)

    return query.order_by(Booking.created_at.desc(), Booking.id_booking.desc()).all()


def count_user_bookings_by_status(db: Session, user_id: int) -> Dict[str, int]:
    rows = (
        db.query(Booking.status, func.count(Booking.id_booking))
        .filter(Booking.id_user == user_id)
        .group_by(Booking.status)
        .all()
    )
    return {status_value: count for status_value, count in rows}


def count_completed_user_bookings(db: Session, user_id: int) -> int:
    return (
        db.query(func.count(Booking.id_booking))
        .filter(Booking.id_user == user_id, Booking.status == BookingStatus.COMPLETED)
        .scalar()
        or 0
    )


def find_conflicting_bookings(
    db: Session,
    *,
    listing: str,
    listing_id: int,
    start: datetime,
    end: datetime,
    statuses: Iterable[str] = BookingStatus.BLOCKING,
) -> List[Booking]:
    column = _LISTING_COLUMNS[listing]
    return (
        db.query(Booking)
        .filter(column == listing_id)
        .filter(Booking.status.in_(tuple(statuses)))
        .filter(Booking.check_in_date < end)
        .filter(Booking.check_out_date > start)
        .order_by(Booking.check_in_date)
        .all()
    )


def list_listing_bookings(
    db: Session,
    *,
    listing: str,
    listing_ids: Iterable[int],
) -> List[Booking]:
    ids = list(listing_ids)
    if not ids:
        return []
    column = _LISTING_COLUMNS[listing]
    return db.query(Booking).filter(column.in_(ids)).order_by(Booking.check_in_date).all()


def list_bookings_starting_between(
    db: Session,
    *,
    start: datetime,
    end: datetime,
    status_filter: str = BookingStatus.CONFIRMED,
) -> List[Booking]:
    return (
        db.query(Booking)
        .filter(Booking.status == status_filter)
        .filter(Booking.check_in_date >= start)
        .filter(Booking.check_in_date < end)
        .order_by(Booking.check_in_date)
        .all()
    )


def sum_paid_amount(bookings: Iterable[Booking]) -> Decimal:
    total = Decimal("0")
    for booking in bookings:
        if booking.payment_status == PaymentStatus.COMPLETED:
            total += Decimal(booking.total_amount)
    return total


def save_booking(db: Session, booking: Booking) -> Booking:
    db.flush()
    return booking
