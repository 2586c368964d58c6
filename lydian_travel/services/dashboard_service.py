"""Aggregated figures for the property, vehicle and transfer owner dashboards."""

import logging
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from lydian_travel.models.booking import Booking, BookingStatus, PaymentStatus
from lydian_travel.models.user import User
from lydian_travel.repository import booking_repository, property_repository, transfer_repository, vehicle_repository
from lydian_travel.services.booking_utils import ensure_utc, to_money, utcnow
from lydian_travel.services.email_service import listing_name

logger = logging.getLogger(__name__)

OCCUPANCY_WINDOW_DAYS = 30
EXPIRY_ALERT_DAYS = 30
UPCOMING_LIMIT = 5


def growth_percentage(current: Decimal | float | int, previous: Decimal | float | int) -> float:
    current = Decimal(str(current))
    previous = Decimal(str(previous))
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    change = (current - previous) / previous * 100
    return float(change.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def month_bounds(now: datetime) -> Tuple[datetime, datetime, datetime]:
    """Start of the previous month, start of this month and start of next month."""
    this_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    previous_month = (this_month - timedelta(days=1)).replace(day=1)
    next_month = (this_month + timedelta(days=32)).replace(day=1)
    return previous_month, this_month, next_month


def _booking_moment(booking: Booking) -> Optional[datetime]:
    return ensure_utc(booking.confirmed_at or booking.created_at)


def paid_between(bookings: Iterable[Booking], start: datetime, end: datetime) -> Decimal:
    total = Decimal("0")
    for booking in bookings:
        if booking.payment_status != PaymentStatus.COMPLETED:
            continue
        moment = _booking_moment(booking)
        if moment is not None and start <= moment < end:
            total += Decimal(booking.total_amount)
    return to_money(total)


def count_by_status(bookings: Iterable[Booking]) -> Dict[str, int]:
    counts = {"total": 0, "pending": 0, "confirmed": 0, "completed": 0, "cancelled": 0}
    for booking in bookings:
        counts["total"] += 1
        key = booking.status.lower()
        if key in counts:
            counts[key] += 1
    return counts


def booked_nights(bookings: Iterable[Booking], start: datetime, end: datetime) -> float:
    nights = 0.0
    for booking in bookings:
        if booking.status not in (BookingStatus.CONFIRMED, BookingStatus.COMPLETED):
            continue
        check_in = ensure_utc(booking.check_in_date)
        check_out = ensure_utc(booking.check_out_date)
        if check_in is None or check_out is None:
            continue
        overlap = (min(check_out, end) - max(check_in, start)).total_seconds()
        if overlap > 0:
            nights += overlap / 86400
    return nights


class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def property_owner(self, owner: User, *, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = ensure_utc(now) if now is not None else utcnow()
        properties = property_repository.list_owner_properties(self.db, owner.id_user)
        bookings = booking_repository.list_listing_bookings(
            self.db, listing="property", listing_ids=[item.id_property for item in properties]
        )

        property_counts = {"total": len(properties), "active": 0, "pending_review": 0, "draft": 0}
        for item in properties:
            if item.status in property_counts:
                property_counts[item.status] += 1

        previous_month, this_month, next_month = month_bounds(now)
        earned_this_month = paid_between(bookings, this_month, next_month)
        earned_last_month = paid_between(bookings, previous_month, this_month)

        window_start = now - timedelta(days=OCCUPANCY_WINDOW_DAYS)
        capacity = property_counts["active"] * OCCUPANCY_WINDOW_DAYS
        occupancy = 0.0
        if capacity:
            occupancy = round(min(booked_nights(bookings, window_start, now) / capacity * 100, 100.0), 1)

        upcoming = [
            booking
            for booking in bookings
            if booking.status == BookingStatus.CONFIRMED
            and booking.check_in_date is not None
            and ensure_utc(booking.check_in_date) >= now
        ]
        upcoming.sort(key=lambda booking: ensure_utc(booking.check_in_date))

        return {
            "properties": property_counts,
            "bookings": count_by_status(bookings),
            "earnings": {
                "total": to_money(booking_repository.sum_paid_amount(bookings)),
                "this_month": earned_this_month,
                "last_month": earned_last_month,
                "growth": growth_percentage(earned_this_month, earned_last_month),
            },
            "occupancy_rate": occupancy,
            "upcoming_check_ins": [
                {
                    "booking_reference": booking.booking_reference,
                    "listing_name": listing_name(booking),
                    "guest_name": booking.guest_name,
                    "guest_count": booking.guest_count,
                    "check_in_date": ensure_utc(booking.check_in_date),
                    "check_out_date": ensure_utc(booking.check_out_date),
                }
                for booking in upcoming[:UPCOMING_LIMIT]
            ],
        }

    def vehicle_owner(self, owner: User, *, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = ensure_utc(now) if now is not None else utcnow()
        vehicles = vehicle_repository.list_owner_vehicles(self.db, owner.id_user)
        bookings = booking_repository.list_listing_bookings(
            self.db, listing="vehicle", listing_ids=[item.id_vehicle for item in vehicles]
        )

        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        week_start = today - timedelta(days=today.weekday())
        previous_month, this_month, next_month = month_bounds(now)
        revenue_this_month = paid_between(bookings, this_month, next_month)
        revenue_last_month = paid_between(bookings, previous_month, this_month)

        booking_counts = {"total": len(bookings), "completed": 0, "active": 0, "upcoming": 0, "cancelled": 0}
        rented_now = set()
        for booking in bookings:
            check_in = ensure_utc(booking.check_in_date)
            check_out = ensure_utc(booking.check_out_date)
            if booking.status == BookingStatus.COMPLETED:
                booking_counts["completed"] += 1
            elif booking.status == BookingStatus.CANCELLED:
                booking_counts["cancelled"] += 1
            elif booking.status == BookingStatus.CONFIRMED and check_in and check_out and check_in <= now < check_out:
                booking_counts["active"] += 1
                rented_now.add(booking.id_vehicle)
            elif check_in is not None and check_in > now:
                booking_counts["upcoming"] += 1

        vehicle_counts = {"total": len(vehicles), "active": 0, "available": 0, "maintenance": 0}
        for vehicle in vehicles:
            if vehicle.status == "active":
                vehicle_counts["active"] += 1
                if vehicle.id_vehicle not in rented_now:
                    vehicle_counts["available"] += 1
            elif vehicle.status == "maintenance":
                vehicle_counts["maintenance"] += 1

        return {
            "revenue": {
                "today": paid_between(bookings, today, today + timedelta(days=1)),
                "this_week": paid_between(bookings, week_start, week_start + timedelta(days=7)),
                "this_month": revenue_this_month,
                "last_month": revenue_last_month,
                "growth": growth_percentage(revenue_this_month, revenue_last_month),
            },
            "bookings": booking_counts,
            "vehicles": vehicle_counts,
        }

    def transfer_owner(self, owner: User, *, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = ensure_utc(now) if now is not None else utcnow()
        transfers = transfer_repository.list_owner_transfers(self.db, owner.id_user)
        vehicles = transfer_repository.list_owner_vehicles(self.db, owner.id_user)
        bookings = booking_repository.list_listing_bookings(
            self.db,
            listing="transfer_vehicle",
            listing_ids=[vehicle.id_transfer_vehicle for vehicle in vehicles],
        )

        _, this_month, next_month = month_bounds(now)
        horizon = now + timedelta(hours=24)
        active: List[Dict[str, Any]] = []
        for booking in bookings:
            pickup = ensure_utc(booking.check_in_date)
            if booking.status != BookingStatus.CONFIRMED or pickup is None or not now <= pickup < horizon:
                continue
            details = booking.details or {}
            active.append(
                {
                    "booking_reference": booking.booking_reference,
                    "route": details.get("item_name") or listing_name(booking),
                    "vehicle_name": booking.transfer_vehicle.name if booking.transfer_vehicle else "",
                    "passengers": booking.guest_count,
                    "pickup_time": pickup,
                    "guest_name": booking.guest_name,
                    "flight_number": details.get("flight_number"),
                }
            )
        active.sort(key=lambda item: item["pickup_time"])

        return {
            "stats": {
                "routes": len(transfers),
                "vehicles": len(vehicles),
                "total_bookings": len(bookings),
                "completed_bookings": sum(1 for b in bookings if b.status == BookingStatus.COMPLETED),
                "revenue_this_month": paid_between(bookings, this_month, next_month),
            },
            "active_transfers": active,
            "alerts": self._transfer_alerts(transfers, vehicles, now),
        }

    @staticmethod
    def _transfer_alerts(transfers, vehicles, now: datetime) -> List[Dict[str, Any]]:
        alerts: List[Dict[str, Any]] = []
        cutoff = (now + timedelta(days=EXPIRY_ALERT_DAYS)).date()
        for vehicle in vehicles:
            label = vehicle.plate or vehicle.name
            if vehicle.insurance_expiry is not None and vehicle.insurance_expiry <= cutoff:
                alerts.append(
                    {
                        "type": "insurance_expiring",
                        "message": f"Insurance for {label} expires on {vehicle.insurance_expiry.isoformat()}",
                        "vehicle_id": vehicle.id_transfer_vehicle,
                        "due_date": vehicle.insurance_expiry,
                    }
                )
            if vehicle.driver_license_expiry is not None and vehicle.driver_license_expiry <= cutoff:
                alerts.append(
                    {
                        "type": "license_expiring",
                        "message": (
                            f"Driver license of {vehicle.driver_name or label} expires on "
                            f"{vehicle.driver_license_expiry.isoformat()}"
                        ),
                        "vehicle_id": vehicle.id_transfer_vehicle,
                        "due_date": vehicle.driver_license_expiry,
                    }
                )
        for transfer in transfers:
            if not transfer.vehicles:
                alerts.append(
                    {
                        "type": "route_without_vehicles",
                        "message": f"Route {transfer.from_location} - {transfer.to_location} has no vehicles",
                        "transfer_id": transfer.id_transfer,
                    }
                )
        return alerts
