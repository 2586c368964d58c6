from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field as PydanticField


class BookingCounts(BaseModel):
    total: int = 0
    pending: int = 0
    confirmed: int = 0
    completed: int = 0
    cancelled: int = 0


class PropertyCounts(BaseModel):
    total: int = 0
    active: int = 0
    pending_review: int = 0
    draft: int = 0


class Earnings(BaseModel):
    total: Decimal
    this_month: Decimal
    last_month: Decimal
    growth: float


class UpcomingCheckIn(BaseModel):
    booking_reference: str
    listing_name: str
    guest_name: Optional[str] = None
    guest_count: int
    check_in_date: Optional[datetime] = None
    check_out_date: Optional[datetime] = None


class PropertyOwnerDashboard(BaseModel):
    properties: PropertyCounts
    bookings: BookingCounts
    earnings: Earnings
    occupancy_rate: float
    upcoming_check_ins: List[UpcomingCheckIn] = PydanticField(default_factory=list)


class VehicleRevenue(BaseModel):
    today: Decimal
    this_week: Decimal
    this_month: Decimal
    last_month: Decimal
    growth: float


class VehicleBookingCounts(BaseModel):
    total: int = 0
    completed: int = 0
    active: int = 0
    upcoming: int = 0
    cancelled: int = 0


class VehicleCounts(BaseModel):
    total: int = 0
    active: int = 0
    available: int = 0
    maintenance: int = 0


class VehicleOwnerDashboard(BaseModel):
    revenue: VehicleRevenue
    bookings: VehicleBookingCounts
    vehicles: VehicleCounts


class TransferStats(BaseModel):
    routes: int = 0
    vehicles: int = 0
    total_bookings: int = 0
    completed_bookings: int = 0
    revenue_this_month: Decimal


class ActiveTransfer(BaseModel):
    booking_reference: str
    route: str
    vehicle_name: str
    passengers: int
    pickup_time: Optional[datetime] = None
    guest_name: Optional[str] = None
    flight_number: Optional[str] = None


class TransferAlert(BaseModel):
    type: str
    message: str
    vehicle_id: Optional[int] = None
    transfer_id: Optional[int] = None
    due_date: Optional[date] = None


class TransferOwnerDashboard(BaseModel):
    stats: TransferStats
    active_transfers: List[ActiveTransfer] = PydanticField(default_factory=list)
    alerts: List[TransferAlert] = PydanticField(default_factory=list)
