from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field as PydanticField, model_validator

BookingTypeLiteral = Literal["PROPERTY", "CAR", "TRANSFER", "FLIGHT", "HOTEL", "TOUR"]


class GuestDetails(BaseModel):
    guest_name: Optional[str] = PydanticField(None, max_length=200)
    guest_email: Optional[EmailStr] = None
    guest_phone: Optional[str] = PydanticField(None, max_length=20)
    special_requests: Optional[str] = PydanticField(None, max_length=2000)


class BookingCreate(GuestDetails):
    booking_type: BookingTypeLiteral
    total_amount: Decimal = PydanticField(..., ge=0)
    currency: str = PydanticField("TRY", min_length=3, max_length=3)
    payment_method: Optional[str] = None
    guest_count: int = PydanticField(1, ge=1, le=50)
    check_in_date: Optional[datetime] = None
    check_out_date: Optional[datetime] = None
    details: Dict[str, Any] = PydanticField(default_factory=dict)

    @model_validator(mode="after")
    def _validate_dates(self) -> "BookingCreate":
        if self.check_in_date and self.check_out_date and self.check_out_date < self.check_in_date:
            raise ValueError("check_out_date must not be before check_in_date")
        return self


class BookingUpdate(GuestDetails):
    guest_count: Optional[int] = PydanticField(None, ge=1, le=50)
    payment_method: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_booking: int
    booking_reference: str
    id_user: int
    booking_type: str
    status: str
    payment_status: str
    payment_method: Optional[str] = None
    total_amount: Decimal
    currency: str
    guest_count: int
    check_in_date: Optional[datetime] = None
    check_out_date: Optional[datetime] = None
    id_property: Optional[int] = None
    id_vehicle: Optional[int] = None
    id_transfer_vehicle: Optional[int] = None
    guest_name: Optional[str] = None
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    special_requests: Optional[str] = None
    details: Dict[str, Any] = PydanticField(default_factory=dict)
    created_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class BookingPriceBreakdown(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    base_price: Decimal
    quantity: int
    subtotal: Decimal
    tax: Decimal
    service_fee: Decimal
    cleaning_fee: Decimal
    total_price: Decimal


class BookingCreatedResponse(BaseModel):
    success: bool = True
    booking: BookingResponse
    price_breakdown: Optional[BookingPriceBreakdown] = None


class BookingCancelRequest(BaseModel):
    reason: Optional[str] = PydanticField(None, max_length=500)


class BookingCancelResponse(BaseModel):
    booking: BookingResponse
    refund_amount: Decimal
    refund_percentage: int


class BookingConfirmRequest(BaseModel):
    payment_intent_id: str = PydanticField(..., min_length=1)


class BookingStatsResponse(BaseModel):
    total: int
    pending: int
    confirmed: int
    completed: int
    cancelled: int


class ReminderRunResponse(BaseModel):
    bookings: int
    sent: int


class ConflictingBooking(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    booking_reference: str
    check_in_date: Optional[datetime] = None
    check_out_date: Optional[datetime] = None
    status: str


class PropertyBookingCreate(GuestDetails):
    property_id: int = PydanticField(..., gt=0)
    check_in_date: datetime
    check_out_date: datetime
    guest_count: int = PydanticField(..., ge=1)
    payment_method: Optional[str] = None


class CarBookingCreate(GuestDetails):
    vehicle_id: int = PydanticField(..., gt=0)
    pick_up_date: datetime
    drop_off_date: datetime
    include_driver: bool = False
    include_gps: bool = False
    include_child_seat: bool = False
    payment_method: Optional[str] = None


class TransferBookingCreate(GuestDetails):
    transfer_vehicle_id: int = PydanticField(..., gt=0)
    pickup_datetime: datetime
    passengers: int = PydanticField(..., ge=1, le=60)
    is_vip: bool = False
    flight_number: Optional[str] = PydanticField(None, max_length=20)
    payment_method: Optional[str] = None
