"""Booking lifecycle and checkout routes."""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from lydian_travel.core.security import get_current_user, require_roles
from lydian_travel.dependencies import get_db, get_email_service
from lydian_travel.models.user import User
from lydian_travel.schemas.booking import (
    BookingCancelRequest,
    BookingCancelResponse,
    BookingConfirmRequest,
    BookingCreate,
    BookingCreatedResponse,
    BookingResponse,
    BookingStatsResponse,
    BookingUpdate,
    CarBookingCreate,
    PropertyBookingCreate,
    TransferBookingCreate,
)
from lydian_travel.services.booking_service import BookingService
from lydian_travel.services.checkout_service import CheckoutService
from lydian_travel.services.email_service import EmailService

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    service = BookingService(db, email_service=email_service)
    return service.create_booking(current_user, payload)


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    *,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    status_filter: Optional[str] = Query(None, alias="status", description="Filter bookings by status"),
    start_date: Optional[datetime] = Query(None, description="Earliest check-in date"),
    end_date: Optional[datetime] = Query(None, description="Latest check-in date"),
):
    """List the current user's bookings, newest first."""

    service = BookingService(db)
    return service.list_user_bookings(
        current_user,
        status_filter=status_filter,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/stats", response_model=BookingStatsResponse)
def booking_stats(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    service = BookingService(db)
    return service.get_stats(current_user)


@router.post(
    "/checkout/property",
    response_model=BookingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def checkout_property(
    payload: PropertyBookingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """Reserve a rental property for the requested dates."""

    service = CheckoutService(db, email_service=email_service)
    booking, price = service.create_property_booking(current_user, payload)
    return {"success": True, "booking": booking, "price_breakdown": price}


@router.post(
    "/checkout/car",
    response_model=BookingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def checkout_car(
    payload: CarBookingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    service = CheckoutService(db, email_service=email_service)
    booking = service.create_car_booking(current_user, payload)
    return {"success": True, "booking": booking}


@router.post(
    "/checkout/transfer",
    response_model=BookingCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
def checkout_transfer(
    payload: TransferBookingCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    service = CheckoutService(db, email_service=email_service)
    booking = service.create_transfer_booking(current_user, payload)
    return {"success": True, "booking": booking}


@router.get("/reference/{reference}", response_model=BookingResponse)
def get_booking_by_reference(
    reference: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = BookingService(db)
    return service.get_booking_by_reference(reference, current_user)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = BookingService(db)
    return service.get_booking(booking_id, current_user)


@router.patch("/{booking_id}", response_model=BookingResponse)
def update_booking(
    booking_id: int,
    payload: BookingUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    service = BookingService(db)
    return service.update_booking(booking_id, current_user, payload)


@router.post("/{booking_id}/cancel", response_model=BookingCancelResponse)
def cancel_booking(
    booking_id: int,
    payload: BookingCancelRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    service = BookingService(db, email_service=email_service)
    booking, refund = service.cancel_booking(booking_id, current_user, payload.reason)
    return {
        "booking": booking,
        "refund_amount": refund.refund_amount,
        "refund_percentage": refund.refund_percentage,
    }


@router.post("/{booking_id}/confirm", response_model=BookingResponse)
def confirm_booking(
    booking_id: int,
    payload: BookingConfirmRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    service = BookingService(db, email_service=email_service)
    return service.confirm_booking_payment(booking_id, current_user, payload.payment_intent_id)


@router.post("/{booking_id}/complete", response_model=BookingResponse)
def complete_booking(
    booking_id: int,
    _: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    """Mark a stay as completed and credit the guest's miles."""

    service = BookingService(db)
    return service.complete_booking(booking_id)


__all__ = ["router"]
