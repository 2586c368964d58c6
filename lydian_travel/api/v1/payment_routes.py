from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lydian_travel.core.security import get_current_user, require_roles
from lydian_travel.dependencies import get_db, get_email_service
from lydian_travel.models.user import User
from lydian_travel.schemas.payment import (
    PaymentIntentCreate,
    PaymentIntentResponse,
    PaymentRequest,
    PaymentResponse,
    RefundRequest,
)
from lydian_travel.services.booking_service import BookingService
from lydian_travel.services.email_service import EmailService
from lydian_travel.services.payment_service import PaymentProcessor

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post(
    "/bookings/{booking_id}",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
)
def pay_booking(
    booking_id: int,
    payload: PaymentRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    processor = PaymentProcessor(db, BookingService(db, email_service=email_service))
    return processor.process_payment(booking_id, current_user, payload)


@router.get("/bookings/{booking_id}", response_model=List[PaymentResponse])
def list_booking_payments(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    processor = PaymentProcessor(db, BookingService(db))
    return processor.list_payments(booking_id, current_user)


@router.post("/refunds", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def refund_payment(
    payload: RefundRequest,
    _: User = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    processor = PaymentProcessor(db, BookingService(db))
    return processor.refund(payload)


@router.post("/intents", response_model=PaymentIntentResponse)
def create_payment_intent(payload: PaymentIntentCreate):
    return PaymentProcessor.create_payment_intent(payload)


__all__ = ["router"]
