"""Simulated card processing for bookings.

The processor never talks to a real acquirer: a request that passes
validation is approved, everything else is recorded as a failed charge.
"""

from __future__ import annotations

import logging
import re
import secrets
import string
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lydian_travel.models.booking import Booking, PaymentStatus
from lydian_travel.models.payment import Payment
from lydian_travel.models.user import User
from lydian_travel.repository import booking_repository, payment_repository
from lydian_travel.schemas.payment import PaymentIntentCreate, PaymentRequest, RefundRequest
from lydian_travel.services.booking_utils import to_money, utcnow

if TYPE_CHECKING:  # pragma: no cover
    from lydian_travel.services.booking_service import BookingService

logger = logging.getLogger(__name__)

PAYMENT_KIND_CHARGE = "charge"
PAYMENT_KIND_REFUND = "refund"
PAYMENT_STATUS_COMPLETED = "completed"
PAYMENT_STATUS_FAILED = "failed"

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_CODE_ALPHABET = string.ascii_uppercase + string.digits


def _random_code(length: int) -> str:
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(length))


def generate_transaction_id(prefix: str = "TXN", *, now: Optional[datetime] = None) -> str:
    moment = now or utcnow()
    return f"{prefix}-{int(moment.timestamp() * 1000)}-{_random_code(6)}"


def validate_payment_request(request: PaymentRequest) -> List[str]:
    errors: List[str] = []
    if request.amount <= 0:
        errors.append("Amount must be greater than zero")
    if len(request.currency) != 3:
        errors.append("Currency must be a 3 letter code")
    if not request.billing.full_name.strip():
        errors.append("Billing full name is required")
    if not request.billing.city.strip():
        errors.append("Billing city is required")

    if request.payment_method == "card":
        card = request.card
        if card is None:
            errors.append("Card details are required")
        else:
            digits = re.sub(r"\D", "", card.number)
            if len(digits) < 13:
                errors.append("Invalid card number")
            if len(re.sub(r"\D", "", card.cvv)) < 3:
                errors.append("Invalid CVV")
            if not card.holder_name.strip():
                errors.append("Card holder name is required")
    return errors


def record_refund(
    db: Session,
    booking: Booking,
    amount: Decimal,
    reason: str,
    *,
    method: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Payment:
    """Add a negative refund line for ``booking``; the caller owns the commit."""
    moment = now or utcnow()
    refund = Payment(
        id_booking=booking.id_booking,
        transaction_id=generate_transaction_id("RFD", now=moment),
        kind=PAYMENT_KIND_REFUND,
        method=method or booking.payment_method or "card",
        status=PAYMENT_STATUS_COMPLETED,
        amount=-to_money(amount),
        currency=booking.currency,
        provider_response={"reason": reason, "processed_at": moment.isoformat()},
        processed_at=moment,
    )
    payment_repository.create_payment(db, refund)
    booking.payment_status = PaymentStatus.REFUNDED
    return refund


def refundable_balance(db: Session, booking_id: int, charged: Decimal) -> Decimal:
    """What is left of ``charged`` once earlier refunds for the booking are taken out."""
    remaining = to_money(charged) - to_money(payment_repository.sum_refunded(db, booking_id))
    return max(remaining, Decimal("0.00"))


class PaymentProcessor:
    def __init__(self, db: Session, booking_service: "BookingService"):
        self.db = db
        self.booking_service = booking_service

    validate_request = staticmethod(validate_payment_request)

    def _commit(self, message: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=message,
            ) from exc

    def process_payment(
        self,
        booking_id: int,
        user: User,
        request: PaymentRequest,
        *,
        now: Optional[datetime] = None,
    ) -> Payment:
        booking = self.booking_service.get_booking(booking_id, user)
        if booking.payment_status == PaymentStatus.COMPLETED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Booking is already paid",
            )
        if booking.status in ("CANCELLED", "COMPLETED"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Booking cannot be paid",
            )

        moment = now or utcnow()
        errors = self.validate_request(request)
        if not errors and to_money(request.amount) != to_money(booking.total_amount):
            errors.append("Payment amount does not match booking total")

        if errors:
            failed = Payment(
                id_booking=booking.id_booking,
                transaction_id=generate_transaction_id(now=moment),
                kind=PAYMENT_KIND_CHARGE,
                method=request.payment_method,
                status=PAYMENT_STATUS_FAILED,
                amount=to_money(request.amount),
                currency=request.currency,
                error_message="; ".join(errors),
                provider_response={"errors": errors},
                processed_at=moment,
            )
            payment_repository.create_payment(self.db, failed)
            booking.payment_status = PaymentStatus.FAILED
            self._commit("Could not record payment")
            logger.info("Payment rejected for booking %s: %s", booking.booking_reference, errors)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid payment request",
            )

        provider_response: Dict[str, Any] = {
            "auth_code": _random_code(6),
            "processed_at": moment.isoformat(),
        }
        if request.card is not None:
            provider_response["card_last4"] = re.sub(r"\D", "", request.card.number)[-4:]

        payment = Payment(
            id_booking=booking.id_booking,
            transaction_id=generate_transaction_id(now=moment),
            kind=PAYMENT_KIND_CHARGE,
            method=request.payment_method,
            status=PAYMENT_STATUS_COMPLETED,
            amount=to_money(request.amount),
            currency=request.currency,
            provider_response=provider_response,
            processed_at=moment,
        )
        payment_repository.create_payment(self.db, payment)
        booking.payment_method = request.payment_method
        self.booking_service.confirm_payment(booking, payment.transaction_id, now=moment)
        self.db.refresh(payment)
        return payment

    def refund(self, payload: RefundRequest, *, now: Optional[datetime] = None) -> Payment:
        charge = payment_repository.get_payment_by_transaction(self.db, payload.transaction_id)
        if charge is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
        if charge.kind != PAYMENT_KIND_CHARGE or charge.status != PAYMENT_STATUS_COMPLETED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only completed charges can be refunded",
            )

        booking = booking_repository.get_booking(self.db, charge.id_booking)
        remaining = refundable_balance(self.db, booking.id_booking, charge.amount)
        if remaining <= 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Payment has already been fully refunded",
            )

        amount = to_money(payload.amount) if payload.amount is not None else remaining
        if amount <= 0 or amount > remaining:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Refund amount exceeds the refundable balance",
            )

        refund = record_refund(
            self.db,
            booking,
            amount,
            payload.reason or "Refund requested",
            method=charge.method,
            now=now,
        )
        self._commit("Could not record refund")
        self.db.refresh(refund)
        logger.info("Refunded %s for booking %s", amount, booking.booking_reference)
        return refund

    def list_payments(self, booking_id: int, user: User) -> List[Payment]:
        booking = self.booking_service.get_booking(booking_id, user)
        return payment_repository.list_booking_payments(self.db, booking.id_booking)

    @staticmethod
    def create_payment_intent(payload: PaymentIntentCreate) -> Dict[str, Any]:
        if payload.amount is None or payload.amount <= 0:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid amount")
        if not payload.booking_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Booking ID is required")
        if not payload.customer_email:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Customer email is required",
            )
        if not _EMAIL_PATTERN.match(payload.customer_email):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email format")

        intent_id = f"pi_{secrets.token_hex(12)}"
        amount_cents = int(to_money(payload.amount) * 100)
        return {
            "payment_intent_id": intent_id,
            "client_secret": f"{intent_id}_secret_{secrets.token_hex(12)}",
            "amount": amount_cents,
            "currency": payload.currency.lower(),
            "booking_id": payload.booking_id,
        }
