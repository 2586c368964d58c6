import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lydian_travel.core.config import Settings, settings
from lydian_travel.models.booking import Booking, BookingStatus, PaymentStatus
from lydian_travel.models.user import User
from lydian_travel.repository import booking_repository
from lydian_travel.schemas.booking import BookingCreate, BookingUpdate
from lydian_travel.services.booking_utils import (
    RefundQuote,
    calculate_refund,
    ensure_utc,
    generate_booking_reference,
    to_money,
    utcnow,
)
from lydian_travel.services.email_service import EmailService
from lydian_travel.services.loyalty_service import LoyaltyService
from lydian_travel.services.payment_service import record_refund, refundable_balance

logger = logging.getLogger(__name__)


class BookingService:
    _FINAL_STATUSES = (BookingStatus.CANCELLED, BookingStatus.COMPLETED)

    def __init__(
        self,
        db: Session,
        *,
        email_service: Optional[EmailService] = None,
        config: Optional[Settings] = None,
    ):
        self.db = db
        self._settings = config or settings
        self._email_service = email_service

    @property
    def email_service(self) -> EmailService:
        if self._email_service is None:
            self._email_service = EmailService(config=self._settings)
        return self._email_service

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

    def new_reference(self) -> str:
        return generate_booking_reference(
            lambda reference: booking_repository.reference_exists(self.db, reference)
        )

    def build_booking(self, user: User, data: Dict[str, Any]) -> Booking:
        """Stage a PENDING booking for ``user``; the caller owns the commit."""
        booking_data = dict(data)
        booking_data.setdefault("currency", self._settings.DEFAULT_CURRENCY)
        booking_data.setdefault("guest_name", user.full_name)
        booking_data.setdefault("guest_email", user.email)
        booking_data.setdefault("guest_phone", user.phone)
        for key in ("check_in_date", "check_out_date"):
            if booking_data.get(key) is not None:
                booking_data[key] = ensure_utc(booking_data[key])
        booking_data["total_amount"] = to_money(booking_data["total_amount"])
        booking_data["details"] = dict(booking_data.get("details") or {})
        booking_data.update(
            booking_reference=self.new_reference(),
            id_user=user.id_user,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
        )
        return booking_repository.create_booking(self.db, booking_data)

    def notify_created(self, booking: Booking) -> bool:
        return self.email_service.send_booking_confirmation(booking)

    def create_booking(self, user: User, payload: BookingCreate) -> Booking:
        data = payload.model_dump(exclude_none=True)
        booking = self.build_booking(user, data)
        self._commit("Could not create booking")
        self.db.refresh(booking)
        logger.info("Booking %s created for user %s", booking.booking_reference, user.id_user)
        self.notify_created(booking)
        return booking

    def get_booking(self, booking_id: int, user: Optional[User] = None) -> Booking:
        scope = None if user is None or user.role == "admin" else user.id_user
        booking = booking_repository.get_booking(self.db, booking_id, user_id=scope)
        if booking is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
        return booking

    def get_booking_by_reference(self, reference: str, user: Optional[User] = None) -> Booking:
        booking = booking_repository.get_booking_by_reference(self.db, reference.strip().upper())
        if booking is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
        if user is not None and user.role != "admin" and booking.id_user != user.id_user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
        return booking

    def list_user_bookings(
        self,
        user: User,
        *,
        status_filter: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[Booking]:
        if status_filter is not None:
            status_filter = status_filter.upper()
            if status_filter not in BookingStatus.ALL:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Invalid booking status",
                )
        return booking_repository.list_user_bookings(
            self.db,
            user.id_user,
            status_filter=status_filter,
            start_date=ensure_utc(start_date),
            end_date=ensure_utc(end_date),
        )

    def get_stats(self, user: User) -> Dict[str, int]:
        counts = booking_repository.count_user_bookings_by_status(self.db, user.id_user)
        return {
            "total": sum(counts.values()),
            "pending": counts.get(BookingStatus.PENDING, 0),
            "confirmed": counts.get(BookingStatus.CONFIRMED, 0),
            "completed": counts.get(BookingStatus.COMPLETED, 0),
            "cancelled": counts.get(BookingStatus.CANCELLED, 0),
        }

    def update_booking(self, booking_id: int, user: User, payload: BookingUpdate) -> Booking:
        booking = self.get_booking(booking_id, user)
        if booking.status in self._FINAL_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Booking cannot be modified",
            )

        update_data = payload.model_dump(exclude_unset=True)
        details = update_data.pop("details", None)
        for field, value in update_data.items():
            setattr(booking, field, value)
        if details:
            booking.details = {**(booking.details or {}), **details}

        booking_repository.save_booking(self.db, booking)
        self._commit("Could not update booking")
        self.db.refresh(booking)
        return booking

    def cancel_booking(
        self,
        booking_id: int,
        user: User,
        reason: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> Tuple[Booking, RefundQuote]:
        booking = self.get_booking(booking_id, user)
        if booking.status in self._FINAL_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Booking cannot be cancelled",
            )

        moment = now or utcnow()
        if booking.check_in_date is not None:
            refund = calculate_refund(
                booking.total_amount,
                booking.check_in_date,
                self._settings.FREE_CANCELLATION_HOURS,
                self._settings.PARTIAL_REFUND_HOURS,
                self._settings.PARTIAL_REFUND_PERCENTAGE,
                now=moment,
            )
        else:
            refund = RefundQuote(refund_amount=to_money(booking.total_amount), refund_percentage=100)

        booking.status = BookingStatus.CANCELLED
        booking.cancelled_at = moment
        booking.details = {
            **(booking.details or {}),
            "cancellation_reason": reason or "Cancelled by user",
            "refund_amount": str(refund.refund_amount),
            "refund_percentage": refund.refund_percentage,
        }
        if booking.payment_status in (PaymentStatus.COMPLETED, PaymentStatus.REFUNDED):
            payable = min(
                refund.refund_amount,
                refundable_balance(self.db, booking.id_booking, booking.total_amount),
            )
            if payable > Decimal("0"):
                record_refund(self.db, booking, payable, booking.details["cancellation_reason"], now=moment)

        booking_repository.save_booking(self.db, booking)
        self._commit("Could not cancel booking")
        self.db.refresh(booking)
        logger.info(
            "Booking %s cancelled with %s%% refund",
            booking.booking_reference,
            refund.refund_percentage,
        )
        self.email_service.send_cancellation(booking, refund)
        return booking, refund

    def confirm_payment(
        self,
        booking: Booking,
        payment_intent_id: str,
        *,
        now: Optional[datetime] = None,
    ) -> Booking:
        if booking.status in self._FINAL_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Booking cannot be confirmed",
            )

        booking.status = BookingStatus.CONFIRMED
        booking.payment_status = PaymentStatus.COMPLETED
        booking.confirmed_at = now or utcnow()
        booking.details = {**(booking.details or {}), "payment_intent_id": payment_intent_id}

        booking_repository.save_booking(self.db, booking)
        self._commit("Could not confirm booking")
        self.db.refresh(booking)
        logger.info("Booking %s confirmed", booking.booking_reference)
        self.email_service.send_booking_confirmation(booking)
        return booking

    def confirm_booking_payment(self, booking_id: int, user: User, payment_intent_id: str) -> Booking:
        return self.confirm_payment(self.get_booking(booking_id, user), payment_intent_id)

    def complete_booking(self, booking_id: int, *, now: Optional[datetime] = None) -> Booking:
        booking = self.get_booking(booking_id)
        if booking.status != BookingStatus.CONFIRMED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only confirmed bookings can be completed",
            )

        moment = now or utcnow()
        booking.status = BookingStatus.COMPLETED
        booking.completed_at = moment
        booking_repository.save_booking(self.db, booking)
        LoyaltyService(self.db).award_booking(booking, now=moment)
        self._commit("Could not complete booking")
        self.db.refresh(booking)
        return booking

    def send_reminders(self, *, now: Optional[datetime] = None) -> Dict[str, int]:
        """Email every confirmed booking whose check-in falls on tomorrow (UTC)."""
        moment = now or utcnow()
        start = (moment + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)
        bookings = booking_repository.list_bookings_starting_between(
            self.db,
            start=start,
            end=start + timedelta(days=1),
        )
        sent = sum(1 for booking in bookings if self.email_service.send_booking_reminder(booking))
        logger.info("Sent %s of %s booking reminders", sent, len(bookings))
        return {"bookings": len(bookings), "sent": sent}
