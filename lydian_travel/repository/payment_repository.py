from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from lydian_travel.models.payment import Payment


def create_payment(db: Session, payment: Payment) -> Payment:
    db.add(payment)
    db.flush()
    return payment


def get_payment_by_transaction(db: Session, transaction_id: str) -> Optional[Payment]:
    return db.query(Payment).filter(Payment.transaction_id == transaction_id).first()


def list_booking_payments(db: Session, booking_id: int) -> List[Payment]:
    return (
        db.query(Payment)
        .filter(Payment.id_booking == booking_id)
        .order_by(Payment.id_payment)
        .all()
    )


def sum_refunded(db: Session, booking_id: int) -> Decimal:
    """Total already paid back for a booking, as a positive amount."""
    total = (
        db.query(func.coalesce(func.sum(Payment.amount), 0))
        .filter(
            Payment.id_booking == booking_id,
            Payment.kind == "refund",
            Payment.status == "completed",
        )
        .scalar()
    )
    return Decimal("0") - Decimal(str(total))
