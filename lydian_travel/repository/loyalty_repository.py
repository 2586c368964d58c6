from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from lydian_travel.models.booking import Booking, BookingStatus
from lydian_travel.models.loyalty import MilesAccount, MilesTransaction


def get_account_by_user(db: Session, user_id: int) -> Optional[MilesAccount]:
    return db.query(MilesAccount).filter(MilesAccount.id_user == user_id).first()


def referral_code_exists(db: Session, code: str) -> bool:
    return db.query(MilesAccount.id_account).filter(MilesAccount.referral_code == code).first() is not None


def create_account(db: Session, account: MilesAccount) -> MilesAccount:
    db.add(account)
    db.flush()
    return account


def add_transaction(db: Session, transaction: MilesTransaction) -> MilesTransaction:
    db.add(transaction)
    db.flush()
    return transaction


def list_transactions(db: Session, account_id: int) -> List[MilesTransaction]:
    return (
        db.query(MilesTransaction)
        .filter(MilesTransaction.id_account == account_id)
        .order_by(MilesTransaction.id_transaction.desc())
        .all()
    )


def booking_already_rewarded(db: Session, account_id: int, booking_id: int) -> bool:
    return (
        db.query(MilesTransaction.id_transaction)
        .filter(
            MilesTransaction.id_account == account_id,
            MilesTransaction.id_booking == booking_id,
            MilesTransaction.type == "earn",
        )
        .first()
        is not None
    )


def get_account_by_referral_code(db: Session, code: str) -> Optional[MilesAccount]:
    return db.query(MilesAccount).filter(MilesAccount.referral_code == code).first()


def referral_already_applied(db: Session, account_id: int) -> bool:
    return (
        db.query(MilesTransaction.id_transaction)
        .filter(
            MilesTransaction.id_account == account_id,
            MilesTransaction.type == "referral_welcome",
        )
        .first()
        is not None
    )


def highest_completed_booking_total(db: Session, user_id: int) -> Decimal:
    total = (
        db.query(func.max(Booking.total_amount))
        .filter(Booking.id_user == user_id, Booking.status == BookingStatus.COMPLETED)
        .scalar()
    )
    return Decimal(str(total)) if total is not None else Decimal("0")
