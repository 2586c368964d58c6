from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from lydian_travel.core.database import Base


class MilesAccount(Base):
    __tablename__ = "miles_accounts"

    id_account = Column(Integer, primary_key=True, index=True)
    id_user = Column(Integer, ForeignKey("users.id_user", ondelete="CASCADE"), unique=True, nullable=False)
    available_miles = Column(Integer, nullable=False, default=0)
    used_miles = Column(Integer, nullable=False, default=0)
    lifetime_earned = Column(Integer, nullable=False, default=0)
    lifetime_spent = Column(Integer, nullable=False, default=0)
    tier = Column(String(20), nullable=False, default="standard")
    referral_code = Column(String(8), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    transactions = relationship(
        "MilesTransaction",
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="MilesTransaction.id_transaction.desc()",
    )


class MilesTransaction(Base):
    __tablename__ = "miles_transactions"

    id_transaction = Column(Integer, primary_key=True, index=True)
    id_account = Column(Integer, ForeignKey("miles_accounts.id_account", ondelete="CASCADE"), nullable=False)
    id_booking = Column(Integer, ForeignKey("bookings.id_booking", ondelete="SET NULL"), nullable=True)
    type = Column(String(20), nullable=False)
    amount = Column(Integer, nullable=False)
    balance_after = Column(Integer, nullable=False)
    description = Column(Text, nullable=False)
    expiry_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    account = relationship("MilesAccount", back_populates="transactions")
