from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from lydian_travel.core.database import Base


class Payment(Base):
    __tablename__ = "payments"

    id_payment = Column(Integer, primary_key=True, index=True)
    id_booking = Column(Integer, ForeignKey("bookings.id_booking", ondelete="CASCADE"), nullable=False, index=True)
    transaction_id = Column(String(40), unique=True, nullable=False, index=True)
    kind = Column(String(20), nullable=False, default="charge")
    method = Column(String(30), nullable=False)
    status = Column(String(20), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    error_message = Column(Text, nullable=True)
    provider_response = Column(JSON, nullable=False, default=dict)
    processed_at = Column(DateTime(timezone=True), server_default=func.now())

    booking = relationship("Booking", back_populates="payments")
