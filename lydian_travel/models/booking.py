from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from lydian_travel.core.database import Base


class BookingStatus:
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    ALL = (PENDING, CONFIRMED, CANCELLED, COMPLETED)
    BLOCKING = (PENDING, CONFIRMED)


class PaymentStatus:
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class BookingType:
    PROPERTY = "PROPERTY"
    CAR = "CAR"
    TRANSFER = "TRANSFER"
    FLIGHT = "FLIGHT"
    HOTEL = "HOTEL"
    TOUR = "TOUR"

    ALL = (PROPERTY, CAR, TRANSFER, FLIGHT, HOTEL, TOUR)


class Booking(Base):
    __tablename__ = "bookings"

    id_booking = Column(Integer, primary_key=True, index=True)
    booking_reference = Column(String(12), unique=True, nullable=False, index=True)
    id_user = Column(Integer, ForeignKey("users.id_user", ondelete="CASCADE"), nullable=False, index=True)
    booking_type = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING)
    payment_method = Column(String(30), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="TRY")
    guest_count = Column(Integer, nullable=False, default=1)
    check_in_date = Column(DateTime(timezone=True), nullable=True)
    check_out_date = Column(DateTime(timezone=True), nullable=True)

    id_property = Column(Integer, ForeignKey("rental_properties.id_property"), nullable=True, index=True)
    id_vehicle = Column(Integer, ForeignKey("rental_vehicles.id_vehicle"), nullable=True, index=True)
    id_transfer_vehicle = Column(
        Integer, ForeignKey("transfer_vehicles.id_transfer_vehicle"), nullable=True, index=True
    )

    guest_name = Column(String(200), nullable=True)
    guest_email = Column(String(255), nullable=True)
    guest_phone = Column(String(20), nullable=True)
    special_requests = Column(Text, nullable=True)
    details = Column("metadata", JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", lazy="joined")
    rental_property = relationship("RentalProperty", lazy="joined")
    vehicle = relationship("RentalVehicle", lazy="joined")
    transfer_vehicle = relationship("TransferVehicle", lazy="joined")
    payments = relationship("Payment", back_populates="booking", order_by="Payment.id_payment")

    def __repr__(self) -> str:
        return (
            f"<Booking(id_booking={self.id_booking}, reference={self.booking_reference}, "
            f"status={self.status}, payment_status={self.payment_status})>"
        )
