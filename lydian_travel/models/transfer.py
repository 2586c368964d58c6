from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lydian_travel.core.database import Base

TRANSFER_VEHICLE_TYPES = ("SEDAN", "MINIVAN", "LUXURY_VAN", "MINIBUS", "VIP_SPRINTER", "BUS")


class AirportTransfer(Base):
    __tablename__ = "airport_transfers"

    id_transfer: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    id_owner: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id_user", ondelete="SET NULL"), nullable=True, index=True
    )
    from_location: Mapped[str] = mapped_column(String(150), nullable=False)
    to_location: Mapped[str] = mapped_column(String(150), nullable=False)
    distance: Mapped[int] = mapped_column(Integer, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    region: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    booking_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    vehicles: Mapped[list["TransferVehicle"]] = relationship(
        "TransferVehicle",
        back_populates="transfer",
        cascade="all, delete-orphan",
        order_by="TransferVehicle.price_standard",
    )


class TransferVehicle(Base):
    __tablename__ = "transfer_vehicles"

    id_transfer_vehicle: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    id_transfer: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("airport_transfers.id_transfer", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    vehicle_type: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    luggage_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    price_standard: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    price_vip: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    features: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Operator paperwork, filled in by the transfer owner wizard
    plate: Mapped[Optional[str]] = mapped_column(String(12), nullable=True)
    brand: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    d2_license_number: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    per_km_fee: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    minimum_fee: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    night_surcharge: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weekend_surcharge: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    insurance_provider: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    insurance_policy_number: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    insurance_coverage: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    insurance_expiry: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    driver_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    driver_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    driver_license_number: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    driver_license_expiry: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    src4_certificate: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    psychotechnic_certificate: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)

    transfer: Mapped[AirportTransfer] = relationship("AirportTransfer", back_populates="vehicles")
