from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lydian_travel.core.database import Base

if TYPE_CHECKING:  # pragma: no cover
    from lydian_travel.models.user import User

VEHICLE_STATUSES = ("pending_review", "active", "maintenance", "inactive")


class RentalVehicle(Base):
    """Self drive car offered by a vehicle owner."""

    __tablename__ = "rental_vehicles"

    id_vehicle: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    id_owner: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id_user", ondelete="CASCADE"), nullable=False, index=True
    )
    brand: Mapped[str] = mapped_column(String(60), nullable=False)
    model: Mapped[str] = mapped_column(String(60), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    plate: Mapped[str] = mapped_column(String(12), unique=True, nullable=False)
    color: Mapped[str] = mapped_column(String(30), nullable=False)
    vin: Mapped[Optional[str]] = mapped_column(String(17), nullable=True)
    category: Mapped[str] = mapped_column(String(30), nullable=False, default="economy")
    transmission: Mapped[str] = mapped_column(String(20), nullable=False)
    fuel_type: Mapped[str] = mapped_column(String(20), nullable=False)
    seats: Mapped[int] = mapped_column(Integer, nullable=False)
    doors: Mapped[int] = mapped_column(Integer, nullable=False)
    features: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    photos: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    pickup_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    daily_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TRY")
    weekly_discount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    monthly_discount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deposit: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    deposit_refund_days: Mapped[int] = mapped_column(Integer, nullable=False, default=7)
    mileage_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    fuel_policy: Mapped[str] = mapped_column(String(20), nullable=False, default="full_to_full")
    extra_fees: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    min_rental_days: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_rental_days: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    advance_notice_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=24)
    instant_booking: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    status: Mapped[str] = mapped_column(String(30), nullable=False, default="pending_review")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    owner: Mapped["User"] = relationship("User", lazy="joined")

    @property
    def display_name(self) -> str:
        return f"{self.brand} {self.model} ({self.year})"
