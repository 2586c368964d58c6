from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lydian_travel.core.database import Base

if TYPE_CHECKING:  # pragma: no cover
    from lydian_travel.models.user import User

PROPERTY_STATUSES = ("draft", "pending_review", "active", "rejected", "inactive")


class RentalProperty(Base):
    __tablename__ = "rental_properties"

    id_property: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    id_owner: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id_user", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(140), unique=True, nullable=False, index=True)
    property_type: Mapped[str] = mapped_column(String(30), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    highlights: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False)
    bathrooms: Mapped[Decimal] = mapped_column(Numeric(3, 1), nullable=False)
    max_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    beds: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    country: Mapped[str] = mapped_column(String(100), nullable=False)
    province: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    district: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[str] = mapped_column(String(200), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(12), nullable=False)
    latitude: Mapped[Decimal] = mapped_column(Numeric(11, 8), nullable=False)
    longitude: Mapped[Decimal] = mapped_column(Numeric(11, 8), nullable=False)
    timezone: Mapped[str] = mapped_column(String(60), nullable=False, default="Europe/Istanbul")

    amenities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    custom_amenities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    features: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    safety: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TRY")
    seasonal_prices: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    weekly_discount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    monthly_discount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cleaning_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    security_deposit: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    min_stay: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_stay: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    photos: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    cover_photo_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    video_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    virtual_tour_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    check_in_time: Mapped[str] = mapped_column(String(5), nullable=False, default="14:00")
    check_out_time: Mapped[str] = mapped_column(String(5), nullable=False, default="11:00")
    house_rules: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    custom_rules: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    cancellation_policy: Mapped[str] = mapped_column(String(30), nullable=False, default="moderate")

    legal: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    submission_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    verification_method: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    status: Mapped[str] = mapped_column(String(30), nullable=False, default="draft")
    rating: Mapped[Decimal] = mapped_column(Numeric(2, 1), nullable=False, default=0)
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    owner: Mapped["User"] = relationship("User", lazy="joined")

    def __repr__(self) -> str:
        return f"<RentalProperty(id_property={self.id_property}, slug={self.slug}, status={self.status})>"
