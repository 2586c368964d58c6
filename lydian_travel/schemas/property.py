from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField, field_validator, model_validator

from lydian_travel.schemas.property_submission import (
    CancellationPolicyLiteral,
    HighlightText,
    PropertyTypeLiteral,
    parse_time,
)


class PropertyUpdate(BaseModel):
    name: Optional[str] = PydanticField(None, min_length=3, max_length=100)
    property_type: Optional[PropertyTypeLiteral] = None
    description: Optional[str] = PydanticField(None, min_length=50, max_length=5000)
    highlights: Optional[List[HighlightText]] = PydanticField(None, max_length=5)
    max_guests: Optional[int] = PydanticField(None, ge=1, le=50)
    amenities: Optional[List[str]] = PydanticField(None, min_length=1)
    base_price: Optional[Decimal] = PydanticField(None, ge=10, le=100000)
    cleaning_fee: Optional[Decimal] = PydanticField(None, ge=0)
    security_deposit: Optional[Decimal] = PydanticField(None, ge=0)
    weekly_discount: Optional[int] = PydanticField(None, ge=0, le=100)
    monthly_discount: Optional[int] = PydanticField(None, ge=0, le=100)
    min_stay: Optional[int] = PydanticField(None, ge=1, le=365)
    max_stay: Optional[int] = PydanticField(None, ge=1, le=365)
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    cancellation_policy: Optional[CancellationPolicyLiteral] = None

    @field_validator("check_in_time", "check_out_time")
    @classmethod
    def _validate_time(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        parsed = parse_time(value)
        if parsed is None:
            raise ValueError("Time must be in HH:mm format (24-hour)")
        return parsed.strftime("%H:%M")

    @model_validator(mode="after")
    def _validate_stay(self) -> "PropertyUpdate":
        if self.min_stay is not None and self.max_stay is not None and self.max_stay < self.min_stay:
            raise ValueError("Maximum stay must be greater than or equal to minimum stay")
        return self


class PropertyReject(BaseModel):
    reason: Optional[str] = PydanticField(None, max_length=500)


class PropertyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_property: int
    id_owner: int
    name: str
    slug: str
    property_type: str
    description: str
    highlights: List[str] = PydanticField(default_factory=list)
    bedrooms: int
    bathrooms: Decimal
    max_guests: int
    beds: Any = None
    country: str
    province: str
    city: str
    district: str
    address: str
    postal_code: str
    latitude: Decimal
    longitude: Decimal
    timezone: str
    amenities: List[str] = PydanticField(default_factory=list)
    custom_amenities: List[str] = PydanticField(default_factory=list)
    features: Dict[str, Any] = PydanticField(default_factory=dict)
    safety: Dict[str, Any] = PydanticField(default_factory=dict)
    base_price: Decimal
    currency: str
    seasonal_prices: List[Dict[str, Any]] = PydanticField(default_factory=list)
    weekly_discount: int
    monthly_discount: int
    cleaning_fee: Decimal
    security_deposit: Decimal
    min_stay: int
    max_stay: Optional[int] = None
    photos: List[Dict[str, Any]] = PydanticField(default_factory=list)
    cover_photo_index: int
    video_url: Optional[str] = None
    virtual_tour_url: Optional[str] = None
    check_in_time: str
    check_out_time: str
    house_rules: Dict[str, Any] = PydanticField(default_factory=dict)
    custom_rules: List[str] = PydanticField(default_factory=list)
    cancellation_policy: str
    status: str
    rating: Decimal
    review_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
