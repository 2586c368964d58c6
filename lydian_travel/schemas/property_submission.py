"""Validation models for the eight step property listing wizard."""

from __future__ import annotations

import re
from datetime import date, time
from decimal import Decimal, InvalidOperation
from typing import Annotated, Dict, List, Literal, Optional, Sequence

from pydantic import (
    BaseModel,
    Field as PydanticField,
    StringConstraints,
    field_validator,
    model_validator,
)

POSTAL_CODE_PATTERN = re.compile(r"^[A-Z0-9][A-Z0-9\s\-]{2,10}$", re.IGNORECASE)
TIME_PATTERN = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")
URL_PATTERN = re.compile(r"^https?://\S+$", re.IGNORECASE)

PROPERTY_TYPES = (
    "apartment",
    "house",
    "villa",
    "bungalow",
    "townhouse",
    "cottage",
    "studio",
    "penthouse",
    "houseboat",
    "other",
)
PropertyTypeLiteral = Literal[
    "apartment",
    "house",
    "villa",
    "bungalow",
    "townhouse",
    "cottage",
    "studio",
    "penthouse",
    "houseboat",
    "other",
]
PhotoRoomLiteral = Literal["living_room", "bedroom", "bathroom", "kitchen", "exterior", "other"]
CancellationPolicyLiteral = Literal["flexible", "moderate", "strict", "very_strict", "non_refundable"]

HighlightText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=60)]
AmenityText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
RuleText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]


def parse_time(value: str) -> Optional[time]:
    """Parse ``HH:mm`` into a :class:`datetime.time`, or ``None`` when malformed."""
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        return None
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def _decimal_places(value: float | Decimal) -> int:
    try:
        exponent = Decimal(str(value)).normalize().as_tuple().exponent
    except InvalidOperation:
        return 0
    return -exponent if isinstance(exponent, int) and exponent < 0 else 0


def validate_coordinates(latitude: float, longitude: float, precision: int = 8) -> bool:
    return (
        -90 <= latitude <= 90
        and -180 <= longitude <= 180
        and _decimal_places(latitude) <= precision
        and _decimal_places(longitude) <= precision
    )


def validate_seasonal_prices(prices: Optional[Sequence["SeasonalPrice"]]) -> bool:
    """True when no two seasons overlap and every season has a non-negative price."""
    if not prices:
        return True
    ordered = sorted(prices, key=lambda season: season.start_date)
    for current, following in zip(ordered, ordered[1:]):
        if current.end_date >= following.start_date:
            return False
    return all(season.price_per_night >= 0 for season in prices)


class BasicInfoStep(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=100)]
    property_type: PropertyTypeLiteral
    bedrooms: int = PydanticField(..., ge=1, le=20)
    bathrooms: float = PydanticField(..., ge=0.5, le=20)
    max_guests: int = PydanticField(..., ge=1, le=50)
    description: Annotated[str, StringConstraints(strip_whitespace=True, min_length=50, max_length=5000)]
    highlights: List[HighlightText] = PydanticField(default_factory=list, max_length=5)


class BedCounts(BaseModel):
    queen: int = PydanticField(0, ge=0)
    double: int = PydanticField(0, ge=0)
    single: int = PydanticField(0, ge=0)
    bunk: int = PydanticField(0, ge=0)

    @property
    def total(self) -> int:
        return self.queen + self.double + self.single + self.bunk


class LocationStep(BaseModel):
    country: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2)]
    province: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    city: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    district: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    address: Annotated[str, StringConstraints(strip_whitespace=True, min_length=5, max_length=200)]
    postal_code: str
    latitude: float = PydanticField(..., ge=-90, le=90)
    longitude: float = PydanticField(..., ge=-180, le=180)
    timezone: str = PydanticField("Europe/Istanbul", min_length=1)
    beds: Optional[BedCounts] = None

    @field_validator("postal_code")
    @classmethod
    def _validate_postal_code(cls, value: str) -> str:
        value = value.strip()
        if not POSTAL_CODE_PATTERN.match(value):
            raise ValueError("Please enter a valid postal code")
        return value.upper()

    @model_validator(mode="after")
    def _validate_location(self) -> "LocationStep":
        if not validate_coordinates(self.latitude, self.longitude):
            raise ValueError("Coordinates must have at most 8 decimal places")
        if self.beds is not None and self.beds.total <= 0:
            raise ValueError("Must have at least one bed")
        return self


class AmenitiesStep(BaseModel):
    amenities: List[str] = PydanticField(..., min_length=1)
    custom_amenities: List[AmenityText] = PydanticField(default_factory=list, max_length=10)
    features: Dict[str, bool] = PydanticField(default_factory=dict)
    safety: Dict[str, bool] = PydanticField(default_factory=dict)


class SeasonalPrice(BaseModel):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
    start_date: date
    end_date: date
    price_per_night: Decimal = PydanticField(..., ge=0, le=100000)

    @model_validator(mode="after")
    def _validate_range(self) -> "SeasonalPrice":
        if self.start_date >= self.end_date:
            raise ValueError("Season start date must be before its end date")
        return self


class PricingStep(BaseModel):
    base_price: Decimal = PydanticField(..., ge=10, le=100000)
    currency: str = "TRY"
    weekly_discount: int = PydanticField(0, ge=0, le=100)
    monthly_discount: int = PydanticField(0, ge=0, le=100)
    cleaning_fee: Decimal = PydanticField(Decimal("0"), ge=0)
    security_deposit: Decimal = PydanticField(Decimal("0"), ge=0)
    min_stay: int = PydanticField(1, ge=1, le=365)
    max_stay: Optional[int] = PydanticField(None, ge=1, le=365)
    seasonal_prices: List[SeasonalPrice] = PydanticField(default_factory=list)

    @field_validator("currency")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        value = value.strip()
        if len(value) != 3 or not value.isalpha():
            raise ValueError("Currency code must be 3 characters")
        return value.upper()

    @model_validator(mode="after")
    def _validate_pricing(self) -> "PricingStep":
        if self.max_stay is not None and self.max_stay < self.min_stay:
            raise ValueError("Maximum stay must be greater than or equal to minimum stay")
        if not validate_seasonal_prices(self.seasonal_prices):
            raise ValueError("Seasonal prices must not overlap")
        return self


class PropertyPhoto(BaseModel):
    url: str
    room: PhotoRoomLiteral
    caption: Optional[str] = PydanticField(None, max_length=200)
    order: int = PydanticField(0, ge=0)

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        if not URL_PATTERN.match(value):
            raise ValueError("Invalid photo URL")
        return value


class PhotosStep(BaseModel):
    photos: List[PropertyPhoto] = PydanticField(..., min_length=5, max_length=50)
    cover_photo_index: int = PydanticField(0, ge=0)
    video_url: Optional[str] = None
    virtual_tour_url: Optional[str] = None

    @field_validator("video_url", "virtual_tour_url", mode="before")
    @classmethod
    def _validate_media_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        if not isinstance(value, str) or not URL_PATTERN.match(value):
            raise ValueError("Please enter a valid URL")
        return value

    @model_validator(mode="after")
    def _validate_cover(self) -> "PhotosStep":
        if self.cover_photo_index >= len(self.photos):
            raise ValueError("Cover photo index is out of range")
        return self


class HouseRules(BaseModel):
    smoking_allowed: bool = False
    pets_allowed: bool = False
    events_allowed: bool = False
    parties_allowed: bool = False
    commercial_photography_allowed: bool = False


class RulesStep(BaseModel):
    check_in_time: str
    check_out_time: str
    house_rules: HouseRules = PydanticField(default_factory=HouseRules)
    custom_rules: List[RuleText] = PydanticField(default_factory=list, max_length=5)
    cancellation_policy: CancellationPolicyLiteral

    @field_validator("check_in_time", "check_out_time")
    @classmethod
    def _validate_time(cls, value: str) -> str:
        parsed = parse_time(value)
        if parsed is None:
            raise ValueError("Time must be in HH:mm format (24-hour)")
        return parsed.strftime("%H:%M")

    @model_validator(mode="after")
    def _validate_times_differ(self) -> "RulesStep":
        if self.check_in_time == self.check_out_time:
            raise ValueError("Check-out time must be different from check-in time")
        return self


class LegalStep(BaseModel):
    agree_to_terms: bool
    agree_to_privacy_policy: bool
    agree_to_host_rules: bool
    confirm_accuracy: bool
    comply_with_local_laws: bool
    tax_id: Optional[str] = PydanticField(None, max_length=40)
    business_name: Optional[str] = PydanticField(None, max_length=200)

    @model_validator(mode="after")
    def _validate_agreements(self) -> "LegalStep":
        missing = [
            name
            for name in (
                "agree_to_terms",
                "agree_to_privacy_policy",
                "agree_to_host_rules",
                "confirm_accuracy",
                "comply_with_local_laws",
            )
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(f"All agreements must be accepted: {', '.join(missing)}")
        return self


class ReviewStep(BaseModel):
    submission_type: Literal["save_draft", "submit_for_review"]
    notes: Optional[str] = PydanticField(None, max_length=1000)
    verification_method: Optional[Literal["email", "phone", "document"]] = None


class PropertySubmission(BaseModel):
    basic_info: BasicInfoStep
    location: LocationStep
    amenities: AmenitiesStep
    pricing: PricingStep
    photos: PhotosStep
    rules: RulesStep
    legal: LegalStep
    review: ReviewStep


STEP_MODELS = {
    1: BasicInfoStep,
    2: LocationStep,
    3: AmenitiesStep,
    4: PricingStep,
    5: PhotosStep,
    6: RulesStep,
    7: LegalStep,
    8: ReviewStep,
}


class StepValidationResponse(BaseModel):
    valid: bool
    step: int
