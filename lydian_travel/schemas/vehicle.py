from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field as PydanticField,
    StringConstraints,
    field_validator,
    model_validator,
)

TURKISH_PLATE_PATTERN = re.compile(r"^(0[1-9]|[1-7][0-9]|8[01])\s?[A-Z]{1,3}\s?\d{2,4}$")

TransmissionLiteral = Literal["manual", "automatic", "semi_automatic"]
FuelTypeLiteral = Literal["petrol", "diesel", "hybrid", "electric", "lpg"]
FuelPolicyLiteral = Literal["full_to_full", "same_to_same", "prepaid"]
VehicleCategoryLiteral = Literal["economy", "compact", "sedan", "suv", "luxury", "van", "minibus"]


def normalize_plate(value: str) -> str:
    """Upper-case a Turkish plate and collapse its spacing to ``07 ABC 123``."""
    value = re.sub(r"\s+", "", value.strip().upper())
    match = re.match(r"^(\d{2})([A-Z]{1,3})(\d{2,4})$", value)
    if match is None:
        return value
    return " ".join(match.groups())


def next_model_year() -> int:
    return datetime.now().year + 1


class ExtraFees(BaseModel):
    driver: Decimal = PydanticField(Decimal("0"), ge=0)
    gps: Decimal = PydanticField(Decimal("0"), ge=0)
    child_seat: Decimal = PydanticField(Decimal("0"), ge=0)


class VehicleSubmission(BaseModel):
    brand: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=60)]
    model: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=60)]
    year: int = PydanticField(..., ge=1990)
    plate: str
    color: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=30)]
    vin: Optional[str] = PydanticField(None, max_length=17)
    category: VehicleCategoryLiteral = "economy"
    transmission: TransmissionLiteral
    fuel_type: FuelTypeLiteral
    seats: int = PydanticField(..., ge=2, le=50)
    doors: int = PydanticField(..., ge=2, le=6)
    features: List[str] = PydanticField(default_factory=list)
    photos: List[str] = PydanticField(default_factory=list, max_length=30)
    city: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
    pickup_address: Optional[str] = PydanticField(None, max_length=500)

    daily_rate: Decimal = PydanticField(..., gt=0)
    currency: str = "TRY"
    weekly_discount: int = PydanticField(0, ge=0, le=50)
    monthly_discount: int = PydanticField(0, ge=0, le=50)
    deposit: Decimal = PydanticField(Decimal("0"), ge=0)
    deposit_refund_days: int = PydanticField(7, ge=1, le=30)
    mileage_limit: int = PydanticField(0, ge=0)
    fuel_policy: FuelPolicyLiteral = "full_to_full"
    extra_fees: ExtraFees = PydanticField(default_factory=ExtraFees)
    min_rental_days: int = PydanticField(1, ge=1, le=30)
    max_rental_days: int = PydanticField(30, ge=1, le=365)
    advance_notice_hours: int = PydanticField(24, ge=0, le=168)
    instant_booking: bool = False

    @field_validator("plate")
    @classmethod
    def _validate_plate(cls, value: str) -> str:
        value = normalize_plate(value)
        if not TURKISH_PLATE_PATTERN.match(value):
            raise ValueError("Invalid Turkish license plate")
        return value

    @field_validator("year")
    @classmethod
    def _validate_year(cls, value: int) -> int:
        if value > next_model_year():
            raise ValueError(f"Year must be between 1990 and {next_model_year()}")
        return value

    @field_validator("currency")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        value = value.strip()
        if len(value) != 3 or not value.isalpha():
            raise ValueError("Currency code must be 3 characters")
        return value.upper()

    @model_validator(mode="after")
    def _validate_rental_days(self) -> "VehicleSubmission":
        if self.max_rental_days < self.min_rental_days:
            raise ValueError("Maximum rental days must be greater than or equal to minimum rental days")
        return self


class VehicleUpdate(BaseModel):
    color: Optional[str] = PydanticField(None, min_length=1, max_length=30)
    features: Optional[List[str]] = None
    photos: Optional[List[str]] = PydanticField(None, max_length=30)
    city: Optional[str] = PydanticField(None, min_length=1, max_length=100)
    pickup_address: Optional[str] = PydanticField(None, max_length=500)
    daily_rate: Optional[Decimal] = PydanticField(None, gt=0)
    weekly_discount: Optional[int] = PydanticField(None, ge=0, le=50)
    monthly_discount: Optional[int] = PydanticField(None, ge=0, le=50)
    deposit: Optional[Decimal] = PydanticField(None, ge=0)
    mileage_limit: Optional[int] = PydanticField(None, ge=0)
    fuel_policy: Optional[FuelPolicyLiteral] = None
    extra_fees: Optional[ExtraFees] = None
    min_rental_days: Optional[int] = PydanticField(None, ge=1, le=30)
    max_rental_days: Optional[int] = PydanticField(None, ge=1, le=365)
    advance_notice_hours: Optional[int] = PydanticField(None, ge=0, le=168)
    instant_booking: Optional[bool] = None
    status: Optional[Literal["active", "maintenance", "inactive"]] = None


class VehicleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_vehicle: int
    id_owner: int
    brand: str
    model: str
    year: int
    plate: str
    color: str
    vin: Optional[str] = None
    category: str
    transmission: str
    fuel_type: str
    seats: int
    doors: int
    features: List[str] = PydanticField(default_factory=list)
    photos: List[str] = PydanticField(default_factory=list)
    city: str
    pickup_address: Optional[str] = None
    daily_rate: Decimal
    currency: str
    weekly_discount: int
    monthly_discount: int
    deposit: Decimal
    deposit_refund_days: int
    mileage_limit: int
    fuel_policy: str
    extra_fees: Dict[str, Any] = PydanticField(default_factory=dict)
    min_rental_days: int
    max_rental_days: int
    advance_notice_hours: int
    instant_booking: bool
    status: str
    created_at: Optional[datetime] = None


class RentalQuoteRequest(BaseModel):
    pick_up_date: datetime
    drop_off_date: datetime
    include_driver: bool = False
    include_gps: bool = False
    include_child_seat: bool = False


class RentalQuote(BaseModel):
    days: int
    daily_rate: Decimal
    discount_percentage: int
    rental_total: Decimal
    extras_total: Decimal
    deposit: Decimal
    total_price: Decimal
    currency: str
