from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field as PydanticField,
    StringConstraints,
    field_validator,
    model_validator,
)

from lydian_travel.schemas.vehicle import TURKISH_PLATE_PATTERN, next_model_year, normalize_plate

TransferVehicleTypeLiteral = Literal["SEDAN", "MINIVAN", "LUXURY_VAN", "MINIBUS", "VIP_SPRINTER", "BUS"]

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]


class TransferVehicleInfo(BaseModel):
    plate: str
    brand: RequiredText
    model: RequiredText
    year: int = PydanticField(..., ge=1990)
    color: RequiredText
    passenger_capacity: int = PydanticField(..., ge=1, le=50)
    luggage_capacity: int = PydanticField(..., ge=1, le=50)
    d2_license_number: RequiredText
    name: Optional[str] = PydanticField(None, max_length=100)
    features: List[str] = PydanticField(default_factory=list)
    image: Optional[str] = None

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


class TransferRouteInput(BaseModel):
    from_location: RequiredText
    to_location: RequiredText
    distance: int = PydanticField(..., gt=0)
    duration: int = PydanticField(..., gt=0)
    region: RequiredText
    base_price: Optional[Decimal] = PydanticField(None, gt=0)


class TransferPricing(BaseModel):
    per_km_fee: Decimal = PydanticField(..., ge=1)
    minimum_fee: Decimal = PydanticField(..., ge=100)
    night_surcharge: int = PydanticField(0, ge=0, le=100)
    weekend_surcharge: int = PydanticField(0, ge=0, le=100)
    routes: List[TransferRouteInput] = PydanticField(..., min_length=1)


class InsuranceInfo(BaseModel):
    provider: RequiredText
    policy_number: RequiredText
    coverage: Decimal = PydanticField(..., ge=100000)
    expiry_date: date

    @field_validator("expiry_date")
    @classmethod
    def _validate_expiry(cls, value: date) -> date:
        if value <= date.today():
            raise ValueError("Insurance expiry date must be in the future")
        return value


class DriverInfo(BaseModel):
    name: RequiredText
    phone: Annotated[str, StringConstraints(strip_whitespace=True, min_length=7, max_length=20)]
    license_number: RequiredText
    license_expiry: date
    src4_certificate: RequiredText
    psychotechnic_certificate: RequiredText

    @field_validator("license_expiry")
    @classmethod
    def _validate_expiry(cls, value: date) -> date:
        if value <= date.today():
            raise ValueError("Driver license expiry date must be in the future")
        return value


class TransferLegal(BaseModel):
    insurance: InsuranceInfo
    driver: DriverInfo


class TransferVehicleSubmission(BaseModel):
    category: TransferVehicleTypeLiteral
    vehicle: TransferVehicleInfo
    pricing: TransferPricing
    legal: TransferLegal

    @model_validator(mode="after")
    def _validate_routes(self) -> "TransferVehicleSubmission":
        seen = set()
        for route in self.pricing.routes:
            key = (route.from_location.lower(), route.to_location.lower())
            if key in seen:
                raise ValueError("Each route may only be listed once")
            seen.add(key)
        return self


class TransferVehicleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_transfer_vehicle: int
    id_transfer: int
    vehicle_type: str
    name: str
    capacity: int
    luggage_capacity: int
    price_standard: Decimal
    price_vip: Decimal
    features: List[str] = PydanticField(default_factory=list)
    image: Optional[str] = None
    plate: Optional[str] = None


class TransferRouteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_transfer: int
    from_location: str
    to_location: str
    distance: int
    duration: int
    region: str
    description: Optional[str] = None
    image: Optional[str] = None
    is_active: bool
    booking_count: int
    vehicles: List[TransferVehicleResponse] = PydanticField(default_factory=list)


class TransferSearchVehicle(BaseModel):
    id: Optional[int] = None
    vehicle_type: str
    name: str
    capacity: int
    luggage_capacity: int
    price_standard: Decimal
    price_vip: Decimal
    price: Decimal
    features: List[str] = PydanticField(default_factory=list)
    image: Optional[str] = None


class TransferSearchResult(BaseModel):
    id: Optional[int] = None
    name: str
    description: str
    from_location: str
    from_location_full: str
    to_location: str
    distance: int
    duration: int
    region: str
    image: str
    popular: bool
    vehicles: List[TransferSearchVehicle]


class TransferSearchResponse(BaseModel):
    success: bool = True
    count: int
    transfers: List[TransferSearchResult]
