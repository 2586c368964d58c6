from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field as PydanticField, field_validator, model_validator

TravelClassLiteral = Literal["ECONOMY", "PREMIUM_ECONOMY", "BUSINESS", "FIRST"]


def _iata(value: str) -> str:
    value = value.strip().upper()
    if len(value) != 3 or not value.isalpha():
        raise ValueError("Location code must be a 3 letter IATA code")
    return value


class FlightSearchQuery(BaseModel):
    origin: str
    destination: str
    departure_date: date
    return_date: Optional[date] = None
    adults: int = PydanticField(1, ge=1, le=9)
    children: int = PydanticField(0, ge=0, le=9)
    infants: int = PydanticField(0, ge=0, le=9)
    travel_class: TravelClassLiteral = "ECONOMY"
    non_stop: bool = False
    currency: str = PydanticField("TRY", min_length=3, max_length=3)
    max_results: int = PydanticField(20, ge=1, le=250)

    @field_validator("origin", "destination")
    @classmethod
    def _normalize_codes(cls, value: str) -> str:
        return _iata(value)

    @model_validator(mode="after")
    def _validate_dates(self) -> "FlightSearchQuery":
        if self.return_date is not None and self.return_date < self.departure_date:
            raise ValueError("Return date must not be before departure date")
        return self


class HotelSearchQuery(BaseModel):
    city_code: str
    check_in_date: date
    check_out_date: date
    rooms: int = PydanticField(1, ge=1, le=9)
    adults: int = PydanticField(1, ge=1, le=9)
    radius: int = PydanticField(5, ge=1, le=300)
    radius_unit: Literal["KM", "MILE"] = "KM"

    @field_validator("city_code")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        return _iata(value)

    @model_validator(mode="after")
    def _validate_dates(self) -> "HotelSearchQuery":
        if self.check_out_date <= self.check_in_date:
            raise ValueError("Check-out date must be after check-in date")
        return self


class CarSearchQuery(BaseModel):
    pick_up_location: str
    drop_off_location: Optional[str] = None
    pick_up_date: date
    drop_off_date: date
    pick_up_time: Optional[str] = PydanticField(None, pattern=r"^([01][0-9]|2[0-3]):[0-5][0-9]$")
    drop_off_time: Optional[str] = PydanticField(None, pattern=r"^([01][0-9]|2[0-3]):[0-5][0-9]$")

    @model_validator(mode="after")
    def _validate_dates(self) -> "CarSearchQuery":
        if self.drop_off_date < self.pick_up_date:
            raise ValueError("Drop-off date must not be before pick-up date")
        return self


class TravelSearchResponse(BaseModel):
    success: bool = True
    count: int
    mock: bool = False
    results: List[Dict[str, Any]]


class CacheInfoResponse(BaseModel):
    size: int
    keys: List[str]
