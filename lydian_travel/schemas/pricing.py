from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField, model_validator

PricedItemLiteral = Literal["hotel", "tour", "package", "property", "car", "transfer"]


class DynamicPriceRequest(BaseModel):
    base_price: float = PydanticField(..., gt=0)
    item_type: PricedItemLiteral
    check_in_date: datetime
    check_out_date: Optional[datetime] = None
    adults: int = PydanticField(1, ge=1, le=50)
    children: int = PydanticField(0, ge=0, le=50)
    available: int = PydanticField(10, ge=0)
    capacity: int = PydanticField(20, gt=0)

    @model_validator(mode="after")
    def _validate_availability(self) -> "DynamicPriceRequest":
        if self.available > self.capacity:
            raise ValueError("available cannot exceed capacity")
        return self


class PricingFactorsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    season_multiplier: float
    demand_multiplier: float
    advance_booking_discount: float
    group_size_discount: float
    day_of_week_multiplier: float
    weather_impact: float
    special_event_multiplier: float
    availability_scarcity: float


class PriceAdjustmentsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    base_price: int
    seasonal_adjustment: int
    demand_adjustment: int
    advance_booking_discount: int
    group_discount: int
    weekend_surcharge: int
    taxes: int
    service_fee: int


class DynamicPriceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    base_price: float
    final_price: int
    discount: int
    factors: PricingFactorsResponse
    breakdown: PriceAdjustmentsResponse
    currency: str
    valid_until: datetime


class CancellationQuoteRequest(BaseModel):
    item_type: str = PydanticField(..., min_length=1, max_length=30)
    final_price: float = PydanticField(..., ge=0)
    check_in_date: datetime
    cancelled_at: Optional[datetime] = None


class CancellationFeeRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    days: int
    fee_percentage: int


class CancellationQuoteResponse(BaseModel):
    item_type: str
    free_cancellation_days: int
    free_cancellation_until: datetime
    fees: List[CancellationFeeRow]
    cancellation_fee: int
    refund_amount: float
    confirmation_code: str
