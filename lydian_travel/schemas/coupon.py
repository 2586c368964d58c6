from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField, model_validator


class CouponBase(BaseModel):
    code: str = PydanticField(..., min_length=3, max_length=40)
    type: Literal["percentage", "fixed_amount"]
    value: Decimal = PydanticField(..., gt=0)
    min_amount: Optional[Decimal] = PydanticField(None, ge=0)
    max_discount: Optional[Decimal] = PydanticField(None, gt=0)
    valid_from: datetime
    valid_until: datetime
    usage_limit: Optional[int] = PydanticField(None, gt=0)
    applicable_items: Optional[List[str]] = None
    applicable_categories: Optional[List[str]] = None


class CouponCreate(CouponBase):
    @model_validator(mode="after")
    def _validate_window(self) -> "CouponCreate":
        if self.valid_from >= self.valid_until:
            raise ValueError("valid_from must be earlier than valid_until")
        if self.type == "percentage" and self.value > 100:
            raise ValueError("percentage coupons cannot exceed 100")
        return self


class CouponResponse(CouponBase):
    model_config = ConfigDict(from_attributes=True)

    id_coupon: int
    used_count: int


class CouponValidateRequest(BaseModel):
    code: str = PydanticField(..., min_length=1)
    amount: Decimal = PydanticField(..., ge=0)
    item_type: Optional[str] = None
    item_id: Optional[str] = None


class CouponValidationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    valid: bool
    code: str
    discount: Decimal
    final_amount: Optional[Decimal] = None
    error: Optional[str] = None
