from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField


class TierBenefitResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tier: str
    name: str
    required_miles: int
    discount_percentage: int
    earn_multiplier: float
    priority_support: bool
    early_access: bool
    birthday_bonus: int
    referral_bonus: int
    benefits: List[str]


class TierProgressResponse(BaseModel):
    current_tier: TierBenefitResponse
    next_tier: Optional[TierBenefitResponse] = None
    progress: float
    miles_needed: int


class MilesSummaryResponse(BaseModel):
    available_miles: int
    used_miles: int
    lifetime_earned: int
    lifetime_spent: int
    tier: str
    tier_name: str
    referral_code: str
    miles_value: Decimal
    formatted_miles: str
    expiring_miles: int
    expiring_date: Optional[datetime] = None


class MilesTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_transaction: int
    id_booking: Optional[int] = None
    type: str
    amount: int
    balance_after: int
    description: str
    expiry_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class RedeemMilesRequest(BaseModel):
    miles: int = PydanticField(..., gt=0)


class RedeemMilesResponse(BaseModel):
    miles_redeemed: int
    discount_value: Decimal
    available_miles: int


class ReferralRequest(BaseModel):
    referral_code: str = PydanticField(..., min_length=8, max_length=8)


class ReferralResponse(BaseModel):
    referrer_bonus: int
    referred_bonus: int
    available_miles: int
