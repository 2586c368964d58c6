"""Lydian Miles tier and earning rules."""

from __future__ import annotations

import math
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from lydian_travel.services.booking_utils import ensure_utc, utcnow

MILES_PER_UNIT = 1000
UNIT_VALUE_TRY = 50
MINIMUM_REDEMPTION = 100
REDEMPTION_STEP = 100
FIRST_BOOKING_BONUS = 500
REFERRED_WELCOME_BONUS = 500
HIGH_VALUE_REFERRAL_AMOUNT = 5000
HIGH_VALUE_REFERRAL_EXTRA = 200
MILES_VALIDITY_YEARS = 2
EXPIRY_WARNING_DAYS = 90
REFERRAL_PREFIX = "AIL"
REFERRAL_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


@dataclass(frozen=True)
class TierBenefit:
    tier: str
    name: str
    required_miles: int
    discount_percentage: int
    earn_multiplier: float
    priority_support: bool
    early_access: bool
    birthday_bonus: int
    referral_bonus: int
    benefits: Tuple[str, ...] = field(default_factory=tuple)


TIER_BENEFITS = {
    "standard": TierBenefit(
        tier="standard",
        name="Standart Üye",
        required_miles=0,
        discount_percentage=0,
        earn_multiplier=1.0,
        priority_support=False,
        early_access=False,
        birthday_bonus=100,
        referral_bonus=200,
        benefits=("Her ₺1 harcamaya 1 Mile", "Doğum günü bonusu: 100 Miles"),
    ),
    "silver": TierBenefit(
        tier="silver",
        name="Silver Üye",
        required_miles=1000,
        discount_percentage=2,
        earn_multiplier=1.1,
        priority_support=False,
        early_access=False,
        birthday_bonus=250,
        referral_bonus=300,
        benefits=("%2 üye indirimi", "%10 ek Miles", "Doğum günü bonusu: 250 Miles"),
    ),
    "gold": TierBenefit(
        tier="gold",
        name="Gold Üye",
        required_miles=5000,
        discount_percentage=5,
        earn_multiplier=1.25,
        priority_support=True,
        early_access=True,
        birthday_bonus=500,
        referral_bonus=500,
        benefits=("%5 üye indirimi", "%25 ek Miles", "Öncelikli destek"),
    ),
    "vip": TierBenefit(
        tier="vip",
        name="VIP Üye",
        required_miles=10000,
        discount_percentage=10,
        earn_multiplier=1.5,
        priority_support=True,
        early_access=True,
        birthday_bonus=1000,
        referral_bonus=1000,
        benefits=("%10 üye indirimi", "%50 ek Miles", "Süresiz Miles"),
    ),
}

TIER_ORDER = ("standard", "silver", "gold", "vip")


def calculate_tier(lifetime_earned: int) -> TierBenefit:
    for tier in reversed(TIER_ORDER):
        if lifetime_earned >= TIER_BENEFITS[tier].required_miles:
            return TIER_BENEFITS[tier]
    return TIER_BENEFITS["standard"]


@dataclass(frozen=True)
class TierProgress:
    current_tier: TierBenefit
    next_tier: Optional[TierBenefit]
    progress: float
    miles_needed: int


def calculate_tier_progress(lifetime_earned: int) -> TierProgress:
    current = calculate_tier(lifetime_earned)
    position = TIER_ORDER.index(current.tier)
    if position == len(TIER_ORDER) - 1:
        return TierProgress(current, None, 100.0, 0)

    upcoming = TIER_BENEFITS[TIER_ORDER[position + 1]]
    span = upcoming.required_miles - current.required_miles
    progress = (lifetime_earned - current.required_miles) / span * 100
    return TierProgress(
        current_tier=current,
        next_tier=upcoming,
        progress=round(min(100.0, max(0.0, progress)), 2),
        miles_needed=max(0, upcoming.required_miles - lifetime_earned),
    )


@dataclass(frozen=True)
class MilesEarned:
    base_miles: int
    bonus_miles: int
    total_miles: int
    bonus_reasons: List[str]


def calculate_miles_earned(
    booking_amount: float | Decimal,
    tier: str,
    is_first_booking: bool = False,
) -> MilesEarned:
    base_miles = math.floor(booking_amount)
    bonus_miles = 0
    reasons: List[str] = []

    if is_first_booking:
        bonus_miles += FIRST_BOOKING_BONUS
        reasons.append(f"İlk rezervasyon bonusu: +{FIRST_BOOKING_BONUS} Miles")

    benefit = TIER_BENEFITS[tier]
    if benefit.earn_multiplier > 1.0:
        tier_bonus = math.floor(base_miles * (benefit.earn_multiplier - 1.0) + 1e-9)
        bonus_miles += tier_bonus
        reasons.append(f"{benefit.name} bonusu: +{tier_bonus} Miles")

    return MilesEarned(base_miles, bonus_miles, base_miles + bonus_miles, reasons)


def calculate_miles_value(miles: int) -> Decimal:
    return (Decimal(miles) / MILES_PER_UNIT * UNIT_VALUE_TRY).quantize(Decimal("0.01"))


def calculate_miles_for_discount(discount_amount: float | Decimal) -> int:
    return math.ceil(Decimal(str(discount_amount)) / UNIT_VALUE_TRY * MILES_PER_UNIT)


def validate_miles_redemption(
    available_miles: int,
    requested_miles: int,
    minimum_miles: int = MINIMUM_REDEMPTION,
) -> Optional[str]:
    """Return an error message when the redemption is not allowed."""
    if requested_miles < minimum_miles:
        return f"Minimum {minimum_miles} Miles kullanabilirsiniz"
    if requested_miles > available_miles:
        return f"Yetersiz Miles. Kullanılabilir: {available_miles} Miles"
    if requested_miles % REDEMPTION_STEP != 0:
        return "Miles 100'ün katı olmalıdır"
    return None


def calculate_miles_expiry(earned_at: datetime, tier: str) -> Optional[datetime]:
    if tier == "vip":
        return None
    earned_at = ensure_utc(earned_at)
    try:
        return earned_at.replace(year=earned_at.year + MILES_VALIDITY_YEARS)
    except ValueError:
        return earned_at.replace(year=earned_at.year + MILES_VALIDITY_YEARS, day=28)


def expiring_miles(
    entries: Iterable[Tuple[int, Optional[datetime]]],
    *,
    now: Optional[datetime] = None,
) -> Tuple[int, Optional[datetime]]:
    """Sum ``(amount, expiry)`` pairs that expire in the next 90 days."""
    current = ensure_utc(now) if now is not None else utcnow()
    horizon = current + timedelta(days=EXPIRY_WARNING_DAYS)
    amount = 0
    earliest: Optional[datetime] = None
    for miles, expiry in entries:
        expiry = ensure_utc(expiry)
        if expiry is None or not current <= expiry <= horizon:
            continue
        amount += miles
        if earliest is None or expiry < earliest:
            earliest = expiry
    return amount, earliest


def generate_referral_code() -> str:
    return REFERRAL_PREFIX + "".join(secrets.choice(REFERRAL_ALPHABET) for _ in range(5))


def calculate_referral_bonus(referrer_tier: str, referred_booking_amount: float) -> Tuple[int, int]:
    referrer_bonus = TIER_BENEFITS[referrer_tier].referral_bonus
    referred_bonus = REFERRED_WELCOME_BONUS
    if referred_booking_amount >= HIGH_VALUE_REFERRAL_AMOUNT:
        return referrer_bonus + HIGH_VALUE_REFERRAL_EXTRA, referred_bonus + HIGH_VALUE_REFERRAL_EXTRA
    return referrer_bonus, referred_bonus


def format_miles(miles: int) -> str:
    return f"{miles:,}".replace(",", ".") + " Miles"
