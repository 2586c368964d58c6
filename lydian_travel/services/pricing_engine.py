"""Dynamic pricing and reservation rules for tours, hotels and packages."""

from __future__ import annotations

import secrets
import string
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from lydian_travel.services.booking_utils import ensure_utc, utcnow

ITEM_TYPES = ("tour", "hotel", "package")

_HIGH_SEASON_MONTHS = {6, 7, 8, 12, 1, 2}
_MID_SEASON_MONTHS = {3, 4, 5, 9, 10, 11}

ADVANCE_BOOKING_DISCOUNTS: Tuple[Tuple[int, float], ...] = (
    (90, 0.25),
    (60, 0.20),
    (30, 0.15),
    (14, 0.10),
    (7, 0.05),
)
GROUP_SIZE_DISCOUNTS: Tuple[Tuple[int, float], ...] = (
    (10, 0.15),
    (6, 0.10),
    (4, 0.05),
)
# (month, day) pairs: New Year, 23 April, 29 October
SPECIAL_EVENT_DAYS = {(1, 1), (4, 23), (10, 29)}

TAX_RATE = 0.18
SERVICE_FEE_RATE = 0.03
SERVICE_FEE_CAP = 100
PRICE_VALIDITY = timedelta(hours=24)


@dataclass(frozen=True)
class PricingRequest:
    item_type: str
    check_in_date: datetime
    adults: int = 1
    children: int = 0
    check_out_date: Optional[datetime] = None

    @property
    def group_size(self) -> int:
        return self.adults + self.children


@dataclass(frozen=True)
class Availability:
    available: int = 10
    capacity: int = 20

    @property
    def occupancy_rate(self) -> float:
        if self.capacity <= 0:
            return 1.0
        return 1 - (self.available / self.capacity)


@dataclass(frozen=True)
class PricingFactors:
    season_multiplier: float
    demand_multiplier: float
    advance_booking_discount: float
    group_size_discount: float
    day_of_week_multiplier: float
    weather_impact: float
    special_event_multiplier: float
    availability_scarcity: float


@dataclass(frozen=True)
class PriceAdjustments:
    base_price: int
    seasonal_adjustment: int
    demand_adjustment: int
    advance_booking_discount: int
    group_discount: int
    weekend_surcharge: int
    taxes: int
    service_fee: int


@dataclass(frozen=True)
class PricingResult:
    base_price: float
    final_price: int
    discount: int
    factors: PricingFactors
    breakdown: PriceAdjustments
    currency: str
    valid_until: datetime

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)


def _round(value: float) -> int:
    # Half values round up, matching how prices are quoted to customers
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


class PricingEngine:
    """Compute a quoted price from a base price and booking circumstances."""

    @classmethod
    def calculate_dynamic_price(
        cls,
        base_price: float,
        request: PricingRequest,
        availability: Optional[Availability] = None,
        *,
        now: Optional[datetime] = None,
        currency: str = "TRY",
    ) -> PricingResult:
        current = ensure_utc(now) if now is not None else utcnow()
        factors = cls.calculate_factors(request, availability, now=current)
        breakdown = cls.calculate_breakdown(base_price, factors)

        final_price = _round(
            breakdown.base_price
            + breakdown.seasonal_adjustment
            + breakdown.demand_adjustment
            - breakdown.advance_booking_discount
            - breakdown.group_discount
            + breakdown.weekend_surcharge
            + breakdown.taxes
            + breakdown.service_fee
        )

        return PricingResult(
            base_price=base_price,
            final_price=final_price,
            discount=breakdown.advance_booking_discount + breakdown.group_discount,
            factors=factors,
            breakdown=breakdown,
            currency=currency,
            valid_until=current + PRICE_VALIDITY,
        )

    @classmethod
    def calculate_factors(
        cls,
        request: PricingRequest,
        availability: Optional[Availability] = None,
        *,
        now: Optional[datetime] = None,
    ) -> PricingFactors:
        check_in = ensure_utc(request.check_in_date)
        current = ensure_utc(now) if now is not None else utcnow()
        return PricingFactors(
            season_multiplier=cls.season_multiplier(check_in),
            demand_multiplier=cls.demand_multiplier(availability),
            advance_booking_discount=cls.advance_booking_discount(check_in, now=current),
            group_size_discount=cls.group_size_discount(request.group_size),
            day_of_week_multiplier=cls.day_of_week_multiplier(check_in),
            weather_impact=cls.weather_impact(check_in, request.item_type),
            special_event_multiplier=cls.special_event_multiplier(check_in),
            availability_scarcity=cls.availability_scarcity(availability),
        )

    @staticmethod
    def calculate_breakdown(base_price: float, factors: PricingFactors) -> PriceAdjustments:
        seasonal = base_price * (factors.season_multiplier - 1)
        demand = base_price * (factors.demand_multiplier - 1)
        advance = base_price * factors.advance_booking_discount
        group = base_price * factors.group_size_discount
        weekend = base_price * (factors.day_of_week_multiplier - 1)

        subtotal = base_price + seasonal + demand + weekend
        taxes = subtotal * TAX_RATE
        service_fee = min(subtotal * SERVICE_FEE_RATE, SERVICE_FEE_CAP)

        return PriceAdjustments(
            base_price=_round(base_price),
            seasonal_adjustment=_round(seasonal),
            demand_adjustment=_round(demand),
            advance_booking_discount=_round(advance),
            group_discount=_round(group),
            weekend_surcharge=_round(weekend),
            taxes=_round(taxes),
            service_fee=_round(service_fee),
        )

    @staticmethod
    def season_multiplier(check_in: datetime) -> float:
        if check_in.month in _HIGH_SEASON_MONTHS:
            return 1.3
        if check_in.month in _MID_SEASON_MONTHS:
            return 1.1
        return 0.9

    @staticmethod
    def demand_multiplier(availability: Optional[Availability]) -> float:
        if availability is None:
            return 1.0
        occupancy = availability.occupancy_rate
        if occupancy > 0.9:
            return 1.4
        if occupancy > 0.7:
            return 1.2
        if occupancy > 0.5:
            return 1.1
        return 1.0

    @staticmethod
    def advance_booking_discount(check_in: datetime, *, now: datetime) -> float:
        days_in_advance = (check_in - now).days
        for days, discount in ADVANCE_BOOKING_DISCOUNTS:
            if days_in_advance >= days:
                return discount
        return 0.0

    @staticmethod
    def group_size_discount(group_size: int) -> float:
        for min_size, discount in GROUP_SIZE_DISCOUNTS:
            if group_size >= min_size:
                return discount
        return 0.0

    @staticmethod
    def day_of_week_multiplier(check_in: datetime) -> float:
        # Friday, Saturday, Sunday
        if check_in.weekday() in (4, 5, 6):
            return 1.2
        return 1.0

    @staticmethod
    def weather_impact(check_in: datetime, item_type: str) -> float:
        if item_type == "tour" and check_in.month == 2:
            return 0.9
        return 1.0

    @staticmethod
    def special_event_multiplier(check_in: datetime) -> float:
        if (check_in.month, check_in.day) in SPECIAL_EVENT_DAYS:
            return 1.5
        return 1.0

    @staticmethod
    def availability_scarcity(availability: Optional[Availability]) -> float:
        if availability is None:
            return 1.0
        occupancy = availability.occupancy_rate
        if occupancy > 0.95:
            return 1.3
        if occupancy > 0.85:
            return 1.2
        if occupancy > 0.7:
            return 1.1
        return 1.0


@dataclass(frozen=True)
class CancellationFee:
    days: int
    fee_percentage: int


@dataclass(frozen=True)
class CancellationPolicy:
    item_type: str
    free_cancellation_days: int
    free_cancellation_until: datetime
    fees: Sequence[CancellationFee] = field(default_factory=tuple)


_POLICY_TABLE: Dict[str, Tuple[int, Tuple[Tuple[int, int], ...]]] = {
    "tour": (2, ((1, 50), (0, 100))),
    "hotel": (3, ((2, 25), (1, 50), (0, 100))),
    "package": (7, ((5, 25), (3, 50), (1, 75), (0, 100))),
}

_BASE36 = string.digits + string.ascii_uppercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: List[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


class ReservationManager:
    @staticmethod
    def generate_confirmation_code(*, now: Optional[datetime] = None) -> str:
        current = ensure_utc(now) if now is not None else utcnow()
        timestamp = _to_base36(int(current.timestamp() * 1000))
        random_part = "".join(secrets.choice(_BASE36) for _ in range(4))
        return f"TA-{timestamp}-{random_part}"

    @staticmethod
    def cancellation_policy(check_in: datetime, item_type: str) -> CancellationPolicy:
        policy_type = item_type if item_type in _POLICY_TABLE else "tour"
        free_days, fees = _POLICY_TABLE[policy_type]
        return CancellationPolicy(
            item_type=policy_type,
            free_cancellation_days=free_days,
            free_cancellation_until=ensure_utc(check_in) - timedelta(days=free_days),
            fees=tuple(CancellationFee(days, pct) for days, pct in fees),
        )

    @staticmethod
    def calculate_cancellation_fee(
        final_price: float,
        check_in: datetime,
        policy: CancellationPolicy,
        *,
        cancelled_at: Optional[datetime] = None,
    ) -> int:
        current = ensure_utc(cancelled_at) if cancelled_at is not None else utcnow()
        if current <= policy.free_cancellation_until:
            return 0

        days_until = (ensure_utc(check_in) - current).days
        for fee in policy.fees:
            if days_until >= fee.days:
                return _round(final_price * fee.fee_percentage / 100)

        highest = max(fee.fee_percentage for fee in policy.fees)
        return _round(final_price * highest / 100)
