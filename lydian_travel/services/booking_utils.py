"""Pure helpers shared by the booking flows.

Everything here is deterministic: functions that depend on the current time
accept an optional ``now`` so callers (and tests) can pin the clock.
"""

from __future__ import annotations

import secrets
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Optional, Union

REFERENCE_PREFIX = "BK-"
REFERENCE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
REFERENCE_LENGTH = 6
MAX_REFERENCE_ATTEMPTS = 10

_CENT = Decimal("0.01")

Number = Union[int, float, Decimal, str]

_MONTHS = {
    "tr": [
        "Ocak", "Şubat", "Mart", "Nisan", "Mayıs", "Haziran",
        "Temmuz", "Ağustos", "Eylül", "Ekim", "Kasım", "Aralık",
    ],
    "en": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
}
_WEEKDAYS = {
    "tr": ["Pazartesi", "Salı", "Çarşamba", "Perşembe", "Cuma", "Cumartesi", "Pazar"],
    "en": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_money(value: Number) -> Decimal:
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def generate_booking_reference(
    exists: Callable[[str], bool],
    *,
    max_attempts: int = MAX_REFERENCE_ATTEMPTS,
) -> str:
    """Return a ``BK-XXXXXX`` reference that ``exists`` reports as unused."""
    for _ in range(max_attempts):
        code = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_LENGTH))
        reference = f"{REFERENCE_PREFIX}{code}"
        if not exists(reference):
            return reference
    raise RuntimeError("Could not generate a unique booking reference")


def calculate_nights(check_in: datetime, check_out: datetime) -> int:
    delta = ensure_utc(check_out) - ensure_utc(check_in)
    return max(0, delta.days)


@dataclass(frozen=True)
class PriceBreakdown:
    base_price: Decimal
    quantity: int
    subtotal: Decimal
    tax: Decimal
    service_fee: Decimal
    cleaning_fee: Decimal
    total_price: Decimal

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)


def calculate_booking_price(
    base_price: Number,
    quantity: int,
    tax_rate: Number = Decimal("0.08"),
    service_fee_rate: Number = Decimal("0.05"),
    cleaning_fee: Number = 0,
) -> PriceBreakdown:
    base = to_money(base_price)
    if quantity <= 0:
        zero = to_money(0)
        return PriceBreakdown(base, 0, zero, zero, zero, zero, zero)

    subtotal = to_money(base * quantity)
    tax = to_money(subtotal * Decimal(str(tax_rate)))
    service_fee = to_money(subtotal * Decimal(str(service_fee_rate)))
    cleaning = to_money(cleaning_fee)
    total = to_money(subtotal + tax + service_fee + cleaning)
    return PriceBreakdown(base, quantity, subtotal, tax, service_fee, cleaning, total)


def _add_one_year(value: datetime) -> datetime:
    try:
        return value.replace(year=value.year + 1)
    except ValueError:
        # 29 February rolls over to 28 February
        return value.replace(year=value.year + 1, day=28)


def validate_booking_dates(
    check_in: datetime,
    check_out: datetime,
    *,
    now: Optional[datetime] = None,
) -> Optional[str]:
    """Return an error message for an invalid stay, or ``None`` when it is valid."""
    current = ensure_utc(now) if now is not None else utcnow()
    check_in = ensure_utc(check_in)
    check_out = ensure_utc(check_out)

    start_of_today = current.replace(hour=0, minute=0, second=0, microsecond=0)
    if check_in < start_of_today:
        return "Check-in date cannot be in the past"
    if check_out <= check_in:
        return "Check-out date must be after check-in date"
    if check_in > _add_one_year(current):
        return "Bookings can only be made up to 1 year in advance"
    return None


def get_cancellation_deadline(check_in: datetime, hours: int = 24) -> datetime:
    return ensure_utc(check_in) - timedelta(hours=hours)


def can_cancel_booking(
    check_in: datetime,
    hours: int = 24,
    *,
    now: Optional[datetime] = None,
) -> bool:
    current = ensure_utc(now) if now is not None else utcnow()
    return current <= get_cancellation_deadline(check_in, hours)


@dataclass(frozen=True)
class RefundQuote:
    refund_amount: Decimal
    refund_percentage: int


def calculate_refund(
    total_amount: Number,
    check_in: datetime,
    free_cancellation_hours: int = 24,
    partial_refund_hours: int = 12,
    partial_refund_percentage: int = 50,
    *,
    now: Optional[datetime] = None,
) -> RefundQuote:
    current = ensure_utc(now) if now is not None else utcnow()
    hours_until = (ensure_utc(check_in) - current).total_seconds() / 3600

    if hours_until >= free_cancellation_hours:
        percentage = 100
    elif hours_until >= partial_refund_hours:
        percentage = partial_refund_percentage
    else:
        percentage = 0

    amount = to_money(Decimal(str(total_amount)) * percentage / 100)
    return RefundQuote(refund_amount=amount, refund_percentage=percentage)


def format_booking_date(value: Union[date, datetime], locale: str = "tr") -> str:
    """Render a long date such as ``15 Mart 2025 Cumartesi`` or ``Saturday, March 15, 2025``."""
    lang = "en" if locale.lower().startswith("en") else "tr"
    month = _MONTHS[lang][value.month - 1]
    weekday = _WEEKDAYS[lang][value.weekday()]
    if lang == "en":
        return f"{weekday}, {month} {value.day}, {value.year}"
    return f"{value.day} {month} {value.year} {weekday}"
