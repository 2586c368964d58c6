from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from lydian_travel.services.booking_utils import (
    REFERENCE_ALPHABET,
    calculate_booking_price,
    calculate_nights,
    calculate_refund,
    can_cancel_booking,
    ensure_utc,
    format_booking_date,
    generate_booking_reference,
    get_cancellation_deadline,
    validate_booking_dates,
)

NOW = datetime(2025, 3, 10, 9, 30, tzinfo=timezone.utc)


def test_reference_uses_prefix_and_unambiguous_alphabet():
    reference = generate_booking_reference(lambda _: False)

    assert reference.startswith("BK-")
    assert len(reference) == 9
    assert all(char in REFERENCE_ALPHABET for char in reference[3:])


def test_reference_retries_until_unused():
    seen = []

    def exists(reference):
        seen.append(reference)
        return len(seen) < 3

    reference = generate_booking_reference(exists)

    assert len(seen) == 3
    assert reference == seen[-1]


def test_reference_gives_up_after_max_attempts():
    with pytest.raises(RuntimeError):
        generate_booking_reference(lambda _: True)


def test_nights_are_whole_days_and_never_negative():
    check_in = datetime(2025, 6, 1, 15, tzinfo=timezone.utc)

    assert calculate_nights(check_in, check_in + timedelta(days=3, hours=20)) == 3
    assert calculate_nights(check_in, check_in - timedelta(days=2)) == 0


def test_booking_price_breakdown():
    price = calculate_booking_price(Decimal("1000"), 3, cleaning_fee=Decimal("150"))

    assert price.subtotal == Decimal("3000.00")
    assert price.tax == Decimal("240.00")
    assert price.service_fee == Decimal("150.00")
    assert price.cleaning_fee == Decimal("150.00")
    assert price.total_price == Decimal("3540.00")


def test_booking_price_rounds_each_component():
    price = calculate_booking_price("99.99", 1, tax_rate="0.085", service_fee_rate="0.05")

    assert price.tax == Decimal("8.50")
    assert price.service_fee == Decimal("5.00")
    assert price.total_price == Decimal("113.49")


def test_zero_quantity_zeroes_everything_including_cleaning():
    price = calculate_booking_price(500, 0, cleaning_fee=200)

    assert price.quantity == 0
    assert price.cleaning_fee == Decimal("0.00")
    assert price.total_price == Decimal("0.00")


@pytest.mark.parametrize(
    "check_in, check_out, expected",
    [
        (NOW - timedelta(days=1), NOW + timedelta(days=1), "Check-in date cannot be in the past"),
        (NOW + timedelta(days=2), NOW + timedelta(days=2), "Check-out date must be after check-in date"),
        (
            NOW + timedelta(days=367),
            NOW + timedelta(days=370),
            "Bookings can only be made up to 1 year in advance",
        ),
        (NOW.replace(hour=0), NOW + timedelta(days=1), None),
        (NOW.replace(year=2026), NOW.replace(year=2026) + timedelta(days=1), None),
    ],
)
def test_validate_booking_dates(check_in, check_out, expected):
    assert validate_booking_dates(check_in, check_out, now=NOW) == expected


def test_naive_datetimes_are_treated_as_utc():
    assert ensure_utc(datetime(2025, 1, 1, 12)) == datetime(2025, 1, 1, 12, tzinfo=timezone.utc)


def test_cancellation_deadline_and_window():
    check_in = NOW + timedelta(hours=30)

    assert get_cancellation_deadline(check_in) == NOW + timedelta(hours=6)
    assert can_cancel_booking(check_in, now=NOW)
    assert not can_cancel_booking(check_in, hours=48, now=NOW)


@pytest.mark.parametrize(
    "hours_until, percentage, amount",
    [
        (24, 100, Decimal("1000.00")),
        (23, 50, Decimal("500.00")),
        (12, 50, Decimal("500.00")),
        (11, 0, Decimal("0.00")),
    ],
)
def test_refund_tiers(hours_until, percentage, amount):
    refund = calculate_refund(1000, NOW + timedelta(hours=hours_until), now=NOW)

    assert refund.refund_percentage == percentage
    assert refund.refund_amount == amount


def test_format_booking_date_locales():
    value = datetime(2025, 3, 15)

    assert format_booking_date(value, "tr") == "15 Mart 2025 Cumartesi"
    assert format_booking_date(value, "en-US") == "Saturday, March 15, 2025"
