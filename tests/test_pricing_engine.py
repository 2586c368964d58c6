import re
from datetime import datetime, timedelta, timezone

import pytest

from lydian_travel.services.pricing_engine import (
    Availability,
    PricingEngine,
    PricingRequest,
    ReservationManager,
)

from .conftest import API

NOW = datetime(2025, 5, 1, tzinfo=timezone.utc)
SUMMER_SATURDAY = datetime(2025, 7, 5, tzinfo=timezone.utc)


def test_dynamic_price_combines_every_adjustment():
    result = PricingEngine.calculate_dynamic_price(
        1000,
        PricingRequest(item_type="hotel", check_in_date=SUMMER_SATURDAY, adults=2, children=2),
        Availability(available=10, capacity=20),
        now=NOW,
    )

    breakdown = result.breakdown
    assert breakdown.seasonal_adjustment == 300
    assert breakdown.demand_adjustment == 0
    assert breakdown.advance_booking_discount == 200
    assert breakdown.group_discount == 50
    assert breakdown.weekend_surcharge == 200
    assert breakdown.taxes == 270
    assert breakdown.service_fee == 45
    assert result.final_price == 1565
    assert result.discount == 250
    assert result.valid_until == datetime(2025, 5, 2, tzinfo=timezone.utc)


def test_service_fee_is_capped():
    breakdown = PricingEngine.calculate_breakdown(
        10000,
        PricingEngine.calculate_factors(
            PricingRequest(item_type="tour", check_in_date=datetime(2025, 5, 7, tzinfo=timezone.utc)),
            now=NOW,
        ),
    )

    assert breakdown.service_fee == 100


@pytest.mark.parametrize(
    "available, demand, scarcity",
    [(10, 1.0, 1.0), (8, 1.1, 1.0), (5, 1.2, 1.1), (2, 1.2, 1.2), (1, 1.4, 1.2), (0, 1.4, 1.3)],
)
def test_availability_factors(available, demand, scarcity):
    availability = Availability(available=available, capacity=20)

    assert PricingEngine.demand_multiplier(availability) == demand
    assert PricingEngine.availability_scarcity(availability) == scarcity


@pytest.mark.parametrize(
    "days_ahead, discount",
    [(3, 0.0), (7, 0.05), (14, 0.10), (45, 0.15), (60, 0.20), (120, 0.25)],
)
def test_advance_booking_discount(days_ahead, discount):
    check_in = NOW + timedelta(days=days_ahead)

    assert PricingEngine.advance_booking_discount(check_in, now=NOW) == discount


@pytest.mark.parametrize("group, discount", [(1, 0.0), (4, 0.05), (6, 0.10), (12, 0.15)])
def test_group_size_discount(group, discount):
    assert PricingEngine.group_size_discount(group) == discount


def test_calendar_factors():
    republic_day = datetime(2025, 10, 29, tzinfo=timezone.utc)
    february_tour = datetime(2025, 2, 12, tzinfo=timezone.utc)

    assert PricingEngine.special_event_multiplier(republic_day) == 1.5
    assert PricingEngine.weather_impact(february_tour, "tour") == 0.9
    assert PricingEngine.weather_impact(february_tour, "hotel") == 1.0
    assert PricingEngine.season_multiplier(february_tour) == 1.3
    assert PricingEngine.season_multiplier(republic_day) == 1.1
    assert PricingEngine.day_of_week_multiplier(datetime(2025, 7, 7, tzinfo=timezone.utc)) == 1.0


def test_cancellation_policies():
    check_in = datetime(2025, 7, 10, tzinfo=timezone.utc)

    hotel = ReservationManager.cancellation_policy(check_in, "hotel")
    fallback = ReservationManager.cancellation_policy(check_in, "cruise")

    assert hotel.free_cancellation_days == 3
    assert hotel.free_cancellation_until == datetime(2025, 7, 7, tzinfo=timezone.utc)
    assert [(fee.days, fee.fee_percentage) for fee in hotel.fees] == [(2, 25), (1, 50), (0, 100)]
    assert fallback.item_type == "tour"


@pytest.mark.parametrize(
    "cancelled_at, fee",
    [
        (datetime(2025, 7, 5, tzinfo=timezone.utc), 0),
        (datetime(2025, 7, 7, 12, tzinfo=timezone.utc), 250),
        (datetime(2025, 7, 8, 12, tzinfo=timezone.utc), 500),
        (datetime(2025, 7, 9, 12, tzinfo=timezone.utc), 1000),
    ],
)
def test_hotel_cancellation_fee(cancelled_at, fee):
    check_in = datetime(2025, 7, 10, tzinfo=timezone.utc)
    policy = ReservationManager.cancellation_policy(check_in, "hotel")

    assert ReservationManager.calculate_cancellation_fee(1000, check_in, policy, cancelled_at=cancelled_at) == fee


def test_confirmation_code_format():
    code = ReservationManager.generate_confirmation_code(now=NOW)

    assert re.fullmatch(r"TA-[0-9A-Z]+-[0-9A-Z]{4}", code)


def test_dynamic_price_endpoint(client):
    response = client.post(
        f"{API}/pricing/dynamic",
        json={
            "base_price": 1000,
            "item_type": "tour",
            "check_in_date": SUMMER_SATURDAY.isoformat(),
            "adults": 2,
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["currency"] == "TRY"
    assert body["factors"]["season_multiplier"] == 1.3
    assert body["breakdown"]["base_price"] == 1000


def test_dynamic_price_rejects_impossible_availability(client):
    response = client.post(
        f"{API}/pricing/dynamic",
        json={
            "base_price": 1000,
            "item_type": "hotel",
            "check_in_date": SUMMER_SATURDAY.isoformat(),
            "available": 30,
            "capacity": 20,
        },
    )

    assert response.status_code == 422


def test_cancellation_quote_endpoint(client):
    response = client.post(
        f"{API}/pricing/cancellation",
        json={
            "item_type": "package",
            "final_price": 2000,
            "check_in_date": "2025-07-10T00:00:00+00:00",
            "cancelled_at": "2025-07-06T12:00:00+00:00",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["free_cancellation_days"] == 7
    assert body["cancellation_fee"] == 1000
    assert body["refund_amount"] == 1000
    assert body["confirmation_code"].startswith("TA-")
