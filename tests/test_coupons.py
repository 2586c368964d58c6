from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from lydian_travel.models.coupon import Coupon
from lydian_travel.services.coupon_service import check_coupon

from .conftest import API

NOW = datetime(2024, 7, 15, tzinfo=timezone.utc)


def _coupon(**fields):
    values = {
        "code": "WELCOME10",
        "type": "percentage",
        "value": Decimal("10"),
        "min_amount": Decimal("500"),
        "max_discount": None,
        "valid_from": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "valid_until": datetime(2024, 12, 31, tzinfo=timezone.utc),
        "usage_limit": 1000,
        "used_count": 0,
        "applicable_items": None,
        "applicable_categories": None,
    }
    values.update(fields)
    return Coupon(**values)


@pytest.fixture
def live_coupon(db_session):
    now = datetime.now(timezone.utc)
    coupon = _coupon(
        code="YAZ15",
        value=Decimal("15"),
        max_discount=Decimal("300"),
        valid_from=now - timedelta(days=1),
        valid_until=now + timedelta(days=30),
        usage_limit=1,
    )
    db_session.add(coupon)
    db_session.commit()
    return coupon


def test_percentage_discount():
    result = check_coupon(_coupon(), "welcome10", Decimal("1000"), now=NOW)

    assert result.valid
    assert result.code == "WELCOME10"
    assert result.discount == Decimal("100.00")
    assert result.final_amount == Decimal("900.00")


def test_percentage_discount_is_capped():
    coupon = _coupon(code="EARLYBIRD", value=Decimal("20"), max_discount=Decimal("500"))

    result = check_coupon(coupon, "EARLYBIRD", Decimal("4000"), now=NOW)

    assert result.discount == Decimal("500.00")


def test_fixed_discount_never_exceeds_amount():
    coupon = _coupon(type="fixed_amount", value=Decimal("200"), min_amount=None)

    result = check_coupon(coupon, "X", Decimal("150"), now=NOW)

    assert result.discount == Decimal("150.00")
    assert result.final_amount == Decimal("0.00")


@pytest.mark.parametrize(
    "fields, kwargs, error",
    [
        ({"valid_until": datetime(2024, 7, 1, tzinfo=timezone.utc)}, {}, "Coupon has expired"),
        ({"valid_from": datetime(2024, 8, 1, tzinfo=timezone.utc)}, {}, "Coupon has expired"),
        ({"used_count": 1000}, {}, "Coupon usage limit reached"),
        ({"applicable_items": ["villa-1"]}, {"item_id": "villa-2"}, "Coupon is not valid for this item"),
        ({"applicable_categories": ["tour"]}, {"item_type": "hotel"}, "Coupon is not valid for this category"),
    ],
)
def test_coupon_rules(fields, kwargs, error):
    result = check_coupon(_coupon(**fields), "WELCOME10", Decimal("1000"), now=NOW, **kwargs)

    assert not result.valid
    assert result.error == error


def test_minimum_amount_message():
    result = check_coupon(_coupon(), "WELCOME10", Decimal("499.99"), now=NOW)

    assert result.error == "Minimum booking amount of 500 TRY required"


def test_unknown_coupon():
    result = check_coupon(None, " nope ", Decimal("100"), now=NOW)

    assert result.error == "Invalid coupon code"
    assert result.code == "NOPE"


def test_validate_endpoint_is_case_insensitive(client, live_coupon):
    response = client.post(f"{API}/coupons/validate", json={"code": "yaz15", "amount": "1000"})

    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert body["discount"] == "150.00"
    assert body["final_amount"] == "850.00"


def test_validate_endpoint_reports_invalid_codes(client):
    response = client.post(f"{API}/coupons/validate", json={"code": "YOK", "amount": "1000"})

    assert response.status_code == 200
    assert response.json()["valid"] is False
    assert response.json()["error"] == "Invalid coupon code"


def test_redeem_consumes_usage(client, db_session, traveler_headers, live_coupon):
    first = client.post(f"{API}/coupons/redeem", json={"code": "YAZ15", "amount": "3000"}, headers=traveler_headers)
    second = client.post(f"{API}/coupons/redeem", json={"code": "YAZ15", "amount": "3000"}, headers=traveler_headers)

    assert first.status_code == 200
    assert first.json()["discount"] == "300.00"
    assert second.status_code == 400
    assert second.json()["detail"] == "Coupon usage limit reached"
    db_session.refresh(live_coupon)
    assert live_coupon.used_count == 1


def test_redeem_requires_login(client, live_coupon):
    response = client.post(f"{API}/coupons/redeem", json={"code": "YAZ15", "amount": "3000"})

    assert response.status_code == 401


def test_admin_creates_and_lists_coupons(client, admin_headers):
    payload = {
        "code": "kis2025",
        "type": "fixed_amount",
        "value": "250",
        "valid_from": "2025-12-01T00:00:00Z",
        "valid_until": "2026-02-28T00:00:00Z",
    }

    created = client.post(f"{API}/coupons", json=payload, headers=admin_headers)
    duplicate = client.post(f"{API}/coupons", json={**payload, "code": "KIS2025"}, headers=admin_headers)
    listed = client.get(f"{API}/coupons", headers=admin_headers)

    assert created.status_code == 201
    assert created.json()["code"] == "KIS2025"
    assert created.json()["used_count"] == 0
    assert duplicate.status_code == 409
    assert [coupon["code"] for coupon in listed.json()] == ["KIS2025"]


def test_coupon_create_validation(client, admin_headers):
    response = client.post(
        f"{API}/coupons",
        json={
            "code": "FAZLA",
            "type": "percentage",
            "value": "150",
            "valid_from": "2025-01-01T00:00:00Z",
            "valid_until": "2025-02-01T00:00:00Z",
        },
        headers=admin_headers,
    )

    assert response.status_code == 422


def test_coupon_admin_only(client, traveler_headers):
    assert client.get(f"{API}/coupons", headers=traveler_headers).status_code == 403
