from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from lydian_travel.models.booking import Booking, BookingStatus, BookingType, PaymentStatus
from lydian_travel.models.loyalty import MilesAccount
from lydian_travel.services import loyalty_rules
from lydian_travel.services.loyalty_service import LoyaltyService

from .conftest import API, future


@pytest.mark.parametrize(
    "lifetime, tier",
    [(0, "standard"), (999, "standard"), (1000, "silver"), (4999, "silver"), (5000, "gold"), (10000, "vip")],
)
def test_tier_thresholds(lifetime, tier):
    assert loyalty_rules.calculate_tier(lifetime).tier == tier


def test_tier_progress_midway():
    progress = loyalty_rules.calculate_tier_progress(3000)

    assert progress.current_tier.tier == "silver"
    assert progress.next_tier.tier == "gold"
    assert progress.progress == 50.0
    assert progress.miles_needed == 2000


def test_vip_progress_is_complete():
    progress = loyalty_rules.calculate_tier_progress(25000)

    assert progress.next_tier is None
    assert progress.progress == 100.0
    assert progress.miles_needed == 0


def test_first_booking_and_tier_bonuses():
    first = loyalty_rules.calculate_miles_earned(Decimal("1234.99"), "standard", is_first_booking=True)
    gold = loyalty_rules.calculate_miles_earned(1000, "gold")

    assert (first.base_miles, first.bonus_miles, first.total_miles) == (1234, 500, 1734)
    assert (gold.base_miles, gold.bonus_miles, gold.total_miles) == (1000, 250, 1250)
    assert gold.bonus_reasons == ["Gold Üye bonusu: +250 Miles"]


def test_silver_multiplier_rounds_down():
    earned = loyalty_rules.calculate_miles_earned(1000, "silver")

    assert earned.bonus_miles == 100


def test_miles_value_conversions():
    assert loyalty_rules.calculate_miles_value(1000) == Decimal("50.00")
    assert loyalty_rules.calculate_miles_value(150) == Decimal("7.50")
    assert loyalty_rules.calculate_miles_for_discount(25) == 500


@pytest.mark.parametrize(
    "available, requested, message",
    [
        (1000, 50, "Minimum 100 Miles kullanabilirsiniz"),
        (200, 300, "Yetersiz Miles. Kullanılabilir: 200 Miles"),
        (1000, 150, "Miles 100'ün katı olmalıdır"),
        (1000, 300, None),
    ],
)
def test_redemption_rules(available, requested, message):
    assert loyalty_rules.validate_miles_redemption(available, requested) == message


def test_miles_expire_after_two_years_except_vip():
    earned_at = datetime(2024, 2, 29, 10, tzinfo=timezone.utc)

    assert loyalty_rules.calculate_miles_expiry(earned_at, "gold") == datetime(2026, 2, 28, 10, tzinfo=timezone.utc)
    assert loyalty_rules.calculate_miles_expiry(earned_at, "vip") is None


def test_expiring_miles_window():
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)
    entries = [
        (100, now + timedelta(days=30)),
        (200, now + timedelta(days=10)),
        (400, now + timedelta(days=120)),
        (800, now - timedelta(days=1)),
        (1600, None),
    ]

    assert loyalty_rules.expiring_miles(entries, now=now) == (300, now + timedelta(days=10))


def test_referral_bonus_and_codes():
    assert loyalty_rules.calculate_referral_bonus("gold", 1000) == (500, 500)
    assert loyalty_rules.calculate_referral_bonus("standard", 5000) == (400, 700)
    code = loyalty_rules.generate_referral_code()
    assert code.startswith("AIL") and len(code) == 8


def test_format_miles_uses_turkish_grouping():
    assert loyalty_rules.format_miles(1234567) == "1.234.567 Miles"


def _completed_booking(db_session, user, amount, reference):
    booking = Booking(
        booking_reference=reference,
        id_user=user.id_user,
        booking_type=BookingType.TOUR,
        status=BookingStatus.COMPLETED,
        payment_status=PaymentStatus.COMPLETED,
        total_amount=amount,
        check_in_date=future(days=-5),
    )
    db_session.add(booking)
    db_session.flush()
    return booking


def test_award_booking_is_idempotent(db_session, traveler):
    service = LoyaltyService(db_session)
    booking = _completed_booking(db_session, traveler, Decimal("800"), "BK-LOYAL1")

    first = service.award_booking(booking)
    second = service.award_booking(booking)
    db_session.commit()

    assert first.amount == 1300
    assert second is None
    account = db_session.query(MilesAccount).one()
    assert account.available_miles == 1300
    assert account.tier == "silver"


def test_second_booking_gets_tier_bonus_only(db_session, traveler):
    service = LoyaltyService(db_session)
    service.award_booking(_completed_booking(db_session, traveler, 800, "BK-LOYAL1"))

    transaction = service.award_booking(_completed_booking(db_session, traveler, 1000, "BK-LOYAL2"))

    assert transaction.amount == 1100
    assert transaction.balance_after == 2400


def test_summary_creates_account(client, traveler_headers):
    response = client.get(f"{API}/loyalty/summary", headers=traveler_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["available_miles"] == 0
    assert body["tier"] == "standard"
    assert body["tier_name"] == "Standart Üye"
    assert body["referral_code"].startswith("AIL")
    assert body["formatted_miles"] == "0 Miles"


def test_redeem_and_history(client, db_session, traveler, traveler_headers):
    LoyaltyService(db_session).award_booking(_completed_booking(db_session, traveler, 1500, "BK-LOYAL1"))
    db_session.commit()

    redeemed = client.post(f"{API}/loyalty/redeem", json={"miles": 1000}, headers=traveler_headers)
    rejected = client.post(f"{API}/loyalty/redeem", json={"miles": 5000}, headers=traveler_headers)
    history = client.get(f"{API}/loyalty/transactions", headers=traveler_headers).json()
    progress = client.get(f"{API}/loyalty/tier-progress", headers=traveler_headers).json()

    assert redeemed.status_code == 200
    assert redeemed.json() == {"miles_redeemed": 1000, "discount_value": "50.00", "available_miles": 1000}
    assert rejected.status_code == 400
    assert rejected.json()["detail"] == "Yetersiz Miles. Kullanılabilir: 1000 Miles"
    assert sorted(entry["type"] for entry in history) == ["earn", "redeem"]
    assert progress["current_tier"]["tier"] == "silver"
    assert progress["miles_needed"] == 3000


@pytest.fixture
def referrer_code(client, create_user, auth_headers):
    referrer = create_user()
    headers = auth_headers(referrer)
    code = client.get(f"{API}/loyalty/summary", headers=headers).json()["referral_code"]
    return code, headers


def test_referral_credits_both_accounts_once(client, traveler_headers, referrer_code):
    code, referrer_headers = referrer_code

    applied = client.post(f"{API}/loyalty/referrals", json={"referral_code": code}, headers=traveler_headers)
    again = client.post(f"{API}/loyalty/referrals", json={"referral_code": code}, headers=traveler_headers)

    assert applied.status_code == 200
    assert applied.json() == {"referrer_bonus": 200, "referred_bonus": 500, "available_miles": 500}
    assert again.status_code == 409
    assert again.json()["detail"] == "Referral already applied"
    assert client.get(f"{API}/loyalty/summary", headers=referrer_headers).json()["available_miles"] == 200
    history = client.get(f"{API}/loyalty/transactions", headers=traveler_headers).json()
    assert [entry["type"] for entry in history] == ["referral_welcome"]


def test_high_value_referral_adds_extra(client, db_session, traveler, traveler_headers, referrer_code):
    code, _ = referrer_code
    _completed_booking(db_session, traveler, Decimal("6000"), "BK-LOYAL9")
    db_session.commit()

    response = client.post(f"{API}/loyalty/referrals", json={"referral_code": code.lower()}, headers=traveler_headers)

    assert response.json() == {"referrer_bonus": 400, "referred_bonus": 700, "available_miles": 700}


def test_referral_code_must_belong_to_someone_else(client, traveler_headers):
    own = client.get(f"{API}/loyalty/summary", headers=traveler_headers).json()["referral_code"]

    mine = client.post(f"{API}/loyalty/referrals", json={"referral_code": own}, headers=traveler_headers)
    unknown = client.post(f"{API}/loyalty/referrals", json={"referral_code": "AIL00000"}, headers=traveler_headers)

    assert mine.status_code == 400
    assert mine.json()["detail"] == "You cannot use your own referral code"
    assert unknown.status_code == 404
