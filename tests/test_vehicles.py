from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from lydian_travel.models.booking import Booking, BookingStatus, BookingType
from lydian_travel.services.vehicle_service import quote_rental, rental_days

from .conftest import API, future

PICK_UP = datetime(2025, 6, 1, 10, tzinfo=timezone.utc)


def _submission(**overrides):
    payload = {
        "brand": "Fiat",
        "model": "Egea",
        "year": 2023,
        "plate": "07abc1234",
        "color": "Gri",
        "transmission": "automatic",
        "fuel_type": "diesel",
        "seats": 5,
        "doors": 4,
        "city": "Antalya",
        "daily_rate": "1200",
        "weekly_discount": 10,
        "deposit": "3000",
        "extra_fees": {"driver": "400", "gps": "60"},
        "min_rental_days": 2,
        "max_rental_days": 21,
    }
    payload.update(overrides)
    return payload


@pytest.mark.parametrize(
    "hours, days",
    [(-5, 0), (0, 0), (3, 1), (24, 1), (49, 3)],
)
def test_rental_days_counts_started_days(hours, days):
    assert rental_days(PICK_UP, PICK_UP + timedelta(hours=hours)) == days


def test_rental_days_accepts_naive_datetimes():
    assert rental_days(datetime(2025, 6, 1, 10), PICK_UP + timedelta(days=2)) == 2


def test_monthly_quote_with_driver(rental_car):
    quote = quote_rental(rental_car, PICK_UP, datetime(2025, 7, 1, 10, tzinfo=timezone.utc), include_driver=True)

    assert quote.days == 30
    assert quote.discount_percentage == 20
    assert quote.rental_total == Decimal("24000.00")
    assert quote.extras_total == Decimal("9000.00")
    assert quote.total_price == Decimal("33000.00")
    assert quote.deposit == Decimal("2500.00")


def test_short_rental_has_no_discount(rental_car):
    quote = quote_rental(rental_car, PICK_UP, datetime(2025, 6, 4, 10, tzinfo=timezone.utc), include_child_seat=True)

    assert quote.discount_percentage == 0
    assert quote.total_price == Decimal("3225.00")


def test_quote_endpoint(client, rental_car):
    response = client.post(
        f"{API}/vehicles/{rental_car.id_vehicle}/quote",
        json={
            "pick_up_date": "2025-06-01T10:00:00Z",
            "drop_off_date": "2025-06-08T10:00:00Z",
            "include_gps": True,
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["days"] == 7
    assert body["rental_total"] == "6300.00"
    assert body["extras_total"] == "350.00"
    assert body["total_price"] == "6650.00"


def test_quote_rejects_reversed_dates(client, rental_car):
    response = client.post(
        f"{API}/vehicles/{rental_car.id_vehicle}/quote",
        json={"pick_up_date": "2025-06-08T10:00:00Z", "drop_off_date": "2025-06-01T10:00:00Z"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Drop-off date must be after pick-up date"


def test_owner_submits_vehicle_for_review(client, vehicle_owner, auth_headers):
    response = client.post(f"{API}/vehicles", json=_submission(), headers=auth_headers(vehicle_owner))

    assert response.status_code == 201
    body = response.json()
    assert body["plate"] == "07 ABC 1234"
    assert body["status"] == "pending_review"
    assert body["daily_rate"] == "1200.00"
    assert body["extra_fees"]["driver"] == "400"
    assert body["extra_fees"]["child_seat"] == "0"


def test_pending_vehicles_are_not_searchable(client, vehicle_owner, auth_headers, rental_car):
    client.post(f"{API}/vehicles", json=_submission(), headers=auth_headers(vehicle_owner))

    listed = client.get(f"{API}/vehicles", params={"city": "antalya"}).json()
    mine = client.get(f"{API}/vehicles/mine", headers=auth_headers(vehicle_owner)).json()

    assert [vehicle["id_vehicle"] for vehicle in listed] == [rental_car.id_vehicle]
    assert len(mine) == 2


def test_search_filters(client, rental_car):
    assert client.get(f"{API}/vehicles", params={"transmission": "automatic"}).json() == []
    assert client.get(f"{API}/vehicles", params={"min_seats": 7}).json() == []
    assert len(client.get(f"{API}/vehicles", params={"min_seats": 5}).json()) == 1


def test_duplicate_plate(client, vehicle_owner, auth_headers, rental_car):
    response = client.post(
        f"{API}/vehicles",
        json=_submission(plate="07abc123"),
        headers=auth_headers(vehicle_owner),
    )

    assert response.status_code == 409


@pytest.mark.parametrize(
    "overrides",
    [
        {"plate": "99 XX 11"},
        {"year": 1985},
        {"min_rental_days": 10, "max_rental_days": 5},
        {"currency": "TL"},
        {"weekly_discount": 60},
    ],
)
def test_submission_validation(client, vehicle_owner, auth_headers, overrides):
    response = client.post(f"{API}/vehicles", json=_submission(**overrides), headers=auth_headers(vehicle_owner))

    assert response.status_code == 422


def test_travelers_cannot_list_vehicles(client, traveler_headers):
    assert client.post(f"{API}/vehicles", json=_submission(), headers=traveler_headers).status_code == 403


def test_update_vehicle(client, vehicle_owner, auth_headers, rental_car):
    response = client.patch(
        f"{API}/vehicles/{rental_car.id_vehicle}",
        json={"daily_rate": "1100", "extra_fees": {"gps": "80"}},
        headers=auth_headers(vehicle_owner),
    )

    assert response.status_code == 200
    assert response.json()["daily_rate"] == "1100.00"
    assert response.json()["extra_fees"] == {"driver": "0", "gps": "80", "child_seat": "0"}


def test_update_checks_rental_day_range(client, vehicle_owner, auth_headers, rental_car):
    response = client.patch(
        f"{API}/vehicles/{rental_car.id_vehicle}",
        json={"max_rental_days": 1, "min_rental_days": 3},
        headers=auth_headers(vehicle_owner),
    )

    assert response.status_code == 422


def test_only_owner_or_admin_updates(client, traveler_headers, admin_headers, rental_car):
    denied = client.patch(f"{API}/vehicles/{rental_car.id_vehicle}", json={"color": "Mavi"}, headers=traveler_headers)
    allowed = client.patch(f"{API}/vehicles/{rental_car.id_vehicle}", json={"color": "Mavi"}, headers=admin_headers)

    assert denied.status_code == 403
    assert allowed.json()["color"] == "Mavi"


def test_delete_vehicle(client, db_session, vehicle_owner, traveler, auth_headers, rental_car):
    booking = Booking(
        booking_reference="BK-CAR0001",
        id_user=traveler.id_user,
        booking_type=BookingType.CAR,
        id_vehicle=rental_car.id_vehicle,
        check_in_date=future(days=3),
        check_out_date=future(days=5),
        total_amount=Decimal("2000"),
        status=BookingStatus.CONFIRMED,
    )
    db_session.add(booking)
    db_session.commit()
    headers = auth_headers(vehicle_owner)

    blocked = client.delete(f"{API}/vehicles/{rental_car.id_vehicle}", headers=headers)
    db_session.delete(booking)
    db_session.commit()
    deleted = client.delete(f"{API}/vehicles/{rental_car.id_vehicle}", headers=headers)

    assert blocked.status_code == 409
    assert blocked.json()["detail"] == "Vehicle has bookings and cannot be deleted"
    assert deleted.status_code == 204
    assert client.get(f"{API}/vehicles/{rental_car.id_vehicle}").status_code == 404
