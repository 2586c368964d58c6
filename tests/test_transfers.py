from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from lydian_travel.models.transfer import AirportTransfer, TransferVehicle
from lydian_travel.repository import transfer_repository
from lydian_travel.schemas.transfer import TransferRouteInput
from lydian_travel.services.transfer_service import route_prices, search_catalog, transfer_price

from .conftest import API


def _submission(**overrides):
    next_year = (date.today() + timedelta(days=365)).isoformat()
    payload = {
        "category": "LUXURY_VAN",
        "vehicle": {
            "plate": "07 vip 707",
            "brand": "Mercedes",
            "model": "Vito",
            "year": 2023,
            "color": "Siyah",
            "passenger_capacity": 7,
            "luggage_capacity": 6,
            "d2_license_number": "D2-07-4411",
            "features": ["Wi-Fi", "Deri Koltuk"],
        },
        "pricing": {
            "per_km_fee": "12",
            "minimum_fee": "1500",
            "night_surcharge": 20,
            "routes": [
                {
                    "from_location": "Antalya Havalimanı",
                    "to_location": "Alanya",
                    "distance": 125,
                    "duration": 120,
                    "region": "Alanya",
                    "base_price": "1000",
                },
                {
                    "from_location": "Antalya Havalimanı",
                    "to_location": "Kaş",
                    "distance": 190,
                    "duration": 180,
                    "region": "Kaş",
                },
            ],
        },
        "legal": {
            "insurance": {
                "provider": "Anadolu Sigorta",
                "policy_number": "POL-2024-9911",
                "coverage": "500000",
                "expiry_date": next_year,
            },
            "driver": {
                "name": "Mehmet Yıldız",
                "phone": "+90 532 000 0000",
                "license_number": "E-445566",
                "license_expiry": next_year,
                "src4_certificate": "SRC4-12345",
                "psychotechnic_certificate": "PSY-7788",
            },
        },
    }
    payload.update(overrides)
    return payload


def test_transfer_price_reads_models_and_catalog_entries():
    assert transfer_price({"price_standard": 650, "price_vip": 1000}) == Decimal("650.00")
    assert transfer_price({"price_standard": 650, "price_vip": 1000}, is_vip=True) == Decimal("1000.00")
    assert transfer_price(TransferVehicle(price_standard=Decimal("900"), price_vip=Decimal("1300")), True) == Decimal(
        "1300.00"
    )


@pytest.mark.parametrize(
    "distance, base_price, expected",
    [(190, None, ("2280.00", "3420.00")), (50, None, ("1500.00", "2250.00")), (125, "1000", ("1000.00", "1500.00"))],
)
def test_route_prices(distance, base_price, expected):
    route = TransferRouteInput(
        from_location="Antalya Havalimanı",
        to_location="Kaş",
        distance=distance,
        duration=60,
        region="Kaş",
        base_price=base_price,
    )

    standard, vip = route_prices(route, Decimal("12"), Decimal("1500"))

    assert (str(standard), str(vip)) == expected


def test_catalog_search_puts_popular_routes_first():
    results = search_catalog(to_location="alanya")

    assert [route["from_location"] for route in results] == ["AYT", "GZP"]
    assert results[0]["popular"] is True
    assert results[0]["name"] == "Antalya Havalimanı - Alanya"


def test_catalog_search_filters_by_capacity():
    results = search_catalog(from_location="ayt", passengers=10, is_vip=True)

    assert len(results) == 1
    assert [vehicle["vehicle_type"] for vehicle in results[0]["vehicles"]] == ["MINIBUS"]
    assert results[0]["vehicles"][0]["price"] == Decimal("1600.00")


def test_search_database_routes(client, transfer_route):
    response = client.get(
        f"{API}/transfers/search",
        params={"from": "antalya", "to": "alanya", "passengers": 4, "isVIP": "true"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    route = body["transfers"][0]
    assert route["id"] == transfer_route.id_transfer
    assert route["from_location"] == "Antalya"
    assert route["description"] == "Transfer from Antalya Havalimanı to Alanya"
    assert route["popular"] is True
    assert [(vehicle["vehicle_type"], vehicle["price"]) for vehicle in route["vehicles"]] == [("MINIBUS", "2800.00")]


def test_search_skips_inactive_routes(client, db_session, transfer_route):
    transfer_route.is_active = False
    db_session.commit()

    response = client.get(f"{API}/transfers/search", params={"to": "alanya"})

    assert response.json() == {"success": True, "count": 0, "transfers": []}


def test_search_falls_back_to_catalog_when_database_fails(client, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(transfer_repository, "search_transfers", broken)

    response = client.get(f"{API}/transfers/search", params={"to": "Kemer"})

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert body["transfers"][0]["vehicles"][0]["price"] == "400.00"


def test_get_transfer(client, transfer_route):
    response = client.get(f"{API}/transfers/{transfer_route.id_transfer}")

    assert response.status_code == 200
    assert response.json()["booking_count"] == 150
    assert len(response.json()["vehicles"]) == 2
    assert client.get(f"{API}/transfers/9999").status_code == 404


def test_owner_submits_vehicle_on_several_routes(client, db_session, transfer_owner, transfer_route, auth_headers):
    headers = auth_headers(transfer_owner)

    response = client.post(f"{API}/transfers/vehicles", json=_submission(), headers=headers)

    assert response.status_code == 201
    vehicles = response.json()
    assert [vehicle["plate"] for vehicle in vehicles] == ["07 VIP 707", "07 VIP 707"]
    assert vehicles[0]["id_transfer"] == transfer_route.id_transfer
    assert (vehicles[0]["price_standard"], vehicles[0]["price_vip"]) == ("1000.00", "1500.00")
    assert (vehicles[1]["price_standard"], vehicles[1]["price_vip"]) == ("2280.00", "3420.00")
    assert vehicles[1]["name"] == "Mercedes Vito"
    assert db_session.query(AirportTransfer).count() == 2

    mine = client.get(f"{API}/transfers/vehicles/mine", headers=headers).json()
    assert len(mine) == 4


def test_duplicate_plate_is_rejected(client, transfer_owner, auth_headers):
    headers = auth_headers(transfer_owner)
    client.post(f"{API}/transfers/vehicles", json=_submission(), headers=headers)

    response = client.post(f"{API}/transfers/vehicles", json=_submission(), headers=headers)

    assert response.status_code == 409
    assert response.json()["detail"] == "A vehicle with this plate already exists"


@pytest.mark.parametrize(
    "mutate",
    [
        lambda payload: payload["vehicle"].update(plate="ABC 123"),
        lambda payload: payload["pricing"].update(minimum_fee="50"),
        lambda payload: payload["legal"]["insurance"].update(expiry_date="2020-01-01"),
        lambda payload: payload["pricing"]["routes"].append(dict(payload["pricing"]["routes"][0])),
    ],
)
def test_submission_validation(client, transfer_owner, auth_headers, mutate):
    payload = _submission()
    mutate(payload)

    response = client.post(f"{API}/transfers/vehicles", json=payload, headers=auth_headers(transfer_owner))

    assert response.status_code == 422


def test_only_transfer_owners_submit_vehicles(client, traveler_headers):
    response = client.post(f"{API}/transfers/vehicles", json=_submission(), headers=traveler_headers)

    assert response.status_code == 403
