from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import httpx
import pytest

from lydian_travel.clients import AmadeusClient, AmadeusError
from lydian_travel.clients.amadeus_client import (
    TOKEN_PATH,
    build_query,
    cache_key,
    convert_currency,
    format_duration,
    sample_car_offers,
    sample_flight_offers,
    sample_hotel_offers,
    transform_car_offer,
    transform_flight_offer,
    transform_hotel_offer,
    transform_offers,
)
from lydian_travel.core.config import Settings

from .conftest import API


class ConfiguredSettings(Settings):
    AMADEUS_CLIENT_ID = "client-id"
    AMADEUS_CLIENT_SECRET = "client-secret"
    AMADEUS_BASE_URL = "https://amadeus.test"
    AMADEUS_RATE_LIMIT_MS = 200
    API_CACHE_DURATION_MINUTES = 15


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(round(seconds, 3))
        self.now += seconds


class AmadeusStub:
    """Answers token and data requests the way the Amadeus sandbox does."""

    def __init__(self, status_code: int = 200, payload=None, token_payload=None):
        self.status_code = status_code
        self.token_payload = token_payload
        self.payload = payload if payload is not None else {"data": [{"id": "1"}]}
        self.token_requests = 0
        self.data_requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == TOKEN_PATH:
            self.token_requests += 1
            if self.token_payload is not None:
                return httpx.Response(200, json=self.token_payload)
            return httpx.Response(200, json={"access_token": f"token-{self.token_requests}", "expires_in": 1799})
        self.data_requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)


def _client(stub, clock=None, config=ConfiguredSettings()):
    clock = clock or FakeClock()
    return AmadeusClient(
        config=config,
        transport=httpx.MockTransport(stub),
        clock=clock,
        sleep=clock.sleep,
    )


def test_build_query_and_cache_key():
    params = {"b": None, "a": [1, 2], "nonStop": False, "max": 20}

    assert build_query(params) == [("a", "1"), ("a", "2"), ("nonStop", "false"), ("max", "20")]
    assert cache_key("/v1/x", params) == "/v1/x?a=1&a=2&max=20&nonStop=false"


@pytest.mark.parametrize(
    "value, expected",
    [("PT2H30M", "2h 30m"), ("PT45M", "45m"), ("PT3H", "3h"), ("P1D", "P1D")],
)
def test_format_duration(value, expected):
    assert format_duration(value) == expected


def test_convert_currency():
    assert convert_currency(100, "eur", "TRY") == Decimal("3250.00")
    assert convert_currency(Decimal("12.5"), "TRY", "TRY") == Decimal("12.5")
    with pytest.raises(ValueError):
        convert_currency(1, "JPY", "TRY")


def test_token_is_fetched_once_and_sent_as_bearer():
    stub = AmadeusStub()
    client = _client(stub)

    client.request("/v1/reference-data/locations", {"keyword": "IST"})
    client.request("/v1/reference-data/locations", {"keyword": "AYT"})

    assert stub.token_requests == 1
    assert [request.headers["authorization"] for request in stub.data_requests] == ["Bearer token-1"] * 2
    assert stub.data_requests[1].url.params["keyword"] == "AYT"


def test_token_is_refreshed_before_expiry():
    stub = AmadeusStub()
    clock = FakeClock()
    client = _client(stub, clock)

    client.request("/v1/a", {}, use_cache=False)
    clock.now += 1799 - 60
    client.request("/v1/a", {}, use_cache=False)

    assert stub.token_requests == 2


def test_responses_are_cached_until_ttl():
    stub = AmadeusStub()
    clock = FakeClock()
    client = _client(stub, clock)

    first = client.request("/v1/a", {"q": 1})
    second = client.request("/v1/a", {"q": 1})
    assert first == second
    assert len(stub.data_requests) == 1
    assert client.cache_info() == {"size": 1, "keys": ["/v1/a?q=1"]}

    clock.now += 15 * 60
    client.request("/v1/a", {"q": 1})
    assert len(stub.data_requests) == 2

    client.clear_cache()
    assert client.cache_info()["size"] == 0


def test_expired_entries_are_dropped_when_results_are_stored():
    clock = FakeClock()
    client = _client(AmadeusStub(), clock)

    client.request("/v1/a", {"q": 1})
    clock.now += 15 * 60
    client.request("/v1/b", {"q": 2})

    assert client.cache_info() == {"size": 1, "keys": ["/v1/b?q=2"]}


def test_concurrent_reads_of_an_expired_entry():
    clock = FakeClock()
    client = _client(AmadeusStub(), clock)
    client.request("/v1/a", {"q": 1})
    clock.now += 15 * 60
    key = cache_key("/v1/a", {"q": 1})

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: client._cached(key), range(32)))

    assert results == [None] * 32
    assert client.cache_info()["size"] == 0


def test_requests_are_spaced_by_rate_limit():
    stub = AmadeusStub()
    clock = FakeClock()
    client = _client(stub, clock)

    client.request("/v1/a", {}, use_cache=False)
    client.request("/v1/b", {}, use_cache=False)

    assert clock.sleeps == [0.2]


def test_http_errors_raise_amadeus_error():
    client = _client(AmadeusStub(status_code=500, payload={"errors": []}))

    with pytest.raises(AmadeusError, match="API request failed: 500"):
        client.request("/v1/a", {})


def test_searches_fall_back_to_samples_on_failure():
    client = _client(AmadeusStub(status_code=503, payload={}))

    flights = client.search_flights(origin="IST", destination="AYT", departure_date="2025-06-01")

    assert flights["meta"]["mock"] is True
    assert flights["data"][0]["itineraries"][0]["segments"][0]["departure"]["iataCode"] == "IST"


def test_token_response_without_access_token_raises_amadeus_error():
    client = _client(AmadeusStub(token_payload={"error": "invalid_client"}))

    with pytest.raises(AmadeusError, match="Invalid token response"):
        client.request("/v1/a", {})


def test_searches_fall_back_when_token_response_is_malformed():
    stub = AmadeusStub(token_payload={"error": "invalid_client"})
    client = _client(stub)

    flights = client.search_flights(origin="IST", destination="AYT", departure_date="2025-06-01")

    assert flights["meta"]["mock"] is True
    assert stub.data_requests == []


def test_unconfigured_client_never_calls_the_network():
    stub = AmadeusStub()
    client = _client(stub, config=Settings())

    hotels = client.search_hotels(city_code="AYT", check_in_date="2025-06-01", check_out_date="2025-06-04")
    locations = client.search_locations("Antalya")

    assert not client.is_configured
    assert hotels["meta"]["mock"] is True
    assert locations == {"data": []}
    assert stub.token_requests == 0
    assert stub.data_requests == []


def test_live_flight_search_sends_amadeus_parameters():
    stub = AmadeusStub(payload=sample_flight_offers("IST", "ESB", "2025-06-01"))
    client = _client(stub)

    client.search_flights(origin="IST", destination="ESB", departure_date="2025-06-01", adults=2, non_stop=True)

    params = stub.data_requests[0].url.params
    assert stub.data_requests[0].url.path == "/v2/shopping/flight-offers"
    assert params["originLocationCode"] == "IST"
    assert params["adults"] == "2"
    assert params["nonStop"] == "true"
    assert "returnDate" not in params


def test_transform_flight_offer():
    offer = sample_flight_offers("IST", "AYT", "2025-06-01")["data"][0]

    flight = transform_flight_offer(offer)

    assert flight["from"] == "IST"
    assert flight["departure"] == "08:30"
    assert flight["arrival"] == "10:15"
    assert flight["duration"] == "1h 45m"
    assert flight["price"] == 450.0
    assert flight["type"] == "Tek Yön"


def test_transform_hotel_and_car_offers():
    hotel = transform_hotel_offer(sample_hotel_offers("AYT", "2025-06-01", "2025-06-04", 1)["data"][0])
    car = transform_car_offer(sample_car_offers("AYT", "AYT", "2025-06-01", "2025-06-04")["data"][0])

    assert hotel["room_type"] == "DELUXE_ROOM"
    assert hotel["price"] == 3200.0
    assert car["company"] == "AVIS"
    assert car["seats"] == 5


def test_malformed_offers_are_skipped():
    offers = [{"id": "broken"}, sample_flight_offers("IST", "AYT", "2025-06-01")["data"][0]]

    assert [item["id"] for item in transform_offers(offers, transform_flight_offer)] == ["MOCK_FLIGHT_1"]


def test_flight_search_route_serves_mock_results(client):
    response = client.post(
        f"{API}/travel/flights/search",
        json={"origin": "ist", "destination": "ayt", "departure_date": "2025-06-01"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["mock"] is True
    assert body["count"] == 1
    assert body["results"][0]["from"] == "IST"


@pytest.mark.parametrize(
    "path, payload",
    [
        ("/travel/flights/search", {"origin": "ISTANBUL", "destination": "AYT", "departure_date": "2025-06-01"}),
        (
            "/travel/flights/search",
            {"origin": "IST", "destination": "AYT", "departure_date": "2025-06-05", "return_date": "2025-06-01"},
        ),
        ("/travel/hotels/search", {"city_code": "AYT", "check_in_date": "2025-06-05", "check_out_date": "2025-06-05"}),
        ("/travel/cars/search", {"pick_up_location": "AYT", "pick_up_date": "2025-06-05", "drop_off_date": "2025-06-04"}),
    ],
)
def test_search_validation(client, path, payload):
    assert client.post(f"{API}{path}", json=payload).status_code == 422


def test_car_and_hotel_routes(client):
    cars = client.post(
        f"{API}/travel/cars/search",
        json={"pick_up_location": "ayt", "pick_up_date": "2025-06-01", "drop_off_date": "2025-06-04"},
    ).json()
    hotels = client.post(
        f"{API}/travel/hotels/search",
        json={"city_code": "AYT", "check_in_date": "2025-06-01", "check_out_date": "2025-06-04"},
    ).json()

    assert cars["results"][0]["model"] == "Volkswagen Golf or similar"
    assert hotels["results"][0]["check_out"] == "2025-06-04"


def test_reference_routes_fall_back_to_empty_results(client):
    assert client.get(f"{API}/travel/airports", params={"keyword": "IST"}).json() == {"data": []}
    assert client.get(f"{API}/travel/pois", params={"latitude": 36.9, "longitude": 30.7}).json() == {"data": []}
    assert client.get(f"{API}/travel/locations", params={"keyword": "A"}).status_code == 422


def test_cache_routes_are_admin_only(client, traveler_headers, admin_headers):
    assert client.get(f"{API}/travel/cache", headers=traveler_headers).status_code == 403
    assert client.get(f"{API}/travel/cache", headers=admin_headers).json() == {"size": 0, "keys": []}
    assert client.delete(f"{API}/travel/cache", headers=admin_headers).status_code == 204
