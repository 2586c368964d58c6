"""HTTP client for the Amadeus self-service travel APIs.

Responses are cached in-process for ``API_CACHE_DURATION_MINUTES``; flight, hotel
and car searches fall back to static sample offers when the API is unreachable or
credentials are missing.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import httpx

from lydian_travel.core.config import Settings, settings
from lydian_travel.services.booking_utils import to_money

logger = logging.getLogger(__name__)

TOKEN_PATH = "/v1/security/oauth2/token"
TOKEN_EXPIRY_MARGIN_SECONDS = 60

EXCHANGE_RATES: Dict[str, Decimal] = {
    "EUR_TRY": Decimal("32.50"),
    "USD_TRY": Decimal("30.20"),
    "GBP_TRY": Decimal("38.40"),
    "TRY_EUR": Decimal("0.031"),
    "TRY_USD": Decimal("0.033"),
    "TRY_GBP": Decimal("0.026"),
}

_DURATION_PATTERN = re.compile(r"^PT(?:(\d+)H)?(?:(\d+)M)?$")

DEFAULT_HOTEL_IMAGE = "https://images.unsplash.com/photo-1564501049412-61c2a3083791?w=600&h=400&fit=crop"
DEFAULT_CAR_IMAGE = "https://images.unsplash.com/photo-1492144534655-ae79c964c9d7?w=600&h=400&fit=crop"


class AmadeusError(Exception):
    """Raised when the Amadeus API cannot serve a request."""


def format_duration(value: str) -> str:
    """Render an ISO-8601 duration such as ``PT2H30M`` as ``2h 30m``."""
    match = _DURATION_PATTERN.match(value or "")
    if match is None:
        return value
    hours, minutes = match.groups()
    parts = []
    if hours:
        parts.append(f"{int(hours)}h")
    if minutes:
        parts.append(f"{int(minutes)}m")
    return " ".join(parts) or "0m"


def convert_currency(amount: Decimal | float | int, from_currency: str, to_currency: str) -> Decimal:
    source = from_currency.upper()
    target = to_currency.upper()
    if source == target:
        return Decimal(str(amount))
    rate = EXCHANGE_RATES.get(f"{source}_{target}")
    if rate is None:
        raise ValueError(f"Unsupported currency conversion: {source} to {target}")
    return to_money(Decimal(str(amount)) * rate)


def build_query(params: Dict[str, Any]) -> List[Tuple[str, str]]:
    """Flatten parameters into query pairs, skipping ``None`` and expanding lists."""
    pairs: List[Tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            if isinstance(item, bool):
                item = "true" if item else "false"
            pairs.append((key, str(item)))
    return pairs


def cache_key(endpoint: str, params: Dict[str, Any]) -> str:
    return f"{endpoint}?" + "&".join(f"{key}={value}" for key, value in sorted(build_query(params)))


class AmadeusClient:
    def __init__(
        self,
        *,
        config: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = config or settings
        self._base_url = self._settings.AMADEUS_BASE_URL.rstrip("/")
        self._client_id = self._settings.AMADEUS_CLIENT_ID
        self._client_secret = self._settings.AMADEUS_CLIENT_SECRET
        self._cache_ttl = self._settings.API_CACHE_DURATION_MINUTES * 60
        self._rate_limit = self._settings.AMADEUS_RATE_LIMIT_MS / 1000
        self._http = httpx.Client(
            base_url=self._base_url,
            timeout=self._settings.AMADEUS_TIMEOUT,
            transport=transport,
        )
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._cache_lock = threading.Lock()
        self._token: Optional[str] = None
        self._token_expiry = 0.0
        self._last_request = 0.0
        self._cache: Dict[str, Tuple[float, Any]] = {}

        if not self.is_configured:
            logger.warning("Amadeus API credentials not found; using sample data")

    @property
    def is_configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    def close(self) -> None:
        self._http.close()

    def _access_token(self) -> str:
        if not self.is_configured:
            raise AmadeusError("Amadeus API credentials not configured")
        if self._token and self._clock() < self._token_expiry:
            return self._token

        response = self._http.post(
            TOKEN_PATH,
            data={
                "grant_type": "client_credentials",
                "client_id": self._client_id,
                "client_secret": self._client_secret,
            },
        )
        response.raise_for_status()
        payload = response.json()
        try:
            token = payload["access_token"]
            expires_in = int(payload.get("expires_in", 0))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise AmadeusError("Invalid token response") from exc
        self._token = token
        self._token_expiry = self._clock() + expires_in - TOKEN_EXPIRY_MARGIN_SECONDS
        return self._token

    def _throttle(self) -> None:
        wait = self._last_request + self._rate_limit - self._clock()
        if wait > 0:
            self._sleep(wait)
        self._last_request = self._clock()

    def _cached(self, key: str) -> Any:
        with self._cache_lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            expires_at, data = entry
            if self._clock() >= expires_at:
                self._cache.pop(key, None)
                return None
            return data

    def _store(self, key: str, data: Any) -> None:
        with self._cache_lock:
            now = self._clock()
            for stale in [k for k, (expires_at, _) in self._cache.items() if now >= expires_at]:
                del self._cache[stale]
            self._cache[key] = (now + self._cache_ttl, data)

    def request(self, endpoint: str, params: Dict[str, Any], *, use_cache: bool = True) -> Any:
        key = cache_key(endpoint, params)
        if use_cache:
            cached = self._cached(key)
            if cached is not None:
                return cached

        with self._lock:
            try:
                token = self._access_token()
                self._throttle()
                response = self._http.get(
                    endpoint,
                    params=build_query(params),
                    headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
                )
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as exc:
                logger.warning(
                    "Amadeus returned HTTP %s for %s: %s",
                    exc.response.status_code,
                    endpoint,
                    exc.response.text,
                )
                raise AmadeusError(f"API request failed: {exc.response.status_code}") from exc
            except httpx.RequestError as exc:
                logger.warning("Failed to reach Amadeus for %s: %s", endpoint, exc)
                raise AmadeusError(f"API request failed: {exc}") from exc
            except ValueError as exc:
                raise AmadeusError(f"Invalid response from {endpoint}") from exc

        if use_cache and data:
            self._store(key, data)
        return data

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    def cache_info(self) -> Dict[str, Any]:
        with self._cache_lock:
            return {"size": len(self._cache), "keys": sorted(self._cache)}

    def _with_fallback(self, endpoint: str, params: Dict[str, Any], fallback: Callable[[], Any]) -> Any:
        try:
            return self.request(endpoint, params)
        except AmadeusError as exc:
            logger.warning("Amadeus %s unavailable, serving fallback: %s", endpoint, exc)
            return fallback()

    def search_flights(
        self,
        *,
        origin: str,
        destination: str,
        departure_date: str,
        return_date: Optional[str] = None,
        adults: int = 1,
        children: int = 0,
        infants: int = 0,
        travel_class: str = "ECONOMY",
        non_stop: bool = False,
        currency: str = "TRY",
        max_results: int = 20,
    ) -> Dict[str, Any]:
        params = {
            "originLocationCode": origin,
            "destinationLocationCode": destination,
            "departureDate": departure_date,
            "returnDate": return_date,
            "adults": adults,
            "children": children or 0,
            "infants": infants or 0,
            "travelClass": travel_class or "ECONOMY",
            "nonStop": bool(non_stop),
            "currencyCode": currency or "TRY",
            "max": max_results or 20,
        }
        return self._with_fallback(
            "/v2/shopping/flight-offers",
            params,
            lambda: sample_flight_offers(origin, destination, departure_date),
        )

    def search_hotels(
        self,
        *,
        city_code: str,
        check_in_date: str,
        check_out_date: str,
        rooms: int = 1,
        adults: int = 1,
        radius: int = 5,
        radius_unit: str = "KM",
    ) -> Dict[str, Any]:
        params = {
            "cityCode": city_code,
            "checkInDate": check_in_date,
            "checkOutDate": check_out_date,
            "roomQuantity": rooms or 1,
            "adults": adults or 1,
            "radius": radius or 5,
            "radiusUnit": radius_unit or "KM",
        }
        return self._with_fallback(
            "/v3/shopping/hotel-offers",
            params,
            lambda: sample_hotel_offers(city_code, check_in_date, check_out_date, rooms or 1),
        )

    def search_cars(
        self,
        *,
        pick_up_location: str,
        pick_up_date: str,
        drop_off_date: str,
        drop_off_location: Optional[str] = None,
        pick_up_time: Optional[str] = None,
        drop_off_time: Optional[str] = None,
    ) -> Dict[str, Any]:
        drop_off_location = drop_off_location or pick_up_location
        params = {
            "pickUpLocationCode": pick_up_location,
            "dropOffLocationCode": drop_off_location,
            "pickUpDate": pick_up_date,
            "dropOffDate": drop_off_date,
            "pickUpTime": pick_up_time or "10:00",
            "dropOffTime": drop_off_time or "10:00",
        }
        return self._with_fallback(
            "/v1/shopping/car-offers",
            params,
            lambda: sample_car_offers(pick_up_location, drop_off_location, pick_up_date, drop_off_date),
        )

    def search_locations(self, keyword: str, sub_type: str = "CITY") -> Dict[str, Any]:
        return self._with_fallback(
            "/v1/reference-data/locations",
            {"keyword": keyword, "subType": sub_type, "page[limit]": 10},
            lambda: {"data": []},
        )

    def search_airports(self, keyword: str) -> Dict[str, Any]:
        return self.search_locations(keyword, "AIRPORT")

    def search_cities(self, keyword: str) -> Dict[str, Any]:
        return self._with_fallback(
            "/v1/reference-data/locations/cities",
            {"keyword": keyword, "page[limit]": 10},
            lambda: {"data": []},
        )

    def points_of_interest(self, latitude: float, longitude: float, radius: int = 1) -> Dict[str, Any]:
        return self._with_fallback(
            "/v1/reference-data/locations/pois",
            {"latitude": latitude, "longitude": longitude, "radius": radius, "page[limit]": 20},
            lambda: {"data": []},
        )


def sample_flight_offers(origin: str, destination: str, departure_date: str) -> Dict[str, Any]:
    return {
        "data": [
            {
                "id": "MOCK_FLIGHT_1",
                "type": "flight-offer",
                "source": "GDS",
                "oneWay": True,
                "numberOfBookableSeats": 9,
                "price": {"currency": "TRY", "total": "450.00", "base": "380.00"},
                "validatingAirlineCodes": ["TK"],
                "itineraries": [
                    {
                        "duration": "PT1H45M",
                        "segments": [
                            {
                                "departure": {"iataCode": origin, "at": f"{departure_date}T08:30:00"},
                                "arrival": {"iataCode": destination, "at": f"{departure_date}T10:15:00"},
                                "carrierCode": "TK",
                                "number": "2468",
                                "aircraft": {"code": "738"},
                                "duration": "PT1H45M",
                            }
                        ],
                    }
                ],
            }
        ],
        "meta": {"count": 1, "mock": True},
    }


def sample_hotel_offers(city_code: str, check_in_date: str, check_out_date: str, rooms: int) -> Dict[str, Any]:
    return {
        "data": [
            {
                "type": "hotel-offers",
                "hotel": {
                    "type": "hotel",
                    "hotelId": "MOCK_HOTEL_1",
                    "chainCode": "FS",
                    "name": "Four Seasons Hotel",
                    "cityCode": city_code,
                    "rating": 5,
                    "amenities": ["SPA", "WIFI", "POOL", "RESTAURANT"],
                },
                "available": True,
                "offers": [
                    {
                        "id": "OFFER_1",
                        "checkInDate": check_in_date,
                        "checkOutDate": check_out_date,
                        "roomQuantity": rooms,
                        "price": {"currency": "TRY", "base": "2800.00", "total": "3200.00"},
                        "room": {"typeEstimated": {"category": "DELUXE_ROOM", "beds": 1, "bedType": "KING"}},
                    }
                ],
            }
        ],
        "meta": {"count": 1, "mock": True},
    }


def sample_car_offers(
    pick_up_location: str, drop_off_location: str, pick_up_date: str, drop_off_date: str
) -> Dict[str, Any]:
    return {
        "data": [
            {
                "type": "car-offers",
                "id": "MOCK_CAR_1",
                "provider": {"company": {"name": "AVIS"}},
                "vehicle": {
                    "category": "ECONOMY",
                    "description": "Volkswagen Golf or similar",
                    "imageURL": "https://images.unsplash.com/photo-1492144534655-ae79c964c9d7?w=300&h=200",
                    "seats": {"count": 5},
                    "bags": {"count": 2},
                    "transmission": "MANUAL",
                    "fuel": {"type": "PETROL"},
                    "airConditioning": True,
                },
                "pickUpLocation": {"code": pick_up_location},
                "dropOffLocation": {"code": drop_off_location},
                "pickUpDate": pick_up_date,
                "dropOffDate": drop_off_date,
                "price": {"currency": "TRY", "total": "150.00"},
            }
        ],
        "meta": {"count": 1, "mock": True},
    }


def _clock_time(timestamp: str) -> str:
    return timestamp.split("T")[1][:5]


def transform_flight_offer(offer: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    try:
        segment = offer["itineraries"][0]["segments"][0]
        pricing = offer["price"]
        return {
            "id": offer["id"],
            "airline": segment["carrierCode"],
            "from": segment["departure"]["iataCode"],
            "to": segment["arrival"]["iataCode"],
            "departure": _clock_time(segment["departure"]["at"]),
            "arrival": _clock_time(segment["arrival"]["at"]),
            "duration": format_duration(segment["duration"]),
            "price": float(pricing["total"]),
            "currency": pricing["currency"],
            "type": "Tek Yön" if offer.get("oneWay") else "Gidiş-Dönüş",
            "aircraft": (segment.get("aircraft") or {}).get("code", "N/A"),
            "availability": offer.get("numberOfBookableSeats") or 10,
        }
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        logger.warning("Could not transform flight offer: %s", exc)
        return None


def transform_hotel_offer(offer: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    try:
        hotel = offer["hotel"]
        first = offer["offers"][0]
        address = hotel.get("address") or {}
        return {
            "id": hotel["hotelId"],
            "name": hotel["name"],
            "location": f"{address.get('cityName', '')}, {address.get('countryCode', '')}",
            "rating": hotel.get("rating") or 0,
            "price": float(first["price"]["total"]),
            "currency": first["price"]["currency"],
            "check_in": first["checkInDate"],
            "check_out": first["checkOutDate"],
            "room_type": ((first.get("room") or {}).get("typeEstimated") or {}).get("category", "Standard"),
            "amenities": hotel.get("amenities") or [],
            "image": DEFAULT_HOTEL_IMAGE,
            "stars": hotel.get("rating") or 4,
        }
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        logger.warning("Could not transform hotel offer: %s", exc)
        return None


def transform_car_offer(offer: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    try:
        vehicle = offer["vehicle"]
        return {
            "id": offer["id"],
            "company": offer["provider"]["company"]["name"],
            "category": vehicle["category"],
            "model": vehicle["description"],
            "seats": vehicle["seats"]["count"],
            "bags": vehicle["bags"]["count"],
            "transmission": vehicle["transmission"],
            "fuel": vehicle["fuel"]["type"],
            "air_conditioning": vehicle.get("airConditioning", False),
            "price": float(offer["price"]["total"]),
            "currency": offer["price"]["currency"],
            "pick_up_date": offer["pickUpDate"],
            "drop_off_date": offer["dropOffDate"],
            "image": vehicle.get("imageURL") or DEFAULT_CAR_IMAGE,
        }
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        logger.warning("Could not transform car offer: %s", exc)
        return None


def transform_offers(
    offers: Sequence[Dict[str, Any]], transformer: Callable[[Dict[str, Any]], Optional[Dict[str, Any]]]
) -> List[Dict[str, Any]]:
    return [item for item in (transformer(offer) for offer in offers) if item is not None]


__all__ = [
    "AmadeusClient",
    "AmadeusError",
    "build_query",
    "cache_key",
    "convert_currency",
    "format_duration",
    "transform_car_offer",
    "transform_flight_offer",
    "transform_hotel_offer",
    "transform_offers",
]
