"""Flight, hotel and car searches proxied to Amadeus, with mock fallbacks."""

from typing import Any, Dict, Literal

from fastapi import APIRouter, Depends, Query, Response, status

from lydian_travel.clients import AmadeusClient
from lydian_travel.clients.amadeus_client import (
    transform_car_offer,
    transform_flight_offer,
    transform_hotel_offer,
    transform_offers,
)
from lydian_travel.core.security import require_roles
from lydian_travel.dependencies import get_amadeus_client
from lydian_travel.models.user import User
from lydian_travel.schemas.travel import (
    CacheInfoResponse,
    CarSearchQuery,
    FlightSearchQuery,
    HotelSearchQuery,
    TravelSearchResponse,
)

router = APIRouter(prefix="/travel", tags=["travel"])

_admin = require_roles("admin")


def _search_response(payload: Dict[str, Any], transformer) -> Dict[str, Any]:
    results = transform_offers(payload.get("data") or [], transformer)
    return {
        "success": True,
        "count": len(results),
        "mock": bool((payload.get("meta") or {}).get("mock")),
        "results": results,
    }


@router.post("/flights/search", response_model=TravelSearchResponse)
def search_flights(query: FlightSearchQuery, client: AmadeusClient = Depends(get_amadeus_client)):
    payload = client.search_flights(
        origin=query.origin,
        destination=query.destination,
        departure_date=query.departure_date.isoformat(),
        return_date=query.return_date.isoformat() if query.return_date else None,
        adults=query.adults,
        children=query.children,
        infants=query.infants,
        travel_class=query.travel_class,
        non_stop=query.non_stop,
        currency=query.currency.upper(),
        max_results=query.max_results,
    )
    return _search_response(payload, transform_flight_offer)


@router.post("/hotels/search", response_model=TravelSearchResponse)
def search_hotels(query: HotelSearchQuery, client: AmadeusClient = Depends(get_amadeus_client)):
    payload = client.search_hotels(
        city_code=query.city_code,
        check_in_date=query.check_in_date.isoformat(),
        check_out_date=query.check_out_date.isoformat(),
        rooms=query.rooms,
        adults=query.adults,
        radius=query.radius,
        radius_unit=query.radius_unit,
    )
    return _search_response(payload, transform_hotel_offer)


@router.post("/cars/search", response_model=TravelSearchResponse)
def search_cars(query: CarSearchQuery, client: AmadeusClient = Depends(get_amadeus_client)):
    payload = client.search_cars(
        pick_up_location=query.pick_up_location.strip().upper(),
        drop_off_location=query.drop_off_location.strip().upper() if query.drop_off_location else None,
        pick_up_date=query.pick_up_date.isoformat(),
        drop_off_date=query.drop_off_date.isoformat(),
        pick_up_time=query.pick_up_time,
        drop_off_time=query.drop_off_time,
    )
    return _search_response(payload, transform_car_offer)


@router.get("/locations")
def search_locations(
    *,
    keyword: str = Query(..., min_length=2),
    sub_type: Literal["CITY", "AIRPORT"] = Query("CITY"),
    client: AmadeusClient = Depends(get_amadeus_client),
):
    return client.search_locations(keyword, sub_type)


@router.get("/airports")
def search_airports(
    keyword: str = Query(..., min_length=2),
    client: AmadeusClient = Depends(get_amadeus_client),
):
    return client.search_airports(keyword)


@router.get("/cities")
def search_cities(
    keyword: str = Query(..., min_length=2),
    client: AmadeusClient = Depends(get_amadeus_client),
):
    return client.search_cities(keyword)


@router.get("/pois")
def points_of_interest(
    *,
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius: int = Query(1, ge=1, le=20),
    client: AmadeusClient = Depends(get_amadeus_client),
):
    return client.points_of_interest(latitude, longitude, radius)


@router.get("/cache", response_model=CacheInfoResponse)
def cache_info(_: User = Depends(_admin), client: AmadeusClient = Depends(get_amadeus_client)):
    return client.cache_info()


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
def clear_cache(_: User = Depends(_admin), client: AmadeusClient = Depends(get_amadeus_client)):
    client.clear_cache()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
