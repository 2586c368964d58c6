import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lydian_travel.models.transfer import AirportTransfer, TransferVehicle
from lydian_travel.models.user import User
from lydian_travel.repository import transfer_repository
from lydian_travel.schemas.transfer import TransferRouteInput, TransferVehicleSubmission
from lydian_travel.services.booking_utils import to_money
from lydian_travel.services.transfer_catalog import (
    DEFAULT_ROUTE_IMAGE,
    DEFAULT_VEHICLE_IMAGE,
    TRANSFER_ROUTES,
)

logger = logging.getLogger(__name__)

POPULAR_BOOKING_COUNT = 100
VIP_PREMIUM = Decimal("1.5")


def _read(vehicle: Any, field: str) -> Any:
    if isinstance(vehicle, Mapping):
        return vehicle[field]
    return getattr(vehicle, field)


def transfer_price(vehicle: Any, is_vip: bool = False) -> Decimal:
    """Price of a transfer vehicle, VIP or standard."""
    return to_money(_read(vehicle, "price_vip" if is_vip else "price_standard"))


def route_prices(route: TransferRouteInput, per_km_fee: Decimal, minimum_fee: Decimal) -> tuple[Decimal, Decimal]:
    if route.base_price is not None:
        standard = to_money(route.base_price)
    else:
        standard = to_money(max(minimum_fee, per_km_fee * route.distance))
    return standard, to_money(standard * VIP_PREMIUM)


def _vehicle_result(vehicle: Any, is_vip: bool) -> Dict[str, Any]:
    return {
        "id": vehicle.get("id") if isinstance(vehicle, Mapping) else vehicle.id_transfer_vehicle,
        "vehicle_type": _read(vehicle, "vehicle_type"),
        "name": _read(vehicle, "name"),
        "capacity": _read(vehicle, "capacity"),
        "luggage_capacity": _read(vehicle, "luggage_capacity"),
        "price_standard": to_money(_read(vehicle, "price_standard")),
        "price_vip": to_money(_read(vehicle, "price_vip")),
        "price": transfer_price(vehicle, is_vip),
        "features": list(_read(vehicle, "features") or []),
        "image": _read(vehicle, "image") or DEFAULT_VEHICLE_IMAGE,
    }


def _fits(vehicles: Iterable[Any], passengers: Optional[int]) -> List[Any]:
    selected = [v for v in vehicles if passengers is None or _read(v, "capacity") >= passengers]
    return sorted(selected, key=lambda v: Decimal(str(_read(v, "price_standard"))))


def _contains(haystack: str, needle: Optional[str]) -> bool:
    return not needle or needle.lower() in haystack.lower()


def sort_results(results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(results, key=lambda item: (not item["popular"], item["distance"]))


def search_catalog(
    *,
    from_location: Optional[str] = None,
    to_location: Optional[str] = None,
    passengers: Optional[int] = None,
    is_vip: bool = False,
    region: Optional[str] = None,
) -> List[Dict[str, Any]]:
    results = []
    for index, route in enumerate(TRANSFER_ROUTES, start=1):
        if from_location and not (
            _contains(route["code"], from_location) or _contains(route["from_location"], from_location)
        ):
            continue
        if not _contains(route["to_location"], to_location) or not _contains(route["region"], region):
            continue
        vehicles = _fits(route["vehicles"], passengers)
        if not vehicles:
            continue
        results.append(
            {
                "id": index,
                "name": f"{route['from_location']} - {route['to_location']}",
                "description": route["description"],
                "from_location": route["code"],
                "from_location_full": route["from_location"],
                "to_location": route["to_location"],
                "distance": route["distance"],
                "duration": route["duration"],
                "region": route["region"],
                "image": route["image"],
                "popular": route["popular"],
                "vehicles": [_vehicle_result(vehicle, is_vip) for vehicle in vehicles],
            }
        )
    return sort_results(results)


class TransferService:
    def __init__(self, db: Session):
        self.db = db

    def search_transfers(
        self,
        *,
        from_location: Optional[str] = None,
        to_location: Optional[str] = None,
        passengers: Optional[int] = None,
        is_vip: bool = False,
        region: Optional[str] = None,
    ) -> Dict[str, Any]:
        logger.info(
            "Transfer search from=%s to=%s passengers=%s vip=%s region=%s",
            from_location,
            to_location,
            passengers,
            is_vip,
            region,
        )
        try:
            transfers = transfer_repository.search_transfers(
                self.db,
                from_location=from_location,
                to_location=to_location,
                region=region,
            )
            results = []
            for transfer in transfers:
                vehicles = _fits(transfer.vehicles, passengers)
                if not vehicles:
                    continue
                results.append(self._route_result(transfer, vehicles, is_vip))
            results = sort_results(results)
        except SQLAlchemyError as exc:
            logger.error("Transfer query failed, using static catalog: %s", exc)
            self.db.rollback()
            results = search_catalog(
                from_location=from_location,
                to_location=to_location,
                passengers=passengers,
                is_vip=is_vip,
                region=region,
            )

        logger.info("Transfer search returned %s routes", len(results))
        return {"success": True, "count": len(results), "transfers": results}

    @staticmethod
    def _route_result(
        transfer: AirportTransfer, vehicles: List[TransferVehicle], is_vip: bool
    ) -> Dict[str, Any]:
        return {
            "id": transfer.id_transfer,
            "name": f"{transfer.from_location} - {transfer.to_location}",
            "description": transfer.description
            or f"Transfer from {transfer.from_location} to {transfer.to_location}",
            "from_location": transfer.from_location.split(" ")[0],
            "from_location_full": transfer.from_location,
            "to_location": transfer.to_location,
            "distance": transfer.distance,
            "duration": transfer.duration,
            "region": transfer.region,
            "image": transfer.image or DEFAULT_ROUTE_IMAGE,
            "popular": transfer.booking_count > POPULAR_BOOKING_COUNT,
            "vehicles": [_vehicle_result(vehicle, is_vip) for vehicle in vehicles],
        }

    def get_transfer(self, transfer_id: int) -> AirportTransfer:
        transfer = transfer_repository.get_transfer(self.db, transfer_id)
        if transfer is None or not transfer.is_active:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transfer not found")
        return transfer

    def get_vehicle(self, vehicle_id: int) -> TransferVehicle:
        vehicle = transfer_repository.get_vehicle(self.db, vehicle_id)
        if vehicle is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transfer vehicle not found")
        return vehicle

    def submit_vehicle(self, owner: User, submission: TransferVehicleSubmission) -> List[TransferVehicle]:
        info = submission.vehicle
        if transfer_repository.plate_exists(self.db, info.plate):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A vehicle with this plate already exists",
            )

        pricing = submission.pricing
        insurance = submission.legal.insurance
        driver = submission.legal.driver
        created = []
        for route in pricing.routes:
            transfer = transfer_repository.find_route(self.db, route.from_location, route.to_location)
            if transfer is None:
                transfer = transfer_repository.create_transfer(
                    self.db,
                    AirportTransfer(
                        id_owner=owner.id_user,
                        from_location=route.from_location,
                        to_location=route.to_location,
                        distance=route.distance,
                        duration=route.duration,
                        region=route.region,
                        is_active=True,
                        booking_count=0,
                    ),
                )

            price_standard, price_vip = route_prices(route, pricing.per_km_fee, pricing.minimum_fee)
            vehicle = TransferVehicle(
                id_transfer=transfer.id_transfer,
                vehicle_type=submission.category,
                name=info.name or f"{info.brand} {info.model}",
                capacity=info.passenger_capacity,
                luggage_capacity=info.luggage_capacity,
                price_standard=price_standard,
                price_vip=price_vip,
                features=list(info.features),
                image=info.image,
                plate=info.plate,
                brand=info.brand,
                model=info.model,
                year=info.year,
                color=info.color,
                d2_license_number=info.d2_license_number,
                per_km_fee=pricing.per_km_fee,
                minimum_fee=pricing.minimum_fee,
                night_surcharge=pricing.night_surcharge,
                weekend_surcharge=pricing.weekend_surcharge,
                insurance_provider=insurance.provider,
                insurance_policy_number=insurance.policy_number,
                insurance_coverage=insurance.coverage,
                insurance_expiry=insurance.expiry_date,
                driver_name=driver.name,
                driver_phone=driver.phone,
                driver_license_number=driver.license_number,
                driver_license_expiry=driver.license_expiry,
                src4_certificate=driver.src4_certificate,
                psychotechnic_certificate=driver.psychotechnic_certificate,
            )
            created.append(transfer_repository.create_vehicle(self.db, vehicle))

        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Could not save transfer vehicle: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Could not save transfer vehicle",
            ) from exc

        for vehicle in created:
            self.db.refresh(vehicle)
        logger.info(
            "Transfer vehicle %s registered by user %s on %s routes",
            info.plate,
            owner.id_user,
            len(created),
        )
        return created

    def list_owner_transfers(self, owner: User) -> List[AirportTransfer]:
        return transfer_repository.list_owner_transfers(self.db, owner.id_user)

    def list_owner_vehicles(self, owner: User) -> List[TransferVehicle]:
        return transfer_repository.list_owner_vehicles(self.db, owner.id_user)
