"""Insert reference data: launch coupons, the airport transfer catalog and an admin account.

Run with ``python -m lydian_travel.seed``. Rows that already exist are left untouched.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

import lydian_travel.models  # noqa: F401
from lydian_travel.core.config import settings
from lydian_travel.core.database import Base, SessionLocal, engine
from lydian_travel.core.security import hash_password
from lydian_travel.models.coupon import Coupon
from lydian_travel.models.transfer import AirportTransfer, TransferVehicle
from lydian_travel.models.user import User
from lydian_travel.repository import coupon_repository, transfer_repository, user_repository
from lydian_travel.services.transfer_catalog import TRANSFER_ROUTES

logger = logging.getLogger(__name__)

# Routes flagged popular start just above the popularity threshold
POPULAR_SEED_BOOKINGS = 101

SEED_COUPONS = [
    {
        "code": "WELCOME10",
        "type": "percentage",
        "value": Decimal("10"),
        "min_amount": Decimal("500"),
        "valid_from": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "valid_until": datetime(2024, 12, 31, tzinfo=timezone.utc),
        "usage_limit": 1000,
    },
    {
        "code": "EARLYBIRD",
        "type": "percentage",
        "value": Decimal("20"),
        "min_amount": Decimal("1000"),
        "max_discount": Decimal("500"),
        "valid_from": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "valid_until": datetime(2024, 6, 30, tzinfo=timezone.utc),
        "usage_limit": 500,
    },
    {
        "code": "SUMMER2024",
        "type": "fixed_amount",
        "value": Decimal("200"),
        "min_amount": Decimal("800"),
        "valid_from": datetime(2024, 6, 1, tzinfo=timezone.utc),
        "valid_until": datetime(2024, 8, 31, tzinfo=timezone.utc),
        "applicable_categories": ["tour"],
    },
]


def seed_coupons(db: Session) -> int:
    created = 0
    for data in SEED_COUPONS:
        if coupon_repository.get_coupon_by_code(db, data["code"]) is not None:
            continue
        coupon_repository.create_coupon(db, Coupon(**data, used_count=0))
        created += 1
    return created


def seed_transfers(db: Session) -> int:
    created = 0
    for route in TRANSFER_ROUTES:
        if transfer_repository.find_route(db, route["from_location"], route["to_location"]) is not None:
            continue
        transfer = transfer_repository.create_transfer(
            db,
            AirportTransfer(
                from_location=route["from_location"],
                to_location=route["to_location"],
                distance=route["distance"],
                duration=route["duration"],
                region=route["region"],
                description=route["description"],
                image=route["image"],
                is_active=True,
                booking_count=POPULAR_SEED_BOOKINGS if route["popular"] else 0,
            ),
        )
        for vehicle in route["vehicles"]:
            transfer_repository.create_vehicle(
                db,
                TransferVehicle(
                    id_transfer=transfer.id_transfer,
                    vehicle_type=vehicle["vehicle_type"],
                    name=vehicle["name"],
                    capacity=vehicle["capacity"],
                    luggage_capacity=vehicle["luggage_capacity"],
                    price_standard=vehicle["price_standard"],
                    price_vip=vehicle["price_vip"],
                    features=list(vehicle["features"]),
                    image=vehicle["image"],
                ),
            )
        created += 1
    return created


def seed_admin(db: Session) -> bool:
    if user_repository.get_user_by_email(db, settings.SEED_ADMIN_EMAIL) is not None:
        return False
    user_repository.create_user(
        db,
        User(
            name="Lydian",
            lastname="Admin",
            email=settings.SEED_ADMIN_EMAIL.lower(),
            phone="+900000000000",
            password_hash=hash_password(settings.SEED_ADMIN_PASSWORD),
            role="admin",
            status="active",
            email_verified=True,
        ),
    )
    return True


def run_seed(db: Session) -> dict:
    summary = {
        "coupons": seed_coupons(db),
        "transfers": seed_transfers(db),
        "admin": seed_admin(db),
    }
    db.commit()
    return summary


def main() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        summary = run_seed(db)
    except Exception:
        db.rollback()
        logger.exception("Seeding failed")
        raise
    finally:
        db.close()
    logger.info(
        "Seeded %s coupons, %s transfer routes, admin created: %s",
        summary["coupons"],
        summary["transfers"],
        summary["admin"],
    )


if __name__ == "__main__":
    main()
