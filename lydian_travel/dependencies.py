from collections.abc import Iterator
from functools import lru_cache

from lydian_travel.clients import AmadeusClient
from lydian_travel.core.database import SessionLocal
from lydian_travel.services.email_service import EmailService


def get_db() -> Iterator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_email_service() -> EmailService:
    return EmailService()


@lru_cache
def get_amadeus_client() -> AmadeusClient:
    return AmadeusClient()
