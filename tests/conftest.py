import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["AMADEUS_CLIENT_ID"] = ""
os.environ["AMADEUS_CLIENT_SECRET"] = ""
os.environ["EMAIL_NOTIFICATIONS_ENABLED"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import List  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from lydian_travel.clients import AmadeusClient  # noqa: E402
from lydian_travel.core.database import Base, SessionLocal, engine  # noqa: E402
from lydian_travel.core.security import hash_password  # noqa: E402
from lydian_travel.dependencies import get_amadeus_client, get_db, get_email_service  # noqa: E402
from lydian_travel.main import app  # noqa: E402
from lydian_travel.models.email import EmailContent  # noqa: E402
from lydian_travel.models.property import RentalProperty  # noqa: E402
from lydian_travel.models.transfer import AirportTransfer, TransferVehicle  # noqa: E402
from lydian_travel.models.user import User  # noqa: E402
from lydian_travel.models.vehicle import RentalVehicle  # noqa: E402
from lydian_travel.services.email_service import EmailService  # noqa: E402

API = "/api/lydian/v1"
DEFAULT_PASSWORD = "Str0ngPass"


class FakeEmailRepository:
    """Collects outgoing emails instead of talking to an SMTP server."""

    def __init__(self, fail: bool = False):
        self.sent: List[EmailContent] = []
        self.fail = fail

    def send_email(self, email: EmailContent) -> None:
        if self.fail:
            raise RuntimeError("SMTP configuration is incomplete")
        self.sent.append(email)

    def subjects(self) -> List[str]:
        return [email.subject for email in self.sent]


@pytest.fixture
def db_session():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def outbox() -> FakeEmailRepository:
    return FakeEmailRepository()


@pytest.fixture
def email_service(outbox) -> EmailService:
    return EmailService(repository=outbox)


@pytest.fixture
def client(db_session, email_service):
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_amadeus_client] = lambda: AmadeusClient(sleep=lambda _: None)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def create_user(db_session):
    counter = {"value": 0}

    def _create(role: str = "traveler", email: str | None = None, **fields) -> User:
        counter["value"] += 1
        user = User(
            name=fields.pop("name", "Ayşe"),
            lastname=fields.pop("lastname", "Yılmaz"),
            email=email or f"{role}{counter['value']}@example.com",
            phone=fields.pop("phone", "+905551112233"),
            password_hash=hash_password(fields.pop("password", DEFAULT_PASSWORD)),
            role=role,
            status=fields.pop("status", "active"),
            email_verified=fields.pop("email_verified", True),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create


@pytest.fixture
def auth_headers(client):
    def _headers(user: User, password: str = DEFAULT_PASSWORD) -> dict:
        response = client.post(
            f"{API}/auth/login",
            json={"email": user.email, "password": password},
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _headers


@pytest.fixture
def traveler(create_user) -> User:
    return create_user("traveler")


@pytest.fixture
def traveler_headers(auth_headers, traveler) -> dict:
    return auth_headers(traveler)


@pytest.fixture
def admin(create_user) -> User:
    return create_user("admin")


@pytest.fixture
def admin_headers(auth_headers, admin) -> dict:
    return auth_headers(admin)


@pytest.fixture
def property_owner(create_user) -> User:
    return create_user("property_owner")


@pytest.fixture
def owner_headers(auth_headers, property_owner) -> dict:
    return auth_headers(property_owner)


@pytest.fixture
def active_property(db_session, property_owner) -> RentalProperty:
    rental_property = RentalProperty(
        id_owner=property_owner.id_user,
        name="Kaleiçi Taş Ev",
        slug="kaleici-tas-ev",
        property_type="house",
        description="Tarihi Kaleiçi sokaklarında, avlulu ve bahçeli restore edilmiş taş ev.",
        highlights=["Avlu"],
        bedrooms=2,
        bathrooms=Decimal("1.5"),
        max_guests=4,
        country="Türkiye",
        province="Antalya",
        city="Antalya",
        district="Muratpaşa",
        address="Kılınçarslan Mah. Hesapçı Sk. 12",
        postal_code="07100",
        latitude=Decimal("36.884"),
        longitude=Decimal("30.705"),
        timezone="Europe/Istanbul",
        amenities=["wifi", "klima"],
        base_price=Decimal("1000"),
        currency="TRY",
        cleaning_fee=Decimal("150"),
        min_stay=2,
        max_stay=30,
        check_in_time="15:00",
        check_out_time="11:00",
        cancellation_policy="moderate",
        status="active",
    )
    db_session.add(rental_property)
    db_session.commit()
    db_session.refresh(rental_property)
    return rental_property


@pytest.fixture
def vehicle_owner(create_user) -> User:
    return create_user("vehicle_owner")


@pytest.fixture
def rental_car(db_session, vehicle_owner) -> RentalVehicle:
    vehicle = RentalVehicle(
        id_owner=vehicle_owner.id_user,
        brand="Renault",
        model="Clio",
        year=2022,
        plate="07 ABC 123",
        color="Beyaz",
        category="economy",
        transmission="manual",
        fuel_type="diesel",
        seats=5,
        doors=4,
        city="Antalya",
        daily_rate=Decimal("1000"),
        currency="TRY",
        weekly_discount=10,
        monthly_discount=20,
        deposit=Decimal("2500"),
        extra_fees={"driver": "300", "gps": "50", "child_seat": "75"},
        min_rental_days=1,
        max_rental_days=30,
        status="active",
    )
    db_session.add(vehicle)
    db_session.commit()
    db_session.refresh(vehicle)
    return vehicle


@pytest.fixture
def transfer_owner(create_user) -> User:
    return create_user("transfer_owner")


@pytest.fixture
def transfer_route(db_session, transfer_owner) -> AirportTransfer:
    transfer = AirportTransfer(
        id_owner=transfer_owner.id_user,
        from_location="Antalya Havalimanı",
        to_location="Alanya",
        distance=125,
        duration=120,
        region="Alanya",
        is_active=True,
        booking_count=150,
    )
    transfer.vehicles = [
        TransferVehicle(
            vehicle_type="SEDAN",
            name="Standart Sedan",
            capacity=3,
            luggage_capacity=2,
            price_standard=Decimal("900"),
            price_vip=Decimal("1300"),
            features=["Klima"],
        ),
        TransferVehicle(
            vehicle_type="MINIBUS",
            name="Sprinter",
            capacity=14,
            luggage_capacity=12,
            price_standard=Decimal("2000"),
            price_vip=Decimal("2800"),
            features=["Klima", "Wi-Fi"],
        ),
    ]
    db_session.add(transfer)
    db_session.commit()
    db_session.refresh(transfer)
    return transfer


def future(days: int = 0, hours: int = 0) -> datetime:
    base = datetime.now(timezone.utc).replace(hour=12, minute=0, second=0, microsecond=0)
    return base + timedelta(days=days, hours=hours)
