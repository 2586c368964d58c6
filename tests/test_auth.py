from datetime import timedelta

import pytest

from lydian_travel.models.account_token import AccountToken
from lydian_travel.models.session import UserSession
from lydian_travel.services.auth_service import password_strength
from lydian_travel.services.booking_utils import utcnow

from .conftest import API, DEFAULT_PASSWORD

REGISTER_PAYLOAD = {
    "name": "Mehmet",
    "lastname": "Demir",
    "email": "mehmet@example.com",
    "phone": "+905321234567",
    "password": "Gizli1234",
    "password_confirmation": "Gizli1234",
    "accept_terms": True,
}


def _token_for(db_session, purpose):
    return db_session.query(AccountToken).filter(AccountToken.purpose == purpose).one()


def test_register_returns_tokens_and_sends_verification(client, db_session, outbox):
    response = client.post(f"{API}/auth/register", json=REGISTER_PAYLOAD)

    assert response.status_code == 201
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["verification_required"] is True
    assert body["user"]["email"] == "mehmet@example.com"
    assert body["user"]["role"] == "traveler"
    assert body["user"]["email_verified"] is False
    assert outbox.subjects() == ["Verify your Travel LyDian email address"]

    token = _token_for(db_session, "email_verification")
    assert token.token in outbox.sent[0].html_body


@pytest.mark.parametrize(
    "changes, detail",
    [
        ({"password_confirmation": "Gizli12345"}, "Passwords do not match"),
        ({"password": "gizli", "password_confirmation": "gizli"}, "Password is too weak"),
        ({"accept_terms": False}, "Terms must be accepted"),
    ],
)
def test_register_rejects_invalid_submissions(client, changes, detail):
    response = client.post(f"{API}/auth/register", json={**REGISTER_PAYLOAD, **changes})

    assert response.status_code == 422
    assert response.json()["detail"] == detail


def test_register_rejects_duplicate_email(client, create_user):
    create_user(email="mehmet@example.com")

    response = client.post(f"{API}/auth/register", json=REGISTER_PAYLOAD)

    assert response.status_code == 409
    assert response.json()["detail"] == "An account with this email already exists"


def test_login_and_me(client, traveler):
    response = client.post(
        f"{API}/auth/login",
        json={"email": traveler.email.upper(), "password": DEFAULT_PASSWORD},
    )
    assert response.status_code == 200

    token = response.json()["access_token"]
    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert me.status_code == 200
    assert me.json()["id_user"] == traveler.id_user


def test_login_with_wrong_password(client, traveler):
    response = client.post(f"{API}/auth/login", json={"email": traveler.email, "password": "Wrong1234"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_disabled_account_cannot_login(client, create_user):
    user = create_user(status="disabled")

    response = client.post(f"{API}/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})

    assert response.status_code == 403
    assert response.json()["detail"] == "Account is disabled"


def test_remember_me_extends_refresh_lifetime(client, db_session, traveler):
    client.post(
        f"{API}/auth/login",
        json={"email": traveler.email, "password": DEFAULT_PASSWORD, "remember_me": True},
    )

    user_session = db_session.query(UserSession).one()
    assert user_session.remember_me is True
    remaining = user_session.expires_at.replace(tzinfo=None) - utcnow().replace(tzinfo=None)
    assert remaining > timedelta(days=29)


def test_protected_route_requires_token(client):
    response = client.get(f"{API}/auth/me")

    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized"


def test_garbage_token_is_rejected(client):
    response = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Could not validate credentials"
    assert response.headers["www-authenticate"] == "Bearer"


def test_refresh_rotates_tokens(client, traveler):
    login = client.post(f"{API}/auth/login", json={"email": traveler.email, "password": DEFAULT_PASSWORD}).json()

    response = client.post(f"{API}/auth/refresh", json={"refresh_token": login["refresh_token"]})

    assert response.status_code == 200
    rotated = response.json()
    assert rotated["access_token"] != login["access_token"]
    old = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {login['access_token']}"})
    assert old.status_code == 401
    reused = client.post(f"{API}/auth/refresh", json={"refresh_token": login["refresh_token"]})
    assert reused.status_code == 401


def test_logout_revokes_access_token(client, traveler, traveler_headers):
    response = client.post(f"{API}/auth/logout", headers=traveler_headers)
    assert response.status_code == 200

    me = client.get(f"{API}/auth/me", headers=traveler_headers)
    assert me.status_code == 401


def test_password_reset_does_not_disclose_unknown_accounts(client, outbox):
    response = client.post(f"{API}/auth/password-reset/request", json={"email": "ghost@example.com"})

    assert response.status_code == 202
    assert outbox.sent == []


def test_password_reset_flow_revokes_sessions(client, db_session, traveler, traveler_headers, outbox):
    response = client.post(f"{API}/auth/password-reset/request", json={"email": traveler.email})
    assert response.status_code == 202
    assert outbox.subjects() == ["Reset your Travel LyDian password"]

    token = _token_for(db_session, "password_reset").token
    confirm = client.post(
        f"{API}/auth/password-reset/confirm",
        json={"token": token, "new_password": "Yepyeni123", "password_confirmation": "Yepyeni123"},
    )
    assert confirm.status_code == 200

    assert client.get(f"{API}/auth/me", headers=traveler_headers).status_code == 401
    login = client.post(f"{API}/auth/login", json={"email": traveler.email, "password": "Yepyeni123"})
    assert login.status_code == 200

    reused = client.post(
        f"{API}/auth/password-reset/confirm",
        json={"token": token, "new_password": "Baska1234", "password_confirmation": "Baska1234"},
    )
    assert reused.status_code == 400
    assert reused.json()["detail"] == "Invalid or expired token"


def test_expired_reset_token_is_rejected(client, db_session, traveler):
    client.post(f"{API}/auth/password-reset/request", json={"email": traveler.email})
    record = _token_for(db_session, "password_reset")
    record.expires_at = utcnow() - timedelta(minutes=1)
    db_session.commit()

    response = client.post(
        f"{API}/auth/password-reset/confirm",
        json={"token": record.token, "new_password": "Yepyeni123", "password_confirmation": "Yepyeni123"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid or expired token"


def test_verify_email(client, db_session):
    client.post(f"{API}/auth/register", json=REGISTER_PAYLOAD)
    token = _token_for(db_session, "email_verification").token

    response = client.post(f"{API}/auth/verify-email", json={"token": token})

    assert response.status_code == 200
    assert response.json()["email_verified"] is True


def test_resend_verification_issues_new_token(client, db_session, outbox):
    client.post(f"{API}/auth/register", json=REGISTER_PAYLOAD)

    response = client.post(f"{API}/auth/resend-verification", json={"email": REGISTER_PAYLOAD["email"]})

    assert response.status_code == 202
    assert len(outbox.sent) == 2
    assert db_session.query(AccountToken).count() == 2


def test_update_me_is_partial(client, traveler, traveler_headers):
    response = client.patch(f"{API}/auth/me", json={"city": "İzmir"}, headers=traveler_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["city"] == "İzmir"
    assert body["name"] == traveler.name


@pytest.mark.parametrize(
    "password, label",
    [("abc", "weak"), ("abcdefgH1", "medium"), ("Abcdefgh123!", "strong")],
)
def test_password_strength(password, label):
    assert password_strength(password)[0] == label


def test_password_strength_endpoint(client):
    response = client.post(f"{API}/auth/password-strength", json={"password": "Abcdefgh123!"})

    assert response.status_code == 200
    assert response.json()["strength"] == "strong"
