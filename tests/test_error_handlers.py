import pytest

from lydian_travel.core.error_handlers import _flatten_detail

from .conftest import API


@pytest.mark.parametrize(
    "detail, expected",
    [
        ("Booking not found", "Booking not found"),
        ({"detail": "nested"}, "nested"),
        ({"field": "required", "code": 7}, "field: required; code: 7"),
        (["first", {"detail": "second"}], "first; second"),
        (None, "An error occurred"),
        (42, "42"),
    ],
)
def test_flatten_detail(detail, expected):
    assert _flatten_detail(detail) == expected


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_validation_errors_are_flattened(client):
    response = client.post(f"{API}/coupons/validate", json={"amount": "abc"})

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail.startswith("code: Field required; amount: ")
    assert "body" not in detail


def test_http_errors_keep_their_headers(client):
    missing = client.get(f"{API}/auth/me")
    invalid = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert missing.status_code == 401
    assert missing.json() == {"detail": "Unauthorized"}
    assert invalid.json() == {"detail": "Could not validate credentials"}
    assert invalid.headers["www-authenticate"] == "Bearer"
