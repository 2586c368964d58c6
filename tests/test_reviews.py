from decimal import Decimal

import pytest

from lydian_travel.models.booking import Booking, BookingStatus, BookingType, PaymentStatus
from lydian_travel.services.review_service import summarize_ratings

from .conftest import API, future


@pytest.fixture
def make_stay(db_session, active_property):
    counter = {"value": 0}

    def _make(user, status=BookingStatus.COMPLETED):
        counter["value"] += 1
        booking = Booking(
            booking_reference=f"BK-REV00{counter['value']}",
            id_user=user.id_user,
            booking_type=BookingType.PROPERTY,
            id_property=active_property.id_property,
            check_in_date=future(days=-10 - counter["value"] * 5),
            check_out_date=future(days=-8 - counter["value"] * 5),
            total_amount=Decimal("2000"),
            status=status,
            payment_status=PaymentStatus.COMPLETED,
        )
        db_session.add(booking)
        db_session.commit()
        return booking

    return _make


def _review(client, headers, booking, rating=5, **extra):
    return client.post(
        f"{API}/reviews",
        json={
            "booking_id": booking.id_booking,
            "rating": rating,
            "title": "Harika bir tatil",
            "comment": "Ev tertemizdi ve ev sahibi çok ilgiliydi.",
            **extra,
        },
        headers=headers,
    )


def test_summarize_ratings():
    summary = summarize_ratings({5: 2, 4: 1})

    assert summary["average_rating"] == 4.7
    assert summary["total"] == 3
    assert summary["distribution"] == {1: 0, 2: 0, 3: 0, 4: 1, 5: 2}
    assert summarize_ratings({})["average_rating"] == 0.0


def test_review_updates_property_rating(client, db_session, traveler, traveler_headers, create_user, auth_headers, make_stay, active_property):
    response = _review(client, traveler_headers, make_stay(traveler))
    other = create_user()
    _review(client, auth_headers(other), make_stay(other), rating=4)

    assert response.status_code == 201
    body = response.json()
    assert body["listing_type"] == "property"
    assert body["listing_id"] == active_property.id_property
    assert body["author_name"] == traveler.full_name
    db_session.refresh(active_property)
    assert active_property.rating == Decimal("4.5")
    assert active_property.review_count == 2


def test_only_completed_own_bookings_can_be_reviewed(client, traveler, traveler_headers, create_user, make_stay):
    pending = make_stay(traveler, status=BookingStatus.CONFIRMED)
    someone_elses = make_stay(create_user())

    not_done = _review(client, traveler_headers, pending)
    not_mine = _review(client, traveler_headers, someone_elses)

    assert not_done.status_code == 400
    assert not_done.json()["detail"] == "Only completed bookings can be reviewed"
    assert not_mine.status_code == 404


def test_one_review_per_booking(client, traveler, traveler_headers, make_stay):
    stay = make_stay(traveler)
    _review(client, traveler_headers, stay)

    response = _review(client, traveler_headers, stay)

    assert response.status_code == 409


def test_review_validation(client, traveler, traveler_headers, make_stay):
    response = _review(client, traveler_headers, make_stay(traveler), rating=6, comment="kısa")

    assert response.status_code == 422


def test_list_reviews_with_summary(client, traveler, traveler_headers, make_stay, active_property):
    _review(client, traveler_headers, make_stay(traveler), rating=3)

    response = client.get(f"{API}/reviews/property/{active_property.id_property}")

    assert response.status_code == 200
    body = response.json()
    assert body["average_rating"] == 3.0
    assert body["total"] == 1
    assert body["distribution"]["3"] == 1
    assert len(body["reviews"]) == 1


def test_unknown_listing_type(client):
    assert client.get(f"{API}/reviews/boat/1").status_code == 422


def test_vote_once(client, traveler, traveler_headers, create_user, auth_headers, make_stay):
    review = _review(client, traveler_headers, make_stay(traveler)).json()
    voter_headers = auth_headers(create_user())

    first = client.post(f"{API}/reviews/{review['id_review']}/vote", json={"helpful": True}, headers=voter_headers)
    second = client.post(f"{API}/reviews/{review['id_review']}/vote", json={"helpful": False}, headers=voter_headers)

    assert first.json()["helpful_count"] == 1
    assert second.status_code == 409


def test_delete_review_recomputes_rating(client, db_session, traveler, traveler_headers, create_user, auth_headers, make_stay, active_property):
    review = _review(client, traveler_headers, make_stay(traveler)).json()

    forbidden = client.delete(f"{API}/reviews/{review['id_review']}", headers=auth_headers(create_user()))
    deleted = client.delete(f"{API}/reviews/{review['id_review']}", headers=traveler_headers)

    assert forbidden.status_code == 403
    assert deleted.status_code == 204
    db_session.refresh(active_property)
    assert active_property.review_count == 0
    assert active_property.rating == Decimal("0")
