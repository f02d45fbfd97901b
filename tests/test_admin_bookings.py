"""Admin booking listing and status lifecycle."""
from __future__ import annotations

from datetime import date, time

import pytest

from salon_api.extensions import db
from salon_api.models import Booking, BookingStatus


@pytest.fixture
def make_booking(make_service):
    service_cache = {}

    def _make(name="Guest", status=BookingStatus.PENDING, day=1, hour=10, **overrides):
        if "service" not in service_cache:
            service_cache["service"] = make_service()
        booking = Booking(
            customer_name=name,
            customer_phone=overrides.pop("phone", "+15550000000"),
            customer_email=overrides.pop("email", None),
            service_id=service_cache["service"].id,
            requested_date=date(2099, 1, day),
            requested_time=time(hour, 0),
            status=status,
            **overrides,
        )
        db.session.add(booking)
        db.session.commit()
        return booking

    return _make


def _set_status(client, headers, booking, status, **extra):
    return client.put(
        f"/api/admin/bookings/{booking.id}/status",
        json={"status": status, **extra},
        headers=headers,
    )


def test_list_bookings_filters(client, auth_headers, make_booking) -> None:
    make_booking("Alice Smith", day=1, email="alice@example.com")
    make_booking("Bob Jones", status=BookingStatus.CONFIRMED, day=5)
    make_booking("Carol White", status=BookingStatus.CANCELLED, day=10, phone="+15557654321")

    everything = client.get("/api/admin/bookings", headers=auth_headers).get_json()["data"]
    assert everything["pagination"]["total"] == 3

    confirmed = client.get("/api/admin/bookings?status=CONFIRMED", headers=auth_headers).get_json()
    assert [item["customerName"] for item in confirmed["data"]["bookings"]] == ["Bob Jones"]

    by_email = client.get("/api/admin/bookings?search=alice%40", headers=auth_headers).get_json()
    assert [item["customerName"] for item in by_email["data"]["bookings"]] == ["Alice Smith"]

    by_phone = client.get("/api/admin/bookings?search=7654", headers=auth_headers).get_json()
    assert [item["customerName"] for item in by_phone["data"]["bookings"]] == ["Carol White"]

    ranged = client.get(
        "/api/admin/bookings?dateFrom=2099-01-02&dateTo=2099-01-09", headers=auth_headers
    ).get_json()
    assert [item["customerName"] for item in ranged["data"]["bookings"]] == ["Bob Jones"]


def test_list_bookings_default_page_size(client, auth_headers, make_booking) -> None:
    for hour in range(8, 20):
        make_booking(hour=hour)

    data = client.get("/api/admin/bookings", headers=auth_headers).get_json()["data"]

    assert len(data["bookings"]) == 10
    assert data["pagination"] == {"page": 1, "limit": 10, "total": 12, "pages": 2}


def test_list_bookings_bad_date_400(client, auth_headers) -> None:
    response = client.get("/api/admin/bookings?dateFrom=yesterday", headers=auth_headers)

    assert response.status_code == 400


def test_get_booking(client, auth_headers, make_booking) -> None:
    booking = make_booking()

    response = client.get(f"/api/admin/bookings/{booking.id}", headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json()["data"]["service"]["category"]["name"] == "Face Treatments"
    assert client.get("/api/admin/bookings/missing", headers=auth_headers).status_code == 404


@pytest.mark.parametrize(
    "status, stamped",
    [
        (BookingStatus.CONFIRMED, "confirmedAt"),
        (BookingStatus.COMPLETED, "completedAt"),
        (BookingStatus.CANCELLED, "cancelledAt"),
        (BookingStatus.NO_SHOW, "cancelledAt"),
    ],
)
def test_status_change_stamps_timestamp(client, auth_headers, make_booking, status, stamped) -> None:
    booking = make_booking()

    response = _set_status(client, auth_headers, booking, status)

    assert response.status_code == 200
    body = response.get_json()
    assert body["message"] == "Booking status updated successfully"
    assert body["data"]["status"] == status
    assert body["data"][stamped] is not None
    others = {"confirmedAt", "completedAt", "cancelledAt"} - {stamped}
    assert all(body["data"][key] is None for key in others)


def test_status_admin_notes(client, auth_headers, make_booking) -> None:
    booking = make_booking()

    first = _set_status(client, auth_headers, booking, BookingStatus.CONFIRMED, adminNotes="Called client")
    assert first.get_json()["data"]["adminNotes"] == "Called client"

    second = _set_status(client, auth_headers, booking, BookingStatus.COMPLETED, adminNotes="   ")
    assert second.get_json()["data"]["adminNotes"] == "Called client"


def test_invalid_status_400(client, auth_headers, make_booking) -> None:
    booking = make_booking()

    response = _set_status(client, auth_headers, booking, "ARCHIVED")

    assert response.status_code == 400
    assert response.get_json()["message"] == "Valid booking status is required"


def test_status_missing_booking_404(client, auth_headers) -> None:
    response = client.put(
        "/api/admin/bookings/missing/status", json={"status": "CONFIRMED"}, headers=auth_headers
    )

    assert response.status_code == 404


def test_reactivating_booking_checks_slot(client, auth_headers, make_booking) -> None:
    cancelled = make_booking("First Guest", status=BookingStatus.CANCELLED)
    make_booking("Second Guest", status=BookingStatus.PENDING)

    response = _set_status(client, auth_headers, cancelled, BookingStatus.CONFIRMED)

    assert response.status_code == 400
    assert "slot already booked" in response.get_json()["message"]
    db.session.refresh(cancelled)
    assert cancelled.status == BookingStatus.CANCELLED


def test_terminal_statuses_can_be_reopened_when_slot_free(client, auth_headers, make_booking) -> None:
    booking = make_booking(status=BookingStatus.NO_SHOW)

    response = _set_status(client, auth_headers, booking, BookingStatus.PENDING)

    assert response.status_code == 200
    assert response.get_json()["data"]["status"] == BookingStatus.PENDING
