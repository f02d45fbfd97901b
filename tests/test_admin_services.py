"""Admin management of services."""
from __future__ import annotations

from datetime import date, time

import pytest

from salon_api.extensions import db
from salon_api.models import Booking, BookingStatus, Service


def _service_payload(category, **overrides):
    payload = {
        "name": "Deep Cleansing Facial",
        "description": "Steam and extraction",
        "duration": 60,
        "price": 85,
        "categoryId": category.id,
        "tags": ["facial", "cleansing"],
    }
    payload.update(overrides)
    return payload


def test_create_service_201(client, auth_headers, make_category) -> None:
    category = make_category()

    response = client.post("/api/admin/services", json=_service_payload(category), headers=auth_headers)

    assert response.status_code == 201
    data = response.get_json()["data"]
    assert data["slug"] == "deep-cleansing-facial"
    assert data["priceType"] == "fixed"
    assert data["serviceType"] == "individual"
    assert data["difficultyLevel"] == "basic"
    assert data["isActive"] is True
    assert data["isBookable"] is True
    assert data["requiresConsultation"] is False
    assert data["tags"] == ["facial", "cleansing"]
    assert Service.query.count() == 1


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"name": "X"}, "Service name is required and must be at least 2 characters"),
        ({"duration": 10}, "Duration must be between 15 and 480 minutes"),
        ({"duration": 500}, "Duration must be between 15 and 480 minutes"),
        ({"price": None}, "Price must be a positive number"),
        ({"price": -1}, "Price must be a positive number"),
        ({"categoryId": None}, "Category ID is required"),
        ({"minPrice": 100, "maxPrice": 50}, "Minimum price cannot be greater than maximum price"),
        ({"priceType": "hourly"}, "priceType must be one of: fixed, variable, consultation"),
    ],
)
def test_create_service_validation_400(client, auth_headers, make_category, overrides, message) -> None:
    category = make_category()

    response = client.post(
        "/api/admin/services", json=_service_payload(category, **overrides), headers=auth_headers
    )

    assert response.status_code == 400
    assert response.get_json()["message"] == message


def test_create_service_inactive_category_404(client, auth_headers, make_category) -> None:
    category = make_category(is_active=False)

    response = client.post("/api/admin/services", json=_service_payload(category), headers=auth_headers)

    assert response.status_code == 404
    assert response.get_json()["message"] == "Category not found or inactive"


def test_create_service_duplicate_slug(client, auth_headers, make_category, make_service) -> None:
    category = make_category()
    make_service("Deep Cleansing Facial", category=category, slug="deep-cleansing-facial")

    response = client.post("/api/admin/services", json=_service_payload(category), headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()["message"] == "A service with this slug already exists"


def test_list_services_paginated(client, auth_headers, make_category, make_service) -> None:
    category = make_category()
    for index in range(5):
        make_service(f"Service {index}", category=category, sort_order=index)
    make_service("Retired", category=category, is_active=False)

    body = client.get("/api/admin/services?limit=2&page=2", headers=auth_headers).get_json()
    data = body["data"]
    assert [item["name"] for item in data["services"]] == ["Service 2", "Service 3"]
    assert data["pagination"] == {"page": 2, "limit": 2, "total": 5, "pages": 3}

    everything = client.get("/api/admin/services?includeInactive=true", headers=auth_headers).get_json()
    assert everything["data"]["pagination"]["total"] == 6

    capped = client.get("/api/admin/services?limit=500", headers=auth_headers).get_json()
    assert capped["data"]["pagination"]["limit"] == 100


def test_get_service_includes_inactive(client, auth_headers, make_service) -> None:
    service = make_service("Retired", is_active=False)

    response = client.get(f"/api/admin/services/{service.id}", headers=auth_headers)

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["isActive"] is False
    assert data["category"]["slug"] == "face-treatments"


def test_update_service(client, auth_headers, make_category, make_service) -> None:
    category = make_category()
    service = make_service("Basic Facial", category=category)

    response = client.put(
        f"/api/admin/services/{service.id}",
        json=_service_payload(category, name="Basic Facial", price=70, isBookable=False),
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["price"] == 70.0
    assert data["isBookable"] is False


def test_update_missing_service_404(client, auth_headers, make_category) -> None:
    category = make_category()

    response = client.put("/api/admin/services/missing", json=_service_payload(category), headers=auth_headers)

    assert response.status_code == 404


def _booking(service, status):
    booking = Booking(
        customer_name="Guest",
        customer_phone="+15550000000",
        service_id=service.id,
        requested_date=date(2099, 1, 1),
        requested_time=time(10, 0),
        status=status,
    )
    db.session.add(booking)
    db.session.commit()
    return booking


def test_delete_service_blocked_by_active_bookings(client, auth_headers, make_service) -> None:
    service = make_service()
    _booking(service, BookingStatus.CONFIRMED)

    response = client.delete(f"/api/admin/services/{service.id}", headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()["message"].startswith("Cannot delete service with pending or confirmed bookings")


def test_delete_service_without_bookings(client, auth_headers, make_service) -> None:
    service = make_service()
    service_id = service.id

    response = client.delete(f"/api/admin/services/{service_id}", headers=auth_headers)

    assert response.status_code == 200
    assert db.session.get(Service, service_id) is None


def test_delete_service_with_history_is_retired(client, auth_headers, make_service) -> None:
    service = make_service()
    _booking(service, BookingStatus.COMPLETED)

    response = client.delete(f"/api/admin/services/{service.id}", headers=auth_headers)

    assert response.status_code == 200
    assert service.is_active is False
    assert client.get(f"/api/services/{service.id}").status_code == 404
