"""Admin management of service categories."""
from __future__ import annotations

from salon_api.extensions import db
from salon_api.models import Service, ServiceCategory


def test_category_routes_require_auth(client) -> None:
    assert client.get("/api/admin/categories").status_code == 401
    assert client.post("/api/admin/categories", json={"name": "Spa"}).status_code == 401


def test_create_category_with_defaults_201(client, auth_headers) -> None:
    response = client.post(
        "/api/admin/categories",
        json={"name": "Body Treatments", "description": "Massages"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    data = response.get_json()["data"]
    assert data["slug"] == "body-treatments"
    assert data["color"] == "#6366F1"
    assert data["iconClass"] == "fas fa-spa"
    assert data["isActive"] is True


def test_create_category_validation(client, auth_headers) -> None:
    short = client.post("/api/admin/categories", json={"name": "A"}, headers=auth_headers)
    assert short.status_code == 400
    assert short.get_json()["message"] == "Category name is required and must be at least 2 characters"

    bad_color = client.post(
        "/api/admin/categories", json={"name": "Spa", "color": "red"}, headers=auth_headers
    )
    assert bad_color.status_code == 400

    orphan = client.post(
        "/api/admin/categories", json={"name": "Spa", "parentId": "missing"}, headers=auth_headers
    )
    assert orphan.status_code == 400
    assert orphan.get_json()["message"] == "Parent category not found"


def test_create_category_duplicate_slug(client, auth_headers, make_category) -> None:
    make_category("Hair Services", slug="hair")

    response = client.post(
        "/api/admin/categories", json={"name": "Hair Care", "slug": "hair"}, headers=auth_headers
    )

    assert response.status_code == 400
    assert response.get_json()["message"] == "A category with this slug already exists"


def test_list_includes_inactive_on_request(client, auth_headers, make_category, make_service) -> None:
    face = make_category("Face Treatments")
    make_category("Archived", is_active=False)
    make_service("Basic Facial", category=face)

    active = client.get("/api/admin/categories", headers=auth_headers).get_json()["data"]
    assert [item["name"] for item in active] == ["Face Treatments"]
    assert active[0]["services"][0]["name"] == "Basic Facial"

    everything = client.get(
        "/api/admin/categories?includeInactive=true", headers=auth_headers
    ).get_json()["data"]
    assert {item["name"] for item in everything} == {"Face Treatments", "Archived"}


def test_update_category(client, auth_headers, make_category) -> None:
    category = make_category("Nail Services")

    response = client.put(
        f"/api/admin/categories/{category.id}",
        json={"name": "Nails", "color": "#45B7D1", "sortOrder": 3},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["name"] == "Nails"
    assert data["slug"] == "nails"
    assert data["sortOrder"] == 3


def test_update_category_cannot_be_own_parent(client, auth_headers, make_category) -> None:
    category = make_category("Nail Services")

    response = client.put(
        f"/api/admin/categories/{category.id}",
        json={"name": "Nail Services", "parentId": category.id},
        headers=auth_headers,
    )

    assert response.status_code == 400


def test_update_missing_category_404(client, auth_headers) -> None:
    response = client.put("/api/admin/categories/missing", json={"name": "Spa"}, headers=auth_headers)

    assert response.status_code == 404


def test_delete_category_blocked_by_active_services(client, auth_headers, make_category, make_service) -> None:
    category = make_category("Face Treatments")
    make_service("Basic Facial", category=category)

    response = client.delete(f"/api/admin/categories/{category.id}", headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()["message"].startswith("Cannot delete category with active services")


def test_delete_category_blocked_by_children(client, auth_headers, make_category) -> None:
    parent = make_category("Hair Services")
    make_category("Colouring", parent_id=parent.id)

    response = client.delete(f"/api/admin/categories/{parent.id}", headers=auth_headers)

    assert response.status_code == 400
    assert response.get_json()["message"].startswith("Cannot delete category with child categories")


def test_delete_category_detaches_inactive_services(client, auth_headers, make_category, make_service) -> None:
    category = make_category("Face Treatments")
    service = make_service("Retired Facial", category=category, is_active=False)
    service_id = service.id
    category_id = category.id

    response = client.delete(f"/api/admin/categories/{category_id}", headers=auth_headers)

    assert response.status_code == 200
    db.session.expire_all()
    assert db.session.get(ServiceCategory, category_id) is None
    assert db.session.get(Service, service_id).category_id is None


def test_update_category_rejects_descendant_as_parent(client, auth_headers, make_category) -> None:
    root = make_category("Hair Services")
    child = make_category("Colouring", parent_id=root.id)
    grandchild = make_category("Balayage", parent_id=child.id)

    for descendant in (child, grandchild):
        response = client.put(
            f"/api/admin/categories/{root.id}",
            json={"name": "Hair Services", "parentId": descendant.id},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.get_json()["message"] == (
            "A category cannot be moved under one of its own subcategories"
        )

    db.session.refresh(root)
    assert root.parent_id is None


def test_update_category_accepts_unrelated_parent(client, auth_headers, make_category) -> None:
    spa = make_category("Spa")
    nails = make_category("Nail Services")

    response = client.put(
        f"/api/admin/categories/{nails.id}",
        json={"name": "Nail Services", "parentId": spa.id},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.get_json()["data"]["parentId"] == spa.id
