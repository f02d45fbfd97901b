"""Public catalog and gallery endpoints."""
from __future__ import annotations

from salon_api.extensions import db
from salon_api.models import Transformation


def test_categories_list_only_active_with_active_children(client, make_category) -> None:
    parent = make_category("Hair Services", sort_order=2)
    make_category("Face Treatments", sort_order=1)
    make_category("Hidden", is_active=False)
    make_category("Colouring", parent_id=parent.id)
    make_category("Old Colouring", parent_id=parent.id, is_active=False)

    response = client.get("/api/categories")

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    names = [item["name"] for item in body["data"]]
    assert "Hidden" not in names
    assert names.index("Face Treatments") < names.index("Hair Services")

    hair = next(item for item in body["data"] if item["name"] == "Hair Services")
    assert [child["name"] for child in hair["children"]] == ["Colouring"]


def test_services_filtering(client, make_category, make_service) -> None:
    face = make_category("Face Treatments")
    nails = make_category("Nail Services")
    make_service("Basic Facial", category=face)
    make_service("Gel Manicure", category=nails)
    make_service("Nail Art Add-on", category=nails, service_type="addon", is_bookable=False)
    make_service("Retired Facial", category=face, is_active=False)

    everything = client.get("/api/services").get_json()["data"]
    assert {item["name"] for item in everything} == {"Basic Facial", "Gel Manicure", "Nail Art Add-on"}

    by_category = client.get(f"/api/services?categoryId={nails.id}").get_json()["data"]
    assert {item["name"] for item in by_category} == {"Gel Manicure", "Nail Art Add-on"}

    addons = client.get("/api/services?serviceType=addon").get_json()["data"]
    assert [item["name"] for item in addons] == ["Nail Art Add-on"]

    bookable = client.get("/api/services?isBookable=true").get_json()["data"]
    assert "Nail Art Add-on" not in {item["name"] for item in bookable}

    item = everything[0]
    assert item["category"]["name"] in {"Face Treatments", "Nail Services"}
    assert isinstance(item["price"], float)


def test_get_service_hides_inactive(client, make_service) -> None:
    active = make_service("Basic Facial")
    inactive = make_service("Retired Facial", is_active=False)

    response = client.get(f"/api/services/{active.id}")
    assert response.status_code == 200
    assert response.get_json()["data"]["name"] == "Basic Facial"

    response = client.get(f"/api/services/{inactive.id}")
    assert response.status_code == 404
    assert response.get_json() == {"success": False, "message": "Service not found"}


def _transformation(title, category="hair", is_active=True):
    item = Transformation(
        title=title,
        before_image="https://cdn.example.com/before.webp",
        after_image="https://cdn.example.com/after.webp",
        category=category,
        is_active=is_active,
    )
    db.session.add(item)
    db.session.commit()
    return item


def test_transformations_gallery(client, app) -> None:
    _transformation("Balayage")
    _transformation("Glow Facial", category="facial")
    hidden = _transformation("Draft", is_active=False)

    body = client.get("/api/transformations").get_json()
    assert {item["title"] for item in body["data"]} == {"Balayage", "Glow Facial"}

    facial = client.get("/api/transformations?category=facial").get_json()["data"]
    assert [item["title"] for item in facial] == ["Glow Facial"]

    limited = client.get("/api/transformations?limit=1").get_json()["data"]
    assert len(limited) == 1

    assert client.get(f"/api/transformations/{hidden.id}").status_code == 404


def test_transformation_detail(client, app) -> None:
    item = _transformation("Balayage")

    response = client.get(f"/api/transformations/{item.id}")

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["beforeImage"].endswith("before.webp")
    assert data["category"] == "hair"
