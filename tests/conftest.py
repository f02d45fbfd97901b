"""Shared pytest fixtures: an app bound to in-memory SQLite and an authenticated admin."""
from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest
from PIL import Image
from werkzeug.security import generate_password_hash

# Ensure the project root is available on sys.path so tests can import the app package.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from salon_api import create_app  # noqa: E402
from salon_api.auth import generate_tokens  # noqa: E402
from salon_api.config import TestingConfig  # noqa: E402
from salon_api.extensions import db  # noqa: E402
from salon_api.models import Admin, Service, ServiceCategory  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def app(tmp_path):
    app = create_app(TestingConfig)
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(app):
    admin = Admin(
        email=ADMIN_EMAIL,
        password=generate_password_hash(ADMIN_PASSWORD),
        name="Test Admin",
        is_active=True,
    )
    db.session.add(admin)
    db.session.commit()
    return admin


@pytest.fixture
def auth_headers(admin):
    tokens = generate_tokens(admin)
    return {"Authorization": f"Bearer {tokens['accessToken']}"}


@pytest.fixture
def make_category(app):
    def _make(name="Face Treatments", **overrides):
        fields = {
            "name": name,
            "slug": name.lower().replace(" ", "-"),
            "is_active": True,
        }
        fields.update(overrides)
        category = ServiceCategory(**fields)
        db.session.add(category)
        db.session.commit()
        return category

    return _make


@pytest.fixture
def make_service(app, make_category):
    def _make(name="Basic Facial", category=None, **overrides):
        if category is None:
            category = ServiceCategory.query.first() or make_category()
        fields = {
            "name": name,
            "slug": name.lower().replace(" ", "-"),
            "duration": 45,
            "price": 65,
            "category_id": category.id,
            "is_active": True,
            "is_bookable": True,
        }
        fields.update(overrides)
        service = Service(**fields)
        db.session.add(service)
        db.session.commit()
        return service

    return _make


@pytest.fixture
def png_bytes():
    def _make(size=(1000, 800), color="red"):
        buffer = io.BytesIO()
        Image.new("RGB", size, color).save(buffer, format="PNG")
        return buffer.getvalue()

    return _make
