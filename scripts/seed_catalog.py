#!/usr/bin/env python3
"""Seed the database with the default admin, service categories and services."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from werkzeug.security import generate_password_hash

# Add the parent directory to the path so we can import the app
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from salon_api import create_app
from salon_api.catalog import generate_slug
from salon_api.extensions import db
from salon_api.models import Admin, Service, ServiceCategory

DEFAULT_ADMIN = {
    "email": "admin@alcobrasalon.com",
    "password": "admin123",
    "name": "Alcobra Salon Admin",
}

CATEGORIES = [
    {
        "id": "face-treatments",
        "name": "Face Treatments",
        "description": "Professional facial treatments and skincare services",
        "color": "#FF6B6B",
        "icon_class": "fas fa-spa",
    },
    {
        "id": "hair-services",
        "name": "Hair Services",
        "description": "Cuts, colouring, styling and hair care treatments",
        "color": "#4ECDC4",
        "icon_class": "fas fa-cut",
    },
    {
        "id": "nail-services",
        "name": "Nail Services",
        "description": "Manicures, pedicures and nail art",
        "color": "#45B7D1",
        "icon_class": "fas fa-hand-paper",
    },
    {
        "id": "body-treatments",
        "name": "Body Treatments",
        "description": "Massages and full body relaxation therapies",
        "color": "#96CEB4",
        "icon_class": "fas fa-leaf",
    },
    {
        "id": "bridal-packages",
        "name": "Bridal Packages",
        "description": "Complete bridal beauty packages",
        "color": "#FFEAA7",
        "icon_class": "fas fa-crown",
    },
    {
        "id": "mens-grooming",
        "name": "Men's Grooming",
        "description": "Haircuts and grooming services for men",
        "color": "#6C5CE7",
        "icon_class": "fas fa-male",
    },
]

# (name, category, duration, price, price type, difficulty, tags, prep, cleanup)
SERVICES = [
    ("Basic Facial Cleansing", "face-treatments", 45, 65, "fixed", "basic",
     ["facial", "cleansing", "basic"], 10, 10),
    ("Anti-Aging Facial", "face-treatments", 75, 120, "fixed", "advanced",
     ["facial", "anti-aging"], 10, 15),
    ("Acne Treatment Facial", "face-treatments", 60, 85, "fixed", "intermediate",
     ["facial", "acne"], 10, 10),
    ("Hydrating Face Mask", "face-treatments", 30, 45, "fixed", "basic",
     ["facial", "mask", "hydrating"], 5, 5),
    ("Hair Wash & Blow Dry", "hair-services", 45, 35, "fixed", "basic",
     ["hair", "wash", "blow-dry"], 5, 10),
    ("Hair Cut & Style", "hair-services", 75, 65, "fixed", "intermediate",
     ["hair", "cut", "style"], 10, 15),
    ("Hair Coloring", "hair-services", 150, 120, "variable", "advanced",
     ["hair", "color"], 15, 20),
    ("Hair Treatment & Conditioning", "hair-services", 60, 55, "fixed", "basic",
     ["hair", "treatment"], 5, 10),
    ("Classic Manicure", "nail-services", 45, 35, "fixed", "basic",
     ["nails", "manicure"], 5, 10),
    ("Gel Manicure", "nail-services", 60, 50, "fixed", "intermediate",
     ["nails", "manicure", "gel"], 5, 10),
    ("Classic Pedicure", "nail-services", 60, 45, "fixed", "basic",
     ["nails", "pedicure"], 5, 10),
    ("Nail Art Design", "nail-services", 90, 75, "variable", "expert",
     ["nails", "art"], 10, 10),
    ("Relaxing Full Body Massage", "body-treatments", 90, 110, "fixed", "intermediate",
     ["massage", "relaxing", "body"], 10, 15),
    ("Deep Tissue Massage", "body-treatments", 75, 95, "fixed", "advanced",
     ["massage", "deep-tissue"], 10, 15),
    ("Bridal Makeup Trial", "bridal-packages", 120, 85, "fixed", "expert",
     ["bridal", "makeup", "trial"], 15, 15),
    ("Complete Bridal Package", "bridal-packages", 240, 350, "fixed", "expert",
     ["bridal", "package", "complete", "hair", "makeup", "nails"], 30, 30),
    ("Mens Haircut", "mens-grooming", 45, 35, "fixed", "basic",
     ["mens", "haircut", "grooming"], 5, 10),
    ("Beard Trim & Shape", "mens-grooming", 30, 25, "fixed", "intermediate",
     ["mens", "beard", "trim", "grooming"], 5, 10),
]

PACKAGES = {"Complete Bridal Package"}


def seed_catalog(admin_password: str | None = None) -> dict[str, int]:
    """Insert whatever is missing; existing rows are left untouched."""
    created = {"admins": 0, "categories": 0, "services": 0}

    if Admin.query.filter_by(email=DEFAULT_ADMIN["email"]).first() is None:
        db.session.add(Admin(
            email=DEFAULT_ADMIN["email"],
            name=DEFAULT_ADMIN["name"],
            password=generate_password_hash(admin_password or DEFAULT_ADMIN["password"]),
            is_active=True,
        ))
        created["admins"] += 1

    for sort_order, data in enumerate(CATEGORIES, start=1):
        if db.session.get(ServiceCategory, data["id"]) is None:
            db.session.add(ServiceCategory(slug=data["id"], sort_order=sort_order, is_active=True, **data))
            created["categories"] += 1
    db.session.flush()

    position: dict[str, int] = {}
    for name, category_id, duration, price, price_type, difficulty, tags, prep, cleanup in SERVICES:
        position[category_id] = position.get(category_id, 0) + 1
        slug = generate_slug(name)
        if Service.query.filter_by(slug=slug).first() is not None:
            continue
        db.session.add(Service(
            name=name,
            slug=slug,
            category_id=category_id,
            duration=duration,
            price=price,
            price_type=price_type,
            service_type="package" if name in PACKAGES else "individual",
            difficulty_level=difficulty,
            tags=tags,
            preparation_time=prep,
            cleanup_time=cleanup,
            sort_order=position[category_id],
            is_active=True,
            is_bookable=True,
            requires_consultation=name in PACKAGES,
        ))
        created["services"] += 1

    db.session.commit()
    return created


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the salon catalog and default admin.")
    parser.add_argument("--admin-password", help="Password for the default admin (default: admin123)")
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        db.create_all()
        created = seed_catalog(args.admin_password)

    print(f"{created['categories']} categories created")
    print(f"{created['services']} services created")
    if created["admins"]:
        print(f"Admin user: {DEFAULT_ADMIN['email']}")


if __name__ == "__main__":
    main()
