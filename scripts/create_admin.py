"""Create an admin account or reset its password."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from werkzeug.security import generate_password_hash

# Ensure the project root is on sys.path so ``salon_api`` can be imported when the script is executed directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from salon_api import create_app
from salon_api.extensions import db
from salon_api.models import Admin


def upsert_admin(email: str, password: str, name: str | None = None, deactivate: bool = False) -> Admin:
    """Create the admin if missing, then set its password (and name when given)."""
    email = email.strip().lower()
    admin = Admin.query.filter_by(email=email).first()
    if admin is None:
        admin = Admin(email=email, name=name or "Salon Admin", password="")
        db.session.add(admin)
        print(f"Created admin: {email}")
    elif name:
        admin.name = name

    admin.password = generate_password_hash(password)
    admin.is_active = not deactivate
    db.session.commit()
    return admin


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an admin user or reset its password.")
    parser.add_argument("email", help="Admin email address")
    parser.add_argument("password", help="Plain-text password to hash and store")
    parser.add_argument("--name", help="Display name (default: Salon Admin)")
    parser.add_argument("--inactive", action="store_true", help="Store the account as deactivated")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    app = create_app()
    with app.app_context():
        db.create_all()
        upsert_admin(args.email, args.password, args.name, args.inactive)
    print(f"Password for admin '{args.email}' has been set successfully.")


if __name__ == "__main__":
    main()
