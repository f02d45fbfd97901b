"""JWT issuing and verification for admin users."""
from __future__ import annotations

from functools import wraps

import jwt
from flask import current_app, g, request

from .config import parse_duration
from .errors import UnauthorizedError
from .models import Admin, utc_now

ALGORITHM = "HS256"


def _secrets() -> tuple[str, str]:
    access_secret = current_app.config.get("JWT_ACCESS_SECRET")
    refresh_secret = current_app.config.get("JWT_REFRESH_SECRET")
    if not access_secret or not refresh_secret:
        raise RuntimeError("JWT secrets not configured")
    return access_secret, refresh_secret


def _encode(payload: dict[str, object], secret: str, lifetime) -> str:
    issued_at = utc_now()
    claims = dict(payload)
    claims.update({"iat": issued_at, "exp": issued_at + parse_duration(lifetime)})
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def generate_tokens(admin: Admin) -> dict[str, str]:
    """Issue an access/refresh pair, each signed with its own secret."""
    access_secret, refresh_secret = _secrets()
    payload = {"adminId": admin.id, "email": admin.email}

    return {
        "accessToken": _encode(payload, access_secret, current_app.config["JWT_ACCESS_EXPIRES_IN"]),
        "refreshToken": _encode(payload, refresh_secret, current_app.config["JWT_REFRESH_EXPIRES_IN"]),
    }


def decode_access_token(token: str) -> dict[str, object]:
    access_secret, _ = _secrets()
    return jwt.decode(token, access_secret, algorithms=[ALGORITHM])


def decode_refresh_token(token: str) -> dict[str, object]:
    _, refresh_secret = _secrets()
    return jwt.decode(token, refresh_secret, algorithms=[ALGORITHM])


def find_active_admin(admin_id) -> Admin | None:
    if not admin_id:
        return None
    return Admin.query.filter_by(id=admin_id, is_active=True).first()


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:].strip() or None


def admin_required(view):
    """Reject the request unless it carries a valid access token of an active admin.

    The admin is exposed to the view as ``g.current_admin``. Token decoding
    errors propagate to the JWT error handlers.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        token = _bearer_token()
        if token is None:
            raise UnauthorizedError("Access token required")

        payload = decode_access_token(token)
        admin = find_active_admin(payload.get("adminId"))
        if admin is None:
            raise UnauthorizedError("Invalid token - admin not found")

        g.current_admin = admin
        return view(*args, **kwargs)

    return wrapper
