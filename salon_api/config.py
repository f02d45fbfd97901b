"""Environment driven configuration for the salon API."""
from __future__ import annotations

import os
import re
from datetime import timedelta

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str | int | timedelta) -> timedelta:
    """Turn ``"15m"``, ``"7d"`` or a number of seconds into a timedelta."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, int):
        return timedelta(seconds=value)

    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _UNITS[unit])


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    ENV_NAME = os.environ.get("APP_ENV") or os.environ.get("FLASK_ENV", "development")

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///salon.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    JWT_ACCESS_SECRET = os.environ.get("JWT_ACCESS_SECRET")
    JWT_REFRESH_SECRET = os.environ.get("JWT_REFRESH_SECRET")
    JWT_ACCESS_EXPIRES_IN = os.environ.get("JWT_ACCESS_EXPIRES_IN", "15m")
    JWT_REFRESH_EXPIRES_IN = os.environ.get("JWT_REFRESH_EXPIRES_IN", "7d")

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get("CORS_ORIGIN", "http://localhost:3001").split(",")
        if origin.strip()
    ]

    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", "uploads")
    # Video uploads are the largest accepted payload.
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024

    S3_BUCKET = os.environ.get("S3_BUCKET", "salon-media")
    S3_REGION = os.environ.get("S3_REGION")
    S3_PUBLIC_URL = os.environ.get("S3_PUBLIC_URL")
    S3_KEY_PREFIX = os.environ.get("S3_KEY_PREFIX", "salon")

    RATELIMIT_ENABLED = _env_flag("RATELIMIT_ENABLED", True)
    RATELIMIT_HEADERS_ENABLED = True

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    SWAGGER = {
        "title": "Salon API",
        "uiversion": 3,
        "specs_route": "/api-docs/",
    }


class TestingConfig(Config):
    ENV_NAME = "testing"
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, object] = {}
    JWT_ACCESS_SECRET = "test-access-secret"
    JWT_REFRESH_SECRET = "test-refresh-secret"
    RATELIMIT_ENABLED = False
