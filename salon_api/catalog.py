"""Payload validation for service categories and services."""
from __future__ import annotations

import re

from .errors import ValidationError
from .models import DIFFICULTY_LEVELS, PRICE_TYPES, SERVICE_TYPES

COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")

DEFAULT_CATEGORY_COLOR = "#6366F1"
DEFAULT_ICON_CLASS = "fas fa-spa"


def generate_slug(name: str) -> str:
    slug = re.sub(r"[^a-z0-9\s-]", "", name.lower())
    slug = re.sub(r"\s+", "-", slug.strip())
    return re.sub(r"-+", "-", slug).strip("-")


def _strip(value) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


def _int_or_default(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _number(value, field: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")


def validate_category_payload(payload: dict) -> dict[str, object]:
    name = _strip(payload.get("name")) or ""

    if len(name) < 2:
        raise ValidationError("Category name is required and must be at least 2 characters")
    if len(name) > 100:
        raise ValidationError("Category name must not exceed 100 characters")

    color = payload.get("color")
    if color and not COLOR_RE.match(str(color)):
        raise ValidationError("Color must be a valid hex color code (e.g., #FF6B6B)")

    return {
        "name": name,
        "description": _strip(payload.get("description")),
        "slug": _strip(payload.get("slug")) or generate_slug(name),
        "parent_id": payload.get("parentId") or None,
        "image_url": _strip(payload.get("imageUrl")),
        "color": color or DEFAULT_CATEGORY_COLOR,
        "icon_class": _strip(payload.get("iconClass")) or DEFAULT_ICON_CLASS,
        "sort_order": _int_or_default(payload.get("sortOrder")),
    }


def validate_service_payload(payload: dict) -> dict[str, object]:
    name = _strip(payload.get("name")) or ""
    if len(name) < 2:
        raise ValidationError("Service name is required and must be at least 2 characters")

    duration = _int_or_default(payload.get("duration"), default=0)
    if duration < 15 or duration > 480:
        raise ValidationError("Duration must be between 15 and 480 minutes")

    if payload.get("price") is None:
        raise ValidationError("Price must be a positive number")
    price = _number(payload.get("price"), "Price")
    if price < 0:
        raise ValidationError("Price must be a positive number")

    category_id = payload.get("categoryId")
    if not category_id:
        raise ValidationError("Category ID is required")

    min_price = payload.get("minPrice")
    max_price = payload.get("maxPrice")
    min_price = _number(min_price, "Minimum price") if min_price not in (None, "") else None
    max_price = _number(max_price, "Maximum price") if max_price not in (None, "") else None
    if min_price is not None and min_price < 0:
        raise ValidationError("Minimum price must be a positive number")
    if max_price is not None and max_price < 0:
        raise ValidationError("Maximum price must be a positive number")
    if min_price is not None and max_price is not None and min_price > max_price:
        raise ValidationError("Minimum price cannot be greater than maximum price")

    price_type = payload.get("priceType") or "fixed"
    service_type = payload.get("serviceType") or "individual"
    difficulty_level = payload.get("difficultyLevel") or "basic"
    if price_type not in PRICE_TYPES:
        raise ValidationError(f"priceType must be one of: {', '.join(PRICE_TYPES)}")
    if service_type not in SERVICE_TYPES:
        raise ValidationError(f"serviceType must be one of: {', '.join(SERVICE_TYPES)}")
    if difficulty_level not in DIFFICULTY_LEVELS:
        raise ValidationError(f"difficultyLevel must be one of: {', '.join(DIFFICULTY_LEVELS)}")

    prerequisites = payload.get("prerequisites")
    tags = payload.get("tags")
    images = payload.get("images")

    return {
        "name": name,
        "description": _strip(payload.get("description")),
        "slug": _strip(payload.get("slug")) or generate_slug(name),
        "duration": duration,
        "price": price,
        "min_price": min_price,
        "max_price": max_price,
        "price_type": price_type,
        "service_type": service_type,
        "difficulty_level": difficulty_level,
        "category_id": category_id,
        "prerequisites": prerequisites if isinstance(prerequisites, list) else [],
        "tags": tags if isinstance(tags, list) else [],
        "preparation_time": _int_or_default(payload.get("preparationTime")),
        "cleanup_time": _int_or_default(payload.get("cleanupTime")),
        "sort_order": _int_or_default(payload.get("sortOrder")),
        "is_active": payload.get("isActive") is not False,
        "is_bookable": payload.get("isBookable") is not False,
        "requires_consultation": payload.get("requiresConsultation") is True,
        "image_url": _strip(payload.get("imageUrl")),
        "images": [url for url in images if url and isinstance(url, str)] if isinstance(images, list) else [],
        "video_url": _strip(payload.get("videoUrl")),
    }
