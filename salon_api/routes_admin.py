"""Admin routes: authentication, catalog, bookings, gallery and media uploads."""
from __future__ import annotations

import uuid
from datetime import date
from pathlib import Path

import jwt
from botocore.exceptions import BotoCoreError, ClientError
from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy import or_
from sqlalchemy.orm import joinedload, selectinload
from werkzeug.security import check_password_hash
from werkzeug.utils import secure_filename

from .auth import admin_required, decode_refresh_token, find_active_admin, generate_tokens
from .bookings import apply_status
from .catalog import validate_category_payload, validate_service_payload
from .errors import NotFoundError, UnauthorizedError, ValidationError
from .extensions import db, limiter
from .media import (IMAGE_EXTENSIONS, IMAGE_MIME_RE, MAX_IMAGE_BYTES, MAX_IMAGES_PER_REQUEST,
                    UPLOAD_TYPES, cdn_folder, delete_from_cdn, delete_local_variants,
                    extension_of, extract_public_id, file_size, generate_image_urls,
                    process_local_image, shrink_to_webp, upload_dir, upload_to_cdn)
from .models import (TRANSFORMATION_CATEGORIES, Admin, Booking, BookingStatus, Service,
                     ServiceCategory, Transformation, utc_now)
from .routes import json_body

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")

UPLOAD_LIMIT = "20 per hour"


def _pagination(default_limit: int, max_limit: int = 100) -> tuple[int, int]:
    try:
        page = max(1, int(request.args.get("page", 1)))
    except (TypeError, ValueError):
        page = 1
    try:
        limit = min(max_limit, max(1, int(request.args.get("limit", default_limit))))
    except (TypeError, ValueError):
        limit = default_limit
    return page, limit


def _pagination_meta(page: int, limit: int, total: int) -> dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": (total + limit - 1) // limit,
    }


def _flag(name: str) -> bool:
    return (request.args.get(name) or "").strip().lower() in {"1", "true", "yes"}


def _parse_date_arg(name: str) -> date | None:
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a date in YYYY-MM-DD format")


# --- Authentication ---


@admin_bp.post("/auth/login")
@limiter.limit("5 per 15 minutes")
def login() -> tuple[dict[str, object], int]:
    """Authenticate an admin by email/password and return a token pair.
    ---
    tags:
      - Admin Auth
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            email:
              type: string
            password:
              type: string
          required:
            - email
            - password
    responses:
      200:
        description: Login successful, returns access and refresh tokens
      400:
        description: Email or password missing
      401:
        description: Invalid email or password
    """
    payload = json_body()

    email = str(payload.get("email") or "").strip().lower()
    password = payload.get("password") or ""

    if not email or not password:
        raise ValidationError("Email and password are required")

    admin = Admin.query.filter_by(email=email, is_active=True).first()

    # Same message for unknown email and wrong password.
    if admin is None or not check_password_hash(admin.password, str(password)):
        current_app.logger.warning("Failed admin login for %s", email)
        raise UnauthorizedError("Invalid email or password")

    tokens = generate_tokens(admin)
    return jsonify({
        "success": True,
        "message": "Login successful",
        "data": {**tokens, "admin": admin.to_dict()},
    }), 200


@admin_bp.post("/auth/refresh")
def refresh_token() -> tuple[dict[str, object], int]:
    """Exchange a refresh token for a new token pair.
    ---
    tags:
      - Admin Auth
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            refreshToken:
              type: string
          required:
            - refreshToken
    responses:
      200:
        description: Token refreshed successfully
      401:
        description: Invalid or expired refresh token
    """
    payload = json_body()
    token = payload.get("refreshToken")
    if not token:
        raise UnauthorizedError("Refresh token is required")

    try:
        claims = decode_refresh_token(str(token))
    except jwt.ExpiredSignatureError:
        raise
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid refresh token")

    admin = find_active_admin(claims.get("adminId"))
    if admin is None:
        raise UnauthorizedError("Invalid refresh token - admin not found")

    return jsonify({
        "success": True,
        "message": "Token refreshed successfully",
        "data": generate_tokens(admin),
    }), 200


@admin_bp.post("/auth/logout")
@admin_required
def logout() -> tuple[dict[str, object], int]:
    """Log out. Tokens are not revoked; the client discards them.
    ---
    tags:
      - Admin Auth
    security:
      - bearerAuth: []
    responses:
      200:
        description: Logout successful
    """
    return jsonify({"success": True, "message": "Logout successful"}), 200


@admin_bp.get("/auth/me")
@admin_required
def get_profile() -> tuple[dict[str, object], int]:
    """Return the authenticated admin's profile.
    ---
    tags:
      - Admin Auth
    security:
      - bearerAuth: []
    responses:
      200:
        description: Admin profile
      401:
        description: Missing or invalid token
    """
    return jsonify({"success": True, "data": g.current_admin.to_dict()}), 200


# --- Service categories ---


def _ensure_unique_category_slug(slug: str, exclude_id: str | None = None) -> None:
    query = ServiceCategory.query.filter(ServiceCategory.slug == slug)
    if exclude_id is not None:
        query = query.filter(ServiceCategory.id != exclude_id)
    if query.first() is not None:
        raise ValidationError("A category with this slug already exists")


@admin_bp.get("/categories")
@admin_required
def admin_list_categories() -> tuple[dict[str, object], int]:
    """Get all service categories with children and service summaries.
    ---
    tags:
      - Admin Categories
    security:
      - bearerAuth: []
    parameters:
      - name: includeInactive
        in: query
        type: boolean
    responses:
      200:
        description: List of service categories
    """
    query = ServiceCategory.query.options(
        selectinload(ServiceCategory.children),
        selectinload(ServiceCategory.services),
    )
    if not _flag("includeInactive"):
        query = query.filter(ServiceCategory.is_active.is_(True))

    categories = query.order_by(ServiceCategory.sort_order.asc(), ServiceCategory.name.asc()).all()

    data = []
    for category in categories:
        item = category.to_tree_dict(active_children_only=False)
        item["services"] = [service.to_summary() for service in category.services]
        data.append(item)

    return jsonify({"success": True, "data": data}), 200


@admin_bp.post("/categories")
@admin_required
def create_category() -> tuple[dict[str, object], int]:
    """Create a service category.
    ---
    tags:
      - Admin Categories
    security:
      - bearerAuth: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            name:
              type: string
              example: Face Treatments
            description:
              type: string
            slug:
              type: string
            parentId:
              type: string
            color:
              type: string
              example: "#FF6B6B"
            iconClass:
              type: string
            sortOrder:
              type: integer
          required:
            - name
    responses:
      201:
        description: Category created successfully
      400:
        description: Validation error
    """
    data = validate_category_payload(json_body())

    _ensure_unique_category_slug(data["slug"])

    if data["parent_id"] and db.session.get(ServiceCategory, data["parent_id"]) is None:
        raise ValidationError("Parent category not found")

    category = ServiceCategory(**data, is_active=True)
    db.session.add(category)
    db.session.commit()

    return jsonify({
        "success": True,
        "message": "Category created successfully",
        "data": category.to_dict(),
    }), 201


@admin_bp.put("/categories/<category_id>")
@admin_required
def update_category(category_id: str) -> tuple[dict[str, object], int]:
    """Update a service category.
    ---
    tags:
      - Admin Categories
    security:
      - bearerAuth: []
    parameters:
      - name: category_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Category updated successfully
      400:
        description: Validation error
      404:
        description: Category not found
    """
    payload = json_body()
    data = validate_category_payload(payload)

    category = db.session.get(ServiceCategory, category_id)
    if category is None:
        raise NotFoundError("Category not found")

    _ensure_unique_category_slug(data["slug"], exclude_id=category_id)

    parent_id = data["parent_id"]
    if parent_id:
        if parent_id == category_id:
            raise ValidationError("A category cannot be its own parent")
        parent = db.session.get(ServiceCategory, parent_id)
        if parent is None:
            raise ValidationError("Parent category not found")
        ancestor = parent
        while ancestor is not None:
            if ancestor.id == category_id:
                raise ValidationError("A category cannot be moved under one of its own subcategories")
            ancestor = ancestor.parent

    for field, value in data.items():
        setattr(category, field, value)
    if "isActive" in payload:
        category.is_active = payload.get("isActive") is not False

    db.session.commit()

    return jsonify({
        "success": True,
        "message": "Category updated successfully",
        "data": category.to_dict(),
    }), 200


@admin_bp.delete("/categories/<category_id>")
@admin_required
def delete_category(category_id: str) -> tuple[dict[str, object], int]:
    """Delete a category that has no active services and no children.
    ---
    tags:
      - Admin Categories
    security:
      - bearerAuth: []
    parameters:
      - name: category_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Category deleted successfully
      400:
        description: Category still has active services or child categories
      404:
        description: Category not found
    """
    category = db.session.get(ServiceCategory, category_id)
    if category is None:
        raise NotFoundError("Category not found")

    active_services = Service.query.filter(
        Service.category_id == category_id,
        Service.is_active.is_(True),
    ).count()
    if active_services > 0:
        raise ValidationError(
            "Cannot delete category with active services. Please deactivate or move services first."
        )

    child_categories = ServiceCategory.query.filter(ServiceCategory.parent_id == category_id).count()
    if child_categories > 0:
        raise ValidationError(
            "Cannot delete category with child categories. Please delete or move child categories first."
        )

    # Inactive services keep existing without a category.
    Service.query.filter(Service.category_id == category_id).update(
        {Service.category_id: None}, synchronize_session=False
    )
    db.session.delete(category)
    db.session.commit()

    return jsonify({"success": True, "message": "Category deleted successfully"}), 200


# --- Services ---


def _active_category(category_id: str) -> ServiceCategory:
    category = ServiceCategory.query.filter_by(id=category_id, is_active=True).first()
    if category is None:
        raise NotFoundError("Category not found or inactive")
    return category


def _ensure_unique_service_slug(slug: str, exclude_id: str | None = None) -> None:
    query = Service.query.filter(Service.slug == slug)
    if exclude_id is not None:
        query = query.filter(Service.id != exclude_id)
    if query.first() is not None:
        raise ValidationError("A service with this slug already exists")


@admin_bp.get("/services")
@admin_required
def admin_list_services() -> tuple[dict[str, object], int]:
    """Get services with pagination.
    ---
    tags:
      - Admin Services
    security:
      - bearerAuth: []
    parameters:
      - name: categoryId
        in: query
        type: string
      - name: includeInactive
        in: query
        type: boolean
      - name: page
        in: query
        type: integer
        default: 1
      - name: limit
        in: query
        type: integer
        default: 20
        maximum: 100
    responses:
      200:
        description: List of services with pagination
    """
    page, limit = _pagination(default_limit=20)

    query = Service.query.options(joinedload(Service.category))
    category_id = request.args.get("categoryId")
    if category_id:
        query = query.filter(Service.category_id == category_id)
    if not _flag("includeInactive"):
        query = query.filter(Service.is_active.is_(True))

    total = query.count()
    services = (
        query.order_by(Service.sort_order.asc(), Service.name.asc())
        .limit(limit)
        .offset((page - 1) * limit)
        .all()
    )

    return jsonify({
        "success": True,
        "data": {
            "services": [service.to_dict() for service in services],
            "pagination": _pagination_meta(page, limit, total),
        },
    }), 200


@admin_bp.post("/services")
@admin_required
def create_service() -> tuple[dict[str, object], int]:
    """Create a service.
    ---
    tags:
      - Admin Services
    security:
      - bearerAuth: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            name:
              type: string
              example: Deep Cleansing Facial
            duration:
              type: integer
              minimum: 15
              maximum: 480
            price:
              type: number
            minPrice:
              type: number
            maxPrice:
              type: number
            priceType:
              type: string
              enum: [fixed, variable, consultation]
            serviceType:
              type: string
              enum: [individual, package, addon]
            categoryId:
              type: string
            tags:
              type: array
              items:
                type: string
          required:
            - name
            - duration
            - price
            - categoryId
    responses:
      201:
        description: Service created successfully
      400:
        description: Validation error
      404:
        description: Category not found
    """
    data = validate_service_payload(json_body())

    _active_category(data["category_id"])
    _ensure_unique_service_slug(data["slug"])

    service = Service(**data)
    db.session.add(service)
    db.session.commit()

    return jsonify({
        "success": True,
        "message": "Service created successfully",
        "data": service.to_dict(),
    }), 201


@admin_bp.get("/services/<service_id>")
@admin_required
def admin_get_service(service_id: str) -> tuple[dict[str, object], int]:
    """Get a service by ID, active or not.
    ---
    tags:
      - Admin Services
    security:
      - bearerAuth: []
    responses:
      200:
        description: Service details
      404:
        description: Service not found
    """
    service = db.session.get(Service, service_id)
    if service is None:
        raise NotFoundError("Service not found")

    data = service.to_dict(include_category=False)
    data["category"] = service.category.to_dict() if service.category else None
    return jsonify({"success": True, "data": data}), 200


@admin_bp.put("/services/<service_id>")
@admin_required
def update_service(service_id: str) -> tuple[dict[str, object], int]:
    """Update a service.
    ---
    tags:
      - Admin Services
    security:
      - bearerAuth: []
    responses:
      200:
        description: Service updated successfully
      400:
        description: Validation error
      404:
        description: Service or category not found
    """
    data = validate_service_payload(json_body())

    service = db.session.get(Service, service_id)
    if service is None:
        raise NotFoundError("Service not found")

    _active_category(data["category_id"])
    _ensure_unique_service_slug(data["slug"], exclude_id=service_id)

    for field, value in data.items():
        setattr(service, field, value)
    db.session.commit()

    return jsonify({
        "success": True,
        "message": "Service updated successfully",
        "data": service.to_dict(),
    }), 200


@admin_bp.delete("/services/<service_id>")
@admin_required
def delete_service(service_id: str) -> tuple[dict[str, object], int]:
    """Delete a service that holds no pending or confirmed bookings.
    ---
    tags:
      - Admin Services
    security:
      - bearerAuth: []
    responses:
      200:
        description: Service deleted successfully
      400:
        description: Service has pending or confirmed bookings
      404:
        description: Service not found
    """
    service = db.session.get(Service, service_id)
    if service is None:
        raise NotFoundError("Service not found")

    active_bookings = Booking.query.filter(
        Booking.service_id == service_id,
        Booking.status.in_(BookingStatus.ACTIVE),
    ).count()
    if active_bookings > 0:
        raise ValidationError(
            "Cannot delete service with pending or confirmed bookings. "
            "Please complete or cancel bookings first."
        )

    if service.bookings.count() > 0:
        # Booking history references the service; keep the row, retire it.
        service.is_active = False
        service.is_bookable = False
    else:
        db.session.delete(service)
    db.session.commit()

    return jsonify({"success": True, "message": "Service deleted successfully"}), 200


# --- Bookings ---


def _booking_with_service(booking_id: str) -> Booking:
    booking = (
        Booking.query.options(joinedload(Booking.service).joinedload(Service.category))
        .filter(Booking.id == booking_id)
        .first()
    )
    if booking is None:
        raise NotFoundError("Booking not found")
    return booking


@admin_bp.get("/bookings")
@admin_required
def admin_list_bookings() -> tuple[dict[str, object], int]:
    """Get bookings with filters and pagination.
    ---
    tags:
      - Admin Bookings
    security:
      - bearerAuth: []
    parameters:
      - name: status
        in: query
        type: string
        enum: [PENDING, CONFIRMED, COMPLETED, CANCELLED, NO_SHOW]
      - name: page
        in: query
        type: integer
        default: 1
      - name: limit
        in: query
        type: integer
        default: 10
        maximum: 100
      - name: search
        in: query
        type: string
        description: Search by customer name, phone, or email
      - name: dateFrom
        in: query
        type: string
        format: date
      - name: dateTo
        in: query
        type: string
        format: date
    responses:
      200:
        description: List of bookings with pagination
    """
    page, limit = _pagination(default_limit=10)

    query = Booking.query.options(joinedload(Booking.service).joinedload(Service.category))

    status = request.args.get("status")
    if status in BookingStatus.ALL:
        query = query.filter(Booking.status == status)

    search = (request.args.get("search") or "").strip()
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Booking.customer_name.ilike(pattern),
            Booking.customer_phone.ilike(pattern),
            Booking.customer_email.ilike(pattern),
        ))

    date_from = _parse_date_arg("dateFrom")
    if date_from:
        query = query.filter(Booking.requested_date >= date_from)
    date_to = _parse_date_arg("dateTo")
    if date_to:
        query = query.filter(Booking.requested_date <= date_to)

    total = query.count()
    bookings = (
        query.order_by(Booking.created_at.desc())
        .limit(limit)
        .offset((page - 1) * limit)
        .all()
    )

    return jsonify({
        "success": True,
        "data": {
            "bookings": [booking.to_dict() for booking in bookings],
            "pagination": _pagination_meta(page, limit, total),
        },
    }), 200


@admin_bp.get("/bookings/<booking_id>")
@admin_required
def admin_get_booking(booking_id: str) -> tuple[dict[str, object], int]:
    """Get booking details.
    ---
    tags:
      - Admin Bookings
    security:
      - bearerAuth: []
    responses:
      200:
        description: Booking details
      404:
        description: Booking not found
    """
    return jsonify({"success": True, "data": _booking_with_service(booking_id).to_dict()}), 200


@admin_bp.put("/bookings/<booking_id>/status")
@admin_required
def update_booking_status(booking_id: str) -> tuple[dict[str, object], int]:
    """Update booking status and stamp the matching timestamp.
    ---
    tags:
      - Admin Bookings
    security:
      - bearerAuth: []
    parameters:
      - name: booking_id
        in: path
        type: string
        required: true
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            status:
              type: string
              enum: [PENDING, CONFIRMED, COMPLETED, CANCELLED, NO_SHOW]
            adminNotes:
              type: string
          required:
            - status
    responses:
      200:
        description: Booking status updated successfully
      400:
        description: Invalid status or slot already booked
      404:
        description: Booking not found
    """
    payload = json_body()
    status = payload.get("status")

    if not status or status not in BookingStatus.ALL:
        raise ValidationError("Valid booking status is required")

    booking = _booking_with_service(booking_id)
    previous = booking.status
    apply_status(booking, status, payload.get("adminNotes"))

    current_app.logger.info(
        "Booking %s moved from %s to %s by admin %s",
        booking.id, previous, booking.status, g.current_admin.id,
    )
    return jsonify({
        "success": True,
        "message": "Booking status updated successfully",
        "data": booking.to_dict(),
    }), 200


# --- Transformations ---


def _check_transformation_category(category) -> None:
    if category and category not in TRANSFORMATION_CATEGORIES:
        raise ValidationError(
            "Validation error",
            errors=[f"category must be one of: {', '.join(TRANSFORMATION_CATEGORIES)}"],
        )


@admin_bp.get("/transformations")
@admin_required
def admin_list_transformations() -> tuple[dict[str, object], int]:
    """Get all transformations with pagination.
    ---
    tags:
      - Admin Transformations
    security:
      - bearerAuth: []
    parameters:
      - name: page
        in: query
        type: integer
        default: 1
      - name: limit
        in: query
        type: integer
        default: 10
      - name: category
        in: query
        type: string
      - name: search
        in: query
        type: string
    responses:
      200:
        description: List of transformations with pagination
    """
    page, limit = _pagination(default_limit=10)

    query = Transformation.query
    category = request.args.get("category")
    if category:
        query = query.filter(Transformation.category == category)
    search = (request.args.get("search") or "").strip()
    if search:
        query = query.filter(Transformation.title.ilike(f"%{search}%"))

    total = query.count()
    rows = (
        query.order_by(Transformation.created_at.desc())
        .limit(limit)
        .offset((page - 1) * limit)
        .all()
    )

    return jsonify({
        "success": True,
        "data": [row.to_dict() for row in rows],
        "pagination": _pagination_meta(page, limit, total),
    }), 200


@admin_bp.post("/transformations")
@admin_required
def create_transformation() -> tuple[dict[str, object], int]:
    """Create a before/after transformation.
    ---
    tags:
      - Admin Transformations
    security:
      - bearerAuth: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            title:
              type: string
            description:
              type: string
            beforeImage:
              type: string
            afterImage:
              type: string
            category:
              type: string
              enum: [hair, facial, nail, spa, makeup, other]
          required:
            - title
            - beforeImage
            - afterImage
    responses:
      201:
        description: Transformation created successfully
      400:
        description: Missing fields or invalid category
    """
    payload = json_body()
    title = str(payload.get("title") or "").strip()
    before_image = str(payload.get("beforeImage") or "").strip()
    after_image = str(payload.get("afterImage") or "").strip()

    if not title or not before_image or not after_image:
        raise ValidationError("Title, before image, and after image are required")
    if len(title) > 255:
        raise ValidationError("Validation error", errors=["title must be at most 255 characters"])

    category = payload.get("category") or None
    _check_transformation_category(category)

    transformation = Transformation(
        title=title,
        description=payload.get("description"),
        before_image=before_image,
        after_image=after_image,
        category=category,
    )
    db.session.add(transformation)
    db.session.commit()

    return jsonify({
        "success": True,
        "message": "Transformation created successfully",
        "data": transformation.to_dict(),
    }), 201


@admin_bp.put("/transformations/<int:transformation_id>")
@admin_required
def update_transformation(transformation_id: int) -> tuple[dict[str, object], int]:
    """Update a transformation; omitted fields keep their values.
    ---
    tags:
      - Admin Transformations
    security:
      - bearerAuth: []
    responses:
      200:
        description: Transformation updated successfully
      400:
        description: Invalid category
      404:
        description: Transformation not found
    """
    transformation = db.session.get(Transformation, transformation_id)
    if transformation is None:
        raise NotFoundError("Transformation not found")

    payload = json_body()

    if payload.get("title"):
        transformation.title = str(payload["title"]).strip()
    if "description" in payload:
        transformation.description = payload["description"]
    if payload.get("beforeImage"):
        transformation.before_image = payload["beforeImage"]
    if payload.get("afterImage"):
        transformation.after_image = payload["afterImage"]
    if "category" in payload:
        _check_transformation_category(payload["category"])
        transformation.category = payload["category"] or None
    if "isActive" in payload:
        transformation.is_active = bool(payload["isActive"])

    db.session.commit()

    return jsonify({
        "success": True,
        "message": "Transformation updated successfully",
        "data": transformation.to_dict(),
    }), 200


@admin_bp.delete("/transformations/<int:transformation_id>")
@admin_required
def delete_transformation(transformation_id: int) -> tuple[dict[str, object], int]:
    """Delete a transformation.
    ---
    tags:
      - Admin Transformations
    security:
      - bearerAuth: []
    responses:
      200:
        description: Transformation deleted successfully
      404:
        description: Transformation not found
    """
    transformation = db.session.get(Transformation, transformation_id)
    if transformation is None:
        raise NotFoundError("Transformation not found")

    db.session.delete(transformation)
    db.session.commit()

    return jsonify({"success": True, "message": "Transformation deleted successfully"}), 200


# --- Uploads ---


def _discard_cdn_uploads(public_ids: list[str]) -> None:
    for public_id in public_ids:
        delete_from_cdn(public_id)


def _discard_files(paths: list[Path]) -> None:
    for path in paths:
        path.unlink(missing_ok=True)


def _upload_type() -> str:
    upload_type = request.args.get("type")
    if upload_type not in UPLOAD_TYPES:
        raise ValidationError("Upload type must be: service, category, or profile")
    return upload_type


def _image_files() -> list:
    files = [f for f in request.files.getlist("images") if f and f.filename]
    if not files:
        raise ValidationError("No files uploaded")
    if len(files) > MAX_IMAGES_PER_REQUEST:
        raise ValidationError(f"At most {MAX_IMAGES_PER_REQUEST} files can be uploaded at once")
    for storage in files:
        if file_size(storage) > MAX_IMAGE_BYTES:
            raise ValidationError("File size too large")
    return files


@admin_bp.post("/upload")
@limiter.limit(UPLOAD_LIMIT)
@admin_required
def upload_images() -> tuple[dict[str, object], int]:
    """Upload images to object storage with responsive variants.
    ---
    tags:
      - Admin Upload
    security:
      - bearerAuth: []
    consumes:
      - multipart/form-data
    parameters:
      - name: type
        in: query
        type: string
        required: true
        enum: [service, category, profile]
      - name: entityId
        in: query
        type: string
      - name: images
        in: formData
        type: file
        required: true
    responses:
      200:
        description: Images uploaded successfully
      400:
        description: Invalid file type or upload error
    """
    upload_type = _upload_type()
    entity_id = request.args.get("entityId")
    files = _image_files()

    for storage in files:
        if not (storage.mimetype or "").startswith("image/"):
            raise ValidationError("Only image files are allowed")

    folder = cdn_folder(upload_type)
    timestamp = int(utc_now().timestamp() * 1000)
    prefix = secure_filename(entity_id) if entity_id else upload_type

    uploaded = []
    attempted: list[str] = []
    try:
        for index, storage in enumerate(files):
            public_id = f"{folder}/{prefix}-{timestamp}-{index}"
            attempted.append(public_id)
            uploaded.append(upload_to_cdn(storage, public_id))
    except (BotoCoreError, ClientError) as exc:
        _discard_cdn_uploads(attempted)
        current_app.logger.exception("Image upload to storage failed", exc_info=exc)
        raise ValidationError("Failed to upload images. Please try again.")
    except ValidationError:
        _discard_cdn_uploads(attempted)
        raise

    return jsonify({
        "success": True,
        "message": f"{len(uploaded)} image(s) uploaded successfully",
        "data": {"type": upload_type, "entityId": entity_id, "images": uploaded},
    }), 200


@admin_bp.post("/upload/url-to-publicid")
@admin_required
def public_id_from_url() -> tuple[dict[str, object], int]:
    """Extract the public ID from an uploaded image URL.
    ---
    tags:
      - Admin Upload
    security:
      - bearerAuth: []
    responses:
      200:
        description: Public ID extracted successfully
      400:
        description: Missing or unrecognised URL
    """
    payload = json_body()
    image_url = payload.get("imageUrl")
    if not image_url:
        raise ValidationError("Image URL is required")

    public_id = extract_public_id(str(image_url))
    if not public_id:
        raise ValidationError("Could not extract public ID from URL")

    return jsonify({
        "success": True,
        "data": {
            "publicId": public_id,
            "originalUrl": image_url,
            "urls": generate_image_urls(public_id),
        },
    }), 200


@admin_bp.post("/upload/generate-urls")
@admin_required
def responsive_urls() -> tuple[dict[str, object], int]:
    """Generate responsive image URLs for a public ID.
    ---
    tags:
      - Admin Upload
    security:
      - bearerAuth: []
    responses:
      200:
        description: URLs generated successfully
      400:
        description: Public ID missing
    """
    payload = json_body()
    public_id = payload.get("publicId")
    if not public_id:
        raise ValidationError("Public ID is required")

    return jsonify({
        "success": True,
        "data": {"publicId": public_id, "urls": generate_image_urls(str(public_id))},
    }), 200


@admin_bp.post("/upload/local")
@limiter.limit(UPLOAD_LIMIT)
@admin_required
def upload_images_local() -> tuple[dict[str, object], int]:
    """Store images on the server as resized WebP variants.
    ---
    tags:
      - Admin Upload
    security:
      - bearerAuth: []
    consumes:
      - multipart/form-data
    parameters:
      - name: type
        in: query
        type: string
        required: true
        enum: [service, category, profile]
      - name: entityId
        in: query
        type: string
      - name: images
        in: formData
        type: file
        required: true
    responses:
      200:
        description: Images uploaded and processed successfully
      400:
        description: Invalid type or file
    """
    upload_type = _upload_type()
    entity_id = request.args.get("entityId")
    files = _image_files()

    for storage in files:
        extension = extension_of(storage.filename)
        if extension not in IMAGE_EXTENSIONS or not IMAGE_MIME_RE.search(storage.mimetype or ""):
            raise ValidationError("Only image files (JPEG, PNG, GIF, WebP) are allowed")

    folder_name = f"{upload_type}s"
    output_dir = upload_dir(folder_name)
    base_url = request.host_url.rstrip("/")

    processed = []
    for storage in files:
        timestamp = int(utc_now().timestamp() * 1000)
        unique = uuid.uuid4().hex[:8]
        stem = f"{secure_filename(entity_id)}-{timestamp}-{unique}" if entity_id else f"{timestamp}-{unique}"
        source = output_dir / f"{stem}.{extension_of(storage.filename)}"

        try:
            storage.save(source)
            variants = process_local_image(source, output_dir, stem)
        except OSError as exc:
            source.unlink(missing_ok=True)
            for earlier in processed:
                delete_local_variants(output_dir, earlier["filename"])
            current_app.logger.exception("Local image processing failed", exc_info=exc)
            raise ValidationError("Failed to process images. Please try again.")

        processed.append({
            "filename": stem,
            "originalName": storage.filename,
            "type": upload_type,
            "entityId": entity_id,
            "urls": {
                label: f"{base_url}/uploads/{folder_name}/{path.name}"
                for label, path in variants
            },
            "uploadedAt": utc_now().isoformat(),
        })

    return jsonify({
        "success": True,
        "message": f"{len(processed)} image(s) uploaded and processed successfully",
        "data": {"type": upload_type, "entityId": entity_id, "images": processed},
    }), 200


@admin_bp.delete("/upload/local/<filename>")
@admin_required
def delete_local_images(filename: str) -> tuple[dict[str, object], int]:
    """Delete every WebP variant stored for a base filename.
    ---
    tags:
      - Admin Upload
    security:
      - bearerAuth: []
    responses:
      200:
        description: Images deleted
      400:
        description: Invalid type or filename
    """
    upload_type = request.args.get("type")
    if upload_type not in UPLOAD_TYPES:
        raise ValidationError("Type must be: service, category, or profile")
    if filename != secure_filename(filename):
        raise ValidationError("Invalid filename")

    deleted = delete_local_variants(upload_dir(f"{upload_type}s"), filename)
    return jsonify({
        "success": True,
        "message": f"Deleted {len(deleted)} image files",
        "data": {"deletedFiles": deleted},
    }), 200


@admin_bp.post("/upload/media")
@limiter.limit(UPLOAD_LIMIT)
@admin_required
def upload_service_media() -> tuple[dict[str, object], int]:
    """Upload up to four service images and one video.
    ---
    tags:
      - Admin Upload
    security:
      - bearerAuth: []
    consumes:
      - multipart/form-data
    parameters:
      - name: images
        in: formData
        type: file
      - name: video
        in: formData
        type: file
    responses:
      200:
        description: Media uploaded successfully
      400:
        description: No files, wrong field or wrong file type
    """
    unexpected = set(request.files.keys()) - {"images", "video"}
    if unexpected:
        raise ValidationError("Unexpected file field")

    images = [f for f in request.files.getlist("images") if f and f.filename]
    videos = [f for f in request.files.getlist("video") if f and f.filename]
    if not images and not videos:
        raise ValidationError("No files uploaded")
    if len(images) > 4 or len(videos) > 1:
        raise ValidationError("Unexpected file field")
    for storage in images:
        if not (storage.mimetype or "").startswith("image/"):
            raise ValidationError("Only image files are allowed for images")
    for storage in videos:
        if not (storage.mimetype or "").startswith("video/"):
            raise ValidationError("Only video files are allowed for video")

    output_dir = upload_dir("services")
    written: list[Path] = []
    image_urls = []
    video_url = None

    try:
        for storage in images:
            name = uuid.uuid4().hex
            source = output_dir / f"{name}.{extension_of(storage.filename) or 'img'}"
            storage.save(source)
            written.append(source)

            target = output_dir / f"processed_{name}.webp"
            written.append(target)
            shrink_to_webp(source, target)
            image_urls.append(f"/uploads/services/{target.name}")

        if videos:
            storage = videos[0]
            target = output_dir / f"{uuid.uuid4().hex}.{extension_of(storage.filename) or 'mp4'}"
            storage.save(target)
            written.append(target)
            video_url = f"/uploads/services/{target.name}"
    except OSError as exc:
        _discard_files(written)
        current_app.logger.exception("Service media processing failed", exc_info=exc)
        raise ValidationError("Failed to process images. Please try again.")
    except Exception:
        _discard_files(written)
        raise

    plural = "" if len(image_urls) == 1 else "s"
    message = f"Successfully uploaded {len(image_urls)} image{plural}"
    if video_url:
        message += " and 1 video"

    return jsonify({
        "success": True,
        "message": message,
        "data": {"images": image_urls, "videoUrl": video_url},
    }), 200


@admin_bp.delete("/upload/media/<filename>")
@admin_required
def delete_service_media(filename: str) -> tuple[dict[str, object], int]:
    """Delete one uploaded service media file.
    ---
    tags:
      - Admin Upload
    security:
      - bearerAuth: []
    responses:
      200:
        description: File deleted
      400:
        description: Invalid filename
      404:
        description: File not found
    """
    if not filename or ".." in filename or "/" in filename or "\\" in filename:
        raise ValidationError("Invalid filename")

    path = upload_dir("services") / filename
    if not path.is_file():
        raise NotFoundError("File not found")

    path.unlink()
    return jsonify({"success": True, "message": "File deleted successfully"}), 200


@admin_bp.delete("/upload/<path:public_id>")
@admin_required
def delete_uploaded_image(public_id: str) -> tuple[dict[str, object], int]:
    """Delete an image and its variants from object storage.
    ---
    tags:
      - Admin Upload
    security:
      - bearerAuth: []
    responses:
      200:
        description: Image deleted successfully
      400:
        description: Failed to delete image
    """
    if not delete_from_cdn(public_id):
        raise ValidationError("Failed to delete image")

    return jsonify({"success": True, "message": "Image deleted successfully"}), 200
