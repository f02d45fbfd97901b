"""HTTP routes for the public side of the salon API."""
from __future__ import annotations

from flask import Blueprint, Flask, current_app, jsonify, request, send_from_directory
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from .bookings import admit_booking
from .errors import NotFoundError, ValidationError
from .extensions import db, limiter
from .media import upload_root
from .models import Booking, Service, ServiceCategory, Transformation, utc_now

bp = Blueprint("app_shell", __name__)
public_bp = Blueprint("public", __name__, url_prefix="/api")


def json_body() -> dict:
    """Return the JSON object sent with the request, or {} when there is none."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


@bp.get("/")
def index() -> tuple[dict[str, object], int]:
    return jsonify({
        "message": "Salon API",
        "version": "1.0.0",
        "endpoints": {
            "health": "/health",
            "docs": "/api-docs/",
            "api": "/api",
            "admin": "/api/admin",
        },
    }), 200


@bp.get("/health")
@limiter.exempt
def health_check() -> tuple[dict[str, str], int]:
    """
    Expose a simple uptime check endpoint.
    ---
    tags:
      - Health
    responses:
      200:
        description: Service is healthy and running.
        schema:
          type: object
          properties:
            status:
              type: string
              example: OK
            timestamp:
              type: string
              format: date-time
            environment:
              type: string
              example: development
    """
    return jsonify({
        "status": "OK",
        "timestamp": utc_now().isoformat(),
        "environment": current_app.config.get("ENV_NAME", "development"),
    }), 200


@bp.get("/db-health")
@limiter.exempt
def database_health() -> tuple[dict[str, str], int]:
    """Check connectivity to the configured database.
    ---
    tags:
      - Health
    responses:
      200:
        description: Database connection is ok.
      500:
        description: Database connection failed.
    """
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        current_app.logger.exception("Database connectivity check failed", exc_info=exc)
        return jsonify({"database": "unavailable"}), 500

    return jsonify({"database": "ok"}), 200


@bp.get("/uploads/<path:filename>")
def uploaded_file(filename: str):
    return send_from_directory(upload_root(), filename)


# --- Catalog ---


@public_bp.get("/categories")
def list_categories() -> tuple[dict[str, object], int]:
    """Get all active service categories with their active children.
    ---
    tags:
      - Services
    responses:
      200:
        description: List of service categories
    """
    categories = (
        ServiceCategory.query.options(selectinload(ServiceCategory.children))
        .filter(ServiceCategory.is_active.is_(True))
        .order_by(ServiceCategory.sort_order.asc(), ServiceCategory.name.asc())
        .all()
    )

    return jsonify({
        "success": True,
        "data": [category.to_tree_dict() for category in categories],
    }), 200


@public_bp.get("/services")
def list_services() -> tuple[dict[str, object], int]:
    """Get all active services.
    ---
    tags:
      - Services
    parameters:
      - name: categoryId
        in: query
        type: string
      - name: serviceType
        in: query
        type: string
        enum: [individual, package, addon]
      - name: isBookable
        in: query
        type: boolean
    responses:
      200:
        description: List of services
    """
    category_id = request.args.get("categoryId")
    service_type = request.args.get("serviceType")
    is_bookable = request.args.get("isBookable")

    query = Service.query.options(joinedload(Service.category)).filter(Service.is_active.is_(True))
    if category_id:
        query = query.filter(Service.category_id == category_id)
    if service_type:
        query = query.filter(Service.service_type == service_type)
    if is_bookable is not None:
        query = query.filter(Service.is_bookable.is_(is_bookable == "true"))

    services = query.order_by(Service.sort_order.asc(), Service.name.asc()).all()
    return jsonify({"success": True, "data": [service.to_dict() for service in services]}), 200


@public_bp.get("/services/<service_id>")
def get_service(service_id: str) -> tuple[dict[str, object], int]:
    """Get an active service by ID.
    ---
    tags:
      - Services
    parameters:
      - name: service_id
        in: path
        type: string
        required: true
    responses:
      200:
        description: Service details
      404:
        description: Service not found
    """
    service = (
        Service.query.options(joinedload(Service.category))
        .filter(Service.id == service_id, Service.is_active.is_(True))
        .first()
    )
    if service is None:
        raise NotFoundError("Service not found")

    return jsonify({"success": True, "data": service.to_dict()}), 200


# --- Bookings ---


@public_bp.post("/bookings")
@limiter.limit("10 per hour")
def create_booking() -> tuple[dict[str, object], int]:
    """Create a new booking request.
    ---
    tags:
      - Public Bookings
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            customerName:
              type: string
              example: John Doe
            customerPhone:
              type: string
              example: "+15551234567"
            customerEmail:
              type: string
              format: email
            serviceId:
              type: string
            serviceType:
              type: string
              description: Service name, used when serviceId is absent
            requestedDate:
              type: string
              format: date
              example: "2099-01-01"
            requestedTime:
              type: string
              example: "10:00"
            preferredDateTime:
              type: string
              example: "2099-01-01 10:00"
            notes:
              type: string
          required:
            - customerName
            - customerPhone
    responses:
      201:
        description: Booking request created successfully
      400:
        description: Validation error or slot already booked
      404:
        description: Service not found
    """
    payload = json_body()
    booking = admit_booking(payload)

    current_app.logger.info("Booking %s created for service %s", booking.id, booking.service_id)
    return jsonify({
        "success": True,
        "message": "Booking request submitted successfully. We will contact you soon to confirm.",
        "data": booking.to_dict(),
    }), 201


@public_bp.get("/bookings/<booking_id>")
def get_booking(booking_id: str) -> tuple[dict[str, object], int]:
    """Get a booking by ID, verified by the customer's phone number.
    ---
    tags:
      - Public Bookings
    parameters:
      - name: booking_id
        in: path
        type: string
        required: true
      - name: phone
        in: query
        type: string
        required: true
    responses:
      200:
        description: Booking details
      400:
        description: Phone number missing or not matching
      404:
        description: Booking not found
    """
    phone = (request.args.get("phone") or "").strip()
    if not phone:
        raise ValidationError("Phone number is required to view booking details")

    booking = (
        Booking.query.options(joinedload(Booking.service).joinedload(Service.category))
        .filter(Booking.id == booking_id)
        .first()
    )
    if booking is None:
        raise NotFoundError("Booking not found")

    if booking.customer_phone != phone:
        raise ValidationError("Phone number does not match our records")

    return jsonify({"success": True, "data": booking.to_dict()}), 200


# --- Transformations gallery ---


@public_bp.get("/transformations")
def list_transformations() -> tuple[dict[str, object], int]:
    """Get active before/after transformations, newest first.
    ---
    tags:
      - Transformations
    parameters:
      - name: category
        in: query
        type: string
      - name: limit
        in: query
        type: integer
        default: 12
    responses:
      200:
        description: List of transformations
    """
    category = request.args.get("category")
    try:
        limit = max(1, int(request.args.get("limit", 12)))
    except (TypeError, ValueError):
        raise ValidationError("limit must be an integer")

    query = Transformation.query.filter(Transformation.is_active.is_(True))
    if category:
        query = query.filter(Transformation.category == category)

    transformations = query.order_by(Transformation.created_at.desc()).limit(limit).all()
    return jsonify({"success": True, "data": [item.to_dict() for item in transformations]}), 200


@public_bp.get("/transformations/<int:transformation_id>")
def get_transformation(transformation_id: int) -> tuple[dict[str, object], int]:
    """Get an active transformation by ID.
    ---
    tags:
      - Transformations
    parameters:
      - name: transformation_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Transformation details
      404:
        description: Transformation not found
    """
    transformation = Transformation.query.filter_by(id=transformation_id, is_active=True).first()
    if transformation is None:
        raise NotFoundError("Transformation not found")

    return jsonify({"success": True, "data": transformation.to_dict()}), 200


def register_routes(app: Flask) -> None:
    from .routes_admin import admin_bp

    app.register_blueprint(bp)
    app.register_blueprint(public_bp)
    app.register_blueprint(admin_bp)
