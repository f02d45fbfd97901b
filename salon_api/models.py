"""Database models for the salon booking backend."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from .extensions import db


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


def _money(value) -> float | None:
    return float(value) if value is not None else None


class BookingStatus:
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"

    ALL = (PENDING, CONFIRMED, COMPLETED, CANCELLED, NO_SHOW)
    # Statuses that hold a time slot.
    ACTIVE = (PENDING, CONFIRMED)


PRICE_TYPES = ("fixed", "variable", "consultation")
SERVICE_TYPES = ("individual", "package", "addon")
DIFFICULTY_LEVELS = ("basic", "intermediate", "advanced", "expert")
TRANSFORMATION_CATEGORIES = ("hair", "facial", "nail", "spa", "makeup", "other")


class Admin(db.Model):
    __tablename__ = "admins"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(191), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(191), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    def to_dict(self) -> dict[str, object]:
        # The password hash never leaves the model.
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
        }


class ServiceCategory(db.Model):
    """Hierarchical grouping of services (self-referencing via parent_id)."""

    __tablename__ = "service_categories"

    id = db.Column(db.String(191), primary_key=True, default=new_id)
    name = db.Column(db.String(191), unique=True, nullable=False)
    description = db.Column(db.Text)
    slug = db.Column(db.String(191), unique=True, nullable=False)
    parent_id = db.Column(db.String(191), db.ForeignKey("service_categories.id"), nullable=True)
    image_url = db.Column(db.String(191))
    icon_class = db.Column(db.String(191), default="fas fa-spa")
    color = db.Column(db.String(7), default="#6366F1")
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    parent = db.relationship("ServiceCategory", remote_side=[id], back_populates="children")
    children = db.relationship(
        "ServiceCategory",
        back_populates="parent",
        order_by="ServiceCategory.sort_order",
    )
    services = db.relationship("Service", back_populates="category", lazy="select")

    def to_summary(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "color": self.color,
            "iconClass": self.icon_class,
        }

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "slug": self.slug,
            "parentId": self.parent_id,
            "imageUrl": self.image_url,
            "iconClass": self.icon_class,
            "color": self.color,
            "sortOrder": self.sort_order,
            "isActive": bool(self.is_active),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    def to_tree_dict(self, active_children_only: bool = True) -> dict[str, object]:
        """Serialise with one level of children, never deeper."""
        children = [
            child for child in self.children
            if child.is_active or not active_children_only
        ]
        data = self.to_dict()
        data["children"] = [child.to_dict() for child in children]
        return data


class Service(db.Model):
    """A bookable salon offering."""

    __tablename__ = "services"

    id = db.Column(db.String(191), primary_key=True, default=new_id)
    name = db.Column(db.String(191), nullable=False)
    description = db.Column(db.Text)
    slug = db.Column(db.String(191), unique=True)
    duration = db.Column(db.Integer, nullable=False)  # minutes
    price = db.Column(db.Numeric(10, 2), nullable=False)
    min_price = db.Column(db.Numeric(10, 2))
    max_price = db.Column(db.Numeric(10, 2))
    price_type = db.Column(
        db.Enum(*PRICE_TYPES, name="price_type", native_enum=False, validate_strings=True),
        nullable=False,
        default="fixed",
    )
    service_type = db.Column(
        db.Enum(*SERVICE_TYPES, name="service_type", native_enum=False, validate_strings=True),
        nullable=False,
        default="individual",
    )
    difficulty_level = db.Column(
        db.Enum(*DIFFICULTY_LEVELS, name="difficulty_level", native_enum=False, validate_strings=True),
        nullable=False,
        default="basic",
    )
    category_id = db.Column(db.String(191), db.ForeignKey("service_categories.id"), nullable=True)
    prerequisites = db.Column(db.JSON, nullable=True, default=list)
    tags = db.Column(db.JSON, nullable=True, default=list)
    preparation_time = db.Column(db.Integer, nullable=False, default=0)
    cleanup_time = db.Column(db.Integer, nullable=False, default=0)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_bookable = db.Column(db.Boolean, nullable=False, default=True)
    requires_consultation = db.Column(db.Boolean, nullable=False, default=False)
    image_url = db.Column(db.String(191))
    images = db.Column(db.JSON, nullable=True, default=list)
    video_url = db.Column(db.String(191))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    category = db.relationship("ServiceCategory", back_populates="services")
    bookings = db.relationship("Booking", back_populates="service", lazy="dynamic")

    def to_summary(self) -> dict[str, object]:
        return {"id": self.id, "name": self.name, "isActive": bool(self.is_active)}

    def to_dict(self, include_category: bool = True) -> dict[str, object]:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "slug": self.slug,
            "duration": self.duration,
            "price": _money(self.price),
            "minPrice": _money(self.min_price),
            "maxPrice": _money(self.max_price),
            "priceType": self.price_type,
            "serviceType": self.service_type,
            "difficultyLevel": self.difficulty_level,
            "categoryId": self.category_id,
            "prerequisites": self.prerequisites or [],
            "tags": self.tags or [],
            "preparationTime": self.preparation_time,
            "cleanupTime": self.cleanup_time,
            "sortOrder": self.sort_order,
            "isActive": bool(self.is_active),
            "isBookable": bool(self.is_bookable),
            "requiresConsultation": bool(self.requires_consultation),
            "imageUrl": self.image_url,
            "images": self.images or [],
            "videoUrl": self.video_url,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
        if include_category:
            data["category"] = self.category.to_summary() if self.category else None
        return data


class Booking(db.Model):
    """A customer's request to reserve a service at a date and time."""

    __tablename__ = "bookings"

    id = db.Column(db.String(191), primary_key=True, default=new_id)
    customer_name = db.Column(db.String(191), nullable=False)
    customer_phone = db.Column(db.String(191), nullable=False)
    customer_email = db.Column(db.String(191))
    service_id = db.Column(db.String(191), db.ForeignKey("services.id"), nullable=False)
    requested_date = db.Column(db.Date, nullable=False)
    requested_time = db.Column(db.Time, nullable=False)
    status = db.Column(
        db.Enum(*BookingStatus.ALL, name="booking_status", native_enum=False, validate_strings=True),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    notes = db.Column(db.Text)
    admin_notes = db.Column(db.Text)
    confirmed_at = db.Column(db.DateTime(timezone=True))
    completed_at = db.Column(db.DateTime(timezone=True))
    cancelled_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    service = db.relationship("Service", back_populates="bookings")

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "customerName": self.customer_name,
            "customerPhone": self.customer_phone,
            "customerEmail": self.customer_email,
            "serviceId": self.service_id,
            "requestedDate": _iso(self.requested_date),
            "requestedTime": self.requested_time.strftime("%H:%M:%S") if self.requested_time else None,
            "status": self.status,
            "notes": self.notes,
            "adminNotes": self.admin_notes,
            "confirmedAt": _iso(self.confirmed_at),
            "completedAt": _iso(self.completed_at),
            "cancelledAt": _iso(self.cancelled_at),
            "service": self.service.to_dict() if self.service else None,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Transformation(db.Model):
    """Before/after image pair shown in the public gallery."""

    __tablename__ = "transformations"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    before_image = db.Column(db.String(255), nullable=False)
    after_image = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(50), index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "beforeImage": self.before_image,
            "afterImage": self.after_image,
            "category": self.category,
            "isActive": bool(self.is_active),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
