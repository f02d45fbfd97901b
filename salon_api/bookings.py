"""Booking admission and status lifecycle rules."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timezone

from .errors import NotFoundError, ValidationError
from .extensions import db
from .models import Booking, BookingStatus, Service, utc_now

PHONE_RE = re.compile(r"^[+]?[1-9]\d{1,14}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

SLOT_TAKEN_MESSAGE = "Time slot already booked. Please choose a different time."


@dataclass
class BookingRequest:
    customer_name: str
    customer_phone: str
    customer_email: str | None
    service_id: str | None
    service_name: str | None
    requested_date: date
    requested_time: time
    notes: str | None


def _text(payload: dict, key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _parse_slot(requested_date: str, requested_time: str,
                preferred: str) -> tuple[date, time, datetime]:
    """Return the (date, time) stored on the booking and the instant used for the future check."""
    try:
        if requested_date and requested_time:
            slot_date = date.fromisoformat(requested_date)
            slot_time = time.fromisoformat(requested_time)
            moment = datetime.combine(slot_date, slot_time)
        else:
            raw = preferred.replace(" ", "T", 1)
            if raw.endswith("Z"):
                raw = raw[:-1] + "+00:00"
            moment = datetime.fromisoformat(raw)
            slot_date, slot_time = moment.date(), moment.time().replace(tzinfo=None)
    except ValueError:
        raise ValidationError("Invalid date or time format")

    return slot_date, slot_time, moment


def _is_future(moment: datetime) -> bool:
    if moment.tzinfo is not None:
        return moment > datetime.now(timezone.utc)
    return moment > datetime.now()


def validate_booking_payload(payload: dict) -> BookingRequest:
    """Validate a public booking request.

    Checks run in a fixed order: required fields, phone pattern, date
    parsing, future date, then email format.
    """
    customer_name = _text(payload, "customerName")
    customer_phone = _text(payload, "customerPhone")
    service_id = _text(payload, "serviceId")
    service_name = _text(payload, "serviceType")
    requested_date = _text(payload, "requestedDate")
    requested_time = _text(payload, "requestedTime")
    preferred = _text(payload, "preferredDateTime")

    if len(customer_name) < 2:
        raise ValidationError("Customer name is required and must be at least 2 characters")
    if not customer_phone:
        raise ValidationError("Valid customer phone number is required")
    if not service_id and not service_name:
        raise ValidationError("Service ID or service type is required")
    if not requested_date and not preferred:
        raise ValidationError("Requested date is required")
    if not requested_time and not preferred:
        raise ValidationError("Requested time is required")

    if not PHONE_RE.match(customer_phone):
        raise ValidationError("Valid customer phone number is required")

    slot_date, slot_time, moment = _parse_slot(requested_date, requested_time, preferred)
    if not _is_future(moment):
        raise ValidationError("Booking date and time must be in the future")

    customer_email = _text(payload, "customerEmail") or None
    if customer_email and not EMAIL_RE.match(customer_email):
        raise ValidationError("Invalid email format")

    notes = _text(payload, "specialRequests") or _text(payload, "notes") or None

    return BookingRequest(
        customer_name=customer_name,
        customer_phone=customer_phone,
        customer_email=customer_email,
        service_id=service_id or None,
        service_name=service_name or None,
        requested_date=slot_date,
        requested_time=slot_time,
        notes=notes,
    )


def resolve_bookable_service(service_id: str | None, service_name: str | None) -> Service:
    """Find an active, bookable service by id, falling back to its name.

    The service row is locked for the rest of the transaction so that
    concurrent admissions for the same service are serialised.
    """
    query = Service.query.filter(Service.is_active.is_(True), Service.is_bookable.is_(True))

    if service_id:
        service = query.filter(Service.id == service_id).with_for_update().first()
        if service is None:
            raise NotFoundError("Service not found or not available for booking")
        return service

    service = query.filter(Service.name == service_name).with_for_update().first()
    if service is None:
        raise NotFoundError(f'Service "{service_name}" not found or not available for booking')
    return service


def find_slot_conflict(service_id: str, slot_date: date, slot_time: time,
                       exclude_id: str | None = None) -> Booking | None:
    query = Booking.query.filter(
        Booking.service_id == service_id,
        Booking.requested_date == slot_date,
        Booking.requested_time == slot_time,
        Booking.status.in_(BookingStatus.ACTIVE),
    )
    if exclude_id is not None:
        query = query.filter(Booking.id != exclude_id)
    return query.first()


def admit_booking(payload: dict) -> Booking:
    """Validate, conflict-check and persist a new PENDING booking."""
    booking_request = validate_booking_payload(payload)

    try:
        service = resolve_bookable_service(booking_request.service_id, booking_request.service_name)

        conflict = find_slot_conflict(
            service.id, booking_request.requested_date, booking_request.requested_time
        )
        if conflict is not None:
            raise ValidationError(SLOT_TAKEN_MESSAGE)

        booking = Booking(
            customer_name=booking_request.customer_name,
            customer_phone=booking_request.customer_phone,
            customer_email=booking_request.customer_email,
            service_id=service.id,
            requested_date=booking_request.requested_date,
            requested_time=booking_request.requested_time,
            notes=booking_request.notes,
            status=BookingStatus.PENDING,
        )
        db.session.add(booking)
        db.session.commit()
    except Exception:
        # Releases the service row lock.
        db.session.rollback()
        raise

    return booking


def apply_status(booking: Booking, status, admin_notes=None) -> Booking:
    """Move a booking to ``status`` and stamp the matching timestamp.

    Any status may follow any other. Returning a booking to PENDING or
    CONFIRMED re-checks its slot so two bookings never hold it at once.
    """
    if not status or status not in BookingStatus.ALL:
        raise ValidationError("Valid booking status is required")

    if status in BookingStatus.ACTIVE and booking.status not in BookingStatus.ACTIVE:
        conflict = find_slot_conflict(
            booking.service_id,
            booking.requested_date,
            booking.requested_time,
            exclude_id=booking.id,
        )
        if conflict is not None:
            raise ValidationError(SLOT_TAKEN_MESSAGE)

    booking.status = status
    notes = str(admin_notes).strip() if admin_notes is not None else ""
    if notes:
        booking.admin_notes = notes

    now = utc_now()
    if status == BookingStatus.CONFIRMED:
        booking.confirmed_at = now
    elif status == BookingStatus.COMPLETED:
        booking.completed_at = now
    elif status in (BookingStatus.CANCELLED, BookingStatus.NO_SHOW):
        booking.cancelled_at = now

    db.session.commit()
    return booking
