"""Application errors and the JSON error handlers that serialise them."""
from __future__ import annotations

import time
import traceback

import jwt
from flask import Flask, current_app, jsonify, request
from flask_limiter.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from .extensions import db, limiter


class AppError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str | None = None, status_code: int | None = None,
                 errors: list | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors or []


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation failed"


class UnauthorizedError(AppError):
    status_code = 401
    default_message = "Unauthorized access"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Forbidden access"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


def _is_production() -> bool:
    return current_app.config.get("ENV_NAME") == "production"


def error_response(exc: BaseException, message: str, status_code: int,
                   errors: list | None = None):
    payload: dict[str, object] = {"success": False, "message": message}
    if errors:
        payload["errors"] = errors
    if not _is_production() and status_code >= 500:
        payload["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return jsonify(payload), status_code


def _handle_app_error(exc: AppError):
    if exc.status_code >= 500:
        current_app.logger.exception("Request failed", exc_info=exc)
    else:
        current_app.logger.info("%s %s rejected with %s: %s", request.method, request.path,
                                exc.status_code, exc.message)
    return error_response(exc, exc.message, exc.status_code, exc.errors)


def _handle_expired_token(exc: jwt.ExpiredSignatureError):
    return error_response(exc, "Token expired", 401)


def _handle_invalid_token(exc: jwt.InvalidTokenError):
    return error_response(exc, "Invalid token", 401)


def _handle_too_large(exc: RequestEntityTooLarge):
    return error_response(exc, "File size too large", 400)


def _handle_rate_limited(exc: RateLimitExceeded):
    retry_after = 1
    current = limiter.current_limit
    if current is not None:
        retry_after = max(1, int(round(current.reset_at - time.time())))

    response = jsonify({
        "success": False,
        "message": "Too many requests",
        "retryAfter": retry_after,
    })
    response.status_code = 429
    response.headers["Retry-After"] = str(retry_after)
    return response


def _handle_integrity_error(exc: IntegrityError):
    db.session.rollback()
    detail = str(exc.orig).lower() if exc.orig is not None else ""
    if "foreign key" in detail:
        message = "Foreign key constraint violation."
    else:
        message = "Duplicate entry. This record already exists."
    current_app.logger.warning("Integrity error: %s", detail)
    return error_response(exc, message, 400)


def _handle_database_error(exc: SQLAlchemyError):
    db.session.rollback()
    current_app.logger.exception("Database operation failed", exc_info=exc)
    return error_response(exc, "Database operation failed.", 500)


def _handle_http_error(exc: HTTPException):
    if exc.code == 404:
        message = "Route not found"
    elif exc.code == 405:
        message = "Method not allowed"
    else:
        message = exc.description or exc.name
    return error_response(exc, message, exc.code or 500)


def _handle_unexpected(exc: Exception):
    current_app.logger.exception("Unhandled error", exc_info=exc)
    message = "Internal Server Error" if _is_production() else (str(exc) or "Internal Server Error")
    return error_response(exc, message, 500)


def register_error_handlers(app: Flask) -> None:
    app.register_error_handler(AppError, _handle_app_error)
    app.register_error_handler(jwt.ExpiredSignatureError, _handle_expired_token)
    app.register_error_handler(jwt.InvalidTokenError, _handle_invalid_token)
    app.register_error_handler(RequestEntityTooLarge, _handle_too_large)
    app.register_error_handler(RateLimitExceeded, _handle_rate_limited)
    app.register_error_handler(IntegrityError, _handle_integrity_error)
    app.register_error_handler(SQLAlchemyError, _handle_database_error)
    app.register_error_handler(HTTPException, _handle_http_error)
    app.register_error_handler(Exception, _handle_unexpected)
