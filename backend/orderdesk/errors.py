# Overview: Domain error taxonomy shared by services and routes.

"""
Every service failure is raised as a ServiceError subclass. Routes catch
ServiceError and render it with error_response(); anything else is an
internal error and is logged before a generic 500 is returned.
"""

from flask import current_app, jsonify

from .extensions import db


class ServiceError(Exception):
    """Base class for expected, client-visible failures."""
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(ServiceError):
    """Malformed, missing or out-of-range input."""


class WeakPasswordError(ValidationError):
    """Password does not satisfy the password policy."""


class ConflictError(ServiceError):
    """Uniqueness violation (duplicate email, CNIC, category name...)."""


class NotFoundError(ServiceError):
    status_code = 404


class UnauthorizedError(ServiceError):
    """Missing or malformed credentials."""
    status_code = 401


class InvalidTokenError(ServiceError):
    """Token signature invalid, expired, or not recognised."""
    status_code = 403


class AccessDeniedError(ServiceError):
    status_code = 403


class AccountBlockedError(ServiceError):
    status_code = 403


class InvalidCredentialsError(ServiceError):
    """Email/password pair (or old password) does not match."""


class InvalidOrExpiredCodeError(ServiceError):
    """Password reset code mismatch, missing, or past its expiry."""


class InsufficientStockError(ServiceError):
    """Requested line quantity exceeds available stock."""


class ConfigurationError(ServiceError):
    """Server-side collaborator is not configured (e.g. SMTP credentials)."""
    status_code = 500


def error_response(exc: ServiceError):
    body = {"error": exc.message}
    if exc.details:
        body["details"] = exc.details
    return jsonify(body), exc.status_code


def internal_error_response(log_message: str):
    """Roll back, log the active exception, and return a generic 500."""
    db.session.rollback()
    current_app.logger.exception(log_message)
    return jsonify({"error": "Internal server error"}), 500
