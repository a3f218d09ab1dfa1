"""
CRM Platform
Blueprint registry and app-wide error mapping.
"""

import logging

from flask import request
from werkzeug.exceptions import HTTPException

from crm.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from crm.models import db
from crm.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def json_body() -> dict:
    """Request JSON as a dict; anything else becomes an empty payload."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def register_blueprints(app):
    from crm.blueprints.auth_bp import auth_bp
    from crm.blueprints.client_bp import client_bp
    from crm.blueprints.contact_bp import contact_bp
    from crm.blueprints.health_bp import health_bp
    from crm.blueprints.interaction_bp import interaction_bp
    from crm.blueprints.opportunite_bp import opportunite_bp
    from crm.blueprints.rendez_vous_bp import rendez_vous_bp
    from crm.blueprints.stats_bp import stats_bp
    from crm.blueprints.user_bp import user_bp

    for bp in (
        auth_bp, user_bp, client_bp, rendez_vous_bp, opportunite_bp,
        interaction_bp, contact_bp, stats_bp, health_bp,
    ):
        app.register_blueprint(bp)


def register_error_handlers(app):
    """Map service exceptions to HTTP responses once, for every blueprint."""

    @app.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        logger.debug("Not found: %s", error)
        return api_error(E.NOT_FOUND, f"{error.resource} not found")

    @app.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        db.session.rollback()
        return api_error(E.VALIDATION_INVALID, str(error), details=error.details)

    @app.errorhandler(ConflictError)
    def _handle_conflict(error: ConflictError):
        db.session.rollback()
        return api_error(E.CONFLICT_DUPLICATE, str(error))

    @app.errorhandler(AuthenticationError)
    def _handle_authentication(error: AuthenticationError):
        return api_error(E.UNAUTHORIZED, str(error))

    @app.errorhandler(PermissionDeniedError)
    def _handle_permission(error: PermissionDeniedError):
        return api_error(E.FORBIDDEN, str(error))

    @app.errorhandler(HTTPException)
    def _handle_http(error: HTTPException):
        if not request.path.startswith("/api/"):
            return error
        if error.code == 429:
            return {"error": "Too many requests", "retry_after": error.description}, 429
        return {"error": error.description or error.name}, error.code

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        db.session.rollback()
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return api_error(E.INTERNAL, "Internal server error")
