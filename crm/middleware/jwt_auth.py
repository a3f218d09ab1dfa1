"""
JWT Auth Middleware — parses the bearer token and loads the current user.

Every ``/api/`` path requires ``Authorization: Bearer <token>`` except the
paths in ``JWT_SKIP_PREFIXES``.

    no / malformed header            → 401 ERR_UNAUTHORIZED
    invalid or expired token         → 403 ERR_TOKEN_INVALID
    token for a deleted/disabled user → 401 ERR_UNAUTHORIZED

On success ``g.current_user`` holds the User row, re-read from the database
on each request so role and activation changes apply immediately.
"""

import logging

import jwt as pyjwt
from flask import g, request

from crm.services.jwt_service import decode_access_token
from crm.services.user_service import get_user_by_id
from crm.utils.errors import E, api_error

logger = logging.getLogger(__name__)

# Paths that skip JWT auth entirely
JWT_SKIP_PREFIXES = (
    "/api/auth/login",
    "/api/health",
)


def init_jwt_middleware(app):
    """Register JWT middleware as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        g.current_user = None
        g.jwt_user_id = None

        path = request.path
        if not path.startswith("/api/") or request.method == "OPTIONS":
            return None
        for prefix in JWT_SKIP_PREFIXES:
            if path.startswith(prefix):
                return None

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer ") or not auth_header[7:].strip():
            return api_error(E.UNAUTHORIZED, "Authentication required")

        token = auth_header[7:].strip()
        try:
            payload = decode_access_token(token)
        except pyjwt.ExpiredSignatureError:
            return api_error(E.TOKEN_INVALID, "Token expired")
        except pyjwt.InvalidTokenError:
            logger.warning("Invalid token on %s", path, extra={"event_type": "token_invalid"})
            return api_error(E.TOKEN_INVALID, "Invalid token")

        user = get_user_by_id(payload.get("sub"))
        if user is None or not user.active:
            return api_error(E.UNAUTHORIZED, "User not found or inactive")

        g.jwt_user_id = user.id
        g.current_user = user
        return None
