"""
CRM Platform
Role-based access control for API views.

The bearer token itself is checked by ``crm.middleware.jwt_auth`` before any
view runs; by the time a view executes, ``g.current_user`` is an active User.

Usage:
    @users_bp.route("", methods=["POST"])
    @require_role("admin")
    def create_user():
        user = current_user()
"""

import functools
import logging

from flask import g

from crm.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def current_user():
    """The authenticated User for this request, or None."""
    return getattr(g, "current_user", None)


def require_role(*roles):
    """Decorator: allow the view only for users holding one of ``roles``."""

    def decorator(f):
        @functools.wraps(f)
        def decorated(*args, **kwargs):
            user = current_user()
            if user is None:
                return api_error(E.UNAUTHORIZED, "Authentication required")
            if user.role not in roles:
                logger.warning(
                    "User %s (role=%s) denied on %s, requires %s",
                    user.username, user.role, f.__name__, ", ".join(roles),
                    extra={"event_type": "role_denied"},
                )
                return api_error(E.FORBIDDEN, "Insufficient permissions")
            return f(*args, **kwargs)

        return decorated

    return decorator
