"""
User Service — login, user CRUD, activation toggle, default admin seeding.
"""

import logging

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import select

from crm.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from crm.models import db
from crm.models.auth import DEFAULT_ROLE, ROLES, User
from crm.utils.crypto import hash_password, verify_password
from crm.utils.helpers import clean_text

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
# bcrypt input limit
MAX_PASSWORD_BYTES = 72


# ═══════════════════════════════════════════════════════════════
# Login helpers
# ═══════════════════════════════════════════════════════════════
def authenticate_user(username: str, password: str) -> User:
    """Authenticate an active user with username + password.

    Unknown user, disabled account and wrong password all raise the same
    AuthenticationError so the response does not reveal which one failed.
    """
    user = db.session.execute(
        select(User).where(User.username == username, User.is_active == 1)
    ).scalar_one_or_none()
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt", extra={"event_type": "login_failed"})
        raise AuthenticationError()
    logger.info("User logged in: %s", user.username, extra={"event_type": "login"})
    return user


def get_user_by_id(user_id: str) -> User | None:
    """Find a user by ID."""
    return db.session.get(User, user_id)


# ═══════════════════════════════════════════════════════════════
# User CRUD
# ═══════════════════════════════════════════════════════════════
def list_users() -> list[dict]:
    """All users, newest first."""
    users = db.session.execute(
        select(User).order_by(User.created_at.desc())
    ).scalars().all()
    return [u.to_dict() for u in users]


def _normalize_email(email) -> str | None:
    email = clean_text("email", email)
    if not email:
        return None
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}", details={"email": str(e)})


def create_user(data: dict) -> User:
    """Create a user with a bcrypt-hashed password.

    Raises:
        ValidationError: Missing username, short password, unknown role, bad email.
        ConflictError: Username already taken.
    """
    username = clean_text("username", data.get("username")) or ""
    password = data.get("password") or ""
    if not isinstance(password, str):
        raise ValidationError("password must be a string", details={"password": "invalid_type"})
    role = data.get("role") or DEFAULT_ROLE

    if not username:
        raise ValidationError("username is required", details={"username": "required"})
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            details={"password": "too_short"},
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
            details={"password": "too_long"},
        )
    if role not in ROLES:
        raise ValidationError(
            f"role must be one of: {', '.join(ROLES)}", details={"role": role}
        )

    existing = db.session.execute(
        select(User.id).where(User.username == username)
    ).first()
    if existing:
        raise ConflictError("User", "username", username)

    user = User(
        username=username[:100],
        password_hash=hash_password(password),
        email=_normalize_email(data.get("email")),
        nom=clean_text("nom", data.get("nom"), 100),
        prenom=clean_text("prenom", data.get("prenom"), 100),
        role=role,
        is_active=1,
    )
    db.session.add(user)
    db.session.commit()
    logger.info("User created: %s (role=%s)", user.username, user.role,
                extra={"event_type": "user_created"})
    return user


def toggle_user_active(user_id: str, acting_user: User) -> int:
    """Flip a user's is_active flag between 1 and 0. Returns the new value."""
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError(resource="User", resource_id=user_id)
    if user.id == acting_user.id:
        raise ValidationError("You cannot deactivate your own account")

    user.is_active = 0 if user.is_active == 1 else 1
    db.session.commit()
    logger.info("User %s is_active=%d", user.username, user.is_active,
                extra={"event_type": "user_toggled"})
    return user.is_active


def delete_user(user_id: str, acting_user: User) -> None:
    """Delete a user. Records they own are kept with user_id cleared."""
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError(resource="User", resource_id=user_id)
    if user.id == acting_user.id:
        raise ValidationError("You cannot delete your own account")

    from crm.models.client import Client
    from crm.models.opportunite import Interaction, Opportunite
    from crm.models.rendez_vous import RendezVous

    # Mirrors ON DELETE SET NULL for databases running without FK enforcement
    for model in (Client, RendezVous, Opportunite, Interaction):
        model.query.filter_by(user_id=user.id).update({"user_id": None})

    db.session.delete(user)
    db.session.commit()
    logger.info("User deleted: %s", user.username, extra={"event_type": "user_deleted"})


# ═══════════════════════════════════════════════════════════════
# Seeding
# ═══════════════════════════════════════════════════════════════
def ensure_default_admin(username: str, password: str, email: str | None = None) -> tuple[User, bool]:
    """Create the default admin account if no user has that username.

    Returns:
        (user, created) — created is False when the account already existed.
    """
    user = db.session.execute(
        select(User).where(User.username == username)
    ).scalar_one_or_none()
    if user is not None:
        return user, False

    user = User(
        username=username,
        password_hash=hash_password(password),
        email=email,
        nom="Admin",
        prenom="Système",
        role="admin",
        is_active=1,
    )
    db.session.add(user)
    db.session.commit()
    logger.info("Default admin created: username=%s", username)
    return user, True
