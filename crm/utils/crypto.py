"""
Crypto utilities — bcrypt password hashing.

Hashes produced by the previous Node.js server (bcryptjs, ``$2a$`` prefix)
verify unchanged, so imported users keep their passwords.
"""

import bcrypt
from flask import current_app

DEFAULT_ROUNDS = 12


def _rounds() -> int:
    try:
        return current_app.config.get("BCRYPT_ROUNDS", DEFAULT_ROUNDS)
    except RuntimeError:
        # Outside app context
        return DEFAULT_ROUNDS


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password with bcrypt (BCRYPT_ROUNDS, default 12)."""
    salt = bcrypt.gensalt(rounds=_rounds())
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify a plain-text password against its bcrypt hash."""
    if not password_hash or not plain_password:
        return False
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            password_hash.encode("utf-8"),
        )
    except ValueError:
        # Not a bcrypt hash
        return False
