"""
Auth Models — application users and their roles.

Roles gate row visibility across the CRM:
    admin            — full access, user management
    manager          — full read/write access, sees every appointment as own
    user             — sees every client
    teleprospecteur  — sees only the clients they created
"""

import uuid
from datetime import datetime, timezone

from crm.models import db

ROLES = ("admin", "manager", "user", "teleprospecteur")
DEFAULT_ROLE = "user"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = db.Column(db.String(100), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    email = db.Column(db.String(200))
    nom = db.Column(db.String(100))
    prenom = db.Column(db.String(100))
    role = db.Column(db.String(20), nullable=False, default=DEFAULT_ROLE)
    is_active = db.Column(db.Integer, nullable=False, default=1)  # 1 = active, 0 = disabled
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.CheckConstraint(
            "role IN ('admin', 'manager', 'user', 'teleprospecteur')",
            name="ck_users_role",
        ),
    )

    @property
    def active(self) -> bool:
        return self.is_active == 1

    @property
    def sees_all_appointments(self) -> bool:
        """Admins and managers treat every appointment as their own."""
        return self.role in ("admin", "manager")

    def to_dict(self, include_status=True):
        d = {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "nom": self.nom,
            "prenom": self.prenom,
            "role": self.role,
        }
        if include_status:
            d["is_active"] = self.is_active
            d["created_at"] = self.created_at.isoformat() if self.created_at else None
        return d

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role!r}>"
