"""
Sales pipeline models — opportunities and the interaction log.

Interactions are append-only: the API exposes create and delete, never update.
"""

import uuid
from datetime import datetime, timezone

from crm.models import db

OPPORTUNITY_STAGES = ("prospection", "qualification", "proposition", "negotiation", "gagne", "perdu")
CLOSED_STAGES = ("gagne", "perdu")
INTERACTION_TYPES = ("email", "appel", "reunion", "note")


def _now():
    return datetime.now(timezone.utc)


class Opportunite(db.Model):
    __tablename__ = "opportunites"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    client_id = db.Column(
        db.String(36), db.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    titre = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text)
    montant = db.Column(db.Float, nullable=False, default=0.0)
    etape = db.Column(db.String(20), nullable=False, default="prospection", index=True)
    probabilite = db.Column(db.Integer, nullable=False, default=50)
    date_cloture_estimee = db.Column(db.Date)
    date_cloture_reelle = db.Column(db.Date)
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at = db.Column(db.DateTime, default=_now)
    updated_at = db.Column(db.DateTime, default=_now, onupdate=_now)

    client = db.relationship("Client", back_populates="opportunites")

    @property
    def is_open(self) -> bool:
        return self.etape not in CLOSED_STAGES

    def to_dict(self):
        return {
            "id": self.id,
            "client_id": self.client_id,
            "titre": self.titre,
            "description": self.description,
            "montant": self.montant,
            "etape": self.etape,
            "probabilite": self.probabilite,
            "date_cloture_estimee": (
                self.date_cloture_estimee.isoformat() if self.date_cloture_estimee else None
            ),
            "date_cloture_reelle": (
                self.date_cloture_reelle.isoformat() if self.date_cloture_reelle else None
            ),
            "user_id": self.user_id,
            "entreprise": self.client.entreprise if self.client else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class Interaction(db.Model):
    __tablename__ = "interactions"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    client_id = db.Column(
        db.String(36), db.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = db.Column(db.String(20), nullable=False, default="note")
    contenu = db.Column(db.Text, nullable=False)
    date_interaction = db.Column(db.DateTime, nullable=False, default=datetime.now, index=True)
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at = db.Column(db.DateTime, default=_now)

    client = db.relationship("Client", back_populates="interactions")
    author = db.relationship("User", foreign_keys=[user_id])

    def to_dict(self):
        return {
            "id": self.id,
            "client_id": self.client_id,
            "type": self.type,
            "contenu": self.contenu,
            "date_interaction": self.date_interaction.isoformat() if self.date_interaction else None,
            "user_id": self.user_id,
            "created_by_username": self.author.username if self.author else None,
            "entreprise": self.client.entreprise if self.client else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
