"""
Appointment model (rendez-vous).

date_heure is stored as a naive datetime in server local time; the calendar
filters compare against local day/week/month boundaries.
"""

import uuid
from datetime import datetime, timezone

from crm.models import db

RDV_TYPES = ("appel", "reunion", "presentation", "suivi", "autre")
DEFAULT_DURATION_MINUTES = 60


class RendezVous(db.Model):
    __tablename__ = "rendez_vous"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    client_id = db.Column(
        db.String(36), db.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    titre = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text)
    date_heure = db.Column(db.DateTime, nullable=False, index=True)
    duree = db.Column(db.Integer, default=DEFAULT_DURATION_MINUTES)
    lieu = db.Column(db.String(300))
    type = db.Column(db.String(20), default="reunion")
    statut = db.Column(db.String(30), default="planifie", index=True)
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    client = db.relationship("Client", back_populates="rendez_vous")
    owner = db.relationship("User", foreign_keys=[user_id])

    def is_mine(self, user) -> bool:
        return user.sees_all_appointments or self.user_id == user.id

    def to_dict(self, viewer=None):
        c = self.client
        d = {
            "id": self.id,
            "client_id": self.client_id,
            "titre": self.titre,
            "description": self.description,
            "date_heure": self.date_heure.isoformat() if self.date_heure else None,
            "duree": self.duree,
            "lieu": self.lieu,
            "type": self.type,
            "statut": self.statut,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            # Joined client fields for the calendar cards
            "client_nom": c.nom if c else None,
            "client_prenom": c.prenom if c else None,
            "entreprise": c.entreprise if c else None,
            "email": c.email if c else None,
            "telephone": c.telephone if c else None,
            "ville": c.ville if c else None,
            "code_postal": c.code_postal if c else None,
            "created_by_username": self.owner.username if self.owner else None,
        }
        if viewer is not None:
            d["is_mine"] = self.is_mine(viewer)
        return d
