"""
Client Models — client records and their contact people.

A client embeds one planned appointment (date_rdv / type_rdv / statut_rdv /
notes_rdv). The client service mirrors those fields into a RendezVous row so
the calendar only has to read one table.

Child rows (appointments, opportunities, interactions, contacts) are removed
together with their client.
"""

import uuid
from datetime import datetime, timezone

from crm.models import db

# Shared by Client.statut_rdv and RendezVous.statut
RDV_STATUSES = (
    "en_attente",
    "planifie",
    "confirme",
    "en_attente_documents",
    "valide",
    "annule",
)
RDV_KINDS = ("visio", "presentiel")


def _now():
    return datetime.now(timezone.utc)


class Client(db.Model):
    __tablename__ = "clients"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    nom = db.Column(db.String(200), nullable=False)
    prenom = db.Column(db.String(200))
    email = db.Column(db.String(255))
    telephone = db.Column(db.String(50))
    entreprise = db.Column(db.String(200))
    poste = db.Column(db.String(200))

    # Address
    adresse = db.Column(db.String(500))
    ville = db.Column(db.String(200))
    code_postal = db.Column(db.String(20))
    pays = db.Column(db.String(100), default="France")

    # Person to reach at the company
    prenom_contact = db.Column(db.String(200))
    nom_contact = db.Column(db.String(200))
    telephone_contact = db.Column(db.String(50))
    email_contact = db.Column(db.String(255))

    # Embedded appointment
    date_rdv = db.Column(db.DateTime)
    type_rdv = db.Column(db.String(20))
    statut_rdv = db.Column(db.String(30), default="en_attente")
    notes_rdv = db.Column(db.Text)

    notes = db.Column(db.Text)
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = db.Column(db.DateTime, default=_now, index=True)
    updated_at = db.Column(db.DateTime, default=_now, onupdate=_now)

    # Relationships
    owner = db.relationship("User", foreign_keys=[user_id])
    rendez_vous = db.relationship(
        "RendezVous", back_populates="client", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    opportunites = db.relationship(
        "Opportunite", back_populates="client", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    interactions = db.relationship(
        "Interaction", back_populates="client", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    contacts = db.relationship(
        "Contact", back_populates="client", lazy="dynamic",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    @property
    def display_name(self) -> str:
        return self.entreprise or self.nom

    def to_dict(self):
        return {
            "id": self.id,
            "nom": self.nom,
            "prenom": self.prenom,
            "email": self.email,
            "telephone": self.telephone,
            "entreprise": self.entreprise,
            "poste": self.poste,
            "adresse": self.adresse,
            "ville": self.ville,
            "code_postal": self.code_postal,
            "pays": self.pays,
            "prenom_contact": self.prenom_contact,
            "nom_contact": self.nom_contact,
            "telephone_contact": self.telephone_contact,
            "email_contact": self.email_contact,
            "date_rdv": self.date_rdv.isoformat() if self.date_rdv else None,
            "type_rdv": self.type_rdv,
            "statut_rdv": self.statut_rdv,
            "notes_rdv": self.notes_rdv,
            "notes": self.notes,
            "user_id": self.user_id,
            "created_by_username": self.owner.username if self.owner else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class Contact(db.Model):
    __tablename__ = "contacts"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    client_id = db.Column(
        db.String(36), db.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    nom = db.Column(db.String(200), nullable=False)
    prenom = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255))
    telephone = db.Column(db.String(50))
    poste = db.Column(db.String(200))
    est_principal = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=_now)

    client = db.relationship("Client", back_populates="contacts")

    def to_dict(self):
        return {
            "id": self.id,
            "client_id": self.client_id,
            "nom": self.nom,
            "prenom": self.prenom,
            "email": self.email,
            "telephone": self.telephone,
            "poste": self.poste,
            "est_principal": self.est_principal,
            "entreprise": self.client.entreprise if self.client else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
