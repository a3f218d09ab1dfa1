"""
Client Service — client CRUD with role visibility and appointment mirroring.

Functions:
    - list_clients:    Visible clients, newest first
    - get_client:      Single visible client
    - create_client:   Create, owner = caller; mirror date_rdv into a RendezVous
    - update_client:   Partial update; re-mirror date_rdv into the first RendezVous
    - delete_client:   Delete client and every child row

Business rule: a client carrying a non-empty ``date_rdv`` string in the
request has exactly one linked appointment. Its titre is
``"RDV - <entreprise or nom>"``, its description the client's notes_rdv and
its statut the submitted statut_rdv, falling back to "planifie". An update
that omits statut_rdv keeps the appointment on the client's stored status.
"""

import logging

from sqlalchemy import select

from crm.core.exceptions import ValidationError
from crm.models import db
from crm.models.client import RDV_KINDS, RDV_STATUSES, Client
from crm.models.rendez_vous import RendezVous
from crm.services.helpers.scoped_queries import get_visible_client, visible_clients
from crm.utils.helpers import clean_text, is_blank, parse_datetime_input

logger = logging.getLogger(__name__)

# Plain text columns copied from the payload as-is
_TEXT_FIELDS = (
    "prenom", "email", "telephone", "entreprise", "poste",
    "adresse", "ville", "code_postal", "pays",
    "prenom_contact", "nom_contact", "telephone_contact", "email_contact",
    "notes_rdv", "notes",
)


def _validate_choice(field: str, value, choices) -> str | None:
    if is_blank(value):
        return None
    if value not in choices:
        raise ValidationError(
            f"{field} must be one of: {', '.join(choices)}", details={field: value}
        )
    return value


def _apply_fields(client: Client, data: dict) -> None:
    """Copy the supplied payload keys onto the client."""
    if "nom" in data:
        nom = clean_text("nom", data["nom"]) or ""
        if not nom:
            raise ValidationError("nom is required", details={"nom": "required"})
        client.nom = nom[:200]

    for field in _TEXT_FIELDS:
        if field in data:
            setattr(client, field, clean_text(field, data[field]))

    if "date_rdv" in data:
        try:
            client.date_rdv = parse_datetime_input(data["date_rdv"])
        except ValueError as exc:
            raise ValidationError(str(exc), details={"date_rdv": data["date_rdv"]})
    if "type_rdv" in data:
        client.type_rdv = _validate_choice("type_rdv", data["type_rdv"], RDV_KINDS)
    if "statut_rdv" in data:
        client.statut_rdv = _validate_choice("statut_rdv", data["statut_rdv"], RDV_STATUSES) or "en_attente"


def _wants_appointment(data: dict) -> bool:
    raw = data.get("date_rdv")
    return isinstance(raw, str) and bool(raw.strip())


def _sync_appointment(client: Client, data: dict, user_id: str, creating: bool = False) -> RendezVous:
    """Create or refresh the appointment mirrored from the client's RDV fields."""
    titre = f"RDV - {client.display_name}"
    description = client.notes_rdv or ""
    if is_blank(data.get("statut_rdv")) and (creating or "statut_rdv" in data):
        statut = "planifie"
    else:
        # Partial update: keep the appointment on the client's stored status
        statut = client.statut_rdv or "planifie"

    rdv = db.session.execute(
        select(RendezVous)
        .where(RendezVous.client_id == client.id)
        .order_by(RendezVous.created_at.asc())
        .limit(1)
    ).scalar_one_or_none()

    if rdv is None:
        rdv = RendezVous(
            client_id=client.id,
            titre=titre,
            description=description,
            date_heure=client.date_rdv,
            statut=statut,
            user_id=user_id,
        )
        db.session.add(rdv)
    else:
        rdv.titre = titre
        rdv.description = description
        rdv.date_heure = client.date_rdv
        rdv.statut = statut
    return rdv


# ── Client CRUD ───────────────────────────────────────────────────────────────


def list_clients(user) -> list[dict]:
    """List the clients visible to the user, newest first."""
    stmt = visible_clients(user).order_by(Client.created_at.desc())
    return [c.to_dict() for c in db.session.execute(stmt).scalars().all()]


def get_client(user, client_id: str) -> dict:
    return get_visible_client(client_id, user).to_dict()


def create_client(user, data: dict) -> Client:
    """Create a client owned by the caller.

    Raises:
        ValidationError: nom missing, bad enum value or unparsable date_rdv.
    """
    if is_blank(data.get("nom")):
        raise ValidationError("nom is required", details={"nom": "required"})

    client = Client(user_id=user.id, pays="France", statut_rdv="en_attente")
    _apply_fields(client, data)
    if is_blank(client.pays):
        client.pays = "France"
    db.session.add(client)
    db.session.flush()

    if _wants_appointment(data):
        _sync_appointment(client, data, user.id, creating=True)

    db.session.commit()
    logger.info(
        "Client created",
        extra={"event_type": "client_created", "client_id": client.id, "user_id": user.id},
    )
    return client


def update_client(user, client_id: str, data: dict) -> Client:
    """Update the supplied fields of a visible client."""
    client = get_visible_client(client_id, user)
    _apply_fields(client, data)

    if _wants_appointment(data):
        _sync_appointment(client, data, user.id)

    db.session.commit()
    logger.info(
        "Client updated",
        extra={"event_type": "client_updated", "client_id": client.id, "user_id": user.id},
    )
    return client


def delete_client(user, client_id: str) -> None:
    """Delete a visible client together with its appointments and other children."""
    client = get_visible_client(client_id, user)
    db.session.delete(client)
    db.session.commit()
    logger.info(
        "Client deleted",
        extra={"event_type": "client_deleted", "client_id": client_id, "user_id": user.id},
    )
