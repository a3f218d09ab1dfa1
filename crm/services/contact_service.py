"""
Contact Service — people attached to a client.

At most one contact per client is principal (est_principal = 1). Marking a
contact principal clears the flag on the other contacts of the same client
in the same transaction.
"""

import logging

from sqlalchemy import select, update

from crm.core.exceptions import ValidationError
from crm.models import db
from crm.models.client import Contact
from crm.services.helpers.scoped_queries import (
    get_scoped_child,
    get_visible_client,
    scope_to_visible_clients,
)
from crm.utils.helpers import clean_text, is_blank

logger = logging.getLogger(__name__)


def _as_flag(value) -> int:
    if isinstance(value, str):
        return 1 if value.strip().lower() in ("1", "true", "oui", "yes") else 0
    return 1 if value else 0


def _clear_other_principals(contact: Contact) -> None:
    db.session.execute(
        update(Contact)
        .where(Contact.client_id == contact.client_id, Contact.id != contact.id)
        .values(est_principal=0)
    )


def list_contacts(user, client_id: str | None = None) -> list[dict]:
    """Visible contacts, principal first then by name."""
    stmt = scope_to_visible_clients(select(Contact), Contact, user)
    if client_id:
        stmt = stmt.where(Contact.client_id == client_id)
    stmt = stmt.order_by(Contact.est_principal.desc(), Contact.nom.asc(), Contact.prenom.asc())
    return [c.to_dict() for c in db.session.execute(stmt).scalars().all()]


def get_contact(user, contact_id: str) -> Contact:
    return get_scoped_child(Contact, contact_id, user)


def _apply_fields(contact: Contact, data: dict) -> None:
    for field in ("nom", "prenom"):
        if field in data:
            value = clean_text(field, data[field], 200)
            if not value:
                raise ValidationError(f"{field} is required", details={field: "required"})
            setattr(contact, field, value)
    for field in ("email", "telephone", "poste"):
        if field in data:
            setattr(contact, field, clean_text(field, data[field]))
    if "est_principal" in data:
        contact.est_principal = _as_flag(data["est_principal"])


def create_contact(user, data: dict) -> Contact:
    missing = [f for f in ("client_id", "nom", "prenom") if is_blank(data.get(f))]
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}",
            details={f: "required" for f in missing},
        )

    client = get_visible_client(data["client_id"], user)
    contact = Contact(client_id=client.id, est_principal=0)
    _apply_fields(contact, data)
    db.session.add(contact)
    db.session.flush()
    if contact.est_principal:
        _clear_other_principals(contact)
    db.session.commit()
    logger.info("Contact created", extra={"event_type": "contact_created", "client_id": client.id})
    return contact


def update_contact(user, contact_id: str, data: dict) -> Contact:
    contact = get_scoped_child(Contact, contact_id, user)
    if "client_id" in data and data["client_id"] != contact.client_id:
        contact.client_id = get_visible_client(data["client_id"], user).id
    _apply_fields(contact, data)
    db.session.flush()
    if contact.est_principal:
        _clear_other_principals(contact)
    db.session.commit()
    return contact


def delete_contact(user, contact_id: str) -> None:
    contact = get_scoped_child(Contact, contact_id, user)
    db.session.delete(contact)
    db.session.commit()
    logger.info("Contact deleted", extra={"event_type": "contact_deleted"})
