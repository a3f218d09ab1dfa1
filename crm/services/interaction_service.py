"""
Interaction Service — append-only activity log per client.
"""

import logging

from sqlalchemy import select

from crm.core.exceptions import ValidationError
from crm.models import db
from crm.models.opportunite import INTERACTION_TYPES, Interaction
from crm.services.helpers.scoped_queries import (
    get_scoped_child,
    get_visible_client,
    scope_to_visible_clients,
)
from crm.utils.helpers import clean_text, is_blank, parse_datetime_input

logger = logging.getLogger(__name__)


def list_interactions(user, client_id: str | None = None) -> list[dict]:
    """Visible interactions, newest first."""
    stmt = scope_to_visible_clients(select(Interaction), Interaction, user)
    if client_id:
        stmt = stmt.where(Interaction.client_id == client_id)
    stmt = stmt.order_by(Interaction.date_interaction.desc(), Interaction.created_at.desc())
    return [i.to_dict() for i in db.session.execute(stmt).scalars().all()]


def create_interaction(user, data: dict) -> Interaction:
    if is_blank(data.get("client_id")):
        raise ValidationError("client_id is required", details={"client_id": "required"})
    contenu = clean_text("contenu", data.get("contenu"))
    if not contenu:
        raise ValidationError("contenu is required", details={"contenu": "required"})

    kind = data.get("type") or "note"
    if kind not in INTERACTION_TYPES:
        raise ValidationError(
            f"type must be one of: {', '.join(INTERACTION_TYPES)}", details={"type": kind}
        )
    try:
        when = parse_datetime_input(data.get("date_interaction"))
    except ValueError as exc:
        raise ValidationError(str(exc), details={"date_interaction": data.get("date_interaction")})

    client = get_visible_client(data["client_id"], user)
    interaction = Interaction(
        client_id=client.id,
        type=kind,
        contenu=contenu,
        user_id=user.id,
    )
    # None lets the column default (now) apply
    if when is not None:
        interaction.date_interaction = when
    db.session.add(interaction)
    db.session.commit()
    logger.info(
        "Interaction logged",
        extra={"event_type": "interaction_created", "client_id": client.id, "interaction_type": kind},
    )
    return interaction


def delete_interaction(user, interaction_id: str) -> None:
    interaction = get_scoped_child(Interaction, interaction_id, user)
    db.session.delete(interaction)
    db.session.commit()
    logger.info("Interaction deleted", extra={"event_type": "interaction_deleted"})
