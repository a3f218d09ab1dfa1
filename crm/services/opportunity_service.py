"""
Opportunity Service — sales pipeline CRUD.

Opportunities are visible when their client is visible to the caller.
Moving an opportunity to a closed stage (gagne / perdu) stamps
date_cloture_reelle with today unless the caller supplied one.
"""

import logging
import math
from datetime import date

from sqlalchemy import select

from crm.core.exceptions import ValidationError
from crm.models import db
from crm.models.opportunite import CLOSED_STAGES, OPPORTUNITY_STAGES, Opportunite
from crm.services.helpers.scoped_queries import (
    get_scoped_child,
    get_visible_client,
    scope_to_visible_clients,
)
from crm.utils.helpers import clean_text, is_blank, parse_date_input

logger = logging.getLogger(__name__)


def list_opportunities(user, client_id: str | None = None, etape: str | None = None) -> list[dict]:
    stmt = scope_to_visible_clients(select(Opportunite), Opportunite, user)
    if client_id:
        stmt = stmt.where(Opportunite.client_id == client_id)
    if etape:
        stmt = stmt.where(Opportunite.etape == etape)
    stmt = stmt.order_by(Opportunite.created_at.desc())
    return [o.to_dict() for o in db.session.execute(stmt).scalars().all()]


def get_opportunity(user, opp_id: str) -> Opportunite:
    return get_scoped_child(Opportunite, opp_id, user)


def _apply_fields(opp: Opportunite, data: dict) -> None:
    if "titre" in data:
        titre = clean_text("titre", data["titre"], 300)
        if not titre:
            raise ValidationError("titre is required", details={"titre": "required"})
        opp.titre = titre
    if "description" in data:
        opp.description = clean_text("description", data["description"])

    if "montant" in data:
        raw = data["montant"]
        try:
            montant = float(raw) if raw not in (None, "") else 0.0
        except (TypeError, ValueError):
            raise ValidationError("montant must be a number", details={"montant": raw})
        if not math.isfinite(montant):
            raise ValidationError("montant must be a finite number", details={"montant": str(raw)})
        if montant < 0:
            raise ValidationError("montant must be >= 0", details={"montant": raw})
        opp.montant = montant

    if "probabilite" in data:
        raw = data["probabilite"]
        try:
            probabilite = int(raw) if raw not in (None, "") else 50
        except (TypeError, ValueError, OverflowError):
            raise ValidationError("probabilite must be an integer", details={"probabilite": str(raw)})
        if not 0 <= probabilite <= 100:
            raise ValidationError("probabilite must be between 0 and 100", details={"probabilite": raw})
        opp.probabilite = probabilite

    if "etape" in data:
        etape = data["etape"] or "prospection"
        if etape not in OPPORTUNITY_STAGES:
            raise ValidationError(
                f"etape must be one of: {', '.join(OPPORTUNITY_STAGES)}", details={"etape": etape}
            )
        opp.etape = etape

    for field in ("date_cloture_estimee", "date_cloture_reelle"):
        if field in data:
            try:
                setattr(opp, field, parse_date_input(data[field]))
            except ValueError as exc:
                raise ValidationError(str(exc), details={field: data[field]})

    if opp.etape in CLOSED_STAGES and opp.date_cloture_reelle is None:
        opp.date_cloture_reelle = date.today()


def create_opportunity(user, data: dict) -> Opportunite:
    if is_blank(data.get("client_id")):
        raise ValidationError("client_id is required", details={"client_id": "required"})
    if is_blank(data.get("titre")):
        raise ValidationError("titre is required", details={"titre": "required"})

    client = get_visible_client(data["client_id"], user)
    opp = Opportunite(
        client_id=client.id, montant=0.0, etape="prospection", probabilite=50, user_id=user.id
    )
    _apply_fields(opp, data)
    db.session.add(opp)
    db.session.commit()
    logger.info(
        "Opportunity created",
        extra={"event_type": "opportunity_created", "opportunity_id": opp.id, "client_id": client.id},
    )
    return opp


def update_opportunity(user, opp_id: str, data: dict) -> Opportunite:
    opp = get_scoped_child(Opportunite, opp_id, user)
    if "client_id" in data and data["client_id"] != opp.client_id:
        opp.client_id = get_visible_client(data["client_id"], user).id
    previous_stage = opp.etape
    _apply_fields(opp, data)
    db.session.commit()
    if opp.etape != previous_stage:
        logger.info(
            "Opportunity %s moved %s → %s", opp.id, previous_stage, opp.etape,
            extra={"event_type": "opportunity_stage_changed"},
        )
    return opp


def delete_opportunity(user, opp_id: str) -> None:
    opp = get_scoped_child(Opportunite, opp_id, user)
    db.session.delete(opp)
    db.session.commit()
    logger.info("Opportunity deleted", extra={"event_type": "opportunity_deleted", "opportunity_id": opp_id})
