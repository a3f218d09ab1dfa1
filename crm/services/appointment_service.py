"""
Appointment Service — rendez-vous listing, weekly calendar and CRUD.

Every authenticated user sees every appointment. Each row carries an
``is_mine`` flag: true for admins and managers, otherwise true only for the
appointment's owner. Only ``is_mine`` rows may be updated or deleted.

Date filters use half-open ranges ``[start, end)`` in server local time:

    today  → 00:00 today        .. 00:00 tomorrow
    week   → Monday 00:00       .. next Monday 00:00
    month  → 1st of month 00:00 .. 1st of next month 00:00
"""

import logging
from datetime import date, datetime, time, timedelta

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from crm.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from crm.models import db
from crm.models.client import RDV_STATUSES
from crm.models.rendez_vous import DEFAULT_DURATION_MINUTES, RDV_TYPES, RendezVous
from crm.services.helpers.scoped_queries import get_visible_client
from crm.utils.helpers import clean_text, is_blank, parse_date_input, parse_datetime_input

logger = logging.getLogger(__name__)

DATE_FILTERS = ("today", "week", "month")


# ═══════════════════════════════════════════════════════════════
# Date ranges
# ═══════════════════════════════════════════════════════════════
def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def date_range_for_filter(filter_name: str | None, now: datetime | None = None):
    """Return ``(start, end)`` for a calendar filter, or None for no restriction.

    Unknown filter names are treated like a missing filter.
    """
    if filter_name not in DATE_FILTERS:
        return None
    now = now or datetime.now()
    today = datetime.combine(now.date(), time.min)

    if filter_name == "today":
        return today, today + timedelta(days=1)
    if filter_name == "week":
        start = datetime.combine(week_start(now.date()), time.min)
        return start, start + timedelta(days=7)

    start = today.replace(day=1)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


# ═══════════════════════════════════════════════════════════════
# Queries
# ═══════════════════════════════════════════════════════════════
def _base_query():
    return select(RendezVous).options(
        joinedload(RendezVous.client), joinedload(RendezVous.owner)
    )


def list_appointments(user, filter_name: str | None = None, now: datetime | None = None) -> list[dict]:
    """All appointments ordered by date_heure, optionally limited to a range."""
    stmt = _base_query()
    bounds = date_range_for_filter(filter_name, now)
    if bounds is not None:
        start, end = bounds
        stmt = stmt.where(RendezVous.date_heure >= start, RendezVous.date_heure < end)
    stmt = stmt.order_by(RendezVous.date_heure.asc())
    rows = db.session.execute(stmt).unique().scalars().all()
    return [r.to_dict(viewer=user) for r in rows]


def week_calendar(user, day: date | str | None = None) -> dict:
    """Monday-based week containing ``day``, bucketed per day.

    Returns:
        {"week_start", "week_end", "days": [{"date", "appointments"}] × 7}
        where week_end is the Sunday (inclusive, for display).
    """
    if isinstance(day, str) or day is None:
        try:
            day = parse_date_input(day) or date.today()
        except ValueError as exc:
            raise ValidationError(str(exc), details={"date": day})

    monday = week_start(day)
    start = datetime.combine(monday, time.min)
    end = start + timedelta(days=7)

    stmt = (
        _base_query()
        .where(RendezVous.date_heure >= start, RendezVous.date_heure < end)
        .order_by(RendezVous.date_heure.asc())
    )
    rows = db.session.execute(stmt).unique().scalars().all()

    days = [
        {"date": (monday + timedelta(days=i)).isoformat(), "appointments": []}
        for i in range(7)
    ]
    for rdv in rows:
        days[rdv.date_heure.weekday()]["appointments"].append(rdv.to_dict(viewer=user))

    return {
        "week_start": monday.isoformat(),
        "week_end": (monday + timedelta(days=6)).isoformat(),
        "days": days,
    }


def get_appointment(user, rdv_id: str) -> RendezVous:
    rdv = db.session.get(RendezVous, rdv_id)
    if rdv is None:
        raise NotFoundError(resource="RendezVous", resource_id=rdv_id)
    return rdv


# ═══════════════════════════════════════════════════════════════
# Mutations
# ═══════════════════════════════════════════════════════════════
def _apply_fields(rdv: RendezVous, data: dict) -> None:
    if "titre" in data:
        titre = clean_text("titre", data["titre"], 300)
        if not titre:
            raise ValidationError("titre is required", details={"titre": "required"})
        rdv.titre = titre
    if "date_heure" in data:
        try:
            value = parse_datetime_input(data["date_heure"])
        except ValueError as exc:
            raise ValidationError(str(exc), details={"date_heure": data["date_heure"]})
        if value is None:
            raise ValidationError("date_heure is required", details={"date_heure": "required"})
        rdv.date_heure = value
    if "duree" in data:
        raw = data["duree"]
        if raw in (None, ""):
            rdv.duree = DEFAULT_DURATION_MINUTES
        else:
            try:
                duree = int(raw)
            except (TypeError, ValueError, OverflowError):
                raise ValidationError("duree must be a number of minutes", details={"duree": raw})
            if duree <= 0:
                raise ValidationError("duree must be positive", details={"duree": raw})
            rdv.duree = duree
    if "type" in data:
        value = data["type"] or "reunion"
        if value not in RDV_TYPES:
            raise ValidationError(f"type must be one of: {', '.join(RDV_TYPES)}", details={"type": value})
        rdv.type = value
    if "statut" in data:
        value = data["statut"] or "planifie"
        if value not in RDV_STATUSES:
            raise ValidationError(
                f"statut must be one of: {', '.join(RDV_STATUSES)}", details={"statut": value}
            )
        rdv.statut = value
    for field in ("description", "lieu"):
        if field in data:
            setattr(rdv, field, clean_text(field, data[field]))


def create_appointment(user, data: dict) -> RendezVous:
    """Create an appointment for a visible client, owned by the caller."""
    if is_blank(data.get("client_id")):
        raise ValidationError("client_id is required", details={"client_id": "required"})
    if is_blank(data.get("titre")):
        raise ValidationError("titre is required", details={"titre": "required"})
    if is_blank(data.get("date_heure")):
        raise ValidationError("date_heure is required", details={"date_heure": "required"})

    client = get_visible_client(data["client_id"], user)
    rdv = RendezVous(
        client_id=client.id,
        duree=DEFAULT_DURATION_MINUTES,
        type="reunion",
        statut="planifie",
        user_id=user.id,
    )
    _apply_fields(rdv, data)
    db.session.add(rdv)
    db.session.commit()
    logger.info(
        "Appointment created",
        extra={"event_type": "rdv_created", "rdv_id": rdv.id, "client_id": client.id},
    )
    return rdv


def _get_owned(user, rdv_id: str) -> RendezVous:
    rdv = get_appointment(user, rdv_id)
    if not rdv.is_mine(user):
        logger.warning(
            "User %s tried to modify appointment %s owned by %s",
            user.id, rdv.id, rdv.user_id,
            extra={"event_type": "rdv_forbidden"},
        )
        raise PermissionDeniedError("You can only modify your own appointments")
    return rdv


def update_appointment(user, rdv_id: str, data: dict) -> RendezVous:
    """Update the supplied fields of an appointment the caller may modify."""
    rdv = _get_owned(user, rdv_id)
    if "client_id" in data and data["client_id"] != rdv.client_id:
        rdv.client_id = get_visible_client(data["client_id"], user).id
    _apply_fields(rdv, data)
    db.session.commit()
    logger.info("Appointment updated", extra={"event_type": "rdv_updated", "rdv_id": rdv.id})
    return rdv


def delete_appointment(user, rdv_id: str) -> None:
    rdv = _get_owned(user, rdv_id)
    db.session.delete(rdv)
    db.session.commit()
    logger.info("Appointment deleted", extra={"event_type": "rdv_deleted", "rdv_id": rdv_id})
