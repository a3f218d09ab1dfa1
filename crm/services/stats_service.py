"""
Dashboard statistics.

Client and opportunity figures respect the caller's visibility; appointment
figures are global, like the appointment list.
"""

import logging
from datetime import datetime

from sqlalchemy import func, select

from crm.models import db
from crm.models.opportunite import CLOSED_STAGES, Opportunite
from crm.models.rendez_vous import RendezVous
from crm.services.appointment_service import date_range_for_filter
from crm.services.helpers.scoped_queries import scope_to_visible_clients, visible_clients

logger = logging.getLogger(__name__)


def get_dashboard_stats(user, now: datetime | None = None) -> dict:
    """Headline counts for the dashboard cards."""
    total_clients = db.session.execute(
        select(func.count()).select_from(visible_clients(user).subquery())
    ).scalar_one()

    not_cancelled = RendezVous.statut != "annule"
    total_rdv = db.session.execute(
        select(func.count(RendezVous.id)).where(not_cancelled)
    ).scalar_one()

    start, end = date_range_for_filter("today", now)
    rdv_today = db.session.execute(
        select(func.count(RendezVous.id)).where(
            not_cancelled, RendezVous.date_heure >= start, RendezVous.date_heure < end
        )
    ).scalar_one()

    rdv_confirmed = db.session.execute(
        select(func.count(RendezVous.id)).where(RendezVous.statut == "confirme")
    ).scalar_one()

    open_stmt = scope_to_visible_clients(
        select(func.count(Opportunite.id), func.coalesce(func.sum(Opportunite.montant), 0.0)),
        Opportunite,
        user,
    ).where(Opportunite.etape.notin_(CLOSED_STAGES))
    open_count, pipeline = db.session.execute(open_stmt).one()

    return {
        "total_clients": total_clients,
        "total_rdv": total_rdv,
        "rdv_aujourdhui": rdv_today,
        "rdv_confirmes": rdv_confirmed,
        "opportunites_ouvertes": open_count,
        "montant_pipeline": float(pipeline or 0),
    }
