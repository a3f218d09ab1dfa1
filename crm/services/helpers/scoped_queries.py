"""
Role-scoped query helpers.

Every client lookup, and every lookup of a row that hangs off a client
(appointment, opportunity, interaction, contact), goes through these helpers
instead of ``db.session.get(Model, pk)``. Visibility rules:

    admin            → every client
    manager          → every client
    user             → every client
    teleprospecteur  → only clients whose user_id is their own

A row outside the caller's visibility is indistinguishable from a missing
row: both raise NotFoundError → HTTP 404.

Usage:
    client = get_visible_client(client_id, user)
    contact = get_scoped_child(Contact, contact_id, user)
    stmt = scope_to_visible_clients(select(Contact), Contact, user)
"""

import logging

from sqlalchemy import select

from crm.core.exceptions import NotFoundError
from crm.models import db
from crm.models.client import Client

logger = logging.getLogger(__name__)

# Roles limited to their own clients
OWNER_SCOPED_ROLES = frozenset({"teleprospecteur"})


def is_owner_scoped(user) -> bool:
    return user.role in OWNER_SCOPED_ROLES


def visible_clients(user):
    """Return a SELECT over the clients the user may see."""
    stmt = select(Client)
    if is_owner_scoped(user):
        stmt = stmt.where(Client.user_id == user.id)
    return stmt


def scope_to_visible_clients(stmt, model, user):
    """Restrict a SELECT over a client child model to visible clients.

    Args:
        stmt: A select() whose FROM already includes ``model``.
        model: Child model class carrying a ``client_id`` column.
        user: The acting User.
    """
    if not is_owner_scoped(user):
        return stmt
    return stmt.join(Client, model.client_id == Client.id).where(Client.user_id == user.id)


def get_visible_client(client_id: str, user) -> Client:
    """Fetch a client by id within the user's visibility.

    Raises:
        NotFoundError: If the client does not exist OR is hidden from the user.
    """
    stmt = visible_clients(user).where(Client.id == client_id)
    client = db.session.execute(stmt).scalar_one_or_none()
    if client is None:
        logger.debug("Client id=%s not visible to user %s (role=%s)", client_id, user.id, user.role)
        raise NotFoundError(resource="Client", resource_id=client_id)
    return client


def get_scoped_child(model, pk: str, user):
    """Fetch a client child row by id within the user's visibility.

    Raises:
        NotFoundError: If the row does not exist OR its client is hidden.
    """
    stmt = scope_to_visible_clients(select(model).where(model.id == pk), model, user)
    row = db.session.execute(stmt).scalar_one_or_none()
    if row is None:
        raise NotFoundError(resource=model.__name__, resource_id=pk)
    return row
