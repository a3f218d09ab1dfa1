#!/usr/bin/env python3
"""
Legacy SQLite → CRM Platform migration script.

Reads the legacy ``database.db`` and inserts users, clients and rendez_vous
into the configured database (PostgreSQL or SQLite-dev). Safe to re-run:
rows whose id already exists are skipped, and so is the legacy ``admin``
account (the platform seeds its own).

Usage:
    python scripts/migrate_from_sqlite.py --source /path/to/database.db

The target database is determined by DATABASE_URL environment variable
or the default development configuration.
"""

import argparse
import logging
import sqlite3
import sys

from crm import create_app
from crm.models import db
from crm.models.auth import User
from crm.models.client import Client
from crm.models.rendez_vous import RendezVous
from crm.utils.helpers import parse_datetime_input

logger = logging.getLogger("migrate_from_sqlite")

_USER_COLUMNS = ("id", "username", "password_hash", "email", "nom", "prenom", "role", "is_active")
_CLIENT_COLUMNS = (
    "id", "nom", "prenom", "email", "telephone", "entreprise", "poste",
    "adresse", "ville", "code_postal", "pays",
    "prenom_contact", "nom_contact", "telephone_contact", "email_contact",
    "type_rdv", "statut_rdv", "notes_rdv", "notes", "user_id",
)
_RDV_COLUMNS = ("id", "client_id", "titre", "description", "duree", "lieu", "type", "statut", "user_id")


def parse_timestamp(value):
    """Parse a legacy timestamp ('YYYY-MM-DD HH:MM:SS' or ISO). None when unreadable."""
    if not value:
        return None
    try:
        return parse_datetime_input(str(value).replace(" ", "T", 1))
    except ValueError:
        return None


def _rows(source_conn, table):
    cursor = source_conn.cursor()
    cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table,))
    if cursor.fetchone() is None:
        logger.warning("No '%s' table found in source DB. Skipping.", table)
        return []
    cursor.execute(f"SELECT * FROM {table}")  # noqa: S608 (fixed table names)
    col_names = [desc[0] for desc in cursor.description]
    return [dict(zip(col_names, row)) for row in cursor.fetchall()]


def _pick(data, columns):
    return {c: data.get(c) for c in columns if c in data}


def _copy_timestamps(obj, data, *fields) -> None:
    """Set parsed timestamps; unreadable ones leave the column default in place."""
    for field in fields:
        value = parse_timestamp(data.get(field))
        if value is not None:
            setattr(obj, field, value)


def migrate_users(source_conn) -> int:
    migrated = 0
    for data in _rows(source_conn, "users"):
        if data.get("username") == "admin":
            logger.info("Admin already exists, skipping")
            continue
        if db.session.get(User, data["id"]) is not None:
            continue
        if User.query.filter_by(username=data["username"]).first() is not None:
            logger.warning("Username %s already taken, skipping id=%s", data["username"], data["id"])
            continue
        user = User(**_pick(data, _USER_COLUMNS))
        _copy_timestamps(user, data, "created_at")
        db.session.add(user)
        migrated += 1
    db.session.commit()
    return migrated


def migrate_clients(source_conn) -> int:
    migrated = 0
    for data in _rows(source_conn, "clients"):
        if db.session.get(Client, data["id"]) is not None:
            continue
        client = Client(**_pick(data, _CLIENT_COLUMNS))
        if client.user_id and db.session.get(User, client.user_id) is None:
            client.user_id = None
        client.date_rdv = parse_timestamp(data.get("date_rdv"))
        _copy_timestamps(client, data, "created_at", "updated_at")
        db.session.add(client)
        migrated += 1
    db.session.commit()
    return migrated


def migrate_rendez_vous(source_conn) -> int:
    migrated = 0
    for data in _rows(source_conn, "rendez_vous"):
        if db.session.get(RendezVous, data["id"]) is not None:
            continue
        if db.session.get(Client, data.get("client_id")) is None:
            logger.warning("Appointment %s references unknown client %s, skipping",
                           data["id"], data.get("client_id"))
            continue
        date_heure = parse_timestamp(data.get("date_heure"))
        if date_heure is None:
            logger.warning("Appointment %s has no readable date_heure, skipping", data["id"])
            continue
        rdv = RendezVous(**_pick(data, _RDV_COLUMNS))
        if rdv.user_id and db.session.get(User, rdv.user_id) is None:
            rdv.user_id = None
        rdv.date_heure = date_heure
        _copy_timestamps(rdv, data, "created_at")
        db.session.add(rdv)
        migrated += 1
    db.session.commit()
    return migrated


def migrate(source_conn) -> dict:
    """Copy every supported table. Must run inside an app context."""
    return {
        "users": migrate_users(source_conn),
        "clients": migrate_clients(source_conn),
        "rendez_vous": migrate_rendez_vous(source_conn),
    }


def main(argv=None):
    parser = argparse.ArgumentParser(description="Import the legacy SQLite CRM database")
    parser.add_argument("--source", required=True, help="Path to the legacy database.db")
    parser.add_argument("--env", default=None, help="Config name (default: APP_ENV)")
    args = parser.parse_args(argv)

    app = create_app(args.env)
    source_conn = sqlite3.connect(args.source)
    try:
        with app.app_context():
            counts = migrate(source_conn)
    except Exception:
        logger.exception("Migration failed")
        return 1
    finally:
        source_conn.close()

    for table, count in counts.items():
        logger.info("%s: %d rows migrated", table, count)
    logger.info("Migration finished")
    return 0


if __name__ == "__main__":
    sys.exit(main())
