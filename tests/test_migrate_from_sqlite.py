"""
Legacy SQLite import tests.
"""

import sqlite3

import pytest

from crm.models.auth import User
from crm.models.client import Client
from crm.models.rendez_vous import RendezVous
from crm.utils.crypto import hash_password
from scripts.migrate_from_sqlite import migrate, parse_timestamp


@pytest.fixture()
def legacy_db():
    conn = sqlite3.connect(":memory:")
    conn.executescript(
        """
        CREATE TABLE users (id TEXT PRIMARY KEY, username TEXT, password_hash TEXT, email TEXT,
                            nom TEXT, prenom TEXT, role TEXT, is_active INTEGER, created_at TEXT);
        CREATE TABLE clients (id TEXT PRIMARY KEY, nom TEXT, prenom TEXT, email TEXT, telephone TEXT,
                              entreprise TEXT, poste TEXT, adresse TEXT, ville TEXT, code_postal TEXT,
                              pays TEXT, prenom_contact TEXT, nom_contact TEXT, telephone_contact TEXT,
                              email_contact TEXT, date_rdv TEXT, type_rdv TEXT, statut_rdv TEXT,
                              notes_rdv TEXT, notes TEXT, user_id TEXT, created_at TEXT, updated_at TEXT);
        CREATE TABLE rendez_vous (id TEXT PRIMARY KEY, client_id TEXT, titre TEXT, description TEXT,
                                  date_heure TEXT, duree INTEGER, lieu TEXT, type TEXT, statut TEXT,
                                  user_id TEXT, created_at TEXT);
        """
    )
    pw = hash_password("legacy-pass")
    conn.executemany(
        "INSERT INTO users VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
        [
            ("u-admin", "admin", pw, None, "Admin", None, "admin", 1, "2024-01-01 08:00:00"),
            ("u-tp", "julie", pw, "julie@acme.fr", "Blanc", "Julie", "teleprospecteur", 1,
             "2024-01-02 08:00:00"),
        ],
    )
    conn.execute(
        "INSERT INTO clients (id, nom, entreprise, pays, date_rdv, statut_rdv, user_id, created_at) "
        "VALUES ('c-1', 'Durand', 'Acme', 'France', '2024-02-01T10:00', 'planifie', 'u-tp', "
        "'2024-01-05 09:00:00')"
    )
    conn.executemany(
        "INSERT INTO rendez_vous (id, client_id, titre, date_heure, duree, type, statut, user_id, created_at) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
        [
            ("r-1", "c-1", "RDV - Acme", "2024-02-01T10:00", 60, "reunion", "planifie", "u-tp",
             "2024-01-05 09:00:00"),
            ("r-orphan", "c-missing", "Perdu", "2024-02-02T10:00", 60, "reunion", "planifie", None, None),
        ],
    )
    conn.commit()
    yield conn
    conn.close()


def test_parse_timestamp():
    assert parse_timestamp("2024-01-05 09:00:00").isoformat() == "2024-01-05T09:00:00"
    assert parse_timestamp("") is None
    assert parse_timestamp("garbage") is None


def test_migrate_copies_rows_and_skips_admin(legacy_db):
    counts = migrate(legacy_db)
    assert counts == {"users": 1, "clients": 1, "rendez_vous": 1}

    julie = User.query.filter_by(username="julie").one()
    assert julie.role == "teleprospecteur"
    assert User.query.filter_by(username="admin").count() == 0

    client = Client.query.filter_by(id="c-1").one()
    assert client.user_id == "u-tp"
    assert client.date_rdv.isoformat() == "2024-02-01T10:00:00"
    assert RendezVous.query.filter_by(id="r-orphan").count() == 0


def test_migrate_is_idempotent(legacy_db):
    migrate(legacy_db)
    counts = migrate(legacy_db)
    assert counts == {"users": 0, "clients": 0, "rendez_vous": 0}
    assert Client.query.count() == 1


def test_migrated_user_can_log_in(client, legacy_db):
    migrate(legacy_db)
    res = client.post("/api/auth/login", json={"username": "julie", "password": "legacy-pass"})
    assert res.status_code == 200


def test_unreadable_timestamps_fall_back_to_column_default(legacy_db):
    legacy_db.execute(
        "INSERT INTO clients (id, nom, created_at, updated_at) VALUES ('c-2', 'Martin', 'hier', NULL)"
    )
    legacy_db.commit()
    migrate(legacy_db)

    kept = Client.query.filter_by(id="c-1").one()
    assert kept.created_at.isoformat().startswith("2024-01-05T09:00")
    fallback = Client.query.filter_by(id="c-2").one()
    assert fallback.created_at is not None
    assert fallback.updated_at is not None
