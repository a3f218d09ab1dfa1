"""
Shared pytest fixtures for the CRM Platform test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - admin / manager / regular_user / telepro / other_telepro: users per role
    - headers_for: builds bearer headers for a user
"""

import pytest

from crm import create_app
from crm.models import db as _db
from crm.models.auth import User
from crm.services.jwt_service import generate_access_token
from crm.utils.crypto import hash_password

TEST_PASSWORD = "Password123!"


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Users & tokens ───────────────────────────────────────────────────────


def make_user(username, role="user", password=TEST_PASSWORD, is_active=1):
    user = User(
        username=username,
        password_hash=hash_password(password),
        email=f"{username}@example.com",
        nom=username.capitalize(),
        prenom="Test",
        role=role,
        is_active=is_active,
    )
    _db.session.add(user)
    _db.session.commit()
    return user


def bearer(user):
    token = generate_access_token(user.id, user.username, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def headers_for():
    return bearer


@pytest.fixture()
def admin():
    return make_user("alice", role="admin")


@pytest.fixture()
def manager():
    return make_user("marc", role="manager")


@pytest.fixture()
def regular_user():
    return make_user("ursula", role="user")


@pytest.fixture()
def telepro():
    return make_user("theo", role="teleprospecteur")


@pytest.fixture()
def other_telepro():
    return make_user("tina", role="teleprospecteur")


@pytest.fixture()
def admin_headers(admin):
    return bearer(admin)


# ── API helpers ──────────────────────────────────────────────────────────


def create_client(client, headers, **kw):
    payload = {"nom": "Durand", "prenom": "Claire", "entreprise": "Acme"}
    payload.update(kw)
    res = client.post("/api/clients", json=payload, headers=headers)
    assert res.status_code == 201, res.get_json()
    return res.get_json()["id"]


def create_rdv(client, headers, client_id, **kw):
    payload = {"client_id": client_id, "titre": "Démo", "date_heure": "2024-01-03T10:00"}
    payload.update(kw)
    res = client.post("/api/rendez-vous", json=payload, headers=headers)
    assert res.status_code == 201, res.get_json()
    return res.get_json()["id"]
