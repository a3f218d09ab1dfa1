"""
Contacts API tests — CRUD and the single-principal rule.
"""

import pytest

from conftest import bearer, create_client
from crm.models import db
from crm.models.client import Contact


@pytest.fixture()
def headers(regular_user):
    return bearer(regular_user)


@pytest.fixture()
def client_id(client, headers):
    return create_client(client, headers)


def _create(client, headers, client_id, **kw):
    payload = {"client_id": client_id, "nom": "Roux", "prenom": "Paul"}
    payload.update(kw)
    res = client.post("/api/contacts", json=payload, headers=headers)
    assert res.status_code == 201, res.get_json()
    return res.get_json()["id"]


def _principals(client_id):
    db.session.expire_all()
    return [c.id for c in Contact.query.filter_by(client_id=client_id, est_principal=1)]


def test_create_and_get(client, headers, client_id):
    contact_id = _create(client, headers, client_id, poste="DSI", email="paul@acme.fr")
    data = client.get(f"/api/contacts/{contact_id}", headers=headers).get_json()
    assert data["poste"] == "DSI"
    assert data["est_principal"] == 0
    assert data["entreprise"] == "Acme"


def test_required_fields(client, headers, client_id):
    res = client.post("/api/contacts", json={"client_id": client_id, "nom": "Roux"}, headers=headers)
    assert res.status_code == 422
    assert "prenom" in res.get_json()["details"]


def test_numeric_name_stored_as_text(client, headers, client_id):
    contact_id = _create(client, headers, client_id, nom=42, telephone=612345678)
    data = client.get(f"/api/contacts/{contact_id}", headers=headers).get_json()
    assert data["nom"] == "42"
    assert data["telephone"] == "612345678"


def test_object_field_rejected(client, headers, client_id):
    res = client.post(
        "/api/contacts",
        json={"client_id": client_id, "nom": "Roux", "prenom": "Paul", "poste": {"titre": "DSI"}},
        headers=headers,
    )
    assert res.status_code == 422
    assert Contact.query.count() == 0


def test_single_principal_on_create(client, headers, client_id):
    first = _create(client, headers, client_id, est_principal=1)
    second = _create(client, headers, client_id, nom="Blanc", est_principal=True)
    assert _principals(client_id) == [second]
    assert first != second


def test_single_principal_on_update(client, headers, client_id):
    first = _create(client, headers, client_id, est_principal=1)
    second = _create(client, headers, client_id, nom="Blanc")
    res = client.put(f"/api/contacts/{second}", json={"est_principal": 1}, headers=headers)
    assert res.status_code == 200
    assert _principals(client_id) == [second]
    assert first not in _principals(client_id)


def test_principal_scoped_per_client(client, headers, client_id):
    other_client = create_client(client, headers, nom="Autre")
    a = _create(client, headers, client_id, est_principal=1)
    b = _create(client, headers, other_client, est_principal=1)
    assert _principals(client_id) == [a]
    assert _principals(other_client) == [b]


def test_list_filter_and_order(client, headers, client_id):
    other_client = create_client(client, headers, nom="Autre")
    _create(client, headers, client_id, nom="Zola")
    principal = _create(client, headers, client_id, nom="Martin", est_principal=1)
    _create(client, headers, other_client)

    rows = client.get(f"/api/contacts?client_id={client_id}", headers=headers).get_json()
    assert len(rows) == 2
    assert rows[0]["id"] == principal


def test_update_and_delete(client, headers, client_id):
    contact_id = _create(client, headers, client_id)
    assert client.put(f"/api/contacts/{contact_id}", json={"telephone": "0600000000"},
                      headers=headers).status_code == 200
    assert client.get(f"/api/contacts/{contact_id}", headers=headers).get_json()["telephone"] == "0600000000"
    assert client.delete(f"/api/contacts/{contact_id}", headers=headers).status_code == 200
    assert client.get(f"/api/contacts/{contact_id}", headers=headers).status_code == 404


def test_telepro_cannot_reach_hidden_contacts(client, telepro, headers, client_id):
    contact_id = _create(client, headers, client_id)
    tp = bearer(telepro)
    assert client.get("/api/contacts", headers=tp).get_json() == []
    assert client.get(f"/api/contacts/{contact_id}", headers=tp).status_code == 404
