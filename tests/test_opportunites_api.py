"""
Opportunities API tests — pipeline CRUD, validation, closing date, visibility.
"""

from datetime import date

import pytest

from conftest import bearer, create_client


@pytest.fixture()
def headers(regular_user):
    return bearer(regular_user)


@pytest.fixture()
def client_id(client, headers):
    return create_client(client, headers)


def _create(client, headers, client_id, **kw):
    payload = {"client_id": client_id, "titre": "Licences 2025"}
    payload.update(kw)
    res = client.post("/api/opportunites", json=payload, headers=headers)
    assert res.status_code == 201, res.get_json()
    return res.get_json()["id"]


class TestOpportunityCrud:
    def test_defaults(self, client, headers, client_id):
        opp_id = _create(client, headers, client_id)
        data = client.get(f"/api/opportunites/{opp_id}", headers=headers).get_json()
        assert data["montant"] == 0
        assert data["etape"] == "prospection"
        assert data["probabilite"] == 50
        assert data["date_cloture_reelle"] is None
        assert data["entreprise"] == "Acme"

    def test_filters(self, client, headers, client_id):
        other = create_client(client, headers, nom="Autre")
        a = _create(client, headers, client_id, etape="qualification")
        _create(client, headers, other, etape="qualification")
        _create(client, headers, client_id, etape="proposition")

        rows = client.get(f"/api/opportunites?client_id={client_id}&etape=qualification", headers=headers)
        assert [o["id"] for o in rows.get_json()] == [a]

    @pytest.mark.parametrize("payload", [
        {"montant": -5},
        {"montant": "beaucoup"},
        {"montant": "nan"},
        {"montant": "inf"},
        {"montant": "-Infinity"},
        {"probabilite": "1e999"},
        {"titre": {"fr": "x"}},
        {"probabilite": 101},
        {"probabilite": -1},
        {"etape": "signature"},
        {"date_cloture_estimee": "bientôt"},
    ])
    def test_validation(self, client, headers, client_id, payload):
        res = client.post(
            "/api/opportunites", json={"client_id": client_id, "titre": "x", **payload}, headers=headers
        )
        assert res.status_code == 422

    def test_titre_required(self, client, headers, client_id):
        res = client.post("/api/opportunites", json={"client_id": client_id}, headers=headers)
        assert res.status_code == 422

    def test_non_finite_amount_leaves_no_row(self, client, headers, client_id):
        res = client.post(
            "/api/opportunites", json={"client_id": client_id, "titre": "x", "montant": "nan"}, headers=headers
        )
        assert res.status_code == 422
        assert res.get_json()["details"] == {"montant": "nan"}
        assert client.get("/api/opportunites", headers=headers).get_json() == []

    def test_update_and_delete(self, client, headers, client_id):
        opp_id = _create(client, headers, client_id, montant=1000)
        res = client.put(f"/api/opportunites/{opp_id}", json={"montant": 2500.5, "probabilite": 80},
                         headers=headers)
        assert res.status_code == 200
        data = res.get_json()["opportunite"]
        assert data["montant"] == 2500.5
        assert data["probabilite"] == 80

        assert client.delete(f"/api/opportunites/{opp_id}", headers=headers).status_code == 200
        assert client.get(f"/api/opportunites/{opp_id}", headers=headers).status_code == 404


class TestClosingDate:
    @pytest.mark.parametrize("etape", ["gagne", "perdu"])
    def test_closing_sets_today(self, client, headers, client_id, etape):
        opp_id = _create(client, headers, client_id)
        data = client.put(f"/api/opportunites/{opp_id}", json={"etape": etape}, headers=headers).get_json()
        assert data["opportunite"]["date_cloture_reelle"] == date.today().isoformat()

    def test_supplied_closing_date_kept(self, client, headers, client_id):
        opp_id = _create(client, headers, client_id)
        data = client.put(
            f"/api/opportunites/{opp_id}",
            json={"etape": "gagne", "date_cloture_reelle": "2024-03-15"},
            headers=headers,
        ).get_json()
        assert data["opportunite"]["date_cloture_reelle"] == "2024-03-15"

    def test_open_stage_leaves_date_empty(self, client, headers, client_id):
        opp_id = _create(client, headers, client_id)
        data = client.put(f"/api/opportunites/{opp_id}", json={"etape": "negotiation"}, headers=headers).get_json()
        assert data["opportunite"]["date_cloture_reelle"] is None


class TestOpportunityVisibility:
    def test_telepro_sees_only_own_clients(self, client, telepro, headers, client_id):
        _create(client, headers, client_id)
        own = create_client(client, bearer(telepro))
        mine = _create(client, bearer(telepro), own)

        rows = client.get("/api/opportunites", headers=bearer(telepro)).get_json()
        assert [o["id"] for o in rows] == [mine]

    def test_telepro_404_on_hidden(self, client, telepro, headers, client_id):
        opp_id = _create(client, headers, client_id)
        tp = bearer(telepro)
        assert client.get(f"/api/opportunites/{opp_id}", headers=tp).status_code == 404
        assert client.put(f"/api/opportunites/{opp_id}", json={"montant": 1}, headers=tp).status_code == 404
        assert client.delete(f"/api/opportunites/{opp_id}", headers=tp).status_code == 404
        res = client.post("/api/opportunites", json={"client_id": client_id, "titre": "x"}, headers=tp)
        assert res.status_code == 404
