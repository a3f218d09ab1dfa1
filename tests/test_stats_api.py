"""
Dashboard stats tests.
"""

from datetime import date, datetime, time, timedelta

from conftest import bearer, create_client, create_rdv


def test_empty_stats(client, regular_user):
    data = client.get("/api/stats", headers=bearer(regular_user)).get_json()
    assert data == {
        "total_clients": 0,
        "total_rdv": 0,
        "rdv_aujourdhui": 0,
        "rdv_confirmes": 0,
        "opportunites_ouvertes": 0,
        "montant_pipeline": 0.0,
    }


def test_counts(client, regular_user):
    headers = bearer(regular_user)
    client_id = create_client(client, headers)
    noon = datetime.combine(date.today(), time(12, 0))
    create_rdv(client, headers, client_id, date_heure=noon.isoformat(), statut="confirme")
    create_rdv(client, headers, client_id, date_heure=noon.isoformat(), statut="annule")
    create_rdv(client, headers, client_id, date_heure=(noon + timedelta(days=2)).isoformat())

    for etape, montant in (("prospection", 1000), ("negotiation", 500.5), ("gagne", 9999)):
        client.post("/api/opportunites",
                    json={"client_id": client_id, "titre": etape, "etape": etape, "montant": montant},
                    headers=headers)

    data = client.get("/api/stats", headers=headers).get_json()
    assert data["total_clients"] == 1
    assert data["total_rdv"] == 2
    assert data["rdv_aujourdhui"] == 1
    assert data["rdv_confirmes"] == 1
    assert data["opportunites_ouvertes"] == 2
    assert data["montant_pipeline"] == 1500.5


def test_client_count_respects_visibility(client, telepro, other_telepro, admin):
    create_client(client, bearer(telepro))
    create_client(client, bearer(other_telepro))
    assert client.get("/api/stats", headers=bearer(telepro)).get_json()["total_clients"] == 1
    assert client.get("/api/stats", headers=bearer(admin)).get_json()["total_clients"] == 2
