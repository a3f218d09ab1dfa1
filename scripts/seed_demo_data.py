#!/usr/bin/env python3
"""
CRM Platform — Demo Data Seed Script.

Creates a manager, two teleprospecteurs and a handful of clients with
appointments, opportunities, interactions and contacts. Goes through the
service layer so every business rule (appointment mirroring, principal
contact, closing dates) applies.

Usage:
    python scripts/seed_demo_data.py
    python scripts/seed_demo_data.py --password 'Demo-pass-2024'
"""

import argparse
from datetime import date, datetime, time, timedelta

from crm import create_app
from crm.models import db
from crm.models.auth import User
from crm.services import (
    client_service,
    contact_service,
    interaction_service,
    opportunity_service,
    user_service,
)

DEMO_USERS = (
    ("sophie", "manager", "Lefèvre", "Sophie"),
    ("karim", "teleprospecteur", "Benali", "Karim"),
    ("lea", "teleprospecteur", "Moreau", "Léa"),
)

DEMO_CLIENTS = (
    # owner, nom, entreprise, ville, day offset, hour, statut_rdv
    ("karim", "Garnier", "Boulangeries Garnier", "Lyon", 0, 10, "confirme"),
    ("karim", "Petit", "Transports Petit", "Villeurbanne", 2, 14, "planifie"),
    ("lea", "Fontaine", "Cabinet Fontaine", "Nantes", 1, 9, "en_attente_documents"),
    ("lea", "Mercier", None, "Rennes", None, None, None),
    ("sophie", "Robin", "Robin Industrie", "Grenoble", 7, 11, "planifie"),
)


def _ensure_user(username, role, nom, prenom, password):
    user = User.query.filter_by(username=username).first()
    if user is None:
        user = user_service.create_user({
            "username": username, "password": password, "role": role, "nom": nom, "prenom": prenom,
        })
        print(f"  + user {username} ({role})")
    return user


def seed(password):
    users = {u[0]: _ensure_user(*u, password) for u in DEMO_USERS}
    monday = date.today() - timedelta(days=date.today().weekday())

    for owner, nom, entreprise, ville, offset, hour, statut in DEMO_CLIENTS:
        payload = {"nom": nom, "entreprise": entreprise, "ville": ville, "type_rdv": "presentiel"}
        if offset is not None:
            when = datetime.combine(monday + timedelta(days=offset), time(hour, 0))
            payload.update(date_rdv=when.isoformat(), statut_rdv=statut, notes_rdv="Présentation de l'offre")
        client = client_service.create_client(users[owner], payload)

        contact_service.create_contact(users[owner], {
            "client_id": client.id, "nom": nom, "prenom": "Direction", "poste": "Gérant", "est_principal": 1,
        })
        interaction_service.create_interaction(users[owner], {
            "client_id": client.id, "type": "appel", "contenu": "Premier contact téléphonique",
        })
        opportunity_service.create_opportunity(users[owner], {
            "client_id": client.id, "titre": f"Équipement {entreprise or nom}",
            "montant": 1500 + 500 * len(nom), "etape": "qualification", "probabilite": 40,
        })
        print(f"  + client {entreprise or nom} (owner: {owner})")


def main():
    parser = argparse.ArgumentParser(description="Seed demo data")
    parser.add_argument("--password", default="Demo-pass-2024", help="Password for the demo users")
    args = parser.parse_args()

    app = create_app()
    print(f"DB: {app.config['SQLALCHEMY_DATABASE_URI']}\n")
    with app.app_context():
        seed(args.password)
        db.session.commit()
    print("\nDemo data ready.")


if __name__ == "__main__":
    main()
