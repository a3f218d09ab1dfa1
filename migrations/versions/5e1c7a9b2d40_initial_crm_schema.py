"""initial_crm_schema

Create users, clients, rendez_vous, opportunites, interactions and contacts.

Tables that already exist (databases bootstrapped by db.create_all()) are
left untouched.

Revision ID: 5e1c7a9b2d40
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = "5e1c7a9b2d40"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    existing_tables = set(sa_inspect(bind).get_table_names())

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("username", sa.String(length=100), nullable=False),
            sa.Column("password_hash", sa.String(length=256), nullable=False),
            sa.Column("email", sa.String(length=200), nullable=True),
            sa.Column("nom", sa.String(length=100), nullable=True),
            sa.Column("prenom", sa.String(length=100), nullable=True),
            sa.Column("role", sa.String(length=20), nullable=False, server_default="user"),
            sa.Column("is_active", sa.Integer(), nullable=False, server_default="1"),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.CheckConstraint(
                "role IN ('admin', 'manager', 'user', 'teleprospecteur')", name="ck_users_role"
            ),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("username"),
        )

    if "clients" not in existing_tables:
        op.create_table(
            "clients",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("nom", sa.String(length=200), nullable=False),
            sa.Column("prenom", sa.String(length=200), nullable=True),
            sa.Column("email", sa.String(length=255), nullable=True),
            sa.Column("telephone", sa.String(length=50), nullable=True),
            sa.Column("entreprise", sa.String(length=200), nullable=True),
            sa.Column("poste", sa.String(length=200), nullable=True),
            sa.Column("adresse", sa.String(length=500), nullable=True),
            sa.Column("ville", sa.String(length=200), nullable=True),
            sa.Column("code_postal", sa.String(length=20), nullable=True),
            sa.Column("pays", sa.String(length=100), nullable=True, server_default="France"),
            sa.Column("prenom_contact", sa.String(length=200), nullable=True),
            sa.Column("nom_contact", sa.String(length=200), nullable=True),
            sa.Column("telephone_contact", sa.String(length=50), nullable=True),
            sa.Column("email_contact", sa.String(length=255), nullable=True),
            sa.Column("date_rdv", sa.DateTime(), nullable=True),
            sa.Column("type_rdv", sa.String(length=20), nullable=True),
            sa.Column("statut_rdv", sa.String(length=30), nullable=True, server_default="en_attente"),
            sa.Column("notes_rdv", sa.Text(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("user_id", sa.String(length=36), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_clients_user_id", "clients", ["user_id"])
        op.create_index("ix_clients_created_at", "clients", ["created_at"])

    if "rendez_vous" not in existing_tables:
        op.create_table(
            "rendez_vous",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("client_id", sa.String(length=36), nullable=False),
            sa.Column("titre", sa.String(length=300), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("date_heure", sa.DateTime(), nullable=False),
            sa.Column("duree", sa.Integer(), nullable=True, server_default="60"),
            sa.Column("lieu", sa.String(length=300), nullable=True),
            sa.Column("type", sa.String(length=20), nullable=True, server_default="reunion"),
            sa.Column("statut", sa.String(length=30), nullable=True, server_default="planifie"),
            sa.Column("user_id", sa.String(length=36), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_rendez_vous_client_id", "rendez_vous", ["client_id"])
        op.create_index("ix_rendez_vous_date_heure", "rendez_vous", ["date_heure"])
        op.create_index("ix_rendez_vous_statut", "rendez_vous", ["statut"])
        op.create_index("ix_rendez_vous_user_id", "rendez_vous", ["user_id"])

    if "opportunites" not in existing_tables:
        op.create_table(
            "opportunites",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("client_id", sa.String(length=36), nullable=False),
            sa.Column("titre", sa.String(length=300), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("montant", sa.Float(), nullable=False, server_default="0"),
            sa.Column("etape", sa.String(length=20), nullable=False, server_default="prospection"),
            sa.Column("probabilite", sa.Integer(), nullable=False, server_default="50"),
            sa.Column("date_cloture_estimee", sa.Date(), nullable=True),
            sa.Column("date_cloture_reelle", sa.Date(), nullable=True),
            sa.Column("user_id", sa.String(length=36), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_opportunites_client_id", "opportunites", ["client_id"])
        op.create_index("ix_opportunites_etape", "opportunites", ["etape"])

    if "interactions" not in existing_tables:
        op.create_table(
            "interactions",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("client_id", sa.String(length=36), nullable=False),
            sa.Column("type", sa.String(length=20), nullable=False, server_default="note"),
            sa.Column("contenu", sa.Text(), nullable=False),
            sa.Column("date_interaction", sa.DateTime(), nullable=False),
            sa.Column("user_id", sa.String(length=36), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_interactions_client_id", "interactions", ["client_id"])
        op.create_index("ix_interactions_date_interaction", "interactions", ["date_interaction"])

    if "contacts" not in existing_tables:
        op.create_table(
            "contacts",
            sa.Column("id", sa.String(length=36), nullable=False),
            sa.Column("client_id", sa.String(length=36), nullable=False),
            sa.Column("nom", sa.String(length=200), nullable=False),
            sa.Column("prenom", sa.String(length=200), nullable=False),
            sa.Column("email", sa.String(length=255), nullable=True),
            sa.Column("telephone", sa.String(length=50), nullable=True),
            sa.Column("poste", sa.String(length=200), nullable=True),
            sa.Column("est_principal", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_contacts_client_id", "contacts", ["client_id"])


def downgrade():
    for table in ("contacts", "interactions", "opportunites", "rendez_vous", "clients", "users"):
        op.drop_table(table)
