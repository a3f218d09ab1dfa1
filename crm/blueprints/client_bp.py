"""
Clients Blueprint.

Routes for client records. Visibility by role is enforced in
client_service; a client the caller may not see answers 404.

Endpoints:
  GET/POST        /api/clients
  GET/PUT/DELETE  /api/clients/<id>
"""

import logging

from flask import Blueprint, jsonify

from crm.auth import current_user
from crm.blueprints import json_body
from crm.services import client_service

logger = logging.getLogger(__name__)

client_bp = Blueprint("clients", __name__, url_prefix="/api/clients")


@client_bp.route("", methods=["GET"])
def list_clients():
    """Visible clients, newest first, each with created_by_username."""
    return jsonify(client_service.list_clients(current_user())), 200


@client_bp.route("/<client_id>", methods=["GET"])
def get_client(client_id):
    return jsonify(client_service.get_client(current_user(), client_id)), 200


@client_bp.route("", methods=["POST"])
def create_client():
    """Create a client owned by the caller.

    Body: { "nom": str, "entreprise"?, "date_rdv"?, "type_rdv"?, "statut_rdv"?, ... }
    A non-empty date_rdv also creates the linked appointment.
    Returns: { "success": true, "id": str } (201).
    """
    client = client_service.create_client(current_user(), json_body())
    return jsonify({"success": True, "id": client.id}), 201


@client_bp.route("/<client_id>", methods=["PUT"])
def update_client(client_id):
    client_service.update_client(current_user(), client_id, json_body())
    return jsonify({"success": True}), 200


@client_bp.route("/<client_id>", methods=["DELETE"])
def delete_client(client_id):
    client_service.delete_client(current_user(), client_id)
    return jsonify({"success": True}), 200
