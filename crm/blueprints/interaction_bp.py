"""
Interactions Blueprint — append-only activity log.

Endpoints:
  GET/POST  /api/interactions          (?client_id=)
  DELETE    /api/interactions/<id>
"""

from flask import Blueprint, jsonify, request

from crm.auth import current_user
from crm.blueprints import json_body
from crm.services import interaction_service

interaction_bp = Blueprint("interactions", __name__, url_prefix="/api/interactions")


@interaction_bp.route("", methods=["GET"])
def list_interactions():
    items = interaction_service.list_interactions(current_user(), request.args.get("client_id"))
    return jsonify(items), 200


@interaction_bp.route("", methods=["POST"])
def create_interaction():
    """Body: { "client_id", "contenu", "type"?, "date_interaction"? }"""
    interaction = interaction_service.create_interaction(current_user(), json_body())
    return jsonify({"success": True, "id": interaction.id}), 201


@interaction_bp.route("/<interaction_id>", methods=["DELETE"])
def delete_interaction(interaction_id):
    interaction_service.delete_interaction(current_user(), interaction_id)
    return jsonify({"success": True}), 200
