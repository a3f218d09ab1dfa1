"""
Users Blueprint — account administration.

  GET    /api/users               — list (any authenticated user)
  POST   /api/users               — create (admin)
  PATCH  /api/users/<id>/toggle   — flip is_active (admin)
  DELETE /api/users/<id>          — delete (admin)
"""

from flask import Blueprint, jsonify

from crm.auth import current_user, require_role
from crm.blueprints import json_body
from crm.services import user_service

user_bp = Blueprint("users", __name__, url_prefix="/api/users")


@user_bp.route("", methods=["GET"])
def list_users():
    return jsonify(user_service.list_users()), 200


@user_bp.route("", methods=["POST"])
@require_role("admin")
def create_user():
    """Body: { "username", "password", "email"?, "nom"?, "prenom"?, "role"? }"""
    user = user_service.create_user(json_body())
    return jsonify({"success": True, "id": user.id}), 201


@user_bp.route("/<user_id>/toggle", methods=["PATCH"])
@require_role("admin")
def toggle_user(user_id):
    is_active = user_service.toggle_user_active(user_id, current_user())
    return jsonify({"success": True, "is_active": is_active}), 200


@user_bp.route("/<user_id>", methods=["DELETE"])
@require_role("admin")
def delete_user(user_id):
    user_service.delete_user(user_id, current_user())
    return jsonify({"success": True}), 200
