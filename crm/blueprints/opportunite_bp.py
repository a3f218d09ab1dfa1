"""
Opportunities Blueprint — sales pipeline.

Endpoints:
  GET/POST        /api/opportunites          (?client_id=, ?etape=)
  GET/PUT/DELETE  /api/opportunites/<id>
"""

from flask import Blueprint, jsonify, request

from crm.auth import current_user
from crm.blueprints import json_body
from crm.services import opportunity_service

opportunite_bp = Blueprint("opportunites", __name__, url_prefix="/api/opportunites")


@opportunite_bp.route("", methods=["GET"])
def list_opportunites():
    items = opportunity_service.list_opportunities(
        current_user(),
        client_id=request.args.get("client_id"),
        etape=request.args.get("etape"),
    )
    return jsonify(items), 200


@opportunite_bp.route("/<opp_id>", methods=["GET"])
def get_opportunite(opp_id):
    return jsonify(opportunity_service.get_opportunity(current_user(), opp_id).to_dict()), 200


@opportunite_bp.route("", methods=["POST"])
def create_opportunite():
    """Body: { "client_id", "titre", "montant"?, "etape"?, "probabilite"?, "date_cloture_estimee"? }"""
    opp = opportunity_service.create_opportunity(current_user(), json_body())
    return jsonify({"success": True, "id": opp.id}), 201


@opportunite_bp.route("/<opp_id>", methods=["PUT"])
def update_opportunite(opp_id):
    opp = opportunity_service.update_opportunity(current_user(), opp_id, json_body())
    return jsonify({"success": True, "opportunite": opp.to_dict()}), 200


@opportunite_bp.route("/<opp_id>", methods=["DELETE"])
def delete_opportunite(opp_id):
    opportunity_service.delete_opportunity(current_user(), opp_id)
    return jsonify({"success": True}), 200
