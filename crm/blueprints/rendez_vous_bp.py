"""
Appointments Blueprint (rendez-vous).

Endpoints:
  GET    /api/rendez-vous?filter=today|week|month
  GET    /api/rendez-vous/calendar?date=YYYY-MM-DD
  POST   /api/rendez-vous
  PUT    /api/rendez-vous/<id>      — owner, admin or manager only
  DELETE /api/rendez-vous/<id>      — owner, admin or manager only
"""

from flask import Blueprint, jsonify, request

from crm.auth import current_user
from crm.blueprints import json_body
from crm.services import appointment_service

rendez_vous_bp = Blueprint("rendez_vous", __name__, url_prefix="/api/rendez-vous")


@rendez_vous_bp.route("", methods=["GET"])
def list_rendez_vous():
    """All appointments ordered by date, flagged with is_mine.

    Query params: filter? (today | week | month; anything else is ignored)
    """
    rows = appointment_service.list_appointments(current_user(), request.args.get("filter"))
    return jsonify(rows), 200


@rendez_vous_bp.route("/calendar", methods=["GET"])
def calendar():
    """Monday-based week containing ?date= (default today), one bucket per day."""
    week = appointment_service.week_calendar(current_user(), request.args.get("date"))
    return jsonify(week), 200


@rendez_vous_bp.route("", methods=["POST"])
def create_rendez_vous():
    """Body: { "client_id", "titre", "date_heure", "duree"?, "lieu"?, "type"?, "statut"? }"""
    rdv = appointment_service.create_appointment(current_user(), json_body())
    return jsonify({"success": True, "id": rdv.id}), 201


@rendez_vous_bp.route("/<rdv_id>", methods=["PUT"])
def update_rendez_vous(rdv_id):
    appointment_service.update_appointment(current_user(), rdv_id, json_body())
    return jsonify({"success": True}), 200


@rendez_vous_bp.route("/<rdv_id>", methods=["DELETE"])
def delete_rendez_vous(rdv_id):
    appointment_service.delete_appointment(current_user(), rdv_id)
    return jsonify({"success": True}), 200
