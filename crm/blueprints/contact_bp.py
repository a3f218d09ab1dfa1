"""
Contacts Blueprint.

Endpoints:
  GET/POST        /api/contacts          (?client_id=)
  GET/PUT/DELETE  /api/contacts/<id>
"""

from flask import Blueprint, jsonify, request

from crm.auth import current_user
from crm.blueprints import json_body
from crm.services import contact_service

contact_bp = Blueprint("contacts", __name__, url_prefix="/api/contacts")


@contact_bp.route("", methods=["GET"])
def list_contacts():
    items = contact_service.list_contacts(current_user(), request.args.get("client_id"))
    return jsonify(items), 200


@contact_bp.route("/<contact_id>", methods=["GET"])
def get_contact(contact_id):
    return jsonify(contact_service.get_contact(current_user(), contact_id).to_dict()), 200


@contact_bp.route("", methods=["POST"])
def create_contact():
    """Body: { "client_id", "nom", "prenom", "email"?, "telephone"?, "poste"?, "est_principal"? }"""
    contact = contact_service.create_contact(current_user(), json_body())
    return jsonify({"success": True, "id": contact.id}), 201


@contact_bp.route("/<contact_id>", methods=["PUT"])
def update_contact(contact_id):
    contact_service.update_contact(current_user(), contact_id, json_body())
    return jsonify({"success": True}), 200


@contact_bp.route("/<contact_id>", methods=["DELETE"])
def delete_contact(contact_id):
    contact_service.delete_contact(current_user(), contact_id)
    return jsonify({"success": True}), 200
