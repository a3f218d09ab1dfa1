"""
Auth Blueprint — login and token checks.

  POST /api/auth/login    — username + password → bearer token
  GET  /api/auth/verify   — token still valid?
  GET  /api/auth/me       — current user profile
"""

from flask import Blueprint, jsonify

from crm.auth import current_user
from crm.blueprints import json_body
from crm.services.jwt_service import issue_token
from crm.services.user_service import authenticate_user
from crm.utils.errors import E, api_error
from crm.utils.helpers import clean_text

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Authenticate with username + password.

    Body: { "username": "...", "password": "..." }
    Returns: { "success": true, "token": "...", "token_type", "expires_in", "user": {...} }
    """
    data = json_body()
    username = clean_text("username", data.get("username")) or ""
    password = data.get("password")
    if not username or not isinstance(password, str) or not password:
        return api_error(E.VALIDATION_REQUIRED, "Username and password are required", status=400)

    user = authenticate_user(username, password)
    return jsonify({
        "success": True,
        **issue_token(user),
        "user": user.to_dict(include_status=False),
    }), 200


@auth_bp.route("/verify", methods=["GET"])
def verify():
    return jsonify({"valid": True, "user": current_user().to_dict(include_status=False)}), 200


@auth_bp.route("/me", methods=["GET"])
def me():
    return jsonify(current_user().to_dict()), 200
