"""
Stats Blueprint — dashboard counters.

  GET /api/stats
"""

from flask import Blueprint, jsonify

from crm.auth import current_user
from crm.services import stats_service

stats_bp = Blueprint("stats", __name__, url_prefix="/api/stats")


@stats_bp.route("", methods=["GET"])
def get_stats():
    return jsonify(stats_service.get_dashboard_stats(current_user())), 200
