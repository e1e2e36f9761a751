"""
🩺 Health & Status Routes Blueprint
Handles liveness and service health endpoints.
"""

from flask import Blueprint, jsonify

from ..version import VERSION, get_full_version
from .helpers import api_error_handler, api_response, get_service_manager

health_bp = Blueprint("health", __name__)


@health_bp.route("/healthz")
def healthz():
    """Basic health check endpoint."""
    return jsonify({"ok": True, "version": str(VERSION)})


@health_bp.route("/api/health")
@api_error_handler
def api_health():
    """Aggregate health of all registered services."""
    result = get_service_manager().health_check_all()
    data = result.data or {}
    healthy = bool(data.get("overall_healthy"))
    return api_response(
        True,
        data={**data, "version": get_full_version()},
        message=result.message or "",
        status=200 if healthy else 503,
    )
