"""
🚨 Alarm Routes Blueprint
Alarm views plus alarm and group management endpoints.
"""

import logging

from flask import Blueprint, request

from ..utils.logger import log_structured
from .helpers import api_error, api_error_handler, get_service, result_response

alarms_bp = Blueprint("alarms", __name__)
logger = logging.getLogger(__name__)


def _json_body():
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else None


@alarms_bp.route("/api/alarms/page")
@api_error_handler
def alarms_page():
    """Grouped alarm view ordered by group index."""
    return result_response(get_service("alarm").get_page_view())


@alarms_bp.route("/api/alarms/sidebar")
@api_error_handler
def alarms_sidebar():
    """Flat alarm view over ungrouped alarms and enabled groups."""
    return result_response(get_service("alarm").get_sidebar_view())


@alarms_bp.route("/api/alarms/<key>")
@api_error_handler
def alarm_display(key: str):
    return result_response(get_service("alarm").get_alarm_display(key))


@alarms_bp.route("/api/alarms", methods=["POST"])
@api_error_handler
def add_alarm():
    payload = _json_body()
    if payload is None:
        return api_error("Expected a JSON object", status=400, error_code="invalid_json")

    alarm_service = get_service("alarm")
    if isinstance(payload.get("alarms"), list):
        result = alarm_service.add_alarms_and_group(payload["alarms"], payload.get("group_name") or "")
    else:
        result = alarm_service.add_alarm(payload)

    if not result.success:
        log_structured(logger, logging.WARNING, "Alarm rejected",
                       error_code=result.error_code, validation_message=result.message, endpoint="/api/alarms")
    return result_response(result, success_status=201)


@alarms_bp.route("/api/alarms/<key>", methods=["PUT"])
@api_error_handler
def update_alarm(key: str):
    payload = _json_body()
    if payload is None:
        return api_error("Expected a JSON object", status=400, error_code="invalid_json")
    return result_response(get_service("alarm").update_alarm(key, payload))


@alarms_bp.route("/api/alarms/<key>", methods=["DELETE"])
@api_error_handler
def remove_alarm(key: str):
    return result_response(get_service("alarm").remove_alarm(key))


@alarms_bp.route("/api/alarms/<key>/group", methods=["PUT"])
@api_error_handler
def assign_group(key: str):
    payload = _json_body() or {}
    return result_response(get_service("alarm").assign_group(key, payload.get("group_id")))


@alarms_bp.route("/api/groups", methods=["POST"])
@api_error_handler
def create_group():
    payload = _json_body()
    if payload is None:
        return api_error("Expected a JSON object", status=400, error_code="invalid_json")
    return result_response(get_service("alarm").create_group(payload), success_status=201)


@alarms_bp.route("/api/groups/<key>", methods=["PUT"])
@api_error_handler
def update_group(key: str):
    payload = _json_body()
    if payload is None:
        return api_error("Expected a JSON object", status=400, error_code="invalid_json")
    return result_response(get_service("alarm").update_group(key, payload))


@alarms_bp.route("/api/groups/<key>", methods=["DELETE"])
@api_error_handler
def delete_group(key: str):
    return result_response(get_service("alarm").delete_group(key))
