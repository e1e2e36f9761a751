"""
🚨 Error Handlers
Centralized HTTP error handling; every response is JSON.
"""

from __future__ import annotations

import logging

from flask import Flask, request

from .helpers import api_error

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Register shared error handlers on the Flask app."""

    @app.errorhandler(404)
    def not_found_error(_error):  # type: ignore[unused-argument]
        return api_error(
            f"No route for {request.path}",
            status=404,
            error_code="not_found",
        )

    @app.errorhandler(405)
    def method_not_allowed(_error):  # type: ignore[unused-argument]
        return api_error(
            f"{request.method} not allowed on {request.path}",
            status=405,
            error_code="method_not_allowed",
        )

    @app.errorhandler(500)
    def internal_error(_error):  # type: ignore[unused-argument]
        logger.error("Internal server error on %s", request.path)
        return api_error(
            "Internal server error",
            status=500,
            error_code="internal_error",
        )
