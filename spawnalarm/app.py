"""
SpawnAlarm Main Application
Flask app factory wiring the alarm services to the JSON blueprints
"""

import logging
import os
import time
from typing import Any, Dict, Optional

from flask import Flask, Response, g, request
from flask_compress import Compress

from .config import load_config
from .core.game_time import Clock
from .core.store import AlarmStore
from .core.weather import WeatherTimeline
from .routes import alarms_bp, health_bp
from .routes.errors import register_error_handlers
from .routes.helpers import EXTENSION_KEY
from .services.service_manager import ServiceManager
from .utils.logger import apply_log_level, setup_logging
from .version import get_app_info

logger = logging.getLogger("spawnalarm.app")


def _configure_compression(app: Flask) -> None:
    app.config.setdefault('COMPRESS_REGISTER', True)
    app.config.setdefault('COMPRESS_ALGORITHM', os.getenv('SPAWNALARM_COMPRESS_ALGO', 'gzip'))
    app.config.setdefault('COMPRESS_MIMETYPES', ['application/json'])
    try:
        app.config['COMPRESS_MIN_SIZE'] = max(256, int(os.getenv('SPAWNALARM_COMPRESS_MIN_BYTES', '1024')))
    except ValueError:
        app.config['COMPRESS_MIN_SIZE'] = 1024
    Compress().init_app(app)


def _register_request_timing(app: Flask) -> None:
    @app.before_request
    def _timing_before_request():
        g.request_started = time.perf_counter()

    @app.after_request
    def _timing_after_request(response: Response):
        start = getattr(g, 'request_started', None)
        if start is not None:
            duration_ms = (time.perf_counter() - start) * 1000
            response.headers['X-Response-Time-Ms'] = f"{duration_ms:.2f}"
            logger.debug("%s %s -> %s in %.2fms", request.method, request.path, response.status_code, duration_ms)
        return response


def create_app(
    service_manager: Optional[ServiceManager] = None,
    *,
    store: Optional[AlarmStore] = None,
    timeline: Optional[WeatherTimeline] = None,
    clock: Optional[Clock] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Flask:
    """Return a freshly constructed Flask application.

    Either pass a ready ``service_manager`` or let one be built from the
    given store, timeline, clock and config. The background refresher is
    not started here; callers serving traffic call
    ``service_manager.start_background()``.
    """
    setup_logging()

    if service_manager is None:
        service_manager = ServiceManager(
            store=store,
            clock=clock,
            timeline=timeline,
            config=config if config is not None else load_config(),
        )

    apply_log_level(service_manager.config.get("log_level"))

    app = Flask(__name__)
    app.config['SPAWNALARM'] = {k: v for k, v in service_manager.config.items() if not k.startswith('_')}
    app.extensions[EXTENSION_KEY] = service_manager

    _configure_compression(app)
    _register_request_timing(app)

    app.register_blueprint(alarms_bp)
    app.register_blueprint(health_bp)
    register_error_handlers(app)

    logger.info(f"🎯 {get_app_info()} application created")
    return app
