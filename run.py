#!/usr/bin/env python3
"""
SpawnAlarm Runner - Starts the JSON API with the background alarm refresher
"""

import os

from waitress import serve

from spawnalarm.app import create_app
from spawnalarm.config import load_config
from spawnalarm.services.service_manager import ServiceManager
from spawnalarm.utils.logger import apply_log_level, log_shutdown, log_startup, setup_logger

if __name__ == "__main__":
    logger = setup_logger("runner")
    log_startup("runner")

    config = load_config()
    host = config.get("host", "127.0.0.1")
    port = int(os.environ.get("PORT", config.get("port", 5000)))
    debug_mode = config.get("debug", False)
    apply_log_level(config.get("log_level"), name="runner")

    service_manager = ServiceManager(config=config)
    app = create_app(service_manager)

    logger.info(f"🚀 Starting SpawnAlarm on {host}:{port}")
    logger.info(f"🌍 Environment: {config.get('environment', 'unknown')}")
    logger.info(f"🔧 Debug mode: {debug_mode}")

    service_manager.start_background()
    logger.info("⏰ Alarm refresher started")

    try:
        if debug_mode:
            # The reloader would start a second refresher in the child process
            app.run(host=host, port=port, debug=True, use_reloader=False)
        else:
            threads = int(os.environ.get("SPAWNALARM_WAITRESS_THREADS", "4"))
            logger.info(f"🍽️ Using Waitress WSGI server (threads={threads})")
            serve(app, host=host, port=port, threads=threads)
    finally:
        service_manager.stop_background()
        log_shutdown(logger, "runner")
