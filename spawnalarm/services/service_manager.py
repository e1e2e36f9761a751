"""
🔧 Service Manager - Central Service Coordination
===============================================

Wires the alarm store, game clock and weather timeline into services and
provides a unified interface for the Flask application.
"""

import logging
from typing import Any, Dict, Optional

from . import ServiceResult
from ..config import lead_time_minutes, load_config, weather_timeline
from ..core.game_time import Clock, GameClock
from ..core.store import AlarmStore
from ..core.weather import WeatherTimeline
from .alarm_service import AlarmService


class ServiceManager:
    """Central manager for all application services."""

    def __init__(
        self,
        store: Optional[AlarmStore] = None,
        clock: Optional[Clock] = None,
        timeline: Optional[WeatherTimeline] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        self.logger = logging.getLogger("service_manager")
        self.config = config if config is not None else load_config()

        self.alarm = AlarmService(
            store if store is not None else AlarmStore(),
            clock if clock is not None else GameClock(),
            timeline if timeline is not None else weather_timeline(self.config),
            lead_time_minutes=lead_time_minutes(self.config),
            lookahead_days=int(self.config.get("weather_lookahead_days", 14)),
            refresh_interval_seconds=float(self.config.get("refresh_interval_seconds", 60.0)),
        )

        self.services = {
            "alarm": self.alarm,
        }

        self._initialize_all()

    def _initialize_all(self) -> None:
        self.logger.info("🚀 Initializing service manager...")
        for name, service in self.services.items():
            result = service.initialize()
            if result.success:
                self.logger.info(f"✅ {name} service initialized")
            else:
                self.logger.error(f"❌ {name} service initialization failed: {result.message}")

    def get_service(self, name: str) -> Optional[Any]:
        """Get a specific service by name."""
        return self.services.get(name)

    def start_background(self) -> None:
        """Start periodic view recomputation."""
        self.alarm.refresher.start()

    def stop_background(self) -> None:
        self.alarm.refresher.stop()

    def health_check_all(self) -> ServiceResult:
        """Perform health check on all services."""
        results = {}
        overall_healthy = True
        degraded_states = {"degraded", "warning", "error", "failed", "unhealthy"}

        for name, service in self.services.items():
            health = service.health_check()
            if health.success and isinstance(health.data, dict):
                status_payload: Dict[str, Any] = health.data
            else:
                status_payload = {"status": "error", "error": health.message}

            status_value = str(status_payload.get("status", "")).lower()
            service_healthy = health.success and status_value not in degraded_states
            results[name] = {
                "healthy": service_healthy,
                "status": status_payload,
            }
            if not service_healthy:
                overall_healthy = False

        return ServiceResult(
            success=True,
            data={
                "overall_healthy": overall_healthy,
                "services": results,
                "total_services": len(self.services),
                "healthy_services": sum(1 for r in results.values() if r["healthy"]),
            },
            message="Health check completed for all services"
        )
