"""
SpawnAlarm Route Blueprints
JSON adapters over the alarm service.
"""

from .alarms import alarms_bp
from .health import health_bp

__all__ = [
    "alarms_bp",
    "health_bp",
]
