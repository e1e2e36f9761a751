"""
Centralized configuration management for SpawnAlarm
Handles environment-specific configs and Pydantic schema validation
"""

import copy
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from .config_schema import SpawnAlarmConfig, migrate_legacy_config, validate_config_dict
from .constants import MAX_WEATHER_LOOKAHEAD_DAYS
from .core.game_time import to_earth_minutes
from .core.weather import ForecastWeatherTimeline


class ConfigManager:
    """Manages configuration loading and validation"""

    def __init__(self, base_path: Optional[str] = None):
        self.base_path = Path(base_path) if base_path else Path(__file__).parent.parent
        self.config_dir = self.base_path / "config"
        self.environment = os.getenv("SPAWNALARM_ENV", "development")
        self._lock = threading.RLock()
        self._cache: Optional[Dict[str, Any]] = None
        self._logger = logging.getLogger(__name__)

    def _read_json(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            self._logger.warning(f"Could not load config {path.name}: {e}")
            return {}
        if not isinstance(data, dict):
            self._logger.warning(f"Ignoring non-object config file {path.name}")
            return {}
        return data

    def load_config(self, config_name: Optional[str] = None, use_cache: bool = True) -> Dict[str, Any]:
        """
        Load configuration based on environment

        Args:
            config_name: Specific config file name (without .json)
                        If None, uses environment-based config
            use_cache: Return the cached config when available

        Returns:
            Configuration dictionary (a copy, safe to mutate)
        """
        with self._lock:
            if use_cache and config_name is None and self._cache is not None:
                return copy.deepcopy(self._cache)

            name = config_name or self.environment
            config_file = self.config_dir / f"{name}.json"

            # Environment config overrides defaults
            config = {
                **self._read_json(self.config_dir / "default_config.json"),
                **self._read_json(config_file),
            }
            config.setdefault("environment", self.environment)

            validated = self.validate_config(config)
            validated["_runtime"] = {
                "environment": self.environment,
                "config_file": str(config_file),
                "base_path": str(self.base_path),
            }
            if config_name is None:
                self._cache = copy.deepcopy(validated)
            return validated

    def validate_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and clean configuration; invalid files fall back to defaults."""
        try:
            validated_model, warnings = validate_config_dict(migrate_legacy_config(config))
        except ValueError as e:
            self._logger.error(f"❌ Configuration schema validation failed: {e}")
            self._logger.warning("Falling back to default configuration")
            return SpawnAlarmConfig(environment=self.environment).to_dict()

        for warning in warnings:
            self._logger.warning(f"Config validation warning: {warning}")
        self._logger.debug("✅ Configuration validated against Pydantic schema")
        return validated_model.to_dict()

    def save_config(self, config: Dict[str, Any], config_name: Optional[str] = None) -> bool:
        """Validate and save configuration to file; returns True on success."""
        config_file = self.config_dir / f"{config_name or self.environment}.json"
        try:
            validated_model, _ = validate_config_dict(migrate_legacy_config(config))
        except ValueError as e:
            self._logger.error(f"Refusing to save invalid configuration: {e}")
            return False
        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(config_file, 'w', encoding='utf-8') as f:
                json.dump(validated_model.to_json_safe(), f, indent=2)
        except OSError as e:
            self._logger.error(f"Failed to write {config_file}: {e}")
            return False
        self.invalidate_cache()
        return True

    def invalidate_cache(self) -> None:
        with self._lock:
            self._cache = None

    def get_environment(self) -> str:
        return self.environment

    def set_environment(self, environment: str) -> None:
        with self._lock:
            self.environment = environment
            self._cache = None


# Global config manager instance
config_manager = ConfigManager()


def load_config() -> Dict[str, Any]:
    """Load current environment configuration"""
    return config_manager.load_config()


def get_config_value(key: str, default: Any = None) -> Any:
    """Get specific configuration value"""
    return load_config().get(key, default)


def lead_time_minutes(config: Dict[str, Any]) -> float:
    """Real-world warning lead time derived from ``alarm_hours_before``."""
    return to_earth_minutes(int(config.get("alarm_hours_before", 0)) * 60)


def weather_timeline(config: Dict[str, Any]) -> Optional[ForecastWeatherTimeline]:
    """Forecast timeline from ``weather_rates``, or None when none are configured."""
    rates = config.get("weather_rates") or {}
    if not rates:
        return None
    return ForecastWeatherTimeline(
        {int(map_id): [(weather, int(chance)) for weather, chance in table] for map_id, table in rates.items()},
        horizon_days=int(config.get("weather_lookahead_days", MAX_WEATHER_LOOKAHEAD_DAYS)) + 1,
    )
