"""
Pydantic models for SpawnAlarm configuration validation

Type-safe configuration schema with automatic validation, preventing runtime
errors from malformed config files.
"""

from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, Field, field_validator

from .constants import DEFAULT_ALARM_HOURS_BEFORE, MAX_WEATHER_LOOKAHEAD_DAYS


class SpawnAlarmConfig(BaseModel):
    """Complete SpawnAlarm configuration schema.

    Example:
        >>> config_dict = json.load(open("config/production.json"))
        >>> validated_config = SpawnAlarmConfig(**config_dict)
        >>> print(validated_config.alarm_hours_before)
        0
    """

    # Alarm evaluation
    alarm_hours_before: int = Field(
        default=DEFAULT_ALARM_HOURS_BEFORE, ge=0, le=23,
        description="Game hours before a spawn during which the alarm counts as played",
    )
    weather_lookahead_days: int = Field(
        default=MAX_WEATHER_LOOKAHEAD_DAYS, ge=1, le=60,
        description="Maximum game days searched for a matching weather window",
    )
    refresh_interval_seconds: float = Field(
        default=60.0, ge=1.0, le=3600.0,
        description="Real seconds between periodic view recomputes",
    )

    # Runtime settings
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", description="Logging level")
    host: str = Field(default="127.0.0.1", description="HTTP bind address")
    port: int = Field(default=5000, ge=1, le=65535, description="HTTP port")

    # Forecast tables: map id -> [[weather, chance], ...]
    weather_rates: Dict[str, List[Tuple[str, int]]] = Field(
        default_factory=dict,
        description="Per-map weather chances used by the forecast timeline",
    )

    model_config = {
        "extra": "allow",  # Allow extra fields for forward compatibility
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    @field_validator('log_level', mode='before')
    @classmethod
    def normalise_log_level(cls, v: Any) -> Any:
        """Accept lower-case level names."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if not v:
            raise ValueError("environment must not be empty")
        return v.lower()

    @field_validator('weather_rates')
    @classmethod
    def validate_weather_rates(cls, v: Dict[str, List[Tuple[str, int]]]) -> Dict[str, List[Tuple[str, int]]]:
        for map_id, table in v.items():
            if not map_id.strip().isdigit():
                raise ValueError(f"weather_rates key {map_id!r} is not a map id")
            total = sum(chance for _, chance in table)
            if total != 100:
                raise ValueError(f"weather chances for map {map_id} add up to {total}, expected 100")
        return v

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json')

    def to_json_safe(self) -> Dict[str, Any]:
        """Convert to JSON-safe dictionary (for saving to file)."""
        data = self.to_dict()
        data.pop('_runtime', None)
        return data


def validate_config_dict(config_dict: Dict[str, Any]) -> tuple[SpawnAlarmConfig, list[str]]:
    """Validate a config dictionary against the schema.

    Returns:
        Tuple of (validated_config, warnings_list)

    Raises:
        ValueError: If config is invalid with detailed error messages
    """
    warnings = []
    payload = {k: v for k, v in config_dict.items() if not k.startswith("_")}
    unknown = sorted(set(payload) - set(SpawnAlarmConfig.model_fields))
    if unknown:
        warnings.append(f"Unknown config keys ignored by the engine: {', '.join(unknown)}")

    try:
        validated = SpawnAlarmConfig(**payload)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {str(e)}")
    return validated, warnings


LEGACY_KEYS = {
    "alarmHoursBefore": "alarm_hours_before",
    "weatherLookaheadDays": "weather_lookahead_days",
}


def migrate_legacy_config(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Rename camelCase keys from older settings exports."""
    migrated = config_dict.copy()
    for old_key, new_key in LEGACY_KEYS.items():
        if old_key in migrated:
            value = migrated.pop(old_key)
            migrated.setdefault(new_key, value)
    return migrated
