#!/usr/bin/env python3
"""
🛡️ Input Validation Module for SpawnAlarm
Provides validation for alarm patterns and user payloads including:
- Spawn hours (0-23)
- Window durations (1-23 hours)
- Weather requirements
- Group names and display indexes
"""

import re
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Union

from ..core.errors import InvalidPattern
from ..core.models import AlarmGroup, AlarmPattern


def _as_whole_number(value: Any) -> int:
    """``int(value)`` that refuses to truncate fractional numbers."""
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"{value!r} is not a whole number")
    return int(value)


@dataclass
class ValidationResult:
    """Result of input validation with value and error details."""
    is_valid: bool
    value: Any = None
    error: str = ""
    field_name: str = ""


class InputValidator:
    """Centralized input validation for alarm patterns and groups."""

    # Validation constants
    MIN_HOUR = 0
    MAX_HOUR = 23
    MIN_DURATION = 1
    MAX_DURATION = 23
    MAX_STRING_LENGTH = 100

    WEATHER_PATTERN = re.compile(r'^[^\x00-\x1F<>]{1,64}$', re.UNICODE)

    @classmethod
    def validate_hour(cls, value: Union[str, int, None], field_name: str = "hour") -> ValidationResult:
        """Validate an hour of the game day (0-23)."""
        if value is None or isinstance(value, bool):
            return ValidationResult(False, None, f"{field_name} is required", field_name)
        try:
            hour = _as_whole_number(value)
        except (ValueError, TypeError):
            return ValidationResult(False, None, f"{field_name} must be an integer", field_name)
        if hour < cls.MIN_HOUR or hour > cls.MAX_HOUR:
            return ValidationResult(
                False, None,
                f"{field_name} must be between {cls.MIN_HOUR} and {cls.MAX_HOUR}",
                field_name
            )
        return ValidationResult(True, hour, "", field_name)

    @classmethod
    def validate_spawn_hours(cls, value: Optional[Iterable[Any]], field_name: str = "spawn_hours") -> ValidationResult:
        """Validate a non-empty collection of spawn hours.

        Duplicates are dropped while keeping the first occurrence order.
        """
        if value is None or isinstance(value, (str, bytes)):
            return ValidationResult(False, None, f"{field_name} must be a list of hours", field_name)
        hours = []
        for raw in value:
            result = cls.validate_hour(raw, field_name)
            if not result.is_valid:
                return result
            if result.value not in hours:
                hours.append(result.value)
        if not hours:
            return ValidationResult(False, None, f"{field_name} must not be empty", field_name)
        return ValidationResult(True, tuple(hours), "", field_name)

    @classmethod
    def validate_duration(cls, value: Union[str, int, None], field_name: str = "duration") -> ValidationResult:
        """Validate window duration in game hours."""
        if value is None or isinstance(value, bool):
            return ValidationResult(False, None, f"{field_name} is required", field_name)

        try:
            duration = _as_whole_number(value)
        except (ValueError, TypeError):
            return ValidationResult(
                False, None,
                f"{field_name} must be a valid number between {cls.MIN_DURATION} and {cls.MAX_DURATION}",
                field_name
            )
        if duration < cls.MIN_DURATION or duration > cls.MAX_DURATION:
            return ValidationResult(
                False, None,
                f"{field_name} must be between {cls.MIN_DURATION} and {cls.MAX_DURATION} hours",
                field_name
            )
        return ValidationResult(True, duration, "", field_name)

    @classmethod
    def validate_weathers(cls, value: Optional[Iterable[Any]], field_name: str = "weathers") -> ValidationResult:
        """Validate optional weather requirements.

        ``None`` means "any weather"; an empty collection is rejected.
        """
        if value is None:
            return ValidationResult(True, None, "", field_name)
        if isinstance(value, (str, bytes)):
            return ValidationResult(False, None, f"{field_name} must be a list of weather names", field_name)
        weathers = set()
        for raw in value:
            if not isinstance(raw, str) or not cls.WEATHER_PATTERN.match(raw.strip()):
                return ValidationResult(False, None, f"{field_name} contains an invalid weather name", field_name)
            weathers.add(raw.strip())
        if not weathers:
            return ValidationResult(False, None, f"{field_name} must not be empty when present", field_name)
        return ValidationResult(True, frozenset(weathers), "", field_name)

    @classmethod
    def validate_name(cls, value: Union[str, None], field_name: str = "name", required: bool = False) -> ValidationResult:
        """Validate a display name."""
        if not value:
            if required:
                return ValidationResult(False, None, f"{field_name} is required", field_name)
            return ValidationResult(True, "", "", field_name)

        if not isinstance(value, str):
            return ValidationResult(False, None, f"{field_name} must be a string", field_name)

        value = value.strip()
        if len(value) > cls.MAX_STRING_LENGTH:
            return ValidationResult(
                False, None,
                f"{field_name} is too long (max {cls.MAX_STRING_LENGTH} characters)",
                field_name
            )
        if required and not value:
            return ValidationResult(False, None, f"{field_name} is required", field_name)
        return ValidationResult(True, value, "", field_name)

    @classmethod
    def validate_int(cls, value: Union[str, int, None], field_name: str, required: bool = False) -> ValidationResult:
        if value is None or value == "":
            if required:
                return ValidationResult(False, None, f"{field_name} is required", field_name)
            return ValidationResult(True, None, "", field_name)
        if isinstance(value, bool):
            return ValidationResult(False, None, f"{field_name} must be an integer", field_name)
        try:
            return ValidationResult(True, _as_whole_number(value), "", field_name)
        except (ValueError, TypeError):
            return ValidationResult(False, None, f"{field_name} must be an integer", field_name)

    @classmethod
    def validate_boolean(cls, value: Union[str, bool, None], field_name: str = "enabled", default: bool = False) -> ValidationResult:
        """Validate boolean input."""
        if value is None:
            return ValidationResult(True, default, "", field_name)

        if isinstance(value, bool):
            return ValidationResult(True, value, "", field_name)

        if isinstance(value, str):
            lower_value = value.lower().strip()
            if lower_value in ('true', '1', 'on', 'yes', 'enabled'):
                return ValidationResult(True, True, "", field_name)
            elif lower_value in ('false', '0', 'off', 'no', 'disabled', ''):
                return ValidationResult(True, False, "", field_name)

        return ValidationResult(True, bool(value), "", field_name)


class ValidationError(InvalidPattern):
    """Validation failure on user-supplied payloads."""


def _require(result: ValidationResult) -> Any:
    if not result.is_valid:
        raise ValidationError(result.field_name, result.error)
    return result.value


def validate_pattern(pattern: AlarmPattern) -> AlarmPattern:
    """Check the invariants of an alarm pattern before it is resolved.

    Raises:
        InvalidPattern: if spawn hours, duration or weathers are out of range
    """
    checks = (
        InputValidator.validate_spawn_hours(pattern.spawn_hours),
        InputValidator.validate_duration(pattern.duration),
        InputValidator.validate_weathers(pattern.weathers),
    )
    for result in checks:
        if not result.is_valid:
            raise InvalidPattern(result.field_name, result.error, alarm_key=pattern.key)
    return pattern


def parse_alarm_payload(data: Dict[str, Any]) -> AlarmPattern:
    """Build an :class:`AlarmPattern` from a JSON payload.

    Raises:
        ValidationError: If any field is invalid
    """
    key = _require(InputValidator.validate_name(data.get("key"), "key")) or uuid.uuid4().hex
    pattern = AlarmPattern(
        key=key,
        map_id=_require(InputValidator.validate_int(data.get("map_id"), "map_id", required=True)),
        spawn_hours=_require(InputValidator.validate_spawn_hours(data.get("spawn_hours"))),
        duration=_require(InputValidator.validate_duration(data.get("duration"))),
        weathers=_require(InputValidator.validate_weathers(data.get("weathers"))),
        group_id=_require(InputValidator.validate_name(data.get("group_id"), "group_id")) or None,
        item_id=_require(InputValidator.validate_int(data.get("item_id"), "item_id")),
        zone_id=_require(InputValidator.validate_int(data.get("zone_id"), "zone_id")),
        name=_require(InputValidator.validate_name(data.get("name"), "name")),
    )
    return pattern


def parse_group_payload(data: Dict[str, Any]) -> AlarmGroup:
    """Build an :class:`AlarmGroup` from a JSON payload."""
    key = _require(InputValidator.validate_name(data.get("key"), "key")) or uuid.uuid4().hex
    index = _require(InputValidator.validate_int(data.get("index"), "index"))
    return AlarmGroup(
        key=key,
        name=_require(InputValidator.validate_name(data.get("name"), "name", required=True)),
        index=index if index is not None else 0,
        enabled=_require(InputValidator.validate_boolean(data.get("enabled"), "enabled", default=True)),
    )
