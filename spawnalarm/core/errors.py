"""
Scheduling exceptions raised by the spawn engine.
"""

from __future__ import annotations

from typing import Optional


class SchedulingError(Exception):
    """Base class for errors raised while resolving alarm patterns."""

    error_code = "scheduling_error"


class InvalidPattern(SchedulingError):
    """Alarm pattern rejected before resolution."""

    error_code = "invalid_pattern"

    def __init__(self, field_name: str, message: str, alarm_key: Optional[str] = None):
        self.field_name = field_name
        self.message = message
        self.alarm_key = alarm_key
        super().__init__(f"{field_name}: {message}")


class SchedulingTimeout(SchedulingError):
    """Weather search exhausted its lookahead without a matching window."""

    error_code = "scheduling_timeout"

    def __init__(self, alarm_key: Optional[str], lookahead_days: int):
        self.alarm_key = alarm_key
        self.lookahead_days = lookahead_days
        super().__init__(
            f"No weather window found for alarm {alarm_key!r} within {lookahead_days} game days"
        )
