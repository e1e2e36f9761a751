"""Builders shared by the SpawnAlarm tests."""

from __future__ import annotations

import datetime

from spawnalarm.core.models import AlarmPattern

UTC = datetime.timezone.utc
GAME_DAY = datetime.datetime(2024, 1, 1, tzinfo=UTC)


def game_time(hour: int, minute: int = 0, *, day: int = 0) -> datetime.datetime:
    """Game timestamp on the reference day (plus ``day`` days)."""
    return GAME_DAY + datetime.timedelta(days=day, hours=hour, minutes=minute)


def make_pattern(key: str = "node", hours=(8, 20), duration: int = 2, **kwargs) -> AlarmPattern:
    kwargs.setdefault("map_id", 1)
    return AlarmPattern(key=key, spawn_hours=tuple(hours), duration=duration, **kwargs)
