#!/usr/bin/env python3
"""
Spawn window resolution for recurring alarm patterns.

A pattern opens at each of its spawn hours and stays open for ``duration``
game hours. Slots that are open right now rank first, then the remaining
slots by how soon they open.
"""

from __future__ import annotations

import datetime
import logging
from typing import List, Optional

from ..constants import MAX_WEATHER_LOOKAHEAD_DAYS
from ..utils.validation import validate_pattern
from .errors import SchedulingError
from .game_time import despawn_hour, hour_in_window, minutes_before, normalize_game_time
from .models import AlarmPattern, NextSpawn
from .weather import WeatherTimeline, find_weather_spawn

_logger = logging.getLogger("spawn_engine")


def is_slot_open(now: datetime.datetime, spawn_hour: int, duration: int) -> bool:
    """Return True if the window opening at ``spawn_hour`` is open at ``now``.

    We are inside the window when its close boundary comes before its next
    open boundary. Windows are half-open: open at the spawn instant, closed
    at the close instant.
    """
    until_close = minutes_before(now, despawn_hour(spawn_hour, duration))
    until_open = minutes_before(now, spawn_hour)
    return until_open == 0 or 0 < until_close < until_open


def sort_spawn_hours(pattern: AlarmPattern, now: datetime.datetime) -> List[int]:
    """Order spawn hours: open slots first, then by minutes until open."""
    return sorted(
        pattern.spawn_hours,
        key=lambda hour: (not is_slot_open(now, hour, pattern.duration), minutes_before(now, hour)),
    )


def resolve_next_spawn(
    pattern: AlarmPattern,
    now: datetime.datetime,
    timeline: Optional[WeatherTimeline] = None,
    *,
    lookahead_days: int = MAX_WEATHER_LOOKAHEAD_DAYS,
) -> NextSpawn:
    """Return the next spawn window of ``pattern`` relative to ``now``.

    Args:
        pattern: Alarm pattern to resolve
        now: Current game time (read as a UTC day)
        timeline: Weather oracle, required for weather-gated patterns
        lookahead_days: Bound for the weather search in game days

    Raises:
        InvalidPattern: If the pattern breaks its invariants
        SchedulingTimeout: If no weather window exists within the lookahead
    """
    validate_pattern(pattern)
    now = normalize_game_time(now)
    sorted_hours = sort_spawn_hours(pattern, now)

    if pattern.weather_gated:
        if timeline is None:
            raise SchedulingError(f"Alarm {pattern.key!r} requires weather but no timeline is configured")
        _logger.debug("Searching weather windows for %s (weathers=%s)", pattern.key, sorted(pattern.weathers))
        return find_weather_spawn(pattern, sorted_hours, now, timeline, lookahead_days=lookahead_days)

    first = sorted_hours[0]
    return NextSpawn(hour=first, day_offset=0, despawn_hour=despawn_hour(first, pattern.duration))


def is_spawned(next_spawn: NextSpawn, now: datetime.datetime) -> bool:
    """Check if ``now`` falls inside the resolved window.

    Nothing counts as spawned when the window is at least a day away.
    """
    if next_spawn.day_offset > 0:
        return False
    now = normalize_game_time(now)
    return hour_in_window(now.hour, next_spawn.hour, next_spawn.despawn_hour)

