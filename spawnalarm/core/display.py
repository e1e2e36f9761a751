"""
Alarm display records: open-now flag, warning flag and real-time countdown.
"""

from __future__ import annotations

import datetime
from typing import Optional

from ..constants import MAX_WEATHER_LOOKAHEAD_DAYS
from .game_time import (game_days_to_earth_minutes, minutes_before,
                        normalize_game_time, to_earth_minutes)
from .models import AlarmDisplay, AlarmPattern, NextSpawn
from .spawn import is_spawned, resolve_next_spawn
from .weather import WeatherTimeline


def remaining_earth_minutes(now: datetime.datetime, hour: int, day_offset: int = 0) -> float:
    """Real-world minutes until ``hour`` of the game day, ``day_offset`` days ahead."""
    return to_earth_minutes(minutes_before(now, hour)) + game_days_to_earth_minutes(day_offset)


def build_display(
    pattern: AlarmPattern,
    now: datetime.datetime,
    lead_time_minutes: float = 0.0,
    timeline: Optional[WeatherTimeline] = None,
    *,
    lookahead_days: int = MAX_WEATHER_LOOKAHEAD_DAYS,
) -> AlarmDisplay:
    """Build the display record of one alarm at ``now``.

    While spawned, the countdown runs to the close of the resolved window;
    otherwise it runs to the next opening. ``played`` marks alarms inside the
    warning lead time that have not opened yet.
    """
    now = normalize_game_time(now)
    next_spawn: NextSpawn = resolve_next_spawn(pattern, now, timeline, lookahead_days=lookahead_days)
    spawned = is_spawned(next_spawn, now)
    if spawned:
        remaining = remaining_earth_minutes(now, next_spawn.despawn_hour)
    else:
        remaining = remaining_earth_minutes(now, next_spawn.hour, next_spawn.day_offset)
    return AlarmDisplay(
        alarm=pattern,
        spawned=spawned,
        played=not spawned and remaining < lead_time_minutes,
        remaining_time=remaining,
        next_spawn=next_spawn,
    )
