#!/usr/bin/env python3
"""
Game clock utilities.

Game time runs EPOCH_TIME_FACTOR times faster than real time and is always
read as a UTC day: only hour, minute and second of the game timestamp matter
to the spawn engine.
"""

from __future__ import annotations

import datetime
import time
from typing import Callable, Optional, Protocol

from ..constants import EPOCH_TIME_FACTOR, MINUTES_PER_DAY, SECONDS_PER_DAY


class Clock(Protocol):
    """Anything able to tell the current game time."""

    def now(self) -> datetime.datetime:
        ...


def to_earth_minutes(game_minutes: float) -> float:
    """Convert a duration in game minutes to real-world minutes."""
    return game_minutes / EPOCH_TIME_FACTOR


def to_game_minutes(earth_minutes: float) -> float:
    """Convert a duration in real-world minutes to game minutes."""
    return earth_minutes * EPOCH_TIME_FACTOR


def game_days_to_earth_minutes(days: int) -> float:
    """Real-world minutes spanned by ``days`` whole game days."""
    return days * MINUTES_PER_DAY / EPOCH_TIME_FACTOR


def to_game_time(real: datetime.datetime) -> datetime.datetime:
    """Return the game timestamp matching a real-world instant."""
    if real.tzinfo is None:
        real = real.replace(tzinfo=datetime.timezone.utc)
    return datetime.datetime.fromtimestamp(real.timestamp() * EPOCH_TIME_FACTOR, tz=datetime.timezone.utc)


def to_earth_time(game: datetime.datetime) -> datetime.datetime:
    """Return the real-world instant matching a game timestamp."""
    game = normalize_game_time(game)
    return datetime.datetime.fromtimestamp(game.timestamp() / EPOCH_TIME_FACTOR, tz=datetime.timezone.utc)


def normalize_game_time(value: datetime.datetime) -> datetime.datetime:
    """Treat naive timestamps as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


def seconds_of_day(value: datetime.datetime) -> int:
    value = normalize_game_time(value)
    return value.hour * 3600 + value.minute * 60 + value.second


def format_game_time(value: datetime.datetime) -> str:
    """Return ``HH:MM`` for a game timestamp."""
    value = normalize_game_time(value)
    return f"{value.hour:02d}:{value.minute:02d}"


class GameClock:
    """Clock deriving game time from a real-time source.

    ``time_source`` returns POSIX seconds and defaults to ``time.time``;
    tests inject a fixed source.
    """

    def __init__(self, time_source: Optional[Callable[[], float]] = None):
        self._time_source = time_source or time.time

    def earth_now(self) -> datetime.datetime:
        return datetime.datetime.fromtimestamp(self._time_source(), tz=datetime.timezone.utc)

    def now(self) -> datetime.datetime:
        return to_game_time(self.earth_now())


class FixedClock:
    """Clock frozen at one game timestamp."""

    def __init__(self, game_now: datetime.datetime):
        self._now = normalize_game_time(game_now)

    def now(self) -> datetime.datetime:
        return self._now


def minutes_before(now: datetime.datetime, hour: int) -> float:
    """Game minutes from ``now`` until ``hour`` of the game day.

    A target already behind ``now`` wraps forward one day, so the result is
    always in ``[0, 1440)``; an exact match yields 0.
    """
    target = (hour % 24) * 3600
    delta = (target - seconds_of_day(now)) % SECONDS_PER_DAY
    return delta / 60


def despawn_hour(spawn_hour: int, duration: int) -> int:
    return (spawn_hour + duration) % 24


def hour_in_window(hour: int, start: int, end: int) -> bool:
    """Return True if ``hour`` lies in ``[start, end)`` on a 24h dial.

    Hour 0 is read as 24 on both ends, so windows crossing midnight wrap.
    """
    start = start or 24
    end = end or 24
    if start > end:
        return hour >= start or hour < end
    return start <= hour < end
