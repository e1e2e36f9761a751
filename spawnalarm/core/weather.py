#!/usr/bin/env python3
"""
Weather-gated spawn search.

- ``WeatherTimeline`` is the oracle the search consults
- ``find_weather_spawn`` walks forward through known weather occurrences one
  at a time until a spawn slot and an occurrence overlap in a window that has
  not closed yet, or the lookahead bound is exhausted
- ``ForecastWeatherTimeline`` derives deterministic 8-hour forecasts from
  per-map weather rate tables
- ``ScheduledWeatherTimeline`` replays an explicit list of weather periods
"""

from __future__ import annotations

import datetime
import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..constants import MAX_WEATHER_LOOKAHEAD_DAYS, SECONDS_PER_DAY, WEATHER_PERIOD_HOURS
from .errors import SchedulingTimeout
from .game_time import despawn_hour, hour_in_window, normalize_game_time
from .models import AlarmPattern, NextSpawn

_logger = logging.getLogger("weather_search")
ONE_DAY = datetime.timedelta(days=1)
WEATHER_PERIOD = datetime.timedelta(hours=WEATHER_PERIOD_HOURS)


class WeatherTimeline(Protocol):
    """Source of weather occurrences, expressed in game time."""

    def next_occurrence_start(
        self, map_id: int, weather: str, from_time: datetime.datetime
    ) -> Optional[datetime.datetime]:
        """Start of the occurrence of ``weather`` active at or following ``from_time``."""
        ...

    def occurrence_end(self, occurrence_start: datetime.datetime) -> datetime.datetime:
        ...


def _days_between(now: datetime.datetime, target: datetime.datetime) -> int:
    return max(0, math.floor((target - now).total_seconds() / SECONDS_PER_DAY))


def _at_hour(moment: datetime.datetime, hour: int) -> datetime.datetime:
    return moment.replace(hour=hour, minute=0, second=0, microsecond=0)


def _collect_occurrences(
    pattern: AlarmPattern, timeline: WeatherTimeline, search_from: datetime.datetime
) -> List[Tuple[datetime.datetime, datetime.datetime]]:
    occurrences = []
    for weather in sorted(pattern.weathers or ()):
        start = timeline.next_occurrence_start(pattern.map_id, weather, search_from)
        if start is None:
            continue
        start = normalize_game_time(start)
        occurrences.append((start, normalize_game_time(timeline.occurrence_end(start))))
    occurrences.sort(key=lambda occurrence: occurrence[0])
    return occurrences


def find_weather_spawn(
    pattern: AlarmPattern,
    sorted_spawn_hours: Sequence[int],
    now: datetime.datetime,
    timeline: WeatherTimeline,
    search_from: Optional[datetime.datetime] = None,
    *,
    lookahead_days: int = MAX_WEATHER_LOOKAHEAD_DAYS,
) -> NextSpawn:
    """Find the first spawn slot overlapping one of the required weathers.

    For every slot (in the given order) and every known occurrence (by start):

    * weather starting inside the slot window spawns at the weather start and
      despawns with the slot;
    * weather already active when the slot opens spawns at the slot hour and
      despawns when the weather stops, even past the slot's own despawn.

    Matches whose window already closed before ``now`` are skipped. When
    nothing matches, the search resumes at the earliest end among the known
    occurrences, so every occurrence within the lookahead gets a turn.

    Raises:
        SchedulingTimeout: If nothing matches within ``lookahead_days``
    """
    now = normalize_game_time(now)
    search_from = normalize_game_time(search_from) if search_from is not None else now
    limit = now + datetime.timedelta(days=lookahead_days)
    window = datetime.timedelta(hours=pattern.duration)

    while search_from <= limit:
        occurrences = [
            occurrence for occurrence in _collect_occurrences(pattern, timeline, search_from)
            if occurrence[0] <= limit
        ]
        if not occurrences:
            _logger.debug("No weather occurrences left for %s after %s", pattern.key, search_from.isoformat())
            break

        for spawn in sorted_spawn_hours:
            despawn = despawn_hour(spawn, pattern.duration)
            for weather_start, weather_stop in occurrences:
                start_hour = weather_start.hour
                stop_hour = weather_stop.hour or 24
                if hour_in_window(start_hour, spawn, despawn):
                    slot_open = _at_hour(weather_start, spawn)
                    if slot_open > weather_start:
                        slot_open -= ONE_DAY
                    if slot_open + window <= now:
                        continue
                    return NextSpawn(
                        hour=start_hour,
                        day_offset=_days_between(now, weather_start),
                        despawn_hour=despawn,
                    )
                if hour_in_window(spawn, start_hour, stop_hour):
                    if weather_stop <= now:
                        continue
                    real_spawn = _at_hour(weather_start, spawn)
                    if real_spawn < weather_start:
                        real_spawn += ONE_DAY
                    return NextSpawn(
                        hour=spawn,
                        day_offset=_days_between(now, real_spawn),
                        despawn_hour=stop_hour,
                    )

        search_from = max(min(stop for _, stop in occurrences), search_from + datetime.timedelta(seconds=1))

    raise SchedulingTimeout(pattern.key, lookahead_days)


def forecast_target(game_time: datetime.datetime) -> int:
    """Return the forecast roll (0-99) of the weather period covering ``game_time``."""
    seconds = math.floor(normalize_game_time(game_time).timestamp())
    total_hours = seconds // 3600
    increment = (total_hours + 8 - total_hours % 8) % 24
    total_days = seconds // SECONDS_PER_DAY
    calc_base = total_days * 100 + increment
    step1 = ((calc_base << 11) ^ calc_base) & 0xFFFFFFFF
    step2 = ((step1 >> 8) ^ step1) & 0xFFFFFFFF
    return step2 % 100


def period_start(game_time: datetime.datetime) -> datetime.datetime:
    """Floor ``game_time`` to the start of its 8-hour weather period."""
    game_time = normalize_game_time(game_time)
    return game_time.replace(
        hour=game_time.hour - game_time.hour % WEATHER_PERIOD_HOURS, minute=0, second=0, microsecond=0
    )


class ForecastWeatherTimeline:
    """Weather timeline computed from per-map rate tables.

    ``rates`` maps a map id to ``(weather, chance)`` pairs whose chances add
    up to 100; the forecast roll picks the first weather whose cumulative
    chance exceeds it.
    """

    def __init__(self, rates: Mapping[int, Sequence[Tuple[str, int]]], *, horizon_days: int = MAX_WEATHER_LOOKAHEAD_DAYS + 1):
        self._tables: Dict[int, List[Tuple[int, str]]] = {}
        for map_id, table in rates.items():
            cumulative = 0
            entries = []
            for weather, chance in table:
                cumulative += int(chance)
                entries.append((cumulative, weather))
            if cumulative != 100:
                raise ValueError(f"Weather chances for map {map_id} add up to {cumulative}, expected 100")
            self._tables[map_id] = entries
        self._max_periods = horizon_days * (24 // WEATHER_PERIOD_HOURS) + 1

    def weather_at(self, map_id: int, game_time: datetime.datetime) -> Optional[str]:
        table = self._tables.get(map_id)
        if not table:
            return None
        target = forecast_target(game_time)
        for cumulative, weather in table:
            if target < cumulative:
                return weather
        return table[-1][1]

    def next_occurrence_start(
        self, map_id: int, weather: str, from_time: datetime.datetime
    ) -> Optional[datetime.datetime]:
        table = self._tables.get(map_id)
        if not table or all(name != weather for _, name in table):
            return None
        start = period_start(from_time)
        for _ in range(self._max_periods):
            if self.weather_at(map_id, start) == weather:
                return start
            start += WEATHER_PERIOD
        return None

    def occurrence_end(self, occurrence_start: datetime.datetime) -> datetime.datetime:
        return period_start(occurrence_start) + WEATHER_PERIOD


@dataclass(frozen=True)
class WeatherPeriod:
    weather: str
    start: datetime.datetime
    end: datetime.datetime
    map_id: Optional[int] = None


class ScheduledWeatherTimeline:
    """Weather timeline replaying explicit periods.

    Periods without a ``map_id`` apply to every map.
    """

    def __init__(self, periods: Iterable[WeatherPeriod]):
        self._periods = sorted(
            (
                WeatherPeriod(p.weather, normalize_game_time(p.start), normalize_game_time(p.end), p.map_id)
                for p in periods
            ),
            key=lambda p: p.start,
        )

    def next_occurrence_start(
        self, map_id: int, weather: str, from_time: datetime.datetime
    ) -> Optional[datetime.datetime]:
        from_time = normalize_game_time(from_time)
        for period in self._periods:
            if period.weather != weather or period.map_id not in (None, map_id):
                continue
            if period.end > from_time:
                return period.start
        return None

    def occurrence_end(self, occurrence_start: datetime.datetime) -> datetime.datetime:
        occurrence_start = normalize_game_time(occurrence_start)
        for period in self._periods:
            if period.start == occurrence_start:
                return period.end
        return occurrence_start + WEATHER_PERIOD
