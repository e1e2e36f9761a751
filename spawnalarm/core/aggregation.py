#!/usr/bin/env python3
"""
Grouped and flattened alarm views.

Both views are rebuilt from scratch on every call; a pattern that fails to
resolve is reported on the page view and skipped, never aborting the batch.
"""

from __future__ import annotations

import datetime
import logging
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..constants import MAX_WEATHER_LOOKAHEAD_DAYS
from ..utils.logger import log_structured
from .display import build_display
from .errors import SchedulingError
from .models import (AlarmDisplay, AlarmFailure, AlarmGroup, AlarmGroupDisplay,
                     AlarmPattern, AlarmsPageDisplay)
from .weather import WeatherTimeline

_logger = logging.getLogger("alarm_views")

# Ordered sort keys: spawned alarms first, then soonest boundary first
SORT_KEYS: Tuple[Callable[[AlarmDisplay], object], ...] = (
    lambda display: not display.spawned,
    lambda display: display.remaining_time,
)


def sort_alarm_displays(displays: Iterable[AlarmDisplay]) -> List[AlarmDisplay]:
    """Return displays in presentation order; ties keep input order."""
    return sorted(displays, key=lambda display: tuple(key(display) for key in SORT_KEYS))


def create_display_array(
    patterns: Iterable[AlarmPattern],
    now: datetime.datetime,
    lead_time_minutes: float = 0.0,
    timeline: Optional[WeatherTimeline] = None,
    *,
    lookahead_days: int = MAX_WEATHER_LOOKAHEAD_DAYS,
) -> Tuple[List[AlarmDisplay], List[AlarmFailure]]:
    """Build and sort displays for ``patterns``, collecting per-alarm failures."""
    displays: List[AlarmDisplay] = []
    failures: List[AlarmFailure] = []
    for pattern in patterns:
        try:
            displays.append(
                build_display(pattern, now, lead_time_minutes, timeline, lookahead_days=lookahead_days)
            )
        except SchedulingError as exc:
            error_code = getattr(exc, "error_code", "scheduling_error")
            log_structured(_logger, logging.WARNING, "Alarm could not be resolved",
                           alarm_key=pattern.key, error_code=error_code, error=str(exc))
            failures.append(AlarmFailure(alarm=pattern, error_code=error_code, message=str(exc)))
    return sort_alarm_displays(displays), failures


def build_page_view(
    patterns: Sequence[AlarmPattern],
    groups: Sequence[AlarmGroup],
    now: datetime.datetime,
    lead_time_minutes: float = 0.0,
    timeline: Optional[WeatherTimeline] = None,
    *,
    lookahead_days: int = MAX_WEATHER_LOOKAHEAD_DAYS,
) -> AlarmsPageDisplay:
    """Group alarm displays by owning group, groups ordered by ``index``.

    Alarms whose ``group_id`` matches no known group land in ``no_group``.
    """
    patterns = tuple(patterns)
    ordered_groups = sorted(groups, key=lambda group: group.index)
    known_keys = {group.key for group in ordered_groups}
    failures: List[AlarmFailure] = []

    grouped: List[AlarmGroupDisplay] = []
    for group in ordered_groups:
        members = [p for p in patterns if p.group_id is not None and p.group_id == group.key]
        displays, group_failures = create_display_array(
            members, now, lead_time_minutes, timeline, lookahead_days=lookahead_days
        )
        failures.extend(group_failures)
        grouped.append(AlarmGroupDisplay(group=group, alarms=tuple(displays)))

    orphans = [p for p in patterns if p.group_id not in known_keys]
    no_group, orphan_failures = create_display_array(
        orphans, now, lead_time_minutes, timeline, lookahead_days=lookahead_days
    )
    failures.extend(orphan_failures)

    return AlarmsPageDisplay(grouped_alarms=tuple(grouped), no_group=tuple(no_group), failures=tuple(failures))


def build_sidebar_view(page_view: AlarmsPageDisplay) -> List[AlarmDisplay]:
    """Flatten ungrouped alarms and members of enabled groups, re-sorted."""
    flattened = list(page_view.no_group)
    for grouped in page_view.grouped_alarms:
        if grouped.group.enabled:
            flattened.extend(grouped.alarms)
    return sort_alarm_displays(flattened)
