"""
Alarm domain records shared by the spawn engine and the service layer.

Patterns and groups are immutable snapshots; displays are rebuilt on every
evaluation and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Optional, Tuple


@dataclass(frozen=True)
class AlarmPattern:
    """Recurring daily spawn pattern for one resource node."""

    key: str
    map_id: int
    spawn_hours: Tuple[int, ...]
    duration: int
    weathers: Optional[FrozenSet[str]] = None
    group_id: Optional[str] = None
    item_id: Optional[int] = None
    zone_id: Optional[int] = None
    name: str = ""

    @property
    def weather_gated(self) -> bool:
        return bool(self.weathers)

    def with_group(self, group_id: Optional[str]) -> "AlarmPattern":
        return replace(self, group_id=group_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "map_id": self.map_id,
            "spawn_hours": list(self.spawn_hours),
            "duration": self.duration,
            "weathers": sorted(self.weathers) if self.weathers is not None else None,
            "group_id": self.group_id,
            "item_id": self.item_id,
            "zone_id": self.zone_id,
            "name": self.name,
        }


@dataclass(frozen=True)
class AlarmGroup:
    """Named collection of alarms; ``index`` drives display order."""

    key: str
    name: str
    index: int = 0
    enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "name": self.name, "index": self.index, "enabled": self.enabled}


@dataclass(frozen=True)
class NextSpawn:
    """Next spawn window; ``despawn_hour`` may be 24 for end of day."""

    hour: int
    day_offset: int
    despawn_hour: int

    def to_dict(self) -> Dict[str, int]:
        return {"hour": self.hour, "day_offset": self.day_offset, "despawn_hour": self.despawn_hour}


@dataclass(frozen=True)
class AlarmDisplay:
    alarm: AlarmPattern
    spawned: bool
    played: bool
    remaining_time: float
    next_spawn: NextSpawn

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alarm": self.alarm.to_dict(),
            "spawned": self.spawned,
            "played": self.played,
            "remaining_time": round(self.remaining_time, 3),
            "next_spawn": self.next_spawn.to_dict(),
        }


@dataclass(frozen=True)
class AlarmFailure:
    """A pattern that could not be resolved during a view build."""

    alarm: AlarmPattern
    error_code: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"alarm_key": self.alarm.key, "error_code": self.error_code, "message": self.message}


@dataclass(frozen=True)
class AlarmGroupDisplay:
    group: AlarmGroup
    alarms: Tuple[AlarmDisplay, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"group": self.group.to_dict(), "alarms": [a.to_dict() for a in self.alarms]}


@dataclass(frozen=True)
class AlarmsPageDisplay:
    """Grouped view of every alarm plus the ungrouped remainder."""

    grouped_alarms: Tuple[AlarmGroupDisplay, ...] = ()
    no_group: Tuple[AlarmDisplay, ...] = ()
    failures: Tuple[AlarmFailure, ...] = field(default=())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "grouped_alarms": [g.to_dict() for g in self.grouped_alarms],
            "no_group": [a.to_dict() for a in self.no_group],
            "failures": [f.to_dict() for f in self.failures],
        }
