#!/usr/bin/env python3
"""
🔐 Thread-safe in-memory alarm store.

Holds the alarm and group collections and hands out immutable snapshots so
view builds never observe a mutation half-way through. Change listeners are
notified with the new snapshot after every successful mutation.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..utils.validation import validate_pattern
from .models import AlarmGroup, AlarmPattern


@dataclass(frozen=True)
class AlarmSnapshot:
    """Consistent view of both collections at one store version."""
    alarms: Tuple[AlarmPattern, ...]
    groups: Tuple[AlarmGroup, ...]
    version: int


SnapshotListener = Callable[[AlarmSnapshot], None]


class AlarmStore:
    """Owns alarm patterns and groups for the lifetime of the process."""

    def __init__(self, alarms: Iterable[AlarmPattern] = (), groups: Iterable[AlarmGroup] = ()):
        self._lock = threading.RLock()
        self._alarms: Dict[str, AlarmPattern] = {}
        self._groups: Dict[str, AlarmGroup] = {}
        self._version = 0
        self._change_listeners: List[SnapshotListener] = []
        self._logger = logging.getLogger("alarm_store")
        for group in groups:
            self._groups[group.key] = group
        for alarm in alarms:
            self._alarms[alarm.key] = validate_pattern(alarm)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_change_listener(self, callback: SnapshotListener) -> None:
        with self._lock:
            self._change_listeners.append(callback)
            self._logger.debug("📢 Added store change listener: %s", getattr(callback, "__name__", callback))

    def remove_change_listener(self, callback: SnapshotListener) -> None:
        with self._lock:
            if callback in self._change_listeners:
                self._change_listeners.remove(callback)

    def _commit(self, operation: str) -> AlarmSnapshot:
        """Bump the version and notify listeners outside the lock."""
        with self._lock:
            self._version += 1
            snapshot = self._snapshot_locked()
            listeners = list(self._change_listeners)
        self._logger.debug("Store %s committed (version %s)", operation, snapshot.version)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as e:
                self._logger.error(f"❌ Error in store change listener {getattr(listener, '__name__', listener)}: {e}")
        return snapshot

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _snapshot_locked(self) -> AlarmSnapshot:
        return AlarmSnapshot(
            alarms=tuple(self._alarms.values()),
            groups=tuple(self._groups.values()),
            version=self._version,
        )

    def snapshot(self) -> AlarmSnapshot:
        with self._lock:
            return self._snapshot_locked()

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def get_alarm(self, key: str) -> Optional[AlarmPattern]:
        with self._lock:
            return self._alarms.get(key)

    def get_group(self, key: str) -> Optional[AlarmGroup]:
        with self._lock:
            return self._groups.get(key)

    def get_registered_alarm(self, item_id: Optional[int], zone_id: Optional[int]) -> Optional[AlarmPattern]:
        """Return the alarm already set for this item in this zone, if any."""
        with self._lock:
            for alarm in self._alarms.values():
                if alarm.item_id == item_id and alarm.zone_id == zone_id:
                    return alarm
        return None

    def has_alarm(self, item_id: Optional[int], zone_id: Optional[int]) -> bool:
        """Only one alarm may exist per item and zone."""
        return self.get_registered_alarm(item_id, zone_id) is not None

    # ------------------------------------------------------------------
    # Alarm mutations
    # ------------------------------------------------------------------

    def add_alarms(self, *alarms: AlarmPattern) -> AlarmSnapshot:
        validated = [validate_pattern(alarm) for alarm in alarms]
        with self._lock:
            for alarm in validated:
                self._alarms[alarm.key] = alarm
        return self._commit("add_alarms")

    def update_alarm(self, alarm: AlarmPattern) -> AlarmSnapshot:
        validate_pattern(alarm)
        with self._lock:
            if alarm.key not in self._alarms:
                raise KeyError(alarm.key)
            self._alarms[alarm.key] = alarm
        return self._commit("update_alarm")

    def remove_alarm(self, key: str) -> bool:
        with self._lock:
            if self._alarms.pop(key, None) is None:
                return False
        self._commit("remove_alarm")
        return True

    def assign_group(self, alarm_key: str, group_key: Optional[str]) -> AlarmPattern:
        with self._lock:
            alarm = self._alarms.get(alarm_key)
            if alarm is None:
                raise KeyError(alarm_key)
            updated = alarm.with_group(group_key)
            self._alarms[alarm_key] = updated
        self._commit("assign_group")
        return updated

    # ------------------------------------------------------------------
    # Group mutations
    # ------------------------------------------------------------------

    def create_group(self, name: str, index: int = 0, *, enabled: bool = True, key: Optional[str] = None) -> AlarmGroup:
        group = AlarmGroup(key=key or uuid.uuid4().hex, name=name, index=index, enabled=enabled)
        with self._lock:
            self._groups[group.key] = group
        self._commit("create_group")
        return group

    def update_group(self, group: AlarmGroup) -> AlarmSnapshot:
        with self._lock:
            if group.key not in self._groups:
                raise KeyError(group.key)
            self._groups[group.key] = group
        return self._commit("update_group")

    def set_group_enabled(self, key: str, enabled: bool) -> AlarmGroup:
        with self._lock:
            group = self._groups.get(key)
            if group is None:
                raise KeyError(key)
            updated = replace(group, enabled=enabled)
            self._groups[key] = updated
        self._commit("set_group_enabled")
        return updated

    def delete_group(self, key: str) -> bool:
        """Delete a group; its alarms keep the dangling key and show as ungrouped."""
        with self._lock:
            if self._groups.pop(key, None) is None:
                return False
        self._commit("delete_group")
        return True

    def add_alarms_and_group(self, alarms: Iterable[AlarmPattern], group_name: str) -> AlarmGroup:
        """Create a group at index 0 and add ``alarms`` as its members in one commit."""
        group = AlarmGroup(key=uuid.uuid4().hex, name=group_name, index=0)
        members = [validate_pattern(alarm.with_group(group.key)) for alarm in alarms]
        with self._lock:
            self._groups[group.key] = group
            for alarm in members:
                self._alarms[alarm.key] = alarm
        self._commit("add_alarms_and_group")
        return group
