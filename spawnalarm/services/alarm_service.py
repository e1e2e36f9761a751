"""
⏰ Alarm Service - Business Logic for Alarm Management
=====================================================

Builds alarm views against the game clock and manages the in-memory alarm
and group collections.
"""

from typing import Any, Dict, Iterable, Optional

from . import BaseService, ServiceResult
from ..core.display import build_display
from ..core.errors import SchedulingError
from ..core.game_time import Clock, format_game_time
from ..core.refresher import AlarmBoard, AlarmRefresher
from ..core.store import AlarmStore
from ..core.weather import WeatherTimeline
from ..utils.validation import ValidationError, parse_alarm_payload, parse_group_payload


class AlarmService(BaseService):
    """Service for alarm views and alarm/group management."""

    def __init__(
        self,
        store: AlarmStore,
        clock: Clock,
        timeline: Optional[WeatherTimeline] = None,
        *,
        lead_time_minutes: float = 0.0,
        lookahead_days: int = 14,
        refresh_interval_seconds: float = 60.0,
    ):
        super().__init__("alarm")
        self.store = store
        self.clock = clock
        self.timeline = timeline
        self.lead_time_minutes = lead_time_minutes
        self.lookahead_days = lookahead_days
        self.refresher = AlarmRefresher(
            store,
            clock,
            timeline,
            lead_time_minutes=lead_time_minutes,
            interval_seconds=refresh_interval_seconds,
            lookahead_days=lookahead_days,
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def _current_board(self) -> AlarmBoard:
        if self.refresher.is_running():
            return self.refresher.latest()
        return self.refresher.recompute("request")

    def _board_meta(self, board: AlarmBoard) -> Dict[str, Any]:
        return {
            "game_time": board.game_time.isoformat(),
            "game_clock": format_game_time(board.game_time),
            "version": board.version,
        }

    def get_page_view(self) -> ServiceResult:
        """Grouped alarm view with failures listed separately."""
        try:
            board = self._current_board()
            return self._success_result(data={**board.page.to_dict(), **self._board_meta(board)})
        except Exception as e:
            return self._handle_error(e, "get_page_view")

    def get_sidebar_view(self) -> ServiceResult:
        """Flat, sorted view of ungrouped alarms and enabled groups."""
        try:
            board = self._current_board()
            return self._success_result(data={
                "alarms": [display.to_dict() for display in board.sidebar],
                **self._board_meta(board),
            })
        except Exception as e:
            return self._handle_error(e, "get_sidebar_view")

    def get_alarm_display(self, key: str) -> ServiceResult:
        alarm = self.store.get_alarm(key)
        if alarm is None:
            return self._not_found("Alarm", key)
        try:
            display = build_display(
                alarm, self.clock.now(), self.lead_time_minutes, self.timeline,
                lookahead_days=self.lookahead_days,
            )
        except SchedulingError as e:
            return self._scheduling_failed(e, key)
        except Exception as e:
            return self._handle_error(e, "get_alarm_display")
        return self._success_result(data=display.to_dict())

    # ------------------------------------------------------------------
    # Alarm management
    # ------------------------------------------------------------------

    def add_alarm(self, payload: Dict[str, Any]) -> ServiceResult:
        """Validate and add one alarm; one alarm per item and zone."""
        try:
            alarm = parse_alarm_payload(payload)
            if alarm.item_id is not None and self.store.has_alarm(alarm.item_id, alarm.zone_id):
                return self._error_result(
                    "An alarm already exists for this item in this zone",
                    error_code="alarm_exists",
                )
            self.store.add_alarms(alarm)
            self.logger.info("Alarm added: key=%s map=%s hours=%s", alarm.key, alarm.map_id, list(alarm.spawn_hours))
            return self._success_result(data=alarm.to_dict(), message="Alarm added")
        except ValidationError as e:
            return self._invalid_input(e)
        except Exception as e:
            return self._handle_error(e, "add_alarm")

    def add_alarms_and_group(self, payloads: Iterable[Dict[str, Any]], group_name: str) -> ServiceResult:
        try:
            alarms = [parse_alarm_payload(payload) for payload in payloads]
            if not group_name or not group_name.strip():
                return self._error_result("Group name is required", error_code="name")
            group = self.store.add_alarms_and_group(alarms, group_name.strip())
            return self._success_result(
                data={"group": group.to_dict(), "alarms": [a.key for a in alarms]},
                message="Alarms added to new group",
            )
        except ValidationError as e:
            return self._invalid_input(e)
        except Exception as e:
            return self._handle_error(e, "add_alarms_and_group")

    def update_alarm(self, key: str, payload: Dict[str, Any]) -> ServiceResult:
        try:
            alarm = parse_alarm_payload({**payload, "key": key})
            self.store.update_alarm(alarm)
            return self._success_result(data=alarm.to_dict(), message="Alarm updated")
        except KeyError:
            return self._not_found("Alarm", key)
        except ValidationError as e:
            return self._invalid_input(e)
        except Exception as e:
            return self._handle_error(e, "update_alarm")

    def remove_alarm(self, key: str) -> ServiceResult:
        if not self.store.remove_alarm(key):
            return self._not_found("Alarm", key)
        return self._success_result(message="Alarm removed")

    def assign_group(self, alarm_key: str, group_key: Optional[str]) -> ServiceResult:
        try:
            alarm = self.store.assign_group(alarm_key, group_key)
        except KeyError:
            return self._not_found("Alarm", alarm_key)
        return self._success_result(data=alarm.to_dict(), message="Alarm group assigned")

    def has_alarm(self, item_id: Optional[int], zone_id: Optional[int]) -> ServiceResult:
        return self._success_result(data={"exists": self.store.has_alarm(item_id, zone_id)})

    # ------------------------------------------------------------------
    # Group management
    # ------------------------------------------------------------------

    def create_group(self, payload: Dict[str, Any]) -> ServiceResult:
        try:
            group = parse_group_payload(payload)
            created = self.store.create_group(group.name, group.index, enabled=group.enabled, key=group.key)
            return self._success_result(data=created.to_dict(), message="Group created")
        except ValidationError as e:
            return self._invalid_input(e)
        except Exception as e:
            return self._handle_error(e, "create_group")

    def update_group(self, key: str, payload: Dict[str, Any]) -> ServiceResult:
        try:
            group = parse_group_payload({**payload, "key": key})
            self.store.update_group(group)
            return self._success_result(data=group.to_dict(), message="Group updated")
        except KeyError:
            return self._not_found("Group", key)
        except ValidationError as e:
            return self._invalid_input(e)
        except Exception as e:
            return self._handle_error(e, "update_group")

    def delete_group(self, key: str) -> ServiceResult:
        if not self.store.delete_group(key):
            return self._not_found("Group", key)
        return self._success_result(message="Group deleted")

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def health_check(self) -> ServiceResult:
        """Alarm service health: store readable, views computable."""
        base_health = super().health_check()
        if not base_health.success:
            return base_health
        try:
            board = self._current_board()
        except Exception as e:
            return self._handle_error(e, "health_check")

        failures = len(board.page.failures)
        health_data = {
            "service": "alarm",
            "status": "healthy" if failures == 0 else "degraded",
            "components": {
                "store": "ok",
                "weather_timeline": "ok" if self.timeline is not None else "missing",
                "refresher": "running" if self.refresher.is_running() else "on_demand",
            },
            "alarms": len(self.store.snapshot().alarms),
            "failures": failures,
        }
        return self._success_result(data=health_data, message="Alarm service health check completed")
