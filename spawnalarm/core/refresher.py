"""Event-driven recompute of alarm views.

- Takes a store snapshot and rebuilds page and sidebar views in one pass
- Recomputes on every store change (listener wakes the loop) and on a
  periodic tick
- Publishes each fresh board to listeners; boards are never mutated
"""
from __future__ import annotations

import datetime as _dt
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..constants import MAX_WEATHER_LOOKAHEAD_DAYS
from .aggregation import build_page_view, build_sidebar_view
from .game_time import Clock
from .models import AlarmDisplay, AlarmsPageDisplay
from .store import AlarmSnapshot, AlarmStore
from .weather import WeatherTimeline

_logger = logging.getLogger("alarm_refresher")


@dataclass(frozen=True)
class AlarmBoard:
    """Result of one complete recompute pass."""
    page: AlarmsPageDisplay
    sidebar: tuple[AlarmDisplay, ...]
    game_time: _dt.datetime
    version: int
    reason: str


BoardListener = Callable[[AlarmBoard], None]


def compute_board(
    snapshot: AlarmSnapshot,
    now: _dt.datetime,
    lead_time_minutes: float = 0.0,
    timeline: Optional[WeatherTimeline] = None,
    *,
    lookahead_days: int = MAX_WEATHER_LOOKAHEAD_DAYS,
    reason: str = "manual",
) -> AlarmBoard:
    page = build_page_view(
        snapshot.alarms, snapshot.groups, now, lead_time_minutes, timeline, lookahead_days=lookahead_days
    )
    return AlarmBoard(
        page=page,
        sidebar=tuple(build_sidebar_view(page)),
        game_time=now,
        version=snapshot.version,
        reason=reason,
    )


class AlarmRefresher:
    def __init__(
        self,
        store: AlarmStore,
        clock: Clock,
        timeline: Optional[WeatherTimeline] = None,
        *,
        lead_time_minutes: float = 0.0,
        interval_seconds: float = 60.0,
        lookahead_days: int = MAX_WEATHER_LOOKAHEAD_DAYS,
    ):
        self._store = store
        self._clock = clock
        self._timeline = timeline
        self._lead_time_minutes = lead_time_minutes
        self._interval = max(1.0, float(interval_seconds))
        self._lookahead_days = lookahead_days
        self._thread: Optional[threading.Thread] = None
        self._wake_event = threading.Event()
        self._stop_event = threading.Event()
        self._lock = threading.RLock()
        self._running = False
        self._latest: Optional[AlarmBoard] = None
        self._pending_reason = "tick"
        self._listeners: List[BoardListener] = []

    def add_listener(self, callback: BoardListener) -> None:
        with self._lock:
            self._listeners.append(callback)

    def recompute(self, reason: str = "manual") -> AlarmBoard:
        """Rebuild every view from a fresh snapshot and publish the result."""
        snapshot = self._store.snapshot()
        board = compute_board(
            snapshot,
            self._clock.now(),
            self._lead_time_minutes,
            self._timeline,
            lookahead_days=self._lookahead_days,
            reason=reason,
        )
        with self._lock:
            self._latest = board
            listeners = list(self._listeners)
        _logger.debug(
            "Recomputed alarm board (version %s, reason=%s, failures=%s)",
            board.version, reason, len(board.page.failures),
        )
        for listener in listeners:
            try:
                listener(board)
            except Exception as exc:
                _logger.error("❌ Error in board listener %s: %s", getattr(listener, "__name__", listener), exc)
        return board

    def latest(self) -> AlarmBoard:
        """Return the last published board, computing one if stale or missing."""
        with self._lock:
            board = self._latest
        if board is None or board.version != self._store.version:
            return self.recompute("on_demand")
        return board

    def _on_store_changed(self, _snapshot: AlarmSnapshot) -> None:
        with self._lock:
            self._pending_reason = "store_change"
        self._wake_event.set()

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._stop_event.clear()
            self._wake_event.clear()
            self._store.add_change_listener(self._on_store_changed)
            self._thread = threading.Thread(target=self._run_loop, name="AlarmRefresher", daemon=True)
            self._running = True
            self._thread.start()
            _logger.info("⏰ AlarmRefresher started (interval %.0fs)", self._interval)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop_event.set()
        self._wake_event.set()
        self._store.remove_change_listener(self._on_store_changed)
        thread = self._thread
        if thread is not None:
            thread.join(timeout=timeout)
        with self._lock:
            self._running = False

    def is_running(self) -> bool:
        with self._lock:
            return self._running and self._thread is not None and self._thread.is_alive()

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            self._wake_event.clear()
            with self._lock:
                reason = self._pending_reason
                self._pending_reason = "tick"
            try:
                self.recompute(reason)
            except Exception as exc:
                _logger.warning("Alarm board recompute failed: %s", exc)
            self._wake_event.wait(timeout=self._interval)
