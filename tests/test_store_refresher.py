"""
Alarm store snapshots and the event-driven board refresher.
"""

import threading

import pytest

from spawnalarm.core.errors import InvalidPattern
from spawnalarm.core.game_time import FixedClock
from spawnalarm.core.refresher import AlarmRefresher, compute_board
from spawnalarm.core.store import AlarmStore

from .helpers import game_time, make_pattern


class TestAlarmStore:
    def test_mutations_bump_version(self, store):
        assert store.version == 0
        store.add_alarms(make_pattern("a"))
        group = store.create_group("Ores")
        store.assign_group("a", group.key)
        assert store.version == 3
        assert store.get_alarm("a").group_id == group.key

    def test_snapshot_is_immutable_copy(self, store):
        store.add_alarms(make_pattern("a"))
        before = store.snapshot()
        store.add_alarms(make_pattern("b"))

        assert [a.key for a in before.alarms] == ["a"]
        assert [a.key for a in store.snapshot().alarms] == ["a", "b"]

    def test_invalid_pattern_rejected(self, store):
        with pytest.raises(InvalidPattern):
            store.add_alarms(make_pattern("bad", duration=0))
        assert store.version == 0

    def test_listeners_receive_snapshot(self, store):
        seen = []
        store.add_change_listener(seen.append)
        store.add_alarms(make_pattern("a"))
        assert seen[-1].version == 1
        assert seen[-1].alarms[0].key == "a"

    def test_failing_listener_does_not_block_commit(self, store):
        def broken(_snapshot):
            raise RuntimeError("boom")

        store.add_change_listener(broken)
        store.add_alarms(make_pattern("a"))
        assert store.get_alarm("a") is not None

    def test_one_alarm_per_item_and_zone(self, store):
        store.add_alarms(make_pattern("a", item_id=5, zone_id=9))
        assert store.has_alarm(5, 9)
        assert not store.has_alarm(5, 10)
        assert store.get_registered_alarm(5, 9).key == "a"

    def test_update_and_remove(self, store):
        store.add_alarms(make_pattern("a"))
        store.update_alarm(make_pattern("a", hours=(3,)))
        assert store.get_alarm("a").spawn_hours == (3,)

        with pytest.raises(KeyError):
            store.update_alarm(make_pattern("missing"))

        assert store.remove_alarm("a") is True
        assert store.remove_alarm("a") is False

    def test_group_lifecycle(self, store):
        group = store.create_group("Herbs", 2, key="herbs")
        assert store.get_group("herbs") == group

        assert store.set_group_enabled("herbs", False).enabled is False
        assert store.delete_group("herbs") is True
        assert store.delete_group("herbs") is False
        with pytest.raises(KeyError):
            store.set_group_enabled("herbs", True)

    def test_add_alarms_and_group_single_commit(self, store):
        group = store.add_alarms_and_group([make_pattern("a"), make_pattern("b")], "Route")

        assert store.version == 1
        assert group.index == 0
        assert {a.group_id for a in store.snapshot().alarms} == {group.key}


class TestRefresher:
    def test_compute_board(self, store):
        store.add_alarms(make_pattern("a", hours=(8,)), make_pattern("b", hours=(14,)))
        board = compute_board(store.snapshot(), game_time(9), reason="test")

        assert board.version == 1
        assert board.reason == "test"
        assert [d.alarm.key for d in board.sidebar] == ["a", "b"]
        assert board.game_time == game_time(9)

    def test_latest_recomputes_after_store_change(self, store):
        refresher = AlarmRefresher(store, FixedClock(game_time(9)))
        first = refresher.latest()
        assert refresher.latest() is first

        store.add_alarms(make_pattern("a"))
        second = refresher.latest()
        assert second is not first
        assert second.version == 1
        assert len(second.sidebar) == 1

    def test_listener_errors_are_contained(self, store):
        refresher = AlarmRefresher(store, FixedClock(game_time(9)))
        received = []

        def broken(_board):
            raise RuntimeError("boom")

        refresher.add_listener(broken)
        refresher.add_listener(received.append)
        board = refresher.recompute("manual")
        assert received == [board]

    def test_background_loop_follows_store(self):
        store = AlarmStore()
        refresher = AlarmRefresher(store, FixedClock(game_time(9)), interval_seconds=60)
        updated = threading.Event()

        def on_board(board):
            if board.version >= 1:
                updated.set()

        refresher.add_listener(on_board)
        refresher.start()
        try:
            assert refresher.is_running()
            store.add_alarms(make_pattern("a"))
            assert updated.wait(timeout=5)
            assert refresher.latest().version == 1
        finally:
            refresher.stop()
        assert not refresher.is_running()

    def test_restart_after_stop(self):
        store = AlarmStore()
        refresher = AlarmRefresher(store, FixedClock(game_time(9)), interval_seconds=60)
        refresher.start()
        refresher.stop()
        assert not refresher.is_running()

        updated = threading.Event()
        refresher.add_listener(lambda board: board.version >= 1 and updated.set())
        refresher.start()
        try:
            assert refresher.is_running()
            store.add_alarms(make_pattern("a"))
            assert updated.wait(timeout=5)
        finally:
            refresher.stop()
        assert not refresher.is_running()
