"""
Spawn window resolution: slot ordering, open-slot detection and the
midnight wrap of the 24h dial.
"""

import pytest

from spawnalarm.core.errors import InvalidPattern, SchedulingError
from spawnalarm.core.game_time import hour_in_window, minutes_before
from spawnalarm.core.models import NextSpawn
from spawnalarm.core.spawn import is_slot_open, is_spawned, resolve_next_spawn, sort_spawn_hours

from .helpers import game_time, make_pattern


class TestMinutesBefore:
    def test_target_later_today(self):
        assert minutes_before(game_time(9), 11) == 120

    def test_target_behind_wraps_to_tomorrow(self):
        assert minutes_before(game_time(23), 8) == 540

    def test_exact_match_is_zero(self):
        assert minutes_before(game_time(8), 8) == 0

    def test_hour_24_is_midnight(self):
        assert minutes_before(game_time(22, 30), 24) == 90

    @pytest.mark.parametrize("hour", range(24))
    def test_result_stays_within_one_day(self, hour):
        value = minutes_before(game_time(13, 45), hour)
        assert 0 <= value < 1440


class TestHourInWindow:
    def test_plain_window(self):
        assert hour_in_window(10, 10, 12)
        assert hour_in_window(11, 10, 12)
        assert not hour_in_window(12, 10, 12)
        assert not hour_in_window(9, 10, 12)

    def test_window_crossing_midnight(self):
        assert hour_in_window(23, 23, 1)
        assert hour_in_window(0, 23, 1)
        assert not hour_in_window(1, 23, 1)
        assert not hour_in_window(22, 23, 1)

    def test_zero_reads_as_end_of_day(self):
        assert hour_in_window(22, 22, 0)
        assert hour_in_window(23, 22, 0)
        assert not hour_in_window(21, 22, 0)
        assert hour_in_window(1, 0, 2)


class TestSlotOrdering:
    def test_open_slot_detected(self):
        assert is_slot_open(game_time(9), 8, 2)
        assert not is_slot_open(game_time(10), 8, 2)
        assert not is_slot_open(game_time(7), 8, 2)

    def test_open_slot_ranks_first(self):
        pattern = make_pattern(hours=(20, 8, 14))
        assert sort_spawn_hours(pattern, game_time(9)) == [8, 14, 20]

    def test_closed_slots_sorted_by_distance(self):
        pattern = make_pattern(hours=(8, 20))
        assert sort_spawn_hours(pattern, game_time(23)) == [8, 20]
        assert sort_spawn_hours(pattern, game_time(12)) == [20, 8]


class TestResolveNextSpawn:
    def test_open_window_resolves_to_current_slot(self):
        pattern = make_pattern(hours=(8, 20), duration=2)
        next_spawn = resolve_next_spawn(pattern, game_time(9))

        assert next_spawn == NextSpawn(hour=8, day_offset=0, despawn_hour=10)
        assert is_spawned(next_spawn, game_time(9))

    def test_evening_slot_open_at_21(self):
        pattern = make_pattern(hours=(8, 20), duration=2)
        next_spawn = resolve_next_spawn(pattern, game_time(21))

        assert next_spawn == NextSpawn(hour=20, day_offset=0, despawn_hour=22)
        assert is_spawned(next_spawn, game_time(21))

    def test_all_closed_picks_soonest_opening(self):
        pattern = make_pattern(hours=(8, 20), duration=2)
        next_spawn = resolve_next_spawn(pattern, game_time(23))

        assert next_spawn == NextSpawn(hour=8, day_offset=0, despawn_hour=10)
        assert not is_spawned(next_spawn, game_time(23))

    def test_window_crossing_midnight_is_spawned(self):
        pattern = make_pattern(hours=(23,), duration=2)
        next_spawn = resolve_next_spawn(pattern, game_time(0, 30))

        assert next_spawn == NextSpawn(hour=23, day_offset=0, despawn_hour=1)
        assert is_spawned(next_spawn, game_time(0, 30))

    def test_naive_timestamps_read_as_utc(self):
        pattern = make_pattern(hours=(8,), duration=2)
        naive = game_time(9).replace(tzinfo=None)
        assert resolve_next_spawn(pattern, naive) == resolve_next_spawn(pattern, game_time(9))

    @pytest.mark.parametrize("hour", range(24))
    def test_result_is_one_of_the_spawn_hours(self, hour):
        pattern = make_pattern(hours=(3, 11, 19), duration=3)
        next_spawn = resolve_next_spawn(pattern, game_time(hour, 15))

        assert next_spawn.hour in pattern.spawn_hours
        assert next_spawn.day_offset == 0
        assert next_spawn.despawn_hour == (next_spawn.hour + 3) % 24

    def test_spawned_when_inside_window(self):
        pattern = make_pattern(hours=(6,), duration=4)
        for hour in (6, 7, 8, 9):
            assert is_spawned(resolve_next_spawn(pattern, game_time(hour)), game_time(hour))
        for hour in (5, 10, 18):
            assert not is_spawned(resolve_next_spawn(pattern, game_time(hour)), game_time(hour))

    def test_future_day_is_never_spawned(self):
        assert not is_spawned(NextSpawn(hour=9, day_offset=1, despawn_hour=11), game_time(10))


class TestPatternRejection:
    def test_empty_spawn_hours(self):
        with pytest.raises(InvalidPattern) as exc_info:
            resolve_next_spawn(make_pattern(key="empty", hours=()), game_time(9))
        assert exc_info.value.alarm_key == "empty"
        assert exc_info.value.field_name == "spawn_hours"

    def test_hour_out_of_range(self):
        with pytest.raises(InvalidPattern):
            resolve_next_spawn(make_pattern(hours=(24,)), game_time(9))

    @pytest.mark.parametrize("duration", [0, 24, -1])
    def test_duration_out_of_range(self, duration):
        with pytest.raises(InvalidPattern) as exc_info:
            resolve_next_spawn(make_pattern(duration=duration), game_time(9))
        assert exc_info.value.error_code == "invalid_pattern"

    def test_weather_gated_without_timeline(self):
        pattern = make_pattern(weathers=frozenset({"rain"}))
        with pytest.raises(SchedulingError) as exc_info:
            resolve_next_spawn(pattern, game_time(9))
        assert exc_info.value.error_code == "scheduling_error"
