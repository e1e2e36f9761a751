"""
Page and sidebar views: ordering, grouping and per-alarm failure isolation.
"""

import logging

import pytest

from spawnalarm.core.aggregation import build_page_view, build_sidebar_view, create_display_array, sort_alarm_displays
from spawnalarm.core.models import AlarmGroup

from .helpers import game_time, make_pattern


@pytest.fixture
def mixed_patterns():
    # At 09:00: a and b are open, c and d are not
    return [
        make_pattern("d", hours=(12,), duration=1),
        make_pattern("b", hours=(8,), duration=4),
        make_pattern("c", hours=(10,), duration=1),
        make_pattern("a", hours=(8,), duration=2),
    ]


def _keys(displays):
    return [display.alarm.key for display in displays]


class TestSorting:
    def test_spawned_first_then_soonest(self, mixed_patterns):
        displays, failures = create_display_array(mixed_patterns, game_time(9))
        assert failures == []
        assert _keys(displays) == ["a", "b", "c", "d"]

    def test_partition_invariant(self, mixed_patterns):
        displays, _ = create_display_array(mixed_patterns, game_time(9))
        flags = [display.spawned for display in displays]
        assert flags == sorted(flags, reverse=True)
        for spawned in (True, False):
            times = [d.remaining_time for d in displays if d.spawned is spawned]
            assert times == sorted(times)

    def test_ties_keep_input_order(self):
        twins = [make_pattern("first", hours=(14,)), make_pattern("second", hours=(14,))]
        displays, _ = create_display_array(twins, game_time(9))
        assert _keys(displays) == ["first", "second"]
        assert _keys(sort_alarm_displays(reversed(displays))) == ["second", "first"]

    def test_empty_input(self):
        assert create_display_array([], game_time(9)) == ([], [])


class TestPageView:
    def test_groups_ordered_by_index(self):
        groups = [AlarmGroup("late", "Late", index=2), AlarmGroup("early", "Early", index=1)]
        patterns = [
            make_pattern("x", group_id="late"),
            make_pattern("y", group_id="early"),
        ]
        page = build_page_view(patterns, groups, game_time(9))

        assert [g.group.key for g in page.grouped_alarms] == ["early", "late"]
        assert _keys(page.grouped_alarms[0].alarms) == ["y"]
        assert _keys(page.grouped_alarms[1].alarms) == ["x"]
        assert page.no_group == ()

    def test_unknown_group_lands_in_no_group(self):
        patterns = [make_pattern("orphan", group_id="deleted"), make_pattern("free")]
        page = build_page_view(patterns, [AlarmGroup("g", "G")], game_time(9))

        assert sorted(_keys(page.no_group)) == ["free", "orphan"]
        assert page.grouped_alarms[0].alarms == ()

    def test_failures_do_not_abort_batch(self, caplog):
        patterns = [
            make_pattern("ok"),
            make_pattern("broken", hours=()),
            make_pattern("needs-weather", weathers=frozenset({"rain"})),
        ]
        with caplog.at_level(logging.WARNING):
            page = build_page_view(patterns, [], game_time(9))

        assert _keys(page.no_group) == ["ok"]
        codes = {failure.alarm.key: failure.error_code for failure in page.failures}
        assert codes == {"broken": "invalid_pattern", "needs-weather": "scheduling_error"}
        assert "Alarm could not be resolved" in caplog.text

    def test_weather_timeout_reported(self, rain_timeline):
        patterns = [make_pattern("snowy", weathers=frozenset({"snow"}))]
        page = build_page_view(patterns, [], game_time(9), timeline=rain_timeline)
        assert page.failures[0].error_code == "scheduling_timeout"

    def test_to_dict(self):
        page = build_page_view([make_pattern("a", group_id="g")], [AlarmGroup("g", "G")], game_time(9))
        data = page.to_dict()
        assert data["grouped_alarms"][0]["group"]["name"] == "G"
        assert data["grouped_alarms"][0]["alarms"][0]["alarm"]["key"] == "a"
        assert data["no_group"] == []
        assert data["failures"] == []


class TestSidebarView:
    def test_disabled_groups_hidden(self, mixed_patterns):
        groups = [AlarmGroup("on", "On", index=0), AlarmGroup("off", "Off", index=1, enabled=False)]
        patterns = [
            mixed_patterns[0].with_group("off"),
            mixed_patterns[1].with_group("on"),
            mixed_patterns[2],
            mixed_patterns[3].with_group("off"),
        ]
        page = build_page_view(patterns, groups, game_time(9))
        sidebar = build_sidebar_view(page)

        assert _keys(sidebar) == ["b", "c"]
        # The page view still shows the disabled group
        assert _keys(page.grouped_alarms[1].alarms) == ["a", "d"]

    def test_sidebar_resorted_across_groups(self, mixed_patterns):
        groups = [AlarmGroup("g1", "One", index=0), AlarmGroup("g2", "Two", index=1)]
        patterns = [
            mixed_patterns[0].with_group("g1"),
            mixed_patterns[1].with_group("g2"),
            mixed_patterns[2].with_group("g1"),
            mixed_patterns[3],
        ]
        sidebar = build_sidebar_view(build_page_view(patterns, groups, game_time(9)))
        assert _keys(sidebar) == ["a", "b", "c", "d"]
