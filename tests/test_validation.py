"""
Payload validation for alarms and groups.
"""

import pytest

from spawnalarm.core.errors import InvalidPattern
from spawnalarm.utils.validation import (InputValidator, ValidationError, parse_alarm_payload,
                                         parse_group_payload, validate_pattern)

from .helpers import make_pattern


class TestInputValidator:
    @pytest.mark.parametrize("value,expected", [(0, 0), ("23", 23), (12, 12), (8.0, 8)])
    def test_valid_hours(self, value, expected):
        result = InputValidator.validate_hour(value)
        assert result.is_valid
        assert result.value == expected

    @pytest.mark.parametrize("value", [24, -1, "noon", None, True, 5.7, "5.7"])
    def test_invalid_hours(self, value):
        assert not InputValidator.validate_hour(value).is_valid

    def test_spawn_hours_deduplicated(self):
        result = InputValidator.validate_spawn_hours([8, 20, 8])
        assert result.value == (8, 20)

    def test_spawn_hours_must_be_a_list(self):
        assert not InputValidator.validate_spawn_hours("8,20").is_valid
        assert not InputValidator.validate_spawn_hours([]).is_valid

    def test_weathers_optional_but_not_empty(self):
        assert InputValidator.validate_weathers(None).value is None
        assert not InputValidator.validate_weathers([]).is_valid
        assert InputValidator.validate_weathers([" rain ", "fog"]).value == frozenset({"rain", "fog"})

    def test_fractional_duration_rejected(self):
        assert not InputValidator.validate_duration(2.5).is_valid
        assert InputValidator.validate_duration(3.0).value == 3

    def test_boolean_strings(self):
        assert InputValidator.validate_boolean("off").value is False
        assert InputValidator.validate_boolean("Yes").value is True
        assert InputValidator.validate_boolean(None, default=True).value is True


class TestPayloadParsing:
    def test_alarm_payload(self):
        alarm = parse_alarm_payload({
            "key": "mithril",
            "map_id": "4",
            "spawn_hours": [20, 8],
            "duration": 2,
            "weathers": ["rain"],
            "item_id": 12,
            "zone_id": 3,
            "name": " Mithril Ore ",
        })
        assert alarm.key == "mithril"
        assert alarm.map_id == 4
        assert alarm.spawn_hours == (20, 8)
        assert alarm.weathers == frozenset({"rain"})
        assert alarm.name == "Mithril Ore"
        assert alarm.group_id is None

    def test_alarm_key_generated(self):
        alarm = parse_alarm_payload({"map_id": 1, "spawn_hours": [8], "duration": 2})
        assert len(alarm.key) == 32

    @pytest.mark.parametrize("field,value", [
        ("spawn_hours", [25]),
        ("duration", 24),
        ("weathers", []),
        ("map_id", None),
        ("map_id", 1.5),
        ("spawn_hours", [8.5]),
    ])
    def test_alarm_payload_rejected(self, field, value):
        payload = {"map_id": 1, "spawn_hours": [8], "duration": 2, field: value}
        with pytest.raises(ValidationError) as exc_info:
            parse_alarm_payload(payload)
        assert exc_info.value.field_name == field
        assert isinstance(exc_info.value, InvalidPattern)

    def test_group_payload_defaults(self):
        group = parse_group_payload({"name": "Botany"})
        assert group.index == 0
        assert group.enabled is True

    def test_group_requires_name(self):
        with pytest.raises(ValidationError):
            parse_group_payload({"index": 1})


def test_validate_pattern_keeps_alarm_key():
    with pytest.raises(InvalidPattern) as exc_info:
        validate_pattern(make_pattern("broken", hours=(30,)))
    assert exc_info.value.alarm_key == "broken"


def test_validate_pattern_rejects_fractional_hours():
    with pytest.raises(InvalidPattern) as exc_info:
        validate_pattern(make_pattern("half", hours=(10.5,)))
    assert exc_info.value.field_name == "spawn_hours"
