"""Shared pytest fixtures for the SpawnAlarm test suite."""

from __future__ import annotations

import pytest

from spawnalarm.app import create_app
from spawnalarm.config_schema import SpawnAlarmConfig
from spawnalarm.core.game_time import FixedClock
from spawnalarm.core.store import AlarmStore
from spawnalarm.core.weather import ScheduledWeatherTimeline, WeatherPeriod

from .helpers import game_time


@pytest.fixture
def rain_timeline():
    """Rain from 11:00 to 13:00 on the reference day."""
    return ScheduledWeatherTimeline([WeatherPeriod("rain", game_time(11), game_time(13))])


@pytest.fixture
def store():
    return AlarmStore()


@pytest.fixture
def clock():
    return FixedClock(game_time(9))


@pytest.fixture
def app(store, clock, rain_timeline):
    flask_app = create_app(
        store=store,
        clock=clock,
        timeline=rain_timeline,
        config=SpawnAlarmConfig().to_dict(),
    )
    flask_app.config.update({"TESTING": True})
    return flask_app


@pytest.fixture
def client(app):
    """Provide a fresh Flask test client for each test."""
    with app.test_client() as test_client:
        yield test_client
