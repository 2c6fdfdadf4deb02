"""
tests/conftest.py - Django setup and shared weather fixtures
"""

import os
from datetime import datetime, timedelta, timezone

import django
import pytest

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'comfortwindow.settings')
django.setup()

from weather.timeline import ConditionSample, Timeline  # noqa: E402


def hour_stamp(day_start: datetime, hour: int) -> str:
    return (day_start + timedelta(hours=hour)).strftime('%Y-%m-%dT%H:%M:%SZ')


def make_payload(day_start: datetime, temps_c: dict, aqi: dict = None) -> dict:
    """WeatherKit-shaped payload with one hour per entry of ``temps_c``."""
    hours = [
        {'forecastStart': hour_stamp(day_start, hour), 'temperature': temp}
        for hour, temp in sorted(temps_c.items())
    ]
    air = [
        {'forecastStart': hour_stamp(day_start, hour), 'airQualityIndex': value}
        for hour, value in sorted((aqi or {}).items())
    ]
    return {
        'forecastHourly': {'hours': hours},
        'airQualityForecast': {'hours': air},
    }


def make_timeline(count: int, step: int = 1, start: datetime = None, **fields) -> Timeline:
    start = start or datetime(2025, 8, 18, 0, 0, tzinfo=timezone.utc)
    samples = tuple(
        ConditionSample(instant=start + timedelta(minutes=i * step), **fields)
        for i in range(count)
    )
    return Timeline(samples=samples, step_minutes=step)


@pytest.fixture
def day_start():
    return datetime(2025, 8, 18, tzinfo=timezone.utc)


@pytest.fixture
def noon(day_start):
    return day_start + timedelta(hours=12)


class FakeClient:
    """Stands in for WeatherKitClient; records each fetch."""

    def __init__(self, payload):
        self.payload = payload
        self.calls = []

    def fetch(self, lat, lon, time_zone):
        self.calls.append((lat, lon, time_zone))
        return self.payload
