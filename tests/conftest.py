"""Shared fixtures for the weather TUI tests."""

import copy

import pytest

from shared import Coordinate


FORECAST = {
    "latitude": 39.375,
    "longitude": -0.375,
    "timezone": "Europe/Madrid",
    "current_weather": {
        "temperature": 21.4,
        "windspeed": 11.2,
        "winddirection": 270,
        "weathercode": 61,
        "is_day": 1,
        "time": "2023-06-01T12:00",
    },
    "daily": {
        "time": ["2023-06-01", "2023-06-02", "2023-06-03"],
        "weathercode": [61, 96, 2],
        "temperature_2m_max": [24.1, 22.8, 26.0],
        "temperature_2m_min": [15.2, 14.9, 16.3],
        "sunrise": ["2023-06-01T06:35", "2023-06-02T06:34", "2023-06-03T06:34"],
        "sunset": ["2023-06-01T21:17", "2023-06-02T21:18", "2023-06-03T21:18"],
        "uv_index_max": [7.35, 6.9, 8.1],
    },
}


@pytest.fixture
def coordinate():
    return Coordinate(latitude="39.36667", longitude="-0.41667", timezone="Europe/Madrid")


@pytest.fixture
def forecast():
    """A canned forecast response; each test gets its own copy."""
    return copy.deepcopy(FORECAST)
