"""Shared data structures for the weather terminal client.

This module defines the dataclasses that describe the requested location,
the forecast query sent to Open-Meteo, and the typed views decoded from the
loosely-typed JSON response.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from catalog import describe


logger: logging.Logger = logging.getLogger(__name__)


HOURLY_VARIABLES: Tuple[str, ...] = (
    "temperature_2m",
    "relativehumidity_2m",
    "dewpoint_2m",
    "apparent_temperature",
    "precipitation_probability",
    "weathercode",
    "pressure_msl",
    "surface_pressure",
    "cloudcover",
    "visibility",
    "evapotranspiration",
    "windspeed_10m",
)

DAILY_VARIABLES: Tuple[str, ...] = (
    "weathercode",
    "temperature_2m_max",
    "temperature_2m_min",
    "sunrise",
    "sunset",
    "uv_index_max",
)


@dataclass(frozen=True)
class Coordinate:
    """Geographic location the client is pinned to.

    Latitude and longitude are kept as the strings the user typed so they
    reach the request exactly as given.

    Attributes:
        latitude: Latitude in decimal degrees (positive for North).
        longitude: Longitude in decimal degrees (negative for West).
        timezone: IANA zone name used for daily aggregation and timestamps.
    """
    latitude: str
    longitude: str
    timezone: str


@dataclass(frozen=True)
class WeatherQuery:
    """Forecast request for a coordinate.

    The requested variables are fixed, so a query is fully determined by
    its coordinate.
    """
    coordinate: Coordinate

    def to_params(self) -> List[Tuple[str, str]]:
        """Build the ordered query parameters for the forecast endpoint.

        Returns:
            A list of (name, value) pairs suitable for ``requests`` params.
        """
        return [
            ("latitude", self.coordinate.latitude),
            ("longitude", self.coordinate.longitude),
            ("hourly", ",".join(HOURLY_VARIABLES)),
            ("daily", ",".join(DAILY_VARIABLES)),
            ("current_weather", "true"),
            ("timezone", self.coordinate.timezone),
        ]


def _as_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected number, got {value!r}")
    return float(value)


def _as_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"expected integer, got {value!r}")
        return int(value)
    return value


@dataclass
class CurrentWeather:
    """Current conditions reported under ``current_weather``.

    Attributes:
        temperature: Air temperature at 2 m in degrees Celsius.
        windspeed: Wind speed at 10 m in km/h.
        winddirection: Wind direction in integer degrees.
        weathercode: WMO weather interpretation code.
        is_day: 1 during daylight, 0 at night.
    """
    temperature: float
    windspeed: float
    winddirection: int
    weathercode: int
    is_day: int

    @classmethod
    def from_dict(cls, data: Any) -> Optional["CurrentWeather"]:
        """Decode the ``current_weather`` object.

        Args:
            data: The raw sub-object taken from the response.

        Returns:
            A CurrentWeather, or None if the object is missing, incomplete
            or holds a value of the wrong type.
        """
        if not isinstance(data, dict):
            return None
        try:
            return cls(
                temperature=_as_float(data["temperature"]),
                windspeed=_as_float(data["windspeed"]),
                winddirection=_as_int(data["winddirection"]),
                weathercode=_as_int(data["weathercode"]),
                is_day=_as_int(data["is_day"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.debug("Malformed current_weather object: %s", e)
            return None

    def icon_and_description(self) -> Tuple[str, str]:
        """Return the icon and description for this weather code."""
        return describe(self.weathercode)


@dataclass
class DailyForecastEntry:
    """One day of the daily forecast.

    Attributes:
        date: Calendar day the entry covers.
        temperature_min: Minimum air temperature in degrees Celsius.
        temperature_max: Maximum air temperature in degrees Celsius.
        weathercode: Most severe WMO weather code of the day.
        sunrise: Local sunrise time.
        sunset: Local sunset time.
        uv_index_max: Daily maximum UV index.
        precipitation_probability_max: Daily maximum precipitation
            probability in percent, or None when the provider omits it.
    """
    date: date
    temperature_min: float
    temperature_max: float
    weathercode: int
    sunrise: datetime
    sunset: datetime
    uv_index_max: float
    precipitation_probability_max: Optional[int] = None

    def icon_and_description(self) -> Tuple[str, str]:
        """Return the icon and description for this weather code."""
        return describe(self.weathercode)


REQUIRED_DAILY_KEYS: Tuple[str, ...] = ("time",) + DAILY_VARIABLES


def parse_daily(daily: Any) -> Optional[List[DailyForecastEntry]]:
    """Decode the positional ``daily`` arrays into forecast entries.

    Each variable is a list indexed by day. A day whose values are missing
    or unparseable is dropped; the remaining days are kept.

    Args:
        daily: The raw ``daily`` object taken from the response.

    Returns:
        Entries ordered by date, or None if ``daily`` is not an object or a
        required array is absent.
    """
    if not isinstance(daily, dict):
        return None

    columns: Dict[str, list] = {}
    for key in REQUIRED_DAILY_KEYS:
        column = daily.get(key)
        if not isinstance(column, list):
            logger.debug("Daily forecast is missing the %s array", key)
            return None
        columns[key] = column

    precipitation = daily.get("precipitation_probability_max")
    if not isinstance(precipitation, list):
        precipitation = None

    entries: List[DailyForecastEntry] = []
    for index in range(len(columns["time"])):
        try:
            entry = DailyForecastEntry(
                date=date.fromisoformat(columns["time"][index]),
                temperature_min=_as_float(columns["temperature_2m_min"][index]),
                temperature_max=_as_float(columns["temperature_2m_max"][index]),
                weathercode=_as_int(columns["weathercode"][index]),
                sunrise=datetime.fromisoformat(columns["sunrise"][index]),
                sunset=datetime.fromisoformat(columns["sunset"][index]),
                uv_index_max=_as_float(columns["uv_index_max"][index]),
                precipitation_probability_max=(
                    _as_int(precipitation[index])
                    if precipitation is not None and index < len(precipitation)
                    and precipitation[index] is not None
                    else None
                ),
            )
        except (IndexError, TypeError, ValueError) as e:
            logger.debug("Skipping daily forecast entry %d: %s", index, e)
            continue
        entries.append(entry)

    entries.sort(key=lambda entry: entry.date)
    return entries
