"""WMO weather code catalog.

Maps the integer weather codes returned by Open-Meteo to an icon and a
human-readable description.
"""

from typing import Dict, Tuple


UNKNOWN: Tuple[str, str] = ("🤷", "Not Available")

WEATHER_CODES: Dict[int, Tuple[str, str]] = {}

for _codes, _entry in (
    ((0,), ("☀️", "Clear sky")),
    ((1, 2, 3), ("⛅", "Mainly clear, partly cloudy, and overcast")),
    ((45, 48), ("🌁", "Fog and depositing rime fog")),
    ((51, 53, 55), ("🌧️", "Drizzle: Light, moderate, and dense intensity")),
    ((56, 57), ("🌧️", "Freezing Drizzle: Light and dense intensity")),
    ((61, 63, 65), ("🌧️", "Rain: Slight, moderate and heavy intensity")),
    ((66, 67), ("🌧️", "Freezing Rain: Light and heavy intensity")),
    ((71, 73, 75), ("🌨️", "Snow fall: Slight, moderate, and heavy intensity")),
    ((77,), ("🌨️", "Snow grains")),
    ((80, 81, 82), ("🌨️", "Rain showers: Slight, moderate, and violent")),
    ((85, 86), ("🌨️", "Snow showers slight and heavy")),
    ((95,), ("🌩️", "Thunderstorm: Slight or moderate")),
    ((96, 99), ("🌩️", "Thunderstorm with slight and heavy hail")),
):
    for _code in _codes:
        WEATHER_CODES[_code] = _entry

del _codes, _entry, _code


def describe(code: int) -> Tuple[str, str]:
    """Look up the icon and description for a weather code.

    Args:
        code: WMO weather interpretation code.

    Returns:
        A tuple of (icon, description). Unknown codes map to UNKNOWN.
    """
    return WEATHER_CODES.get(code, UNKNOWN)
