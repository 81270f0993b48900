"""Open-Meteo forecast client.

The client holds the last successful forecast response for one coordinate
and exposes typed views over it. Fetching and applying a response are
separate steps so the network call can run on a worker thread while only
the render loop mutates the stored snapshot.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

import requests  # type: ignore[import-untyped]

from shared import (
    Coordinate,
    CurrentWeather,
    DailyForecastEntry,
    WeatherQuery,
    parse_daily,
)


logger: logging.Logger = logging.getLogger(__name__)


class WeatherClient:
    """Weather client for the Open-Meteo forecast endpoint.

    A snapshot is either a complete decoded response or None. A failed
    fetch clears it rather than leaving stale data behind.

    Attributes:
        BASE_URL: Base URL for the Open-Meteo API.
        USER_AGENT: User agent string for API requests.
        REQUEST_TIMEOUT: Seconds to wait for the provider before giving up.
    """

    BASE_URL: str = "https://api.open-meteo.com"
    USER_AGENT: str = "(Python Weather TUI, contact@example.com)"
    REQUEST_TIMEOUT: float = 10

    def __init__(self, coordinate: Coordinate) -> None:
        """Initialize the client with a requests session.

        No request is made here; the snapshot starts empty.

        Args:
            coordinate: Location to fetch forecasts for.
        """
        self.coordinate: Coordinate = coordinate
        self.query: WeatherQuery = WeatherQuery(coordinate)
        self.snapshot: Optional[Dict[str, Any]] = None
        self.session: requests.Session = requests.Session()
        self.session.headers.update({
            'User-Agent': self.USER_AGENT,
            'Accept': 'application/json'
        })

    @property
    def url(self) -> str:
        """Forecast endpoint URL."""
        return f"{self.BASE_URL}/v1/forecast"

    def fetch(self) -> Optional[Dict[str, Any]]:
        """Request one forecast from the provider.

        Safe to call from a worker thread; it does not touch the stored
        snapshot.

        Returns:
            The decoded JSON object, or None on transport, HTTP or decode
            failure.
        """
        thread_id: int = threading.get_ident()
        logger.info("Fetching forecast for (%s, %s) [Thread: %s]",
                    self.coordinate.latitude, self.coordinate.longitude, thread_id)
        try:
            response: requests.Response = self.session.get(
                self.url, params=self.query.to_params(), timeout=self.REQUEST_TIMEOUT
            )
            logger.debug("Forecast response status: %s", response.status_code)
            response.raise_for_status()
            data: Any = response.json()
        except requests.RequestException as e:
            logger.warning("Forecast request failed: %s", e)
            return None
        except ValueError as e:
            logger.warning("Forecast response is not valid JSON: %s", e)
            return None

        if not isinstance(data, dict):
            logger.warning("Forecast response is not a JSON object: %s", type(data).__name__)
            return None

        logger.info("Forecast received [Thread: %s]", thread_id)
        return data

    def apply(self, snapshot: Optional[Dict[str, Any]]) -> None:
        """Replace the stored snapshot with a fetch result.

        Only the thread that owns the client may call this.

        Args:
            snapshot: Result of fetch(); None clears the snapshot.
        """
        self.snapshot = snapshot

    def refresh(self) -> None:
        """Fetch a new forecast and replace the snapshot in one step."""
        self.apply(self.fetch())

    def current_weather(self) -> Optional[CurrentWeather]:
        """Decode the current conditions from the snapshot.

        Returns:
            CurrentWeather, or None without a snapshot or when the
            current_weather object is missing or malformed.
        """
        if self.snapshot is None:
            return None
        return CurrentWeather.from_dict(self.snapshot.get("current_weather"))

    def daily_forecast(self) -> Optional[List[DailyForecastEntry]]:
        """Decode the daily forecast from the snapshot.

        Returns:
            Entries ordered by date, or None without a snapshot or when
            the daily object or a required array is missing.
        """
        if self.snapshot is None:
            return None
        return parse_daily(self.snapshot.get("daily"))
