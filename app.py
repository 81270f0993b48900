"""Application state mutated by the render loop."""

import curses
import logging
from typing import FrozenSet, Optional

from weather import WeatherClient


logger: logging.Logger = logging.getLogger(__name__)


COUNTER_MAX: int = 255

ESC: int = 27
CTRL_C: int = 3

QUIT_KEYS: FrozenSet[int] = frozenset({ord('q'), ord('Q'), ESC, CTRL_C})
INCREMENT_KEYS: FrozenSet[int] = frozenset({curses.KEY_RIGHT, ord('+')})
DECREMENT_KEYS: FrozenSet[int] = frozenset({curses.KEY_LEFT, ord('-')})
REFRESH_KEYS: FrozenSet[int] = frozenset({ord('r'), ord('R')})


class AppState:
    """State container owned by the render loop.

    Attributes:
        running: False once the user asked to quit.
        counter: Demo counter, saturating in [0, COUNTER_MAX].
        weather: The single weather client for this session.
        loading: True while a background refresh is outstanding.
        refresh_requested: Set by the refresh key, cleared by the loop.
        last_update: Local time (HH:MM:SS) of the last refresh that
            returned data, or None before the first one.
    """

    def __init__(self, weather: WeatherClient) -> None:
        """Create the initial state: running, counter at zero, no data.

        Args:
            weather: Weather client this state owns for the session.
        """
        self.running: bool = True
        self.counter: int = 0
        self.weather: WeatherClient = weather
        self.loading: bool = False
        self.refresh_requested: bool = False
        self.last_update: Optional[str] = None

    def tick(self) -> None:
        """Handle the tick event."""

    def quit(self) -> None:
        """Stop the render loop after the current iteration."""
        self.running = False

    def increment_counter(self) -> None:
        """Add one to the counter, stopping at COUNTER_MAX."""
        if self.counter < COUNTER_MAX:
            self.counter += 1

    def decrement_counter(self) -> None:
        """Subtract one from the counter, stopping at zero."""
        if self.counter > 0:
            self.counter -= 1

    def request_refresh(self) -> None:
        """Ask the render loop to start a background refresh."""
        self.refresh_requested = True

    def handle_key(self, code: int) -> None:
        """Apply the action bound to a key code.

        Args:
            code: Key code read from the terminal. Unbound keys are ignored.
        """
        if code in QUIT_KEYS:
            logger.info("Quit requested")
            self.quit()
        elif code in INCREMENT_KEYS:
            self.increment_counter()
        elif code in DECREMENT_KEYS:
            self.decrement_counter()
        elif code in REFRESH_KEYS:
            self.request_refresh()
