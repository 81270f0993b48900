"""Full-screen curses interface and the render loop that drives it.

RenderLoop holds a terminal and an event source. Each iteration draws the
current AppState, takes one event and dispatches it. Forecast fetches run
on daemon threads and report back through the event source as
FetchComplete events, so the loop is the only writer of application
state.
"""

import curses
import logging
import threading
import unicodedata
from datetime import datetime
from functools import partial
from typing import Any, Callable, Dict, List, Optional

from app import AppState
from events import (
    Event,
    EventSource,
    FetchComplete,
    KeyPress,
    Mouse,
    Resize,
    Tick,
)


logger: logging.Logger = logging.getLogger(__name__)


# Milliseconds ncurses waits after Esc for the rest of an escape sequence.
ESC_DELAY_MS: int = 25

VARIATION_SELECTOR_EMOJI: str = "\ufe0f"


class TerminalError(Exception):
    """Raised when the terminal cannot be set up, restored or used."""


class CursesTerminal:
    """Curses screen in raw mode with keypad decoding.

    Attributes:
        window: The curses standard screen, or None when not set up.
    """

    def __init__(self) -> None:
        """Create an unopened terminal; call setup() before use."""
        self.window: Optional[Any] = None

    def setup(self) -> None:
        """Enter curses mode: raw input, no echo, keypad decoding.

        A lone Esc is reported after ESC_DELAY_MS instead of the ncurses
        default of one second.

        Raises:
            TerminalError: If curses cannot initialize the screen.
        """
        try:
            self.window = curses.initscr()
            curses.noecho()
            curses.raw()
            self.window.keypad(True)
        except curses.error as e:
            if self.window is not None:
                curses.endwin()
                self.window = None
            raise TerminalError(f"Terminal setup failed: {e}") from e

        try:
            curses.set_escdelay(ESC_DELAY_MS)
        except curses.error:
            logger.warning("Could not lower the escape delay")

        try:
            curses.curs_set(0)
        except curses.error:
            pass  # not every terminal can hide the cursor

    def restore(self) -> None:
        """Leave curses mode. Does nothing if the terminal is not set up.

        Raises:
            TerminalError: If curses cannot restore the terminal.
        """
        if self.window is None:
            return
        window, self.window = self.window, None
        try:
            window.keypad(False)
            curses.noraw()
            curses.echo()
            curses.endwin()
        except curses.error as e:
            raise TerminalError(f"Terminal restore failed: {e}") from e

    def _screen(self) -> Any:
        if self.window is None:
            raise TerminalError("terminal is not set up")
        return self.window

    def poll(self, timeout: float) -> Optional[Event]:
        """Wait for one input event.

        Args:
            timeout: Seconds to wait at most.

        Returns:
            The decoded event, or None if no input arrived in time.

        Raises:
            TerminalError: If the terminal is not set up.
        """
        window = self._screen()
        window.timeout(max(0, int(timeout * 1000)))
        code: int = window.getch()
        if code == -1:
            return None
        if code == curses.KEY_RESIZE:
            return Resize()
        if code == curses.KEY_MOUSE:
            return Mouse()
        return KeyPress(code)

    def draw(self, state: AppState) -> None:
        """Clear the screen, render the state and flush it.

        Args:
            state: Application state to show.

        Raises:
            TerminalError: If the terminal is not set up.
            curses.error: If curses rejects a write.
        """
        window = self._screen()
        window.erase()
        render(window, state)
        window.refresh()


def char_width(text: str, index: int) -> int:
    """Terminal cells taken by the character at ``index``.

    Args:
        text: The string holding the character.
        index: Position of the character in ``text``.

    Returns:
        0 for combining and format characters, 2 for wide characters and
        for any character followed by the emoji variation selector, else 1.
    """
    char: str = text[index]
    if unicodedata.combining(char) or unicodedata.category(char) in ("Mn", "Me", "Cf"):
        return 0
    if text[index + 1:index + 2] == VARIATION_SELECTOR_EMOJI:
        return 2
    if unicodedata.east_asian_width(char) in ("W", "F"):
        return 2
    return 1


def text_width(text: str) -> int:
    """Terminal cells needed to display ``text``."""
    return sum(char_width(text, index) for index in range(len(text)))


def clip(text: str, columns: int) -> str:
    """Cut text so it fits in the given number of terminal cells.

    Args:
        text: Text to display.
        columns: Available cells.

    Returns:
        The longest prefix of ``text`` no wider than ``columns``.
    """
    used: int = 0
    for index in range(len(text)):
        width: int = char_width(text, index)
        if used + width > columns:
            return text[:index]
        used += width
    return text


def put(window: Any, y: int, x: int, text: str, attr: int = 0) -> None:
    """Write text clipped to the window.

    The last column is left empty so curses never writes the bottom-right
    cell. Rows past the bottom are skipped.

    Args:
        window: Curses window to write to.
        y: Row.
        x: Column.
        text: Text to write.
        attr: Curses attributes such as ``curses.A_BOLD``.
    """
    height, width = window.getmaxyx()
    if y >= height or x >= width:
        return
    trimmed: str = clip(text, max(0, width - x - 1))
    if trimmed:
        window.addstr(y, x, trimmed, attr)


def current_lines(state: AppState) -> List[str]:
    """Format the current conditions block.

    Args:
        state: Application state holding the weather client.

    Returns:
        Lines to display, or a single placeholder line without data.
    """
    current = state.weather.current_weather()
    if current is None:
        return ["No current weather available"]
    icon, description = current.icon_and_description()
    return [
        f"{icon}  {description}",
        f"Temperature: {current.temperature:.1f}°C",
        f"Wind: {current.windspeed:.1f} km/h from {current.winddirection}°",
        f"Daylight: {'yes' if current.is_day else 'no'}",
    ]


def daily_lines(state: AppState) -> List[str]:
    """Format one line per forecast day.

    Args:
        state: Application state holding the weather client.

    Returns:
        Lines to display, or a single placeholder line without data.
    """
    forecast = state.weather.daily_forecast()
    if not forecast:
        return ["No daily forecast available"]
    lines: List[str] = []
    for entry in forecast:
        icon, _ = entry.icon_and_description()
        line = (
            f"{entry.date:%a %d %b}  {icon}  "
            f"{entry.temperature_min:5.1f}° / {entry.temperature_max:5.1f}°  "
            f"↑{entry.sunrise:%H:%M} ↓{entry.sunset:%H:%M}  "
            f"UV {entry.uv_index_max:.1f}"
        )
        if entry.precipitation_probability_max is not None:
            line += f"  {entry.precipitation_probability_max}%"
        lines.append(line)
    return lines


def status_line(state: AppState) -> str:
    """Describe the refresh status: loading, no data or last update time."""
    if state.loading:
        return "Loading..."
    if state.weather.snapshot is None:
        return "No data available"
    return f"Updated at {state.last_update}"


def render(window: Any, state: AppState) -> None:
    """Draw one frame of the interface.

    Args:
        window: Curses window to draw on.
        state: Application state to show.

    Raises:
        curses.error: If curses rejects a write; the caller decides what a
            failed frame means.
    """
    coordinate = state.weather.coordinate
    title: str = (
        f" Weather at {coordinate.latitude}, {coordinate.longitude}"
        f" ({coordinate.timezone}) "
    )
    put(window, 0, 0, title, curses.A_BOLD | curses.A_REVERSE)

    row: int = 2
    put(window, row, 1, "Now", curses.A_BOLD)
    for line in current_lines(state):
        row += 1
        put(window, row, 3, line)

    row += 2
    put(window, row, 1, "Daily forecast", curses.A_BOLD)
    for line in daily_lines(state):
        row += 1
        put(window, row, 3, line)

    row += 2
    put(window, row, 1, f"Counter: {state.counter}")
    row += 1
    put(window, row, 1, status_line(state))

    height, _ = window.getmaxyx()
    put(
        window,
        height - 1,
        0,
        " q/Esc/Ctrl-C quit  ←/→ counter  r refresh ",
        curses.A_REVERSE,
    )


def start_daemon(work: Callable[[], None]) -> threading.Thread:
    """Run work on a daemon thread.

    The interpreter does not wait for daemon threads, so a fetch still in
    flight when the user quits cannot delay process exit.

    Args:
        work: Callable to run.

    Returns:
        The started thread.
    """
    thread: threading.Thread = threading.Thread(target=work, name="weather-fetch", daemon=True)
    thread.start()
    return thread


class RenderLoop:
    """Draw, wait for one event, dispatch, until the user quits.

    Attributes:
        terminal: Terminal handle providing setup, restore and draw.
        state: Application state; only this loop mutates it.
        events: Source of input, tick and fetch completion events.
        spawn: Starts background work; defaults to start_daemon.
    """

    def __init__(
        self,
        terminal: Any,
        state: AppState,
        events: EventSource,
        spawn: Callable[[Callable[[], None]], Any] = start_daemon,
    ) -> None:
        """Create a render loop.

        Args:
            terminal: Object with setup(), restore() and draw(state).
            state: Application state to draw and mutate.
            events: Event source whose poll reads from ``terminal``.
            spawn: Runs a callable in the background.
        """
        self.terminal: Any = terminal
        self.state: AppState = state
        self.events: EventSource = events
        self.spawn: Callable[[Callable[[], None]], Any] = spawn
        self._request_id: int = 0

    def run(self) -> None:
        """Run until ``state.running`` is False, then restore the terminal.

        Raises:
            TerminalError: If the terminal cannot be set up or restored.
        """
        self.terminal.setup()
        try:
            self.refresh()
            while self.state.running:
                self.draw()
                try:
                    event: Event = self.events.next()
                except KeyboardInterrupt:
                    self.state.quit()
                    break
                self.dispatch(event)
        finally:
            self.shutdown()
            self.terminal.restore()
        logger.info("Render loop finished")

    def draw(self) -> None:
        """Draw one frame; a curses failure skips the frame."""
        try:
            self.terminal.draw(self.state)
        except curses.error as e:
            logger.warning("Draw failed, skipping frame: %s", e)

    def dispatch(self, event: Event) -> None:
        """Apply one event to the application state.

        Args:
            event: The event taken from the event source.
        """
        if isinstance(event, KeyPress):
            self.state.handle_key(event.code)
            if self.state.refresh_requested:
                self.state.refresh_requested = False
                self.refresh()
        elif isinstance(event, Tick):
            self.state.tick()
        elif isinstance(event, FetchComplete):
            self.complete(event)
        elif isinstance(event, (Mouse, Resize)):
            pass

    def refresh(self) -> None:
        """Start a background fetch; its result arrives as FetchComplete."""
        self._request_id += 1
        request_id: int = self._request_id
        self.state.loading = True
        logger.info("Refresh %d requested", request_id)
        self.spawn(partial(self._fetch, request_id))

    def _fetch(self, request_id: int) -> None:
        try:
            snapshot: Optional[Dict[str, Any]] = self.state.weather.fetch()
        except Exception:
            logger.exception("Refresh %d raised", request_id)
            snapshot = None
        self.events.push(FetchComplete(request_id, snapshot))

    def complete(self, event: FetchComplete) -> None:
        """Apply a fetch result if it answers the latest refresh.

        Args:
            event: Completion pushed by the fetch thread.
        """
        if event.request_id != self._request_id:
            logger.debug("Discarding superseded refresh %d", event.request_id)
            return
        self.state.weather.apply(event.snapshot)
        self.state.loading = False
        if event.snapshot is not None:
            self.state.last_update = datetime.now().strftime("%H:%M:%S")
        logger.info("Refresh %d applied (data %s)", event.request_id,
                    "available" if event.snapshot is not None else "unavailable")

    def shutdown(self) -> None:
        """Abandon outstanding fetches; late results are dropped."""
        self.events.close()
