"""Terminal events and the event source that merges them.

The render loop pulls exactly one event per iteration from EventSource.
Input is polled with a timeout bounded by the next tick deadline, so an
event (input or Tick) is always produced within one tick interval.
Background work reports back by pushing pseudo-events onto the same
stream.
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union


logger: logging.Logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tick:
    """Periodic timer event driving the redraw cadence."""


@dataclass(frozen=True)
class KeyPress:
    """A key read from the terminal.

    Attributes:
        code: Key code as returned by the terminal (character ordinal or
            special key constant).
    """
    code: int


@dataclass(frozen=True)
class Mouse:
    """Mouse input; currently ignored."""


@dataclass(frozen=True)
class Resize:
    """Terminal resize; currently ignored."""


@dataclass(frozen=True)
class FetchComplete:
    """Result of a background forecast fetch.

    Attributes:
        request_id: Identifier of the refresh request that produced it.
        snapshot: Decoded response, or None if the fetch failed.
    """
    request_id: int
    snapshot: Optional[Dict[str, Any]]


Event = Union[Tick, KeyPress, Mouse, Resize, FetchComplete]

PollFunc = Callable[[float], Optional[Event]]


class EventSource:
    """Merged stream of input, tick and background events.

    Attributes:
        tick_rate: Seconds between Tick events when no other event arrives.
    """

    def __init__(
        self,
        poll: PollFunc,
        tick_rate: float = 0.25,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Create an event source.

        Args:
            poll: Reads one input event, waiting at most the given number of
                seconds. Returns None if nothing arrived.
            tick_rate: Tick interval in seconds.
            clock: Monotonic clock, replaceable for tests.
        """
        if tick_rate <= 0:
            raise ValueError("tick_rate must be positive")
        self.tick_rate: float = tick_rate
        self._poll: PollFunc = poll
        self._clock: Callable[[], float] = clock
        self._pending: "queue.Queue[Event]" = queue.Queue()
        self._closed: threading.Event = threading.Event()
        self._next_tick: float = self._clock() + tick_rate

    @property
    def closed(self) -> bool:
        """True once close() has been called."""
        return self._closed.is_set()

    def push(self, event: Event) -> bool:
        """Queue an event from any thread.

        Args:
            event: Event to deliver ahead of input and ticks.

        Returns:
            False if the source is closed and the event was dropped.
        """
        if self._closed.is_set():
            logger.debug("Event source closed, dropping %s", type(event).__name__)
            return False
        self._pending.put(event)
        return True

    def close(self) -> None:
        """Stop accepting pushed events and discard queued ones."""
        self._closed.set()
        while True:
            try:
                self._pending.get_nowait()
            except queue.Empty:
                break

    def _tick(self, now: float) -> Tick:
        self._next_tick = now + self.tick_rate
        return Tick()

    def next(self) -> Event:
        """Return the next event.

        Pushed events come first, then a due tick, then terminal input.
        Never waits past the next tick deadline.
        """
        try:
            return self._pending.get_nowait()
        except queue.Empty:
            pass

        now: float = self._clock()
        remaining: float = self._next_tick - now
        if remaining <= 0:
            return self._tick(now)

        event: Optional[Event] = self._poll(remaining)
        if event is not None:
            return event

        try:
            return self._pending.get_nowait()
        except queue.Empty:
            pass
        return self._tick(self._clock())
