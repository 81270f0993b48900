"""Terminal weather client for a fixed coordinate.

Parses the coordinate from the command line, then shows current conditions
and the daily forecast from Open-Meteo in a full-screen curses interface.
Press 'r' to refresh, left/right to change the demo counter and 'q', Esc or
Ctrl-C to quit.

Platform: Unix/Linux only (no Windows support)
"""

import argparse
import logging
import sys
from typing import List, Optional

from app import AppState
from events import EventSource
from shared import Coordinate
from tui import CursesTerminal, RenderLoop, TerminalError
from weather import WeatherClient


DEFAULT_TIMEZONE: str = "Europe/Madrid"
DEFAULT_TICK_RATE: float = 0.25
DEFAULT_LOG_FILE: str = "weather_tui.log"

LOG_FORMAT: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


logger: logging.Logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser.

    Returns:
        Parser for the coordinate, timezone, tick rate and logging options.
    """
    parser = argparse.ArgumentParser(
        description="Show the Open-Meteo forecast for a coordinate in the terminal."
    )
    parser.add_argument("-t", "--latitude", required=True, metavar="LATITUDE",
                        help="latitude in decimal degrees, e.g. 39.36667")
    parser.add_argument("-n", "--longitude", required=True, metavar="LONGITUDE",
                        help="longitude in decimal degrees, e.g. -0.41667")
    parser.add_argument("-z", "--timezone", default=DEFAULT_TIMEZONE, metavar="TIMEZONE",
                        help=f"IANA timezone name (default: {DEFAULT_TIMEZONE})")
    parser.add_argument("--tick-rate", type=float, default=DEFAULT_TICK_RATE,
                        help=f"seconds between redraws (default: {DEFAULT_TICK_RATE})")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE,
                        help=f"log destination (default: {DEFAULT_LOG_FILE})")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="log level (default: INFO)")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Negative coordinates such as ``-0.41667`` are accepted as option values.

    Args:
        argv: Arguments to parse; defaults to ``sys.argv[1:]``.

    Returns:
        The parsed arguments.

    Raises:
        SystemExit: If an argument is missing or the tick rate is not
            positive.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.tick_rate <= 0:
        parser.error("--tick-rate must be positive")
    return args


def configure_logging(log_file: str, level: str) -> None:
    """Send logs to a file; the terminal belongs to the interface.

    Args:
        log_file: Path of the log file.
        level: Level name such as "INFO".
    """
    logging.basicConfig(
        filename=log_file,
        level=getattr(logging, level),
        format=LOG_FORMAT
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main client entry point.

    Returns:
        0 on a normal quit, 1 if the terminal could not be set up or
        restored.
    """
    args = parse_args(argv)
    print(args)

    configure_logging(args.log_file, args.log_level)

    coordinate = Coordinate(
        latitude=args.latitude,
        longitude=args.longitude,
        timezone=args.timezone
    )
    state = AppState(WeatherClient(coordinate))
    terminal = CursesTerminal()
    events = EventSource(terminal.poll, tick_rate=args.tick_rate)

    logger.info("Starting for (%s, %s) in %s",
                coordinate.latitude, coordinate.longitude, coordinate.timezone)
    try:
        RenderLoop(terminal, state, events).run()
    except TerminalError as e:
        logger.error("%s", e)
        print(e, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
