"""Entry point for running the weather app as a module."""

import argparse
import logging
import signal
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .app import CaelumApp
from .models.config import Config
from .models.weather import Unit

_app: CaelumApp | None = None
_logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO", log_dir: Path = Path("logs")) -> None:
    """Log to stderr and, when the directory is writable, a rotating file."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    try:
        log_dir.mkdir(exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_dir / "caelum.log",
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
        )
    except OSError as e:
        print(f"File logging disabled: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def _signal_handler(signum: int, frame: object) -> None:
    _logger.info(f"Received {signal.Signals(signum).name}, shutting down")
    if _app is not None:
        _app.exit()


def setup_signal_handlers() -> None:
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="caelum",
        description="Current and 7-day weather for your location in the terminal",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.json"),
        help="Path to configuration file (default: config.json)",
    )
    parser.add_argument(
        "-u",
        "--unit",
        choices=[u.value for u in Unit],
        help="Temperature unit, overriding the configured one",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("-V", "--version", action="store_true", help="Show version and exit")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    global _app

    args = build_parser().parse_args(argv)

    if args.version:
        from . import __version__

        print(f"Caelum v{__version__}")
        sys.exit(0)

    if not args.config.exists():
        print(f"Config file not found: {args.config}")
        print("Starting with default configuration (fallback location: Roma)...")

    config = Config.load_or_default(args.config)

    setup_logging("DEBUG" if args.verbose else config.settings.log_level)
    setup_signal_handlers()

    _logger.info("Starting Caelum")
    _app = CaelumApp(config=config, unit=Unit(args.unit) if args.unit else None)
    _app.run()
    _logger.info("Caelum shutdown complete")


if __name__ == "__main__":
    main()
