"""
Loop Queue Player - Main Entry Point

Plays a queue of media sources in order, looping each one a configured number
of times, either on demand or at scheduled times of day.
"""

import argparse
import logging
import signal
import sys
import os

# Add src to path
src_path = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, src_path)

from PyQt6.QtCore import QCoreApplication, QTimer

logger = logging.getLogger("loop_queue_player")


def setup_logging(level: str = "INFO", log_file: str = "") -> None:
    """Console handler with bare messages; an optional file handler with timestamps."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter('%(levelname)s %(name)s: %(message)s'))
    root.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            logger.warning("Cannot open log file %s: %s", log_file, e)
        else:
            file_handler.setFormatter(
                logging.Formatter('%(asctime)s - %(levelname)s - %(name)s - %(message)s')
            )
            root.addHandler(file_handler)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="loop-queue-player",
        description="Play a queue of media sources with per-item looping.",
    )
    parser.add_argument(
        "--config",
        default="config/default_config.yaml",
        help="Configuration file (default: the per-user configuration)",
    )
    parser.add_argument(
        "--schedule",
        action="store_true",
        help="Enable the scheduler instead of starting the queue immediately",
    )
    parser.add_argument(
        "--no-start",
        action="store_true",
        help="Load the queue and cue the players without starting a run",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Application entry point"""
    args = parse_args(argv)

    app = QCoreApplication(sys.argv[:1])
    app.setApplicationName("Loop Queue Player")
    app.setApplicationVersion("1.0.0")

    from services.config_service import ConfigService
    config = ConfigService(args.config)
    setup_logging(config.get("logging.level", "INFO"), config.get("logging.file", ""))

    # Create dependency container (composition root)
    from app.container_factory import AppContainerFactory
    from app.events import EventType
    try:
        container = AppContainerFactory.create(config_path=args.config)
    except RuntimeError as e:
        logger.error("Cannot start: %s", e)
        return 1

    facade = container.facade

    # Ctrl+C: Python only sees signals while the interpreter runs, so wake it up periodically
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    wakeup = QTimer()
    wakeup.timeout.connect(lambda: None)
    wakeup.start(250)

    if args.schedule or config.get("schedule.enabled", False):
        facade.set_scheduler_enabled(True)
    elif not args.no_start:
        facade.subscribe(EventType.QUEUE_FINISHED, lambda _data: app.quit())
        facade.subscribe(EventType.RUN_STOPPED, lambda _data: app.quit())
        started = facade.start()
        if not facade.is_running:
            # Empty queue, or every row was skipped before the event loop started
            container.cleanup()
            return 0 if started else 1

    try:
        return app.exec()
    finally:
        container.cleanup()


if __name__ == "__main__":
    sys.exit(main())
