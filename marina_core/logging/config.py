# =============================================================================
# marina_core/logging/config.py
# Logging Configuration for the Marina Back Office
# =============================================================================

import logging
import os
import sys
import time
from pathlib import Path
from datetime import datetime
from typing import Optional, Tuple, Type, Union


LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_DIR = Path("logs")
LOG_LEVEL_ENV = "MARINA_LOG_LEVEL"
ROOT_LOGGER = "marina_core"

# Third-party loggers that poll or stream; kept at WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "watchdog", "asyncio")


def resolve_level(level: Union[int, str, None]) -> int:
    """
    Turn ``level`` into a logging level number.

    ``None`` reads MARINA_LOG_LEVEL and falls back to INFO. Names are
    case-insensitive ("debug", "WARNING").
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, int):
        return level

    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(
    level: Union[int, str, None] = None,
    log_to_file: bool = True,
    log_filename: Optional[str] = None,
) -> None:
    """
    Configure logging for the back office.

    Args:
        level: Level number or name; None reads MARINA_LOG_LEVEL (default INFO)
        log_to_file: Also write a daily file under logs/
        log_filename: Custom log filename (default: marina_YYYY-MM-DD.log)
    """
    level = resolve_level(level)
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_to_file:
        LOG_DIR.mkdir(exist_ok=True)
        log_filename = log_filename or f"marina_{datetime.now():%Y-%m-%d}.log"
        handlers.append(logging.FileHandler(LOG_DIR / log_filename))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(ROOT_LOGGER).info(
        f"Logging initialized at {logging.getLevelName(level)}"
    )


def set_debug(enabled: bool) -> None:
    """Switch the marina_core loggers between DEBUG and the configured level."""
    logging.getLogger(ROOT_LOGGER).setLevel(logging.DEBUG if enabled else logging.NOTSET)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Usage:
        from marina_core.logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


class LogContext:
    """
    Time an operation and log how it ended.

    Exceptions listed in ``expected`` are routine outcomes (a backend that is
    down, a timed-out request): they are logged as one WARNING line without a
    traceback. Anything else is logged at ERROR with the traceback. The
    exception always propagates.

    Usage:
        with LogContext(logger, "Loading contracts (database)", expected=(MarinaError,)):
            contracts = await provider.get_contracts()
        # Loading contracts (database)... started
        # Loading contracts (database)... completed (0.12s)
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation: str,
        level: int = logging.INFO,
        expected: Tuple[Type[BaseException], ...] = (),
    ):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.expected = expected
        self.start_time: Optional[float] = None
        self.elapsed: Optional[float] = None

    def __enter__(self):
        self.start_time = time.monotonic()
        self.logger.log(self.level, f"{self.operation}... started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.monotonic() - self.start_time

        if exc_type is None:
            self.logger.log(self.level, f"{self.operation}... completed ({self.elapsed:.2f}s)")
        elif not issubclass(exc_type, Exception):
            # Cancellation and interpreter exit are not failures
            self.logger.log(self.level, f"{self.operation}... cancelled ({self.elapsed:.2f}s)")
        elif self.expected and issubclass(exc_type, self.expected):
            self.logger.warning(
                f"{self.operation}... failed ({self.elapsed:.2f}s): {exc_val or exc_type.__name__}"
            )
        else:
            self.logger.error(
                f"{self.operation}... failed ({self.elapsed:.2f}s): {exc_val}",
                exc_info=True,
            )

        return False
