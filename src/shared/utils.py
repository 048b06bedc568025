"""Shared utility functions for the bullion tracker."""

import logging
import math
from datetime import date, datetime, timedelta
from pathlib import Path

import pytz

IST = pytz.timezone("Asia/Kolkata")


def setup_logger(
    name: str, log_file: Path | None = None, level: int | str = logging.INFO
) -> logging.Logger:
    """Set up logger with console and file handlers.

    Args:
        name: Logger name
        log_file: Optional path to log file
        level: Logging level (int constant or string name like 'DEBUG', 'INFO')

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Convert string level to int if needed
    if isinstance(level, str):
        numeric_level = getattr(logging, level.upper(), logging.INFO)
        logger.setLevel(numeric_level)
    else:
        logger.setLevel(level)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Console handler (attached once per logger name)
    if not logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # File handler
    if log_file and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
        except OSError as e:
            logger.warning("File logging disabled for %s: %s", log_file, e)
        else:
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def now_utc() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(pytz.UTC)


def to_ist(dt: datetime) -> datetime:
    """Convert datetime to IST. Naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = pytz.UTC.localize(dt)
    return dt.astimezone(IST)


def today_ist(now: datetime | None = None) -> date:
    """Calendar date in India Standard Time, whatever the server zone."""
    return to_ist(now or now_utc()).date()


def ist_date_str(now: datetime | None = None) -> str:
    """Today's IST date as YYYY-MM-DD."""
    return today_ist(now).isoformat()


def previous_day(day: str) -> str:
    """The YYYY-MM-DD date one day before ``day``."""
    return (date.fromisoformat(day) - timedelta(days=1)).isoformat()


def iso_timestamp(dt: datetime) -> str:
    """ISO 8601 UTC timestamp with millisecond precision."""
    utc = dt.astimezone(pytz.UTC) if dt.tzinfo else pytz.UTC.localize(dt)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def is_valid_price(value) -> bool:
    """True for a finite, positive int/float (bool excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value) and value > 0
    except OverflowError:
        # int beyond float range
        return False


def round2(value: float) -> float:
    # + 0.0 folds -0.0 into 0.0
    return round(value, 2) + 0.0
