"""Shared utilities and configuration."""

from src.shared.config import Config
from src.shared.utils import (
    IST,
    ist_date_str,
    now_utc,
    previous_day,
    setup_logger,
    to_ist,
    today_ist,
)

__all__ = [
    "Config",
    "IST",
    "setup_logger",
    "now_utc",
    "to_ist",
    "today_ist",
    "ist_date_str",
    "previous_day",
]
