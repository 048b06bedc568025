"""Configuration management for the bullion tracker."""

import os
import re
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Project paths
    ROOT_DIR = Path(__file__).parent.parent.parent
    DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data")))
    LOGS_DIR = Path(os.getenv("LOGS_DIR", str(ROOT_DIR / "logs")))

    # Durable storage backend for extremes and history: "file" or "memory"
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "file")
    HISTORY_RETENTION_DAYS: int = int(os.getenv("HISTORY_RETENTION_DAYS", "365"))

    # Close-of-day snapshot time, IST (HH:MM)
    CLOSE_TIME_IST: str = os.getenv("CLOSE_TIME_IST", "23:45")

    # Optional keyed price providers
    METALPRICE_API_KEY: Optional[str] = os.getenv("METALPRICE_API_KEY")
    GOLDAPI_KEY: Optional[str] = os.getenv("GOLDAPI_KEY")

    # Data collection settings
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "10"))
    PRICE_CACHE_TTL: int = int(os.getenv("PRICE_CACHE_TTL", "3600"))

    STORAGE_BACKENDS = ("file", "memory")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration values."""
        if cls.STORAGE_BACKEND not in cls.STORAGE_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {cls.STORAGE_BACKENDS}, got '{cls.STORAGE_BACKEND}'"
            )
        cls.close_time()
        if cls.HISTORY_RETENTION_DAYS < 1:
            raise ValueError("HISTORY_RETENTION_DAYS must be at least 1")

    @classmethod
    def close_time(cls) -> tuple[int, int]:
        """Parse CLOSE_TIME_IST into (hour, minute).

        Raises:
            ValueError: If the value is not a valid HH:MM time.
        """
        match = re.fullmatch(r"(\d{1,2}):(\d{2})", cls.CLOSE_TIME_IST.strip())
        if not match:
            raise ValueError(f"CLOSE_TIME_IST must be HH:MM, got '{cls.CLOSE_TIME_IST}'")
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            raise ValueError(f"CLOSE_TIME_IST out of range: '{cls.CLOSE_TIME_IST}'")
        return hour, minute


config = Config()
