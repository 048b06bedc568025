"""
Stored Record Definitions

This module defines the records persisted by the tracker and their JSON
layout. Keys are camelCase on disk so files written by earlier deployments
stay readable; the unprefixed silver file names they used are picked up by
``PriceTracker.for_metal``.
"""

from dataclasses import dataclass, replace
from typing import Any

from src.shared.utils import is_valid_price


class MalformedRecordError(ValueError):
    """Stored JSON is missing fields or carries the wrong types."""


def _require_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedRecordError(f"'{key}' must be a non-empty string, got {value!r}")
    return value


def _require_price(data: dict, key: str) -> float:
    value = data.get(key)
    if not is_valid_price(value):
        raise MalformedRecordError(f"'{key}' must be a positive number, got {value!r}")
    return float(value)


def _optional_number(data: dict, key: str) -> float:
    value = data.get(key, 0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    try:
        return float(value)
    except OverflowError:
        return 0.0


# -------------------------------------------------------------------
# Daily extremes (today's open / high / low)
# -------------------------------------------------------------------


@dataclass
class DailyExtremes:
    """Open, high and low observed for one commodity on one IST day."""

    date: str
    high: float
    high_time: str
    low: float
    low_time: str
    open_price: float
    last_updated: str

    @classmethod
    def opening(cls, day: str, price: float, timestamp: str) -> "DailyExtremes":
        """First observation of the day: open = high = low."""
        return cls(
            date=day,
            high=price,
            high_time=timestamp,
            low=price,
            low_time=timestamp,
            open_price=price,
            last_updated=timestamp,
        )

    def copy(self) -> "DailyExtremes":
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "high": self.high,
            "highTime": self.high_time,
            "low": self.low,
            "lowTime": self.low_time,
            "openPrice": self.open_price,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "DailyExtremes":
        """Parse a stored record.

        Raises:
            MalformedRecordError: If a field is missing or invalid, or high < low.
        """
        if not isinstance(data, dict):
            raise MalformedRecordError(f"Expected an object, got {type(data).__name__}")
        record = cls(
            date=_require_str(data, "date"),
            high=_require_price(data, "high"),
            high_time=_require_str(data, "highTime"),
            low=_require_price(data, "low"),
            low_time=_require_str(data, "lowTime"),
            open_price=_require_price(data, "openPrice"),
            last_updated=_require_str(data, "lastUpdated"),
        )
        if record.high < record.low:
            raise MalformedRecordError(f"high {record.high} below low {record.low}")
        return record


# -------------------------------------------------------------------
# Daily closing snapshots
# -------------------------------------------------------------------


@dataclass(frozen=True)
class StoredDailyPrice:
    """Closing snapshot for one IST day."""

    date: str  # YYYY-MM-DD
    price_per_gram: float  # INR per gram
    timestamp: str  # ISO timestamp when captured
    source: str = "calculated"
    price_per_kg: float = 0.0
    spot_usd_oz: float = 0.0  # futures price, USD per troy ounce
    usd_inr_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "pricePerGram": self.price_per_gram,
            "pricePerKg": self.price_per_kg,
            "spotUsdOz": self.spot_usd_oz,
            "usdInrRate": self.usd_inr_rate,
            "source": self.source,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "StoredDailyPrice":
        """Parse a stored snapshot.

        Raises:
            MalformedRecordError: If date, pricePerGram or timestamp are invalid.
        """
        if not isinstance(data, dict):
            raise MalformedRecordError(f"Expected an object, got {type(data).__name__}")
        source = data.get("source")
        return cls(
            date=_require_str(data, "date"),
            price_per_gram=_require_price(data, "pricePerGram"),
            timestamp=_require_str(data, "timestamp"),
            source=source if isinstance(source, str) and source else "unknown",
            price_per_kg=_optional_number(data, "pricePerKg"),
            # older files used comexUsdOz for the spot price
            spot_usd_oz=_optional_number(data, "spotUsdOz") or _optional_number(data, "comexUsdOz"),
            usd_inr_rate=_optional_number(data, "usdInrRate"),
        )
