"""Daily closing snapshots and the 24h reference price.

One ``StoredDailyPrice`` is kept per IST day, sorted by date and capped at
``Config.HISTORY_RETENTION_DAYS`` entries (oldest evicted first). As with the
extremes tracker, the in-process ``HistoryCache`` is authoritative and the
durable store is read once as a seed and written best-effort.

Both the current array layout and the older date-keyed object layout
(``{"_metadata": {...}, "2026-01-14": {...}}``) are accepted on read;
writes always use the array layout.
"""

import re
import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

from src.shared.config import Config
from src.shared.utils import is_valid_price, ist_date_str, now_utc, previous_day, setup_logger
from src.storage.backends import DocumentStore, StorageError
from src.storage.schema import MalformedRecordError, StoredDailyPrice

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

FRAME_COLUMNS = [
    "date",
    "price_per_gram",
    "price_per_kg",
    "spot_usd_oz",
    "usd_inr_rate",
    "source",
    "timestamp",
]


class HistoryCache:
    """Mutable holder for the loaded snapshots of one commodity."""

    def __init__(self) -> None:
        self.records: list[StoredDailyPrice] | None = None
        self.lock = threading.RLock()

    def clear(self) -> None:
        with self.lock:
            self.records = None


_default_caches: dict[str, HistoryCache] = {}
_default_caches_lock = threading.Lock()


def default_history_cache(key: str) -> HistoryCache:
    """Process-wide history cache for ``key``."""
    with _default_caches_lock:
        if key not in _default_caches:
            _default_caches[key] = HistoryCache()
        return _default_caches[key]


def clear_default_history_caches() -> None:
    with _default_caches_lock:
        _default_caches.clear()


class DailyPriceHistory:
    """Store of daily closing prices for one commodity."""

    def __init__(
        self,
        store: DocumentStore,
        cache: HistoryCache | None = None,
        clock: Callable[[], datetime] = now_utc,
        retention_days: int | None = None,
        name: str = "silver",
        log_file: Path | None = None,
    ) -> None:
        """Initialize the history.

        Args:
            store: Durable store for the snapshot array.
            cache: In-process state holder (a private one when omitted).
            clock: Returns the current time as an aware datetime.
            retention_days: Maximum snapshots kept (default: Config.HISTORY_RETENTION_DAYS).
            name: Commodity name, used in log messages.
            log_file: Optional path for file-based logging.
        """
        self.store = store
        self.cache = cache if cache is not None else HistoryCache()
        self.clock = clock
        self.retention_days = retention_days or Config.HISTORY_RETENTION_DAYS
        self.name = name
        self.last_storage_error: Exception | None = None
        self.logger = setup_logger(self.__class__.__name__, log_file)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save_daily_price(self, record: StoredDailyPrice) -> None:
        """Upsert the snapshot for ``record.date`` and prune to the retention cap.

        Raises:
            ValueError: If the record has a malformed date or a non-positive price.
        """
        if not _DATE_RE.match(record.date or ""):
            raise ValueError(f"Snapshot date must be YYYY-MM-DD, got {record.date!r}")
        if not is_valid_price(record.price_per_gram):
            raise ValueError(f"Snapshot price must be positive, got {record.price_per_gram!r}")

        with self.cache.lock:
            records = [r for r in self._records() if r.date != record.date]
            records.append(record)
            records.sort(key=lambda r: r.date)
            if len(records) > self.retention_days:
                dropped = len(records) - self.retention_days
                records = records[dropped:]
                self.logger.debug("[%s] Pruned %d old snapshots", self.name, dropped)

            self.cache.records = records
            try:
                self.store.write([r.to_dict() for r in records])
            except StorageError as e:
                self._storage_failed("write", e)

        self.logger.info(
            "[%s] Saved daily price for %s: %.2f/gram", self.name, record.date, record.price_per_gram
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_yesterday_reference_price(self) -> StoredDailyPrice | None:
        """Yesterday's snapshot, else the latest one before today, else None."""
        today = ist_date_str(self.clock())
        yesterday = previous_day(today)

        with self.cache.lock:
            earlier = [r for r in self._records() if r.date < today]

        for r in earlier:
            if r.date == yesterday:
                return r
        if earlier:
            latest = earlier[-1]
            self.logger.info(
                "[%s] No snapshot for %s, using %s as reference", self.name, yesterday, latest.date
            )
            return latest
        return None

    def get_history(self, days: int) -> list[StoredDailyPrice]:
        """The most recent ``days`` snapshots, oldest first."""
        if days <= 0:
            return []
        with self.cache.lock:
            return list(self._records()[-days:])

    def count(self) -> int:
        with self.cache.lock:
            return len(self._records())

    def is_date_stored(self, day: str) -> bool:
        with self.cache.lock:
            return any(r.date == day for r in self._records())

    def is_today_stored(self) -> bool:
        return self.is_date_stored(ist_date_str(self.clock()))

    def to_frame(self, days: int | None = None) -> pd.DataFrame:
        """Snapshots as a DataFrame with FRAME_COLUMNS, oldest first."""
        records = self.get_history(days) if days is not None else self.get_history(self.count())
        return pd.DataFrame(
            [
                {
                    "date": r.date,
                    "price_per_gram": r.price_per_gram,
                    "price_per_kg": r.price_per_kg,
                    "spot_usd_oz": r.spot_usd_oz,
                    "usd_inr_rate": r.usd_inr_rate,
                    "source": r.source,
                    "timestamp": r.timestamp,
                }
                for r in records
            ],
            columns=FRAME_COLUMNS,
        )

    def export_csv(self, path: Path) -> Path:
        """Write the full history to CSV.

        Raises:
            ValueError: If there is nothing to export.
        """
        df = self.to_frame()
        if df.empty:
            raise ValueError(f"No stored {self.name} prices to export")
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(path, index=False, encoding="utf-8")
        self.logger.info("Exported %d records to %s", len(df), path)
        return path

    # ------------------------------------------------------------------
    # Private: storage
    # ------------------------------------------------------------------

    def _records(self) -> list[StoredDailyPrice]:
        """Loaded snapshots; the durable store is read only while the cache is empty."""
        if self.cache.records is None:
            self.cache.records = self._load()
        return self.cache.records

    def _load(self) -> list[StoredDailyPrice]:
        try:
            document = self.store.read()
        except StorageError as e:
            self._storage_failed("read", e)
            return []
        if document is None:
            return []

        entries = self._entries(document)
        if entries is None:
            self._storage_failed("parse", MalformedRecordError("Unrecognised history layout"))
            return []

        by_date: dict[str, StoredDailyPrice] = {}
        skipped = 0
        for entry in entries:
            try:
                record = StoredDailyPrice.from_dict(entry)
            except MalformedRecordError:
                skipped += 1
                continue
            if not _DATE_RE.match(record.date):
                skipped += 1
                continue
            by_date[record.date] = record

        if skipped:
            self.logger.warning("[%s] Skipped %d malformed snapshots", self.name, skipped)
        records = sorted(by_date.values(), key=lambda r: r.date)
        self.logger.info("[%s] Loaded %d snapshots from %s", self.name, len(records), self.store.location)
        return records

    @staticmethod
    def _entries(document: Any) -> list | None:
        if isinstance(document, list):
            return document
        if isinstance(document, dict):
            # Date-keyed layout; the key wins over a missing inner date
            return [
                {"date": key, **value} if isinstance(value, dict) else value
                for key, value in document.items()
                if _DATE_RE.match(key)
            ]
        return None

    def _storage_failed(self, action: str, error: Exception) -> None:
        self.last_storage_error = error
        self.logger.warning(
            "[%s] History %s failed (%s): %s", self.name, action, self.store.location, error
        )
