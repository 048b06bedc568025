"""Daily open / high / low tracking for one commodity.

Today's record lives in an in-process ``ExtremesCache`` and is mirrored to a
durable ``DocumentStore``. The durable copy is only a seed: it is read when
the cache has nothing for the current IST day, and written after every
update on a best-effort basis. A store failure is logged and never reaches
the caller.

Within one process, updates are serialised by the cache lock. Separate
processes keep separate caches and the last durable write wins, so the
displayed range is an approximation when several instances serve traffic.

Example:
    >>> from src.storage.backends import MemoryDocumentStore
    >>> tracker = DailyExtremesTracker(MemoryDocumentStore())
    >>> tracker.update_extremes(100.0).high
    100.0
"""

import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from src.shared.utils import is_valid_price, iso_timestamp, ist_date_str, now_utc, setup_logger
from src.storage.backends import DocumentStore, StorageError
from src.storage.schema import DailyExtremes, MalformedRecordError


class ExtremesCache:
    """Mutable holder for today's record, shared by trackers of one commodity."""

    def __init__(self) -> None:
        self.record: DailyExtremes | None = None
        self.lock = threading.RLock()

    def clear(self) -> None:
        with self.lock:
            self.record = None


_default_caches: dict[str, ExtremesCache] = {}
_default_caches_lock = threading.Lock()


def default_cache(key: str) -> ExtremesCache:
    """Process-wide cache for ``key``; survives across requests in a warm process."""
    with _default_caches_lock:
        if key not in _default_caches:
            _default_caches[key] = ExtremesCache()
        return _default_caches[key]


def clear_default_caches() -> None:
    with _default_caches_lock:
        _default_caches.clear()


class DailyExtremesTracker:
    """Fold observed prices into today's open / high / low record."""

    def __init__(
        self,
        store: DocumentStore,
        cache: ExtremesCache | None = None,
        clock: Callable[[], datetime] = now_utc,
        name: str = "silver",
        log_file: Path | None = None,
    ) -> None:
        """Initialize the tracker.

        Args:
            store: Durable store for the extremes document.
            cache: In-process state holder (a private one when omitted).
            clock: Returns the current time as an aware datetime.
            name: Commodity name, used in log messages.
            log_file: Optional path for file-based logging.
        """
        self.store = store
        self.cache = cache if cache is not None else ExtremesCache()
        self.clock = clock
        self.name = name
        self.last_storage_error: Exception | None = None
        self.logger = setup_logger(self.__class__.__name__, log_file)

    def get_extremes(self) -> DailyExtremes | None:
        """Today's record, or None if no price has been observed today."""
        today = ist_date_str(self.clock())
        with self.cache.lock:
            record = self._load_today(today)
            return record.copy() if record else None

    def update_extremes(self, current_price: float) -> DailyExtremes | None:
        """Fold ``current_price`` into today's record and return the result.

        A non-numeric, non-finite or non-positive price is rejected: nothing
        is written and today's record (None if there is none yet) is returned
        unchanged.
        """
        now = self.clock()
        today = ist_date_str(now)
        timestamp = iso_timestamp(now)

        with self.cache.lock:
            record = self._load_today(today)

            if not is_valid_price(current_price):
                self.logger.warning("[%s] Ignoring invalid price %r", self.name, current_price)
                return record.copy() if record else None

            price = float(current_price)
            if record is None:
                record = DailyExtremes.opening(today, price, timestamp)
                self.logger.info("[%s] New day %s started. Open: %.2f", self.name, today, price)
            else:
                record = record.copy()
                if price > record.high:
                    self.logger.info("[%s] New HIGH: %.2f (was %.2f)", self.name, price, record.high)
                    record.high = price
                    record.high_time = timestamp
                if price < record.low:
                    self.logger.info("[%s] New LOW: %.2f (was %.2f)", self.name, price, record.low)
                    record.low = price
                    record.low_time = timestamp
                record.last_updated = timestamp

            self.cache.record = record
            self._persist(record)
            return record.copy()

    # ------------------------------------------------------------------
    # Private: storage
    # ------------------------------------------------------------------

    def _load_today(self, today: str) -> DailyExtremes | None:
        cached = self.cache.record
        if cached is not None and cached.date == today:
            return cached

        try:
            document = self.store.read()
        except StorageError as e:
            self._storage_failed("read", e)
            return None
        if document is None:
            return None

        try:
            record = DailyExtremes.from_dict(document)
        except MalformedRecordError as e:
            self._storage_failed("parse", e)
            return None

        if record.date != today:
            self.logger.debug("[%s] Stored extremes are for %s, ignoring", self.name, record.date)
            return None

        self.logger.info(
            "[%s] Loaded extremes from %s: high=%.2f low=%.2f",
            self.name,
            self.store.location,
            record.high,
            record.low,
        )
        self.cache.record = record
        return record

    def _persist(self, record: DailyExtremes) -> None:
        try:
            self.store.write(record.to_dict())
        except StorageError as e:
            self._storage_failed("write", e)

    def _storage_failed(self, action: str, error: Exception) -> None:
        self.last_storage_error = error
        self.logger.warning(
            "[%s] Extremes %s failed (%s): %s", self.name, action, self.store.location, error
        )
