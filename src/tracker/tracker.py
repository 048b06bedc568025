"""Per-commodity tracker combining daily extremes and closing history."""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from src.shared.config import Config
from src.shared.utils import now_utc
from src.storage.backends import create_store
from src.storage.schema import DailyExtremes, StoredDailyPrice
from src.tracker.change import PriceChange, compute_change
from src.tracker.extremes import DailyExtremesTracker, ExtremesCache, default_cache
from src.tracker.history import DailyPriceHistory, HistoryCache, default_history_cache


class PriceTracker:
    """Daily extremes and 24h change for one commodity.

    Example:
        >>> tracker = PriceTracker.for_metal("silver", backend="memory")
        >>> tracker.update_extremes(251.4).open_price
        251.4
        >>> tracker.change_since_reference(251.4).has_reference
        False
    """

    def __init__(self, extremes: DailyExtremesTracker, history: DailyPriceHistory) -> None:
        self.extremes = extremes
        self.history = history

    @classmethod
    def for_metal(
        cls,
        metal: str,
        backend: str | None = None,
        data_dir: Path | None = None,
        clock: Callable[[], datetime] = now_utc,
        extremes_cache: ExtremesCache | None = None,
        history_cache: HistoryCache | None = None,
        log_file: Path | None = None,
    ) -> "PriceTracker":
        """Build a tracker wired to the configured storage backend.

        Args:
            metal: Commodity name ("silver", "gold").
            backend: "file" or "memory" (default: Config.STORAGE_BACKEND).
            data_dir: Directory for JSON files (default: Config.DATA_DIR).
            clock: Returns the current time as an aware datetime.
            extremes_cache: State holder (default: process-wide cache for the file).
            history_cache: State holder (default: process-wide cache for the file).
            log_file: Optional path for file-based logging.
        """
        backend = backend or Config.STORAGE_BACKEND
        data_dir = Path(data_dir or Config.DATA_DIR)

        extremes_path = _data_file(backend, data_dir, metal, "daily-extremes.json")
        history_path = _data_file(backend, data_dir, metal, "daily-prices.json")
        extremes_store = create_store(backend, extremes_path)
        history_store = create_store(backend, history_path)

        # Default caches follow the underlying document, not just the metal
        if extremes_cache is None:
            extremes_cache = default_cache(f"{backend}:{extremes_path}")
        if history_cache is None:
            history_cache = default_history_cache(f"{backend}:{history_path}")

        extremes = DailyExtremesTracker(
            extremes_store,
            cache=extremes_cache,
            clock=clock,
            name=metal,
            log_file=log_file,
        )
        history = DailyPriceHistory(
            history_store,
            cache=history_cache,
            clock=clock,
            name=metal,
            log_file=log_file,
        )
        return cls(extremes, history)

    @property
    def last_storage_error(self) -> Exception | None:
        return self.extremes.last_storage_error or self.history.last_storage_error

    def update_extremes(self, current_price: float) -> DailyExtremes | None:
        return self.extremes.update_extremes(current_price)

    def get_extremes(self) -> DailyExtremes | None:
        return self.extremes.get_extremes()

    def get_yesterday_reference_price(self) -> StoredDailyPrice | None:
        return self.history.get_yesterday_reference_price()

    def save_daily_price(self, record: StoredDailyPrice) -> None:
        self.history.save_daily_price(record)

    def change_since_reference(self, current_price: float) -> PriceChange:
        """24h change of ``current_price`` against the reference close."""
        return compute_change(current_price, self.get_yesterday_reference_price())


def _data_file(backend: str, data_dir: Path, metal: str, suffix: str) -> Path:
    """JSON file for ``metal``, reusing an unprefixed legacy silver file if present."""
    path = data_dir / f"{metal}-{suffix}"
    # Silver files written before gold was tracked carry no metal prefix
    legacy = data_dir / suffix
    if backend == "file" and metal == "silver" and not path.exists() and legacy.exists():
        return legacy
    return path
