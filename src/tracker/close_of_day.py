"""Close-of-day snapshot job.

The daily history is written only here, once per IST day, at or after the
configured close time. Ordinary price requests never save history, so a
stored close is always the price seen by the scheduled run (or by an
operator forcing one).

Schedule ``scripts/save_daily_price.py`` from cron, e.g. at 23:45 IST:

    45 23 * * *  TZ=Asia/Kolkata  python scripts/save_daily_price.py --metal silver
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from src.shared.config import Config
from src.shared.utils import ist_date_str, iso_timestamp, now_utc, setup_logger, to_ist
from src.storage.schema import StoredDailyPrice
from src.tracker.history import DailyPriceHistory


@dataclass(frozen=True)
class CloseOfDayResult:
    """Outcome of one job run."""

    saved: bool
    skipped: bool
    reason: str  # "saved", "before_close", "already_stored", "no_price"
    record: StoredDailyPrice | None = None


class CloseOfDayJob:
    """Save today's closing price for one commodity."""

    def __init__(
        self,
        price_source,
        history: DailyPriceHistory,
        clock: Callable[[], datetime] = now_utc,
        close_time: tuple[int, int] | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the job.

        Args:
            price_source: Object whose get_price() returns a LandedPrice or None.
            history: Target history store.
            clock: Returns the current time as an aware datetime.
            close_time: (hour, minute) in IST (default: Config.close_time()).
            log_file: Optional path for file-based logging.
        """
        self.price_source = price_source
        self.history = history
        self.clock = clock
        self.close_time = close_time or Config.close_time()
        self.logger = setup_logger(self.__class__.__name__, log_file)

    def is_after_close(self, now: datetime | None = None) -> bool:
        local = to_ist(now or self.clock())
        return (local.hour, local.minute) >= self.close_time

    def run(self, force: bool = False, overwrite: bool = False) -> CloseOfDayResult:
        """Fetch the current price and store it as today's close.

        Args:
            force: Run even before the configured close time.
            overwrite: Replace a snapshot already stored for today.
        """
        now = self.clock()
        today = ist_date_str(now)

        if not force and not self.is_after_close(now):
            hour, minute = self.close_time
            self.logger.info(
                "Before close (%02d:%02d IST), not saving %s snapshot", hour, minute, today
            )
            return CloseOfDayResult(saved=False, skipped=True, reason="before_close")

        if not overwrite and self.history.is_date_stored(today):
            self.logger.info("Snapshot for %s already stored", today)
            return CloseOfDayResult(saved=False, skipped=True, reason="already_stored")

        price = self.price_source.get_price()
        if price is None:
            self.logger.error("No price available, %s close not saved", today)
            return CloseOfDayResult(saved=False, skipped=False, reason="no_price")

        record = StoredDailyPrice(
            date=today,
            price_per_gram=price.price_per_gram,
            price_per_kg=price.price_per_kg,
            spot_usd_oz=price.spot_usd_oz or 0.0,
            usd_inr_rate=price.usd_inr_rate or 0.0,
            source=price.source,
            timestamp=iso_timestamp(now),
        )
        self.history.save_daily_price(record)
        return CloseOfDayResult(saved=True, skipped=False, reason="saved", record=record)
