"""Current landed price, snapshot with 24h change, price history, Gulf
prices and the gold/silver ratio.

Price resolution order:
    1. Self-calculation: Yahoo futures quote + Frankfurter USD/INR, fetched
       concurrently, run through the landed price formula.
    2. MetalpriceAPI (only when METALPRICE_API_KEY is set).
    3. GoldAPI.io (only when GOLDAPI_KEY is set).

The resolved price is cached for ``Config.PRICE_CACHE_TTL`` seconds per
service instance. ``None`` means every source failed.
"""

import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

from src.ingestion.collectors import (
    FrankfurterCollector,
    GoldAPICollector,
    MetalpriceAPICollector,
    YahooQuoteCollector,
)
from src.pricing.calculator import (
    GOLD,
    SILVER,
    LandedPrice,
    Metal,
    calculate_landed_price,
    get_metal,
    landed_price_from_inr_ounce,
    landed_price_per_gram,
)
from src.pricing.international import (
    Country,
    GoldSilverRatio,
    InternationalPrice,
    calculate_gold_silver_ratio,
    calculate_international_price,
    get_country,
)
from src.shared.config import Config
from src.shared.utils import ist_date_str, now_utc, round2, setup_logger
from src.storage.schema import DailyExtremes
from src.tracker.change import PriceChange
from src.tracker.tracker import PriceTracker

# Share of requested days that stored history must cover to skip Yahoo
MIN_STORED_COVERAGE = 0.8


@dataclass(frozen=True)
class PriceSnapshot:
    """Current price together with its 24h change and today's range."""

    price: LandedPrice
    change: PriceChange
    extremes: DailyExtremes

    def to_dict(self) -> dict[str, Any]:
        return {
            "price": self.price.to_dict(),
            "change": self.change.to_dict(),
            "extremes": self.extremes.to_dict(),
        }


class MetalPriceService:
    """Resolve the landed INR price of one metal and track it."""

    def __init__(
        self,
        metal: Metal | str = "silver",
        yahoo: YahooQuoteCollector | None = None,
        frankfurter: FrankfurterCollector | None = None,
        metalprice: MetalpriceAPICollector | None = None,
        goldapi: GoldAPICollector | None = None,
        tracker: PriceTracker | None = None,
        clock: Callable[[], datetime] = now_utc,
        cache_ttl: int | None = None,
        log_file: Path | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            metal: Metal descriptor or name.
            yahoo: Futures quote collector.
            frankfurter: FX collector.
            metalprice: Keyed fallback provider (disabled without a key).
            goldapi: Keyed fallback provider (disabled without a key).
            tracker: Extremes and history tracker (default: PriceTracker.for_metal).
            clock: Returns the current time as an aware datetime.
            cache_ttl: Seconds a resolved price is reused (default: Config.PRICE_CACHE_TTL).
            log_file: Optional path for file-based logging.
        """
        self.metal = get_metal(metal) if isinstance(metal, str) else metal
        self.yahoo = yahoo or YahooQuoteCollector(log_file=log_file)
        self.frankfurter = frankfurter or FrankfurterCollector(log_file=log_file)
        self.metalprice = metalprice or MetalpriceAPICollector(log_file=log_file)
        self.goldapi = goldapi or GoldAPICollector(log_file=log_file)
        self.tracker = tracker or PriceTracker.for_metal(self.metal.name, clock=clock, log_file=log_file)
        self.clock = clock
        self.cache_ttl = Config.PRICE_CACHE_TTL if cache_ttl is None else cache_ttl
        self.logger = setup_logger(self.__class__.__name__, log_file)

        self._cached: LandedPrice | None = None
        self._cached_at: datetime | None = None
        self._cache_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Current price
    # ------------------------------------------------------------------

    def get_price(self, use_cache: bool = True) -> LandedPrice | None:
        """Landed price from the first source that answers.

        Args:
            use_cache: Reuse a price resolved less than cache_ttl seconds ago.

        Returns:
            LandedPrice, or None if every source failed.
        """
        now = self.clock()
        with self._cache_lock:
            if use_cache and self._is_fresh(now):
                return self._cached

        price = self._calculate(now) or self._from_keyed_providers(now)
        if price is None:
            self.logger.error("All %s price sources failed", self.metal.name)
            return None

        with self._cache_lock:
            self._cached, self._cached_at = price, now
        return price

    def get_snapshot(self) -> PriceSnapshot | None:
        """Current price folded into today's extremes, with the 24h change.

        A tracker failure degrades to a neutral change and a range equal to
        the current price.

        Returns:
            PriceSnapshot, or None when no price is available.
        """
        price = self.get_price()
        if price is None:
            return None

        extremes: DailyExtremes | None = None
        change = PriceChange.neutral()
        try:
            extremes = self.tracker.update_extremes(price.price_per_gram)
            change = self.tracker.change_since_reference(price.price_per_gram)
        except Exception as e:
            self.logger.exception("Tracker failed for %s: %s", self.metal.name, e)

        if extremes is None:
            extremes = DailyExtremes.opening(
                ist_date_str(self.clock()), price.price_per_gram, price.timestamp
            )

        return PriceSnapshot(price=price, change=change, extremes=extremes)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def get_historical_prices(self, days: int = 30) -> pd.DataFrame:
        """Daily prices (INR per gram) for the last ``days`` days.

        Stored closes are used alone when they cover at least 80% of the
        window. Otherwise Yahoo closes, converted at the current USD/INR rate,
        fill the gaps; a stored close wins over Yahoo for the same date.

        Returns:
            DataFrame with columns [date, price], oldest first. Empty when
            neither source has data.
        """
        if days <= 0:
            raise ValueError(f"days must be positive, got {days}")

        stored = {r.date: r.price_per_gram for r in self.tracker.history.get_history(days)}
        if len(stored) >= days * MIN_STORED_COVERAGE:
            self.logger.info("Using %d days of stored %s prices", len(stored), self.metal.name)
            return self._frame(stored, days)

        merged = self._yahoo_prices(days)
        yahoo_count = len(merged)
        merged.update(stored)
        self.logger.info(
            "Merged %d stored + %d Yahoo = %d %s prices",
            len(stored),
            yahoo_count,
            len(merged),
            self.metal.name,
        )
        return self._frame(merged, days)

    # ------------------------------------------------------------------
    # International and ratio
    # ------------------------------------------------------------------

    def get_international_price(self, country: Country | str) -> InternationalPrice | None:
        """Local price of this metal in a Gulf market.

        Args:
            country: Country descriptor or key ("qatar", "uae", ...).

        Returns:
            InternationalPrice, or None if the quote or a rate is unavailable.

        Raises:
            ValueError: If the country is not configured.
        """
        country = get_country(country) if isinstance(country, str) else country

        with ThreadPoolExecutor(max_workers=2) as executor:
            spot_future = executor.submit(self.yahoo.fetch_spot, self.metal.yahoo_symbol)
            rates_future = executor.submit(self.frankfurter.fetch_rates, [country.currency])
            spot, rates = spot_future.result(), rates_future.result()

        local_rate = (rates or {}).get(country.currency)
        inr_rate = (rates or {}).get("INR")
        if spot is None or local_rate is None or inr_rate is None:
            self.logger.error(
                "Cannot price %s in %s (spot=%s, %s=%s, INR=%s)",
                self.metal.name,
                country.name,
                spot,
                country.currency,
                local_rate,
                inr_rate,
            )
            return None

        return calculate_international_price(
            spot, local_rate, inr_rate, country, metal=self.metal, now=self.clock()
        )

    def get_gold_silver_ratio(self) -> GoldSilverRatio | None:
        """Gold/silver ratio from both futures quotes.

        Returns:
            GoldSilverRatio, or None if any input is unavailable.
        """
        with ThreadPoolExecutor(max_workers=3) as executor:
            gold = executor.submit(self.yahoo.fetch_spot, GOLD.yahoo_symbol)
            silver = executor.submit(self.yahoo.fetch_spot, SILVER.yahoo_symbol)
            rate = executor.submit(self.frankfurter.fetch_rate, "USD", "INR")
            gold_usd, silver_usd, usd_inr = gold.result(), silver.result(), rate.result()

        if gold_usd is None or silver_usd is None or usd_inr is None:
            self.logger.error(
                "Cannot calculate gold/silver ratio (gold=%s, silver=%s, usd_inr=%s)",
                gold_usd,
                silver_usd,
                usd_inr,
            )
            return None

        result = calculate_gold_silver_ratio(gold_usd, silver_usd, usd_inr, now=self.clock())
        self.logger.info("Gold/silver ratio %.2f (%s)", result.ratio, result.interpretation)
        return result

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _is_fresh(self, now: datetime) -> bool:
        if self._cached is None or self._cached_at is None:
            return False
        return (now - self._cached_at).total_seconds() < self.cache_ttl

    def _fetch_spot_and_rate(self) -> tuple[float | None, float | None]:
        with ThreadPoolExecutor(max_workers=2) as executor:
            spot = executor.submit(self.yahoo.fetch_spot, self.metal.yahoo_symbol)
            rate = executor.submit(self.frankfurter.fetch_rate, "USD", "INR")
            return spot.result(), rate.result()

    def _calculate(self, now: datetime) -> LandedPrice | None:
        spot, rate = self._fetch_spot_and_rate()
        if spot is None or rate is None:
            self.logger.warning(
                "Cannot calculate %s price (spot=%s, usd_inr=%s)", self.metal.name, spot, rate
            )
            return None
        price = calculate_landed_price(spot, rate, metal=self.metal, source="calculated", now=now)
        self.logger.info(
            "Calculated %s: $%.2f/oz x %.2f = %.2f INR/gram",
            self.metal.name,
            spot,
            rate,
            price.price_per_gram,
        )
        return price

    def _from_keyed_providers(self, now: datetime) -> LandedPrice | None:
        for provider in (self.metalprice, self.goldapi):
            if not provider.enabled:
                continue
            inr_per_oz = provider.fetch_inr_per_ounce(self.metal.iso_code)
            if inr_per_oz is not None:
                self.logger.info("Using %s price for %s", provider.SOURCE_NAME, self.metal.name)
                return landed_price_from_inr_ounce(
                    inr_per_oz, metal=self.metal, source=provider.SOURCE_NAME, now=now
                )
        return None

    def _yahoo_prices(self, days: int) -> dict[str, float]:
        closes = self.yahoo.fetch_history(self.metal.yahoo_symbol, days)
        if closes.empty:
            return {}
        rate = self.frankfurter.fetch_rate("USD", "INR")
        if rate is None:
            self.logger.warning("No USD/INR rate, Yahoo history not converted")
            return {}
        return {
            row.date: round2(landed_price_per_gram(row.close, rate))
            for row in closes.itertuples(index=False)
        }

    @staticmethod
    def _frame(prices: dict[str, float], days: int) -> pd.DataFrame:
        df = pd.DataFrame(sorted(prices.items()), columns=["date", "price"])
        return df.tail(days).reset_index(drop=True)
