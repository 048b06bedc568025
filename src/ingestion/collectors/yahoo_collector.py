"""Yahoo Finance futures quotes (chart endpoint and yfinance).

Collects:
    - Latest futures price, USD per troy ounce (SI=F silver, GC=F gold)
    - Daily closing prices for charts and history backfill (via yfinance)

No API key is required. The chart endpoint is unofficial and may rate-limit or
change shape; every failure is reported as ``None`` / an empty DataFrame.

Example:
    >>> collector = YahooQuoteCollector()
    >>> collector.fetch_spot("SI=F")
    31.42
"""

from typing import Any

import pandas as pd
import yfinance as yf

from src.ingestion.collectors.base_collector import BaseCollector
from src.shared.utils import is_valid_price


class YahooQuoteCollector(BaseCollector):
    """Collector for futures prices from the Yahoo Finance chart API."""

    SOURCE_NAME = "yahoo"

    BASE_URL = "https://query1.finance.yahoo.com/v8/finance/chart"
    DEFAULT_HEADERS = {
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    }

    # (max days, yfinance period)
    _RANGES: tuple[tuple[int, str], ...] = (
        (5, "5d"),
        (30, "1mo"),
        (90, "3mo"),
        (180, "6mo"),
        (365, "1y"),
    )

    def health_check(self) -> bool:
        """Check the chart endpoint answers for the silver contract."""
        return self.fetch_spot("SI=F") is not None

    def fetch_spot(self, symbol: str) -> float | None:
        """Latest market price for ``symbol`` in USD per troy ounce.

        Returns:
            The regularMarketPrice, or None if missing, non-positive or unreachable.
        """
        result = self._chart(symbol, range_="1d")
        if result is None:
            return None

        price = (result.get("meta") or {}).get("regularMarketPrice")
        if not is_valid_price(price):
            self.logger.error("Invalid price data from Yahoo Finance for %s: %r", symbol, price)
            return None

        self.logger.info("Yahoo Finance %s price: $%.2f/oz", symbol, price)
        return float(price)

    def fetch_history(self, symbol: str, days: int = 30) -> pd.DataFrame:
        """Daily closes for the last ``days`` days.

        Returns:
            DataFrame with columns [date, close] (date as YYYY-MM-DD in the
            exchange session), sorted ascending. Empty on failure.
        """
        empty = pd.DataFrame(columns=["date", "close"])
        period = self.range_for(days)
        try:
            raw = yf.Ticker(symbol).history(period=period, interval="1d", auto_adjust=False)
        except Exception as e:
            # yfinance raises assorted exception types
            self.logger.error("Yahoo Finance history for %s failed: %s", symbol, e)
            return empty

        if raw is None or raw.empty or "Close" not in raw.columns:
            self.logger.error("No Yahoo Finance history for %s (period=%s)", symbol, period)
            return empty

        rows = [
            {"date": ts.strftime("%Y-%m-%d"), "close": float(close)}
            for ts, close in raw["Close"].items()
            if is_valid_price(float(close))
        ]
        df = pd.DataFrame(rows, columns=["date", "close"])
        df = df.drop_duplicates(subset="date", keep="last").sort_values("date")
        self.logger.info("Fetched %d daily closes for %s", len(df), symbol)
        return df.tail(days).reset_index(drop=True)

    @classmethod
    def range_for(cls, days: int) -> str:
        """Smallest yfinance period covering ``days``."""
        for limit, range_ in cls._RANGES:
            if days <= limit:
                return range_
        return "2y"

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _chart(self, symbol: str, range_: str) -> dict[str, Any] | None:
        payload = self._get_json(
            f"{self.BASE_URL}/{symbol}",
            params={"interval": "1d", "range": range_},
        )
        if not isinstance(payload, dict):
            return None
        results = (payload.get("chart") or {}).get("result") or []
        if not results or not isinstance(results[0], dict):
            self.logger.error("Empty chart result from Yahoo Finance for %s", symbol)
            return None
        return results[0]
