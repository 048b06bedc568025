"""Frankfurter FX rates (ECB reference rates, no API key).

Gulf currencies pegged to the US dollar are answered from constants and
never requested. INR is always part of a multi-currency request since every
landed price needs it.

API: https://www.frankfurter.app/docs/
"""

from src.ingestion.collectors.base_collector import BaseCollector
from src.shared.utils import is_valid_price

# Official USD pegs
PEGGED_RATES: dict[str, float] = {
    "QAR": 3.64,
    "AED": 3.6725,
    "SAR": 3.75,
    "BHD": 0.376,
    "OMR": 0.385,
    "KWD": 0.307,  # basket peg, approximate
}


class FrankfurterCollector(BaseCollector):
    """Collector for USD-based exchange rates."""

    SOURCE_NAME = "frankfurter"

    BASE_URL = "https://api.frankfurter.app"

    def health_check(self) -> bool:
        return self.fetch_rate("USD", "INR") is not None

    def fetch_rate(self, base: str = "USD", quote: str = "INR") -> float | None:
        """Units of ``quote`` per one ``base``.

        Returns:
            The rate, or None if unavailable.
        """
        base, quote = base.upper(), quote.upper()
        if base == "USD" and quote in PEGGED_RATES:
            return PEGGED_RATES[quote]

        rates = self._latest(base, [quote])
        if rates is None:
            return None
        rate = rates.get(quote)
        if not is_valid_price(rate):
            self.logger.error("No valid %s/%s rate in Frankfurter response", base, quote)
            return None

        self.logger.info("Frankfurter %s-%s rate: %.4f", base, quote, rate)
        return float(rate)

    def fetch_rates(self, currencies: list[str]) -> dict[str, float] | None:
        """USD rates for several currencies, pegged ones included.

        Returns:
            Mapping currency -> rate, or None if nothing could be resolved.
        """
        wanted = [c.upper() for c in currencies]
        result = {c: PEGGED_RATES[c] for c in wanted if c in PEGGED_RATES}

        floating = [c for c in wanted if c not in PEGGED_RATES]
        if "INR" not in floating:
            floating.append("INR")

        rates = self._latest("USD", floating)
        if rates:
            result.update({c: float(r) for c, r in rates.items() if is_valid_price(r)})

        return result or None

    def _latest(self, base: str, symbols: list[str]) -> dict | None:
        payload = self._get_json(
            f"{self.BASE_URL}/latest",
            params={"from": base, "to": ",".join(symbols)},
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("rates"), dict):
            if payload is not None:
                self.logger.error("Unexpected Frankfurter payload: %r", payload)
            return None
        return payload["rates"]
