"""Keyed metal price providers, used only when self-calculation fails.

Both quote INR per troy ounce directly:
    - MetalpriceAPI  https://metalpriceapi.com  (METALPRICE_API_KEY, 100 req/month free)
    - GoldAPI.io     https://www.goldapi.io     (GOLDAPI_KEY, 300 req/month free)

A collector built without a key is disabled: every fetch returns None
without touching the network.
"""

from pathlib import Path

import requests

from src.ingestion.collectors.base_collector import BaseCollector
from src.shared.config import Config
from src.shared.utils import is_valid_price


class MetalpriceAPICollector(BaseCollector):
    """INR per ounce from MetalpriceAPI."""

    SOURCE_NAME = "metalpriceapi"

    BASE_URL = "https://api.metalpriceapi.com/v1"

    def __init__(
        self,
        api_key: str | None = None,
        session: requests.Session | None = None,
        timeout: int | None = None,
        log_file: Path | None = None,
    ) -> None:
        super().__init__(session=session, timeout=timeout, log_file=log_file)
        self._api_key = api_key if api_key is not None else Config.METALPRICE_API_KEY

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def health_check(self) -> bool:
        return self.fetch_inr_per_ounce("XAG") is not None

    def fetch_inr_per_ounce(self, iso_code: str) -> float | None:
        """Price of one troy ounce of ``iso_code`` (XAG, XAU) in INR."""
        if not self.enabled:
            return None
        payload = self._get_json(
            f"{self.BASE_URL}/latest",
            params={"api_key": self._api_key, "base": iso_code, "currencies": "INR"},
        )
        if not isinstance(payload, dict):
            return None
        price = (payload.get("rates") or {}).get("INR")
        if not is_valid_price(price):
            self.logger.error("No INR rate in MetalpriceAPI response for %s", iso_code)
            return None
        return float(price)


class GoldAPICollector(BaseCollector):
    """INR per ounce from GoldAPI.io."""

    SOURCE_NAME = "goldapi"

    BASE_URL = "https://www.goldapi.io/api"

    def __init__(
        self,
        api_key: str | None = None,
        session: requests.Session | None = None,
        timeout: int | None = None,
        log_file: Path | None = None,
    ) -> None:
        super().__init__(session=session, timeout=timeout, log_file=log_file)
        self._api_key = api_key if api_key is not None else Config.GOLDAPI_KEY

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def health_check(self) -> bool:
        return self.fetch_inr_per_ounce("XAG") is not None

    def fetch_inr_per_ounce(self, iso_code: str) -> float | None:
        """Price of one troy ounce of ``iso_code`` (XAG, XAU) in INR."""
        if not self.enabled:
            return None
        payload = self._get_json(
            f"{self.BASE_URL}/{iso_code}/INR",
            headers={"x-access-token": self._api_key, "Content-Type": "application/json"},
        )
        if not isinstance(payload, dict):
            return None
        price = payload.get("price")
        if not is_valid_price(price):
            self.logger.error("No price in GoldAPI response for %s", iso_code)
            return None
        return float(price)
