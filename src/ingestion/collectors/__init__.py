"""Collectors package."""

from src.ingestion.collectors.base_collector import BaseCollector
from src.ingestion.collectors.frankfurter_collector import PEGGED_RATES, FrankfurterCollector
from src.ingestion.collectors.keyed_collectors import GoldAPICollector, MetalpriceAPICollector
from src.ingestion.collectors.yahoo_collector import YahooQuoteCollector

__all__ = [
    "BaseCollector",
    "YahooQuoteCollector",
    "FrankfurterCollector",
    "PEGGED_RATES",
    "MetalpriceAPICollector",
    "GoldAPICollector",
]
