"""Data ingestion module - upstream price and FX collectors."""

from src.ingestion.collectors import (
    BaseCollector,
    FrankfurterCollector,
    GoldAPICollector,
    MetalpriceAPICollector,
    YahooQuoteCollector,
)

__all__ = [
    "BaseCollector",
    "FrankfurterCollector",
    "GoldAPICollector",
    "MetalpriceAPICollector",
    "YahooQuoteCollector",
]
