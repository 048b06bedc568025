"""Daily extremes, closing history and 24h change tracking."""

from src.tracker.change import PriceChange, compute_change
from src.tracker.close_of_day import CloseOfDayJob, CloseOfDayResult
from src.tracker.extremes import DailyExtremesTracker, ExtremesCache, default_cache
from src.tracker.history import DailyPriceHistory, HistoryCache, default_history_cache
from src.tracker.tracker import PriceTracker

__all__ = [
    "PriceTracker",
    "DailyExtremesTracker",
    "DailyPriceHistory",
    "ExtremesCache",
    "HistoryCache",
    "default_cache",
    "default_history_cache",
    "PriceChange",
    "compute_change",
    "CloseOfDayJob",
    "CloseOfDayResult",
]
