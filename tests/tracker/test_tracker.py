"""Tests for the per-commodity tracker facade."""

import json

from src.storage.backends import JsonFileDocumentStore, MemoryDocumentStore
from src.storage.schema import StoredDailyPrice
from src.tracker.extremes import ExtremesCache
from src.tracker.history import HistoryCache
from src.tracker.tracker import PriceTracker

TS = "2026-03-01T18:15:00.000Z"


def snapshot(day: str, price: float) -> StoredDailyPrice:
    return StoredDailyPrice(date=day, price_per_gram=price, timestamp=TS)


class TestForMetal:
    def test_file_backend_paths(self, tmp_path, clock):
        tracker = PriceTracker.for_metal("silver", backend="file", data_dir=tmp_path, clock=clock)

        assert isinstance(tracker.extremes.store, JsonFileDocumentStore)
        assert tracker.extremes.store.path == tmp_path / "silver-daily-extremes.json"
        assert tracker.history.store.path == tmp_path / "silver-daily-prices.json"

    def test_memory_backend(self, tmp_path, clock):
        tracker = PriceTracker.for_metal("gold", backend="memory", data_dir=tmp_path, clock=clock)
        assert isinstance(tracker.extremes.store, MemoryDocumentStore)
        assert isinstance(tracker.history.store, MemoryDocumentStore)

    def test_default_caches_are_shared_per_metal(self, tmp_path, clock):
        first = PriceTracker.for_metal("silver", backend="memory", data_dir=tmp_path, clock=clock)
        second = PriceTracker.for_metal("silver", backend="memory", data_dir=tmp_path, clock=clock)
        gold = PriceTracker.for_metal("gold", backend="memory", data_dir=tmp_path, clock=clock)

        first.update_extremes(100.0)
        assert second.get_extremes().high == 100.0
        assert gold.get_extremes() is None

    def test_default_caches_are_separate_per_data_dir(self, tmp_path, clock):
        first = PriceTracker.for_metal("silver", backend="file", data_dir=tmp_path / "a", clock=clock)
        first.save_daily_price(snapshot("2026-03-01", 250.0))
        first.update_extremes(250.0)

        second = PriceTracker.for_metal("silver", backend="file", data_dir=tmp_path / "b", clock=clock)
        assert second.history.count() == 0
        assert second.get_yesterday_reference_price() is None
        assert second.get_extremes() is None
        assert not (tmp_path / "b" / "silver-daily-prices.json").exists()

    def test_legacy_silver_files_are_reused(self, tmp_path, clock):
        legacy = tmp_path / "daily-prices.json"
        legacy.write_text(json.dumps([snapshot("2026-03-01", 250.0).to_dict()]), encoding="utf-8")

        tracker = PriceTracker.for_metal("silver", backend="file", data_dir=tmp_path, clock=clock)

        assert tracker.history.store.path == legacy
        assert tracker.extremes.store.path == tmp_path / "silver-daily-extremes.json"
        assert tracker.get_yesterday_reference_price().price_per_gram == 250.0

    def test_prefixed_file_wins_over_legacy(self, tmp_path, clock):
        (tmp_path / "daily-prices.json").write_text("[]", encoding="utf-8")
        (tmp_path / "silver-daily-prices.json").write_text("[]", encoding="utf-8")

        tracker = PriceTracker.for_metal("silver", backend="file", data_dir=tmp_path, clock=clock)
        gold = PriceTracker.for_metal("gold", backend="file", data_dir=tmp_path, clock=clock)

        assert tracker.history.store.path == tmp_path / "silver-daily-prices.json"
        assert gold.history.store.path == tmp_path / "gold-daily-prices.json"

    def test_injected_caches(self, tmp_path, clock):
        extremes_cache, history_cache = ExtremesCache(), HistoryCache()
        tracker = PriceTracker.for_metal(
            "silver",
            backend="memory",
            data_dir=tmp_path,
            clock=clock,
            extremes_cache=extremes_cache,
            history_cache=history_cache,
        )
        tracker.update_extremes(100.0)
        assert extremes_cache.record.high == 100.0


class TestChange:
    def test_change_since_reference(self, tmp_path, clock):
        tracker = PriceTracker.for_metal("silver", backend="file", data_dir=tmp_path, clock=clock)
        tracker.save_daily_price(snapshot("2026-03-01", 250.0))

        change = tracker.change_since_reference(255.0)
        assert change.change == 5.0
        assert change.change_percent == 2.0
        assert change.reference_date == "2026-03-01"

        stored = json.loads((tmp_path / "silver-daily-prices.json").read_text(encoding="utf-8"))
        assert stored[0]["pricePerGram"] == 250.0

    def test_no_reference(self, tmp_path, clock):
        tracker = PriceTracker.for_metal("silver", backend="memory", data_dir=tmp_path, clock=clock)

        change = tracker.change_since_reference(255.0)
        assert change.change == 0.0
        assert change.change_percent == 0.0
        assert change.has_reference is False

    def test_last_storage_error(self, tmp_path, clock):
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        tracker = PriceTracker.for_metal("silver", backend="file", data_dir=blocker, clock=clock)

        assert tracker.last_storage_error is None
        assert tracker.update_extremes(100.0).high == 100.0
        assert tracker.last_storage_error is not None
