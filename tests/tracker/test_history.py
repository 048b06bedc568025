"""Tests for the daily closing price history."""

import json
from datetime import date, timedelta

import pandas as pd
import pytest

from src.storage.backends import JsonFileDocumentStore, MemoryDocumentStore, StorageError
from src.storage.schema import StoredDailyPrice
from src.tracker.history import FRAME_COLUMNS, DailyPriceHistory, HistoryCache

TS = "2026-03-01T18:15:00.000Z"


def make_record(day: str, price: float = 250.0, source: str = "calculated") -> StoredDailyPrice:
    return StoredDailyPrice(date=day, price_per_gram=price, timestamp=TS, source=source)


def days_back(n: int, today: str = "2026-03-02") -> str:
    return (date.fromisoformat(today) - timedelta(days=n)).isoformat()


@pytest.fixture
def store():
    return MemoryDocumentStore("silver-daily-prices")


@pytest.fixture
def history(store, clock):
    return DailyPriceHistory(store, cache=HistoryCache(), clock=clock, retention_days=365)


# ---------------------------------------------------------------------------
# save_daily_price
# ---------------------------------------------------------------------------


class TestSaveDailyPrice:
    def test_save_is_idempotent_by_date(self, history, store):
        history.save_daily_price(make_record("2026-03-01", 250.0))
        history.save_daily_price(make_record("2026-03-01", 252.5))

        assert history.count() == 1
        assert history.get_history(5)[0].price_per_gram == 252.5
        assert [e["pricePerGram"] for e in store.read()] == [252.5]

    def test_records_are_sorted_by_date(self, history, store):
        for day in ["2026-02-27", "2026-02-25", "2026-02-26"]:
            history.save_daily_price(make_record(day))

        assert [r.date for r in history.get_history(10)] == ["2026-02-25", "2026-02-26", "2026-02-27"]
        assert [e["date"] for e in store.read()] == ["2026-02-25", "2026-02-26", "2026-02-27"]

    def test_retention_keeps_most_recent(self, history, store):
        start = date(2025, 1, 1)
        for i in range(400):
            history.save_daily_price(make_record((start + timedelta(days=i)).isoformat(), 200.0 + i))

        assert history.count() == 365
        stored = store.read()
        assert len(stored) == 365
        assert stored[0]["date"] == (start + timedelta(days=35)).isoformat()
        assert stored[-1]["date"] == (start + timedelta(days=399)).isoformat()

    @pytest.mark.parametrize(
        "record",
        [
            make_record("2026/03/01"),
            make_record(""),
            StoredDailyPrice(date="2026-03-01", price_per_gram=0.0, timestamp=TS),
            StoredDailyPrice(date="2026-03-01", price_per_gram=float("nan"), timestamp=TS),
        ],
    )
    def test_invalid_record_raises(self, history, record):
        with pytest.raises(ValueError):
            history.save_daily_price(record)
        assert history.count() == 0

    def test_failing_write_keeps_cache(self, clock):
        class ReadOnlyStore(MemoryDocumentStore):
            def write(self, document):
                raise StorageError("EROFS")

        history = DailyPriceHistory(ReadOnlyStore(), cache=HistoryCache(), clock=clock)
        history.save_daily_price(make_record("2026-03-01"))

        assert history.is_date_stored("2026-03-01")
        assert isinstance(history.last_storage_error, StorageError)
        assert history.get_yesterday_reference_price().date == "2026-03-01"


# ---------------------------------------------------------------------------
# Reference price
# ---------------------------------------------------------------------------


class TestReferencePrice:
    def test_exact_yesterday(self, history):
        history.save_daily_price(make_record(days_back(3), 240.0))
        history.save_daily_price(make_record(days_back(1), 250.0))

        reference = history.get_yesterday_reference_price()
        assert reference.date == "2026-03-01"
        assert reference.price_per_gram == 250.0

    def test_falls_back_to_latest_before_today(self, history):
        history.save_daily_price(make_record(days_back(9), 230.0))
        history.save_daily_price(make_record(days_back(5), 240.0))

        reference = history.get_yesterday_reference_price()
        assert reference.date == days_back(5)
        assert reference.price_per_gram == 240.0

    def test_today_is_never_a_reference(self, history):
        history.save_daily_price(make_record("2026-03-02", 260.0))
        assert history.get_yesterday_reference_price() is None

        history.save_daily_price(make_record(days_back(2), 245.0))
        assert history.get_yesterday_reference_price().date == days_back(2)

    def test_empty_history(self, history):
        assert history.get_yesterday_reference_price() is None

    def test_reference_follows_ist_date(self, history, clock):
        # 19:00 UTC on 03-01 is already 03-02 in India
        clock.set(clock.now.replace(day=1, hour=19, minute=0))
        history.save_daily_price(make_record("2026-03-02", 250.0))

        assert history.get_yesterday_reference_price() is None
        history.save_daily_price(make_record("2026-03-01", 245.0))
        assert history.get_yesterday_reference_price().date == "2026-03-01"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestLoading:
    def test_loads_array_layout_and_skips_malformed(self, tmp_path, clock):
        path = tmp_path / "silver-daily-prices.json"
        path.write_text(
            json.dumps(
                [
                    {"date": "2026-02-28", "pricePerGram": 248.0, "timestamp": TS},
                    {"date": "2026-03-01", "pricePerGram": "n/a", "timestamp": TS},
                    {"date": "not-a-date", "pricePerGram": 250.0, "timestamp": TS},
                    "garbage",
                    {"date": "2026-02-27", "pricePerGram": 246.0, "timestamp": TS},
                ]
            ),
            encoding="utf-8",
        )
        history = DailyPriceHistory(JsonFileDocumentStore(path), clock=clock)

        assert [r.date for r in history.get_history(10)] == ["2026-02-27", "2026-02-28"]
        assert history.get_yesterday_reference_price().date == "2026-02-28"

    def test_loads_legacy_date_keyed_layout(self, tmp_path, clock):
        path = tmp_path / "silver-daily-prices.json"
        path.write_text(
            json.dumps(
                {
                    "_metadata": {"lastUpdated": TS, "totalDays": 2},
                    "2026-03-01": {"pricePerGram": 251.0, "timestamp": TS, "comexUsdOz": 31.5},
                    "2026-02-28": {"pricePerGram": 249.0, "timestamp": TS},
                }
            ),
            encoding="utf-8",
        )
        history = DailyPriceHistory(JsonFileDocumentStore(path), clock=clock)

        reference = history.get_yesterday_reference_price()
        assert reference.date == "2026-03-01"
        assert reference.spot_usd_oz == 31.5
        assert history.count() == 2

    def test_rewrites_in_array_layout(self, tmp_path, clock):
        path = tmp_path / "silver-daily-prices.json"
        path.write_text(
            json.dumps({"2026-02-28": {"pricePerGram": 249.0, "timestamp": TS}}),
            encoding="utf-8",
        )
        history = DailyPriceHistory(JsonFileDocumentStore(path), clock=clock)
        history.save_daily_price(make_record("2026-03-01", 251.0))

        saved = json.loads(path.read_text(encoding="utf-8"))
        assert isinstance(saved, list)
        assert [e["date"] for e in saved] == ["2026-02-28", "2026-03-01"]

    def test_malformed_file_is_treated_as_empty(self, tmp_path, clock):
        path = tmp_path / "silver-daily-prices.json"
        path.write_text("[{", encoding="utf-8")
        history = DailyPriceHistory(JsonFileDocumentStore(path), clock=clock)

        assert history.get_yesterday_reference_price() is None
        assert isinstance(history.last_storage_error, StorageError)

        history.save_daily_price(make_record("2026-03-01"))
        assert json.loads(path.read_text(encoding="utf-8"))[0]["date"] == "2026-03-01"

    def test_store_is_read_once(self, clock):
        class CountingStore(MemoryDocumentStore):
            reads = 0

            def read(self):
                CountingStore.reads += 1
                return super().read()

        history = DailyPriceHistory(CountingStore(), cache=HistoryCache(), clock=clock)
        history.count()
        history.is_today_stored()
        history.get_yesterday_reference_price()
        assert CountingStore.reads == 1


# ---------------------------------------------------------------------------
# Queries and export
# ---------------------------------------------------------------------------


class TestQueries:
    def test_get_history_limits_to_most_recent(self, history):
        for n in range(10, 0, -1):
            history.save_daily_price(make_record(days_back(n), 200.0 + n))

        recent = history.get_history(3)
        assert [r.date for r in recent] == [days_back(3), days_back(2), days_back(1)]
        assert history.get_history(0) == []

    def test_is_today_stored(self, history):
        assert history.is_today_stored() is False
        history.save_daily_price(make_record("2026-03-02"))
        assert history.is_today_stored() is True
        assert history.is_date_stored("2026-03-01") is False

    def test_to_frame(self, history):
        history.save_daily_price(make_record(days_back(2), 248.0))
        history.save_daily_price(make_record(days_back(1), 250.0))

        df = history.to_frame()
        assert list(df.columns) == FRAME_COLUMNS
        assert df["price_per_gram"].tolist() == [248.0, 250.0]
        assert len(history.to_frame(days=1)) == 1

    def test_to_frame_empty(self, history):
        df = history.to_frame()
        assert df.empty
        assert list(df.columns) == FRAME_COLUMNS

    def test_export_csv(self, history, tmp_path):
        history.save_daily_price(make_record(days_back(1), 250.0))
        out = history.export_csv(tmp_path / "exports" / "silver.csv")

        df = pd.read_csv(out)
        assert df["date"].tolist() == [days_back(1)]
        assert df["price_per_gram"].tolist() == [250.0]

    def test_export_csv_empty_raises(self, history, tmp_path):
        with pytest.raises(ValueError, match="No stored silver prices"):
            history.export_csv(tmp_path / "silver.csv")
