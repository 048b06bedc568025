"""Unit tests for the Yahoo Finance quote collector."""

from unittest.mock import Mock, patch

import pandas as pd
import requests

from src.ingestion.collectors.yahoo_collector import YahooQuoteCollector


def _make_response(payload=None, status: int = 200, bad_json: bool = False) -> Mock:
    resp = Mock()
    resp.status_code = status
    if status >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(response=resp)
    else:
        resp.raise_for_status = Mock()
    if bad_json:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = payload
    return resp


def chart_payload(price=31.42) -> dict:
    return {
        "chart": {
            "result": [
                {
                    "meta": {"symbol": "SI=F", "regularMarketPrice": price},
                }
            ],
            "error": None,
        }
    }


# ---------------------------------------------------------------------------
# fetch_spot
# ---------------------------------------------------------------------------


class TestFetchSpot:
    def test_parses_regular_market_price(self):
        collector = YahooQuoteCollector()
        with patch.object(collector._session, "get", return_value=_make_response(chart_payload())) as get:
            assert collector.fetch_spot("SI=F") == 31.42

        url = get.call_args.args[0]
        assert url == "https://query1.finance.yahoo.com/v8/finance/chart/SI=F"
        assert get.call_args.kwargs["params"] == {"interval": "1d", "range": "1d"}
        assert "User-Agent" in get.call_args.kwargs["headers"]

    def test_non_positive_price_is_none(self):
        collector = YahooQuoteCollector()
        with patch.object(collector._session, "get", return_value=_make_response(chart_payload(price=0))):
            assert collector.fetch_spot("SI=F") is None

    def test_missing_price_is_none(self):
        collector = YahooQuoteCollector()
        payload = chart_payload()
        del payload["chart"]["result"][0]["meta"]["regularMarketPrice"]
        with patch.object(collector._session, "get", return_value=_make_response(payload)):
            assert collector.fetch_spot("SI=F") is None

    def test_empty_result_is_none(self):
        collector = YahooQuoteCollector()
        payload = {"chart": {"result": None, "error": {"code": "Not Found"}}}
        with patch.object(collector._session, "get", return_value=_make_response(payload)):
            assert collector.fetch_spot("XX=F") is None

    def test_http_error_is_none(self):
        collector = YahooQuoteCollector()
        with patch.object(collector._session, "get", return_value=_make_response(status=429)):
            assert collector.fetch_spot("SI=F") is None

    def test_connection_error_is_none(self):
        collector = YahooQuoteCollector()
        with patch.object(
            collector._session, "get", side_effect=requests.exceptions.ConnectionError("down")
        ):
            assert collector.fetch_spot("SI=F") is None

    def test_invalid_json_is_none(self):
        collector = YahooQuoteCollector()
        with patch.object(collector._session, "get", return_value=_make_response(bad_json=True)):
            assert collector.fetch_spot("SI=F") is None


# ---------------------------------------------------------------------------
# fetch_history
# ---------------------------------------------------------------------------


def _ticker_history(days: list[str], closes: list) -> Mock:
    index = pd.DatetimeIndex(pd.to_datetime(days)).tz_localize("America/New_York")
    ticker = Mock()
    ticker.history.return_value = pd.DataFrame(
        {"Open": closes, "High": closes, "Low": closes, "Close": closes}, index=index
    )
    return ticker


class TestFetchHistory:
    def test_parses_closes_and_drops_nan(self):
        collector = YahooQuoteCollector()
        ticker = _ticker_history(["2026-02-25", "2026-02-26", "2026-02-27"], [31.1, float("nan"), 31.6])
        with patch("src.ingestion.collectors.yahoo_collector.yf.Ticker", return_value=ticker) as cls:
            df = collector.fetch_history("SI=F", days=5)

        assert list(df.columns) == ["date", "close"]
        assert df["date"].tolist() == ["2026-02-25", "2026-02-27"]
        assert df["close"].tolist() == [31.1, 31.6]
        cls.assert_called_once_with("SI=F")
        ticker.history.assert_called_once_with(period="5d", interval="1d", auto_adjust=False)

    def test_keeps_last_days_only(self):
        collector = YahooQuoteCollector()
        days = [f"2026-02-{d:02d}" for d in range(1, 11)]
        ticker = _ticker_history(days, [30.0 + i for i in range(10)])
        with patch("src.ingestion.collectors.yahoo_collector.yf.Ticker", return_value=ticker):
            df = collector.fetch_history("SI=F", days=3)

        assert df["date"].tolist() == days[-3:]
        assert df.index.tolist() == [0, 1, 2]

    def test_empty_history_gives_empty_frame(self):
        collector = YahooQuoteCollector()
        ticker = Mock()
        ticker.history.return_value = pd.DataFrame()
        with patch("src.ingestion.collectors.yahoo_collector.yf.Ticker", return_value=ticker):
            df = collector.fetch_history("SI=F")

        assert df.empty
        assert list(df.columns) == ["date", "close"]

    def test_failure_gives_empty_frame(self):
        collector = YahooQuoteCollector()
        ticker = Mock()
        ticker.history.side_effect = requests.exceptions.ConnectionError("down")
        with patch("src.ingestion.collectors.yahoo_collector.yf.Ticker", return_value=ticker):
            assert collector.fetch_history("SI=F").empty


def test_range_for():
    assert YahooQuoteCollector.range_for(5) == "5d"
    assert YahooQuoteCollector.range_for(7) == "1mo"
    assert YahooQuoteCollector.range_for(30) == "1mo"
    assert YahooQuoteCollector.range_for(90) == "3mo"
    assert YahooQuoteCollector.range_for(120) == "6mo"
    assert YahooQuoteCollector.range_for(365) == "1y"
    assert YahooQuoteCollector.range_for(400) == "2y"


class TestHealthCheck:
    def test_true_when_price_available(self):
        collector = YahooQuoteCollector()
        with patch.object(collector._session, "get", return_value=_make_response(chart_payload())):
            assert collector.health_check() is True

    def test_false_when_unreachable(self):
        collector = YahooQuoteCollector()
        with patch.object(collector._session, "get", side_effect=requests.exceptions.Timeout("slow")):
            assert collector.health_check() is False
