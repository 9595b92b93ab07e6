"""Tests for the sequential Google Finance scrape provider (HTTP mocked)."""

import time
from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_holding, make_response
from portfoliosnap.extractors import ExtractedMetrics, MetricExtractor
from portfoliosnap.models.holding import Exchange
from portfoliosnap.models.quote import QuoteData
from portfoliosnap.providers.google import GoogleFinanceProvider, to_google_symbol

PAGE = "<div>P/E ratio</div><div>21.5</div><div>Earnings per share</div><div>64.2 INR</div>"


@pytest.fixture
def holdings():
    return [
        make_holding("HDFCBANK", pe=18.0, eps="80.1"),
        make_holding("532174", exchange=Exchange.BSE, pe=12.0),
        make_holding("INFY"),
    ]


class RecordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


def _provider(session, **kwargs):
    kwargs.setdefault("sleep", RecordingSleep())
    return GoogleFinanceProvider(base_url="https://finance.test/", session=session, **kwargs)


def _session(*responses):
    session = MagicMock()
    session.get.side_effect = list(responses)
    return session


class TestSymbols:
    def test_venue_prefixes(self):
        assert to_google_symbol("HDFCBANK", Exchange.NSE) == "NSE:HDFCBANK"
        assert to_google_symbol("532174", Exchange.BSE) == "BOM:532174"

    def test_one_request_per_symbol_in_order(self, holdings):
        session = _session(*(make_response(text=PAGE) for _ in holdings))
        _provider(session).fetch_quotes(holdings)
        urls = [c.args[0] for c in session.get.call_args_list]
        assert urls == [
            "https://finance.test/quote/NSE:HDFCBANK",
            "https://finance.test/quote/BOM:532174",
            "https://finance.test/quote/NSE:INFY",
        ]


class TestExtraction:
    def test_metrics_from_page(self, holdings):
        session = _session(*(make_response(text=PAGE) for _ in holdings))
        quotes = _provider(session).fetch_quotes(holdings)
        assert quotes["HDFCBANK"] == QuoteData(pe_ratio=21.5, latest_earnings="64.2")
        assert all(q.cmp is None for q in quotes.values())

    def test_missing_metrics_use_fallbacks(self, holdings):
        session = _session(*(make_response(text="<html>nothing here</html>") for _ in holdings))
        quotes = _provider(session).fetch_quotes(holdings)
        assert quotes["HDFCBANK"] == QuoteData(
            pe_ratio=18.0,
            latest_earnings="80.1",
            fallback_fields=frozenset({"pe_ratio", "latest_earnings"}),
        )
        assert quotes["532174"] == QuoteData(pe_ratio=12.0, fallback_fields=frozenset({"pe_ratio"}))
        assert quotes["INFY"] == QuoteData()

    def test_partial_page(self, holdings):
        session = _session(*(make_response(text="P/E ratio 30.1") for _ in holdings))
        quote = _provider(session).fetch_quotes(holdings)["HDFCBANK"]
        assert quote.pe_ratio == 30.1
        assert quote.latest_earnings == "80.1"
        assert quote.fallback_fields == frozenset({"latest_earnings"})

    def test_custom_extractor(self, holdings):
        class FixedExtractor(MetricExtractor):
            def extract(self, payload):
                return ExtractedMetrics(pe_ratio=9.9, latest_earnings="1.1")

        session = _session(*(make_response(text="{}") for _ in holdings))
        quotes = _provider(session, extractor=FixedExtractor()).fetch_quotes(holdings)
        assert quotes["INFY"] == QuoteData(pe_ratio=9.9, latest_earnings="1.1")


class TestFailures:
    def test_failure_does_not_abort_loop(self, holdings):
        session = _session(
            requests.ConnectionError("reset"),
            make_response(status_code=503),
            make_response(text=PAGE),
        )
        quotes = _provider(session).fetch_quotes(holdings)
        assert session.get.call_count == 3
        assert quotes["HDFCBANK"].pe_ratio == 18.0
        assert quotes["532174"].pe_ratio == 12.0
        assert quotes["INFY"] == QuoteData(pe_ratio=21.5, latest_earnings="64.2")

    def test_timeout_uses_fallback(self, holdings):
        session = _session(
            requests.Timeout("slow"),
            make_response(text=PAGE),
            make_response(text=PAGE),
        )
        quotes = _provider(session).fetch_quotes(holdings)
        assert quotes["HDFCBANK"].latest_earnings == "80.1"

    def test_request_timeout_forwarded(self, holdings):
        session = _session(*(make_response(text=PAGE) for _ in holdings))
        _provider(session, timeout=3.5).fetch_quotes(holdings)
        assert all(c.kwargs["timeout"] == 3.5 for c in session.get.call_args_list)


class TestRateLimiting:
    def test_one_delay_per_holding(self, holdings):
        sleep = RecordingSleep()
        session = _session(
            make_response(text=PAGE),
            requests.ConnectionError("reset"),
            make_response(status_code=429),
        )
        _provider(session, sleep=sleep, delay_seconds=0.1).fetch_quotes(holdings)
        assert sleep.calls == [0.1, 0.1, 0.1]

    def test_wall_clock_lower_bound(self, holdings):
        session = _session(*(make_response(text=PAGE) for _ in holdings))
        provider = GoogleFinanceProvider(session=session, delay_seconds=0.1)
        started = time.monotonic()
        provider.fetch_quotes(holdings)
        assert time.monotonic() - started >= 0.1 * len(holdings)

    def test_deadline_stops_loop(self, holdings):
        sleep = RecordingSleep()
        ticks = iter([0.0, 0.0, 11.0])
        session = _session(*(make_response(text=PAGE) for _ in holdings))
        provider = _provider(
            session, sleep=sleep, deadline_seconds=10.0, clock=lambda: next(ticks),
        )
        quotes = provider.fetch_quotes(holdings)
        assert session.get.call_count == 1
        assert sleep.calls == [0.1]
        assert quotes["HDFCBANK"].pe_ratio == 21.5
        assert quotes["532174"] == QuoteData(pe_ratio=12.0, fallback_fields=frozenset({"pe_ratio"}))

    def test_no_deadline(self, holdings):
        session = _session(*(make_response(text=PAGE) for _ in holdings))
        clock = MagicMock(side_effect=[0.0, 1e9, 2e9, 3e9])
        _provider(session, deadline_seconds=None, clock=clock).fetch_quotes(holdings)
        assert session.get.call_count == 3
