"""Tests for the bulk Yahoo quote provider (HTTP mocked)."""

import logging
import math
from unittest.mock import MagicMock

import pytest
import requests

from conftest import make_holding, make_response
from portfoliosnap.models.holding import Exchange
from portfoliosnap.models.quote import QuoteData
from portfoliosnap.providers.yahoo import YahooQuoteProvider, to_yahoo_symbol


@pytest.fixture
def holdings():
    return [
        make_holding("HDFCBANK", cmp=1700.0),
        make_holding("532174", exchange=Exchange.BSE, cmp=1050.0),
        make_holding("INFY"),
    ]


def _provider(response=None, error=None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return YahooQuoteProvider(base_url="https://quotes.test/", session=session), session


def _body(*results):
    return {"quoteResponse": {"result": list(results)}}


class TestSymbols:
    def test_suffixes(self):
        assert to_yahoo_symbol("HDFCBANK", Exchange.NSE) == "HDFCBANK.NS"
        assert to_yahoo_symbol("532174", Exchange.BSE) == "532174.BO"

    def test_single_batched_request(self, holdings):
        provider, session = _provider(make_response(json_body=_body()))
        provider.fetch_quotes(holdings)
        session.get.assert_called_once()
        args, kwargs = session.get.call_args
        assert args[0] == "https://quotes.test/v7/finance/quote"
        assert kwargs["params"] == {"symbols": "HDFCBANK.NS,532174.BO,INFY.NS"}
        assert kwargs["timeout"] == provider.timeout

    def test_empty_holdings_skip_request(self):
        provider, session = _provider(make_response(json_body=_body()))
        assert provider.fetch_quotes([]) == {}
        session.get.assert_not_called()


class TestParsing:
    def test_price_and_pe(self, holdings):
        body = _body(
            {"symbol": "HDFCBANK.NS", "regularMarketPrice": 1712.35, "trailingPE": 19.4},
            {"symbol": "532174.BO", "regularMarketPrice": 1101, "trailingPE": 17},
            {"symbol": "INFY.NS", "regularMarketPrice": 1490.2},
        )
        provider, _ = _provider(make_response(json_body=body))
        quotes = provider.fetch_quotes(holdings)
        assert quotes["HDFCBANK"] == QuoteData(cmp=1712.35, pe_ratio=19.4)
        assert quotes["532174"] == QuoteData(cmp=1101.0, pe_ratio=17.0)
        assert quotes["INFY"].pe_ratio is None
        assert all(q.latest_earnings is None for q in quotes.values())

    def test_matched_by_symbol_not_position(self, holdings):
        body = _body(
            {"symbol": "INFY.NS", "regularMarketPrice": 1490.2},
            {"symbol": "HDFCBANK.NS", "regularMarketPrice": 1712.35},
        )
        provider, _ = _provider(make_response(json_body=body))
        quotes = provider.fetch_quotes(holdings)
        assert quotes["INFY"].cmp == 1490.2
        assert quotes["HDFCBANK"].cmp == 1712.35

    def test_missing_entry_uses_fallback_cmp(self, holdings):
        body = _body({"symbol": "HDFCBANK.NS", "regularMarketPrice": 1712.35})
        provider, _ = _provider(make_response(json_body=body))
        quotes = provider.fetch_quotes(holdings)
        assert quotes["532174"] == QuoteData(cmp=1050.0, fallback_fields=frozenset({"cmp"}))
        assert quotes["INFY"] == QuoteData()

    @pytest.mark.parametrize("price", [None, "1712.35", math.nan, math.inf, True])
    def test_unusable_price_uses_fallback(self, holdings, price):
        body = _body({"symbol": "HDFCBANK.NS", "regularMarketPrice": price, "trailingPE": 19.4})
        provider, _ = _provider(make_response(json_body=body))
        quote = provider.fetch_quotes(holdings)["HDFCBANK"]
        assert quote.cmp == 1700.0
        assert quote.pe_ratio == 19.4
        assert quote.fallback_fields == frozenset({"cmp"})

    def test_unknown_symbols_ignored(self, holdings):
        body = _body({"symbol": "TCS.NS", "regularMarketPrice": 3500}, {"regularMarketPrice": 1})
        provider, _ = _provider(make_response(json_body=body))
        quotes = provider.fetch_quotes(holdings)
        assert set(quotes) == {"HDFCBANK", "532174", "INFY"}
        assert quotes["HDFCBANK"].cmp == 1700.0


    @pytest.mark.parametrize("bad_symbol", [["HDFCBANK.NS"], {"t": "INFY.NS"}, 532174, None])
    def test_malformed_entry_only_affects_itself(self, holdings, bad_symbol, caplog):
        body = _body(
            {"symbol": "HDFCBANK.NS", "regularMarketPrice": 1712.35},
            {"symbol": bad_symbol, "regularMarketPrice": 999.0},
            {"symbol": "532174.BO", "regularMarketPrice": 1101.0},
        )
        provider, _ = _provider(make_response(json_body=body))
        with caplog.at_level(logging.WARNING, logger="portfoliosnap.providers.base"):
            quotes = provider.fetch_quotes(holdings)
        assert quotes["HDFCBANK"] == QuoteData(cmp=1712.35)
        assert quotes["532174"] == QuoteData(cmp=1101.0)
        assert quotes["INFY"] == QuoteData()
        assert "provider failed" not in caplog.text


class TestFailures:
    def _assert_all_fallback(self, quotes):
        assert quotes["HDFCBANK"] == QuoteData(cmp=1700.0, fallback_fields=frozenset({"cmp"}))
        assert quotes["532174"] == QuoteData(cmp=1050.0, fallback_fields=frozenset({"cmp"}))
        assert quotes["INFY"] == QuoteData()

    @pytest.mark.parametrize("status", [404, 429, 500, 503])
    def test_http_error(self, holdings, status):
        provider, _ = _provider(make_response(status_code=status))
        self._assert_all_fallback(provider.fetch_quotes(holdings))

    def test_connection_error(self, holdings):
        provider, _ = _provider(error=requests.ConnectionError("refused"))
        self._assert_all_fallback(provider.fetch_quotes(holdings))

    def test_timeout(self, holdings, caplog):
        provider, _ = _provider(error=requests.Timeout("slow"))
        with caplog.at_level(logging.WARNING, logger="portfoliosnap.providers.base"):
            self._assert_all_fallback(provider.fetch_quotes(holdings))
        assert "timeout" in caplog.text

    def test_invalid_json(self, holdings):
        resp = make_response()
        resp.json.side_effect = ValueError("Expecting value")
        provider, _ = _provider(resp)
        self._assert_all_fallback(provider.fetch_quotes(holdings))

    def test_unexpected_shape(self, holdings):
        provider, _ = _provider(make_response(json_body=["not", "a", "dict"]))
        self._assert_all_fallback(provider.fetch_quotes(holdings))

    def test_rate_limit_logged(self, holdings, caplog):
        provider, _ = _provider(make_response(status_code=429))
        with caplog.at_level(logging.WARNING, logger="portfoliosnap.providers.base"):
            provider.fetch_quotes(holdings)
        assert "rate_limited" in caplog.text


class TestCapabilities:
    def test_capabilities(self):
        provider = YahooQuoteProvider(session=MagicMock())
        assert provider.capabilities() == {"cmp", "pe_ratio"}
