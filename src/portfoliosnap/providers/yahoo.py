"""Yahoo Finance bulk quote provider.

One batched request per snapshot for price and trailing P/E. Symbols are
mapped to Yahoo tickers (``HDFCBANK.NS``, ``532174.BO``) and results are
matched back by the ``symbol`` field of each entry.
"""

from __future__ import annotations

from typing import Any, Sequence

import certifi
import requests

from portfoliosnap.errors import PortfolioError, PortfolioErrorCode
from portfoliosnap.models.holding import Exchange, Holding
from portfoliosnap.models.quote import QuoteData
from portfoliosnap.numeric import finite_or_none
from portfoliosnap.providers.base import BaseQuoteProvider

_SUFFIXES: dict[Exchange, str] = {
    Exchange.NSE: ".NS",
    Exchange.BSE: ".BO",
}


def to_yahoo_symbol(symbol: str, exchange: Exchange) -> str:
    return f"{symbol}{_SUFFIXES.get(exchange, '')}"


class YahooQuoteProvider(BaseQuoteProvider):
    """Fetch CMP and trailing P/E for a batch of holdings.

    Capabilities: cmp, pe_ratio. A symbol with no usable price falls back
    to the holding's static CMP.
    """

    name = "yahoo"

    def __init__(
        self,
        base_url: str = "https://query1.finance.yahoo.com",
        timeout: float = 10.0,
        session: Any | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.verify = certifi.where()
        self.session = session

    def capabilities(self) -> set[str]:
        return {"cmp", "pe_ratio"}

    def fallback_quote(self, holding: Holding) -> QuoteData:
        return QuoteData(
            cmp=holding.fallback_cmp,
            fallback_fields=frozenset({"cmp"}) if holding.fallback_cmp is not None else frozenset(),
        )

    def _fetch_quotes(self, holdings: Sequence[Holding]) -> dict[str, QuoteData]:
        by_ticker: dict[str, Holding] = {
            to_yahoo_symbol(h.symbol, h.exchange): h for h in holdings
        }
        url = f"{self.base_url}/v7/finance/quote"

        try:
            resp = self.session.get(
                url,
                params={"symbols": ",".join(by_ticker)},
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise PortfolioError(
                f"Yahoo quote request timed out: {exc}",
                code=PortfolioErrorCode.TIMEOUT,
            ) from exc
        self._check_response(resp)

        try:
            payload = resp.json()
        except ValueError as exc:
            raise PortfolioError(
                f"Yahoo quote response is not JSON: {exc}",
                code=PortfolioErrorCode.PARSE_ERROR,
            ) from exc

        quotes: dict[str, QuoteData] = {}
        for item in self._results(payload):
            ticker = item.get("symbol")
            if not isinstance(ticker, str):
                continue
            holding = by_ticker.get(ticker)
            if holding is None:
                continue
            quotes[holding.symbol] = self._item_to_quote(item, holding)
        return quotes

    @staticmethod
    def _results(payload: Any) -> list[dict[str, Any]]:
        if not isinstance(payload, dict):
            raise PortfolioError(
                "Yahoo quote response has no quoteResponse object",
                code=PortfolioErrorCode.PARSE_ERROR,
            )
        results = (payload.get("quoteResponse") or {}).get("result") or []
        return [r for r in results if isinstance(r, dict)]

    def _item_to_quote(self, item: dict[str, Any], holding: Holding) -> QuoteData:
        price = finite_or_none(item.get("regularMarketPrice"))
        if price is None:
            fallback = self.fallback_quote(holding)
            return QuoteData(
                cmp=fallback.cmp,
                pe_ratio=finite_or_none(item.get("trailingPE")),
                fallback_fields=fallback.fallback_fields,
            )
        return QuoteData(
            cmp=price,
            pe_ratio=finite_or_none(item.get("trailingPE")),
        )
