"""Google Finance scraped metrics provider.

Quote pages are fetched one symbol at a time with a fixed pause after
each request to stay under the upstream throttle. P/E and EPS are read
from the page text by a ``MetricExtractor``. CMP is never taken from here.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Sequence

import certifi
import requests

from portfoliosnap.errors import PortfolioError, PortfolioErrorCode
from portfoliosnap.extractors import LabelPatternExtractor, MetricExtractor
from portfoliosnap.models.holding import Exchange, Holding
from portfoliosnap.models.quote import QuoteData
from portfoliosnap.providers.base import BaseQuoteProvider

logger = logging.getLogger(__name__)

_VENUES: dict[Exchange, str] = {
    Exchange.NSE: "NSE",
    Exchange.BSE: "BOM",
}


def to_google_symbol(symbol: str, exchange: Exchange) -> str:
    return f"{_VENUES.get(exchange, exchange.value)}:{symbol}"


class GoogleFinanceProvider(BaseQuoteProvider):
    """Scrape P/E and EPS per holding, sequentially.

    Capabilities: pe_ratio, latest_earnings.

    Args:
        base_url: Root of the quote pages.
        timeout: Per-request timeout in seconds.
        delay_seconds: Pause after every processed holding.
        deadline_seconds: Budget for the whole loop. Holdings left when it
            runs out get their fallbacks without a request.
        extractor: Strategy used to read metrics from a page.
        session: ``requests``-compatible session.
        sleep: Pause function, injectable for tests.
        clock: Monotonic clock used for the deadline.
    """

    name = "google"

    def __init__(
        self,
        base_url: str = "https://www.google.com/finance",
        timeout: float = 10.0,
        delay_seconds: float = 0.1,
        deadline_seconds: float | None = 120.0,
        extractor: MetricExtractor | None = None,
        session: Any | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.delay_seconds = delay_seconds
        self.deadline_seconds = deadline_seconds
        self.extractor = extractor or LabelPatternExtractor()
        if session is None:
            session = requests.Session()
            session.verify = certifi.where()
        self.session = session
        self._sleep = sleep
        self._clock = clock

    def capabilities(self) -> set[str]:
        return {"pe_ratio", "latest_earnings"}

    def fallback_quote(self, holding: Holding) -> QuoteData:
        stale = set()
        if holding.fallback_pe_ratio is not None:
            stale.add("pe_ratio")
        if holding.fallback_earnings is not None:
            stale.add("latest_earnings")
        return QuoteData(
            pe_ratio=holding.fallback_pe_ratio,
            latest_earnings=holding.fallback_earnings,
            fallback_fields=frozenset(stale),
        )

    def _fetch_quotes(self, holdings: Sequence[Holding]) -> dict[str, QuoteData]:
        quotes: dict[str, QuoteData] = {}
        started = self._clock()

        for index, holding in enumerate(holdings):
            if self._past_deadline(started):
                logger.warning(
                    "google scrape deadline of %.1fs reached; %d symbols left on fallbacks",
                    self.deadline_seconds, len(holdings) - index,
                )
                break

            try:
                quotes[holding.symbol] = self._fetch_one(holding)
            except Exception as exc:
                code = exc.code if isinstance(exc, PortfolioError) else PortfolioErrorCode.PROVIDER_ERROR
                logger.debug("google metrics for %s failed (%s): %s", holding.symbol, code.value, exc)
                quotes[holding.symbol] = self.fallback_quote(holding)

            self._sleep(self.delay_seconds)

        return quotes

    def _fetch_one(self, holding: Holding) -> QuoteData:
        url = f"{self.base_url}/quote/{to_google_symbol(holding.symbol, holding.exchange)}"
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.Timeout as exc:
            raise PortfolioError(
                f"Google quote page timed out: {exc}",
                code=PortfolioErrorCode.TIMEOUT,
            ) from exc
        self._check_response(resp)

        metrics = self.extractor.extract(resp.text)
        fallback = self.fallback_quote(holding)
        stale = set()
        pe_ratio = metrics.pe_ratio
        if pe_ratio is None:
            pe_ratio = fallback.pe_ratio
            stale |= fallback.fallback_fields & {"pe_ratio"}
        earnings = metrics.latest_earnings
        if earnings is None:
            earnings = fallback.latest_earnings
            stale |= fallback.fallback_fields & {"latest_earnings"}

        return QuoteData(
            pe_ratio=pe_ratio,
            latest_earnings=earnings,
            fallback_fields=frozenset(stale),
        )

    def _past_deadline(self, started: float) -> bool:
        if not self.deadline_seconds:
            return False
        return self._clock() - started > self.deadline_seconds
