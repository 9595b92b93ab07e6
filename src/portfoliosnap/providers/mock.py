"""Mock provider for testing and offline runs, no network access."""

from __future__ import annotations

from typing import Sequence

from portfoliosnap.errors import PortfolioError, PortfolioErrorCode
from portfoliosnap.models.holding import Holding
from portfoliosnap.models.quote import QuoteData
from portfoliosnap.providers.base import BaseQuoteProvider


class MockProvider(BaseQuoteProvider):
    """In-memory provider that returns pre-loaded quotes.

    Use ``set_quote`` to pre-load data and ``fail`` to simulate an outage.
    Symbols without a pre-loaded quote resolve to an empty ``QuoteData``.
    Every call is recorded in ``calls``.
    """

    name = "mock"

    def __init__(
        self,
        quotes: dict[str, QuoteData] | None = None,
        name: str = "mock",
    ) -> None:
        self.name = name
        self._quotes: dict[str, QuoteData] = {
            k.upper(): v for k, v in (quotes or {}).items()
        }
        self._failure: PortfolioError | None = None
        self.calls: list[tuple[str, ...]] = []

    # --- Pre-load helpers ---

    def set_quote(self, symbol: str, quote: QuoteData) -> None:
        self._quotes[symbol.upper()] = quote

    def fail(
        self,
        message: str = "mock outage",
        code: PortfolioErrorCode = PortfolioErrorCode.PROVIDER_ERROR,
    ) -> None:
        self._failure = PortfolioError(message, code=code)

    def recover(self) -> None:
        self._failure = None

    # --- Provider implementation ---

    def capabilities(self) -> set[str]:
        return {"cmp", "pe_ratio", "latest_earnings"}

    def _fetch_quotes(self, holdings: Sequence[Holding]) -> dict[str, QuoteData]:
        self.calls.append(tuple(h.symbol for h in holdings))
        if self._failure is not None:
            raise self._failure
        return {
            h.symbol: self._quotes.get(h.symbol.upper(), QuoteData())
            for h in holdings
        }
