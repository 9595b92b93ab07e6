"""Abstract base class for quote providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Sequence

from portfoliosnap.errors import PortfolioError, PortfolioErrorCode
from portfoliosnap.models.holding import Holding
from portfoliosnap.models.quote import QuoteData

logger = logging.getLogger(__name__)


class BaseQuoteProvider(ABC):
    """Abstract base for market data providers.

    Subclasses implement ``_fetch_quotes`` and may raise from it freely.
    ``fetch_quotes`` is the public boundary: it never raises and always
    returns an entry for every requested symbol, substituting
    ``fallback_quote`` for symbols the subclass could not resolve.
    """

    name: str = "base"

    def fetch_quotes(self, holdings: Sequence[Holding]) -> dict[str, QuoteData]:
        """Resolve quotes for ``holdings``, keyed by holding symbol."""
        if not holdings:
            return {}

        try:
            quotes = self._fetch_quotes(holdings)
        except Exception as exc:
            code = exc.code if isinstance(exc, PortfolioError) else PortfolioErrorCode.PROVIDER_ERROR
            logger.warning(
                "%s provider failed (%s): %s; using fallbacks for %d symbols",
                self.name, code.value, exc, len(holdings),
            )
            quotes = {}

        return {
            h.symbol: quotes[h.symbol] if h.symbol in quotes else self.fallback_quote(h)
            for h in holdings
        }

    @abstractmethod
    def _fetch_quotes(self, holdings: Sequence[Holding]) -> dict[str, QuoteData]:
        """Provider-specific fetch. May omit symbols or raise."""
        ...

    def fallback_quote(self, holding: Holding) -> QuoteData:
        """Static substitute used when this provider has nothing for a holding."""
        return QuoteData()

    def capabilities(self) -> set[str]:
        """Fields this provider can supply live.

        Possible values: ``cmp``, ``pe_ratio``, ``latest_earnings``.
        """
        return set()

    # ---- shared HTTP helpers ----

    def _check_response(self, resp: Any) -> None:
        if resp.status_code == 429:
            raise PortfolioError(
                f"{self.name} rate limited",
                code=PortfolioErrorCode.RATE_LIMITED,
            )
        if resp.status_code == 404:
            raise PortfolioError(
                f"Symbol not found on {self.name}",
                code=PortfolioErrorCode.NOT_FOUND,
            )
        if resp.status_code >= 400:
            raise PortfolioError(
                f"{self.name} response {resp.status_code}",
                code=PortfolioErrorCode.PROVIDER_ERROR,
            )
