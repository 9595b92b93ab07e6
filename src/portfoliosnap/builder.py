"""Snapshot builder: holdings -> concurrent providers -> enriched metrics."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Sequence

from portfoliosnap.config import PortfolioConfig, ProviderType
from portfoliosnap.loader import load_holdings
from portfoliosnap.models.enriched import EnrichedHolding
from portfoliosnap.models.holding import Holding
from portfoliosnap.models.quote import QuoteData
from portfoliosnap.models.snapshot import PortfolioSnapshot
from portfoliosnap.models.summary import PortfolioTotals, SectorSummary
from portfoliosnap.numeric import round_half_up, round_optional
from portfoliosnap.providers import create_provider
from portfoliosnap.providers.base import BaseQuoteProvider
from portfoliosnap.quality import validate_snapshot
from portfoliosnap.resolution import ResolvedQuote, resolve_quote
from portfoliosnap.store import HoldingsStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotBuilder:
    """Central orchestrator: store -> concurrent providers -> resolve -> aggregate.

    Usage::

        from portfoliosnap import create_builder_from_env
        builder = create_builder_from_env()
        snapshot = builder.build()
        payload = snapshot.to_dict()

    Any collaborator can be injected; whatever is not injected is built
    from ``config``.
    """

    def __init__(
        self,
        config: PortfolioConfig | None = None,
        *,
        store: HoldingsStore | None = None,
        price_provider: BaseQuoteProvider | None = None,
        metrics_provider: BaseQuoteProvider | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.config = config or PortfolioConfig()
        self.store = store or HoldingsStore(
            partial(load_holdings, self.config.data_path),
            ttl_seconds=self.config.holdings_ttl_seconds,
        )
        self.price_provider = price_provider or self._make_provider(self.config.price_provider)
        self.metrics_provider = metrics_provider or self._make_provider(self.config.metrics_provider)
        self.clock = clock

    def _make_provider(self, provider_type: ProviderType) -> BaseQuoteProvider:
        cfg = self.config
        kwargs: dict[str, Any] = {}
        if provider_type is ProviderType.YAHOO:
            kwargs["base_url"] = cfg.yahoo_base_url
            kwargs["timeout"] = cfg.request_timeout
        elif provider_type is ProviderType.GOOGLE:
            kwargs["base_url"] = cfg.google_base_url
            kwargs["timeout"] = cfg.request_timeout
            kwargs["delay_seconds"] = cfg.scrape_delay_seconds
            kwargs["deadline_seconds"] = cfg.scrape_deadline_seconds
        return create_provider(provider_type, **kwargs)

    # ------------------------------------------------------------- snapshot

    def build(self) -> PortfolioSnapshot:
        """Build a fresh snapshot. Never raises for provider or source failures."""
        holdings = self.store.get()
        price_quotes, metric_quotes = self._fetch_all(holdings)

        total_investment = sum(h.investment for h in holdings)
        enriched = tuple(
            self._enrich(
                h,
                resolve_quote(h, price_quotes.get(h.symbol), metric_quotes.get(h.symbol)),
                total_investment,
            )
            for h in holdings
        )

        snapshot = PortfolioSnapshot(
            as_of=self.clock(),
            holdings=enriched,
            sectors=summarize_sectors(enriched),
            totals=compute_totals(enriched, total_investment),
        )

        if self.config.validate:
            for check in validate_snapshot(snapshot).failed_checks:
                logger.warning("Snapshot check %s failed: %s", check.name, check.message)
        return snapshot

    def _fetch_all(
        self, holdings: Sequence[Holding],
    ) -> tuple[dict[str, QuoteData], dict[str, QuoteData]]:
        """Run both providers concurrently and wait for both."""
        if not holdings:
            return {}, {}
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="quotes") as pool:
            price = pool.submit(self.price_provider.fetch_quotes, holdings)
            metrics = pool.submit(self.metrics_provider.fetch_quotes, holdings)
            return price.result(), metrics.result()

    @staticmethod
    def _enrich(
        holding: Holding, quote: ResolvedQuote, total_investment: float,
    ) -> EnrichedHolding:
        investment = holding.investment
        # A zero CMP is treated as unknown, same as a missing one.
        current_value = quote.cmp * holding.quantity if quote.cmp else None
        gain_loss = current_value - investment if current_value is not None else None
        gain_loss_pct = (
            gain_loss / investment * 100
            if gain_loss is not None and investment != 0
            else None
        )
        weight = investment / total_investment * 100 if total_investment else 0.0

        return EnrichedHolding(
            holding=holding,
            investment=round_half_up(investment),
            weight=round_half_up(weight),
            cmp=round_optional(quote.cmp),
            pe_ratio=round_optional(quote.pe_ratio),
            latest_earnings=quote.latest_earnings,
            current_value=round_optional(current_value),
            gain_loss=round_optional(gain_loss),
            gain_loss_pct=round_optional(gain_loss_pct),
            stale_fields=quote.stale_fields,
        )


# ------------------------------------------------------------- aggregation

def summarize_sectors(holdings: Sequence[EnrichedHolding]) -> tuple[SectorSummary, ...]:
    """Group holdings by sector, ordered by descending investment.

    Missing current values count as zero. A sector whose summed value is
    not positive reports no current value and no gain/loss.
    """
    groups: dict[str, list[EnrichedHolding]] = {}
    for h in holdings:
        groups.setdefault(h.sector or "Unknown", []).append(h)

    sectors: list[SectorSummary] = []
    for sector, members in groups.items():
        investment = sum(h.investment for h in members)
        current_value = sum(h.current_value or 0 for h in members)
        gain_loss = current_value - investment if current_value > 0 else None
        gain_loss_pct = (
            round_half_up(gain_loss / investment * 100)
            if gain_loss is not None
            else None
        )
        sectors.append(SectorSummary(
            sector=sector,
            investment=round_half_up(investment),
            current_value=round_half_up(current_value) if current_value > 0 else None,
            gain_loss=round_optional(gain_loss),
            gain_loss_pct=gain_loss_pct,
        ))

    sectors.sort(key=lambda s: s.investment, reverse=True)
    return tuple(sectors)


def compute_totals(
    holdings: Sequence[EnrichedHolding], total_investment: float,
) -> PortfolioTotals:
    """Grand totals. Current value is None if any holding lacks one."""
    missing = any(h.current_value is None for h in holdings)
    current_value = (
        None if missing
        else round_half_up(sum(h.current_value for h in holdings))  # type: ignore[misc]
    )
    gain_loss = (
        round_half_up(current_value - total_investment)
        if current_value is not None
        else None
    )
    gain_loss_pct = (
        round_half_up(gain_loss / total_investment * 100)
        if gain_loss is not None and total_investment
        else None
    )
    return PortfolioTotals(
        investment=round_half_up(total_investment),
        current_value=current_value,
        gain_loss=gain_loss,
        gain_loss_pct=gain_loss_pct,
    )
