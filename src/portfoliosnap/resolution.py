"""Per-field source priority for merging provider quotes into a holding.

Each field has an ordered list of sources; the first one with a non-None
value wins. Sources are roles rather than provider names:

* ``price`` is the bulk quote provider,
* ``metrics`` is the scraped metrics provider,
* ``static`` is the holding's own fallback columns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from portfoliosnap.models.holding import Holding
from portfoliosnap.models.quote import QuoteData

PRICE = "price"
METRICS = "metrics"
STATIC = "static"

FIELD_ORDER: dict[str, tuple[str, ...]] = {
    "cmp": (PRICE, METRICS, STATIC),
    "pe_ratio": (METRICS, PRICE, STATIC),
    "latest_earnings": (METRICS, PRICE, STATIC),
}


@dataclass(frozen=True)
class ResolvedQuote:
    """Merged quote for one holding."""

    cmp: float | None = None
    pe_ratio: float | None = None
    latest_earnings: str | None = None
    stale_fields: tuple[str, ...] = ()


def static_quote(holding: Holding) -> QuoteData:
    """The holding's fallback columns as a quote; every value is stale."""
    return QuoteData(
        cmp=holding.fallback_cmp,
        pe_ratio=holding.fallback_pe_ratio,
        latest_earnings=holding.fallback_earnings,
        fallback_fields=frozenset(FIELD_ORDER),
    )


def resolve_field(
    name: str,
    sources: Mapping[str, QuoteData | None],
    order: tuple[str, ...] | None = None,
) -> tuple[Any, bool]:
    """Return ``(value, stale)`` for field ``name``.

    ``stale`` is True when the winning source filled the value from static
    fallback data. A field no source knows resolves to ``(None, False)``.
    """
    for source in order or FIELD_ORDER[name]:
        quote = sources.get(source)
        if quote is None:
            continue
        value = getattr(quote, name)
        if value is not None:
            return value, name in quote.fallback_fields
    return None, False


def resolve_quote(
    holding: Holding,
    price: QuoteData | None,
    metrics: QuoteData | None,
    field_order: Mapping[str, tuple[str, ...]] = FIELD_ORDER,
) -> ResolvedQuote:
    """Merge both provider quotes and the static fallbacks for ``holding``."""
    sources = {PRICE: price, METRICS: metrics, STATIC: static_quote(holding)}
    values: dict[str, Any] = {}
    stale: list[str] = []
    for name, order in field_order.items():
        value, is_stale = resolve_field(name, sources, order)
        values[name] = value
        if is_stale:
            stale.append(name)
    return ResolvedQuote(stale_fields=tuple(sorted(stale)), **values)
