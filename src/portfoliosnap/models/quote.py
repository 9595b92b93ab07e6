"""Provider-scoped quote data model."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class QuoteData:
    """Per-symbol result from a single provider.

    Attributes:
        cmp: Current market price.
        pe_ratio: Trailing price/earnings ratio.
        latest_earnings: Latest earnings-per-share text.
        fallback_fields: Fields the provider filled from the holding's
            static fallbacks instead of live data.
    """

    cmp: float | None = None
    pe_ratio: float | None = None
    latest_earnings: str | None = None
    fallback_fields: frozenset[str] = field(default_factory=frozenset)
