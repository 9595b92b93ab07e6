"""Quote sources for the snapshot builder.

``ProviderType`` values from the config map to dotted class paths here, so
``requests``-backed modules load only when a builder actually asks for
them. The mock source needs no network and is what offline runs use.
"""

from __future__ import annotations

import importlib

from portfoliosnap.config import ProviderType
from portfoliosnap.providers.base import BaseQuoteProvider

PROVIDER_CLASSES: dict[ProviderType, str] = {
    ProviderType.YAHOO: "portfoliosnap.providers.yahoo.YahooQuoteProvider",
    ProviderType.GOOGLE: "portfoliosnap.providers.google.GoogleFinanceProvider",
    ProviderType.MOCK: "portfoliosnap.providers.mock.MockProvider",
}


def create_provider(provider_type: ProviderType, **kwargs) -> BaseQuoteProvider:
    """Build the quote source for ``provider_type``.

    ``kwargs`` go straight to the class: ``base_url`` and ``timeout`` for
    the HTTP sources, plus ``delay_seconds`` and ``deadline_seconds`` for
    the scraper.
    """
    module_path, _, class_name = PROVIDER_CLASSES[provider_type].rpartition(".")
    provider_cls = getattr(importlib.import_module(module_path), class_name)
    return provider_cls(**kwargs)


__all__ = ["BaseQuoteProvider", "PROVIDER_CLASSES", "create_provider"]
