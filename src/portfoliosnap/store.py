"""Holdings store: memoized, constructible cache of parsed holdings."""

from __future__ import annotations

import logging
import time
from typing import Callable, Sequence

from portfoliosnap.models.holding import Holding

logger = logging.getLogger(__name__)

HoldingsLoader = Callable[[], Sequence[Holding]]


class HoldingsStore:
    """Lazily loads holdings once and serves them read-only.

    The holdings export is treated as static: with ``ttl_seconds=None`` the
    first load lives for the lifetime of the store. A positive TTL reloads
    on the first ``get`` after expiry. A loader failure is logged and
    cached as an empty tuple, so snapshot requests keep working.

    Population is check-then-populate without a lock; concurrent first
    calls may each run the loader and the last result wins.
    """

    def __init__(
        self,
        loader: HoldingsLoader,
        ttl_seconds: float | None = None,
    ) -> None:
        self.loader = loader
        self.ttl = ttl_seconds
        self._entry: tuple[float, tuple[Holding, ...]] | None = None

    @property
    def is_loaded(self) -> bool:
        return self._entry is not None

    def get(self) -> tuple[Holding, ...]:
        """Return cached holdings, loading them on first access or expiry."""
        entry = self._entry
        if entry is None or self._expired(entry[0]):
            return self.refresh()
        return entry[1]

    def refresh(self) -> tuple[Holding, ...]:
        """Run the loader now and replace the cached entry."""
        try:
            holdings = tuple(self.loader())
        except Exception:
            logger.exception("Holdings loader failed; serving an empty portfolio")
            holdings = ()
        self._entry = (time.monotonic(), holdings)
        return holdings

    def invalidate(self) -> None:
        self._entry = None

    def _expired(self, loaded_at: float) -> bool:
        if self.ttl is None:
            return False
        return time.monotonic() - loaded_at > self.ttl
