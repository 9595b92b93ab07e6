"""Tabular parser: rebuilds typed holdings from a loosely structured export.

The export is a flat list of rows keyed ``Column1..ColumnN``. Sector
headings, blank separators, subtotal lines and exited positions are mixed
in with the stock rows, so every row is classified first and the results
are folded into holdings with the current sector carried forward::

    rows = load_rows("data.json")
    holdings = parse_rows(rows)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, NamedTuple, Union

from portfoliosnap.models.holding import Exchange, Holding
from portfoliosnap.numeric import is_finite_number, number_to_str

Row = Mapping[str, Any]

DEFAULT_SECTOR = "Unknown"


@dataclass(frozen=True)
class ColumnLayout:
    """Positional column roles of the holdings export."""

    index: str = "Column1"
    name: str = "Column2"
    purchase_price: str = "Column3"
    quantity: str = "Column4"
    exchange_code: str = "Column7"
    fallback_cmp: str = "Column8"
    fallback_pe_ratio: str = "Column13"
    fallback_earnings: str = "Column14"
    status: str = "Column35"
    sector_token: str = "Sector"
    # "Consumer " keeps its trailing space; the export writes it that way.
    sector_names: frozenset[str] = field(
        default_factory=lambda: frozenset({"Power", "Consumer ", "Others"})
    )


DEFAULT_LAYOUT = ColumnLayout()


# ----------------------------------------------------------- classification

@dataclass(frozen=True)
class SectorMarker:
    """Row that opens a new sector group."""

    label: str


@dataclass(frozen=True)
class StockRow:
    """Row carrying a position; ``sector`` is assigned during the fold."""

    symbol: str
    name: str
    purchase_price: float
    quantity: float
    exchange: Exchange
    fallback_cmp: float | None = None
    fallback_pe_ratio: float | None = None
    fallback_earnings: str | None = None

    def to_holding(self, sector: str) -> Holding:
        return Holding(
            symbol=self.symbol,
            name=self.name,
            purchase_price=self.purchase_price,
            quantity=self.quantity,
            exchange=self.exchange,
            sector=sector,
            fallback_cmp=self.fallback_cmp,
            fallback_pe_ratio=self.fallback_pe_ratio,
            fallback_earnings=self.fallback_earnings,
        )


@dataclass(frozen=True)
class Skip:
    """Row that contributes nothing (blank, subtotal, exited, malformed)."""

    reason: str


RowClass = Union[SectorMarker, StockRow, Skip]


def is_sector_marker(name: Any, layout: ColumnLayout = DEFAULT_LAYOUT) -> bool:
    return isinstance(name, str) and (
        layout.sector_token in name or name in layout.sector_names
    )


def is_exited(status: Any) -> bool:
    """Status text such as "Exit", "Must exit" or "Sold"."""
    if not isinstance(status, str):
        return False
    folded = status.lower()
    return "exit" in folded or folded == "sold"


def _exchange_symbol(code: Any) -> tuple[str, Exchange] | None:
    # Venue is decided by cell type, never by value.
    if isinstance(code, str) and code:
        return code.upper(), Exchange.NSE
    if is_finite_number(code) and code:
        return number_to_str(code), Exchange.BSE
    return None


def _earnings_text(value: Any) -> str | None:
    if is_finite_number(value):
        return number_to_str(value)
    if isinstance(value, str):
        return value
    return None


def classify_row(row: Row, layout: ColumnLayout = DEFAULT_LAYOUT) -> RowClass:
    """Classify a single export row. Pure: no state is read or written."""
    name = row.get(layout.name)
    if is_sector_marker(name, layout):
        return SectorMarker(label=name.strip())

    if not is_finite_number(row.get(layout.index)):
        return Skip("index column is not numeric")
    if not isinstance(name, str) or not name.strip():
        return Skip("name column is empty")
    if is_exited(row.get(layout.status)):
        return Skip("position exited")

    purchase_price = row.get(layout.purchase_price)
    quantity = row.get(layout.quantity)
    if not is_finite_number(purchase_price) or purchase_price <= 0:
        return Skip("purchase price missing or not positive")
    if not is_finite_number(quantity) or quantity <= 0:
        return Skip("quantity missing or not positive")

    venue = _exchange_symbol(row.get(layout.exchange_code))
    if venue is None:
        return Skip("exchange code missing")
    symbol, exchange = venue

    fallback_cmp = row.get(layout.fallback_cmp)
    fallback_pe = row.get(layout.fallback_pe_ratio)
    return StockRow(
        symbol=symbol,
        name=name.strip(),
        purchase_price=purchase_price,
        quantity=quantity,
        exchange=exchange,
        fallback_cmp=fallback_cmp if is_finite_number(fallback_cmp) else None,
        fallback_pe_ratio=fallback_pe if is_finite_number(fallback_pe) else None,
        fallback_earnings=_earnings_text(row.get(layout.fallback_earnings)),
    )


# --------------------------------------------------------------------- fold

class ParseState(NamedTuple):
    """Accumulator threaded through the fold.

    ``holdings`` is appended to in place; ``parse_rows`` owns the list and
    only hands out a copy.
    """

    sector: str | None
    holdings: list[Holding]


def step(state: ParseState, result: RowClass) -> ParseState:
    """Apply one classified row to the accumulator."""
    if isinstance(result, SectorMarker):
        return ParseState(result.label, state.holdings)
    if isinstance(result, StockRow):
        state.holdings.append(result.to_holding(state.sector or DEFAULT_SECTOR))
    return state


def parse_rows(
    rows: Iterable[Row | None],
    layout: ColumnLayout = DEFAULT_LAYOUT,
) -> list[Holding]:
    """Parse export rows into holdings, in declaration order.

    The first row is the header and is always discarded; ``None`` rows are
    ignored. Rows that are not recognisable positions are skipped without
    a diagnostic.
    """
    iterator = iter(rows)
    next(iterator, None)

    state = ParseState(sector=None, holdings=[])
    for row in iterator:
        if row is None:
            continue
        state = step(state, classify_row(row, layout))
    return list(state.holdings)
