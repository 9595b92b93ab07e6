"""Shared fixtures for portfoliosnap tests."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

# Ensure src/ is on the path for editable-style imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from portfoliosnap.models.holding import Exchange, Holding
from portfoliosnap.providers.mock import MockProvider
from portfoliosnap.store import HoldingsStore

FIXED_TIME = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)

HEADER = {"Column1": "No", "Column2": "Particulars", "Column3": "Purchase Price", "Column4": "Qty"}


def stock_row(
    index: Any,
    name: Any,
    price: Any,
    qty: Any,
    code: Any,
    *,
    cmp: Any = None,
    pe: Any = None,
    eps: Any = None,
    status: Any = None,
) -> dict[str, Any]:
    return {
        "Column1": index,
        "Column2": name,
        "Column3": price,
        "Column4": qty,
        "Column7": code,
        "Column8": cmp,
        "Column13": pe,
        "Column14": eps,
        "Column35": status,
    }


def sector_row(label: str) -> dict[str, Any]:
    return {"Column1": None, "Column2": label}


def make_holding(
    symbol: str = "HDFCBANK",
    *,
    price: float = 100.0,
    qty: float = 10,
    exchange: Exchange = Exchange.NSE,
    sector: str = "Financial Sector",
    cmp: float | None = None,
    pe: float | None = None,
    eps: str | None = None,
    name: str | None = None,
) -> Holding:
    return Holding(
        symbol=symbol,
        name=name or f"{symbol} Ltd",
        purchase_price=price,
        quantity=qty,
        exchange=exchange,
        sector=sector,
        fallback_cmp=cmp,
        fallback_pe_ratio=pe,
        fallback_earnings=eps,
    )


def make_response(status_code: int = 200, json_body: Any = None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = json_body
    resp.text = text
    return resp


@pytest.fixture
def sample_rows() -> list[dict[str, Any] | None]:
    """Export rows in the original layout: header, sectors, blanks, subtotals."""
    return [
        HEADER,
        sector_row("Financial Sector"),
        stock_row(1, "HDFC Bank", 1490, 50, "HDFCBANK", cmp=1700.5, pe=19.2, eps=84.3),
        {},
        stock_row(2, "Bajaj Finance", 6466, 15, 500034, cmp=7000, pe=32, eps="230.1"),
        {"Column1": None, "Column2": None, "Column3": 119500},
        sector_row("Tech Sector"),
        stock_row(3, "Infosys", 1647, 50, "INFY", status="Must Exit"),
        stock_row(4, "Affle India", 1151, 50, 542752),
        None,
        sector_row("Power"),
        stock_row(5, "Tata Power", 224, 225, "tatapower", pe="n/a"),
    ]


@pytest.fixture
def mock_provider() -> MockProvider:
    return MockProvider()


@pytest.fixture
def two_holdings() -> list[Holding]:
    return [
        make_holding("HDFCBANK", price=100.0, qty=10, cmp=95.0, pe=18.0, eps="80.1"),
        make_holding("532174", price=50.0, qty=20, exchange=Exchange.BSE, sector="Tech Sector"),
    ]


@pytest.fixture
def static_store(two_holdings) -> HoldingsStore:
    return HoldingsStore(lambda: two_holdings)
