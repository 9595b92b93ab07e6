"""Tabular source loading: JSON, CSV and Excel holdings exports.

Every format is normalised to the same shape: a list of row mappings keyed
``Column1..ColumnN`` whose values are ``int``, ``float``, ``str`` or
``None``. The header stays in as the first row; the parser drops it.
"""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

import pandas as pd

from portfoliosnap.errors import PortfolioError, PortfolioErrorCode
from portfoliosnap.models.holding import Holding
from portfoliosnap.parser import DEFAULT_LAYOUT, ColumnLayout, parse_rows

JSON_SUFFIXES = {".json"}
CSV_SUFFIXES = {".csv"}
EXCEL_SUFFIXES = {".xlsx", ".xls"}


def load_rows(path: Path | str) -> list[dict[str, Any] | None]:
    """Read raw export rows from ``path``.

    Raises:
        PortfolioError: SOURCE_UNAVAILABLE if the file is missing, has an
            unsupported suffix, or cannot be decoded.
    """
    fp = Path(path)
    if not fp.exists():
        raise PortfolioError(
            f"Holdings source not found: {fp}",
            code=PortfolioErrorCode.SOURCE_UNAVAILABLE,
        )

    suffix = fp.suffix.lower()
    try:
        if suffix in JSON_SUFFIXES:
            return _json_rows(fp)
        if suffix in CSV_SUFFIXES:
            return _frame_rows(
                pd.read_csv(fp, header=None, dtype=str, keep_default_na=False),
                coerce_text=True,
            )
        if suffix in EXCEL_SUFFIXES:
            return _frame_rows(pd.read_excel(fp, header=None))
    except PortfolioError:
        raise
    except Exception as exc:
        raise PortfolioError(
            f"Could not read holdings source {fp}: {exc}",
            code=PortfolioErrorCode.SOURCE_UNAVAILABLE,
        ) from exc

    raise PortfolioError(
        f"Unsupported holdings source format: {suffix or fp.name}",
        code=PortfolioErrorCode.SOURCE_UNAVAILABLE,
    )


def load_holdings(
    path: Path | str,
    layout: ColumnLayout = DEFAULT_LAYOUT,
) -> list[Holding]:
    """Load and parse a holdings export in one step."""
    return parse_rows(load_rows(path), layout)


# ---- helpers ----

def _json_rows(fp: Path) -> list[dict[str, Any] | None]:
    with fp.open(encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, list):
        raise PortfolioError(
            f"Expected a JSON array of rows in {fp}",
            code=PortfolioErrorCode.SOURCE_UNAVAILABLE,
        )
    return [row if isinstance(row, dict) else None for row in data]


def _frame_rows(
    df: pd.DataFrame, coerce_text: bool = False,
) -> list[dict[str, Any] | None]:
    # CSV cells arrive as text; numeric-looking ones are restored to numbers
    # so the parser can tell index and BSE code cells apart.
    df.columns = [f"Column{i + 1}" for i in range(len(df.columns))]
    convert = _text_scalar if coerce_text else _scalar
    return [
        {col: convert(val) for col, val in record.items()}
        for record in df.to_dict(orient="records")
    ]


def _scalar(value: Any) -> Any:
    """Convert a pandas cell to a plain JSON-like scalar."""
    if value is None:
        return None
    if hasattr(value, "item"):
        value = value.item()
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return int(value)
    return value


def _text_scalar(value: Any) -> Any:
    if not isinstance(value, str):
        return _scalar(value)
    text = value.strip()
    if not text:
        return None
    numeric = pd.to_numeric(text, errors="coerce")
    if pd.isna(numeric):
        return value
    return _scalar(numeric)
