"""Metric extraction from unstructured quote pages.

Scraped pages have no schema, so values are found by scanning for a label
and reading the first plausible number after it. The strategy sits behind
``MetricExtractor`` so a structured source can replace it without touching
the provider or the resolution logic.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from portfoliosnap.numeric import finite_or_none

PE_LABELS = ("P/E ratio",)
EPS_LABELS = ("Earnings per share", "EPS")

_CLEAN_DECIMAL = re.compile(r"^[0-9]+(\.[0-9]+)?$")


@dataclass(frozen=True)
class ExtractedMetrics:
    """Values recovered from a single payload (None = not found)."""

    pe_ratio: float | None = None
    latest_earnings: str | None = None


class MetricExtractor(ABC):
    """Abstract extraction strategy."""

    @abstractmethod
    def extract(self, payload: str) -> ExtractedMetrics:
        ...


def to_number(text: str | None) -> float | None:
    """Parse ``"1,234.5"``-style text; None unless the result is finite."""
    if not text:
        return None
    cleaned = text.replace(",", "").strip()
    try:
        return finite_or_none(float(cleaned))
    except ValueError:
        return None


def extract_number_after_label(
    payload: str, label: str, window: int = 80,
) -> float | None:
    """First numeric run within ``window`` non-digit characters of ``label``."""
    pattern = re.compile(
        rf"{re.escape(label)}[^0-9]{{0,{window}}}([0-9.,-]+)", re.IGNORECASE,
    )
    match = pattern.search(payload)
    return to_number(match.group(1)) if match else None


def extract_decimal_after_label(payload: str, label: str) -> str | None:
    """Clean decimal text following ``label``.

    The value must be followed by a non-letter, non-``<`` character or the
    end of the payload, and must be a plain decimal shorter than 20
    characters. Style tokens such as hex colours are rejected.
    """
    pattern = re.compile(
        rf"{re.escape(label)}[^0-9]*?([0-9]+(?:\.[0-9]+)?(?:[^a-zA-Z<]|\Z))",
        re.IGNORECASE,
    )
    match = pattern.search(payload)
    if match is None:
        return None
    value = match.group(1).strip()
    if _CLEAN_DECIMAL.match(value) and len(value) < 20:
        return value
    return None


class LabelPatternExtractor(MetricExtractor):
    """Label-anchored regex extraction.

    P/E labels are tried in order with the windowed numeric scan; EPS
    labels are tried in order with the stricter decimal scan.
    """

    def __init__(
        self,
        pe_labels: tuple[str, ...] = PE_LABELS,
        eps_labels: tuple[str, ...] = EPS_LABELS,
        window: int = 80,
    ) -> None:
        self.pe_labels = pe_labels
        self.eps_labels = eps_labels
        self.window = window

    def extract(self, payload: str) -> ExtractedMetrics:
        pe_ratio: float | None = None
        for label in self.pe_labels:
            pe_ratio = extract_number_after_label(payload, label, self.window)
            if pe_ratio is not None:
                break

        earnings: str | None = None
        for label in self.eps_labels:
            earnings = extract_decimal_after_label(payload, label)
            if earnings is not None:
                break

        return ExtractedMetrics(pe_ratio=pe_ratio, latest_earnings=earnings)
