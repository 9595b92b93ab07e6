"""Consistency checks for built snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field

from portfoliosnap.models.snapshot import PortfolioSnapshot


@dataclass
class ValidationCheck:
    """Outcome of one named snapshot check."""

    name: str
    passed: bool
    message: str = ""


@dataclass
class ValidationResult:
    """All check outcomes for one snapshot."""

    checks: list[ValidationCheck] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(c.passed for c in self.checks)

    @property
    def failed_checks(self) -> list[ValidationCheck]:
        return [c for c in self.checks if not c.passed]


def validate_snapshot(snapshot: PortfolioSnapshot) -> ValidationResult:
    """Run all consistency checks on a snapshot.

    Checks:
        1. Weights sum to 100 (within 0.1; skipped for an empty portfolio)
        2. Every position has positive purchase price and quantity
        3. Sector investments add up to the total (within 0.01 per holding)
        4. Sectors are ordered by descending investment
    """
    result = ValidationResult()
    holdings = snapshot.holdings

    # 1. Weights
    if holdings:
        weight_sum = sum(h.weight for h in holdings)
        if abs(weight_sum - 100) > 0.1:
            result.checks.append(
                ValidationCheck("weights_sum", False, f"weights sum to {weight_sum:.2f}")
            )
        else:
            result.checks.append(ValidationCheck("weights_sum", True))

    # 2. Positive positions
    bad = [
        h.symbol for h in holdings
        if h.holding.purchase_price <= 0 or h.holding.quantity <= 0
    ]
    if bad:
        result.checks.append(
            ValidationCheck("positive_positions", False, f"non-positive positions: {', '.join(bad)}")
        )
    else:
        result.checks.append(ValidationCheck("positive_positions", True))

    # 3. Sector investment vs total
    sector_sum = sum(s.investment for s in snapshot.sectors)
    tolerance = 0.01 * max(len(holdings), 1)
    drift = abs(sector_sum - snapshot.totals.investment)
    if drift > tolerance:
        result.checks.append(
            ValidationCheck("sector_investment", False, f"sectors differ from total by {drift:.2f}")
        )
    else:
        result.checks.append(ValidationCheck("sector_investment", True))

    # 4. Sector ordering
    out_of_order = sum(
        1 for prev, cur in zip(snapshot.sectors, snapshot.sectors[1:])
        if cur.investment > prev.investment
    )
    if out_of_order:
        result.checks.append(
            ValidationCheck("sector_order", False, f"{out_of_order} sectors out of order")
        )
    else:
        result.checks.append(ValidationCheck("sector_order", True))

    return result
