"""
Module: forecast_engines.horizon
Responsibility:
    Project total MRR forward over fixed horizons (+1, +3, +6, +12 months).

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Model:
    Stable run-rate: ``forecast(n) = total_mrr * n``.  Recurring revenue is
    assumed flat with no churn, no expansion and no new clients.  This is a
    disclosed simplification of the forecast, not an error.

Invariants enforced:
    - Horizons are positive integers; projections are therefore monotonic
      non-decreasing in ``n`` for any ``total_mrr >= 0``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from forecast_engines.parameters import STANDARD_HORIZONS


@dataclass(frozen=True)
class HorizonProjection:
    """Projected recurring revenue over the next ``months`` months."""

    months: int
    amount: Decimal

    @property
    def label(self) -> str:
        return f"M+{self.months}"


def project(total_mrr: Decimal, months: int) -> Decimal:
    """
    Run-rate projection of ``total_mrr`` over ``months`` months.

    Raises:
        ValueError: if ``months`` is not a positive integer.
    """
    if isinstance(months, bool) or not isinstance(months, int) or months <= 0:
        raise ValueError(f"horizon must be a positive integer, got {months!r}")
    return total_mrr * months


def project_horizons(
    total_mrr: Decimal,
    horizons: Sequence[int] = STANDARD_HORIZONS,
) -> tuple[HorizonProjection, ...]:
    """Project ``total_mrr`` over every horizon, ascending by months."""
    return tuple(
        HorizonProjection(months=n, amount=project(total_mrr, n))
        for n in sorted(set(horizons))
    )
