"""
Module: forecast_engines.aggregator
Responsibility:
    Combine per-client resolutions into the total MRR, each client's share
    of that total, and a ranking by MRR.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``total_mrr`` equals the sum of every client's ``estimated_mrr``.
    - Shares sum to 1 whenever ``total_mrr > 0``; all shares are 0 when
      ``total_mrr == 0`` (never a division by zero).
    - Ranking is a stable sort, descending by MRR: equal MRRs keep their
      resolution order.
    - No rounding: full Decimal precision is kept so errors do not
      compound across horizons.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from forecast_kernel.domain.amounts import ZERO
from forecast_engines.client_resolver import ClientResolution


@dataclass(frozen=True)
class RankedClient:
    """A resolved client with its share of total MRR."""

    resolution: ClientResolution
    percent_of_total: Decimal  # fraction in [0, 1]


@dataclass(frozen=True)
class Aggregation:
    """Aggregate MRR and the ranked client list."""

    total_mrr: Decimal
    ranked: tuple[RankedClient, ...]

    @property
    def client_count(self) -> int:
        return len(self.ranked)


def share_of(amount: Decimal, total: Decimal) -> Decimal:
    """Fraction of ``total`` represented by ``amount`` (0 when total is 0)."""
    if total == ZERO:
        return ZERO
    return amount / total


def aggregate(resolutions: Sequence[ClientResolution]) -> Aggregation:
    """
    Aggregate resolved clients.

    Postconditions:
        - ``ranked`` contains every resolution exactly once.
        - ``ranked`` is ordered by ``estimated_mrr`` descending, ties in
          input order.
    """
    total_mrr = sum((r.estimated_mrr for r in resolutions), ZERO)

    ranked = [
        RankedClient(resolution=r, percent_of_total=share_of(r.estimated_mrr, total_mrr))
        for r in resolutions
    ]
    # sorted() is stable, including with reverse=True
    ranked.sort(key=lambda rc: rc.resolution.estimated_mrr, reverse=True)

    return Aggregation(total_mrr=total_mrr, ranked=tuple(ranked))
