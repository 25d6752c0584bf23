"""
Module: forecast_engines.billing_normalizer
Responsibility:
    Convert amounts tied to a billing cadence (monthly, quarterly, annual)
    into monthly-equivalent figures and back into annual terms, and infer
    a cadence from the spacing of a client's invoices when no contract
    states one.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import forecast_kernel.

Invariants enforced:
    - Purity: no clock access, no I/O.
    - Decimal-only arithmetic; no rounding is applied here.
    - Never raises on bad amounts: returns the ``None`` sentinel, which
      callers replace with zero so aggregates are never polluted.

Usage:
    from forecast_engines.billing_normalizer import to_monthly, to_annual
    from forecast_kernel.domain.records import BillingFrequency

    to_monthly(Decimal("300"), BillingFrequency.QUARTERLY)  # Decimal("100")
    to_annual(Decimal("100"), BillingFrequency.MONTHLY)     # Decimal("1200")
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from statistics import median
from typing import Any, Iterable

from forecast_kernel.domain.amounts import to_decimal_amount
from forecast_kernel.domain.records import BillingFrequency

# Median gap (in months) upper bounds for cadence inference
_MONTHLY_MAX_GAP = 2
_QUARTERLY_MAX_GAP = 7

_PERIODS_PER_YEAR = {
    BillingFrequency.MONTHLY: 12,
    BillingFrequency.QUARTERLY: 4,
    BillingFrequency.ANNUAL: 1,
}


def to_monthly(amount: Any, frequency: BillingFrequency | None) -> Decimal | None:
    """
    Convert a periodic amount to its monthly equivalent.

    A ``None`` frequency is treated as monthly.

    Returns:
        The monthly amount, or ``None`` if ``amount`` is not a finite,
        non-negative number.
    """
    value = to_decimal_amount(amount)
    if value is None:
        return None
    frequency = frequency or BillingFrequency.MONTHLY
    return value / frequency.months


def to_annual(amount: Any, frequency: BillingFrequency | None) -> Decimal | None:
    """
    Convert a periodic amount to its annual equivalent (x12, x4 or x1).

    A ``None`` frequency is treated as monthly.

    Returns:
        The annual amount, or ``None`` if ``amount`` is not a finite,
        non-negative number.
    """
    value = to_decimal_amount(amount)
    if value is None:
        return None
    frequency = frequency or BillingFrequency.MONTHLY
    return value * _PERIODS_PER_YEAR[frequency]


def _month_index(d: date) -> int:
    return d.year * 12 + (d.month - 1)


def infer_frequency(invoice_dates: Iterable[date]) -> BillingFrequency:
    """
    Infer a billing cadence from invoice dates.

    Dates are reduced to distinct calendar months; the median gap between
    consecutive months decides the cadence (<= 2 monthly, <= 7 quarterly,
    otherwise annual).  With fewer than two distinct months there is no
    spacing to measure and the cadence defaults to monthly.
    """
    months = sorted({_month_index(d) for d in invoice_dates})
    if len(months) < 2:
        return BillingFrequency.MONTHLY

    gaps = [later - earlier for earlier, later in zip(months, months[1:])]
    typical_gap = median(gaps)

    if typical_gap <= _MONTHLY_MAX_GAP:
        return BillingFrequency.MONTHLY
    if typical_gap <= _QUARTERLY_MAX_GAP:
        return BillingFrequency.QUARTERLY
    return BillingFrequency.ANNUAL
