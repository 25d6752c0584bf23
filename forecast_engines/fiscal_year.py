"""
Module: forecast_engines.fiscal_year
Responsibility:
    Estimate total fiscal-year revenue by combining revenue already
    invoiced in the fiscal year with a run-rate projection for the months
    still to come.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    The reference date is always a parameter; this module never reads the
    clock.

Conventions:
    - A fiscal year starts on the first day of ``start_month`` and lasts
      twelve months.  It is labelled by the calendar year in which it
      ends (start_month=1 gives the calendar year).
    - Months remaining INCLUDE the reference date's month: a calendar
      fiscal year has 12 months remaining on any day of January and 1 on
      any day of December.  Before the fiscal year starts all 12 months
      remain; after it ends none do.
    - Invoiced-to-date covers invoices dated from the fiscal-year start up
      to and including ``min(as_of, fiscal-year end)``.

Invariants enforced:
    - ``total_estimated == invoiced_ytd + remaining_forecast``.
    - ``remaining_forecast == 0`` whenever no months remain.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Sequence

from forecast_kernel.domain.amounts import ZERO, DataQualityIssue
from forecast_kernel.domain.records import Invoice
from forecast_engines.client_resolver import (
    invoice_client_key,
    invoice_ref,
    sanitized_amount,
)
from forecast_engines.parameters import ForecastParameters

MONTHS_PER_FISCAL_YEAR = 12


@dataclass(frozen=True)
class FiscalYearWindow:
    """First and last day of a fiscal year."""

    fiscal_year: int
    start: date
    end: date

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end


@dataclass(frozen=True)
class FiscalYearCompletion:
    """Invoiced-to-date plus projected remainder for one fiscal year."""

    window: FiscalYearWindow
    months_remaining: int
    invoiced_ytd: Decimal
    remaining_forecast: Decimal
    total_estimated: Decimal


def _month_index(d: date) -> int:
    return d.year * 12 + (d.month - 1)


def fiscal_year_for(as_of: date, start_month: int = 1) -> int:
    """Label of the fiscal year containing ``as_of``."""
    if start_month == 1 or as_of.month < start_month:
        return as_of.year
    return as_of.year + 1


def fiscal_year_window(fiscal_year: int, start_month: int = 1) -> FiscalYearWindow:
    """Start and end dates of the fiscal year labelled ``fiscal_year``."""
    start_year = fiscal_year if start_month == 1 else fiscal_year - 1
    start = date(start_year, start_month, 1)
    next_start = date(start_year + 1, start_month, 1)
    return FiscalYearWindow(
        fiscal_year=fiscal_year,
        start=start,
        end=next_start - timedelta(days=1),
    )


def months_remaining(window: FiscalYearWindow, as_of: date) -> int:
    """Whole months left in the fiscal year, counting the current month."""
    if as_of > window.end:
        return 0
    if as_of < window.start:
        return MONTHS_PER_FISCAL_YEAR
    return _month_index(window.end) - _month_index(as_of) + 1


def invoiced_to_date(
    invoices: Sequence[Invoice],
    window: FiscalYearWindow,
    as_of: date,
    parameters: ForecastParameters,
    issues: list[DataQualityIssue],
) -> Decimal:
    """
    Sum of ``amount_net`` for invoices in the fiscal year up to ``as_of``.

    Every revenue category counts unless ``parameters.ytd_recurring_only``
    is set.  Invoices with an excluded status are ignored; malformed
    amounts count as zero and are recorded in ``issues``.
    """
    cutoff = min(as_of, window.end)
    total = ZERO
    for position, invoice in enumerate(invoices):
        if not window.start <= invoice.invoice_date <= cutoff:
            continue
        if parameters.is_excluded_invoice_status(invoice.status):
            continue
        if parameters.ytd_recurring_only and not invoice.is_recurring:
            continue
        total += sanitized_amount(
            invoice.amount_net,
            client_id=invoice_client_key(invoice, parameters),
            record_type="invoice",
            record_ref=invoice_ref(invoice, position),
            field_name="amount_net",
            issues=issues,
        )
    return total


def complete_fiscal_year(
    window: FiscalYearWindow,
    as_of: date,
    total_mrr: Decimal,
    invoiced_ytd: Decimal,
) -> FiscalYearCompletion:
    """Combine invoiced-to-date with the run-rate for the remaining months."""
    remaining = months_remaining(window, as_of)
    remaining_forecast = total_mrr * remaining if remaining > 0 else ZERO
    return FiscalYearCompletion(
        window=window,
        months_remaining=remaining,
        invoiced_ytd=invoiced_ytd,
        remaining_forecast=remaining_forecast,
        total_estimated=invoiced_ytd + remaining_forecast,
    )


def client_fiscal_year_forecast(estimated_mrr: Decimal, months: int) -> Decimal:
    """One client's forward-looking share of the fiscal-year estimate."""
    if months <= 0:
        return ZERO
    return estimated_mrr * months
