"""
Module: forecast_engines.forecast
Responsibility:
    Top-level revenue forecast.  Runs the Client Revenue Resolver, the
    Aggregator, the Horizon Projector and the Fiscal-Year Completer over a
    contract snapshot and an invoice ledger, and assembles the immutable
    ``ForecastData`` consumed by presentation.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import forecast_kernel and sibling engine modules.

Invariants enforced:
    - Purity: ``as_of`` is a parameter; the clock is never read.
    - Idempotence: identical inputs produce identical (equal) output.
    - Conservation: per-client ``forecast_fy`` values sum to
      ``remaining_fy_forecast``; per-client shares sum to 1 when
      ``total_mrr > 0``.
    - Graceful degradation: empty inputs produce a zeroed forecast and
      malformed data produces zero/excluded values plus
      ``data_quality_issues``; nothing is raised for bad data.

Failure modes:
    - InvalidForecastInputError when ``contracts`` or ``invoices`` is None
      or not a sequence, or ``as_of`` is not a date.
    - InvalidRecordError when a collection holds an element of the wrong
      type.

Usage:
    from datetime import date
    from forecast_engines.forecast import calculate_forecast

    forecast = calculate_forecast(
        contracts=contracts,
        invoices=invoices,
        as_of=date(2024, 6, 15),
    )
    forecast.total_mrr, forecast.forecast_m12, forecast.total_estimated_fy
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from forecast_kernel.domain.amounts import DataQualityIssue
from forecast_kernel.domain.records import (
    BillingFrequency,
    Contract,
    ForecastSource,
    Invoice,
)
from forecast_kernel.exceptions import InvalidForecastInputError, InvalidRecordError
from forecast_kernel.logging_config import get_logger
from forecast_engines.aggregator import aggregate
from forecast_engines.billing_normalizer import to_annual
from forecast_engines.client_resolver import resolve_clients
from forecast_engines.fiscal_year import (
    client_fiscal_year_forecast,
    complete_fiscal_year,
    fiscal_year_for,
    fiscal_year_window,
    invoiced_to_date,
)
from forecast_engines.horizon import HorizonProjection, project, project_horizons
from forecast_engines.parameters import STANDARD_HORIZONS, ForecastParameters
from forecast_engines.tracer import traced_engine

logger = get_logger("engines.forecast")


@dataclass(frozen=True)
class ClientForecastRow:
    """
    One client's line in the forecast.

    Contract:
        Frozen dataclass, recomputed on every run and never persisted.
    Guarantees:
        - ``percent_of_total`` is a fraction in [0, 1].
        - ``forecast_fy`` is the forward-looking share only; it excludes
          the client's own invoiced-to-date revenue.
        - ``source == CONTRACT`` means ``last_invoice_amount`` holds the
          contractual MRR, not an invoiced amount.
    """

    client_id: str
    client_name: str
    contract_name: str | None
    billing_frequency: BillingFrequency
    frequency_inferred: bool
    last_invoice_date: date | None
    last_invoice_amount: Decimal
    source: ForecastSource
    estimated_mrr: Decimal
    percent_of_total: Decimal
    forecast_fy: Decimal

    @property
    def arr(self) -> Decimal:
        """Annual recurring revenue (MRR x 12)."""
        return to_annual(self.estimated_mrr, BillingFrequency.MONTHLY)


@dataclass(frozen=True)
class ForecastData:
    """
    Complete revenue forecast.

    Contract:
        Frozen dataclass consumed read-only by presentation.
    Guarantees:
        - ``total_mrr`` equals the sum of ``clients[i].estimated_mrr``.
        - ``forecast_m1 <= forecast_m3 <= forecast_m6 <= forecast_m12``.
        - ``total_estimated_fy == invoiced_ytd + remaining_fy_forecast``.
        - ``clients`` is ordered by ``estimated_mrr`` descending.
    """

    calculated_at: date
    fiscal_year: int
    fiscal_year_start: date
    fiscal_year_end: date
    total_mrr: Decimal
    forecast_m1: Decimal
    forecast_m3: Decimal
    forecast_m6: Decimal
    forecast_m12: Decimal
    horizons: tuple[HorizonProjection, ...]
    months_remaining_fy: int
    invoiced_ytd: Decimal
    remaining_fy_forecast: Decimal
    total_estimated_fy: Decimal
    clients: tuple[ClientForecastRow, ...]
    data_quality_issues: tuple[DataQualityIssue, ...] = ()

    @property
    def total_arr(self) -> Decimal:
        """Annual recurring revenue (total MRR x 12)."""
        return to_annual(self.total_mrr, BillingFrequency.MONTHLY)

    @property
    def is_empty(self) -> bool:
        """True when no client could be forecast."""
        return not self.clients

    def projection(self, months: int) -> Decimal:
        """Run-rate projection for any horizon, computed ones first."""
        for horizon in self.horizons:
            if horizon.months == months:
                return horizon.amount
        return project(self.total_mrr, months)

    def client(self, client_id: str) -> ClientForecastRow | None:
        """Row for ``client_id``, if that client was forecast."""
        for row in self.clients:
            if row.client_id == client_id:
                return row
        return None

    def clients_by_source(self, source: ForecastSource) -> tuple[ClientForecastRow, ...]:
        """Rows whose MRR came from ``source``."""
        return tuple(row for row in self.clients if row.source is source)


def _require_records(value: Any, argument: str, record_type: type) -> Sequence:
    if value is None or isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise InvalidForecastInputError(argument, type(value).__name__)
    for index, record in enumerate(value):
        if not isinstance(record, record_type):
            raise InvalidRecordError(
                argument, index, record_type.__name__, type(record).__name__
            )
    return value


def _require_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidForecastInputError("as_of", type(value).__name__)


@traced_engine(
    "revenue_forecast", "1.0",
    fingerprint_fields=("contracts", "invoices", "as_of", "fiscal_year"),
)
def calculate_forecast(
    contracts: Sequence[Contract],
    invoices: Sequence[Invoice],
    as_of: date,
    parameters: ForecastParameters | None = None,
    fiscal_year: int | None = None,
) -> ForecastData:
    """
    Compute the revenue forecast.

    Args:
        contracts: Contract snapshot rows (any status).
        invoices: Invoice ledger rows (any category).
        as_of: Reference date ("now"), supplied by the caller.
        parameters: Forecast policy; defaults to ``ForecastParameters()``.
        fiscal_year: Fiscal year to complete; defaults to the fiscal year
            containing ``as_of``.

    Returns:
        ForecastData for the run.

    Raises:
        InvalidForecastInputError: if an argument violates the call contract.
        InvalidRecordError: if a collection element has the wrong type.
    """
    contracts = _require_records(contracts, "contracts", Contract)
    invoices = _require_records(invoices, "invoices", Invoice)
    as_of = _require_date(as_of)
    parameters = parameters or ForecastParameters()

    start_month = parameters.fiscal_year_start_month
    if fiscal_year is None:
        fiscal_year = fiscal_year_for(as_of, start_month)
    window = fiscal_year_window(fiscal_year, start_month)

    resolution = resolve_clients(contracts, invoices, parameters)
    issues = list(resolution.issues)

    aggregation = aggregate(resolution.resolutions)
    total_mrr = aggregation.total_mrr

    horizons = project_horizons(total_mrr, parameters.horizons)
    standard = {n: project(total_mrr, n) for n in STANDARD_HORIZONS}

    ytd = invoiced_to_date(invoices, window, as_of, parameters, issues)
    completion = complete_fiscal_year(window, as_of, total_mrr, ytd)

    rows = tuple(
        ClientForecastRow(
            client_id=rc.resolution.client_id,
            client_name=rc.resolution.client_name,
            contract_name=rc.resolution.contract_name,
            billing_frequency=rc.resolution.billing_frequency,
            frequency_inferred=rc.resolution.frequency_inferred,
            last_invoice_date=rc.resolution.last_invoice_date,
            last_invoice_amount=rc.resolution.last_invoice_amount,
            source=rc.resolution.source,
            estimated_mrr=rc.resolution.estimated_mrr,
            percent_of_total=rc.percent_of_total,
            forecast_fy=client_fiscal_year_forecast(
                rc.resolution.estimated_mrr, completion.months_remaining
            ),
        )
        for rc in aggregation.ranked
    )

    logger.info("revenue_forecast_calculated", extra={
        "as_of": as_of.isoformat(),
        "fiscal_year": fiscal_year,
        "client_count": len(rows),
        "contract_count": len(contracts),
        "invoice_count": len(invoices),
        "total_mrr": str(total_mrr),
        "months_remaining_fy": completion.months_remaining,
        "issue_count": len(issues),
    })

    return ForecastData(
        calculated_at=as_of,
        fiscal_year=fiscal_year,
        fiscal_year_start=window.start,
        fiscal_year_end=window.end,
        total_mrr=total_mrr,
        forecast_m1=standard[1],
        forecast_m3=standard[3],
        forecast_m6=standard[6],
        forecast_m12=standard[12],
        horizons=horizons,
        months_remaining_fy=completion.months_remaining,
        invoiced_ytd=completion.invoiced_ytd,
        remaining_fy_forecast=completion.remaining_forecast,
        total_estimated_fy=completion.total_estimated,
        clients=rows,
        data_quality_issues=tuple(issues),
    )
