"""
Module: forecast_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    revenue forecast engine sub-modules.  This is the canonical import
    surface for higher layers (forecast_config bridges, forecast_services).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import forecast_kernel (and sibling engine modules).
    MUST NOT import forecast_config or forecast_services.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      The reference date is passed in by the caller.
    - Decimal-only arithmetic: all monetary amounts use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every top-level forecast is traced via the ``@traced_engine`` decorator
    (see ``forecast_engines.tracer``), emitting FORECAST_ENGINE_TRACE log
    records that include engine name, version, input fingerprint, and
    duration.

Usage:
    from forecast_engines import calculate_forecast, ForecastParameters
    from forecast_engines.billing_normalizer import to_monthly
    from forecast_engines.client_resolver import resolve_clients
"""

from forecast_engines.aggregator import Aggregation, RankedClient, aggregate
from forecast_engines.billing_normalizer import infer_frequency, to_annual, to_monthly
from forecast_engines.client_resolver import (
    ClientResolution,
    ResolutionResult,
    resolve_clients,
)
from forecast_engines.fiscal_year import (
    FiscalYearCompletion,
    FiscalYearWindow,
    complete_fiscal_year,
    fiscal_year_for,
    fiscal_year_window,
    months_remaining,
)
from forecast_engines.forecast import ClientForecastRow, ForecastData, calculate_forecast
from forecast_engines.horizon import HorizonProjection, project, project_horizons
from forecast_engines.parameters import STANDARD_HORIZONS, ForecastParameters

__all__ = [
    # Billing Normalizer
    "to_monthly",
    "to_annual",
    "infer_frequency",
    # Client Revenue Resolver
    "ClientResolution",
    "ResolutionResult",
    "resolve_clients",
    # Aggregator
    "Aggregation",
    "RankedClient",
    "aggregate",
    # Horizon Projector
    "HorizonProjection",
    "project",
    "project_horizons",
    "STANDARD_HORIZONS",
    # Fiscal-Year Completer
    "FiscalYearWindow",
    "FiscalYearCompletion",
    "fiscal_year_for",
    "fiscal_year_window",
    "months_remaining",
    "complete_fiscal_year",
    # Forecast
    "ForecastParameters",
    "ClientForecastRow",
    "ForecastData",
    "calculate_forecast",
]
