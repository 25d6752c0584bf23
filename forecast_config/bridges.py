"""
Config -> Engine Bridges.

Functions that convert a ``ForecastConfig`` into engine-compatible inputs.
These live in forecast_config (the producer) because the engines must
NEVER import forecast_config.

Usage:
    from forecast_config import get_active_config
    from forecast_config.bridges import build_forecast_parameters

    config = get_active_config("default")
    parameters = build_forecast_parameters(config)
"""

from __future__ import annotations

from forecast_config.schema import ForecastConfig
from forecast_engines.parameters import ForecastParameters


def build_forecast_parameters(config: ForecastConfig) -> ForecastParameters:
    """Build the engine's ForecastParameters from a ForecastConfig."""
    return ForecastParameters(
        fiscal_year_start_month=config.fiscal_year_start_month,
        horizons=tuple(config.horizons),
        active_contract_statuses=frozenset(config.active_contract_statuses),
        excluded_invoice_statuses=frozenset(config.excluded_invoice_statuses),
        excluded_clients=frozenset(config.excluded_clients),
        client_aliases=dict(config.client_aliases),
        include_invoice_only_clients=config.include_invoice_only_clients,
        ytd_recurring_only=config.ytd_recurring_only,
    )
