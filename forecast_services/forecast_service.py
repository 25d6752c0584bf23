"""
Module: forecast_services.forecast_service
Responsibility:
    Thin orchestration glue for a forecast request.  Reads "now" from the
    injected Clock exactly once, resolves configuration into engine
    parameters, calls the pure engine, and logs the data-quality findings
    the engine returns.  Contains NO forecasting logic of its own.

Architecture:
    forecast_services layer.  Stateless apart from its injected
    collaborators; safe to share between threads.

    Dependency direction (strict):
        service  -->  forecast_engines (calculate_forecast)
        service  -->  forecast_config  (get_active_config, bridges)
        service  -->  forecast_kernel  (Clock, logging)

Failure modes:
    - InvalidForecastInputError / InvalidRecordError propagate from the
      engine on call-contract violations.
    - ConfigNotFoundError / ForecastConfigError propagate from
      ``from_config_name``.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from pathlib import Path
from uuid import uuid4

from forecast_config import DEFAULT_CONFIG_NAME, get_active_config
from forecast_config.bridges import build_forecast_parameters
from forecast_config.schema import ForecastConfig
from forecast_engines.forecast import ForecastData, calculate_forecast
from forecast_engines.parameters import ForecastParameters
from forecast_kernel.domain.amounts import DataQualityIssue
from forecast_kernel.domain.clock import Clock, SystemClock
from forecast_kernel.domain.records import Contract, Invoice
from forecast_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.forecast")


class RevenueForecastService:
    """
    Produce revenue forecasts for the presentation layer.

    Contract:
        ``forecast()`` is a pure function of its inputs and the clock
        reading; calling it twice with the same inputs and clock gives
        equal results.
    """

    def __init__(
        self,
        parameters: ForecastParameters | None = None,
        clock: Clock | None = None,
        config: ForecastConfig | None = None,
    ):
        self._clock = clock or SystemClock()
        self._config = config
        self._parameters = parameters or (
            build_forecast_parameters(config) if config else ForecastParameters()
        )

    @classmethod
    def from_config_name(
        cls,
        name: str = DEFAULT_CONFIG_NAME,
        clock: Clock | None = None,
        config_dir: Path | None = None,
    ) -> RevenueForecastService:
        """Build a service from a named YAML configuration set."""
        config = get_active_config(name, config_dir=config_dir)
        return cls(clock=clock, config=config)

    @property
    def parameters(self) -> ForecastParameters:
        return self._parameters

    @property
    def config(self) -> ForecastConfig | None:
        return self._config

    def forecast(
        self,
        contracts: Sequence[Contract],
        invoices: Sequence[Invoice],
        as_of: date | None = None,
        fiscal_year: int | None = None,
    ) -> ForecastData:
        """
        Compute a forecast.

        Args:
            contracts: Contract snapshot rows.
            invoices: Invoice ledger rows.
            as_of: Reference date; defaults to today's date from the clock.
            fiscal_year: Fiscal year to complete; defaults to the one
                containing ``as_of``.
        """
        as_of = as_of or self._clock.today()

        with LogContext.bind(
            run_id=uuid4(),
            config_name=self._config.name if self._config else None,
            as_of=as_of.isoformat(),
        ):
            result = calculate_forecast(
                contracts=contracts,
                invoices=invoices,
                as_of=as_of,
                parameters=self._parameters,
                fiscal_year=fiscal_year,
            )
            self._log_issues(result.data_quality_issues)

            if result.is_empty:
                logger.info("revenue_forecast_no_data", extra={
                    "as_of": as_of.isoformat(),
                    "contract_count": len(contracts),
                    "invoice_count": len(invoices),
                })

            logger.info("revenue_forecast_completed", extra={
                "as_of": as_of.isoformat(),
                "fiscal_year": result.fiscal_year,
                "config_name": self._config.name if self._config else None,
                "config_checksum": self._config.checksum if self._config else None,
                "client_count": len(result.clients),
                "total_mrr": str(result.total_mrr),
                "total_estimated_fy": str(result.total_estimated_fy),
            })
        return result

    def _log_issues(self, issues: Sequence[DataQualityIssue]) -> None:
        for issue in issues:
            logger.warning("forecast_data_quality_issue", extra={
                "issue_code": issue.code.value,
                "client_id": issue.client_id,
                "record_type": issue.record_type,
                "record_ref": issue.record_ref,
                "detail": issue.detail,
            })
