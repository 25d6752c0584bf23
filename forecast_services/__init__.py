"""
forecast_services -- orchestration and presentation edge.

Usage:
    from forecast_services import RevenueForecastService, to_payload

    service = RevenueForecastService.from_config_name("default")
    forecast = service.forecast(contracts, invoices)
    payload = to_payload(forecast)
"""

from forecast_services.forecast_service import RevenueForecastService
from forecast_services.presentation import to_json, to_payload

__all__ = [
    "RevenueForecastService",
    "to_json",
    "to_payload",
]
