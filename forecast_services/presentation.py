"""
Presentation edge for forecast results.

Converts a ``ForecastData`` into the dashboard's payload shape.  This is
the ONLY place figures are rounded: currency to 2 decimal places and
client shares to a percentage with 2 decimal places, both ROUND_HALF_UP.
The engine itself keeps full precision.

Usage:
    from forecast_services.presentation import to_payload, to_json

    payload = to_payload(forecast)
    payload["forecastM12"], payload["clients"][0]["mrrEstimado"]
"""

from __future__ import annotations

import json
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any

from forecast_engines.forecast import ClientForecastRow, ForecastData
from forecast_kernel.domain.amounts import DataQualityIssue

_TWO_PLACES = Decimal("0.01")
_HUNDRED = Decimal("100")


def _quantize(value: Decimal) -> Decimal:
    with localcontext() as ctx:
        # integer digits plus two decimals must fit the working precision
        ctx.prec = max(ctx.prec, value.adjusted() + 4)
        return value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def round_currency(amount: Decimal) -> Decimal:
    """Round a currency figure to 2 decimal places."""
    return _quantize(amount)


def as_percentage(fraction: Decimal) -> Decimal:
    """Express a fraction as a percentage with 2 decimal places."""
    return _quantize(fraction * _HUNDRED)


def client_payload(row: ClientForecastRow) -> dict[str, Any]:
    """Payload for one client row."""
    return {
        "clientId": row.client_id,
        "clientName": row.client_name,
        "contractName": row.contract_name,
        "billingFrequency": row.billing_frequency.value,
        "frequencyInferred": row.frequency_inferred,
        "lastInvoiceDate": row.last_invoice_date.isoformat() if row.last_invoice_date else None,
        "lastInvoiceAmount": round_currency(row.last_invoice_amount),
        "source": row.source.value,
        "mrrEstimado": round_currency(row.estimated_mrr),
        "arr": round_currency(row.arr),
        "percentOfTotal": as_percentage(row.percent_of_total),
        "forecastFY": round_currency(row.forecast_fy),
    }


def issue_payload(issue: DataQualityIssue) -> dict[str, Any]:
    return {
        "code": issue.code.value,
        "clientId": issue.client_id,
        "recordType": issue.record_type,
        "recordRef": issue.record_ref,
        "detail": issue.detail,
    }


def to_payload(forecast: ForecastData) -> dict[str, Any]:
    """
    Dashboard payload for a forecast.

    Monetary values are rounded Decimals; dates are ISO-8601 strings.
    """
    return {
        "calculatedAt": forecast.calculated_at.isoformat(),
        "fiscalYear": forecast.fiscal_year,
        "fiscalYearStart": forecast.fiscal_year_start.isoformat(),
        "fiscalYearEnd": forecast.fiscal_year_end.isoformat(),
        "totalMRR": round_currency(forecast.total_mrr),
        "totalARR": round_currency(forecast.total_arr),
        "forecastM1": round_currency(forecast.forecast_m1),
        "forecastM3": round_currency(forecast.forecast_m3),
        "forecastM6": round_currency(forecast.forecast_m6),
        "forecastM12": round_currency(forecast.forecast_m12),
        "horizons": [
            {"label": h.label, "months": h.months, "value": round_currency(h.amount)}
            for h in forecast.horizons
        ],
        "mesesRestantesFY": forecast.months_remaining_fy,
        "facturadoYTD": round_currency(forecast.invoiced_ytd),
        "forecastRestanteFY": round_currency(forecast.remaining_fy_forecast),
        "totalEstimadoFY": round_currency(forecast.total_estimated_fy),
        "clients": [client_payload(row) for row in forecast.clients],
        "dataQualityIssues": [issue_payload(i) for i in forecast.data_quality_issues],
    }


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return float(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def to_json(forecast: ForecastData, **kwargs: Any) -> str:
    """Serialize the dashboard payload to JSON (amounts as numbers)."""
    return json.dumps(to_payload(forecast), default=_json_default, **kwargs)
