"""
Pure domain layer.

Input records, amount coercion and the injectable clock.  NO dependencies
on I/O or wall-clock time (except ``SystemClock``).  All domain objects are
immutable and deterministic.
"""

from forecast_kernel.domain.amounts import (
    ZERO,
    DataQualityCode,
    DataQualityIssue,
    to_decimal_amount,
)
from forecast_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from forecast_kernel.domain.records import (
    BillingFrequency,
    Contract,
    ForecastSource,
    Invoice,
    RevenueCategory,
    parse_record_date,
)

__all__ = [
    "ZERO",
    "DataQualityCode",
    "DataQualityIssue",
    "to_decimal_amount",
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "BillingFrequency",
    "Contract",
    "ForecastSource",
    "Invoice",
    "RevenueCategory",
    "parse_record_date",
]
