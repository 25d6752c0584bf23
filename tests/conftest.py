"""
Pytest fixtures for the revenue forecast test suite.

Provides:
- Record factories for contracts and invoice ledger rows
- A deterministic clock
- Logging reset between tests
"""

from datetime import date, datetime, timezone

import pytest

from forecast_kernel.domain.clock import DeterministicClock
from forecast_kernel.domain.records import Contract, Invoice
from forecast_kernel.logging_config import LogContext, reset_logging


@pytest.fixture(autouse=True)
def _reset_logging_state():
    """Each test starts with an unconfigured, propagating logger tree."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def make_contract():
    """Factory for Contract rows with sensible defaults."""

    def _make(
        client_id: str = "ACME",
        current_mrr="500",
        billing_frequency="monthly",
        status: str = "active",
        contract_id: str | None = None,
        client_name: str | None = None,
        product: str = "Platform",
        start_date=None,
    ) -> Contract:
        return Contract(
            client_id=client_id,
            client_name=client_name or f"{client_id} Corp",
            contract_id=contract_id or f"C-{client_id}",
            status=status,
            product=product,
            billing_frequency=billing_frequency,
            current_mrr=current_mrr,
            start_date=start_date,
        )

    return _make


@pytest.fixture
def make_invoice():
    """Factory for Invoice rows with sensible defaults."""

    def _make(
        customer_name: str = "ACME",
        invoice_date="2024-05-01",
        amount_net="500",
        revenue_category: str = "recurring",
        status: str = "paid",
        client_id: str | None = None,
        invoice_id: str | None = None,
    ) -> Invoice:
        return Invoice(
            customer_name=customer_name,
            invoice_date=invoice_date,
            amount_net=amount_net,
            revenue_category=revenue_category,
            status=status,
            client_id=client_id,
            invoice_id=invoice_id,
        )

    return _make


@pytest.fixture
def as_of() -> date:
    """Reference date used across engine tests (mid-June: 7 months left)."""
    return date(2024, 6, 15)


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 6, 15, 9, 30, tzinfo=timezone.utc))
