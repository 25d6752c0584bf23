"""
Tests for the Client Revenue Resolver.

Covers:
- Invoice precedence and contract fallback
- Latest-invoice selection and tie-breaks
- Non-recurring exclusion
- Authoritative contract selection for ambiguous clients
- Aliases, excluded clients, invoice-only clients
- Malformed amounts
"""

from datetime import date
from decimal import Decimal

import pytest

from forecast_engines.client_resolver import (
    resolve_clients,
    select_authoritative_contract,
    select_latest_invoice,
)
from forecast_engines.parameters import ForecastParameters
from forecast_kernel.domain.amounts import DataQualityCode
from forecast_kernel.domain.records import BillingFrequency, ForecastSource


@pytest.fixture
def params():
    return ForecastParameters()


def _only(result):
    assert len(result.resolutions) == 1
    return result.resolutions[0]


class TestResolutionChain:
    """Invoice first, contract second, otherwise excluded."""

    def test_contract_fallback_without_invoices(self, make_contract, params):
        result = resolve_clients([make_contract(current_mrr="500")], [], params)

        row = _only(result)
        assert row.estimated_mrr == Decimal("500")
        assert row.source is ForecastSource.CONTRACT
        assert row.last_invoice_date is None
        assert row.last_invoice_amount == Decimal("500")

    def test_invoice_takes_precedence_over_contract(self, make_contract, make_invoice, params):
        contract = make_contract(current_mrr="500", billing_frequency="quarterly")
        invoice = make_invoice(amount_net="300", invoice_date="2024-04-01")

        row = _only(resolve_clients([contract], [invoice], params))

        assert row.estimated_mrr == Decimal("100")
        assert row.source is ForecastSource.INVOICE
        assert row.last_invoice_date == date(2024, 4, 1)
        assert row.last_invoice_amount == Decimal("300")
        assert row.billing_frequency is BillingFrequency.QUARTERLY
        assert row.frequency_inferred is False

    def test_contract_metadata_carried_on_invoice_rows(self, make_contract, make_invoice, params):
        contract = make_contract(client_name="Acme Retail", product="Analytics")
        row = _only(resolve_clients([contract], [make_invoice()], params))

        assert row.client_name == "Acme Retail"
        assert row.contract_name == "Analytics"
        assert row.contract_id == "C-ACME"

    def test_inactive_contract_without_invoices_excluded(self, make_contract, params):
        result = resolve_clients([make_contract(status="cancelled")], [], params)
        assert result.resolutions == ()

    def test_status_comparison_is_case_insensitive(self, make_contract, params):
        result = resolve_clients([make_contract(status=" Active ")], [], params)
        assert len(result.resolutions) == 1

    def test_empty_inputs(self, params):
        result = resolve_clients([], [], params)
        assert result.resolutions == ()
        assert result.issues == ()


class TestLatestInvoiceSelection:
    """Tests for picking the recurring-revenue signal."""

    def test_latest_date_selected(self, make_contract, make_invoice, params):
        invoices = [
            make_invoice(invoice_date="2024-01-10", amount_net="100"),
            make_invoice(invoice_date="2024-03-05", amount_net="150"),
        ]
        row = _only(resolve_clients([make_contract()], invoices, params))

        assert row.last_invoice_date == date(2024, 3, 5)
        assert row.estimated_mrr == Decimal("150")

    def test_input_order_irrelevant_for_dates(self, make_contract, make_invoice, params):
        invoices = [
            make_invoice(invoice_date="2024-03-05", amount_net="150"),
            make_invoice(invoice_date="2024-01-10", amount_net="100"),
        ]
        row = _only(resolve_clients([make_contract()], invoices, params))
        assert row.last_invoice_date == date(2024, 3, 5)

    def test_same_date_highest_amount_wins(self, make_contract, make_invoice, params):
        invoices = [
            make_invoice(invoice_date="2024-03-05", amount_net="150", invoice_id="A"),
            make_invoice(invoice_date="2024-03-05", amount_net="175", invoice_id="B"),
        ]
        row = _only(resolve_clients([make_contract()], invoices, params))
        assert row.last_invoice_amount == Decimal("175")

    def test_full_tie_keeps_first(self, make_invoice):
        invoices = [
            make_invoice(invoice_date="2024-03-05", amount_net="150", invoice_id="A"),
            make_invoice(invoice_date="2024-03-05", amount_net="150", invoice_id="B"),
        ]
        amounts = [Decimal("150"), Decimal("150")]
        assert select_latest_invoice(invoices, amounts) == 0

    def test_no_invoices(self):
        assert select_latest_invoice([], []) is None

    def test_non_recurring_never_selected(self, make_contract, make_invoice, params):
        invoices = [
            make_invoice(invoice_date="2024-02-01", amount_net="400"),
            make_invoice(invoice_date="2024-05-01", amount_net="9000",
                         revenue_category="non_recurring"),
        ]
        row = _only(resolve_clients([make_contract()], invoices, params))

        assert row.last_invoice_date == date(2024, 2, 1)
        assert row.estimated_mrr == Decimal("400")

    def test_only_non_recurring_falls_back_to_contract(self, make_contract, make_invoice, params):
        invoices = [make_invoice(amount_net="9000", revenue_category="non_recurring")]
        row = _only(resolve_clients([make_contract(current_mrr="500")], invoices, params))

        assert row.source is ForecastSource.CONTRACT
        assert row.estimated_mrr == Decimal("500")

    def test_excluded_status_invoice_ignored(self, make_contract, make_invoice, params):
        invoices = [
            make_invoice(invoice_date="2024-02-01", amount_net="400"),
            make_invoice(invoice_date="2024-05-01", amount_net="800", status="cancelled"),
        ]
        row = _only(resolve_clients([make_contract()], invoices, params))
        assert row.estimated_mrr == Decimal("400")


class TestFrequency:
    """Contract cadence first, inferred cadence otherwise."""

    def test_annual_contract(self, make_contract, make_invoice, params):
        contract = make_contract(billing_frequency="annual")
        row = _only(resolve_clients([contract], [make_invoice(amount_net="12000")], params))
        assert row.estimated_mrr == Decimal("1000")

    def test_spanish_label(self, make_contract, make_invoice, params):
        contract = make_contract(billing_frequency="Trimestral")
        row = _only(resolve_clients([contract], [make_invoice(amount_net="900")], params))
        assert row.estimated_mrr == Decimal("300")

    def test_missing_contract_frequency_inferred(self, make_contract, make_invoice, params):
        contract = make_contract(billing_frequency=None)
        invoices = [
            make_invoice(invoice_date="2023-10-01", amount_net="600"),
            make_invoice(invoice_date="2024-01-01", amount_net="600"),
            make_invoice(invoice_date="2024-04-01", amount_net="600"),
        ]
        row = _only(resolve_clients([contract], invoices, params))

        assert row.billing_frequency is BillingFrequency.QUARTERLY
        assert row.frequency_inferred is True
        assert row.estimated_mrr == Decimal("200")


class TestClientUniverse:
    """Which clients are forecast, and in which order."""

    def test_invoice_only_client_included(self, make_invoice, params):
        invoices = [
            make_invoice(customer_name="Stark", invoice_date="2024-01-20", amount_net="600"),
            make_invoice(customer_name="Stark", invoice_date="2024-04-20", amount_net="600"),
        ]
        row = _only(resolve_clients([], invoices, params))

        assert row.client_id == "Stark"
        assert row.client_name == "Stark"
        assert row.contract_name is None
        assert row.contract_id is None
        assert row.source is ForecastSource.INVOICE
        assert row.billing_frequency is BillingFrequency.QUARTERLY
        assert row.estimated_mrr == Decimal("200")

    def test_invoice_only_clients_can_be_disabled(self, make_invoice):
        params = ForecastParameters(include_invoice_only_clients=False)
        result = resolve_clients([], [make_invoice(customer_name="Stark")], params)
        assert result.resolutions == ()

    def test_invoice_client_id_preferred_over_name(self, make_contract, make_invoice, params):
        invoice = make_invoice(customer_name="Acme Retail S.L.", client_id="ACME",
                               amount_net="700")
        row = _only(resolve_clients([make_contract()], [invoice], params))
        assert row.source is ForecastSource.INVOICE
        assert row.estimated_mrr == Decimal("700")

    def test_alias_maps_ledger_name_to_client(self, make_contract, make_invoice):
        params = ForecastParameters(client_aliases={"INDXA": "IND"})
        contract = make_contract(client_id="IND", billing_frequency="quarterly")
        invoice = make_invoice(customer_name=" INDXA ", amount_net="7500")

        row = _only(resolve_clients([contract], [invoice], params))

        assert row.client_id == "IND"
        assert row.estimated_mrr == Decimal("2500")

    def test_excluded_clients_removed(self, make_contract, make_invoice):
        params = ForecastParameters(excluded_clients=frozenset({"SaaS"}))
        result = resolve_clients(
            [make_contract(client_id="SaaS")],
            [make_invoice(customer_name="SaaS")],
            params,
        )
        assert result.resolutions == ()

    def test_resolution_order_contracts_then_invoice_only(self, make_contract, make_invoice, params):
        contracts = [make_contract(client_id="B"), make_contract(client_id="A")]
        invoices = [
            make_invoice(customer_name="Z"),
            make_invoice(customer_name="A"),
            make_invoice(customer_name="Y"),
        ]
        result = resolve_clients(contracts, invoices, params)
        assert [r.client_id for r in result.resolutions] == ["B", "A", "Z", "Y"]


class TestAmbiguousContracts:
    """Multiple active contracts for one client."""

    def test_most_recently_started_wins(self, make_contract, params):
        contracts = [
            make_contract(contract_id="C-1", current_mrr="400", start_date="2022-01-01"),
            make_contract(contract_id="C-2", current_mrr="650", start_date="2023-06-01"),
            make_contract(contract_id="C-3", current_mrr="300", start_date=None),
        ]
        result = resolve_clients(contracts, [], params)

        row = _only(result)
        assert row.contract_id == "C-2"
        assert row.estimated_mrr == Decimal("650")

        assert len(result.issues) == 1
        issue = result.issues[0]
        assert issue.code is DataQualityCode.AMBIGUOUS_CONTRACT
        assert issue.record_ref == "C-2"
        assert "C-1" in issue.detail and "C-3" in issue.detail

    def test_same_start_date_highest_contract_id(self, make_contract):
        contracts = [
            make_contract(contract_id="C-7", start_date=date(2024, 1, 1)),
            make_contract(contract_id="C-9", start_date=date(2024, 1, 1)),
        ]
        assert select_authoritative_contract(contracts).contract_id == "C-9"

    def test_inactive_duplicates_not_ambiguous(self, make_contract, params):
        contracts = [
            make_contract(contract_id="C-1", status="finished"),
            make_contract(contract_id="C-2"),
        ]
        result = resolve_clients(contracts, [], params)
        assert result.issues == ()
        assert _only(result).contract_id == "C-2"


class TestMalformedAmounts:
    """Bad amounts degrade to zero and are reported."""

    def test_malformed_contract_mrr(self, make_contract, params):
        result = resolve_clients([make_contract(current_mrr="n/a")], [], params)

        row = _only(result)
        assert row.estimated_mrr == Decimal("0")
        assert result.issues[0].code is DataQualityCode.MALFORMED_AMOUNT
        assert result.issues[0].record_type == "contract"
        assert result.issues[0].detail == "current_mrr='n/a'"

    def test_malformed_invoice_amount(self, make_contract, make_invoice, params):
        invoice = make_invoice(amount_net=float("nan"), invoice_id="F-9")
        result = resolve_clients([make_contract()], [invoice], params)

        row = _only(result)
        assert row.source is ForecastSource.INVOICE
        assert row.estimated_mrr == Decimal("0")
        assert row.last_invoice_amount == Decimal("0")
        assert result.issues[0].record_ref == "F-9"

    def test_negative_amount_is_malformed(self, make_contract, make_invoice, params):
        result = resolve_clients([make_contract()], [make_invoice(amount_net="-120")], params)
        assert _only(result).estimated_mrr == Decimal("0")
        assert result.issues[0].code is DataQualityCode.MALFORMED_AMOUNT

    def test_unnumbered_twin_rows_reported_separately(self, make_contract, make_invoice, params):
        invoices = [
            make_invoice(invoice_date="2024-05-01", amount_net="n/a"),
            make_invoice(invoice_date="2024-05-01", amount_net="n/a"),
        ]
        result = resolve_clients([make_contract()], invoices, params)

        refs = [i.record_ref for i in result.issues]
        assert refs == ["ACME@2024-05-01#0", "ACME@2024-05-01#1"]
