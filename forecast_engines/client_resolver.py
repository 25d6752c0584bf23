"""
Module: forecast_engines.client_resolver
Responsibility:
    For every client, pick the best available monthly recurring revenue
    (MRR) estimate from the invoice ledger or the contract snapshot, and
    record where the figure came from.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import forecast_kernel and sibling engine modules.

Resolution chain (per client):
    1. Latest recurring invoice (latest ``invoice_date``; ties -> highest
       amount; remaining ties -> first in input order).  Its net amount
       is normalized to a monthly figure using the contract's billing
       frequency, or a frequency inferred from invoice spacing.
    2. Otherwise, the authoritative active contract's ``current_mrr``.
    3. Otherwise, the client is not forecast at all.

Invariants enforced:
    - Determinism: clients are visited in input order (active contracts
      first, then invoice-only clients in ledger order).  No iteration
      depends on hash order.
    - Only ``recurring`` invoices are ever selected as the MRR signal.
    - One authoritative contract per client: the most recently started
      active contract (``start_date`` None sorts oldest; remaining ties
      go to the highest ``contract_id``).
    - Malformed amounts (non-finite, negative, non-numeric) resolve to
      zero and are reported as ``DataQualityIssue`` values; nothing is
      raised and nothing is logged at warning level here.

Usage:
    from forecast_engines.client_resolver import resolve_clients

    result = resolve_clients(contracts, invoices, ForecastParameters())
    for resolution in result.resolutions:
        print(resolution.client_id, resolution.estimated_mrr, resolution.source)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Sequence

from forecast_kernel.domain.amounts import (
    ZERO,
    DataQualityCode,
    DataQualityIssue,
    to_decimal_amount,
)
from forecast_kernel.domain.records import (
    BillingFrequency,
    Contract,
    ForecastSource,
    Invoice,
)
from forecast_kernel.logging_config import get_logger
from forecast_engines.billing_normalizer import infer_frequency, to_monthly
from forecast_engines.parameters import ForecastParameters

logger = get_logger("engines.client_resolver")


@dataclass(frozen=True)
class ClientResolution:
    """
    The resolved MRR for one client, with provenance.

    Guarantees:
        - ``estimated_mrr`` is a finite, non-negative Decimal.
        - ``source == INVOICE`` implies ``last_invoice_date`` is set.
        - ``source == CONTRACT`` implies ``last_invoice_date`` is None and
          ``last_invoice_amount`` is the contract's ``current_mrr``.
    """

    client_id: str
    client_name: str
    contract_id: str | None
    contract_name: str | None
    billing_frequency: BillingFrequency
    frequency_inferred: bool
    source: ForecastSource
    estimated_mrr: Decimal
    last_invoice_date: date | None
    last_invoice_amount: Decimal


@dataclass(frozen=True)
class ResolutionResult:
    """Resolutions in resolution order plus data-quality findings."""

    resolutions: tuple[ClientResolution, ...]
    issues: tuple[DataQualityIssue, ...]


def invoice_ref(invoice: Invoice, position: int) -> str:
    """
    Reference for an invoice row.

    ``position`` is the row's index in the ledger; rows without an
    ``invoice_id`` are told apart by it.
    """
    if invoice.invoice_id:
        return str(invoice.invoice_id)
    return f"{invoice.customer_name.strip()}@{invoice.invoice_date.isoformat()}#{position}"


def invoice_client_key(invoice: Invoice, parameters: ForecastParameters) -> str:
    """Client key of an invoice: its client_id, else its customer name."""
    return parameters.client_key(invoice.client_id or invoice.customer_name)


def sanitized_amount(
    value: object,
    *,
    client_id: str,
    record_type: str,
    record_ref: str,
    field_name: str,
    issues: list[DataQualityIssue],
) -> Decimal:
    """Coerce an amount to Decimal, substituting zero and recording an issue."""
    amount = to_decimal_amount(value)
    if amount is not None:
        return amount
    issue = DataQualityIssue(
        code=DataQualityCode.MALFORMED_AMOUNT,
        client_id=client_id,
        record_type=record_type,
        record_ref=record_ref,
        detail=f"{field_name}={value!r}",
    )
    # the resolver and the invoiced-to-date sum both read each invoice amount
    if issue not in issues:
        issues.append(issue)
    return ZERO


def select_authoritative_contract(
    contracts: Sequence[Contract],
) -> Contract:
    """
    Pick the authoritative contract among a client's active contracts.

    Preconditions:
        - ``contracts`` is non-empty.
    Postconditions:
        - Returns the contract with the latest ``start_date``; contracts
          without a start date rank oldest; ties go to the highest
          ``contract_id``.
    """
    return max(
        contracts,
        key=lambda c: (c.start_date or date.min, str(c.contract_id)),
    )


def select_latest_invoice(
    invoices: Sequence[Invoice],
    amounts: Sequence[Decimal],
) -> int | None:
    """
    Index of the latest invoice.

    Latest ``invoice_date`` wins; equal dates go to the highest amount;
    remaining ties keep the first invoice in input order.

    Returns:
        The winning index, or None when ``invoices`` is empty.
    """
    best: int | None = None
    for i, invoice in enumerate(invoices):
        if best is None:
            best = i
            continue
        candidate = (invoice.invoice_date, amounts[i])
        current = (invoices[best].invoice_date, amounts[best])
        if candidate > current:
            best = i
    return best


def resolve_clients(
    contracts: Sequence[Contract],
    invoices: Sequence[Invoice],
    parameters: ForecastParameters,
) -> ResolutionResult:
    """
    Resolve every forecastable client to an MRR estimate.

    Args:
        contracts: Contract snapshot rows (any status).
        invoices: Invoice ledger rows (any category).
        parameters: Forecast policy.

    Returns:
        ResolutionResult with one ClientResolution per client, in
        resolution order.
    """
    issues: list[DataQualityIssue] = []

    # Active contracts grouped by client, in input order
    contracts_by_client: dict[str, list[Contract]] = {}
    for contract in contracts:
        if not parameters.is_active_status(contract.status):
            continue
        key = parameters.client_key(contract.client_id)
        if key in parameters.excluded_clients:
            continue
        contracts_by_client.setdefault(key, []).append(contract)

    # Recurring invoices grouped by client, in input order, with ledger positions
    invoices_by_client: dict[str, list[Invoice]] = {}
    positions_by_client: dict[str, list[int]] = {}
    for position, invoice in enumerate(invoices):
        if not invoice.is_recurring:
            continue
        if parameters.is_excluded_invoice_status(invoice.status):
            continue
        key = invoice_client_key(invoice, parameters)
        if key in parameters.excluded_clients:
            continue
        invoices_by_client.setdefault(key, []).append(invoice)
        positions_by_client.setdefault(key, []).append(position)

    client_order = list(contracts_by_client)
    if parameters.include_invoice_only_clients:
        client_order.extend(k for k in invoices_by_client if k not in contracts_by_client)

    resolutions: list[ClientResolution] = []
    for client_id in client_order:
        active = contracts_by_client.get(client_id, [])
        contract = select_authoritative_contract(active) if active else None
        if len(active) > 1:
            issues.append(DataQualityIssue(
                code=DataQualityCode.AMBIGUOUS_CONTRACT,
                client_id=client_id,
                record_type="contract",
                record_ref=str(contract.contract_id),
                detail=(
                    f"{len(active)} active contracts: "
                    + ",".join(str(c.contract_id) for c in active)
                ),
            ))

        resolution = _resolve_one(
            client_id,
            contract,
            invoices_by_client.get(client_id, []),
            positions_by_client.get(client_id, []),
            issues,
        )
        if resolution is not None:
            resolutions.append(resolution)

    logger.debug("clients_resolved", extra={
        "client_count": len(resolutions),
        "invoice_sourced": sum(1 for r in resolutions if r.source is ForecastSource.INVOICE),
        "contract_sourced": sum(1 for r in resolutions if r.source is ForecastSource.CONTRACT),
        "issue_count": len(issues),
    })

    return ResolutionResult(resolutions=tuple(resolutions), issues=tuple(issues))


def _resolve_one(
    client_id: str,
    contract: Contract | None,
    client_invoices: Sequence[Invoice],
    positions: Sequence[int],
    issues: list[DataQualityIssue],
) -> ClientResolution | None:
    amounts = [
        sanitized_amount(
            inv.amount_net,
            client_id=client_id,
            record_type="invoice",
            record_ref=invoice_ref(inv, position),
            field_name="amount_net",
            issues=issues,
        )
        for inv, position in zip(client_invoices, positions)
    ]
    latest = select_latest_invoice(client_invoices, amounts)

    contract_frequency = contract.billing_frequency if contract else None
    if contract_frequency is not None:
        frequency = contract_frequency
    else:
        frequency = infer_frequency(inv.invoice_date for inv in client_invoices)

    if latest is not None:
        invoice = client_invoices[latest]
        amount = amounts[latest]
        return ClientResolution(
            client_id=client_id,
            client_name=contract.client_name if contract else invoice.customer_name.strip(),
            contract_id=contract.contract_id if contract else None,
            contract_name=contract.product if contract else None,
            billing_frequency=frequency,
            frequency_inferred=contract_frequency is None,
            source=ForecastSource.INVOICE,
            estimated_mrr=to_monthly(amount, frequency) or ZERO,
            last_invoice_date=invoice.invoice_date,
            last_invoice_amount=amount,
        )

    if contract is not None:
        current_mrr = sanitized_amount(
            contract.current_mrr,
            client_id=client_id,
            record_type="contract",
            record_ref=str(contract.contract_id),
            field_name="current_mrr",
            issues=issues,
        )
        return ClientResolution(
            client_id=client_id,
            client_name=contract.client_name,
            contract_id=contract.contract_id,
            contract_name=contract.product,
            billing_frequency=frequency,
            frequency_inferred=contract_frequency is None,
            source=ForecastSource.CONTRACT,
            estimated_mrr=current_mrr,
            last_invoice_date=None,
            last_invoice_amount=current_mrr,
        )

    return None
