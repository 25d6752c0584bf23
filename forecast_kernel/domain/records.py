"""
Records -- Immutable input records consumed by the forecast engine.

Responsibility:
    Typed, frozen representations of the two external data sources the
    engine reconciles: the contract snapshot table and the invoice ledger.
    Also defines the small enumerations shared by every engine module.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Records are produced by the data-loading collaborator and passed by
    value into the engines, which only read them.

Invariants enforced:
    - Records are frozen; the engine can never mutate caller data.
    - ``billing_frequency`` and ``revenue_category`` are normalized to
      enums (or ``None`` when unknown) at construction time.
    - Amount fields are NOT validated here.  Malformed amounts are a
      data-quality concern handled by the engines, which degrade to zero.

Failure modes:
    - ValueError when a date field cannot be parsed.
    - KeyError from ``from_mapping`` when a required key is missing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping


class BillingFrequency(str, Enum):
    """Billing cadence of a contract."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"

    @property
    def months(self) -> int:
        """Number of months covered by one billing period."""
        return _MONTHS_PER_PERIOD[self]

    @classmethod
    def parse(cls, value: Any) -> BillingFrequency | None:
        """
        Parse a billing frequency label.

        Accepts enum members, the English labels, and the Spanish labels used
        by the contracts dataset (``mensual``, ``trimestral``, ``anual``),
        case-insensitively.  Unknown or empty values return ``None``.
        """
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        return _FREQUENCY_ALIASES.get(str(value).strip().lower())


_MONTHS_PER_PERIOD = {
    BillingFrequency.MONTHLY: 1,
    BillingFrequency.QUARTERLY: 3,
    BillingFrequency.ANNUAL: 12,
}

_FREQUENCY_ALIASES: dict[str, BillingFrequency] = {
    "monthly": BillingFrequency.MONTHLY,
    "mensual": BillingFrequency.MONTHLY,
    "quarterly": BillingFrequency.QUARTERLY,
    "trimestral": BillingFrequency.QUARTERLY,
    "annual": BillingFrequency.ANNUAL,
    "annually": BillingFrequency.ANNUAL,
    "yearly": BillingFrequency.ANNUAL,
    "anual": BillingFrequency.ANNUAL,
}


class RevenueCategory(str, Enum):
    """Ledger classification of an invoice."""

    RECURRING = "recurring"
    NON_RECURRING = "non_recurring"
    OTHER = "other"

    @classmethod
    def parse(cls, value: Any) -> RevenueCategory:
        """Parse a category label; anything unrecognised is ``OTHER``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OTHER


class ForecastSource(str, Enum):
    """Provenance of a client's resolved MRR."""

    INVOICE = "invoice"
    CONTRACT = "contract"


def parse_record_date(value: Any) -> date | None:
    """
    Parse a date from a record field.

    Accepts ``date``/``datetime`` instances and ISO-8601 strings (a time
    component, if present, is dropped).  Empty values return ``None``.

    Raises:
        ValueError: if ``value`` is not a valid date representation.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"Cannot parse date from {value!r}")


@dataclass(frozen=True)
class Contract:
    """
    One row of the contract snapshot table.

    Contract:
        Frozen dataclass.  Only contracts whose ``status`` is configured as
        active participate in the forecast.
    Guarantees:
        - ``billing_frequency`` is a ``BillingFrequency`` or ``None``.
        - ``start_date`` is a ``date`` or ``None``.
    Non-goals:
        - Does not validate ``current_mrr``; see the resolver's
          malformed-amount handling.
    """

    client_id: str
    client_name: str
    contract_id: str
    status: str
    product: str
    billing_frequency: BillingFrequency | None
    current_mrr: Decimal | int | float | str
    start_date: date | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "billing_frequency", BillingFrequency.parse(self.billing_frequency)
        )
        object.__setattr__(self, "start_date", parse_record_date(self.start_date))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Contract:
        """Build a Contract from a snake_case dataset row."""
        return cls(
            client_id=str(data["client_id"]).strip(),
            client_name=data.get("client_name") or str(data["client_id"]),
            contract_id=str(data["contract_id"]),
            status=data.get("status") or "",
            product=data.get("product") or "",
            billing_frequency=data.get("billing_frequency"),
            current_mrr=data.get("current_mrr", 0),
            start_date=data.get("start_date"),
        )


@dataclass(frozen=True)
class Invoice:
    """
    One row of the invoice ledger.

    Contract:
        Frozen dataclass; an immutable historical fact.  The client is
        identified by ``client_id`` when the ledger carries one, otherwise
        by ``customer_name``.
    Guarantees:
        - ``invoice_date`` is a ``date``.
        - ``revenue_category`` is a ``RevenueCategory``.
    """

    customer_name: str
    invoice_date: date
    amount_net: Decimal | int | float | str
    revenue_category: RevenueCategory
    status: str = ""
    client_id: str | None = None
    invoice_id: str | None = None

    def __post_init__(self) -> None:
        invoice_date = parse_record_date(self.invoice_date)
        if invoice_date is None:
            raise ValueError("invoice_date is required")
        object.__setattr__(self, "invoice_date", invoice_date)
        object.__setattr__(
            self, "revenue_category", RevenueCategory.parse(self.revenue_category)
        )

    @property
    def is_recurring(self) -> bool:
        """True if this invoice is recurring revenue."""
        return self.revenue_category is RevenueCategory.RECURRING

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Invoice:
        """Build an Invoice from a snake_case ledger row."""
        client_id = data.get("client_id")
        return cls(
            customer_name=data.get("customer_name") or "",
            invoice_date=data["invoice_date"],
            amount_net=data.get("amount_net", 0),
            revenue_category=data.get("revenue_category", RevenueCategory.OTHER),
            status=data.get("status") or "",
            client_id=str(client_id).strip() if client_id else None,
            invoice_id=data.get("invoice_id"),
        )
