"""
Module: forecast_engines.parameters
Responsibility:
    Engine-side parameter object for a forecast run.  The configuration
    layer translates its YAML-backed ``ForecastConfig`` into this type
    (see ``forecast_config.bridges``) so engines never import config.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``fiscal_year_start_month`` is in 1..12.
    - Every horizon is a positive integer number of months.
    - Status and client-key sets are stored normalized (stripped,
      lower-cased statuses) so comparisons are exact.

Failure modes:
    - ValueError from ``__post_init__`` on invalid values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

STANDARD_HORIZONS: tuple[int, ...] = (1, 3, 6, 12)


@dataclass(frozen=True)
class ForecastParameters:
    """
    Tunable policy for a forecast run.

    Contract:
        Frozen dataclass; defaults reproduce the dashboard's standard
        forecast (calendar fiscal year, four horizons, ``active``
        contracts, recurring invoices only).
    Guarantees:
        - ``horizons`` is sorted ascending without duplicates.
        - ``client_aliases`` keys and values are stripped.
    """

    fiscal_year_start_month: int = 1
    horizons: tuple[int, ...] = STANDARD_HORIZONS
    active_contract_statuses: frozenset[str] = frozenset({"active"})
    excluded_invoice_statuses: frozenset[str] = frozenset({"cancelled", "void"})
    excluded_clients: frozenset[str] = frozenset()
    client_aliases: Mapping[str, str] = field(default_factory=dict)
    include_invoice_only_clients: bool = True
    ytd_recurring_only: bool = False

    def __post_init__(self) -> None:
        if not 1 <= self.fiscal_year_start_month <= 12:
            raise ValueError("fiscal_year_start_month must be between 1 and 12")
        for months in self.horizons:
            if isinstance(months, bool) or not isinstance(months, int) or months <= 0:
                raise ValueError(f"horizon must be a positive integer, got {months!r}")

        object.__setattr__(self, "horizons", tuple(sorted(set(self.horizons))))
        object.__setattr__(
            self,
            "active_contract_statuses",
            frozenset(s.strip().lower() for s in self.active_contract_statuses),
        )
        object.__setattr__(
            self,
            "excluded_invoice_statuses",
            frozenset(s.strip().lower() for s in self.excluded_invoice_statuses),
        )
        object.__setattr__(
            self,
            "excluded_clients",
            frozenset(c.strip() for c in self.excluded_clients),
        )
        object.__setattr__(
            self,
            "client_aliases",
            {k.strip(): v.strip() for k, v in self.client_aliases.items()},
        )

    def client_key(self, raw: str) -> str:
        """Normalize a client identifier or customer name to a client key."""
        key = (raw or "").strip()
        return self.client_aliases.get(key, key)

    def is_active_status(self, status: str) -> bool:
        """True if a contract status participates in the forecast."""
        return (status or "").strip().lower() in self.active_contract_statuses

    def is_excluded_invoice_status(self, status: str) -> bool:
        """True if an invoice status removes it from every calculation."""
        return (status or "").strip().lower() in self.excluded_invoice_statuses
