"""
Configuration Schema (``forecast_config.schema``).

Responsibility
--------------
Typed, frozen representation of a forecast configuration set.  Instances
are produced by ``forecast_config.loader`` from YAML and converted into
engine parameters by ``forecast_config.bridges``.

Invariants enforced
-------------------
* ``fiscal_year_start_month`` is in 1..12.
* ``horizons`` is non-empty and holds positive integers.
* Validation failures raise ``ForecastConfigError`` naming the field.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from forecast_kernel.exceptions import ForecastConfigError


@dataclass(frozen=True)
class ForecastConfig:
    """A named, versioned forecast configuration set."""

    name: str
    version: int = 1
    description: str = ""
    fiscal_year_start_month: int = 1
    horizons: tuple[int, ...] = (1, 3, 6, 12)
    active_contract_statuses: tuple[str, ...] = ("active",)
    excluded_invoice_statuses: tuple[str, ...] = ("cancelled", "void")
    ytd_recurring_only: bool = False
    include_invoice_only_clients: bool = True
    excluded_clients: tuple[str, ...] = ()
    client_aliases: dict[str, str] = field(default_factory=dict)
    checksum: str = ""

    def __post_init__(self) -> None:
        month = self.fiscal_year_start_month
        if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
            raise ForecastConfigError(
                "fiscal_year.start_month", month, "must be an integer between 1 and 12"
            )
        if not self.horizons:
            raise ForecastConfigError("horizons", self.horizons, "must not be empty")
        for months in self.horizons:
            if isinstance(months, bool) or not isinstance(months, int) or months <= 0:
                raise ForecastConfigError(
                    "horizons", months, "each horizon must be a positive integer"
                )
        if not self.active_contract_statuses:
            raise ForecastConfigError(
                "contracts.active_statuses",
                self.active_contract_statuses,
                "at least one status must be active",
            )
