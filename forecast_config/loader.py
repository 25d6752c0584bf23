"""
Configuration Loader (``forecast_config.loader``).

Responsibility
--------------
Loads forecast configuration YAML files and parses them into the frozen
``ForecastConfig`` dataclass.  Runtime callers go through
``forecast_config.get_active_config()``; this module is the parsing layer
beneath it.

Invariants enforced
-------------------
* Unknown keys are rejected; a typo never silently falls back to a
  default.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values or unknown keys  -> ``ForecastConfigError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from forecast_config.schema import ForecastConfig
from forecast_kernel.exceptions import ForecastConfigError

_SECTION_KEYS: dict[str, frozenset[str]] = {
    "fiscal_year": frozenset({"start_month"}),
    "contracts": frozenset({"active_statuses"}),
    "invoices": frozenset({"excluded_statuses", "ytd_recurring_only"}),
    "clients": frozenset({"include_invoice_only", "excluded", "aliases"}),
}
_TOP_LEVEL_KEYS = frozenset({"name", "version", "description", "horizons"}) | frozenset(
    _SECTION_KEYS
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed configuration mapping."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ForecastConfigError(name, section, "must be a mapping")
    unknown = set(section) - _SECTION_KEYS[name]
    if unknown:
        raise ForecastConfigError(name, sorted(unknown), "unknown keys")
    return section


def _string_list(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, list):
        raise ForecastConfigError(field_name, value, "must be a list")
    return tuple(str(v) for v in value)


def _flag(value: Any, field_name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ForecastConfigError(field_name, value, "must be true or false")
    return value


def _version(value: Any) -> int:
    if value is None:
        return 1
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ForecastConfigError("version", value, "must be a positive integer")
    return value


def parse_config(data: dict[str, Any], default_name: str = "default") -> ForecastConfig:
    """
    Parse a ``ForecastConfig`` from a dict.

    Postconditions:
        - Returns a validated, frozen ``ForecastConfig`` whose ``checksum``
          identifies ``data``.
    Raises:
        ForecastConfigError: on unknown keys or invalid values.
    """
    if not isinstance(data, dict):
        raise ForecastConfigError("<root>", data, "must be a mapping")
    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ForecastConfigError("<root>", sorted(unknown), "unknown keys")

    fiscal_year = _section(data, "fiscal_year")
    contracts = _section(data, "contracts")
    invoices = _section(data, "invoices")
    clients = _section(data, "clients")

    horizons = data.get("horizons", [1, 3, 6, 12])
    if isinstance(horizons, str) or not isinstance(horizons, list):
        raise ForecastConfigError("horizons", horizons, "must be a list")

    aliases = clients.get("aliases") or {}
    if not isinstance(aliases, dict):
        raise ForecastConfigError("clients.aliases", aliases, "must be a mapping")

    return ForecastConfig(
        name=str(data.get("name") or default_name),
        version=_version(data.get("version")),
        description=str(data.get("description") or ""),
        fiscal_year_start_month=fiscal_year.get("start_month", 1),
        horizons=tuple(horizons),
        active_contract_statuses=_string_list(
            contracts.get("active_statuses", ["active"]), "contracts.active_statuses"
        ),
        excluded_invoice_statuses=_string_list(
            invoices.get("excluded_statuses", ["cancelled", "void"]),
            "invoices.excluded_statuses",
        ),
        ytd_recurring_only=_flag(
            invoices.get("ytd_recurring_only"), "invoices.ytd_recurring_only", False
        ),
        include_invoice_only_clients=_flag(
            clients.get("include_invoice_only"), "clients.include_invoice_only", True
        ),
        excluded_clients=_string_list(clients.get("excluded"), "clients.excluded"),
        client_aliases={str(k): str(v) for k, v in aliases.items()},
        checksum=compute_checksum(data),
    )


def load_config_file(path: Path) -> ForecastConfig:
    """Load and parse one configuration file; the file stem is the default name."""
    return parse_config(load_yaml_file(path), default_name=path.stem)
