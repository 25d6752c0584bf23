"""
forecast_config -- single public entrypoint for forecast configuration.

Responsibility:
    Provides the ONLY way to obtain forecast configuration at runtime
    through ``get_active_config()``.  Configuration sets are YAML files in
    ``forecast_config/sets/``; each file is one named set.

Architecture position:
    Configuration -- sits above ``forecast_kernel`` / ``forecast_engines``
    and below ``forecast_services``.  Engines MUST NEVER import from
    ``forecast_config``; ``forecast_config.bridges`` translates a config
    into engine parameters.

Failure modes:
    - ``ConfigNotFoundError`` -- no configuration set with that name.
    - ``ForecastConfigError`` -- invalid values or unknown keys.
    - ``yaml.YAMLError`` -- malformed YAML.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``FORECAST_CONFIG_TRACE`` log entry containing the config name,
    version and checksum, tying every forecast back to the exact
    configuration that produced it.
"""

from __future__ import annotations

from pathlib import Path

from forecast_config.loader import load_config_file
from forecast_config.schema import ForecastConfig
from forecast_kernel.exceptions import ConfigNotFoundError
from forecast_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

DEFAULT_CONFIG_NAME = "default"


def get_active_config(
    name: str = DEFAULT_CONFIG_NAME,
    config_dir: Path | None = None,
) -> ForecastConfig:
    """The ONLY public configuration entrypoint.

    Args:
        name: Configuration set name (YAML file stem).
        config_dir: Override path to the configuration sets directory.
            Defaults to forecast_config/sets/.

    Returns:
        The validated, frozen ForecastConfig.

    Raises:
        ConfigNotFoundError: If no ``<name>.yaml`` / ``<name>.yml`` exists.
        ForecastConfigError: If the configuration is invalid.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR

    path = None
    for suffix in (".yaml", ".yml"):
        candidate = sets_dir / f"{name}{suffix}"
        if candidate.is_file():
            path = candidate
            break
    if path is None:
        raise ConfigNotFoundError(name, str(sets_dir))

    config = load_config_file(path)

    _logger.info(
        "FORECAST_CONFIG_TRACE",
        extra={
            "trace_type": "FORECAST_CONFIG_TRACE",
            "config_name": config.name,
            "config_version": config.version,
            "checksum": config.checksum,
            "fiscal_year_start_month": config.fiscal_year_start_month,
            "horizons": list(config.horizons),
            "source_path": str(path),
        },
    )
    return config


__all__ = [
    "DEFAULT_CONFIG_NAME",
    "ForecastConfig",
    "get_active_config",
]
