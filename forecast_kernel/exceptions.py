"""
Typed Exception Hierarchy for the Revenue Forecast Engine.

===============================================================================
WHEN THE ENGINE RAISES
===============================================================================

The forecast engine degrades gracefully on bad *data*: malformed amounts,
missing invoices or ambiguous contracts become zeroed or excluded values
plus a ``DataQualityIssue`` on the result. Exceptions are reserved for a
broken *call contract* (wrong input types, missing collections) and for
invalid configuration.

Every exception carries:
  1. A TYPED class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured attributes (not just a message string)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ForecastError (base)
    |
    +-- ForecastInputError
    |   +-- InvalidForecastInputError
    |   +-- InvalidRecordError
    |
    +-- ForecastConfigError
        +-- ConfigNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category  | Code                    | When Raised
----------|-------------------------|-----------------------------------------
Input     | INVALID_FORECAST_INPUT  | Input collection is None / not a sequence
          | INVALID_RECORD          | Collection holds a record of wrong type
----------|-------------------------|-----------------------------------------
Config    | FORECAST_CONFIG_INVALID | Start month, horizon or key is invalid
          | CONFIG_NOT_FOUND        | Named configuration set does not exist
"""


class ForecastError(Exception):
    """
    Base exception for all revenue forecast errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "FORECAST_ERROR"


# Input-related exceptions


class ForecastInputError(ForecastError):
    """Base exception for call-contract violations on engine inputs."""

    code: str = "FORECAST_INPUT_ERROR"


class InvalidForecastInputError(ForecastInputError):
    """An input collection is missing or is not a sequence."""

    code: str = "INVALID_FORECAST_INPUT"

    def __init__(self, argument: str, received_type: str):
        self.argument = argument
        self.received_type = received_type
        super().__init__(
            f"{argument} must be a sequence of records, got {received_type}"
        )


class InvalidRecordError(ForecastInputError):
    """An input collection contains an element of the wrong type."""

    code: str = "INVALID_RECORD"

    def __init__(self, argument: str, index: int, expected_type: str, received_type: str):
        self.argument = argument
        self.index = index
        self.expected_type = expected_type
        self.received_type = received_type
        super().__init__(
            f"{argument}[{index}] must be {expected_type}, got {received_type}"
        )


# Configuration-related exceptions


class ForecastConfigError(ForecastError):
    """Configuration values are invalid."""

    code: str = "FORECAST_CONFIG_INVALID"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid forecast config {field}={value!r}: {reason}")


class ConfigNotFoundError(ForecastConfigError):
    """No configuration set with the requested name exists."""

    code: str = "CONFIG_NOT_FOUND"

    def __init__(self, config_name: str, search_dir: str):
        self.config_name = config_name
        self.search_dir = search_dir
        super().__init__("config_name", config_name, f"not found in {search_dir}")
