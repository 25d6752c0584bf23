"""
forecast_engines.tracer -- FORECAST_ENGINE_TRACE emission for engine calls.

Responsibility:
    ``@traced_engine`` wraps a pure engine entrypoint and, after each call,
    logs one FORECAST_ENGINE_TRACE record carrying the engine name and
    version, a fingerprint of the selected inputs, the size of every
    record collection passed in, and the call duration.  Two runs with the
    same fingerprint saw the same contracts, invoices and reference date.

Architecture position:
    Engines -- support code for the pure calculation layer.  It only reads
    keyword arguments and writes a log record.

Invariants enforced:
    - The fingerprint is deterministic: amounts are compared by value
      (``Decimal("1.0")`` and ``Decimal("1")`` hash alike), set ordering
      is irrelevant, dataclass records are rendered field by field.
    - A failing engine call emits no trace; the exception propagates.

Usage:
    from forecast_engines.tracer import traced_engine

    @traced_engine("revenue_forecast", "1.0", fingerprint_fields=("contracts", "as_of"))
    def calculate_forecast(contracts, invoices, as_of, ...):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import time
from collections.abc import Callable, Mapping, Sequence
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from forecast_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

_FINGERPRINT_LENGTH = 16


def _canonical(value: Any) -> str:
    """Stable text form of ``value`` for fingerprinting."""
    if value is None:
        return "~"
    if isinstance(value, Enum):
        return _canonical(value.value)
    if isinstance(value, bool):
        return "T" if value else "F"
    if isinstance(value, Decimal):
        return str(value.normalize()) if value.is_finite() else str(value)
    if isinstance(value, (int, float, str)):
        return repr(value)
    if isinstance(value, date):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        body = ";".join(
            f"{f.name}={_canonical(getattr(value, f.name))}"
            for f in dataclasses.fields(value)
        )
        return f"{type(value).__name__}({body})"
    if isinstance(value, Mapping):
        body = ";".join(
            f"{_canonical(k)}={_canonical(v)}"
            for k, v in sorted(value.items(), key=lambda kv: repr(kv[0]))
        )
        return "{" + body + "}"
    if isinstance(value, (set, frozenset)):
        return "{" + ",".join(sorted(_canonical(v) for v in value)) + "}"
    if isinstance(value, Sequence):
        return "[" + ",".join(_canonical(v) for v in value) + "]"
    return repr(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: Mapping[str, Any],
) -> str:
    """
    SHA-256 prefix over the named keyword arguments.

    Absent arguments fingerprint the same as ``None``.
    """
    digest = hashlib.sha256()
    for name in fingerprint_fields:
        digest.update(f"{name}:{_canonical(kwargs.get(name))}\n".encode("utf-8"))
    return digest.hexdigest()[:_FINGERPRINT_LENGTH]


def _collection_sizes(kwargs: Mapping[str, Any]) -> dict[str, int]:
    return {
        name: len(value)
        for name, value in kwargs.items()
        if isinstance(value, Sequence) and not isinstance(value, (str, bytes))
    }


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator emitting FORECAST_ENGINE_TRACE after each successful call."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = (
                compute_input_fingerprint(fingerprint_fields, kwargs)
                if fingerprint_fields else ""
            )
            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed_ms = (time.perf_counter() - started) * 1000

            _logger.info("FORECAST_ENGINE_TRACE", extra={
                "trace_type": "FORECAST_ENGINE_TRACE",
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": fingerprint,
                "input_sizes": _collection_sizes(kwargs),
                "duration_ms": round(elapsed_ms, 2),
            })
            return result

        return wrapper

    return decorator
