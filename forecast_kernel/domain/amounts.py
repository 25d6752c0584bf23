"""
Amounts -- Decimal coercion and data-quality findings.

Responsibility:
    Converts raw amount fields from the data-loading collaborator into
    ``Decimal`` and describes the data-quality problems the engines detect
    but do not raise on.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic: floats are converted via ``str()`` so that
      ``0.1`` becomes ``Decimal("0.1")``, never a binary approximation.
    - ``to_decimal_amount`` never raises; it returns ``None`` for anything
      that is not a finite, non-negative number.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

ZERO = Decimal("0")


def to_decimal_amount(value: Any) -> Decimal | None:
    """
    Coerce an amount to ``Decimal``.

    Postconditions:
        - Returns a finite, non-negative ``Decimal``, or ``None`` when the
          value is missing, non-numeric, NaN, infinite or negative.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    else:
        return None

    if not amount.is_finite() or amount < ZERO:
        return None
    return amount


class DataQualityCode(str, Enum):
    """Machine-readable codes for data-quality findings."""

    MALFORMED_AMOUNT = "MALFORMED_AMOUNT"
    AMBIGUOUS_CONTRACT = "AMBIGUOUS_CONTRACT"


@dataclass(frozen=True)
class DataQualityIssue:
    """
    A data-quality problem found while computing a forecast.

    The engine degrades to a conservative value (zero, or a deterministic
    tie-break) and records the issue here; logging is left to the caller.
    """

    code: DataQualityCode
    client_id: str
    record_type: str  # "contract" or "invoice"
    record_ref: str
    detail: str
