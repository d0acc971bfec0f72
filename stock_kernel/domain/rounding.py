"""
Rounding -- Decimal coercion and minor-unit rounding helpers.

Responsibility:
    Convert caller-supplied numbers to Decimal and round monetary values to
    integer minor currency units (cents, kuruş, ...).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic: floats are converted through ``str()`` so
      ``1000.49`` becomes ``Decimal("1000.49")``, never its binary expansion.
    - Round half away from zero (``ROUND_HALF_UP`` in the decimal module),
      applied at the point a monetary value is first computed.

Failure modes:
    - ValueError when a value cannot be interpreted as a number.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_WHOLE_UNIT = Decimal("1")


def to_decimal(value: Decimal | int | str | float) -> Decimal:
    """Coerce a numeric value to Decimal.

    Raises:
        ValueError: If the value is not numeric.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid numeric value: {value!r}") from e


def round_minor(value: Decimal | int | str | float) -> int:
    """Round to the nearest whole minor unit, half away from zero.

    >>> round_minor(Decimal("1000.5"))
    1001
    >>> round_minor(Decimal("-2.5"))
    -3
    """
    return int(to_decimal(value).quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP))
