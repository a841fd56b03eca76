"""
Money -- Decimal-only amount and hours helpers.

Responsibility:
    Single place where pay amounts are rounded to cents and minutes are
    turned into hours.  Engines keep full precision internally and round
    only at the reporting boundary through these helpers.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - No binary floating point: ``to_decimal`` rejects float input.
    - Rounding is ROUND_HALF_UP to two decimal places for currency.

Failure modes:
    - TypeError on float input.
    - ValueError on a non-numeric string.
"""

from __future__ import annotations

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")
CENT = Decimal("0.01")
MINUTES_PER_HOUR = Decimal("60")

# Hours are reported to 9 places, matching the Numeric(38, 9) columns.
HOURS_QUANTUM = Decimal("0.000000001")


def to_decimal(value: Decimal | int | str) -> Decimal:
    """Coerce a configuration or ORM value to Decimal, refusing floats."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"Refusing to build a Decimal from {type(value).__name__}: {value!r}")
    try:
        return Decimal(str(value).strip()) if isinstance(value, str) else Decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"Not a decimal number: {value!r}") from exc


def round_money(amount: Decimal) -> Decimal:
    """Round to cents, half-up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def truncate_cents(amount: Decimal) -> Decimal:
    """Drop cents, keeping whole dollars (toward zero)."""
    return amount.quantize(Decimal("1"), rounding=ROUND_DOWN)


def hours_from_minutes(minutes: int) -> Decimal:
    """Exact-as-reportable hours for a whole number of minutes."""
    return (Decimal(minutes) / MINUTES_PER_HOUR).quantize(
        HOURS_QUANTUM, rounding=ROUND_HALF_UP
    )
