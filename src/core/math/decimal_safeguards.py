"""
Decimal Safeguards — Exact Monetary Primitives

Every monetary value in the engine is a ``decimal.Decimal``. This module is
the single place where outside values are turned into decimals and where
decimal sanity checks live:

- Conversion from str / int / Decimal (floats are refused outright)
- Finite / sign checks used by batch validation
- Canonical plain-notation formatting for the wire (never scientific)
- A calculation context that traps any inexact operation

CRITICAL INVARIANTS:
1. Binary floating point never enters the value path
2. No monetary operation is silently rounded (Inexact is trapped)
3. Formatting never produces exponent notation ("4E+2")
"""

from decimal import Context, Decimal, Inexact, InvalidOperation, localcontext
from typing import Final

# =============================================================================
# CONSTANTS
# =============================================================================

ZERO: Final[Decimal] = Decimal(0)

# Working precision (significant digits) for the value path. Large enough
# that sums of 10^6 amounts with cent precision stay exact.
DEFAULT_DECIMAL_PRECISION: Final[int] = 60


# =============================================================================
# EXCEPTIONS
# =============================================================================


class FloatInValuePath(TypeError):
    """A binary float was offered where an exact decimal is required."""


# =============================================================================
# CONVERSION
# =============================================================================


def to_decimal(value: "Decimal | int | str", name: str = "value") -> Decimal:
    """
    Convert a value to ``Decimal`` without passing through float.

    Args:
        value: Decimal, int, or decimal string (e.g. ``"375.00"``)
        name: Parameter name for error messages

    Returns:
        Exact Decimal representation

    Raises:
        FloatInValuePath: if ``value`` is a float
        ValueError: if a string is not a decimal number
        TypeError: for any other type

    Examples:
        >>> to_decimal("375.00")
        Decimal('375.00')
        >>> to_decimal(7)
        Decimal('7')
    """
    if isinstance(value, float):
        raise FloatInValuePath(
            f"{name} must be a decimal string, int or Decimal, got float {value!r}"
        )
    if isinstance(value, bool):
        raise TypeError(f"{name} must be a decimal, got bool")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"{name} is not a decimal number: {value!r}") from None
    raise TypeError(f"{name} must be a decimal, got {type(value).__name__}")


# =============================================================================
# CHECKS
# =============================================================================


def is_finite_decimal(value: Decimal) -> bool:
    """True unless value is NaN or ±Infinity."""
    return value.is_finite()


def is_negative(value: Decimal) -> bool:
    """
    Strict sign check; ``-0`` is not negative.

    Examples:
        >>> is_negative(Decimal("-0.00"))
        False
        >>> is_negative(Decimal("-0.01"))
        True
    """
    return value < ZERO


def validate_non_negative(value: Decimal, name: str) -> None:
    """
    Validate that a decimal is finite and non-negative.

    Args:
        value: Checked value
        name: Parameter name (for the error message)

    Raises:
        ValueError: if value < 0 or not finite
    """
    if not is_finite_decimal(value):
        raise ValueError(f"{name} must be a finite decimal, got {value}")

    if is_negative(value):
        raise ValueError(f"{name} must be non-negative, got {value}")


def validate_positive(value: Decimal, name: str) -> None:
    """
    Validate that a decimal is finite and strictly positive.

    Raises:
        ValueError: if value <= 0 or not finite
    """
    if not is_finite_decimal(value):
        raise ValueError(f"{name} must be a finite decimal, got {value}")

    if value <= ZERO:
        raise ValueError(f"{name} must be positive, got {value}")


# =============================================================================
# FORMATTING & CONTEXT
# =============================================================================


def exponent_of(value: Decimal) -> int:
    """
    Exponent of a finite decimal (``-2`` for ``"25.00"``).

    Raises:
        ValueError: if value is not finite
    """
    if not is_finite_decimal(value):
        raise ValueError(f"exponent of a non-finite decimal: {value}")
    return value.as_tuple().exponent


def with_exponent(value: Decimal, exponent: int) -> Decimal:
    """
    Rewrite ``value`` with the given exponent.

    Running totals keep the finest scale they ever held; this brings a total
    back to the scale of the values it currently contains. Under
    ``exact_context`` a value that does not fit raises instead of rounding.

    Examples:
        >>> with_exponent(Decimal("30.000"), -2)
        Decimal('30.00')
    """
    return value.quantize(Decimal(1).scaleb(exponent))


def digits_at_scale(value: Decimal) -> int:
    """
    Digits needed to write a finite value in plain notation, counted from the
    leading digit down to its last fraction digit (at least to the units).

    Examples:
        >>> digits_at_scale(Decimal("375.00"))
        5
        >>> digits_at_scale(Decimal("4E+2"))
        3
        >>> digits_at_scale(Decimal("0.001"))
        4
    """
    if value.is_zero():
        return 1
    exponent = min(exponent_of(value), 0)
    return max(value.adjusted(), 0) - exponent + 1


def format_decimal(value: Decimal) -> str:
    """
    Plain-notation string for the wire.

    Examples:
        >>> format_decimal(Decimal("4E+2"))
        '400'
        >>> format_decimal(Decimal("25.00"))
        '25.00'
        >>> format_decimal(Decimal("-0"))
        '0'
    """
    if value.is_zero():
        value = value.copy_abs()
    return format(value, "f")


def exact_context(precision: int = DEFAULT_DECIMAL_PRECISION):
    """
    Local decimal context for the value path.

    ``Inexact`` is trapped: an operation that would have to round raises
    ``decimal.Inexact`` instead of returning an approximation.

    Usage:
        with exact_context():
            total = a + b
    """
    if precision < 1:
        raise ValueError(f"precision must be >= 1, got {precision}")
    ctx = Context(prec=precision)
    ctx.traps[Inexact] = True
    return localcontext(ctx)
