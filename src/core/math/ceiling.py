"""
Ceiling — Round-up to the next multiple of 100

Turns a raw transaction amount into its ceiling and the base remanent:

    ceiling        = ceil(amount / unit) * unit
    base_remanent  = ceiling - amount

The division is an exact Decimal integer division (divmod); any non-zero
remainder bumps the quotient by one. Floats are never involved.

INVARIANTS (amount >= 0):
1. ceiling % unit == 0
2. ceiling - unit < amount <= ceiling
3. 0 <= base_remanent < unit
4. ceiling keeps the decimal places of amount (375.00 -> 400.00)
"""

from decimal import Decimal
from typing import Final, NamedTuple

from src.core.math.decimal_safeguards import (
    ZERO,
    digits_at_scale,
    exponent_of,
    validate_non_negative,
    validate_positive,
)

# =============================================================================
# CONSTANTS
# =============================================================================

CEILING_UNIT: Final[Decimal] = Decimal(100)


# =============================================================================
# RESULT
# =============================================================================


class CeilingResult(NamedTuple):
    """Ceiling of an amount and the base remanent derived from it."""

    ceiling: Decimal
    base_remanent: Decimal


# =============================================================================
# ROUNDING
# =============================================================================


def ceiling_of(amount: Decimal, unit: Decimal = CEILING_UNIT) -> Decimal:
    """
    Smallest multiple of ``unit`` that is >= ``amount``.

    Args:
        amount: Non-negative finite amount
        unit: Positive rounding unit (default 100)

    Returns:
        Ceiling, carrying the amount's decimal places

    Raises:
        ValueError: if amount is negative / non-finite or unit is not positive

    Examples:
        >>> ceiling_of(Decimal("375.00"))
        Decimal('400.00')
        >>> ceiling_of(Decimal("100"))
        Decimal('100')
        >>> ceiling_of(Decimal("0.01"))
        Decimal('100.00')
    """
    validate_non_negative(amount, "amount")
    validate_positive(unit, "unit")

    if amount.is_zero():
        return _keep_places(ZERO, amount)

    quotient, remainder = divmod(amount, unit)
    if remainder > ZERO:
        quotient += 1

    return _keep_places(quotient * unit, amount)


def round_to_ceiling(amount: Decimal, unit: Decimal = CEILING_UNIT) -> CeilingResult:
    """
    Ceiling and base remanent for one amount.

    Examples:
        >>> round_to_ceiling(Decimal("375.00"))
        CeilingResult(ceiling=Decimal('400.00'), base_remanent=Decimal('25.00'))
        >>> round_to_ceiling(Decimal("100.00"))
        CeilingResult(ceiling=Decimal('100.00'), base_remanent=Decimal('0.00'))
        >>> round_to_ceiling(Decimal("0"))
        CeilingResult(ceiling=Decimal('0'), base_remanent=Decimal('0'))
    """
    ceiling = ceiling_of(amount, unit)
    return CeilingResult(ceiling=ceiling, base_remanent=ceiling - amount)


def ceiling_digits(amount: Decimal, unit: Decimal = CEILING_UNIT) -> int:
    """
    Upper bound on the digits the ceiling of ``amount`` takes at the
    amount's scale (one extra integral digit for the carry).

    A context whose precision is below this bound cannot represent the
    ceiling exactly.

    Examples:
        >>> ceiling_digits(Decimal("375.00"))
        6
        >>> ceiling_digits(Decimal("0.01"))
        5
    """
    fraction = max(-exponent_of(amount), 0)
    integral = digits_at_scale(amount) - fraction + 1
    unit_integral = max(unit.adjusted(), 0) + 1
    return max(integral, unit_integral) + fraction


def _keep_places(value: Decimal, like: Decimal) -> Decimal:
    # integral ceilings take the amount's fractional exponent, never a positive one
    exponent = like.as_tuple().exponent
    if isinstance(exponent, int) and exponent < 0:
        return value.quantize(Decimal(1).scaleb(exponent))
    return value.copy_abs() if value.is_zero() else value
