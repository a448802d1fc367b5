"""
Core math modules.

Exact decimal primitives; binary floating point never enters the value path.
"""

# Decimal Safeguards
from src.core.math.decimal_safeguards import (
    DEFAULT_DECIMAL_PRECISION,
    ZERO,
    FloatInValuePath,
    exact_context,
    format_decimal,
    is_finite_decimal,
    digits_at_scale,
    exponent_of,
    is_negative,
    to_decimal,
    validate_non_negative,
    validate_positive,
    with_exponent,
)

# Ceiling
from src.core.math.ceiling import (
    CEILING_UNIT,
    CeilingResult,
    ceiling_digits,
    ceiling_of,
    round_to_ceiling,
)

__all__ = [
    # Decimal Safeguards — Constants
    "DEFAULT_DECIMAL_PRECISION",
    "ZERO",
    # Decimal Safeguards — Exceptions
    "FloatInValuePath",
    # Decimal Safeguards — Functions
    "exact_context",
    "format_decimal",
    "is_finite_decimal",
    "digits_at_scale",
    "exponent_of",
    "is_negative",
    "to_decimal",
    "validate_non_negative",
    "validate_positive",
    "with_exponent",
    # Ceiling
    "CEILING_UNIT",
    "CeilingResult",
    "ceiling_digits",
    "ceiling_of",
    "round_to_ceiling",
]
