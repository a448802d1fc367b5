"""Engine configuration."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from src.core.math.ceiling import CEILING_UNIT
from src.core.math.decimal_safeguards import DEFAULT_DECIMAL_PRECISION


@dataclass(frozen=True)
class EngineConfig:
    """Remanent engine configuration.

    Immutable; pass one instance to the pipeline / engine constructors.
    """

    # Rounding unit for the ceiling
    ceiling_unit: Decimal = CEILING_UNIT

    # Significant digits of the exact decimal context
    decimal_precision: int = DEFAULT_DECIMAL_PRECISION

    # Upper bound on batch size; None disables the check
    max_transactions: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.ceiling_unit, Decimal) or not self.ceiling_unit > 0:
            raise ValueError(f"ceiling_unit must be a positive Decimal, got {self.ceiling_unit!r}")
        if self.decimal_precision < 1:
            raise ValueError(f"decimal_precision must be >= 1, got {self.decimal_precision}")
        if self.max_transactions is not None and self.max_transactions < 1:
            raise ValueError(f"max_transactions must be >= 1, got {self.max_transactions}")
