"""
Batch — Request and report envelopes of one engine call

Plain frozen dataclasses; the per-item models live in ``transaction`` and
``rules``.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from src.core.domain.rules import AdditiveRule, OverrideRule, RangeQuery
from src.core.domain.transaction import Transaction, TransactionResult


# =============================================================================
# REQUEST
# =============================================================================


@dataclass(frozen=True)
class RemanentRequest:
    """Decoded engine input. ``None`` rule lists mean "no rules"."""

    transactions: Optional[tuple[Transaction, ...]]
    override_rules: tuple[OverrideRule, ...] = ()
    additive_rules: tuple[AdditiveRule, ...] = ()
    range_queries: tuple[RangeQuery, ...] = ()


# =============================================================================
# REPORTS
# =============================================================================


@dataclass(frozen=True)
class RemanentReport:
    """Result of one engine call."""

    # Timestamp-ascending
    results: tuple[TransactionResult, ...]

    # Query -> summed remanent, in query order
    range_sums: dict[RangeQuery, Decimal] = field(default_factory=dict)

    # Sum of all remanents (last prefix sum)
    total: Decimal = Decimal(0)

    count: int = 0


@dataclass(frozen=True)
class BatchValidationReport:
    """Outcome of batch validation with every violation found."""

    valid: bool
    message: str
    errors: tuple[str, ...] = ()
