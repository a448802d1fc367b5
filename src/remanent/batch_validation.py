"""Batch validation — exhaustive checks before any computation

A batch is rejected as a whole when:
- the transaction list is absent or empty
- it exceeds the configured size cap
- an amount is missing, non-finite or negative
- an amount is too long for the exact decimal context
- a timestamp is missing
- two transactions share a timestamp

All violations are collected (no early exit) so the caller can report them
in one round trip. Order of messages: batch-level first, then amount checks
by index, then timestamp checks by index.
"""

from collections.abc import Sequence
from decimal import Decimal
from typing import Optional

from src.core.domain.batch import BatchValidationReport
from src.core.domain.instant import Instant
from src.core.domain.transaction import Transaction
from src.core.math.ceiling import CEILING_UNIT, ceiling_digits
from src.core.math.decimal_safeguards import is_finite_decimal, is_negative


# =============================================================================
# EXCEPTIONS
# =============================================================================


class InvalidBatch(ValueError):
    """
    The transaction batch failed validation.

    Attributes:
        violations: every violation message, in report order
    """

    def __init__(self, violations: Sequence[str]):
        self.violations = tuple(violations)
        super().__init__(
            f"Invalid transactions ({len(self.violations)} error(s)): {list(self.violations)}"
        )


# =============================================================================
# VALIDATION
# =============================================================================


def collect_violations(
    transactions: Optional[Sequence[Transaction]],
    max_transactions: Optional[int] = None,
    precision: Optional[int] = None,
    ceiling_unit: Decimal = CEILING_UNIT,
) -> list[str]:
    """
    Every violation in the batch.

    Args:
        transactions: Batch to check (``None`` allowed)
        max_transactions: Optional size cap
        precision: Digits of the exact decimal context; amounts whose
            ceiling would not fit are violations (``None`` = no check)
        ceiling_unit: Rounding unit used for that check

    Returns:
        Violation messages; empty list for a valid batch
    """
    if not transactions:
        return ["No transactions provided"]

    errors: list[str] = []

    if max_transactions is not None and len(transactions) > max_transactions:
        errors.append(
            f"Batch of {len(transactions)} transactions exceeds limit of {max_transactions}"
        )

    # Amounts
    for i, txn in enumerate(transactions):
        amount = txn.amount
        if amount is None:
            errors.append(f"Transaction at index {i} has null amount")
        elif not is_finite_decimal(amount):
            errors.append(f"Transaction at index {i} has non-finite amount: {amount}")
        elif is_negative(amount):
            errors.append(f"Transaction at index {i} has negative amount: {amount}")
        elif precision is not None and ceiling_digits(amount, ceiling_unit) > precision:
            errors.append(
                f"Transaction at index {i} has amount exceeding {precision}-digit precision: {amount}"
            )

    # Timestamps
    seen: set[Instant] = set()
    for i, txn in enumerate(transactions):
        ts = txn.timestamp
        if ts is None:
            errors.append(f"Transaction at index {i} has null timestamp")
        elif ts in seen:
            errors.append(f"Duplicate timestamp found: {ts}")
        else:
            seen.add(ts)

    return errors


def validate_batch(
    transactions: Optional[Sequence[Transaction]],
    max_transactions: Optional[int] = None,
    precision: Optional[int] = None,
    ceiling_unit: Decimal = CEILING_UNIT,
) -> BatchValidationReport:
    """
    Validation report for a batch (never raises on bad data).

    Examples:
        >>> validate_batch([]).errors
        ('No transactions provided',)
    """
    errors = collect_violations(transactions, max_transactions, precision, ceiling_unit)

    if errors:
        return BatchValidationReport(
            valid=False,
            message=f"Validation failed with {len(errors)} error(s)",
            errors=tuple(errors),
        )

    return BatchValidationReport(valid=True, message="All transactions are valid")


def ensure_valid_batch(
    transactions: Optional[Sequence[Transaction]],
    max_transactions: Optional[int] = None,
    precision: Optional[int] = None,
    ceiling_unit: Decimal = CEILING_UNIT,
) -> None:
    """
    Raise ``InvalidBatch`` listing every violation, or return silently.
    """
    errors = collect_violations(transactions, max_transactions, precision, ceiling_unit)
    if errors:
        raise InvalidBatch(errors)
