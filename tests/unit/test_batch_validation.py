"""
Tests for batch validation

Coverage:
- Empty / absent batches
- Negative, null and non-finite amounts
- Null and duplicate timestamps
- Exhaustive collection (all violations, fixed order)
- Size cap
- InvalidBatch carries every violation
"""

from decimal import Decimal

import pytest

from src.core.domain import Transaction
from src.remanent.batch_validation import (
    InvalidBatch,
    collect_violations,
    ensure_valid_batch,
    validate_batch,
)


def make_txn(amount="100.00", timestamp="2023-10-12T20:15:30") -> Transaction:
    """Helper: transaction from wire-like values."""
    return Transaction(amount=amount, timestamp=timestamp)


# =============================================================================
# VALID BATCHES
# =============================================================================


class TestValidBatch:
    """Batches that pass"""

    def test_single(self):
        report = validate_batch([make_txn()])
        assert report.valid
        assert report.message == "All transactions are valid"
        assert report.errors == ()

    def test_zero_amount_is_valid(self):
        assert validate_batch([make_txn(amount="0")]).valid

    def test_nanosecond_apart_timestamps_are_distinct(self):
        batch = [
            make_txn(timestamp="2023-10-12T20:15:30"),
            make_txn(timestamp="2023-10-12T20:15:30.000000001"),
        ]
        assert validate_batch(batch).valid

    def test_ensure_valid_batch_returns_none(self):
        assert ensure_valid_batch([make_txn()]) is None


# =============================================================================
# INVALID BATCHES
# =============================================================================


class TestInvalidBatch:
    """Every violation kind"""

    @pytest.mark.parametrize("batch", [None, [], ()])
    def test_empty(self, batch):
        report = validate_batch(batch)
        assert not report.valid
        assert report.errors == ("No transactions provided",)

    def test_negative_amount(self):
        errors = collect_violations([make_txn(), make_txn(amount="-0.01", timestamp="2023-10-13T00:00:00")])
        assert errors == ["Transaction at index 1 has negative amount: -0.01"]

    def test_null_amount(self):
        errors = collect_violations([make_txn(amount=None)])
        assert errors == ["Transaction at index 0 has null amount"]

    def test_non_finite_amount(self):
        errors = collect_violations([make_txn(amount="Infinity")])
        assert errors == ["Transaction at index 0 has non-finite amount: Infinity"]

    def test_null_timestamp(self):
        errors = collect_violations([make_txn(timestamp=None)])
        assert errors == ["Transaction at index 0 has null timestamp"]

    def test_duplicate_timestamp(self):
        errors = collect_violations([make_txn(), make_txn(amount="5")])
        assert errors == ["Duplicate timestamp found: 2023-10-12T20:15:30"]

    def test_duplicate_reported_once_per_extra_occurrence(self):
        errors = collect_violations([make_txn(), make_txn(), make_txn()])
        assert len(errors) == 2

    def test_size_cap(self):
        batch = [make_txn(timestamp=f"2023-10-12T20:15:{s:02d}") for s in range(3)]
        errors = collect_violations(batch, max_transactions=2)
        assert errors == ["Batch of 3 transactions exceeds limit of 2"]
        assert collect_violations(batch, max_transactions=3) == []


class TestExhaustiveCollection:
    """All violations in one pass, amounts before timestamps"""

    def test_negative_and_duplicate_both_reported(self):
        batch = [
            make_txn(amount="250", timestamp="2023-10-12T20:15:30"),
            make_txn(amount="-10", timestamp="2023-10-13T08:00:00"),
            make_txn(amount="300", timestamp="2023-10-12T20:15:30"),
        ]
        report = validate_batch(batch)

        assert not report.valid
        assert report.message == "Validation failed with 2 error(s)"
        assert report.errors == (
            "Transaction at index 1 has negative amount: -10",
            "Duplicate timestamp found: 2023-10-12T20:15:30",
        )

    def test_order_amounts_then_timestamps(self):
        batch = [
            make_txn(amount="1", timestamp=None),
            make_txn(amount="-1", timestamp="2023-01-01T00:00:00"),
            make_txn(amount=None, timestamp="2023-01-01T00:00:00"),
        ]
        assert collect_violations(batch) == [
            "Transaction at index 1 has negative amount: -1",
            "Transaction at index 2 has null amount",
            "Transaction at index 0 has null timestamp",
            "Duplicate timestamp found: 2023-01-01T00:00:00",
        ]

    def test_invalid_batch_exception_carries_all(self):
        batch = [make_txn(amount="-1"), make_txn(amount="-2")]
        with pytest.raises(InvalidBatch) as exc_info:
            ensure_valid_batch(batch)

        assert exc_info.value.violations == (
            "Transaction at index 0 has negative amount: -1",
            "Transaction at index 1 has negative amount: -2",
            "Duplicate timestamp found: 2023-10-12T20:15:30",
        )
        assert "3 error(s)" in str(exc_info.value)

    def test_invalid_batch_is_value_error(self):
        assert issubclass(InvalidBatch, ValueError)

    def test_amount_decimal_kept_in_message(self):
        errors = collect_violations([make_txn(amount=Decimal("-375.00"))])
        assert errors == ["Transaction at index 0 has negative amount: -375.00"]


# =============================================================================
# PRECISION
# =============================================================================


class TestPrecision:
    """Amounts whose ceiling does not fit the exact decimal context"""

    def test_ceiling_that_fits(self):
        # 9999999.99 -> 10000000.00 takes exactly 10 digits
        assert collect_violations([make_txn(amount="9999999.99")], precision=10) == []

    def test_ceiling_that_does_not_fit(self):
        errors = collect_violations([make_txn(amount="99999999.99")], precision=10)
        assert errors == [
            "Transaction at index 0 has amount exceeding 10-digit precision: 99999999.99"
        ]

    def test_long_amount_at_default_precision(self):
        amount = "1" * 62
        report = validate_batch([make_txn(amount=amount)], precision=60)
        assert not report.valid
        assert report.errors == (
            f"Transaction at index 0 has amount exceeding 60-digit precision: {amount}",
        )

    def test_fine_scale_counts(self):
        errors = collect_violations([make_txn(amount="1E-70")], precision=60)
        assert len(errors) == 1

    def test_no_precision_no_check(self):
        assert collect_violations([make_txn(amount="1" * 62)]) == []

    def test_checked_with_configured_unit(self):
        # 995 -> 1000 with unit 1000 takes 4 digits
        assert collect_violations([make_txn(amount="995")], precision=4, ceiling_unit=Decimal(1000)) == []
