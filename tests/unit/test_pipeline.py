"""
Tests for RemanentPipeline

Checks:
1. Results are sorted by timestamp regardless of input order
2. Override then additive: 375.00 + override 10.00 + additive 5.00 -> 400.00 / 15.00
3. Override replaces the base remanent; additive rules apply afterwards
4. No clamping (negative / zero remanents survive)
5. Invalid batches abort with every violation and no results
6. Configurable ceiling unit and size cap
7. Exact arithmetic and stable decimal places without the engine facade
"""

from decimal import Decimal, Inexact

import pytest

from src.core.domain import AdditiveRule, Instant, OverrideRule, Transaction
from src.remanent.batch_validation import InvalidBatch
from src.remanent.config import EngineConfig
from src.remanent.pipeline import RemanentPipeline


T = "2023-10-12T20:15:30"


def make_txn(amount: str, timestamp: str = T) -> Transaction:
    return Transaction(amount=amount, timestamp=timestamp)


@pytest.fixture
def pipeline() -> RemanentPipeline:
    return RemanentPipeline()


# =============================================================================
# ORDERING
# =============================================================================


class TestOrdering:
    """Output order"""

    def test_sorted_by_timestamp(self, pipeline):
        batch = [
            make_txn("250", "2023-10-12T20:15:30"),
            make_txn("375", "2023-02-28T15:49:20"),
            make_txn("620", "2023-07-01T21:59:00"),
        ]
        results = pipeline.process(batch)
        assert [r.amount for r in results] == [Decimal("375"), Decimal("620"), Decimal("250")]
        assert [r.timestamp for r in results] == sorted(t.timestamp for t in batch)

    def test_one_result_per_transaction(self, pipeline):
        batch = [make_txn(str(n), f"2023-01-01T00:00:{n:02d}") for n in range(10)]
        assert len(pipeline.process(batch)) == 10


# =============================================================================
# RULE APPLICATION
# =============================================================================


class TestRuleApplication:
    """round -> override -> additive"""

    def test_override_then_additive_375(self, pipeline):
        (result,) = pipeline.process(
            [make_txn("375.00")],
            override_rules=[OverrideRule(value="10.00", start="2023-10-01T00:00:00", end="2023-10-31T23:59:59")],
            additive_rules=[AdditiveRule(delta="5.00", start="2023-10-12T00:00:00", end="2023-10-12T23:59:59")],
        )
        assert result.amount == Decimal("375.00")
        assert result.ceiling == Decimal("400.00")
        assert result.remanent == Decimal("15.00")
        assert str(result.remanent) == "15.00"
        assert result.timestamp == Instant.parse(T)

    def test_no_rules(self, pipeline):
        (result,) = pipeline.process([make_txn("375.00")], None, None)
        assert result.remanent == Decimal("25.00")

    def test_override_discards_base(self, pipeline):
        (result,) = pipeline.process(
            [make_txn("620")],
            override_rules=[OverrideRule(value="0", start="2023-10-01T00:00:00", end="2023-10-31T23:59:59")],
        )
        assert result.ceiling == Decimal("700")
        assert result.remanent == Decimal("0")

    def test_additive_without_override_adds_to_base(self, pipeline):
        (result,) = pipeline.process(
            [make_txn("480")],
            additive_rules=[
                AdditiveRule(delta="25", start="2023-10-01T00:00:00", end="2023-12-31T23:59:59"),
                AdditiveRule(delta="5", start="2023-10-12T00:00:00", end="2023-10-12T23:59:59"),
            ],
        )
        assert result.remanent == Decimal("50")

    def test_rules_outside_leave_base(self, pipeline):
        (result,) = pipeline.process(
            [make_txn("375.00")],
            override_rules=[OverrideRule(value="10", start="2023-11-01T00:00:00", end="2023-11-30T23:59:59")],
            additive_rules=[AdditiveRule(delta="5", start="2023-09-01T00:00:00", end="2023-09-30T23:59:59")],
        )
        assert result.remanent == Decimal("25.00")

    def test_negative_remanent_not_clamped(self, pipeline):
        (result,) = pipeline.process(
            [make_txn("375.00")],
            override_rules=[OverrideRule(value="0", start=T, end=T)],
            additive_rules=[AdditiveRule(delta="-30", start=T, end=T)],
        )
        assert result.remanent == Decimal("-30")

    def test_results_do_not_depend_on_input_order(self, pipeline):
        batch = [
            make_txn("250", "2023-10-12T20:15:30"),
            make_txn("375", "2023-02-28T15:49:20"),
            make_txn("620", "2023-07-01T21:59:00"),
            make_txn("480", "2023-12-17T08:09:45"),
        ]
        rules = dict(
            override_rules=[OverrideRule(value="0", start="2023-07-01T00:00:00", end="2023-07-31T23:59:59")],
            additive_rules=[AdditiveRule(delta="25", start="2023-10-01T08:00:00", end="2023-12-31T19:59:59")],
        )
        forward = pipeline.process(batch, **rules)
        backward = pipeline.process(list(reversed(batch)), **rules)
        assert forward == backward
        assert [r.remanent for r in forward] == [
            Decimal("25"),
            Decimal("0"),
            Decimal("75"),
            Decimal("45"),
        ]


# =============================================================================
# ATOMICITY
# =============================================================================


class TestAtomicity:
    """Invalid batch -> InvalidBatch, nothing computed"""

    def test_negative_and_duplicate(self, pipeline):
        batch = [
            make_txn("100", "2023-01-01T00:00:00"),
            make_txn("-5", "2023-01-02T00:00:00"),
            make_txn("200", "2023-01-01T00:00:00"),
        ]
        with pytest.raises(InvalidBatch) as exc_info:
            pipeline.process(batch)
        assert len(exc_info.value.violations) == 2

    @pytest.mark.parametrize("batch", [None, []])
    def test_empty(self, pipeline, batch):
        with pytest.raises(InvalidBatch, match="No transactions provided"):
            pipeline.process(batch)


# =============================================================================
# CONFIGURATION
# =============================================================================


class TestConfiguration:
    """EngineConfig effects"""

    def test_custom_ceiling_unit(self):
        pipeline = RemanentPipeline(EngineConfig(ceiling_unit=Decimal(10)))
        (result,) = pipeline.process([make_txn("375.00")])
        assert result.ceiling == Decimal("380.00")
        assert result.remanent == Decimal("5.00")

    def test_size_cap(self):
        pipeline = RemanentPipeline(EngineConfig(max_transactions=1))
        batch = [make_txn("1", "2023-01-01T00:00:00"), make_txn("2", "2023-01-01T00:00:01")]
        with pytest.raises(InvalidBatch, match="exceeds limit of 1"):
            pipeline.process(batch)


# =============================================================================
# EXACTNESS
# =============================================================================


class TestExactness:
    """Exact decimal context and decimal places of the remanent"""

    def test_wide_delta_kept_exact(self, pipeline):
        (result,) = pipeline.process(
            [make_txn("0.01")],
            additive_rules=[AdditiveRule(delta="1E+30", start=T, end=T)],
        )
        assert result.remanent == Decimal("1000000000000000000000000000099.99")

    def test_delta_beyond_precision_raises(self):
        pipeline = RemanentPipeline(EngineConfig(decimal_precision=10))
        with pytest.raises(Inexact):
            pipeline.process(
                [make_txn("0.01")],
                additive_rules=[AdditiveRule(delta="1E+30", start=T, end=T)],
            )

    def test_expired_delta_does_not_change_places(self, pipeline):
        results = pipeline.process(
            [make_txn("100", "2023-01-15T00:00:00"), make_txn("375.00")],
            additive_rules=[
                AdditiveRule(delta="0.001", start="2023-01-01T00:00:00", end="2023-01-31T23:59:59"),
                AdditiveRule(delta="5.00", start="2023-10-01T00:00:00", end="2023-10-31T23:59:59"),
            ],
        )
        assert [str(r.remanent) for r in results] == ["0.001", "30.00"]

    def test_amount_beyond_precision_rejected(self):
        pipeline = RemanentPipeline(EngineConfig(decimal_precision=10))
        with pytest.raises(InvalidBatch, match="exceeding 10-digit precision"):
            pipeline.process([make_txn("99999999.99")])
