"""Remanent Engine — one call = validate, compute, aggregate

Facade over the pipeline and the range aggregator. Every call is a pure
function of its inputs: the engine keeps only its immutable config, so one
instance may serve concurrent callers.

All arithmetic runs in an exact decimal context (``Inexact`` trapped): an
operation that would need rounding raises instead of drifting.
"""

from collections.abc import Sequence
from time import perf_counter
from typing import Any, Optional

from loguru import logger

from src.core.contracts.codec import decode_request, encode_report, encode_validation_report
from src.core.domain.batch import BatchValidationReport, RemanentReport
from src.core.domain.rules import AdditiveRule, OverrideRule, RangeQuery
from src.core.domain.transaction import Transaction
from src.core.math.decimal_safeguards import exact_context
from src.remanent.batch_validation import InvalidBatch, validate_batch
from src.remanent.config import EngineConfig
from src.remanent.pipeline import RemanentPipeline
from src.remanent.range_aggregator import build_index, query_sums


class RemanentEngine:
    """Remanent calculation engine.

    Usage:
        engine = RemanentEngine()
        report = engine.evaluate(transactions, override_rules, additive_rules, range_queries)
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or EngineConfig()
        self.pipeline = RemanentPipeline(self.config)

    def evaluate(
        self,
        transactions: Optional[Sequence[Transaction]],
        override_rules: Optional[Sequence[OverrideRule]] = None,
        additive_rules: Optional[Sequence[AdditiveRule]] = None,
        range_queries: Optional[Sequence[RangeQuery]] = None,
    ) -> RemanentReport:
        """
        Full computation for one batch.

        Args:
            transactions: batch of expenses
            override_rules: Q rules (first match wins)
            additive_rules: P rules (all matches add)
            range_queries: K periods to sum over

        Returns:
            RemanentReport with sorted results, per-query sums (query order),
            total remanent and processed count

        Raises:
            InvalidBatch: the batch is invalid; nothing is computed
        """
        started = perf_counter()

        with exact_context(self.config.decimal_precision):
            try:
                results = self.pipeline.process(transactions, override_rules, additive_rules)
            except InvalidBatch as e:
                logger.warning("Rejected batch: {} violation(s)", len(e.violations))
                raise

            index = build_index(results)
            range_sums = query_sums(index, range_queries or ())

        report = RemanentReport(
            results=tuple(results),
            range_sums=range_sums,
            total=index.total,
            count=len(results),
        )

        logger.info(
            "Processed {} transactions, {} range queries, total remanent {} in {:.4f}s",
            report.count,
            len(range_sums),
            report.total,
            perf_counter() - started,
        )
        return report

    def validate(self, transactions: Optional[Sequence[Transaction]]) -> BatchValidationReport:
        """Validation only; reports every violation without raising."""
        report = validate_batch(
            transactions,
            self.config.max_transactions,
            self.config.decimal_precision,
            self.config.ceiling_unit,
        )
        if not report.valid:
            logger.debug("Validation failed: {}", report.message)
        return report

    # -------------------------------------------------------------------------
    # Wire-level entry points
    # -------------------------------------------------------------------------

    def evaluate_payload(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Decode a JSON request, evaluate it, encode the report.

        Raises:
            ContractViolation: the payload does not match the request schema
            InvalidBatch: the decoded batch is invalid
        """
        request = decode_request(payload)
        report = self.evaluate(
            request.transactions,
            request.override_rules,
            request.additive_rules,
            request.range_queries,
        )
        return encode_report(report)

    def validate_payload(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Decode a JSON request and return the encoded validation report."""
        request = decode_request(payload)
        return encode_validation_report(self.validate(request.transactions))
