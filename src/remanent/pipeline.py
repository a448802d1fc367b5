"""Remanent Pipeline — round → override → additive, in timestamp order

Per transaction, strictly in this order:

1. (batch) validate everything; any violation aborts the call
2. (batch) stable sort by timestamp
3. ceiling and base remanent (``round_to_ceiling``)
4. override rule match → remanent := override value (base discarded)
5. additive rule matches → remanent := remanent + Σ deltas
6. emit ``TransactionResult``

Step 4/5 is a fold over immutable values:

    remanent = fold(additive deltas, start=override value or base remanent, +)

Additive rules never see the pre-override value. Results are never clamped.
"""

from collections.abc import Sequence
from operator import attrgetter
from typing import Optional

from loguru import logger

from src.core.domain.rules import AdditiveRule, OverrideRule
from src.core.domain.transaction import Transaction, TransactionResult
from src.core.math.ceiling import round_to_ceiling
from src.core.math.decimal_safeguards import exact_context
from src.remanent.batch_validation import ensure_valid_batch
from src.remanent.config import EngineConfig
from src.remanent.rule_matcher import RuleMatch, RuleMatcher


class RemanentPipeline:
    """Turns a validated batch into timestamp-ordered ``TransactionResult``s."""

    def __init__(self, config: EngineConfig | None = None):
        """
        Args:
            config: engine configuration (optional, defaults used otherwise)
        """
        self.config = config or EngineConfig()

    def process(
        self,
        transactions: Optional[Sequence[Transaction]],
        override_rules: Optional[Sequence[OverrideRule]] = None,
        additive_rules: Optional[Sequence[AdditiveRule]] = None,
    ) -> list[TransactionResult]:
        """
        Compute the final remanent of every transaction.

        Args:
            transactions: batch to process
            override_rules: Q rules, first match wins (``None`` = none)
            additive_rules: P rules, all matches add up (``None`` = none)

        Returns:
            Results sorted ascending by timestamp

        Raises:
            InvalidBatch: with every violation; no results are produced
            decimal.Inexact: a rule value or delta cannot be added exactly
                within the configured precision
        """
        ensure_valid_batch(
            transactions,
            self.config.max_transactions,
            self.config.decimal_precision,
            self.config.ceiling_unit,
        )

        ordered = sorted(transactions, key=attrgetter("timestamp"))
        matcher = RuleMatcher(override_rules, additive_rules)

        logger.debug(
            "Processing {} transactions ({} override, {} additive rules)",
            len(ordered),
            len(matcher.override_rules),
            len(matcher.additive_rules),
        )

        with exact_context(self.config.decimal_precision):
            matches = matcher.sweep([txn.timestamp for txn in ordered])
            return [self._apply(txn, match) for txn, match in zip(ordered, matches)]

    def _apply(self, txn: Transaction, match: RuleMatch) -> TransactionResult:
        """Steps 3–6 for one transaction."""
        ceiling, base_remanent = round_to_ceiling(txn.amount, self.config.ceiling_unit)

        remanent = base_remanent if match.override is None else match.override

        if match.additive_count:
            remanent = remanent + match.additive_total

        return TransactionResult(
            amount=txn.amount,
            ceiling=ceiling,
            remanent=remanent,
            timestamp=txn.timestamp,
        )
