"""Rule Matcher — which override / additive rules apply to a timestamp

Two resolution modes with identical results:

1. Point queries (``match_override`` / ``match_additive``): scan the rule
   lists in input order. O(m) per timestamp; used for inspection and for a
   single transaction.
2. Sweep (``sweep``): resolve a whole ascending timestamp sequence in
   O((n + m) log m) with a sweep line. Rules enter a heap when the sweep
   reaches their ``start`` and leave it once the sweep passes their ``end``.

Resolution rules:
- Intervals are closed: start <= ts <= end
- Override: the first rule in input order wins (lowest list index among the
  rules containing ts); never lowest value, never tightest range
- Additive: every containing rule contributes; overlaps accumulate
- Inverted intervals (start > end) match nothing
- Absent / empty rule lists match nothing
- The additive total carries the finest scale of the deltas it sums
  (plus the units place), whichever resolution mode produced it
"""

import heapq
from collections import Counter
from collections.abc import Iterable, Iterator, Sequence
from decimal import Decimal
from typing import NamedTuple, Optional

from src.core.domain.instant import Instant
from src.core.domain.rules import AdditiveRule, OverrideRule
from src.core.math.decimal_safeguards import ZERO, exponent_of, with_exponent


# =============================================================================
# RESULT
# =============================================================================


class RuleMatch(NamedTuple):
    """Rules resolved for one timestamp."""

    override: Optional[Decimal]  # value of the winning override rule, if any
    additive_total: Decimal  # sum of the deltas of all matching additive rules
    additive_count: int  # number of matching additive rules


# =============================================================================
# MATCHER
# =============================================================================


class RuleMatcher:
    """Override / additive rule resolution for one batch.

    Holds the rule lists as immutable tuples; safe to reuse across calls.
    """

    def __init__(
        self,
        override_rules: Optional[Iterable[OverrideRule]] = None,
        additive_rules: Optional[Iterable[AdditiveRule]] = None,
    ):
        """
        Args:
            override_rules: Q rules in priority order (``None`` = no rules)
            additive_rules: P rules (``None`` = no rules)
        """
        self.override_rules: tuple[OverrideRule, ...] = tuple(override_rules or ())
        self.additive_rules: tuple[AdditiveRule, ...] = tuple(additive_rules or ())

    # -------------------------------------------------------------------------
    # Point queries
    # -------------------------------------------------------------------------

    def match_override(self, timestamp: Instant) -> Optional[Decimal]:
        """
        Value of the first override rule containing ``timestamp``.

        Returns:
            The override value, or ``None`` when no rule matches
        """
        for rule in self.override_rules:
            if rule.contains(timestamp):
                return rule.value
        return None

    def match_additive(self, timestamp: Instant) -> list[Decimal]:
        """
        Deltas of every additive rule containing ``timestamp``, in input order.
        """
        return [rule.delta for rule in self.additive_rules if rule.contains(timestamp)]

    def resolve(self, timestamp: Instant) -> RuleMatch:
        """Point-query equivalent of one ``sweep`` step."""
        deltas = self.match_additive(timestamp)
        total = ZERO
        for delta in deltas:
            total += delta
        return RuleMatch(self.match_override(timestamp), total, len(deltas))

    # -------------------------------------------------------------------------
    # Sweep
    # -------------------------------------------------------------------------

    def sweep(self, timestamps: Sequence[Instant]) -> Iterator[RuleMatch]:
        """
        Resolve rules for an ascending sequence of timestamps.

        Args:
            timestamps: Non-decreasing timestamps

        Yields:
            One ``RuleMatch`` per timestamp, in order

        Raises:
            ValueError: if ``timestamps`` is not sorted
        """
        # Rules sorted by start; ties keep input order (stable sort)
        overrides = sorted(
            ((rule.start, index, rule) for index, rule in enumerate(self.override_rules)
             if not rule.is_empty()),
            key=lambda entry: (entry[0], entry[1]),
        )
        additives = sorted(
            ((rule.start, index, rule) for index, rule in enumerate(self.additive_rules)
             if not rule.is_empty()),
            key=lambda entry: (entry[0], entry[1]),
        )

        # (input index, end): heap top is the highest-priority live override
        override_heap: list[tuple[int, Instant]] = []
        # (end, input index, delta): heap top is the next additive rule to expire
        additive_heap: list[tuple[Instant, int, Decimal]] = []

        next_override = 0
        next_additive = 0
        additive_total = ZERO
        additive_count = 0
        # exponent -> number of live additive deltas with it
        live_exponents: Counter[int] = Counter()
        previous: Optional[Instant] = None

        for ts in timestamps:
            if previous is not None and ts < previous:
                raise ValueError(f"timestamps must be ascending: {ts} after {previous}")
            previous = ts

            # Admit rules that have started
            while next_override < len(overrides) and overrides[next_override][0] <= ts:
                _, index, rule = overrides[next_override]
                heapq.heappush(override_heap, (index, rule.end))
                next_override += 1

            while next_additive < len(additives) and additives[next_additive][0] <= ts:
                _, index, rule = additives[next_additive]
                heapq.heappush(additive_heap, (rule.end, index, rule.delta))
                additive_total += rule.delta
                additive_count += 1
                live_exponents[exponent_of(rule.delta)] += 1
                next_additive += 1

            # Retire rules that ended before ts; later timestamps are never earlier
            while override_heap and override_heap[0][1] < ts:
                heapq.heappop(override_heap)

            while additive_heap and additive_heap[0][0] < ts:
                _, _, delta = heapq.heappop(additive_heap)
                additive_total -= delta
                additive_count -= 1
                exponent = exponent_of(delta)
                live_exponents[exponent] -= 1
                if not live_exponents[exponent]:
                    del live_exponents[exponent]

            override: Optional[Decimal] = None
            if override_heap:
                override = self.override_rules[override_heap[0][0]].value

            # Expired deltas leave their scale in the running total
            total = ZERO
            if additive_count:
                total = with_exponent(additive_total, min(min(live_exponents), 0))

            yield RuleMatch(override, total, additive_count)
