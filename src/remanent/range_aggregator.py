"""Range Aggregator — prefix sums + binary search over remanents

Build once per batch, O(n):

    prefix_sums[i] = remanent[0] + ... + remanent[i]

Each closed-interval query, O(log n):

    lower = first index with timestamp >= start     (bisect_left)
    upper = last index with timestamp <= end        (bisect_right - 1)
    sum   = prefix_sums[upper] - prefix_sums[lower - 1]   (index -1 -> 0)

An empty intersection (no lower bound, or upper < lower) is exactly zero,
never an error.

A difference of prefix sums keeps the finest scale of every remanent before
the range. Each sum is brought back to the finest scale of the remanents
inside it, looked up in a sparse table of exponents (O(n log n) build,
O(1) per query).
"""

from bisect import bisect_left, bisect_right
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from src.core.domain.rules import RangeQuery
from src.core.domain.transaction import TransactionResult
from src.core.math.decimal_safeguards import ZERO, exponent_of, with_exponent


# =============================================================================
# INDEX
# =============================================================================


@dataclass(frozen=True)
class PrefixSumIndex:
    """Sorted timestamps (as ticks), running remanent sums and the
    range-minimum table over remanent exponents."""

    ticks: tuple[int, ...]
    prefix_sums: tuple[Decimal, ...]
    # exponent_table[k][i] = min exponent of remanents i .. i + 2**k - 1
    exponent_table: tuple[tuple[int, ...], ...]

    def __len__(self) -> int:
        return len(self.ticks)

    @property
    def total(self) -> Decimal:
        """Sum of all remanents; zero for an empty index."""
        return self.prefix_sums[-1] if self.prefix_sums else ZERO


def build_index(results: Sequence[TransactionResult]) -> PrefixSumIndex:
    """
    Prefix-sum index over timestamp-sorted results.

    Raises:
        ValueError: if results are not strictly ascending by timestamp
    """
    ticks: list[int] = []
    prefix_sums: list[Decimal] = []
    exponents: list[int] = []
    running = ZERO

    for result in results:
        tick = result.timestamp.ticks
        if ticks and tick <= ticks[-1]:
            raise ValueError(
                f"results must be strictly ascending by timestamp, got {result.timestamp} "
                f"after index {len(ticks) - 1}"
            )
        running += result.remanent
        ticks.append(tick)
        prefix_sums.append(running)
        exponents.append(exponent_of(result.remanent))

    return PrefixSumIndex(
        ticks=tuple(ticks),
        prefix_sums=tuple(prefix_sums),
        exponent_table=_min_table(exponents),
    )


def _min_table(values: list[int]) -> tuple[tuple[int, ...], ...]:
    levels = [tuple(values)]
    width = 1
    while 2 * width <= len(values):
        previous = levels[-1]
        levels.append(
            tuple(min(previous[i], previous[i + width]) for i in range(len(previous) - width))
        )
        width *= 2
    return tuple(levels)


def _range_min(table: tuple[tuple[int, ...], ...], lower: int, upper: int) -> int:
    # inclusive bounds; two overlapping power-of-two windows cover the range
    level = (upper - lower + 1).bit_length() - 1
    row = table[level]
    return min(row[lower], row[upper - (1 << level) + 1])


# =============================================================================
# QUERIES
# =============================================================================


def query_sum(index: PrefixSumIndex, query: RangeQuery) -> Decimal:
    """
    Sum of remanents with ``query.start <= timestamp <= query.end``.

    Returns:
        The sum, scaled like a direct sum of the remanents in range, or
        exactly ``Decimal(0)`` for an empty intersection
    """
    lower = bisect_left(index.ticks, query.start.ticks)
    if lower == len(index.ticks):
        return ZERO

    upper = bisect_right(index.ticks, query.end.ticks) - 1
    if upper < lower:
        return ZERO

    total = index.prefix_sums[upper]
    if lower > 0:
        total -= index.prefix_sums[lower - 1]

    return with_exponent(total, min(_range_min(index.exponent_table, lower, upper), 0))


def query_sums(index: PrefixSumIndex, queries: Iterable[RangeQuery]) -> dict[RangeQuery, Decimal]:
    """All queries against one shared index; keeps query order."""
    return {query: query_sum(index, query) for query in queries}
