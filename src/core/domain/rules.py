"""
Rules — Time-scoped remanent rules and range queries

Immutable Pydantic models:
- OverrideRule ("q"): replaces the remanent with a fixed value
- AdditiveRule ("p"): adds a delta to the current remanent
- RangeQuery ("k"): asks for the remanent sum over a time range

All intervals are closed: ``start <= timestamp <= end``. An interval with
``start > end`` is accepted and simply contains nothing.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.core.domain.instant import Instant
from src.core.domain.transaction import coerce_decimal, coerce_instant


# =============================================================================
# BASE
# =============================================================================


class TimeInterval(BaseModel):
    """Closed local time interval [start, end]."""

    start: Instant = Field(..., description="Interval start (inclusive)")
    end: Instant = Field(..., description="Interval end (inclusive)")

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @field_validator("start", "end", mode="before")
    @classmethod
    def coerce_bounds(cls, v: Any) -> Any:
        return coerce_instant(v)

    def contains(self, timestamp: Instant) -> bool:
        """Inclusive on both ends."""
        return self.start <= timestamp <= self.end

    def is_empty(self) -> bool:
        """True for an inverted interval (start > end)."""
        return self.start > self.end


# =============================================================================
# RULES
# =============================================================================


class OverrideRule(TimeInterval):
    """
    Q rule: transactions inside [start, end] get ``value`` as remanent.

    When several override rules contain the same timestamp, the first one in
    the supplied list wins.
    """

    value: Decimal = Field(..., description="Fixed remanent")

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, v: Any) -> Any:
        return coerce_decimal(v, "value")


class AdditiveRule(TimeInterval):
    """
    P rule: transactions inside [start, end] get ``delta`` added.

    Every containing rule contributes; overlaps accumulate.
    """

    delta: Decimal = Field(..., description="Amount added to the remanent")

    @field_validator("delta", mode="before")
    @classmethod
    def coerce_delta(cls, v: Any) -> Any:
        return coerce_decimal(v, "delta")


class RangeQuery(TimeInterval):
    """K period: sum of remanents of transactions inside [start, end]."""
