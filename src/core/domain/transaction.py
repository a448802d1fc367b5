"""
Transaction — Input transaction and per-transaction result

Immutable Pydantic models for one timestamped expense and for the result the
pipeline emits for it.

``Transaction`` is intentionally permissive about business constraints
(negative amounts, missing timestamps): those are batch-level violations that
must all be collected and reported together, see
``src.remanent.batch_validation``. Type-level problems (floats, malformed
strings) are still rejected at construction.
"""

from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import BaseModel, Field, field_validator

from src.core.domain.instant import Instant, to_instant
from src.core.math.decimal_safeguards import to_decimal


# =============================================================================
# COERCION HELPERS
# =============================================================================


def coerce_decimal(value: Any, name: str) -> Any:
    """Before-validator body: exact decimal or ValueError (floats refused)."""
    if value is None:
        return None
    try:
        return to_decimal(value, name)
    except TypeError as e:
        raise ValueError(str(e)) from None


def coerce_instant(value: Any) -> Any:
    """Before-validator body: Instant from str / datetime, or ValueError."""
    if value is None:
        return None
    try:
        return to_instant(value)
    except TypeError as e:
        raise ValueError(str(e)) from None


# =============================================================================
# TRANSACTION
# =============================================================================


class Transaction(BaseModel):
    """
    A single expense: amount and local timestamp.

    Amount is in currency units and is rounded up to the next multiple of 100
    by the pipeline. Timestamps must be unique within a batch.
    """

    amount: Optional[Annotated[Decimal, Field(allow_inf_nan=True)]] = Field(
        ..., description="Amount in currency units (>= 0 when valid)"
    )
    timestamp: Optional[Instant] = Field(..., description="Local date-time, unique in batch")

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Any:
        return coerce_decimal(v, "amount")

    @field_validator("timestamp", mode="before")
    @classmethod
    def coerce_timestamp(cls, v: Any) -> Any:
        return coerce_instant(v)


# =============================================================================
# TRANSACTION RESULT
# =============================================================================


class TransactionResult(BaseModel):
    """
    Transaction after rounding and rule application.

    ``remanent`` starts as ``ceiling - amount``; an override rule replaces it
    and additive rules add to it. It is not clamped: an override may make it
    zero or negative.
    """

    amount: Decimal = Field(..., description="Original amount")
    ceiling: Decimal = Field(..., description="Amount rounded up to the next multiple of 100")
    remanent: Decimal = Field(..., description="Final remanent after rules")
    timestamp: Instant = Field(..., description="Local date-time")

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @field_validator("amount", "ceiling", "remanent", mode="before")
    @classmethod
    def coerce_money(cls, v: Any) -> Any:
        return coerce_decimal(v, "money")

    @field_validator("timestamp", mode="before")
    @classmethod
    def coerce_timestamp(cls, v: Any) -> Any:
        return coerce_instant(v)
