"""
Domain models and value objects.

Contains the entities of a remanent batch: Instant, Transaction, rules,
range queries, and the request / report envelopes.
"""

from src.core.domain.batch import BatchValidationReport, RemanentReport, RemanentRequest
from src.core.domain.instant import Instant, to_instant
from src.core.domain.rules import AdditiveRule, OverrideRule, RangeQuery, TimeInterval
from src.core.domain.transaction import Transaction, TransactionResult

__all__ = [
    # Time
    "Instant",
    "to_instant",
    # Transactions
    "Transaction",
    "TransactionResult",
    # Rules
    "TimeInterval",
    "OverrideRule",
    "AdditiveRule",
    "RangeQuery",
    # Envelopes
    "RemanentRequest",
    "RemanentReport",
    "BatchValidationReport",
]
