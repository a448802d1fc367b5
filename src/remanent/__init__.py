"""Remanent engine — rounding, rule application and range aggregation.

Order of operations per transaction:
- round up to the next multiple of 100 (base remanent = ceiling - amount)
- override rule (first match wins) replaces the remanent
- additive rules (all matches) add to it

Range queries are answered from one shared prefix-sum index.
"""

from .batch_validation import InvalidBatch, collect_violations, ensure_valid_batch, validate_batch
from .config import EngineConfig
from .engine import RemanentEngine
from .pipeline import RemanentPipeline
from .range_aggregator import PrefixSumIndex, build_index, query_sum, query_sums
from .rule_matcher import RuleMatch, RuleMatcher

__all__ = [
    "EngineConfig",
    "InvalidBatch",
    "collect_violations",
    "ensure_valid_batch",
    "validate_batch",
    "RuleMatch",
    "RuleMatcher",
    "RemanentPipeline",
    "PrefixSumIndex",
    "build_index",
    "query_sum",
    "query_sums",
    "RemanentEngine",
]
