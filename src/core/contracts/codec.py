"""
Wire Codec — JSON payloads <-> domain models

Decoding:
    payload --(remanent_request schema)--> RemanentRequest

Encoding:
    RemanentReport        -> remanent_report payload
    BatchValidationReport -> validation_report payload

Monetary values travel as plain decimal strings ("375.00"), timestamps as
ISO-8601 local date-times. Business validation (negative amounts, duplicate
timestamps, ...) is not done here: the request contract deliberately lets
such values through so the engine can report them all together.
"""

from typing import Any, Dict

from src.core.contracts.validators import ContractViolation, validate_remanent_request
from src.core.domain.batch import BatchValidationReport, RemanentReport, RemanentRequest
from src.core.domain.rules import AdditiveRule, OverrideRule, RangeQuery
from src.core.domain.transaction import Transaction, TransactionResult
from src.core.math.decimal_safeguards import format_decimal


# =============================================================================
# DECODING
# =============================================================================


def decode_request(payload: Dict[str, Any]) -> RemanentRequest:
    """
    Validate and decode a request payload.

    Args:
        payload: Parsed JSON object

    Returns:
        RemanentRequest; ``transactions`` is ``None`` when "expenses" is
        absent or null

    Raises:
        ContractViolation: schema mismatch or impossible calendar date
    """
    validate_remanent_request(payload)

    try:
        expenses = payload.get("expenses")
        transactions = None
        if expenses is not None:
            transactions = tuple(
                Transaction(amount=item["amount"], timestamp=item["timestamp"])
                for item in expenses
            )

        return RemanentRequest(
            transactions=transactions,
            override_rules=tuple(
                OverrideRule(value=item["fixed"], start=item["start"], end=item["end"])
                for item in payload.get("qRules") or ()
            ),
            additive_rules=tuple(
                AdditiveRule(delta=item["extra"], start=item["start"], end=item["end"])
                for item in payload.get("pRules") or ()
            ),
            range_queries=tuple(
                RangeQuery(start=item["start"], end=item["end"])
                for item in payload.get("kPeriods") or ()
            ),
        )
    except ValueError as e:
        # Pattern-valid but impossible values, e.g. "2023-02-30T00:00:00"
        raise ContractViolation("remanent_request", [str(e)]) from e


# =============================================================================
# ENCODING
# =============================================================================


def encode_result(result: TransactionResult) -> Dict[str, str]:
    return {
        "amount": format_decimal(result.amount),
        "ceiling": format_decimal(result.ceiling),
        "remanent": format_decimal(result.remanent),
        "timestamp": result.timestamp.isoformat(),
    }


def encode_report(report: RemanentReport) -> Dict[str, Any]:
    """
    Encode a processing report.

    k period sums are emitted as a list in query order.
    """
    return {
        "processedExpenses": [encode_result(r) for r in report.results],
        "kPeriodResults": [
            {
                "start": query.start.isoformat(),
                "end": query.end.isoformat(),
                "total": format_decimal(total),
            }
            for query, total in report.range_sums.items()
        ],
        "totalRemanent": format_decimal(report.total),
        "expenseCount": report.count,
    }


def encode_validation_report(report: BatchValidationReport) -> Dict[str, Any]:
    """Encode a validation report; ``errors`` is null when valid."""
    return {
        "valid": report.valid,
        "message": report.message,
        "errors": list(report.errors) if report.errors else None,
    }
