"""
Pattern analyzer: aggregate statistics over a normalized transaction sample.

velocity: mean gap (hours) between consecutive transactions sorted by
timestamp; 0 with fewer than two. round_number_ratio: share of transactions
whose value is a non-zero whole number. total_volume / avg_transaction_value:
float sums of native-unit values (not integer-safe for very large totals).
unique_recipients / unique_senders: distinct raw to/from strings, compared
case-sensitively as received.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from backend_chainrisk.chains.models import PatternStatistics, Transaction, format_amount
from backend_chainrisk.chainrisk_logging import get_logger

logger = get_logger(__name__)

SECONDS_PER_HOUR = 3600


def parse_value(value: str | None) -> float:
    """Parse a decimal string; unparseable input becomes NaN so no threshold comparison fires."""
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return math.nan


def format_number(value: float) -> str:
    """Plain decimal rendering (no exponent, no trailing '.0'), same as transaction values."""
    if not math.isfinite(value):
        return repr(value)
    return format_amount(value)


def compute_velocity(timestamps: Sequence[int]) -> float:
    """Mean inter-transaction gap in hours; input order does not matter."""
    if len(timestamps) < 2:
        return 0.0
    ordered = sorted(timestamps)
    total_gap = sum(later - earlier for earlier, later in zip(ordered, ordered[1:]))
    return total_gap / (len(ordered) - 1) / SECONDS_PER_HOUR


def analyze_transactions(transactions: Sequence[Transaction]) -> PatternStatistics:
    """Compute PatternStatistics for a transaction sample. Empty sample -> all zeros."""
    if not transactions:
        return PatternStatistics()

    count = len(transactions)
    values = [parse_value(tx.value) for tx in transactions]

    round_numbers = sum(1 for v in values if v > 0 and v.is_integer())
    total_volume = sum(v for v in values if not math.isnan(v))

    stats = PatternStatistics(
        velocity=compute_velocity([tx.timestamp for tx in transactions]),
        unique_recipients=len({tx.to_address for tx in transactions}),
        unique_senders=len({tx.from_address for tx in transactions}),
        round_number_ratio=round_numbers / count,
        avg_transaction_value=format_number(total_volume / count),
        total_volume=format_number(total_volume),
    )
    logger.debug(
        "patterns_computed",
        transactions=count,
        velocity=stats.velocity,
        unique_recipients=stats.unique_recipients,
        round_number_ratio=stats.round_number_ratio,
    )
    return stats
