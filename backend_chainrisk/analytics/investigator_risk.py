"""
Investigator risk: how suspicious an address looks from a forensic /
compliance viewpoint. Higher is more suspicious.

Base 10, then ordered tiered rules (balance, tx count, velocity, unique
recipients, round-number ratio, high-value count). Each triggered rule adds
its weight and appends one factor. Clamp 0-100.
Levels: >=75 critical, >=50 high, >=30 medium, else low.
"""

from __future__ import annotations

from collections.abc import Sequence

from backend_chainrisk.analytics.models import RiskAssessment
from backend_chainrisk.analytics.patterns import parse_value
from backend_chainrisk.chains.models import PatternStatistics, Transaction
from backend_chainrisk.chainrisk_logging import get_logger

logger = get_logger(__name__)

BASE_SCORE = 10
SCORE_MIN = 0
SCORE_MAX = 100

HIGH_VALUE_THRESHOLD = 100

LEVEL_CRITICAL = "critical"
LEVEL_HIGH = "high"
LEVEL_MEDIUM = "medium"
LEVEL_LOW = "low"


def investigator_level(score: int) -> str:
    if score >= 75:
        return LEVEL_CRITICAL
    if score >= 50:
        return LEVEL_HIGH
    if score >= 30:
        return LEVEL_MEDIUM
    return LEVEL_LOW


def calculate_investigator_risk(
    balance: str,
    transactions: Sequence[Transaction],
    patterns: PatternStatistics,
) -> RiskAssessment:
    """Score suspiciousness from balance, the transaction sample and its statistics."""
    score = BASE_SCORE
    factors: list[str] = []

    balance_num = parse_value(balance)
    tx_count = len(transactions)

    # Large balance (potential layering)
    if balance_num > 1000:
        score += 30
        factors.append("Very large balance (>1000)")
    elif balance_num > 100:
        score += 20
        factors.append("Large balance (>100)")
    elif balance_num > 10:
        score += 10
        factors.append("Significant balance (>10)")

    if tx_count >= 100:
        score += 25
        factors.append("Very high transaction count (100+)")
    elif tx_count >= 50:
        score += 15
        factors.append("High transaction count (50+)")
    elif tx_count >= 10:
        score += 5
        factors.append("Active address (10+ transactions)")

    # Low velocity = quick turnaround. The <24h branch also covers velocity 0.
    if 0 < patterns.velocity < 1:
        score += 20
        factors.append("Rapid fund movement (<1 hour avg)")
    elif patterns.velocity < 24:
        score += 10
        factors.append("Quick fund movement (<24 hours avg)")

    if patterns.unique_recipients > 50:
        score += 20
        factors.append("Many unique recipients (50+)")
    elif patterns.unique_recipients > 20:
        score += 10
        factors.append("Multiple recipients (20+)")

    # Round amounts (potential structuring)
    if patterns.round_number_ratio > 0.5:
        score += 15
        factors.append("High round number ratio (>50%)")
    elif patterns.round_number_ratio > 0.3:
        score += 8
        factors.append("Moderate round numbers (>30%)")

    high_value_count = sum(1 for tx in transactions if parse_value(tx.value) > HIGH_VALUE_THRESHOLD)
    if high_value_count > 10:
        score += 15
        factors.append("Multiple high-value transactions (10+)")
    elif high_value_count > 0:
        score += 5
        factors.append("High-value transactions detected")

    score = max(SCORE_MIN, min(SCORE_MAX, score))
    result = RiskAssessment(score=score, level=investigator_level(score), factors=tuple(factors))
    logger.debug("investigator_risk_result", score=result.score, level=result.level, factors=factors)
    return result
