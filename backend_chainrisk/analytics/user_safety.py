"""
User safety: how safe an address is to transact with, from an ordinary
user's viewpoint. Higher is safer.

Starts neutral at 50; rewards long history, slow movement, a stable balance,
few recipients and clean execution; penalizes brand-new addresses, rapid
movement, dust balances, fan-out and failures. Clamp 0-100.
Levels: >=70 safe, >=50 caution, >=30 unsafe, else dangerous.
"""

from __future__ import annotations

from collections.abc import Sequence

from backend_chainrisk.analytics.models import RiskAssessment
from backend_chainrisk.analytics.patterns import parse_value
from backend_chainrisk.chains.models import STATUS_FAILED, PatternStatistics, Transaction
from backend_chainrisk.chainrisk_logging import get_logger

logger = get_logger(__name__)

BASE_SCORE = 50
SCORE_MIN = 0
SCORE_MAX = 100

HOURS_PER_WEEK = 168
FAILURE_RATE_LIMIT = 0.1

LEVEL_SAFE = "safe"
LEVEL_CAUTION = "caution"
LEVEL_UNSAFE = "unsafe"
LEVEL_DANGEROUS = "dangerous"


def safety_level(score: int) -> str:
    if score >= 70:
        return LEVEL_SAFE
    if score >= 50:
        return LEVEL_CAUTION
    if score >= 30:
        return LEVEL_UNSAFE
    return LEVEL_DANGEROUS


def calculate_user_safety(
    balance: str,
    transactions: Sequence[Transaction],
    patterns: PatternStatistics,
) -> RiskAssessment:
    """Score counterparty safety from balance, the transaction sample and its statistics."""
    score = BASE_SCORE
    factors: list[str] = []

    balance_num = parse_value(balance)
    tx_count = len(transactions)

    if tx_count >= 100:
        score += 20
        factors.append("Long transaction history (100+)")
    elif tx_count >= 50:
        score += 15
        factors.append("Established history (50+)")
    elif tx_count >= 10:
        score += 10
        factors.append("Moderate history (10+)")
    elif tx_count < 5:
        score -= 15
        factors.append("New address (<5 transactions)")

    if patterns.velocity > HOURS_PER_WEEK:
        score += 15
        factors.append("Long holding periods (safe)")
    elif patterns.velocity > 24:
        score += 10
        factors.append("Moderate activity pace")
    elif 0 < patterns.velocity < 1:
        score -= 20
        factors.append("Rapid fund movement (risky)")

    if 0.1 < balance_num < 1000:
        score += 10
        factors.append("Stable balance range")
    elif balance_num > 1000:
        # exchange (safe) or whale (risky)
        score += 5
        factors.append("Large balance holder")
    elif balance_num < 0.01:
        score -= 5
        factors.append("Very low balance")

    if patterns.unique_recipients <= 5:
        score += 10
        factors.append("Limited recipients (personal use)")
    elif patterns.unique_recipients > 50:
        score -= 15
        factors.append("Many recipients (distribution pattern)")

    if patterns.round_number_ratio > 0.8:
        score += 5
        factors.append("Consistent transaction amounts")

    failed = sum(1 for tx in transactions if tx.status == STATUS_FAILED)
    if failed == 0 and tx_count > 0:
        score += 10
        factors.append("All transactions successful")
    elif failed > tx_count * FAILURE_RATE_LIMIT:
        score -= 10
        factors.append("High failure rate (>10%)")

    score = max(SCORE_MIN, min(SCORE_MAX, score))
    result = RiskAssessment(score=score, level=safety_level(score), factors=tuple(factors))
    logger.debug("user_safety_result", score=result.score, level=result.level, factors=factors)
    return result
