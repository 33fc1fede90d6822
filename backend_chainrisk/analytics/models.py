"""
Result envelope for one analysis: two RiskAssessments plus the data they
were computed from. AnalysisResult.to_dict() is the serialized contract
read by the API, CLI and any report renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from backend_chainrisk.chains.models import ChainKind, PatternStatistics, Transaction

INVESTIGATOR_LEVELS = ("low", "medium", "high", "critical")
SAFETY_LEVELS = ("dangerous", "unsafe", "caution", "safe")


@dataclass(frozen=True)
class RiskAssessment:
    """Clamped integer score, categorical level, and triggered-rule factors in evaluation order."""

    score: int
    level: str
    factors: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.score, "level": self.level, "factors": list(self.factors)}


@dataclass(frozen=True)
class KnownInteractions:
    """Placeholder for labelled counterparties; always empty for now."""

    exchanges: tuple[str, ...] = ()
    mixers: tuple[str, ...] = ()
    defi: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "exchanges": list(self.exchanges),
            "mixers": list(self.mixers),
            "defi": list(self.defi),
        }


@dataclass(frozen=True)
class AnalysisResult:
    address: str
    chain: ChainKind
    chain_name: str
    currency: str
    balance: str
    transaction_count: int
    investigator_risk: RiskAssessment
    user_safety: RiskAssessment
    patterns: PatternStatistics
    transactions: tuple[Transaction, ...] = ()
    known_interactions: KnownInteractions = field(default_factory=KnownInteractions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "chain": self.chain.value,
            "chainName": self.chain_name,
            "currency": self.currency,
            "balance": self.balance,
            "transactionCount": self.transaction_count,
            "investigatorRisk": self.investigator_risk.to_dict(),
            "userSafety": self.user_safety.to_dict(),
            "patterns": self.patterns.to_dict(),
            "knownInteractions": self.known_interactions.to_dict(),
            "transactions": [tx.to_dict() for tx in self.transactions],
        }
