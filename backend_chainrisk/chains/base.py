"""
Chain adapter contract.

Every chain family implements the same capability set behind ChainAdapter:
validate_address (no I/O), get_balance (ordered source fallback, raises
BalanceFetchError when all fail), get_transactions (best effort, never
raises for upstream trouble) and analyze_patterns (statistics over the
larger pattern sample).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from backend_chainrisk.analytics.patterns import analyze_transactions
from backend_chainrisk.chains.models import ChainKind, PatternStatistics, Transaction
from backend_chainrisk.config.settings import PATTERN_SAMPLE_SIZE

DEFAULT_TRANSACTION_LIMIT = 10


@runtime_checkable
class ChainAdapter(Protocol):
    """Normalized balance / transaction / validation contract for one chain."""

    chain: ChainKind

    def validate_address(self, address: str) -> bool: ...

    def get_balance(self, address: str) -> str: ...

    def get_transactions(self, address: str, limit: int = DEFAULT_TRANSACTION_LIMIT) -> list[Transaction]: ...

    def analyze_patterns(self, address: str) -> PatternStatistics: ...


class PatternSampleMixin:
    """analyze_patterns shared by all adapters: statistics over the most recent PATTERN_SAMPLE_SIZE transactions."""

    pattern_sample_size = PATTERN_SAMPLE_SIZE

    def analyze_patterns(self, address: str) -> PatternStatistics:
        transactions = self.get_transactions(address, self.pattern_sample_size)  # type: ignore[attr-defined]
        return analyze_transactions(transactions)
