"""
Chains package: chain detection, normalized data model, and per-chain
adapters behind one contract (validate, balance, transactions, patterns).

Adapters and the registry live in their own modules (evm, solana, bitcoin,
registry); import them from there.
"""

from backend_chainrisk.chains.detector import (
    detect_chain,
    get_chain_currency,
    get_chain_name,
    get_explorer_url,
    parse_chain_kind,
    validate_address_for_chain,
)
from backend_chainrisk.chains.models import (
    CHAIN_INFO,
    EVM_CHAINS,
    ChainInfo,
    ChainKind,
    PatternStatistics,
    Transaction,
)

__all__ = [
    "CHAIN_INFO",
    "EVM_CHAINS",
    "ChainInfo",
    "ChainKind",
    "PatternStatistics",
    "Transaction",
    "detect_chain",
    "get_chain_currency",
    "get_chain_name",
    "get_explorer_url",
    "parse_chain_kind",
    "validate_address_for_chain",
]
