"""
Data models shared by chain adapters and analytics.

ChainKind is the closed set of supported chain families. Transaction is the
normalized record every adapter produces; PatternStatistics is derived from
a list of them by analytics.patterns.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, NamedTuple


class ChainKind(str, Enum):
    """Supported chain families."""

    ETHEREUM = "ethereum"
    BITCOIN = "bitcoin"
    SOLANA = "solana"
    WORLDCOIN = "worldcoin"
    OKX = "okx"
    BNB = "bnb"


class ChainInfo(NamedTuple):
    """Display metadata for a chain."""

    name: str
    currency: str
    explorer_url_template: str


CHAIN_INFO: dict[ChainKind, ChainInfo] = {
    ChainKind.ETHEREUM: ChainInfo("Ethereum", "ETH", "https://etherscan.io/address/{address}"),
    ChainKind.BITCOIN: ChainInfo("Bitcoin", "BTC", "https://blockchair.com/bitcoin/address/{address}"),
    ChainKind.SOLANA: ChainInfo("Solana", "SOL", "https://solscan.io/account/{address}"),
    ChainKind.WORLDCOIN: ChainInfo(
        "Worldcoin", "WLD", "https://worldchain-mainnet.explorer.alchemy.com/address/{address}"
    ),
    ChainKind.OKX: ChainInfo("OKX Chain", "OKT", "https://www.oklink.com/oktc/address/{address}"),
    ChainKind.BNB: ChainInfo("BNB Chain", "BNB", "https://bscscan.com/address/{address}"),
}

# Chains sharing the 0x / 40-hex address shape
EVM_CHAINS = frozenset({ChainKind.ETHEREUM, ChainKind.WORLDCOIN, ChainKind.OKX, ChainKind.BNB})

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"


def format_amount(amount: Decimal | int | float) -> str:
    """Render a native-unit amount as a plain decimal string (no exponent, no trailing zeros)."""
    value = Decimal(str(amount)) if isinstance(amount, float) else Decimal(amount)
    return format(value.normalize(), "f")


def subunits_to_native(subunits: int, decimals: int) -> str:
    """Convert an integer subunit amount (lamports, satoshis) to a native-unit decimal string."""
    return format_amount(Decimal(int(subunits)).scaleb(-decimals))


@dataclass(frozen=True)
class Transaction:
    """
    Normalized transaction.

    value and fee are decimal strings in the chain's native currency (same
    denomination as the balance), never raw subunits.
    """

    hash: str
    from_address: str
    to_address: str
    value: str
    timestamp: int
    chain: ChainKind
    fee: str | None = None
    status: str = STATUS_SUCCESS

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "hash": self.hash,
            "from": self.from_address,
            "to": self.to_address,
            "value": self.value,
            "timestamp": self.timestamp,
            "chain": self.chain.value,
            "status": self.status,
        }
        if self.fee is not None:
            out["fee"] = self.fee
        return out


@dataclass(frozen=True)
class PatternStatistics:
    """Aggregate statistics over a transaction sample. Ratios in [0, 1]; velocity >= 0 (hours)."""

    velocity: float = 0.0
    unique_recipients: int = 0
    unique_senders: int = 0
    round_number_ratio: float = 0.0
    avg_transaction_value: str = "0"
    total_volume: str = "0"

    def to_dict(self) -> dict[str, Any]:
        return {
            "velocity": self.velocity,
            "uniqueRecipients": self.unique_recipients,
            "uniqueSenders": self.unique_senders,
            "roundNumberRatio": self.round_number_ratio,
            "avgTransactionValue": self.avg_transaction_value,
            "totalVolume": self.total_volume,
        }
