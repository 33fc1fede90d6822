"""
Chain detection from address shape alone (no network I/O).

Order matters: Bitcoin legacy/segwit first, then Solana base58, then the
0x/40-hex EVM shape. Every EVM-compatible chain shares that last shape, so
it always resolves to ethereum; callers pass an explicit chain to pick
worldcoin, okx or bnb.
"""

from __future__ import annotations

import re
from typing import Any

from backend_chainrisk.chains.models import CHAIN_INFO, EVM_CHAINS, ChainKind

BITCOIN_LEGACY_RE = re.compile(r"^[13][a-km-zA-HJ-NP-Z1-9]{25,34}$")
BITCOIN_SEGWIT_RE = re.compile(r"^bc1[a-z0-9]{39,59}$")
SOLANA_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
EVM_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


def detect_chain(address: Any) -> ChainKind | None:
    """Return the chain family for an address string, or None if no pattern matches."""
    if not address or not isinstance(address, str):
        return None
    addr = address.strip()

    if BITCOIN_LEGACY_RE.match(addr) or BITCOIN_SEGWIT_RE.match(addr):
        return ChainKind.BITCOIN
    if SOLANA_RE.match(addr) and not addr.startswith("0x"):
        return ChainKind.SOLANA
    if EVM_RE.match(addr):
        return ChainKind.ETHEREUM
    return None


def validate_address_for_chain(address: Any, chain: ChainKind) -> bool:
    """
    True if the address shape fits the chain.

    Any EVM-shaped address is valid for every EVM-family chain; bitcoin and
    solana require an exact family match.
    """
    detected = detect_chain(address)
    if detected is None:
        return False
    if chain in EVM_CHAINS and detected in EVM_CHAINS:
        return True
    return detected == chain


def parse_chain_kind(value: Any) -> ChainKind | None:
    """Map a ChainKind or case-insensitive chain string to ChainKind; None if unknown."""
    if isinstance(value, ChainKind):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ChainKind(value.strip().lower())
    except ValueError:
        return None


def get_chain_name(chain: ChainKind) -> str:
    return CHAIN_INFO[chain].name


def get_chain_currency(chain: ChainKind) -> str:
    return CHAIN_INFO[chain].currency


def get_explorer_url(chain: ChainKind, address: str) -> str:
    """Block explorer page for an address on the given chain."""
    return CHAIN_INFO[chain].explorer_url_template.format(address=address)
