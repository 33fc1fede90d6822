"""
Adapter registry: ChainKind -> ChainAdapter.

The only seam through which the rest of the system picks a chain. An
explicit override always wins; otherwise the address shape decides.
build_default_registry wires every adapter from Settings, so endpoints and
keys are injected rather than read from process-wide state.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from backend_chainrisk.chains.base import ChainAdapter
from backend_chainrisk.chains.bitcoin import BitcoinAdapter
from backend_chainrisk.chains.detector import detect_chain, parse_chain_kind
from backend_chainrisk.chains.evm import EvmAdapter, EvmChainConfig, EvmCompatibleStubAdapter
from backend_chainrisk.chains.models import ChainKind
from backend_chainrisk.chains.solana import SolanaAdapter
from backend_chainrisk.chainrisk_logging import get_logger, short_address
from backend_chainrisk.config.env import ETHEREUM_CHAIN_ID
from backend_chainrisk.config.settings import Settings

logger = get_logger(__name__)


class AdapterRegistry:
    """Lookup table of adapters keyed by ChainKind."""

    def __init__(self, adapters: Mapping[ChainKind, ChainAdapter]) -> None:
        self._adapters: dict[ChainKind, ChainAdapter] = dict(adapters)

    def get(self, chain: ChainKind | str) -> ChainAdapter | None:
        kind = parse_chain_kind(chain)
        if kind is None:
            return None
        return self._adapters.get(kind)

    def resolve(self, address: Any, chain_override: ChainKind | str | None = None) -> ChainAdapter | None:
        """
        Adapter for an address. chain_override is returned unconditionally (no
        validation here; callers use adapter.validate_address). Without it the
        chain is detected from the address shape. None when unsupported.
        """
        if chain_override is not None:
            return self.get(chain_override)
        chain = detect_chain(address)
        if chain is None:
            logger.debug("registry_chain_undetected", address=short_address(str(address or "")))
            return None
        return self._adapters.get(chain)

    def chains(self) -> list[ChainKind]:
        return list(self._adapters)


def build_default_registry(settings: Settings) -> AdapterRegistry:
    """Construct every adapter from settings. OKX is a stub delegating to Ethereum."""
    timeout = settings.http_timeout_sec
    ethereum = EvmAdapter(
        EvmChainConfig(
            chain=ChainKind.ETHEREUM,
            rpc_urls=settings.ethereum_rpc_urls,
            explorer_api_url=settings.etherscan_api_url,
            explorer_api_key=settings.etherscan_api_key,
            explorer_chain_id=ETHEREUM_CHAIN_ID,
            timeout_sec=timeout,
        )
    )
    bnb = EvmAdapter(
        EvmChainConfig(
            chain=ChainKind.BNB,
            rpc_urls=settings.bsc_rpc_urls,
            explorer_api_url=settings.bscscan_api_url,
            explorer_api_key=settings.bscscan_api_key,
            balance_from_explorer=True,
            timeout_sec=timeout,
        )
    )
    worldcoin = EvmAdapter(
        EvmChainConfig(
            chain=ChainKind.WORLDCOIN,
            rpc_urls=settings.worldchain_rpc_urls,
            explorer_api_url=settings.worldscan_api_url,
            explorer_api_key=settings.worldscan_api_key,
            timeout_sec=timeout,
        )
    )
    adapters: dict[ChainKind, ChainAdapter] = {
        ChainKind.ETHEREUM: ethereum,
        ChainKind.BNB: bnb,
        ChainKind.WORLDCOIN: worldcoin,
        ChainKind.OKX: EvmCompatibleStubAdapter(ChainKind.OKX, ethereum),
        ChainKind.SOLANA: SolanaAdapter(settings.solana_rpc_urls, timeout_sec=timeout),
        ChainKind.BITCOIN: BitcoinAdapter(settings.esplora_urls, timeout_sec=timeout),
    }
    for adapter in adapters.values():
        if isinstance(adapter, (EvmAdapter, SolanaAdapter, BitcoinAdapter)):
            adapter.pattern_sample_size = settings.pattern_sample_size
    return AdapterRegistry(adapters)
