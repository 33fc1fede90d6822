"""
Tests for the adapter registry and default wiring from settings.
"""

from __future__ import annotations

from conftest import EVM_ADDRESS, VALID_WALLET


def test_resolve_detects_chain(fake_registry, fake_adapters):
    from backend_chainrisk.chains.models import ChainKind

    assert fake_registry.resolve(EVM_ADDRESS) is fake_adapters[ChainKind.ETHEREUM]
    assert fake_registry.resolve(VALID_WALLET) is fake_adapters[ChainKind.SOLANA]
    assert fake_registry.resolve("not an address") is None


def test_override_always_wins(fake_registry, fake_adapters):
    from backend_chainrisk.chains.models import ChainKind

    for kind in ChainKind:
        assert fake_registry.resolve(EVM_ADDRESS, kind) is fake_adapters[kind]
        assert fake_registry.resolve(VALID_WALLET, kind.value.upper()) is fake_adapters[kind]
    assert fake_registry.resolve(EVM_ADDRESS, "dogecoin") is None


def test_default_registry_wiring(settings):
    from backend_chainrisk.chains.bitcoin import BitcoinAdapter
    from backend_chainrisk.chains.evm import EvmAdapter, EvmCompatibleStubAdapter
    from backend_chainrisk.chains.models import ChainKind
    from backend_chainrisk.chains.registry import build_default_registry
    from backend_chainrisk.chains.solana import SolanaAdapter

    registry = build_default_registry(settings)

    assert set(registry.chains()) == set(ChainKind)
    eth = registry.get(ChainKind.ETHEREUM)
    assert isinstance(eth, EvmAdapter)
    assert eth.config.explorer_chain_id == 1
    assert not eth.config.balance_from_explorer

    bnb = registry.get("bnb")
    assert isinstance(bnb, EvmAdapter)
    assert bnb.config.balance_from_explorer
    assert bnb.config.rpc_urls == settings.bsc_rpc_urls

    okx = registry.get(ChainKind.OKX)
    assert isinstance(okx, EvmCompatibleStubAdapter)
    assert okx.delegate is eth

    assert isinstance(registry.get(ChainKind.SOLANA), SolanaAdapter)
    assert isinstance(registry.get(ChainKind.BITCOIN), BitcoinAdapter)
    assert eth.config.timeout_sec == settings.http_timeout_sec


def test_default_adapters_satisfy_protocol(settings):
    from backend_chainrisk.chains.base import ChainAdapter
    from backend_chainrisk.chains.registry import build_default_registry

    registry = build_default_registry(settings)
    for kind in registry.chains():
        assert isinstance(registry.get(kind), ChainAdapter)


def test_settings_from_env(monkeypatch):
    from backend_chainrisk.config.settings import get_settings

    monkeypatch.setenv("ETHEREUM_RPC_URL", "https://eth.example/rpc")
    monkeypatch.setenv("HELIUS_API_KEY", "helius-key")
    monkeypatch.setenv("CHAINRISK_HTTP_TIMEOUT_SEC", "7")
    monkeypatch.setenv("CHAINRISK_SHARE_TX_FETCH", "off")
    monkeypatch.setenv("API_PORT", "9000")

    s = get_settings()
    assert s.ethereum_rpc_urls[0] == "https://eth.example/rpc"
    assert "https://mainnet.helius-rpc.com/?api-key=helius-key" in s.solana_rpc_urls
    assert s.solana_rpc_urls[-1] == "https://api.mainnet-beta.solana.com"
    assert s.http_timeout_sec == 7.0
    assert s.share_transaction_fetch is False
    assert s.api_port == 9000


def test_mask_api_key():
    from backend_chainrisk.config.env import mask_api_key

    assert mask_api_key("https://mainnet.helius-rpc.com/?api-key=secret") == "https://mainnet.helius-rpc.com/?api-key=***"
    assert mask_api_key("https://mainnet.infura.io/v3/abc123") == "https://mainnet.infura.io/v3/***"
    assert mask_api_key("https://eth.llamarpc.com") == "https://eth.llamarpc.com"
