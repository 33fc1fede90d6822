"""
Application settings.

Collects endpoints, API keys and tuning knobs from env.py into one frozen
dataclass. Adapters and the pipeline receive their slice at construction
time; nothing reads the environment after get_settings() returns.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from backend_chainrisk.config import env

PATTERN_SAMPLE_SIZE = 50
DISPLAY_TRANSACTION_LIMIT = 10


@dataclass(frozen=True)
class Settings:
    """Service configuration. Build with get_settings(); override fields in tests."""

    ethereum_rpc_urls: tuple[str, ...] = env.ETHEREUM_PUBLIC_RPC_URLS
    etherscan_api_url: str = env.ETHERSCAN_V2_API_URL
    etherscan_api_key: str = ""
    bscscan_api_url: str = env.BSCSCAN_API_URL
    bscscan_api_key: str = ""
    bsc_rpc_urls: tuple[str, ...] = (env.BSC_PUBLIC_RPC_URL,)
    worldscan_api_url: str = env.WORLDSCAN_API_URL
    worldscan_api_key: str = ""
    worldchain_rpc_urls: tuple[str, ...] = (env.WORLDCHAIN_PUBLIC_RPC_URL,)
    solana_rpc_urls: tuple[str, ...] = (env.SOLANA_MAINNET_RPC_URL,)
    esplora_urls: tuple[str, ...] = env.ESPLORA_PUBLIC_URLS
    http_timeout_sec: float = env.DEFAULT_HTTP_TIMEOUT_SEC
    pattern_sample_size: int = PATTERN_SAMPLE_SIZE
    display_transaction_limit: int = DISPLAY_TRANSACTION_LIMIT
    share_transaction_fetch: bool = True
    api_host: str = "0.0.0.0"
    api_port: int = 8000


def get_settings() -> Settings:
    """
    Return settings resolved from the environment (.env loaded first).

    Returns:
        Settings with endpoint lists in fallback order, API keys, timeout,
        sample sizes and API bind address.
    """
    return Settings(
        ethereum_rpc_urls=env.get_ethereum_rpc_urls(),
        etherscan_api_key=env.get_etherscan_api_key(),
        bscscan_api_key=env.get_bscscan_api_key(),
        worldscan_api_key=env.get_worldscan_api_key(),
        solana_rpc_urls=env.get_solana_rpc_urls(),
        esplora_urls=env.get_esplora_urls(),
        http_timeout_sec=env.get_http_timeout_sec(),
        share_transaction_fetch=env.share_transaction_fetch(),
        api_host=os.getenv("API_HOST", "0.0.0.0").strip() or "0.0.0.0",
        api_port=int(os.getenv("API_PORT", "8000").strip() or "8000"),
    )
