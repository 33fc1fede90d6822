"""
Environment variable loading for ChainRisk.

- ETHEREUM_RPC_URL / INFURA_API_KEY: primary Ethereum RPC (public fallbacks follow)
- ETHERSCAN_API_KEY: Etherscan v2 explorer key
- BSCSCAN_API_KEY: BscScan key (optional; metered API falls back to public RPC)
- WORLDSCAN_API_KEY: Worldscan key (falls back to ETHERSCAN_API_KEY)
- SOLANA_RPC_URL / HELIUS_API_KEY: primary Solana RPC (public mainnet follows)
- BITCOIN_ESPLORA_URL: primary Esplora base URL (public mirrors follow)
- CHAINRISK_HTTP_TIMEOUT_SEC: per-call upstream timeout
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project root: config is backend_chainrisk/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_HTTP_TIMEOUT_SEC = 15.0

INFURA_MAINNET_URL_TEMPLATE = "https://mainnet.infura.io/v3/{key}"
ETHEREUM_PUBLIC_RPC_URLS = (
    "https://eth.llamarpc.com",
    "https://cloudflare-eth.com",
    "https://rpc.ankr.com/eth",
)
ETHERSCAN_V2_API_URL = "https://api.etherscan.io/v2/api"
ETHEREUM_CHAIN_ID = 1

BSCSCAN_API_URL = "https://api.bscscan.com/api"
BSC_PUBLIC_RPC_URL = "https://bsc-dataseed.binance.org/"

WORLDSCAN_API_URL = "https://worldchain-mainnet.explorer.alchemy.com/api"
WORLDCHAIN_PUBLIC_RPC_URL = "https://worldchain-mainnet.g.alchemy.com/public"

SOLANA_MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
HELIUS_MAINNET_URL_TEMPLATE = "https://mainnet.helius-rpc.com/?api-key={key}"

ESPLORA_PUBLIC_URLS = (
    "https://blockstream.info/api",
    "https://mempool.space/api",
)


def load_chainrisk_env() -> None:
    """Load .env from project root. Safe to call multiple times."""
    from dotenv import load_dotenv

    load_dotenv(_ENV_PATH)


def _env(name: str) -> str:
    return (os.getenv(name) or "").strip()


def _dedupe(urls: list[str]) -> tuple[str, ...]:
    seen: list[str] = []
    for url in urls:
        if url and url not in seen:
            seen.append(url)
    return tuple(seen)


def get_ethereum_rpc_urls() -> tuple[str, ...]:
    """
    Ordered Ethereum RPC endpoints.
    Order: ETHEREUM_RPC_URL > INFURA_API_KEY > public fallbacks.
    """
    load_chainrisk_env()
    urls = [_env("ETHEREUM_RPC_URL")]
    key = _env("INFURA_API_KEY") or _env("NEXT_PUBLIC_INFURA_KEY")
    if key:
        urls.append(INFURA_MAINNET_URL_TEMPLATE.format(key=key))
    urls.extend(ETHEREUM_PUBLIC_RPC_URLS)
    return _dedupe(urls)


def get_etherscan_api_key() -> str:
    load_chainrisk_env()
    return _env("ETHERSCAN_API_KEY")


def get_bscscan_api_key() -> str:
    load_chainrisk_env()
    return _env("BSCSCAN_API_KEY")


def get_worldscan_api_key() -> str:
    """WORLDSCAN_API_KEY, falling back to ETHERSCAN_API_KEY."""
    load_chainrisk_env()
    return _env("WORLDSCAN_API_KEY") or _env("ETHERSCAN_API_KEY")


def get_solana_rpc_urls() -> tuple[str, ...]:
    """
    Ordered Solana RPC endpoints.
    Order: SOLANA_RPC_URL > HELIUS_API_KEY > public mainnet.
    """
    load_chainrisk_env()
    urls = [_env("SOLANA_RPC_URL")]
    key = _env("HELIUS_API_KEY")
    if key:
        urls.append(HELIUS_MAINNET_URL_TEMPLATE.format(key=key))
    urls.append(SOLANA_MAINNET_RPC_URL)
    return _dedupe(urls)


def get_esplora_urls() -> tuple[str, ...]:
    """Ordered Esplora base URLs: BITCOIN_ESPLORA_URL first, then public mirrors."""
    load_chainrisk_env()
    urls = [_env("BITCOIN_ESPLORA_URL").rstrip("/")]
    urls.extend(ESPLORA_PUBLIC_URLS)
    return _dedupe(urls)


def get_http_timeout_sec() -> float:
    load_chainrisk_env()
    raw = _env("CHAINRISK_HTTP_TIMEOUT_SEC")
    try:
        value = float(raw) if raw else DEFAULT_HTTP_TIMEOUT_SEC
    except ValueError:
        return DEFAULT_HTTP_TIMEOUT_SEC
    return value if value > 0 else DEFAULT_HTTP_TIMEOUT_SEC


def share_transaction_fetch() -> bool:
    """
    Return True when the pipeline should fetch the transaction sample once and
    derive both display rows and statistics from it. Default: on.
    Set CHAINRISK_SHARE_TX_FETCH=0 to issue a separate pattern fetch.
    """
    load_chainrisk_env()
    raw = _env("CHAINRISK_SHARE_TX_FETCH").lower()
    if raw in ("0", "false", "no", "off"):
        return False
    return True


def mask_api_key(url: str) -> str:
    """Mask api-key / apikey query values and Infura project ids in a URL for logging."""
    for marker in ("api-key=", "apikey="):
        if marker in url:
            return url.split(marker)[0] + marker + "***"
    if "infura.io/v3/" in url:
        return url.split("infura.io/v3/")[0] + "infura.io/v3/***"
    return url
