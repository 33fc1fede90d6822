"""
Bitcoin adapter over Esplora REST APIs (blockstream.info, mempool.space).

Balance: chain_stats + mempool_stats funded minus spent, satoshis -> BTC,
first mirror that answers wins. Transactions: /address/{a}/txs, then
/address/{a}/txs/chain/{last_txid} pages until the limit is reached.
UTXO transactions are flattened from the address' point of view: when the
address funds an input it is the sender and value is what left for other
outputs; otherwise value is what the address received.
"""

from __future__ import annotations

import time
from typing import Any

import base58
import requests

from backend_chainrisk.chains.base import DEFAULT_TRANSACTION_LIMIT, PatternSampleMixin
from backend_chainrisk.chains.detector import BITCOIN_LEGACY_RE, BITCOIN_SEGWIT_RE
from backend_chainrisk.chains.models import (
    STATUS_SUCCESS,
    ChainKind,
    Transaction,
    subunits_to_native,
)
from backend_chainrisk.chainrisk_logging import get_logger, short_address
from backend_chainrisk.config.env import DEFAULT_HTTP_TIMEOUT_SEC, ESPLORA_PUBLIC_URLS
from backend_chainrisk.core.exceptions import BalanceFetchError

logger = get_logger(__name__)

SATOSHI_DECIMALS = 8
# base58check version bytes: P2PKH, P2SH
LEGACY_VERSION_BYTES = (0x00, 0x05)
LEGACY_PAYLOAD_LEN = 21
UNKNOWN_COUNTERPARTY = "Unknown"


def _stats_balance(stats: dict[str, Any] | None) -> int:
    stats = stats or {}
    return int(stats.get("funded_txo_sum") or 0) - int(stats.get("spent_txo_sum") or 0)


def _input_address(vin: dict[str, Any]) -> str | None:
    prevout = vin.get("prevout") or {}
    return prevout.get("scriptpubkey_address")


def normalize_esplora_tx(raw: dict[str, Any], address: str, now: int | None = None) -> Transaction:
    """
    Flatten one Esplora transaction into a Transaction relative to `address`.
    Unconfirmed (mempool) transactions have no block_time and are stamped `now`.
    """
    inputs = raw.get("vin") or []
    outputs = raw.get("vout") or []
    input_addrs = [a for a in (_input_address(v) for v in inputs) if a]
    is_sender = address in input_addrs

    if is_sender:
        external = [o for o in outputs if o.get("scriptpubkey_address") != address]
        value_sats = sum(int(o.get("value") or 0) for o in external)
        from_addr = address
        to_addr = next((o.get("scriptpubkey_address") for o in external if o.get("scriptpubkey_address")), None)
    else:
        value_sats = sum(int(o.get("value") or 0) for o in outputs if o.get("scriptpubkey_address") == address)
        from_addr = input_addrs[0] if input_addrs else None
        to_addr = address

    status = raw.get("status") or {}
    block_time = status.get("block_time")
    fee = raw.get("fee")
    return Transaction(
        hash=str(raw["txid"]),
        from_address=from_addr or UNKNOWN_COUNTERPARTY,
        to_address=to_addr or UNKNOWN_COUNTERPARTY,
        value=subunits_to_native(value_sats, SATOSHI_DECIMALS),
        timestamp=int(block_time) if block_time else int(time.time() if now is None else now),
        chain=ChainKind.BITCOIN,
        fee=subunits_to_native(int(fee), SATOSHI_DECIMALS) if fee is not None else None,
        status=STATUS_SUCCESS,
    )


class BitcoinAdapter(PatternSampleMixin):
    """Bitcoin mainnet adapter over Esplora mirrors."""

    chain = ChainKind.BITCOIN

    def __init__(
        self,
        base_urls: tuple[str, ...] = ESPLORA_PUBLIC_URLS,
        timeout_sec: float = DEFAULT_HTTP_TIMEOUT_SEC,
        session: requests.Session | None = None,
    ) -> None:
        self.base_urls = tuple(u.rstrip("/") for u in base_urls) or ESPLORA_PUBLIC_URLS
        self.timeout_sec = timeout_sec
        self._session = session or requests.Session()

    def validate_address(self, address: str) -> bool:
        """Legacy (1.., 3..) addresses must pass the base58check checksum; bech32 is checked by shape."""
        if not isinstance(address, str):
            return False
        if BITCOIN_SEGWIT_RE.match(address):
            return True
        if not BITCOIN_LEGACY_RE.match(address):
            return False
        try:
            payload = base58.b58decode_check(address)
        except ValueError:
            return False
        return len(payload) == LEGACY_PAYLOAD_LEN and payload[0] in LEGACY_VERSION_BYTES

    def _get_json(self, url: str) -> Any:
        resp = self._session.get(url, timeout=self.timeout_sec)
        resp.raise_for_status()
        return resp.json()

    def get_balance(self, address: str) -> str:
        """Confirmed + mempool balance in BTC from the first mirror that answers."""
        for base in self.base_urls:
            try:
                data = self._get_json(f"{base}/address/{address}")
                sats = _stats_balance(data.get("chain_stats")) + _stats_balance(data.get("mempool_stats"))
                return subunits_to_native(sats, SATOSHI_DECIMALS)
            except (requests.RequestException, ValueError, TypeError, AttributeError) as e:
                logger.warning(
                    "bitcoin_balance_source_failed",
                    address=short_address(address),
                    source=base,
                    error=str(e),
                )
        logger.error("bitcoin_balance_all_sources_failed", address=short_address(address))
        raise BalanceFetchError("Bitcoin", chain=self.chain.value)

    def _fetch_raw_txs(self, base: str, address: str, limit: int) -> list[dict[str, Any]]:
        page = self._get_json(f"{base}/address/{address}/txs")
        raw_txs: list[dict[str, Any]] = list(page or [])
        while page and len(raw_txs) < limit:
            last = raw_txs[-1]
            last_txid = last.get("txid") if isinstance(last, dict) else None
            if not last_txid:
                break
            try:
                page = self._get_json(f"{base}/address/{address}/txs/chain/{last_txid}")
            except (requests.RequestException, ValueError) as e:
                logger.warning(
                    "bitcoin_txs_page_failed",
                    address=short_address(address),
                    source=base,
                    fetched=len(raw_txs),
                    error=str(e),
                )
                break
            raw_txs.extend(page or [])
        return raw_txs[:limit]

    def get_transactions(self, address: str, limit: int = DEFAULT_TRANSACTION_LIMIT) -> list[Transaction]:
        """Up to `limit` most recent transactions, newest first. Upstream errors yield partial or empty results."""
        for base in self.base_urls:
            try:
                raw_txs = self._fetch_raw_txs(base, address, limit)
            except (requests.RequestException, ValueError, TypeError) as e:
                logger.warning(
                    "bitcoin_txs_source_failed",
                    address=short_address(address),
                    source=base,
                    error=str(e),
                )
                continue
            now = int(time.time())
            transactions: list[Transaction] = []
            for raw in raw_txs:
                try:
                    transactions.append(normalize_esplora_tx(raw, address, now))
                except (KeyError, TypeError, ValueError, AttributeError) as e:
                    logger.warning(
                        "bitcoin_tx_parse_skipped",
                        txid=str(raw.get("txid") if isinstance(raw, dict) else raw)[:64],
                        error=str(e),
                    )
            logger.info("bitcoin_transactions_fetched", address=short_address(address), count=len(transactions))
            return transactions
        logger.error("bitcoin_transactions_all_sources_failed", address=short_address(address))
        return []
