"""
Solana adapter: balance and recent transactions via solana-py RPC Client.

Endpoints are tried in order (configured / Helius first, public mainnet
last). Transactions: getSignaturesForAddress (newest first), then
getTransaction per signature with maxSupportedTransactionVersion=0.
Responses may arrive as solders objects or plain dicts; helpers read both.
Counterparties come from the first two account keys, trying legacy
accountKeys, then versioned staticAccountKeys, then token-balance owners.
Value is |post[0] - pre[0]| lamports converted to SOL.
"""

from __future__ import annotations

from typing import Any, Callable

from solana.rpc.api import Client
from solders.pubkey import Pubkey
from solders.signature import Signature

from backend_chainrisk.chains.base import DEFAULT_TRANSACTION_LIMIT, PatternSampleMixin
from backend_chainrisk.chains.models import (
    STATUS_FAILED,
    STATUS_SUCCESS,
    ChainKind,
    Transaction,
    subunits_to_native,
)
from backend_chainrisk.chainrisk_logging import get_logger, short_address
from backend_chainrisk.config.env import DEFAULT_HTTP_TIMEOUT_SEC, SOLANA_MAINNET_RPC_URL, mask_api_key
from backend_chainrisk.core.exceptions import BalanceFetchError

logger = get_logger(__name__)

LAMPORTS_DECIMALS = 9
UNKNOWN_COUNTERPARTY = "Unknown"


def _field(obj: Any, *names: str) -> Any:
    """First non-None attribute or dict key among names (snake_case and camelCase variants)."""
    if obj is None:
        return None
    for name in names:
        if isinstance(obj, dict):
            value = obj.get(name)
        else:
            value = getattr(obj, name, None)
        if value is not None:
            return value
    return None


def _get_resp_value(resp: Any) -> Any:
    if resp is None:
        return None
    v = _field(resp, "value")
    if v is not None:
        return v
    return _field(_field(resp, "result"), "value")


def _key_to_str(key: Any) -> str:
    if isinstance(key, dict):
        return str(key.get("pubkey") or "")
    pubkey = getattr(key, "pubkey", None)
    if pubkey is not None and not callable(pubkey):
        return str(pubkey)
    return str(key) if key is not None else ""


def _message(tx_value: Any) -> Any:
    """transaction.message for raw JSON, or transaction.transaction.message for solders objects."""
    tx_obj = _field(tx_value, "transaction")
    msg = _field(tx_obj, "message")
    if msg is None:
        msg = _field(_field(tx_obj, "transaction"), "message")
    return msg


def _meta(tx_value: Any) -> Any:
    meta = _field(tx_value, "meta")
    if meta is None:
        meta = _field(_field(tx_value, "transaction"), "meta")
    return meta


def _keys_from_account_keys(tx_value: Any, meta: Any) -> list[str]:
    keys = _field(_message(tx_value), "account_keys", "accountKeys")
    return [_key_to_str(k) for k in keys] if keys else []


def _keys_from_static_account_keys(tx_value: Any, meta: Any) -> list[str]:
    keys = _field(_message(tx_value), "static_account_keys", "staticAccountKeys")
    return [_key_to_str(k) for k in keys] if keys else []


def _keys_from_token_balances(tx_value: Any, meta: Any) -> list[str]:
    balances = _field(meta, "pre_token_balances", "preTokenBalances") or []
    owners = [str(_field(b, "owner")) for b in balances if _field(b, "owner") is not None]
    return owners[:1]


COUNTERPARTY_STRATEGIES: tuple[Callable[[Any, Any], list[str]], ...] = (
    _keys_from_account_keys,
    _keys_from_static_account_keys,
    _keys_from_token_balances,
)


def extract_counterparties(tx_value: Any, meta: Any, signature: str = "") -> tuple[str, str]:
    """(from, to) from the first strategy that yields keys; "Unknown" when none do."""
    for strategy in COUNTERPARTY_STRATEGIES:
        try:
            keys = [k for k in strategy(tx_value, meta) if k]
        except (AttributeError, TypeError, KeyError, IndexError) as e:
            logger.debug(
                "solana_counterparty_strategy_failed",
                strategy=strategy.__name__,
                signature=signature[:44],
                error=str(e),
            )
            continue
        if keys:
            from_addr = keys[0]
            to_addr = keys[1] if len(keys) > 1 else ""
            return (from_addr or UNKNOWN_COUNTERPARTY, to_addr or UNKNOWN_COUNTERPARTY)
    return (UNKNOWN_COUNTERPARTY, UNKNOWN_COUNTERPARTY)


def _value_from_balances(meta: Any) -> str:
    pre = _field(meta, "pre_balances", "preBalances")
    post = _field(meta, "post_balances", "postBalances")
    if not pre or not post:
        return "0"
    change = abs(int(post[0]) - int(pre[0]))
    return subunits_to_native(change, LAMPORTS_DECIMALS)


class SolanaAdapter(PatternSampleMixin):
    """Solana mainnet adapter over one or more RPC endpoints."""

    chain = ChainKind.SOLANA

    def __init__(
        self,
        rpc_urls: tuple[str, ...] = (SOLANA_MAINNET_RPC_URL,),
        timeout_sec: float = DEFAULT_HTTP_TIMEOUT_SEC,
        client_factory: Callable[[str], Client] | None = None,
    ) -> None:
        self.rpc_urls = tuple(rpc_urls) or (SOLANA_MAINNET_RPC_URL,)
        self.timeout_sec = timeout_sec
        self._client_factory = client_factory or (lambda url: Client(url, timeout=self.timeout_sec))

    def validate_address(self, address: str) -> bool:
        try:
            Pubkey.from_string(address)
            return True
        except Exception:
            return False

    def get_balance(self, address: str) -> str:
        """SOL balance from the first endpoint that answers."""
        pubkey = Pubkey.from_string(address)
        for url in self.rpc_urls:
            try:
                lamports = _get_resp_value(self._client_factory(url).get_balance(pubkey))
                if lamports is None:
                    raise ValueError("empty getBalance response")
                return subunits_to_native(int(lamports), LAMPORTS_DECIMALS)
            except Exception as e:
                logger.warning(
                    "solana_balance_source_failed",
                    address=short_address(address),
                    source=mask_api_key(url),
                    error=str(e),
                )
        logger.error("solana_balance_all_sources_failed", address=short_address(address))
        raise BalanceFetchError("Solana", chain=self.chain.value)

    def _signatures(self, client: Client, pubkey: Pubkey, limit: int) -> list[Any] | None:
        resp = client.get_signatures_for_address(pubkey, limit=limit)
        value = _get_resp_value(resp)
        if value is None:
            return None
        return list(value)

    def _parse_transaction(self, client: Client, sig_item: Any) -> Transaction | None:
        sig_val = _field(sig_item, "signature")
        if sig_val is None:
            return None
        sig_str = str(sig_val)
        sig_use = sig_val if isinstance(sig_val, Signature) else Signature.from_string(sig_str)
        resp = client.get_transaction(sig_use, max_supported_transaction_version=0)
        tx_value = _get_resp_value(resp)
        meta = _meta(tx_value)
        if tx_value is None or meta is None:
            logger.debug("solana_tx_no_data", signature=sig_str[:44])
            return None

        from_addr, to_addr = extract_counterparties(tx_value, meta, sig_str)
        fee = _field(meta, "fee")
        block_time = _field(sig_item, "block_time", "blockTime")
        return Transaction(
            hash=sig_str,
            from_address=from_addr,
            to_address=to_addr,
            value=_value_from_balances(meta),
            timestamp=int(block_time or 0),
            chain=self.chain,
            fee=subunits_to_native(int(fee), LAMPORTS_DECIMALS) if fee else None,
            status=STATUS_FAILED if _field(meta, "err") is not None else STATUS_SUCCESS,
        )

    def get_transactions(self, address: str, limit: int = DEFAULT_TRANSACTION_LIMIT) -> list[Transaction]:
        """Up to `limit` most recent transactions, newest first. Bad records are skipped; upstream errors yield []."""
        try:
            pubkey = Pubkey.from_string(address)
        except Exception as e:
            logger.warning("solana_invalid_address", address=short_address(address), error=str(e))
            return []

        for url in self.rpc_urls:
            try:
                client = self._client_factory(url)
                signatures = self._signatures(client, pubkey, limit)
            except Exception as e:
                logger.warning(
                    "solana_signatures_failed",
                    address=short_address(address),
                    source=mask_api_key(url),
                    error=str(e),
                )
                continue
            if signatures is None:
                logger.warning("solana_signatures_empty_response", address=short_address(address), source=mask_api_key(url))
                continue

            logger.info("solana_signatures_found", address=short_address(address), count=len(signatures))
            transactions: list[Transaction] = []
            for sig_item in signatures[:limit]:
                try:
                    tx = self._parse_transaction(client, sig_item)
                except Exception as e:
                    logger.warning(
                        "solana_tx_parse_skipped",
                        signature=str(_field(sig_item, "signature"))[:44],
                        error=str(e),
                    )
                    continue
                if tx is not None:
                    transactions.append(tx)
            logger.info("solana_transactions_parsed", address=short_address(address), count=len(transactions))
            return transactions

        logger.error("solana_transactions_all_sources_failed", address=short_address(address))
        return []
