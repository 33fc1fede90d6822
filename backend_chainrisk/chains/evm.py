"""
EVM-family adapters (Ethereum, BNB Chain, Worldcoin) and the stub used for
EVM chains that have no data source of their own yet (OKX).

Transactions come from an Etherscan-compatible explorer (txlist, newest
first). Balance comes from the configured sources in order: optionally the
explorer's balance endpoint first (metered; API-key / rate-limit answers
fall through), then each JSON-RPC node via web3. Wei values are converted
to ether with Web3.from_wei and kept as decimal strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

import requests
from web3 import Web3

from backend_chainrisk.chains.base import DEFAULT_TRANSACTION_LIMIT, PatternSampleMixin
from backend_chainrisk.chains.detector import get_chain_name
from backend_chainrisk.chains.models import (
    STATUS_FAILED,
    STATUS_SUCCESS,
    ChainKind,
    PatternStatistics,
    Transaction,
    format_amount,
)
from backend_chainrisk.chainrisk_logging import get_logger, short_address
from backend_chainrisk.config.env import DEFAULT_HTTP_TIMEOUT_SEC, mask_api_key
from backend_chainrisk.core.exceptions import BalanceFetchError, UpstreamError

logger = get_logger(__name__)

EXPLORER_STATUS_OK = "1"
NO_TRANSACTIONS_MESSAGE = "No transactions found"
END_BLOCK = 99999999


class ExplorerApiKeyError(UpstreamError):
    """Explorer refused the call for API-key or rate-limit reasons."""

    code = "explorer_api_key"


@dataclass(frozen=True)
class EvmChainConfig:
    """Endpoints for one EVM chain. rpc_urls are tried in order for balance."""

    chain: ChainKind
    rpc_urls: tuple[str, ...]
    explorer_api_url: str
    explorer_api_key: str = ""
    explorer_chain_id: int | None = None
    balance_from_explorer: bool = False
    timeout_sec: float = DEFAULT_HTTP_TIMEOUT_SEC


def _default_web3_factory(url: str, timeout_sec: float) -> Web3:
    return Web3(Web3.HTTPProvider(url, request_kwargs={"timeout": timeout_sec}))


def wei_to_ether(wei: int | str) -> str:
    return format_amount(Web3.from_wei(int(wei), "ether"))


def _is_key_or_rate_limit(data: dict[str, Any]) -> bool:
    message = str(data.get("message") or "")
    result = str(data.get("result") or "").lower()
    if "API" in message:
        return True
    return "rate limit" in result or "api key" in result or "apikey" in result


class EvmAdapter(PatternSampleMixin):
    """Adapter for one Etherscan-compatible EVM chain."""

    def __init__(
        self,
        config: EvmChainConfig,
        session: requests.Session | None = None,
        web3_factory: Callable[[str, float], Web3] | None = None,
    ) -> None:
        self.config = config
        self.chain = config.chain
        self._session = session or requests.Session()
        self._web3_factory = web3_factory or _default_web3_factory

    # --- validation ---

    def validate_address(self, address: str) -> bool:
        if not isinstance(address, str) or not address.startswith("0x"):
            return False
        try:
            return bool(Web3.is_address(address))
        except (TypeError, ValueError):
            return False

    # --- explorer ---

    def _explorer_get(self, params: dict[str, Any]) -> dict[str, Any]:
        query = dict(params)
        if self.config.explorer_chain_id is not None:
            query["chainid"] = self.config.explorer_chain_id
        if self.config.explorer_api_key:
            query["apikey"] = self.config.explorer_api_key
        resp = self._session.get(
            self.config.explorer_api_url,
            params=query,
            timeout=self.config.timeout_sec,
        )
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError("explorer response is not a JSON object")
        return data

    def _explorer_balance(self, address: str) -> str:
        data = self._explorer_get(
            {"module": "account", "action": "balance", "address": address, "tag": "latest"}
        )
        if str(data.get("status")) == EXPLORER_STATUS_OK:
            return wei_to_ether(data["result"])
        if _is_key_or_rate_limit(data):
            raise ExplorerApiKeyError(
                str(data.get("message") or "explorer API key error"),
                chain=self.chain.value,
                source="explorer",
            )
        raise UpstreamError(
            str(data.get("message") or "explorer balance error"),
            chain=self.chain.value,
            source="explorer",
        )

    # --- rpc ---

    def _rpc_balance(self, url: str, address: str) -> str:
        w3 = self._web3_factory(url, self.config.timeout_sec)
        wei = w3.eth.get_balance(Web3.to_checksum_address(address))
        return wei_to_ether(wei)

    def _balance_sources(self) -> list[tuple[str, Callable[[str], str]]]:
        sources: list[tuple[str, Callable[[str], str]]] = []
        if self.config.balance_from_explorer:
            sources.append((self.config.explorer_api_url, self._explorer_balance))
        for url in self.config.rpc_urls:
            sources.append((url, lambda addr, url=url: self._rpc_balance(url, addr)))
        return sources

    def get_balance(self, address: str) -> str:
        """Native balance (ether units) from the first source that answers."""
        for source, fetch in self._balance_sources():
            try:
                balance = fetch(address)
            except ExplorerApiKeyError as e:
                logger.warning(
                    "evm_explorer_key_or_rate_limit",
                    chain=self.chain.value,
                    address=short_address(address),
                    error=e.message,
                )
                continue
            except Exception as e:
                logger.warning(
                    "evm_balance_source_failed",
                    chain=self.chain.value,
                    address=short_address(address),
                    source=mask_api_key(source),
                    error=str(e),
                )
                continue
            logger.debug(
                "evm_balance_fetched",
                chain=self.chain.value,
                address=short_address(address),
                source=mask_api_key(source),
            )
            return balance
        logger.error("evm_balance_all_sources_failed", chain=self.chain.value, address=short_address(address))
        raise BalanceFetchError(get_chain_name(self.chain), chain=self.chain.value)

    # --- transactions ---

    def _parse_explorer_tx(self, raw: dict[str, Any]) -> Transaction:
        gas_used = raw.get("gasUsed")
        gas_price = raw.get("gasPrice")
        fee = wei_to_ether(int(gas_used) * int(gas_price)) if gas_used and gas_price else None
        return Transaction(
            hash=str(raw["hash"]),
            from_address=str(raw.get("from") or ""),
            to_address=str(raw.get("to") or ""),
            value=wei_to_ether(raw["value"]),
            timestamp=int(raw["timeStamp"]),
            chain=self.chain,
            fee=fee,
            status=STATUS_SUCCESS if str(raw.get("isError")) == "0" else STATUS_FAILED,
        )

    def get_transactions(self, address: str, limit: int = DEFAULT_TRANSACTION_LIMIT) -> list[Transaction]:
        """Up to `limit` most recent transactions, newest first. Upstream errors yield []."""
        params = {
            "module": "account",
            "action": "txlist",
            "address": address,
            "startblock": 0,
            "endblock": END_BLOCK,
            "page": 1,
            "offset": limit,
            "sort": "desc",
        }
        try:
            data = self._explorer_get(params)
        except (requests.RequestException, ValueError) as e:
            logger.warning(
                "evm_txlist_request_failed",
                chain=self.chain.value,
                address=short_address(address),
                error=str(e),
            )
            return []

        result = data.get("result")
        if str(data.get("status")) != EXPLORER_STATUS_OK or not isinstance(result, list):
            message = str(data.get("message") or "")
            if message == NO_TRANSACTIONS_MESSAGE or result == []:
                logger.debug("evm_txlist_empty", chain=self.chain.value, address=short_address(address))
            else:
                logger.error(
                    "evm_explorer_error",
                    chain=self.chain.value,
                    address=short_address(address),
                    message=message,
                    result=str(result)[:200],
                )
            return []

        transactions: list[Transaction] = []
        for raw in result[:limit]:
            try:
                transactions.append(self._parse_explorer_tx(raw))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(
                    "evm_tx_parse_skipped",
                    chain=self.chain.value,
                    tx_hash=str(raw.get("hash") if isinstance(raw, dict) else raw)[:66],
                    error=str(e),
                )
        logger.info(
            "evm_transactions_fetched",
            chain=self.chain.value,
            address=short_address(address),
            count=len(transactions),
        )
        return transactions


class EvmCompatibleStubAdapter:
    """
    EVM chain whose own adapter is not implemented yet.

    Delegates every call to an Ethereum-compatible adapter (data therefore
    reflects the delegate's network). Kept as its own type so the registry
    shows which chains still need a real data source.
    """

    def __init__(self, chain: ChainKind, delegate: EvmAdapter) -> None:
        self.chain = chain
        self.delegate = delegate

    def validate_address(self, address: str) -> bool:
        return self.delegate.validate_address(address)

    def get_balance(self, address: str) -> str:
        logger.info(
            "stub_adapter_delegating",
            chain=self.chain.value,
            delegate=self.delegate.chain.value,
            operation="get_balance",
        )
        return self.delegate.get_balance(address)

    def get_transactions(self, address: str, limit: int = DEFAULT_TRANSACTION_LIMIT) -> list[Transaction]:
        logger.info(
            "stub_adapter_delegating",
            chain=self.chain.value,
            delegate=self.delegate.chain.value,
            operation="get_transactions",
        )
        return self.delegate.get_transactions(address, limit)

    def analyze_patterns(self, address: str) -> PatternStatistics:
        return self.delegate.analyze_patterns(address)
