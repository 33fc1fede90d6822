"""
Analysis pipeline: resolve chain -> validate -> fetch -> patterns -> dual scores.

Single entrypoint for the API and CLI. Balance and the transaction sample are
fetched concurrently; by default patterns are derived from that same sample
instead of a second transaction fetch. Returns an AnalysisResult whose
transaction list is truncated for display.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from backend_chainrisk.analytics.investigator_risk import calculate_investigator_risk
from backend_chainrisk.analytics.models import AnalysisResult, KnownInteractions
from backend_chainrisk.analytics.patterns import analyze_transactions
from backend_chainrisk.analytics.user_safety import calculate_user_safety
from backend_chainrisk.chains.base import ChainAdapter
from backend_chainrisk.chains.detector import (
    detect_chain,
    get_chain_currency,
    get_chain_name,
    parse_chain_kind,
)
from backend_chainrisk.chains.models import ChainKind, PatternStatistics, Transaction
from backend_chainrisk.chains.registry import AdapterRegistry, build_default_registry
from backend_chainrisk.chainrisk_logging import get_logger, short_address
from backend_chainrisk.config.settings import Settings, get_settings
from backend_chainrisk.core.exceptions import (
    AddressRequiredError,
    AnalysisFailedError,
    ChainUndetectedError,
    InvalidAddressError,
    UnsupportedChainError,
)

logger = get_logger(__name__)

FETCH_WORKERS = 3


class AnalysisPipeline:
    """Runs one address analysis end to end. Stateless between calls."""

    def __init__(self, registry: AdapterRegistry, settings: Settings | None = None) -> None:
        self.registry = registry
        self.settings = settings or Settings()

    def _resolve_chain(self, address: str, chain_hint: ChainKind | str | None) -> ChainKind:
        if chain_hint is not None and chain_hint != "":
            chain = parse_chain_kind(chain_hint)
            if chain is None:
                raise UnsupportedChainError(str(chain_hint))
            return chain
        chain = detect_chain(address)
        if chain is None:
            raise ChainUndetectedError()
        return chain

    def _fetch(
        self, adapter: ChainAdapter, address: str
    ) -> tuple[str, list[Transaction], PatternStatistics]:
        sample_size = self.settings.pattern_sample_size
        executor = ThreadPoolExecutor(max_workers=FETCH_WORKERS, thread_name_prefix="chainrisk-fetch")
        futures: list[Future[Any]] = []
        try:
            balance_f = executor.submit(adapter.get_balance, address)
            txs_f = executor.submit(adapter.get_transactions, address, sample_size)
            futures = [balance_f, txs_f]
            patterns_f = None
            if not self.settings.share_transaction_fetch:
                patterns_f = executor.submit(adapter.analyze_patterns, address)
                futures.append(patterns_f)

            balance = balance_f.result()
            transactions = list(txs_f.result())
            if patterns_f is not None:
                patterns = patterns_f.result()
            else:
                patterns = analyze_transactions(transactions)
            return balance, transactions, patterns
        finally:
            for f in futures:
                f.cancel()
            executor.shutdown(wait=False, cancel_futures=True)

    def analyze(self, address: str | None, chain_hint: ChainKind | str | None = None) -> AnalysisResult:
        """
        Analyze one address. Raises InputError subclasses for bad input and
        AnalysisFailedError (cause attached) when the data fetch fails.
        """
        address = (address or "").strip()
        if not address:
            raise AddressRequiredError()

        chain = self._resolve_chain(address, chain_hint)
        adapter = self.registry.resolve(address, chain)
        if adapter is None:
            raise UnsupportedChainError()

        chain_name = get_chain_name(chain)
        if not adapter.validate_address(address):
            logger.info("analysis_invalid_address", chain=chain.value, address=short_address(address))
            raise InvalidAddressError(chain_name)

        logger.info("analysis_start", chain=chain.value, address=short_address(address))
        try:
            balance, transactions, patterns = self._fetch(adapter, address)
        except Exception as e:
            logger.exception(
                "analysis_fetch_failed",
                chain=chain.value,
                address=short_address(address),
                error=str(e),
            )
            raise AnalysisFailedError(e) from e

        investigator_risk = calculate_investigator_risk(balance, transactions, patterns)
        user_safety = calculate_user_safety(balance, transactions, patterns)

        result = AnalysisResult(
            address=address,
            chain=chain,
            chain_name=chain_name,
            currency=get_chain_currency(chain),
            balance=balance,
            transaction_count=len(transactions),
            investigator_risk=investigator_risk,
            user_safety=user_safety,
            patterns=patterns,
            transactions=tuple(transactions[: self.settings.display_transaction_limit]),
            known_interactions=KnownInteractions(),
        )
        logger.info(
            "analysis_done",
            chain=chain.value,
            address=short_address(address),
            transaction_count=result.transaction_count,
            investigator_score=investigator_risk.score,
            investigator_level=investigator_risk.level,
            safety_score=user_safety.score,
            safety_level=user_safety.level,
        )
        return result


def build_pipeline(settings: Settings | None = None) -> AnalysisPipeline:
    """Fresh registry + pipeline from settings (env when omitted)."""
    settings = settings or get_settings()
    return AnalysisPipeline(build_default_registry(settings), settings)


def run_address_analysis(
    address: str,
    chain_hint: ChainKind | str | None = None,
    settings: Settings | None = None,
) -> dict[str, Any]:
    """Run full analysis for one address and return the serialized AnalysisResult."""
    return build_pipeline(settings).analyze(address, chain_hint).to_dict()
