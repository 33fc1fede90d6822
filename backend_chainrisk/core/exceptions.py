"""
Application-level exceptions.

Input errors (missing, malformed, unresolvable address) are surfaced to the
caller immediately and never retried. Upstream errors carry the chain and
source for logging. AnalysisFailedError wraps the underlying cause; its
message is safe to show end users, the cause is for logs only.
"""

from __future__ import annotations


class ChainRiskError(Exception):
    """Base class. `code` is a stable machine-readable key, `message` is user-safe."""

    code = "chainrisk_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InputError(ChainRiskError):
    code = "input_error"


class AddressRequiredError(InputError):
    code = "address_required"

    def __init__(self) -> None:
        super().__init__("address required")


class ChainUndetectedError(InputError):
    code = "chain_undetected"

    def __init__(self) -> None:
        super().__init__("could not detect chain, specify explicitly")


class UnsupportedChainError(InputError):
    code = "unsupported_chain"

    def __init__(self, chain: str | None = None) -> None:
        if chain:
            super().__init__(f"unsupported chain: {chain}")
        else:
            super().__init__("unsupported or invalid address")
        self.chain = chain


class InvalidAddressError(InputError):
    code = "invalid_address"

    def __init__(self, chain_name: str) -> None:
        super().__init__(f"invalid address for {chain_name}")
        self.chain_name = chain_name


class UpstreamError(ChainRiskError):
    """A chain data source failed (network, timeout, rate limit, malformed response)."""

    code = "upstream_error"

    def __init__(self, message: str, chain: str | None = None, source: str | None = None) -> None:
        super().__init__(message)
        self.chain = chain
        self.source = source


class BalanceFetchError(UpstreamError):
    """Every balance source for a chain failed."""

    code = "balance_fetch_failed"

    def __init__(self, chain_name: str, chain: str | None = None) -> None:
        super().__init__(f"Failed to fetch {chain_name} balance", chain=chain)
        self.chain_name = chain_name


class AnalysisFailedError(ChainRiskError):
    code = "analysis_failed"

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__("analysis failed")
        self.cause = cause
