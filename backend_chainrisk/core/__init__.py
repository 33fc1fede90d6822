"""
Core utilities: exceptions and cross-cutting concerns shared by chains,
analytics, API server and tools.
"""

from backend_chainrisk.core.exceptions import (
    AddressRequiredError,
    AnalysisFailedError,
    BalanceFetchError,
    ChainRiskError,
    ChainUndetectedError,
    InputError,
    InvalidAddressError,
    UnsupportedChainError,
    UpstreamError,
)

__all__ = [
    "AddressRequiredError",
    "AnalysisFailedError",
    "BalanceFetchError",
    "ChainRiskError",
    "ChainUndetectedError",
    "InputError",
    "InvalidAddressError",
    "UnsupportedChainError",
    "UpstreamError",
]
