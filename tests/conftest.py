"""
Pytest fixtures for ChainRisk tests. No network: adapters are fakes or get
mocked sessions / RPC clients.
"""

from __future__ import annotations

import pytest

# Configure structlog while sys.stdout is still the session-wide stream, not a per-test capsys buffer
import backend_chainrisk.chainrisk_logging  # noqa: F401,E402

VALID_WALLET = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
EVM_ADDRESS = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
BTC_LEGACY_ADDRESS = "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"
BTC_SEGWIT_ADDRESS = "bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq"


def make_tx(
    value: str = "1",
    timestamp: int = 1_700_000_000,
    to_address: str = "recipient",
    from_address: str = "sender",
    status: str = "success",
    chain=None,
    tx_hash: str | None = None,
):
    from backend_chainrisk.chains.models import ChainKind, Transaction

    return Transaction(
        hash=tx_hash or f"tx-{timestamp}-{to_address}",
        from_address=from_address,
        to_address=to_address,
        value=value,
        timestamp=timestamp,
        chain=chain or ChainKind.ETHEREUM,
        status=status,
    )


class FakeAdapter:
    """In-memory ChainAdapter. Records calls; raises `error` from get_balance when set."""

    def __init__(self, chain, balance="1.5", transactions=None, valid=True, error=None):
        self.chain = chain
        self.balance = balance
        self.transactions = list(transactions or [])
        self.valid = valid
        self.error = error
        self.calls: list[tuple] = []

    def validate_address(self, address):
        self.calls.append(("validate_address", address))
        return self.valid

    def get_balance(self, address):
        self.calls.append(("get_balance", address))
        if self.error is not None:
            raise self.error
        return self.balance

    def get_transactions(self, address, limit=10):
        self.calls.append(("get_transactions", address, limit))
        return self.transactions[:limit]

    def analyze_patterns(self, address):
        from backend_chainrisk.analytics.patterns import analyze_transactions

        self.calls.append(("analyze_patterns", address))
        return analyze_transactions(self.get_transactions(address, 50))


@pytest.fixture
def settings():
    from backend_chainrisk.config.settings import Settings

    return Settings(http_timeout_sec=1.0)


@pytest.fixture
def fake_adapters():
    """One FakeAdapter per chain, keyed by ChainKind."""
    from backend_chainrisk.chains.models import ChainKind

    return {kind: FakeAdapter(kind) for kind in ChainKind}


@pytest.fixture
def fake_registry(fake_adapters):
    from backend_chainrisk.chains.registry import AdapterRegistry

    return AdapterRegistry(fake_adapters)


@pytest.fixture
def pipeline(fake_registry, settings):
    from backend_chainrisk.analytics.analysis_pipeline import AnalysisPipeline

    return AnalysisPipeline(fake_registry, settings)


@pytest.fixture
def client(pipeline):
    """FastAPI TestClient with the pipeline dependency pointed at fake adapters."""
    from fastapi.testclient import TestClient

    from backend_chainrisk.api_server.server import app, get_pipeline

    app.dependency_overrides[get_pipeline] = lambda: pipeline
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
