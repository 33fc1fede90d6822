"""
Tests for the Esplora-backed Bitcoin adapter with a mocked requests session.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from conftest import BTC_LEGACY_ADDRESS, BTC_SEGWIT_ADDRESS

MIRROR_A = "https://esplora-a.example/api"
MIRROR_B = "https://esplora-b.example/api"
OTHER = "1BoatSLRHtKNngkdXEeobR76b53LETtpyT"


def _response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def _session(routes):
    """Session whose get() answers by URL; values that are exceptions are raised."""
    session = MagicMock()

    def get(url, timeout=None):
        answer = routes[url]
        if isinstance(answer, Exception):
            raise answer
        return _response(answer)

    session.get.side_effect = get
    return session


def _raw(txid, vin_addr, outputs, block_time=1_700_000_000, fee=1000):
    return {
        "txid": txid,
        "vin": [{"prevout": {"scriptpubkey_address": vin_addr, "value": sum(v for _, v in outputs) + fee}}],
        "vout": [{"scriptpubkey_address": a, "value": v} for a, v in outputs],
        "status": {"confirmed": True, "block_time": block_time},
        "fee": fee,
    }


def _adapter(routes, mirrors=(MIRROR_A,)):
    from backend_chainrisk.chains.bitcoin import BitcoinAdapter

    return BitcoinAdapter(mirrors, timeout_sec=1.0, session=_session(routes))


def test_validate_address():
    from backend_chainrisk.chains.bitcoin import BitcoinAdapter

    adapter = BitcoinAdapter(session=MagicMock())
    assert adapter.validate_address(BTC_LEGACY_ADDRESS)
    assert adapter.validate_address(BTC_SEGWIT_ADDRESS)
    assert not adapter.validate_address("0x742d35cc6634c0532925a3b844bc454e4438f44e")
    assert not adapter.validate_address(None)


def test_balance_sums_chain_and_mempool():
    stats = {
        "chain_stats": {"funded_txo_sum": 300_000_000, "spent_txo_sum": 100_000_000},
        "mempool_stats": {"funded_txo_sum": 50_000_000, "spent_txo_sum": 0},
    }
    adapter = _adapter({f"{MIRROR_A}/address/{BTC_LEGACY_ADDRESS}": stats})
    assert adapter.get_balance(BTC_LEGACY_ADDRESS) == "2.5"


def test_balance_mirror_fallback_and_failure():
    from backend_chainrisk.core.exceptions import BalanceFetchError

    routes = {
        f"{MIRROR_A}/address/{BTC_LEGACY_ADDRESS}": requests.ConnectionError("down"),
        f"{MIRROR_B}/address/{BTC_LEGACY_ADDRESS}": {"chain_stats": {"funded_txo_sum": 1, "spent_txo_sum": 0}},
    }
    adapter = _adapter(routes, mirrors=(MIRROR_A, MIRROR_B))
    assert adapter.get_balance(BTC_LEGACY_ADDRESS) == "0.00000001"

    adapter = _adapter({f"{MIRROR_A}/address/{BTC_LEGACY_ADDRESS}": requests.Timeout("slow")})
    with pytest.raises(BalanceFetchError) as exc_info:
        adapter.get_balance(BTC_LEGACY_ADDRESS)
    assert exc_info.value.message == "Failed to fetch Bitcoin balance"


def test_normalize_sent_and_received():
    from backend_chainrisk.chains.bitcoin import normalize_esplora_tx

    sent = normalize_esplora_tx(
        _raw("s1", BTC_LEGACY_ADDRESS, [(OTHER, 100_000_000), (BTC_LEGACY_ADDRESS, 20_000_000)]),
        BTC_LEGACY_ADDRESS,
    )
    assert sent.from_address == BTC_LEGACY_ADDRESS
    assert sent.to_address == OTHER
    assert sent.value == "1"
    assert sent.fee == "0.00001"
    assert sent.timestamp == 1_700_000_000
    assert sent.status == "success"

    received = normalize_esplora_tx(_raw("r1", OTHER, [(BTC_LEGACY_ADDRESS, 5_000_000)]), BTC_LEGACY_ADDRESS)
    assert received.from_address == OTHER
    assert received.to_address == BTC_LEGACY_ADDRESS
    assert received.value == "0.05"


def test_get_transactions_pages_until_limit():
    first_page = [_raw(f"a{i}", OTHER, [(BTC_LEGACY_ADDRESS, 1000)], block_time=100 - i) for i in range(3)]
    second_page = [_raw(f"b{i}", OTHER, [(BTC_LEGACY_ADDRESS, 1000)], block_time=50 - i) for i in range(3)]
    routes = {
        f"{MIRROR_A}/address/{BTC_LEGACY_ADDRESS}/txs": first_page,
        f"{MIRROR_A}/address/{BTC_LEGACY_ADDRESS}/txs/chain/a2": second_page,
    }
    adapter = _adapter(routes)

    txs = adapter.get_transactions(BTC_LEGACY_ADDRESS, 5)
    assert [tx.hash for tx in txs] == ["a0", "a1", "a2", "b0", "b1"]


def test_page_failure_keeps_partial_result():
    routes = {
        f"{MIRROR_A}/address/{BTC_LEGACY_ADDRESS}/txs": [_raw("a0", OTHER, [(BTC_LEGACY_ADDRESS, 1000)])],
        f"{MIRROR_A}/address/{BTC_LEGACY_ADDRESS}/txs/chain/a0": requests.HTTPError("429"),
    }
    adapter = _adapter(routes)
    assert [tx.hash for tx in adapter.get_transactions(BTC_LEGACY_ADDRESS, 10)] == ["a0"]


def test_bad_record_skipped_and_total_failure_empty():
    routes = {f"{MIRROR_A}/address/{BTC_LEGACY_ADDRESS}/txs": [{"vin": []}]}
    adapter = _adapter(routes)
    assert adapter.get_transactions(BTC_LEGACY_ADDRESS, 1) == []

    adapter = _adapter({f"{MIRROR_A}/address/{BTC_LEGACY_ADDRESS}/txs": requests.ConnectionError("down")})
    assert adapter.get_transactions(BTC_LEGACY_ADDRESS) == []


def test_legacy_checksum_validated():
    from backend_chainrisk.chains.bitcoin import BitcoinAdapter

    adapter = BitcoinAdapter(session=MagicMock())
    assert adapter.validate_address("3J98t1WpEZ73CNmQviecrnyiWrnqRhWNLy")
    assert adapter.validate_address(OTHER)
    # one character changed: shape still matches, checksum does not
    assert not adapter.validate_address(BTC_LEGACY_ADDRESS[:-1] + "b")


def test_mempool_transaction_stamped_now():
    from backend_chainrisk.chains.bitcoin import normalize_esplora_tx

    raw = _raw("m1", OTHER, [(BTC_LEGACY_ADDRESS, 1000)])
    raw["status"] = {"confirmed": False}
    tx = normalize_esplora_tx(raw, BTC_LEGACY_ADDRESS, now=1_700_003_000)
    assert tx.timestamp == 1_700_003_000


def test_mempool_transaction_keeps_velocity_realistic():
    from unittest.mock import patch

    from backend_chainrisk.analytics.patterns import analyze_transactions

    now = 1_700_003_000
    pending = _raw("m1", OTHER, [(BTC_LEGACY_ADDRESS, 1000)])
    pending["status"] = {"confirmed": False}
    confirmed = [
        _raw(f"c{i}", OTHER, [(BTC_LEGACY_ADDRESS, 1000)], block_time=now - 600 * (i + 1)) for i in range(4)
    ]
    adapter = _adapter({f"{MIRROR_A}/address/{BTC_LEGACY_ADDRESS}/txs": [pending] + confirmed})

    with patch("backend_chainrisk.chains.bitcoin.time.time", return_value=now):
        txs = adapter.get_transactions(BTC_LEGACY_ADDRESS, 5)

    assert txs[0].timestamp == now
    assert analyze_transactions(txs).velocity < 1


def test_malformed_entries_skipped():
    routes = {
        f"{MIRROR_A}/address/{BTC_LEGACY_ADDRESS}/txs": [
            _raw("a0", OTHER, [(BTC_LEGACY_ADDRESS, 1000)]),
            "garbage",
        ],
    }
    adapter = _adapter(routes)
    assert [tx.hash for tx in adapter.get_transactions(BTC_LEGACY_ADDRESS, 10)] == ["a0"]


def test_non_list_page_is_source_failure():
    adapter = _adapter({f"{MIRROR_A}/address/{BTC_LEGACY_ADDRESS}/txs": 42})
    assert adapter.get_transactions(BTC_LEGACY_ADDRESS) == []
