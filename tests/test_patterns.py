"""
Tests for pattern statistics over a normalized transaction sample.
"""

from __future__ import annotations

import math

from conftest import make_tx


def test_empty_sample_is_all_zero():
    from backend_chainrisk.analytics.patterns import analyze_transactions

    stats = analyze_transactions([])
    assert stats.velocity == 0
    assert stats.unique_recipients == 0
    assert stats.unique_senders == 0
    assert stats.round_number_ratio == 0
    assert stats.avg_transaction_value == "0"
    assert stats.total_volume == "0"


def test_statistics_for_mixed_sample():
    from backend_chainrisk.analytics.patterns import analyze_transactions

    txs = [
        make_tx(value="1", timestamp=0, to_address="a", from_address="x"),
        make_tx(value="0.5", timestamp=3600, to_address="b", from_address="x"),
        make_tx(value="2", timestamp=3 * 3600, to_address="a", from_address="y"),
        make_tx(value="0", timestamp=6 * 3600, to_address="c", from_address="x"),
    ]
    stats = analyze_transactions(txs)

    assert stats.velocity == 2.0
    assert stats.unique_recipients == 3
    assert stats.unique_senders == 2
    # "0" is not counted as a round number
    assert stats.round_number_ratio == 0.5
    assert stats.total_volume == "3.5"
    assert stats.avg_transaction_value == "0.875"


def test_ratio_and_velocity_ignore_input_order():
    from backend_chainrisk.analytics.patterns import analyze_transactions

    txs = [
        make_tx(value="10", timestamp=100),
        make_tx(value="0.1", timestamp=7300),
        make_tx(value="3", timestamp=50),
        make_tx(value="7.25", timestamp=3650),
    ]
    forward = analyze_transactions(txs)
    backward = analyze_transactions(list(reversed(txs)))
    assert forward.velocity == backward.velocity
    assert forward.round_number_ratio == backward.round_number_ratio
    assert forward.velocity > 0


def test_single_transaction_has_zero_velocity():
    from backend_chainrisk.analytics.patterns import analyze_transactions

    stats = analyze_transactions([make_tx(value="5")])
    assert stats.velocity == 0
    assert stats.round_number_ratio == 1.0
    assert stats.total_volume == "5"


def test_unique_sets_are_case_sensitive():
    from backend_chainrisk.analytics.patterns import analyze_transactions

    stats = analyze_transactions([make_tx(to_address="0xAbC"), make_tx(to_address="0xabc")])
    assert stats.unique_recipients == 2


def test_unparseable_value_skipped_in_volume():
    from backend_chainrisk.analytics.patterns import analyze_transactions, parse_value

    assert math.isnan(parse_value("not-a-number"))
    assert math.isnan(parse_value(None))
    stats = analyze_transactions([make_tx(value="bad"), make_tx(value="4")])
    assert stats.total_volume == "4"
    assert stats.avg_transaction_value == "2"
    assert stats.round_number_ratio == 0.5


def test_format_number():
    from backend_chainrisk.analytics.patterns import format_number

    assert format_number(3.0) == "3"
    assert format_number(0.875) == "0.875"
    assert format_number(0.0) == "0"
    assert format_number(1e-05) == "0.00001"
    assert format_number(2.5e-7) == "0.00000025"
    assert format_number(1e20) == "100000000000000000000"


def test_tiny_average_is_plain_decimal():
    from backend_chainrisk.analytics.patterns import analyze_transactions

    stats = analyze_transactions([make_tx(value="0.00001"), make_tx(value="0.00001")])
    assert stats.avg_transaction_value == "0.00001"
    assert stats.total_volume == "0.00002"
