"""Edge scorer unit tests (clock frozen via explicit `now`)."""

import pytest

from conftest import NOW, make_snapshot, recent
from edgewatch.edges.scorer import calculate_edge_score, determine_edge_type, score
from edgewatch.models import EdgeType


def test_balanced_old_quiet_market_scores_zero():
    s, tags = score(make_snapshot(), NOW)
    assert s == 0
    assert tags == ()


def test_mispricing_scores_deviation_times_100():
    s, tags = score(make_snapshot(yes_price=0.5, no_price=0.53), NOW)
    assert s == pytest.approx(3.0)
    assert tags == (EdgeType.MISPRICING,)


def test_deviation_at_threshold_is_not_mispricing():
    s, tags = score(make_snapshot(yes_price=0.5, no_price=0.51), NOW)
    assert s == 0
    assert tags == ()


def test_extreme_price_without_mispricing():
    s, tags = score(make_snapshot(yes_price=0.97, no_price=0.03), NOW)
    assert s == 15
    assert tags == (EdgeType.EXTREME,)


def test_low_yes_price_is_extreme():
    s, tags = score(make_snapshot(yes_price=0.02, no_price=0.98), NOW)
    assert s == 15
    assert tags == (EdgeType.EXTREME,)


def test_catalyst_illiquid_but_active():
    s, tags = score(make_snapshot(liquidity=3000, volume_24h=15000), NOW)
    assert s == 25
    assert tags == (EdgeType.CATALYST,)


def test_volume_anomaly_high_turnover():
    s, tags = score(make_snapshot(liquidity=11000, volume_24h=60000), NOW)
    assert s == 20
    assert tags == (EdgeType.VOLUME_ANOMALY,)


def test_volume_anomaly_needs_ratio_above_5():
    s, tags = score(make_snapshot(liquidity=20000, volume_24h=60000), NOW)
    assert s == 0
    assert tags == ()


def test_zero_liquidity_never_divides():
    # No anomaly from the ratio; the catalyst signal still applies
    s, tags = score(make_snapshot(liquidity=0, volume_24h=1_000_000), NOW)
    assert s == 25
    assert tags == (EdgeType.CATALYST,)


def test_catalyst_and_volume_anomaly_never_co_occur():
    values = [0, 1000, 4999, 5000, 9999, 10000, 10001, 20000, 50001, 60000, 250000, 1_000_000]
    for volume in values:
        for liquidity in values:
            tags = determine_edge_type(make_snapshot(volume_24h=volume, liquidity=liquidity), NOW)
            assert not (EdgeType.CATALYST in tags and EdgeType.VOLUME_ANOMALY in tags), (volume, liquidity)


def test_volume_anomaly_tag_matches_its_score_contribution():
    values = [0, 4999, 10001, 20000, 50001, 60000, 100001, 250000]
    for volume in values:
        for liquidity in values:
            snap = make_snapshot(volume_24h=volume, liquidity=liquidity)
            tagged = EdgeType.VOLUME_ANOMALY in determine_edge_type(snap, NOW)
            catalyst = 25 if EdgeType.CATALYST in determine_edge_type(snap, NOW) else 0
            scored = calculate_edge_score(snap, NOW) - catalyst == 20
            assert tagged == scored, (volume, liquidity)


def test_new_market_within_48h():
    s, tags = score(make_snapshot(created_at=recent(hours=10)), NOW)
    assert s == 10
    assert tags == (EdgeType.NEW_MARKET,)


def test_market_older_than_48h_is_not_new():
    s, tags = score(make_snapshot(created_at=recent(hours=49)), NOW)
    assert s == 0
    assert tags == ()


def test_missing_created_at_is_not_new():
    s, tags = score(make_snapshot(created_at=None), NOW)
    assert s == 0
    assert tags == ()


def test_tag_order_is_emission_order_not_score_order():
    snap = make_snapshot(
        yes_price=0.97,
        no_price=0.10,
        liquidity=1000,
        volume_24h=20000,
        created_at=recent(hours=1),
    )
    s, tags = score(snap, NOW)
    # 7 (mispricing) + 15 (extreme) + 25 (catalyst) + 10 (new)
    assert s == pytest.approx(57.0)
    assert tags == (EdgeType.MISPRICING, EdgeType.EXTREME, EdgeType.CATALYST, EdgeType.NEW_MARKET)


def test_volume_anomaly_tagged_before_new_market():
    snap = make_snapshot(liquidity=11000, volume_24h=60000, created_at=recent(hours=1))
    s, tags = score(snap, NOW)
    assert s == 30
    assert tags == (EdgeType.VOLUME_ANOMALY, EdgeType.NEW_MARKET)


def test_score_is_deterministic_and_non_negative():
    snaps = [
        make_snapshot(yes_price=y, no_price=n, volume_24h=v, liquidity=l)
        for y, n in [(0.5, 0.5), (0.1, 0.95), (0.99, 0.0), (0.0, 0.0)]
        for v, l in [(0, 0), (15000, 3000), (60000, 11000)]
    ]
    for snap in snaps:
        first = score(snap, NOW)
        assert first == score(snap, NOW)
        assert first[0] >= 0
