import pytest

from tranche_engine.first_loss_cover import (
    add_profit,
    available_cover,
    deposit_capacity,
    is_sufficient,
    payout_yield,
    risk_weighted_assets,
    split_junior_profit,
)
from tranche_engine.models import FirstLossCoverConfig, FirstLossCoverState


def cover(asset, multiplier_bps=0, **kwargs):
    return FirstLossCoverState(
        FirstLossCoverConfig(f"c{asset}-{multiplier_bps}", risk_yield_multiplier_bps=multiplier_bps, **kwargs),
        asset=asset,
    )


def test_split_by_risk_weight():
    junior, covers = split_junior_profit(1_000, 100_000, [cover(50_000, 20_000), cover(10_000, 0)])

    assert covers == (500, 0)
    assert junior == 500


def test_truncation_remainder_stays_with_junior():
    junior, covers = split_junior_profit(10, 1, [cover(1, 10_000), cover(1, 10_000)])

    assert covers == (3, 3)
    assert junior == 4


def test_all_zero_weights_give_everything_to_junior():
    junior, covers = split_junior_profit(700, 0, [cover(0, 10_000), cover(5_000, 0)])

    assert junior == 700
    assert covers == (0, 0)


def test_no_covers():
    assert split_junior_profit(123, 456, []) == (123, ())


def test_risk_weighted_assets():
    assert risk_weighted_assets(cover(50_000, 20_000)) == 100_000
    assert risk_weighted_assets(cover(3, 5_000)) == 1


def test_available_cover_is_min_of_rate_cap_and_assets():
    c = cover(50_000, cover_rate_per_loss_bps=5_000, cover_cap_per_loss=20_000)

    assert available_cover(c, 10_000) == 5_000
    assert available_cover(c, 100_000) == 20_000
    assert available_cover(cover(1_000, cover_rate_per_loss_bps=10_000, cover_cap_per_loss=20_000), 5_000) == 1_000


def test_payout_yield_above_liquidity_cap():
    c = cover(70_000, max_liquidity=60_000)
    new, paid = payout_yield(c)

    assert paid == 10_000
    assert new.asset == 60_000


def test_no_payout_without_cap_or_below_it():
    assert payout_yield(cover(70_000)) == (cover(70_000), 0)
    assert payout_yield(cover(50_000, max_liquidity=60_000))[1] == 0


def test_deposit_capacity():
    assert deposit_capacity(cover(50_000, max_liquidity=60_000)) == 10_000
    assert deposit_capacity(cover(70_000, max_liquidity=60_000)) == 0
    assert deposit_capacity(cover(50_000)) is None


def test_is_sufficient():
    assert is_sufficient(cover(10_000, min_liquidity=10_000))
    assert not is_sufficient(cover(9_999, min_liquidity=10_000))


def test_add_profit():
    assert add_profit(cover(10), 5).asset == 15
    with pytest.raises(ValueError):
        add_profit(cover(10), -1)
