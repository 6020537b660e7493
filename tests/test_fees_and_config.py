import pytest

from tranche_engine.config import PoolConfig
from tranche_engine.fees import FeeSchedule, distribute_fees, profit_after_fees
from tranche_engine.models import FirstLossCoverConfig
from tranche_engine.tranches_policy import RISK_ADJUSTED, FixedSeniorYieldPolicy, RiskAdjustedPolicy


def test_fees_come_off_the_top():
    dist = distribute_fees(10_000, FeeSchedule(100, 200, 100))

    assert (dist.protocol_fee, dist.pool_owner_reward, dist.ea_reward) == (100, 200, 100)
    assert dist.total_fees == 400
    assert dist.profit_after_fees == 9_600
    assert list(dist.as_steps()) == ["Fee: Protocol", "Fee: Pool Owner Reward", "Fee: Evaluation Agent Reward"]


def test_fee_truncation_leaves_remainder_in_profit():
    assert profit_after_fees(99, FeeSchedule(100, 100, 100)) == 99
    assert profit_after_fees(0, FeeSchedule(100, 100, 100)) == 0


def test_fees_over_100_percent_rejected():
    with pytest.raises(ValueError):
        FeeSchedule(5_000, 5_000, 1)


def test_policy_selection():
    assert PoolConfig(fixed_senior_yield_bps=800).policy() == FixedSeniorYieldPolicy(800)
    assert PoolConfig(tranches_policy=RISK_ADJUSTED, tranches_risk_adjustment_bps=1_500).policy() == (
        RiskAdjustedPolicy(1_500)
    )


def test_unknown_policy_rejected():
    with pytest.raises(ValueError):
        PoolConfig(tranches_policy="waterfall_of_dreams")


def test_cover_names_must_be_unique():
    with pytest.raises(ValueError):
        PoolConfig(first_loss_covers=(FirstLossCoverConfig("a"), FirstLossCoverConfig("a")))


def test_cover_index():
    cfg = PoolConfig(first_loss_covers=(FirstLossCoverConfig("borrower"), FirstLossCoverConfig("admin")))

    assert cfg.cover_index("admin") == 1
    with pytest.raises(KeyError):
        cfg.cover_index("insurer")
