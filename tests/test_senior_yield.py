from datetime import datetime

import pytest

from tranche_engine.pool_calendar import to_timestamp
from tranche_engine.senior_yield import SeniorYieldTracker


def ts(*args):
    return to_timestamp(datetime(*args))


def test_start_anchors_at_next_day():
    t = SeniorYieldTracker.start(360_000, ts(2026, 1, 1, 15, 30))

    assert t.last_updated_date == ts(2026, 1, 2)
    assert t.unpaid_yield == 0
    assert t.senior_debt == 360_000


def test_accrues_whole_days_on_30_360():
    t = SeniorYieldTracker.start(360_000, ts(2026, 1, 1))
    t = t.accrue(ts(2026, 1, 31, 12), 1_000)

    # Jan 2 -> Feb 1 is 29 days: 360_000 * 29 * 1000 / (360 * 10_000)
    assert t.unpaid_yield == 2_900
    assert t.last_updated_date == ts(2026, 2, 1)


def test_accrue_twice_in_one_day_is_a_noop():
    t = SeniorYieldTracker.start(360_000, ts(2026, 1, 1)).accrue(ts(2026, 1, 31, 1), 1_000)

    assert t.accrue(ts(2026, 1, 31, 23, 59), 1_000) == t


def test_accrue_with_backwards_clock_is_a_noop():
    t = SeniorYieldTracker.start(360_000, ts(2026, 3, 1))

    assert t.accrue(ts(2026, 2, 1), 1_000) == t


def test_unstarted_tracker_only_anchors():
    t = SeniorYieldTracker(senior_debt=1_000_000).accrue(ts(2026, 5, 5), 1_000)

    assert t.unpaid_yield == 0
    assert t.last_updated_date == ts(2026, 5, 6)


def test_pay_reduces_unpaid_and_rebases_debt():
    t = SeniorYieldTracker(senior_debt=100, unpaid_yield=50, last_updated_date=ts(2026, 1, 2))
    t = t.pay(30, 130)

    assert t.unpaid_yield == 20
    assert t.senior_debt == 130


def test_pay_more_than_accrued_raises():
    t = SeniorYieldTracker(senior_debt=100, unpaid_yield=5, last_updated_date=ts(2026, 1, 2))

    with pytest.raises(ValueError):
        t.pay(6, 106)


def test_refresh_accrues_on_old_debt_then_rebases():
    t = SeniorYieldTracker.start(360_000, ts(2026, 1, 1))
    t = t.refresh(ts(2026, 1, 31), 1_000, 500_000)

    assert t.unpaid_yield == 2_900
    assert t.senior_debt == 500_000


def test_change_rate_locks_in_yield_at_old_rate():
    t = SeniorYieldTracker.start(360_000, ts(2026, 1, 1))
    t = t.change_rate(ts(2026, 1, 31), 1_000)
    t = t.accrue(ts(2026, 2, 28, 12), 2_000)

    # 29 days at 10%, then Feb 1 -> Mar 1 (30 days) at 20%
    assert t.unpaid_yield == 2_900 + 6_000


def test_negative_debt_rejected():
    with pytest.raises(ValueError):
        SeniorYieldTracker(senior_debt=-1)
