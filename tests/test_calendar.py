from datetime import datetime

import pytest

from tranche_engine.exceptions import StartDateLaterThanEndDateError
from tranche_engine.pool_calendar import (
    PayPeriodDuration,
    days_diff,
    days_in_full_period,
    days_remaining_in_period,
    num_periods_passed,
    start_date_of_next_period,
    start_date_of_period,
    start_of_day,
    start_of_next_day,
    to_timestamp,
)


def ts(*args):
    return to_timestamp(datetime(*args))


@pytest.mark.parametrize(
    "start, end, expected",
    [
        ((2024, 1, 30), (2024, 1, 31), 0),
        ((2024, 1, 28), (2024, 1, 31), 2),
        ((2024, 1, 14), (2024, 1, 27), 13),
        ((2024, 1, 31), (2024, 2, 28), 28),
        ((2024, 1, 30), (2024, 3, 31), 60),
        ((2024, 1, 31), (2024, 3, 31), 60),
        ((2024, 1, 14), (2024, 3, 27), 73),
        ((2024, 1, 14), (2025, 3, 27), 433),
        ((2024, 5, 5), (2024, 5, 5), 0),
    ],
)
def test_days_diff_30_360(start, end, expected):
    assert days_diff(ts(*start), ts(*end)) == expected


def test_days_diff_start_after_end_raises():
    with pytest.raises(StartDateLaterThanEndDateError):
        days_diff(ts(2024, 1, 31), ts(2024, 1, 30))


def test_day_boundaries():
    t = ts(2024, 3, 9, 17, 45, 12)

    assert start_of_day(t) == ts(2024, 3, 9)
    assert start_of_next_day(t) == ts(2024, 3, 10)
    assert start_of_next_day(ts(2024, 12, 31)) == ts(2025, 1, 1)


def test_start_date_of_period():
    assert start_date_of_period(PayPeriodDuration.MONTHLY, ts(2024, 5, 17)) == ts(2024, 5, 1)
    assert start_date_of_period(PayPeriodDuration.QUARTERLY, ts(2024, 5, 17)) == ts(2024, 4, 1)
    assert start_date_of_period(PayPeriodDuration.SEMI_ANNUALLY, ts(2024, 8, 1)) == ts(2024, 7, 1)


def test_start_date_of_next_period_rolls_year():
    assert start_date_of_next_period(PayPeriodDuration.MONTHLY, ts(2024, 12, 15)) == ts(2025, 1, 1)
    assert start_date_of_next_period(PayPeriodDuration.QUARTERLY, ts(2024, 11, 2)) == ts(2025, 1, 1)


def test_days_in_full_period():
    assert days_in_full_period(PayPeriodDuration.MONTHLY) == 30
    assert days_in_full_period(PayPeriodDuration.QUARTERLY) == 90
    assert days_in_full_period(PayPeriodDuration.SEMI_ANNUALLY) == 180


def test_days_remaining_in_period():
    assert days_remaining_in_period(PayPeriodDuration.MONTHLY, ts(2024, 1, 10)) == 21


def test_num_periods_passed():
    assert num_periods_passed(PayPeriodDuration.MONTHLY, ts(2024, 1, 15), ts(2024, 2, 1)) == 1
    assert num_periods_passed(PayPeriodDuration.QUARTERLY, ts(2024, 1, 15), ts(2024, 12, 31)) == 3
    assert num_periods_passed(PayPeriodDuration.MONTHLY, ts(2024, 1, 1), ts(2024, 1, 31)) == 0


def test_pay_period_parse():
    assert PayPeriodDuration.parse("monthly") is PayPeriodDuration.MONTHLY
    assert PayPeriodDuration.parse("Semi-Annually") is PayPeriodDuration.SEMI_ANNUALLY
    with pytest.raises(ValueError):
        PayPeriodDuration.parse("weekly")
