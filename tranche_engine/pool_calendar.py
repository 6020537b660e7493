"""
30/360 calendar used for yield accrual and pay-period bookkeeping.

All timestamps are integer UTC unix seconds. A "date" is a timestamp that
falls on 00:00 UTC.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from dateutil.relativedelta import relativedelta

from .exceptions import StartDateLaterThanEndDateError

SECONDS_IN_A_DAY = 24 * 60 * 60
DAYS_IN_A_MONTH = 30
DAYS_IN_A_YEAR = 360


class PayPeriodDuration(Enum):
    MONTHLY = 1
    QUARTERLY = 3
    SEMI_ANNUALLY = 6

    @property
    def months(self) -> int:
        return self.value

    @classmethod
    def parse(cls, value: object) -> "PayPeriodDuration":
        if isinstance(value, cls):
            return value
        key = str(value).strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown pay period duration: {value!r}") from None


def to_datetime(ts: int) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def to_timestamp(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def start_of_day(ts: int) -> int:
    return ts - ts % SECONDS_IN_A_DAY


def start_of_next_day(ts: int) -> int:
    return start_of_day(ts) + SECONDS_IN_A_DAY


def days_diff(start: int, end: int) -> int:
    """
    Number of days between two timestamps under the 30/360 convention.
    The 31st of a month counts as the 30th, on either end.
    """
    if start > end:
        raise StartDateLaterThanEndDateError(start, end)
    s = to_datetime(start)
    e = to_datetime(end)
    start_day = min(s.day, DAYS_IN_A_MONTH)
    end_day = min(e.day, DAYS_IN_A_MONTH)
    return (
        (e.year - s.year) * DAYS_IN_A_YEAR
        + (e.month - s.month) * DAYS_IN_A_MONTH
        + (end_day - start_day)
    )


def start_date_of_period(duration: PayPeriodDuration, ts: int) -> int:
    dt = to_datetime(ts)
    month = (dt.month - 1) // duration.months * duration.months + 1
    return to_timestamp(datetime(dt.year, month, 1, tzinfo=timezone.utc))


def start_date_of_next_period(duration: PayPeriodDuration, ts: int) -> int:
    start = to_datetime(start_date_of_period(duration, ts))
    return to_timestamp(start + relativedelta(months=duration.months))


def days_in_full_period(duration: PayPeriodDuration) -> int:
    return duration.months * DAYS_IN_A_MONTH


def days_remaining_in_period(duration: PayPeriodDuration, ts: int) -> int:
    return days_diff(ts, start_date_of_next_period(duration, ts))


def num_periods_passed(duration: PayPeriodDuration, start: int, end: int) -> int:
    if start > end:
        raise StartDateLaterThanEndDateError(start, end)
    delta = relativedelta(
        to_datetime(start_date_of_period(duration, end)),
        to_datetime(start_date_of_period(duration, start)),
    )
    return (delta.years * 12 + delta.months) // duration.months
