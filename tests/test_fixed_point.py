from decimal import Decimal

import pytest

from tranche_engine.exceptions import InvalidAmountError, TrancheEngineError, ZeroTotalAssetsError
from tranche_engine.fixed_point import apply_bps, from_amount, mul_div, require_amount, require_bps, to_amount


def test_to_amount_scales_exactly():
    assert to_amount("1250.50") == 1_250_500_000
    assert to_amount(0.1) == 100_000
    assert to_amount(Decimal("3"), 18) == 3 * 10**18
    assert to_amount("1,000", 2) == 100_000


@pytest.mark.parametrize("bad", ["1.0000001", "-1", "abc", "nan", "inf"])
def test_to_amount_rejects(bad):
    with pytest.raises(InvalidAmountError):
        to_amount(bad)


def test_from_amount():
    assert from_amount(6_125_750_000) == Decimal("6125.75")
    assert from_amount(1, 18) == Decimal("1E-18")


def test_require_amount_rejects_bool_float_negative():
    for bad in (True, 1.0, -1, "5"):
        with pytest.raises(InvalidAmountError):
            require_amount(bad)
    assert require_amount(0) == 0


def test_require_bps_upper_bound():
    assert require_bps(10_000, "rate") == 10_000
    assert require_bps(25_000, "multiplier", upper=None) == 25_000
    with pytest.raises(ValueError):
        require_bps(10_001, "rate")


def test_mul_div_truncates():
    assert mul_div(10, 1, 3) == 3
    assert apply_bps(9_999, 5_000) == 4_999
    with pytest.raises(ZeroTotalAssetsError):
        mul_div(1, 1, 0)


def test_errors_share_a_base():
    assert issubclass(InvalidAmountError, TrancheEngineError)
    assert issubclass(ZeroTotalAssetsError, TrancheEngineError)
