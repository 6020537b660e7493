from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from .exceptions import InvalidAmountError, ZeroTotalAssetsError

BP_FACTOR = 10_000
DEFAULT_DECIMALS = 6


def require_amount(value: object, name: str = "amount") -> int:
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidAmountError(name, value)
    return value


def require_bps(value: object, name: str, upper: Optional[int] = BP_FACTOR) -> int:
    require_amount(value, name)
    if upper is not None and value > upper:  # type: ignore[operator]
        raise InvalidAmountError(name, value, f"must not exceed {upper} bps")
    return value  # type: ignore[return-value]


def mul_div(a: int, b: int, denominator: int) -> int:
    """a * b / denominator, truncated. Inputs are non-negative so floor == truncation."""
    if denominator == 0:
        raise ZeroTotalAssetsError(f"cannot split {a} * {b} over a zero denominator")
    return a * b // denominator


def apply_bps(amount: int, bps: int) -> int:
    return mul_div(amount, bps, BP_FACTOR)


def to_amount(value: object, decimals: int = DEFAULT_DECIMALS, name: str = "amount") -> int:
    """
    Converts a human amount ("1250.50", 1250, Decimal) into fixed-point units.
    Values carrying more precision than the scale are rejected rather than rounded.
    """
    if isinstance(value, float):
        # go through repr so 0.1 stays 0.1 instead of its binary expansion
        value = repr(value)
    try:
        d = Decimal(str(value).strip().replace(",", ""))
    except InvalidOperation:
        raise InvalidAmountError(name, value, "is not a number") from None
    if not d.is_finite():
        raise InvalidAmountError(name, value, "is not a finite number")
    scaled = d.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise InvalidAmountError(name, value, f"has more than {decimals} decimal places")
    return require_amount(int(scaled), name)


def from_amount(amount: int, decimals: int = DEFAULT_DECIMALS) -> Decimal:
    return Decimal(amount).scaleb(-decimals)
