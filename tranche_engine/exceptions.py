from __future__ import annotations


class TrancheEngineError(Exception):
    """Base class for every error raised by the engine."""


class InvalidAmountError(TrancheEngineError, ValueError):
    def __init__(self, name: str, value: object, reason: str = "must be a non-negative integer"):
        self.name = name
        self.value = value
        super().__init__(f"{name} {reason}, got: {value!r}")


class ZeroTotalAssetsError(TrancheEngineError, ZeroDivisionError):
    """A proportional split was requested over zero total assets."""


class StartDateLaterThanEndDateError(TrancheEngineError, ValueError):
    def __init__(self, start: int, end: int):
        self.start = start
        self.end = end
        super().__init__(f"start date {start} is later than end date {end}")


class CapacityExceededError(TrancheEngineError):
    def __init__(self, target: str, amount: int, available: int):
        self.target = target
        self.amount = amount
        self.available = available
        super().__init__(f"{target}: amount {amount} exceeds available capacity {available}")


class InputError(TrancheEngineError, ValueError):
    """The input workbook is malformed."""
