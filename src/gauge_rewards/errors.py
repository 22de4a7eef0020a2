from __future__ import annotations

from typing import Any


class GaugeRewardsError(Exception):
    """Base class for every fatal condition a run can hit."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        return {"error": self.message, "error_type": type(self).__name__}


class ConfigurationError(GaugeRewardsError):
    pass


class NotFoundError(GaugeRewardsError):
    pass


class TransientNetworkError(GaugeRewardsError):
    def __init__(self, message: str, *, retryable: bool = True) -> None:
        self.retryable = retryable
        super().__init__(message)


class InvalidBallotError(GaugeRewardsError):
    pass


class TallyMismatchError(GaugeRewardsError):
    def __init__(self, choice: str | None, expected: float, actual: float) -> None:
        self.choice = choice
        self.expected = expected
        self.actual = actual
        self.delta = actual - expected
        if choice is None:
            message = f"total votes don't add up: got {actual} but expected {expected}"
        else:
            message = (
                f"votes for choice {choice!r} don't add up: got {actual} "
                f"but expected {expected} (delta {self.delta})"
            )
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        return {
            **super().details(),
            "choice": self.choice,
            "expected": self.expected,
            "actual": self.actual,
            "delta": self.delta,
        }


class ShareSumMismatchError(GaugeRewardsError):
    def __init__(self, choice: str, total_share: float) -> None:
        self.choice = choice
        self.total_share = total_share
        super().__init__(
            f"vote shares for choice {choice!r} don't add up: got {total_share} but expected 1"
        )

    def details(self) -> dict[str, Any]:
        return {**super().details(), "choice": self.choice, "total_share": self.total_share}


class BudgetConservationError(GaugeRewardsError):
    pass
