"""
Retry models — backoff policies and attempt records.

Backoff:
    FixedBackoff        → every retry waits ``delay``.
    ExponentialBackoff  → retry k waits ``initial_delay * multiplier**(k-1)``.

``retry`` is 1-based: the wait after the first failed attempt is retry 1.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class FixedBackoff:
    """Constant delay between attempts."""

    delay: float

    def __post_init__(self) -> None:
        if self.delay < 0:
            raise ValueError(f"delay must be >= 0, got {self.delay}")

    def delay_for(self, retry: int) -> float:
        return self.delay

    def describe(self) -> str:
        return f"fixed {self.delay:g}s"


@dataclass(frozen=True)
class ExponentialBackoff:
    """Delay that doubles (by default) after every failed attempt."""

    initial_delay: float
    multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.initial_delay < 0:
            raise ValueError(f"initial_delay must be >= 0, got {self.initial_delay}")
        if self.multiplier < 1:
            raise ValueError(f"multiplier must be >= 1, got {self.multiplier}")

    def delay_for(self, retry: int) -> float:
        return self.initial_delay * (self.multiplier ** (retry - 1))

    def describe(self) -> str:
        return f"exponential from {self.initial_delay:g}s (x{self.multiplier:g})"


BackoffPolicy = FixedBackoff | ExponentialBackoff


@dataclass(frozen=True)
class Attempt:
    """One execution of a command under a retry policy.

    ``delay`` is the wait scheduled *after* this attempt (0 when the
    attempt succeeded or was the last one).
    """

    index: int
    max_attempts: int
    delay: float = 0.0
    last_exit_code: int = 0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if not 1 <= self.index <= self.max_attempts:
            raise ValueError(
                f"attempt index {self.index} outside 1..{self.max_attempts}"
            )

    @property
    def succeeded(self) -> bool:
        return self.last_exit_code == 0

    @property
    def is_last(self) -> bool:
        return self.index >= self.max_attempts

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "max_attempts": self.max_attempts,
            "delay": self.delay,
            "exit_code": self.last_exit_code,
        }


@dataclass
class RetryResult:
    """Outcome of a retried execution: final exit code plus history."""

    exit_code: int = 0
    attempts: list[Attempt] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def recovered(self) -> bool:
        """Succeeded, but not on the first attempt."""
        return self.ok and len(self.attempts) > 1

    @property
    def delays(self) -> list[float]:
        """Waits that were scheduled between attempts, in order."""
        return [a.delay for a in self.attempts if not a.succeeded and not a.is_last]

    def to_dict(self) -> dict[str, Any]:
        return {
            "exit_code": self.exit_code,
            "attempts": [a.to_dict() for a in self.attempts],
        }
