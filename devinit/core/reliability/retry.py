"""
Retry executor — run a command until it succeeds or attempts run out.

The executor knows nothing about *what* it retries. It runs, looks at
the exit code, sleeps according to the backoff policy, and tries again.

    attempt 1 ── fail ──▶ sleep delay_for(1) ──▶ attempt 2 ── fail ──▶ ...
                                                      └── ok ──▶ return 0

After ``max_attempts`` failures it returns the last non-zero exit code.
It never raises for a failing command; the caller decides what a
failure means.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from devinit.adapters.base import CommandRunner
from devinit.core.models.command import Command
from devinit.core.models.retry import Attempt, BackoffPolicy, RetryResult
from devinit.core.observability.reporter import Reporter

logger = logging.getLogger(__name__)


class RetryExecutor:
    """Fixed-delay and exponential-backoff retry over a CommandRunner.

    Args:
        runner: Executes each attempt.
        reporter: Receives per-attempt warnings and the recovery notice.
        sleep: Blocking wait between attempts (injected for tests).
    """

    def __init__(
        self,
        runner: CommandRunner,
        reporter: Reporter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._runner = runner
        self._reporter = reporter
        self._sleep = sleep

    def run(self, command: Command, max_attempts: int, policy: BackoffPolicy) -> int:
        """Run ``command`` under ``policy``; return the final exit code."""
        return self.run_with_history(command, max_attempts, policy).exit_code

    def run_with_history(
        self,
        command: Command,
        max_attempts: int,
        policy: BackoffPolicy,
    ) -> RetryResult:
        """Same as :meth:`run` but also returns every Attempt."""
        return self._loop(
            lambda: self._runner.run(command),
            max_attempts,
            policy,
            label=command.display,
        )

    def call(
        self,
        fn: Callable[[], int],
        max_attempts: int,
        policy: BackoffPolicy,
        label: str = "operation",
    ) -> int:
        """Retry any callable that returns an exit code."""
        return self._loop(fn, max_attempts, policy, label=label).exit_code

    def _loop(
        self,
        fn: Callable[[], int],
        max_attempts: int,
        policy: BackoffPolicy,
        label: str,
    ) -> RetryResult:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

        logger.debug("Retrying %s: up to %d attempts, %s", label, max_attempts, policy.describe())
        result = RetryResult()
        for index in range(1, max_attempts + 1):
            delay = policy.delay_for(index)
            self._reporter.debug(
                f"Attempt {index}/{max_attempts} (delay: {delay:g}s): {label}"
            )

            exit_code = fn()
            if exit_code == 0:
                result.attempts.append(Attempt(index, max_attempts, 0.0, 0))
                result.exit_code = 0
                if result.recovered:
                    self._reporter.success(f"Command succeeded on attempt {index}")
                return result

            result.exit_code = exit_code
            if index < max_attempts:
                result.attempts.append(Attempt(index, max_attempts, delay, exit_code))
                self._reporter.warning(
                    f"Command failed (exit code: {exit_code}), retrying in {delay:g}s... "
                    f"(attempt {index}/{max_attempts})"
                )
                self._sleep(delay)
            else:
                result.attempts.append(Attempt(index, max_attempts, 0.0, exit_code))
                self._reporter.error(f"Command failed after {max_attempts} attempts")

        logger.debug(
            "Gave up on %s with exit code %d after waiting %gs",
            label, result.exit_code, sum(result.delays),
        )
        return result
