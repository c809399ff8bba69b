"""
L4 Execution — apt-get with lock-contention handling.

Each attempt first waits for the dpkg/apt locks to be free:

    poll every 2s ──▶ all free? ──▶ run apt-get
         │
         └── 60s of contention ──▶ FORCE UNLOCK ──▶ run apt-get anyway

A failed attempt triggers a best-effort repair (index refresh +
``dpkg --configure -a``) before the fixed 10s pause and the next try.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from devinit.adapters.base import CommandRunner
from devinit.core.models.command import Command
from devinit.core.models.settings import BootstrapSettings
from devinit.core.observability.reporter import Reporter
from devinit.core.services.bootstrap.detection.locks import LockProbe, sudo_prefix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LockWaitResult:
    """How long we waited for the locks, and whether we gave up and forced them."""

    waited: float = 0.0
    forced: bool = False


class LockAwareInstaller:
    """Run ``apt-get <args>`` with lock waiting, repair and retries."""

    def __init__(
        self,
        runner: CommandRunner,
        reporter: Reporter,
        settings: BootstrapSettings | None = None,
        lock_probe: LockProbe | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._runner = runner
        self._reporter = reporter
        self._settings = settings or BootstrapSettings()
        self._locks = lock_probe or LockProbe(runner)
        self._sleep = sleep

    def is_available(self) -> bool:
        return self._runner.has("apt-get")

    def _privileged(self, *argv: str) -> Command:
        return Command.of(*argv).with_prefix(*sudo_prefix())

    def install(self, args: Sequence[str]) -> int:
        """Run ``apt-get`` with ``args``; return its final exit code."""
        max_attempts = self._settings.install_attempts
        delay = self._settings.install_retry_delay
        command = self._privileged("apt-get", *args)
        exit_code = 0

        for attempt in range(1, max_attempts + 1):
            self._reporter.debug(f"apt-get attempt {attempt}/{max_attempts}: {' '.join(args)}")

            self.wait_for_locks()

            exit_code = self._runner.run(command)
            if exit_code == 0:
                if attempt > 1:
                    self._reporter.success(f"apt-get succeeded on attempt {attempt}")
                return 0

            if attempt < max_attempts:
                self._reporter.warning(
                    f"apt-get failed (exit code: {exit_code}), running update and "
                    f"retrying in {delay:g}s... (attempt {attempt}/{max_attempts})"
                )
                self.repair()
                self._sleep(delay)
            else:
                self._reporter.error(f"apt-get failed after {max_attempts} attempts")

        return exit_code

    def wait_for_locks(self) -> LockWaitResult:
        """Block while any package lock is held, forcing them after the threshold."""
        interval = self._settings.lock_poll_interval
        threshold = self._settings.lock_wait_threshold
        waited = 0.0

        while self._locks.any_held():
            if waited == 0:
                self._reporter.warning("Waiting for apt locks to be released...")
            self._sleep(interval)
            waited += interval

            if waited >= threshold:
                self.force_unlock(waited)
                return LockWaitResult(waited=waited, forced=True)

        if waited:
            logger.debug("apt locks released after %.0fs", waited)
        return LockWaitResult(waited=waited, forced=False)

    def force_unlock(self, waited: float = 0.0) -> None:
        """Delete the lock files and reconfigure dpkg.

        This is a last-resort override: a holder that is merely slow is
        treated the same as one that crashed.
        """
        self._reporter.warning(
            f"Forcing apt lock release after {waited:g}s wait "
            "(last-resort override: a package operation still running will be interrupted)"
        )
        for path in self._locks.paths:
            self._runner.run(self._privileged("rm", "-f", path))
        code = self._runner.run(self._privileged("dpkg", "--configure", "-a"))
        if code != 0:
            logger.debug("dpkg --configure -a after force unlock exited %d", code)

    def repair(self) -> None:
        """Refresh the index and finish interrupted configuration; failures ignored."""
        for command in (
            self._privileged("apt-get", "update", "--fix-missing"),
            self._privileged("dpkg", "--configure", "-a"),
        ):
            code = self._runner.run(command)
            if code != 0:
                logger.debug("Repair step %s exited %d (ignored)", command.display, code)
