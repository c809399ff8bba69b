"""
L3 Detection — package manager lock contention.

A lock counts as held when ``fuser`` reports a process using the
file. Read-only: this module never removes anything.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable

from devinit.adapters.base import CommandRunner
from devinit.core.models.command import Command
from devinit.core.services.bootstrap.data.constants import LOCK_PATHS

logger = logging.getLogger(__name__)


def sudo_prefix() -> tuple[str, ...]:
    """``("sudo",)`` unless already root."""
    geteuid = getattr(os, "geteuid", None)
    if geteuid is not None and geteuid() == 0:
        return ()
    return ("sudo",)


class LockProbe:
    """Ask ``fuser`` whether anyone holds a lock file."""

    def __init__(self, runner: CommandRunner, paths: Iterable[str] = LOCK_PATHS):
        self._runner = runner
        self.paths: tuple[str, ...] = tuple(paths)

    def is_held(self, path: str) -> bool:
        command = Command.of("fuser", path).with_prefix(*sudo_prefix())
        held = self._runner.capture(command, timeout=10).ok
        if held:
            logger.debug("Lock held: %s", path)
        return held

    def held_locks(self) -> list[str]:
        return [p for p in self.paths if self.is_held(p)]

    def any_held(self) -> bool:
        return any(self.is_held(p) for p in self.paths)
