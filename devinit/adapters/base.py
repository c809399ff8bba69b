"""
Runner base — the protocol contract between the core and the OS.

Every external process the bootstrap core touches goes through a
CommandRunner. The core only ever sees exit codes and captured text,
never ``subprocess`` objects.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from devinit.core.models.command import Command

# Shell conventions for failures that never reached the program
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124


@dataclass(frozen=True)
class CapturedOutput:
    """Exit code plus captured streams of a finished command."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandRunner(ABC):
    """Abstract base class for command runners.

    Runners NEVER raise for a failing command — failures are exit codes.

    To create a new runner:
        1. Subclass CommandRunner
        2. Implement name, which, run, capture, spawn_detached
    """

    #: True when commands are only being planned; callers skip their own
    #: filesystem side effects too
    dry_run: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        """The runner identifier (e.g., 'shell', 'mock')."""

    @abstractmethod
    def which(self, program: str) -> str | None:
        """Resolve ``program`` on PATH, or None if it isn't installed."""

    @abstractmethod
    def run(
        self,
        command: Command,
        *,
        stdin_path: Path | None = None,
        timeout: float | None = None,
    ) -> int:
        """Run to completion with inherited stdout/stderr; return the exit code.

        ``stdin_path`` feeds a file as standard input.
        """

    @abstractmethod
    def capture(self, command: Command, *, timeout: float | None = 10) -> CapturedOutput:
        """Run to completion and capture stdout/stderr."""

    @abstractmethod
    def spawn_detached(self, command: Command) -> bool:
        """Start a long-lived background process and forget about it.

        Returns True if the process was launched. No handle is kept.
        """

    def has(self, program: str) -> bool:
        return self.which(program) is not None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
