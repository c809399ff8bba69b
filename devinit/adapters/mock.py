"""
Mock runner — scripted test double for every runner operation.

Backs ``--dry-run`` (nothing is executed, everything "succeeds") and
the test-suite, where exit codes are scripted per argv prefix.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Iterable
from pathlib import Path

from devinit.adapters.base import CapturedOutput, CommandRunner
from devinit.core.models.command import Command

logger = logging.getLogger(__name__)

Handler = Callable[[Command], int]


class MockRunner(CommandRunner):
    """Universal mock runner.

    By default every command exits 0. Responses are matched on the
    longest registered argv prefix:

        runner.set_exit(("apt-get", "install"), [100, 100, 0])
        runner.set_output(("systemctl", "list-unit-files"), "ollama.service enabled")
        runner.set_handler(("curl",), lambda cmd: write_file_and_return_0(cmd))

    A list of exit codes is consumed one per call; the last one repeats.

    Args:
        available: Programs ``which()`` reports as installed. ``None``
            defers to the real PATH (dry-run mode).
        default_exit: Exit code for commands with no scripted response.
        dry_run: Advertise plan-only mode to callers (``--dry-run``).
    """

    def __init__(
        self,
        available: Iterable[str] | None = None,
        default_exit: int = 0,
        runner_name: str = "mock",
        dry_run: bool = False,
    ):
        self._name = runner_name
        self.dry_run = dry_run
        self._available = set(available) if available is not None else None
        self._default_exit = default_exit
        self._exits: dict[tuple[str, ...], list[int]] = {}
        self._outputs: dict[tuple[str, ...], CapturedOutput] = {}
        self._handlers: dict[tuple[str, ...], Handler] = {}
        self._call_log: list[Command] = []
        self._stdin_log: list[bytes | None] = []
        self._spawned: list[Command] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[Command]:
        """Every command passed to run/capture, in order."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def stdin_log(self) -> list[bytes | None]:
        """Bytes fed via ``stdin_path`` for each ``run`` call (None if none)."""
        return self._stdin_log

    @property
    def spawned(self) -> list[Command]:
        return self._spawned

    # ── Scripting ───────────────────────────────────────────────

    def set_available(self, *programs: str) -> None:
        if self._available is None:
            self._available = set()
        self._available.update(programs)

    def set_missing(self, *programs: str) -> None:
        if self._available is None:
            self._available = set()
        self._available.difference_update(programs)

    def set_exit(self, prefix: Iterable[str], codes: int | list[int]) -> None:
        self._exits[tuple(prefix)] = [codes] if isinstance(codes, int) else list(codes)

    def set_output(self, prefix: Iterable[str], stdout: str = "", exit_code: int = 0) -> None:
        self._outputs[tuple(prefix)] = CapturedOutput(exit_code, stdout=stdout)

    def set_handler(self, prefix: Iterable[str], handler: Handler) -> None:
        self._handlers[tuple(prefix)] = handler

    def calls_to(self, *prefix: str) -> list[Command]:
        """Recorded commands whose argv starts with ``prefix``."""
        return [c for c in self._call_log if c.argv[: len(prefix)] == prefix]

    def reset(self) -> None:
        """Clear call log and scripted responses."""
        self._call_log.clear()
        self._stdin_log.clear()
        self._spawned.clear()
        self._exits.clear()
        self._outputs.clear()
        self._handlers.clear()

    # ── CommandRunner ───────────────────────────────────────────

    def which(self, program: str) -> str | None:
        if self._available is None:
            return shutil.which(program)
        return f"/usr/bin/{program}" if program in self._available else None

    def run(
        self,
        command: Command,
        *,
        stdin_path: Path | None = None,
        timeout: float | None = None,
    ) -> int:
        self._call_log.append(command)
        self._stdin_log.append(
            stdin_path.read_bytes() if stdin_path is not None and stdin_path.exists() else None
        )
        logger.debug("[%s] run: %s", self._name, command.display)
        return self._respond(command)

    def capture(self, command: Command, *, timeout: float | None = 10) -> CapturedOutput:
        self._call_log.append(command)
        logger.debug("[%s] capture: %s", self._name, command.display)
        key = self._match(self._outputs, command)
        if key is not None:
            return self._outputs[key]
        return CapturedOutput(self._respond(command))

    def spawn_detached(self, command: Command) -> bool:
        self._spawned.append(command)
        logger.debug("[%s] spawn: %s", self._name, command.display)
        return True

    # ── Internals ───────────────────────────────────────────────

    def _respond(self, command: Command) -> int:
        key = self._match(self._handlers, command)
        if key is not None:
            return self._handlers[key](command)

        key = self._match(self._exits, command)
        if key is not None:
            codes = self._exits[key]
            return codes.pop(0) if len(codes) > 1 else codes[0]

        return self._default_exit

    @staticmethod
    def _match(table: dict[tuple[str, ...], object], command: Command) -> tuple[str, ...] | None:
        best: tuple[str, ...] | None = None
        for prefix in table:
            if command.argv[: len(prefix)] == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        return best
