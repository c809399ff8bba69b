"""
Shell runner — the SINGLE PLACE where ``subprocess`` is called.

Everything the bootstrap core executes (package manager, curl,
service manager, container engine) comes through here, so timeouts,
missing binaries and environment overrides are handled once.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from pathlib import Path

from devinit.adapters.base import (
    EXIT_NOT_EXECUTABLE,
    EXIT_NOT_FOUND,
    EXIT_TIMEOUT,
    CapturedOutput,
    CommandRunner,
)
from devinit.core.models.command import Command

logger = logging.getLogger(__name__)


def _build_env(command: Command) -> dict[str, str] | None:
    if not command.env:
        return None
    env = os.environ.copy()
    for key, value in command.env.items():
        env[key] = os.path.expandvars(value)
    return env


class ShellRunner(CommandRunner):
    """Execute commands on the host with ``subprocess``."""

    @property
    def name(self) -> str:
        return "shell"

    def which(self, program: str) -> str | None:
        return shutil.which(program)

    def run(
        self,
        command: Command,
        *,
        stdin_path: Path | None = None,
        timeout: float | None = None,
    ) -> int:
        logger.debug("Executing: %s (cwd=%s)", command.display, command.cwd)
        start = time.monotonic()
        try:
            if stdin_path is not None:
                with open(stdin_path, "rb") as stdin:
                    result = subprocess.run(
                        list(command.argv),
                        stdin=stdin,
                        cwd=command.cwd,
                        env=_build_env(command),
                        timeout=timeout,
                    )
            else:
                result = subprocess.run(
                    list(command.argv),
                    cwd=command.cwd,
                    env=_build_env(command),
                    timeout=timeout,
                )
        except FileNotFoundError:
            logger.debug("Program not found: %s", command.program)
            return EXIT_NOT_FOUND
        except OSError as e:
            logger.debug("Cannot execute %s: %s", command.program, e)
            return EXIT_NOT_EXECUTABLE
        except subprocess.TimeoutExpired:
            logger.debug("Timed out after %ss: %s", timeout, command.display)
            return EXIT_TIMEOUT

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug("Exit %d after %dms: %s", result.returncode, elapsed_ms, command.display)
        return result.returncode

    def capture(self, command: Command, *, timeout: float | None = 10) -> CapturedOutput:
        try:
            result = subprocess.run(
                list(command.argv),
                cwd=command.cwd,
                env=_build_env(command),
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except FileNotFoundError:
            return CapturedOutput(EXIT_NOT_FOUND, stderr=f"{command.program}: not found")
        except OSError as e:
            return CapturedOutput(EXIT_NOT_EXECUTABLE, stderr=f"{command.program}: {e}")
        except subprocess.TimeoutExpired:
            return CapturedOutput(EXIT_TIMEOUT, stderr=f"timed out after {timeout}s")

        return CapturedOutput(
            exit_code=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )

    def spawn_detached(self, command: Command) -> bool:
        logger.debug("Spawning detached: %s", command.display)
        try:
            subprocess.Popen(
                list(command.argv),
                cwd=command.cwd,
                env=_build_env(command),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            logger.warning("Could not launch %s: %s", command.program, e)
            return False
        return True
