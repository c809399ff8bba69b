"""
Docker adapter — the two container-engine calls the hook makes.

Both are opaque: the hook does not care *why* they fail, only that a
failure never blocks the devcontainer build.
"""

from __future__ import annotations

import logging
from pathlib import Path

from devinit.adapters.base import CommandRunner
from devinit.core.models.command import Command
from devinit.core.observability.reporter import Reporter

logger = logging.getLogger(__name__)


class DockerCli:
    """``docker pull`` and ``docker compose down`` through a runner."""

    def __init__(self, runner: CommandRunner, reporter: Reporter):
        self._runner = runner
        self._reporter = reporter

    def pull(self, image: str) -> bool:
        """Refresh ``image`` so a rebuild does not reuse a stale cache."""
        self._reporter.info("Pulling latest devcontainer image...")
        result = self._runner.capture(Command.of("docker", "pull", image), timeout=None)
        if result.ok:
            self._reporter.success(f"Pulled {image}")
            return True
        logger.debug("docker pull %s failed (%d): %s", image, result.exit_code, result.stderr)
        self._reporter.warning("Could not pull latest image, using cached version")
        return False

    def compose_down(self, compose_file: Path, project_name: str) -> bool:
        """Tear down any previous instance of the compose project."""
        self._reporter.info("Cleaning up existing devcontainer instances...")
        command = Command.of(
            "docker", "compose",
            "-f", str(compose_file),
            "--project-name", project_name,
            "down", "--remove-orphans", "--timeout", "0",
        )
        result = self._runner.capture(command, timeout=None)
        if not result.ok:
            logger.debug(
                "compose down for %s failed (%d): %s",
                project_name, result.exit_code, result.stderr,
            )
        self._reporter.info("Cleanup complete")
        return result.ok
