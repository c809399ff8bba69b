"""
L4 Execution — resumable downloads and download-then-execute.

Two retry layers:

    curl --retry 3 ...         cheap, absorbs short network blips
    ExponentialBackoff(3s) x5  absorbs curl giving up entirely

Bytes go to ``<destination>.part`` and ``-C -`` lets every attempt
resume where the previous one stopped. Only a successful transfer is
renamed onto ``destination``; on failure the partial file is removed
and ``destination`` is left exactly as it was. Under a dry-run runner
nothing touches the filesystem: the planned curl line is reported.
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from devinit.adapters.base import CommandRunner
from devinit.core.models.command import Command
from devinit.core.models.download import DownloadTask
from devinit.core.models.retry import ExponentialBackoff
from devinit.core.models.settings import BootstrapSettings
from devinit.core.observability.reporter import Reporter
from devinit.core.reliability.retry import RetryExecutor

logger = logging.getLogger(__name__)


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug("Could not remove %s: %s", path, e)


class DownloadPipeline:
    """Fetch remote artifacts with curl under exponential backoff."""

    def __init__(
        self,
        runner: CommandRunner,
        reporter: Reporter,
        settings: BootstrapSettings | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._runner = runner
        self._reporter = reporter
        self._settings = settings or BootstrapSettings()
        self._retry = RetryExecutor(runner, reporter, sleep=sleep)

    @property
    def policy(self) -> ExponentialBackoff:
        return ExponentialBackoff(self._settings.download_initial_delay)

    def build_transfer_command(
        self,
        task: DownloadTask,
        extra_options: Sequence[str] = (),
    ) -> Command:
        """The curl invocation for one attempt of ``task``."""
        s = self._settings
        return Command.of(
            "curl", "-fsSL",
            "--connect-timeout", str(s.connect_timeout),
            "--max-time", str(s.max_transfer_time),
            "--retry", str(s.transport_retries),
            "--retry-delay", str(s.transport_retry_delay),
            "--retry-max-time", str(s.transport_retry_max_time),
            "-C", "-",
            *extra_options,
            "-o", str(task.partial_path),
            task.url,
        )

    def download(
        self,
        url: str,
        destination: str | Path,
        extra_options: Sequence[str] = (),
    ) -> int:
        """Download ``url`` to ``destination``; return curl's final exit code."""
        task = DownloadTask(
            url=url,
            destination=Path(destination),
            attempt_budget=self._settings.download_attempts,
        )
        command = self.build_transfer_command(task, extra_options)
        if self._runner.dry_run:
            self._reporter.info(f"Would run: {command.display}")
            return 0
        self._reporter.info(f"Downloading: {url}")

        def _attempt() -> int:
            if task.refresh_offset():
                self._reporter.debug(f"Resuming {url} from byte {task.resume_offset}")
            return self._runner.run(command)

        try:
            exit_code = self._retry.call(
                _attempt, task.attempt_budget, self.policy, label=command.display
            )
            if exit_code != 0:
                return exit_code

            if not task.partial_path.exists():
                # curl with -f and an empty body can succeed without creating the file
                task.partial_path.touch()
            os.replace(task.partial_path, task.destination)
            logger.debug("Downloaded %s → %s", url, task.destination)
            return 0
        finally:
            _remove_quietly(task.partial_path)

    def download_and_execute(self, url: str, interpreter_argv: Sequence[str]) -> int:
        """Download a script and feed it to ``interpreter_argv`` on stdin.

        The interpreter only runs if the download fully succeeded. The
        temporary file is removed on every path out of this function.
        """
        if not interpreter_argv:
            raise ValueError("interpreter_argv must name a program")

        interpreter = Command(argv=tuple(interpreter_argv))
        if self._runner.dry_run:
            planned = Path(tempfile.gettempdir(), "devinit_XXXXXX.script")
            curl = self.build_transfer_command(DownloadTask(url=url, destination=planned))
            self._reporter.info(f"Would run: {curl.display} | {interpreter.display}")
            return 0

        self._reporter.info(f"Downloading and executing: {url}")
        fd, tmp_name = tempfile.mkstemp(prefix="devinit_", suffix=".script")
        os.close(fd)
        tmp = Path(tmp_name)

        try:
            exit_code = self.download(url, tmp)
            if exit_code != 0:
                return exit_code
            return self._runner.run(interpreter, stdin_path=tmp)
        finally:
            _remove_quietly(tmp)
