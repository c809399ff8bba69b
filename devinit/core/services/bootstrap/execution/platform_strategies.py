"""
L4 Execution — per-platform install and start strategies.

One installer and one starter per OS, picked once by
``select_strategy``. The bootstrapper never looks at the OS again.

    macos    brew (or vendor script)   launchd job, else detached serve
    linux    vendor script via sh      systemd unit, else detached serve
    windows  manual instructions       manual instructions
    unknown  manual instructions       manual instructions
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from devinit.adapters.base import CommandRunner
from devinit.core.models.command import Command
from devinit.core.models.settings import BootstrapSettings
from devinit.core.observability.reporter import Reporter
from devinit.core.services.bootstrap.data.constants import (
    LAUNCHD_JOB,
    LINUX_INSTALL_PREREQS,
    MANUAL_INSTALL_HINTS,
    SYSTEMD_UNIT,
)
from devinit.core.services.bootstrap.detection.locks import sudo_prefix
from devinit.core.services.bootstrap.detection.platform import OSKind
from devinit.core.services.bootstrap.detection.service_status import (
    launchd_job_registered,
    systemd_unit_registered,
)
from devinit.core.services.bootstrap.execution.download import DownloadPipeline
from devinit.core.services.bootstrap.execution.package_install import LockAwareInstaller

logger = logging.getLogger(__name__)


# ── Installers ──────────────────────────────────────────────────


class ServiceInstaller(ABC):
    """Puts the service binary on PATH."""

    #: False when this platform can only print instructions
    automatic: bool = True

    @abstractmethod
    def install(self) -> bool:
        """Attempt the install. True means the installer reported success."""


class VendorScriptInstaller(ServiceInstaller):
    """Runs the vendor's install script through ``sh``."""

    def __init__(self, downloads: DownloadPipeline, script_url: str):
        self._downloads = downloads
        self._script_url = script_url

    def install(self) -> bool:
        return self._downloads.download_and_execute(self._script_url, ["sh"]) == 0


class MacInstaller(ServiceInstaller):
    """Homebrew when present, the vendor script otherwise."""

    def __init__(
        self,
        runner: CommandRunner,
        fallback: VendorScriptInstaller,
        binary: str = "ollama",
    ):
        self._runner = runner
        self._fallback = fallback
        self._binary = binary

    def install(self) -> bool:
        if self._runner.has("brew"):
            return self._runner.run(Command.of("brew", "install", self._binary)) == 0
        return self._fallback.install()


class LinuxInstaller(ServiceInstaller):
    """Ensure the script's archive tools exist, then run the vendor script."""

    def __init__(
        self,
        runner: CommandRunner,
        reporter: Reporter,
        packages: LockAwareInstaller,
        script: VendorScriptInstaller,
    ):
        self._runner = runner
        self._reporter = reporter
        self._packages = packages
        self._script = script

    def missing_prerequisites(self) -> list[str]:
        return [
            package
            for program, package in LINUX_INSTALL_PREREQS.items()
            if not self._runner.has(program)
        ]

    def install(self) -> bool:
        missing = self.missing_prerequisites()
        if missing and self._packages.is_available():
            self._reporter.info(f"Installing prerequisites: {', '.join(missing)}")
            if self._packages.install(["install", "-y", *missing]) != 0:
                # The script may still cope (e.g. a non-zstd release)
                self._reporter.warning("Could not install prerequisites, trying anyway")
        return self._script.install()


class ManualInstaller(ServiceInstaller):
    """Platforms we do not automate: print instructions and decline."""

    automatic = False

    def __init__(self, reporter: Reporter, os_kind: OSKind):
        self._reporter = reporter
        self._os_kind = os_kind

    def install(self) -> bool:
        hints = MANUAL_INSTALL_HINTS.get(self._os_kind.value, MANUAL_INSTALL_HINTS["unknown"])
        for line in hints:
            self._reporter.warning(line)
        return False


# ── Starters ────────────────────────────────────────────────────


class ServiceStarter(ABC):
    """Gets an installed service process running."""

    @abstractmethod
    def start(self) -> bool:
        """Kick off the service. True means "go poll for readiness"."""


class DetachedStarter(ServiceStarter):
    """``ollama serve`` in its own session; no handle is kept."""

    def __init__(self, runner: CommandRunner, binary: str = "ollama"):
        self._runner = runner
        self._binary = binary

    def start(self) -> bool:
        return self._runner.spawn_detached(Command.of(self._binary, "serve"))


class LaunchdStarter(ServiceStarter):
    def __init__(self, runner: CommandRunner, detached: DetachedStarter):
        self._runner = runner
        self._detached = detached

    def start(self) -> bool:
        if launchd_job_registered(self._runner):
            code = self._runner.run(Command.of("launchctl", "start", LAUNCHD_JOB))
            if code != 0:
                logger.debug("launchctl start exited %d; polling anyway", code)
            return True
        return self._detached.start()


class SystemdStarter(ServiceStarter):
    def __init__(self, runner: CommandRunner, detached: DetachedStarter):
        self._runner = runner
        self._detached = detached

    def start(self) -> bool:
        if systemd_unit_registered(self._runner):
            command = Command.of("systemctl", "start", SYSTEMD_UNIT).with_prefix(*sudo_prefix())
            if self._runner.run(command) == 0:
                return True
            logger.debug("systemctl start failed; falling back to detached launch")
        return self._detached.start()


class ManualStarter(ServiceStarter):
    def __init__(self, reporter: Reporter):
        self._reporter = reporter

    def start(self) -> bool:
        self._reporter.warning("Please ensure Ollama is running (check system tray)")
        return False


# ── Selection ───────────────────────────────────────────────────


@dataclass(frozen=True)
class PlatformStrategy:
    os_kind: OSKind
    installer: ServiceInstaller
    starter: ServiceStarter


def select_strategy(
    os_kind: OSKind,
    runner: CommandRunner,
    reporter: Reporter,
    settings: BootstrapSettings,
    downloads: DownloadPipeline,
    packages: LockAwareInstaller,
) -> PlatformStrategy:
    """Build the installer/starter pair for ``os_kind``."""
    binary = settings.service_binary
    script = VendorScriptInstaller(downloads, settings.install_script_url)
    detached = DetachedStarter(runner, binary)

    if os_kind == OSKind.MACOS:
        return PlatformStrategy(
            os_kind,
            MacInstaller(runner, script, binary),
            LaunchdStarter(runner, detached),
        )
    if os_kind == OSKind.LINUX:
        return PlatformStrategy(
            os_kind,
            LinuxInstaller(runner, reporter, packages, script),
            SystemdStarter(runner, detached),
        )
    return PlatformStrategy(
        os_kind,
        ManualInstaller(reporter, os_kind),
        ManualStarter(reporter),
    )
