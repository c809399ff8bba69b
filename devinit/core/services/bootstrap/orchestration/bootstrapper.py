"""
L5 Orchestration — local inference service bootstrap state machine.

States:
    ABSENT     → Binary not on PATH.
    INSTALLED  → Binary present, endpoint not yet known to answer.
    STARTING   → Start strategy invoked.
    POLLING    → Waiting for the endpoint to answer.
    READY      → Endpoint answers; model pulled if it was missing.
    DEGRADED   → Gave up; consumers fall back to the CPU-only sidecar.

Transitions:
    (probe) → ABSENT | INSTALLED
    ABSENT → INSTALLED:      install strategy succeeded
    ABSENT → DEGRADED:       no network, manual platform, or install failed
    INSTALLED → READY:       endpoint already responsive (no start)
    INSTALLED → STARTING:    endpoint silent
    STARTING → POLLING:      start strategy launched something
    STARTING → DEGRADED:     platform has no start strategy
    POLLING → READY:         endpoint answered within the readiness budget
    POLLING → DEGRADED:      readiness budget exhausted

READY and DEGRADED are terminal for the run. Nothing is persisted:
the next run probes again from scratch.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from devinit.adapters.base import CommandRunner
from devinit.core.models.command import Command
from devinit.core.models.service import BootstrapOutcome, ModelReference, ServiceState
from devinit.core.models.settings import BootstrapSettings
from devinit.core.observability.reporter import Reporter
from devinit.core.services.bootstrap.data.constants import ENABLE_HINTS, SERVICE_NAME
from devinit.core.services.bootstrap.detection.network import wait_ready
from devinit.core.services.bootstrap.detection.platform import OSKind, detect_os
from devinit.core.services.bootstrap.detection.service_status import ServiceClient
from devinit.core.services.bootstrap.execution.download import DownloadPipeline
from devinit.core.services.bootstrap.execution.package_install import LockAwareInstaller
from devinit.core.services.bootstrap.execution.platform_strategies import (
    PlatformStrategy,
    select_strategy,
)

logger = logging.getLogger(__name__)

_ALLOWED: dict[ServiceState | None, frozenset[ServiceState]] = {
    None: frozenset({ServiceState.ABSENT, ServiceState.INSTALLED}),
    ServiceState.ABSENT: frozenset({ServiceState.INSTALLED, ServiceState.DEGRADED}),
    ServiceState.INSTALLED: frozenset({ServiceState.READY, ServiceState.STARTING}),
    ServiceState.STARTING: frozenset({ServiceState.POLLING, ServiceState.DEGRADED}),
    ServiceState.POLLING: frozenset({ServiceState.READY, ServiceState.DEGRADED}),
    ServiceState.READY: frozenset(),
    ServiceState.DEGRADED: frozenset(),
}


class ServiceBootstrapper:
    """Detect → install → start → poll → pull, degrading instead of failing.

    Args:
        runner: Executes every external command.
        reporter: User-facing progress lines.
        settings: Timeouts, URLs, attempt budgets.
        model: Artifact the service must hold once ready.
        os_kind: Platform; detected when omitted.
        client: HTTP probe of the service endpoint.
        strategy: Installer/starter pair; selected from ``os_kind`` when omitted.
        network_check: Called before an automatic install; False skips it.
        sleep: Blocking wait used while polling.
    """

    def __init__(
        self,
        runner: CommandRunner,
        reporter: Reporter,
        settings: BootstrapSettings | None = None,
        model: ModelReference | None = None,
        os_kind: OSKind | None = None,
        client: ServiceClient | None = None,
        strategy: PlatformStrategy | None = None,
        network_check: Callable[[], bool] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._runner = runner
        self._reporter = reporter
        self._settings = settings or BootstrapSettings()
        self._model = model or ModelReference()
        self._os = os_kind or detect_os()
        self._client = client or ServiceClient(
            self._settings.service_url, self._settings.service_probe_timeout
        )
        self._network_check = network_check
        self._sleep = sleep

        if strategy is None:
            strategy = select_strategy(
                self._os,
                runner,
                reporter,
                self._settings,
                DownloadPipeline(runner, reporter, self._settings, sleep=sleep),
                LockAwareInstaller(runner, reporter, self._settings, sleep=sleep),
            )
        self._strategy = strategy

        self.state: ServiceState | None = None
        self._outcome = BootstrapOutcome()

    @property
    def binary(self) -> str:
        return self._settings.service_binary

    def probe(self) -> ServiceState:
        """Initial state from what is observable right now."""
        return ServiceState.INSTALLED if self._runner.has(self.binary) else ServiceState.ABSENT

    def bootstrap(self) -> BootstrapOutcome:
        """Run the state machine once and report where it ended."""
        self.state = None
        self._outcome = BootstrapOutcome(platform=self._os.value, model=self._model.name)

        self._reporter.info(f"Setting up {SERVICE_NAME} for GPU-accelerated semantic search...")
        self._reporter.info(f"Detected OS: {self._os.value}")

        self._transition(self.probe())

        if self.state == ServiceState.ABSENT:
            self._reporter.info(f"{SERVICE_NAME} not found, installing...")
            if not self._install():
                self._reporter.warning(f"Could not install {SERVICE_NAME} automatically")
                for line in ENABLE_HINTS:
                    self._reporter.info(line)
                return self._degrade(f"{SERVICE_NAME} not available")
        else:
            self._reporter.info(f"{SERVICE_NAME} is installed")

        if self._client.is_responsive():
            self._reporter.info(f"{SERVICE_NAME} is running")
            self._transition(ServiceState.READY)
        elif not self._start_and_poll():
            return self._outcome

        self._ensure_artifact()
        self._outcome.message = f"{SERVICE_NAME} setup complete - GPU acceleration enabled"
        self._reporter.success(self._outcome.message)
        return self._outcome

    # ── Steps ───────────────────────────────────────────────────

    def _install(self) -> bool:
        installer = self._strategy.installer
        if installer.automatic and self._network_check is not None and not self._network_check():
            self._reporter.warning("No network connectivity, skipping install")
            return False

        if installer.automatic:
            self._reporter.info(f"Installing {SERVICE_NAME}...")
        if not installer.install():
            return False

        if not self._runner.has(self.binary):
            self._reporter.warning(
                f"Installer finished but '{self.binary}' is still not on PATH"
            )
            return False

        self._outcome.installed_now = True
        self._transition(ServiceState.INSTALLED)
        return True

    def _start_and_poll(self) -> bool:
        self._transition(ServiceState.STARTING)
        self._reporter.info(f"Starting {SERVICE_NAME} daemon...")
        if not self._strategy.starter.start():
            self._degrade(f"{SERVICE_NAME} could not be started automatically")
            return False
        self._outcome.started_now = True

        self._transition(ServiceState.POLLING)
        ready = wait_ready(
            self._client.is_responsive,
            max_wait_seconds=self._settings.readiness_budget,
            interval=self._settings.readiness_interval,
            sleep=self._sleep,
        )
        if not ready:
            self._reporter.warning(f"{SERVICE_NAME} did not start in time")
            self._degrade(f"{SERVICE_NAME} not ready after {self._settings.readiness_budget:g}s")
            return False

        self._reporter.success(f"{SERVICE_NAME} is ready")
        self._transition(ServiceState.READY)
        return True

    def _ensure_artifact(self) -> None:
        """Pull the model through the service's own CLI if it is missing.

        ``ollama pull`` retries internally; it is invoked exactly once.
        """
        name = self._model.name
        self._reporter.info(f"Checking for embedding model: {name}...")
        if self._client.has_artifact(self._model):
            self._outcome.artifact_present = True
            self._reporter.info(f"Model {name} already available")
            return

        self._reporter.info(f"Pulling model {name} (this may take a few minutes)...")
        code = self._runner.run(Command.of(self.binary, "pull", name))
        if code == 0:
            self._outcome.artifact_present = True
            self._outcome.artifact_pulled = True
            self._reporter.success(f"Model {name} pulled")
        else:
            self._reporter.warning(
                f"Could not pull model {name} (exit code: {code}); "
                "it will be fetched on first use"
            )

    # ── State ───────────────────────────────────────────────────

    def _degrade(self, reason: str) -> BootstrapOutcome:
        self._transition(ServiceState.DEGRADED)
        self._outcome.message = reason
        self._reporter.warning(
            f"{reason} - semantic search will use CPU-only sidecar (slower)"
        )
        return self._outcome

    def _transition(self, new_state: ServiceState) -> None:
        old = self.state
        if new_state not in _ALLOWED[old]:
            raise RuntimeError(
                f"Illegal service state transition: {old} → {new_state}"
            )
        self.state = new_state
        self._outcome.state = new_state
        self._outcome.transitions.append(new_state)
        self._reporter.debug(f"Service state: {old.value if old else '(probe)'} → {new_state.value}")
        logger.info(
            "Service bootstrap: %s → %s",
            old.value if old else "(probe)",
            new_state.value,
        )
