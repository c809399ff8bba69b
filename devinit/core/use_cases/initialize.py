"""
Initialize use case — the host-side ``initializeCommand`` hook.

Order matters and is total:

    1. .env + compose project name
    2. feature validation            ← only fatal step (exit 1)
    3. local inference service       ← always absorbed (Ready | Degraded)
    4. docker pull                   ← warning on failure
    5. docker compose down           ← warning on failure
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from devinit.adapters.base import CommandRunner
from devinit.adapters.containers.docker import DockerCli
from devinit.core.config.loader import load_model_reference
from devinit.core.models.service import BootstrapOutcome, ServiceState
from devinit.core.models.settings import BootstrapSettings
from devinit.core.observability.reporter import Reporter
from devinit.core.services.bootstrap.detection.network import wait_for_network
from devinit.core.services.bootstrap.detection.platform import OSKind
from devinit.core.services.bootstrap.orchestration.bootstrapper import ServiceBootstrapper
from devinit.core.services.envfile import (
    EnvFileResult,
    ensure_env_file,
    resolve_project_name,
)
from devinit.core.services.features import FeatureReport, validate_features

logger = logging.getLogger(__name__)

ENV_FILE = ".env"
ENV_TEMPLATE = "hooks/shared/.env.example"
FEATURES_DIR = "features"


@dataclass
class InitializeResult:
    """Everything the hook did, for the summary and ``--json``."""

    devcontainer_dir: Path | None = None
    project_name: str = ""
    env_file: EnvFileResult | None = None
    features: FeatureReport | None = None
    service: BootstrapOutcome | None = None
    image_pulled: bool | None = None
    cleaned_up: bool | None = None
    error: str | None = None

    @property
    def exit_code(self) -> int:
        """1 only for structural problems; service trouble never fails the hook."""
        if self.error:
            return 1
        if self.features is not None and not self.features.ok:
            return 1
        return 0

    @property
    def summary(self) -> str:
        if self.exit_code:
            return "Environment initialization failed"
        if self.service is None:
            return "Environment initialization complete (service bootstrap skipped)"
        if self.service.ready:
            return "Environment initialization complete - GPU acceleration enabled"
        return "Environment initialization complete - semantic search degraded to CPU-only sidecar"

    def to_dict(self) -> dict[str, Any]:
        return {
            "devcontainer_dir": str(self.devcontainer_dir) if self.devcontainer_dir else None,
            "project_name": self.project_name,
            "env_file": self.env_file.to_dict() if self.env_file else None,
            "features": self.features.to_dict() if self.features else None,
            "service": self.service.to_dict() if self.service else None,
            "image_pulled": self.image_pulled,
            "cleaned_up": self.cleaned_up,
            "error": self.error,
            "exit_code": self.exit_code,
            "summary": self.summary,
        }


def bootstrap_service(
    devcontainer_dir: Path | None,
    runner: CommandRunner,
    reporter: Reporter,
    settings: BootstrapSettings,
    sleep: Callable[[float], None] = time.sleep,
    os_kind: OSKind | None = None,
) -> BootstrapOutcome:
    """Run the service state machine; any unexpected error becomes DEGRADED."""
    model_config = (devcontainer_dir / settings.embedder_config_path) if devcontainer_dir else None
    model = load_model_reference(model_config) if model_config else None

    def _network_ok() -> bool:
        return wait_for_network(
            reporter,
            url=settings.network_probe_url,
            max_wait=settings.network_max_wait,
            interval=settings.network_poll_interval,
            timeout=settings.network_probe_timeout,
            sleep=sleep,
        )

    bootstrapper = ServiceBootstrapper(
        runner,
        reporter,
        settings=settings,
        model=model,
        os_kind=os_kind,
        network_check=_network_ok,
        sleep=sleep,
    )
    try:
        return bootstrapper.bootstrap()
    except Exception as e:
        logger.exception("Service bootstrap crashed")
        reporter.warning(f"Service bootstrap error: {e} - continuing without it")
        return BootstrapOutcome(
            state=ServiceState.DEGRADED,
            transitions=[ServiceState.DEGRADED],
            message=str(e),
        )


def run_initialize(
    devcontainer_dir: Path,
    runner: CommandRunner,
    reporter: Reporter,
    settings: BootstrapSettings | None = None,
    sleep: Callable[[float], None] = time.sleep,
    skip_service: bool = False,
    skip_docker: bool = False,
    os_kind: OSKind | None = None,
) -> InitializeResult:
    """Run the full hook against ``devcontainer_dir``."""
    settings = settings or BootstrapSettings()
    result = InitializeResult(devcontainer_dir=devcontainer_dir)
    if not devcontainer_dir.is_dir():
        result.error = f"Devcontainer directory not found: {devcontainer_dir}"
        reporter.error(result.error)
        return result

    # ── 1. Env file ─────────────────────────────────────────────
    result.project_name = resolve_project_name(runner, cwd=devcontainer_dir.parent)
    reporter.info("Initializing devcontainer environment...")
    reporter.info(f"Project name: {result.project_name}")

    env = ensure_env_file(
        devcontainer_dir / ENV_FILE,
        devcontainer_dir / ENV_TEMPLATE,
        result.project_name,
        dry_run=runner.dry_run,
    )
    result.env_file = env
    if env.created:
        reporter.info(f"Created {ENV_FILE} from template")
    if env.action == "updated":
        reporter.info(f"Updated COMPOSE_PROJECT_NAME={result.project_name} in {ENV_FILE}")
    elif env.action == "added":
        reporter.info(f"Added COMPOSE_PROJECT_NAME={result.project_name} to {ENV_FILE}")

    # ── 2. Features (fail fast) ─────────────────────────────────
    reporter.blank()
    reporter.info("Validating devcontainer features...")
    report = validate_features(devcontainer_dir / FEATURES_DIR, fix=not runner.dry_run)
    result.features = report
    for error in report.errors:
        reporter.error(error)
    if not report.ok:
        reporter.error(f"Found {len(report.errors)} critical error(s) in features!")
        reporter.error("Please fix missing files before building the devcontainer.")
        return result
    if report.fixed:
        verb = "Would fix" if runner.dry_run else "Fixed"
        reporter.info(f"{verb} permissions on {len(report.fixed)} install.sh file(s)")
    reporter.success("All features validated successfully")

    # ── 3. Local inference service ──────────────────────────────
    if not skip_service:
        reporter.blank()
        result.service = bootstrap_service(
            devcontainer_dir, runner, reporter, settings, sleep=sleep, os_kind=os_kind
        )

    # ── 4-5. Container engine ───────────────────────────────────
    if not skip_docker:
        docker = DockerCli(runner, reporter)
        reporter.blank()
        result.image_pulled = docker.pull(settings.image)
        reporter.blank()
        result.cleaned_up = docker.compose_down(
            devcontainer_dir / settings.compose_file, result.project_name
        )

    reporter.blank()
    reporter.success(result.summary)
    return result
