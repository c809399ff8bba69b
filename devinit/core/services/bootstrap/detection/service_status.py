"""
L3 Detection — local inference service status.

Read-only probes: is the HTTP endpoint answering, which artifacts does
it hold, and is a supervisor (launchd / systemd) already managing it.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from typing import Any

from devinit.adapters.base import CommandRunner
from devinit.core.models.command import Command
from devinit.core.models.service import ModelReference
from devinit.core.services.bootstrap.data.constants import (
    LAUNCHD_LABEL,
    LIST_ARTIFACTS_PATH,
    SYSTEMD_UNIT,
)
from devinit.core.services.bootstrap.detection.network import USER_AGENT

logger = logging.getLogger(__name__)


class ServiceClient:
    """Talks to the service's "list available artifacts" endpoint.

    The same call doubles as liveness probe and artifact inventory.
    """

    def __init__(self, base_url: str = "http://localhost:11434", timeout: float = 2.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def tags_url(self) -> str:
        return f"{self.base_url}{LIST_ARTIFACTS_PATH}"

    def _fetch_tags(self) -> dict[str, Any] | None:
        req = urllib.request.Request(self.tags_url, headers={"User-Agent": USER_AGENT})
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                if resp.getcode() != 200:
                    return None
                body = resp.read()
        except (urllib.error.URLError, OSError, ValueError) as e:
            logger.debug("Service probe %s failed: %s", self.tags_url, e)
            return None

        try:
            data = json.loads(body or b"{}")
        except json.JSONDecodeError:
            # Answering with garbage still means something is listening
            logger.debug("Service at %s returned non-JSON", self.tags_url)
            return {}
        return data if isinstance(data, dict) else {}

    def is_responsive(self) -> bool:
        return self._fetch_tags() is not None

    def list_artifacts(self) -> list[str]:
        """Artifact names the service currently holds (empty if unreachable)."""
        data = self._fetch_tags() or {}
        names: list[str] = []
        for entry in data.get("models", []) or []:
            if isinstance(entry, dict):
                name = entry.get("name") or entry.get("model")
                if name:
                    names.append(str(name))
        return names

    def has_artifact(self, model: ModelReference) -> bool:
        return any(model.matches(name) for name in self.list_artifacts())


def launchd_job_registered(runner: CommandRunner) -> bool:
    """Whether ``launchctl list`` shows the service's launchd job."""
    result = runner.capture(Command.of("launchctl", "list"), timeout=10)
    return result.ok and LAUNCHD_LABEL in result.stdout


def systemd_unit_registered(runner: CommandRunner) -> bool:
    """Whether ``systemctl list-unit-files`` knows the service's unit."""
    if not runner.has("systemctl"):
        return False
    result = runner.capture(Command.of("systemctl", "list-unit-files"), timeout=10)
    return result.ok and SYSTEMD_UNIT in result.stdout
