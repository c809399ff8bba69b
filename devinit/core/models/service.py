"""
Service models — bootstrap state, model reference, and outcome.

ServiceState is derived fresh on every run from observable facts
(binary on PATH, endpoint responding). It is never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, field_validator

DEFAULT_MODEL = "bge-m3"


class ServiceState(StrEnum):
    """States of the service bootstrap state machine."""

    ABSENT = "absent"
    INSTALLED = "installed"
    STARTING = "starting"
    POLLING = "polling"
    READY = "ready"
    DEGRADED = "degraded"


class ModelReference(BaseModel):
    """Identity of the artifact the service must hold (an embedding model)."""

    name: str = DEFAULT_MODEL

    @field_validator("name")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip().strip("'\"")
        return value or DEFAULT_MODEL

    @property
    def base_name(self) -> str:
        """Name without tag: ``bge-m3:latest`` → ``bge-m3``."""
        return self.name.split(":", 1)[0]

    def matches(self, artifact: str) -> bool:
        """Whether an artifact name reported by the service is this model.

        An untagged reference matches any tag of the same model; a tagged
        reference must match exactly.
        """
        if self.base_name != self.name:
            return artifact == self.name
        return artifact.split(":", 1)[0] == self.base_name


@dataclass
class BootstrapOutcome:
    """Result of one ServiceBootstrapper run."""

    state: ServiceState = ServiceState.ABSENT
    platform: str = "unknown"
    model: str = DEFAULT_MODEL
    transitions: list[ServiceState] = field(default_factory=list)
    installed_now: bool = False
    started_now: bool = False
    artifact_present: bool = False
    artifact_pulled: bool = False
    message: str = ""

    @property
    def ready(self) -> bool:
        return self.state == ServiceState.READY

    @property
    def degraded(self) -> bool:
        return self.state == ServiceState.DEGRADED

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "platform": self.platform,
            "model": self.model,
            "transitions": [s.value for s in self.transitions],
            "installed_now": self.installed_now,
            "started_now": self.started_now,
            "artifact_present": self.artifact_present,
            "artifact_pulled": self.artifact_pulled,
            "message": self.message,
        }
