"""
Bootstrap settings — every tunable constant in one validated model.

Any field can be overridden from ``devinit.yml`` in the devcontainer
directory.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BootstrapSettings(BaseModel):
    """Timeouts, attempt budgets and endpoints used by the bootstrap core."""

    model_config = ConfigDict(extra="forbid")

    # ── Local inference service ────────────────────────────────
    service_binary: str = "ollama"
    service_url: str = "http://localhost:11434"
    service_probe_timeout: float = Field(default=2.0, gt=0)
    install_script_url: str = "https://ollama.ai/install.sh"
    readiness_attempts: int = Field(default=15, ge=1)
    readiness_interval: float = Field(default=2.0, gt=0)
    embedder_config_path: str = "images/grepai.config.yaml"

    # ── Generic connectivity ───────────────────────────────────
    network_probe_url: str = "https://www.google.com"
    network_max_wait: float = Field(default=60.0, ge=0)
    network_poll_interval: float = Field(default=5.0, gt=0)
    network_probe_timeout: float = Field(default=5.0, gt=0)

    # ── Package manager ────────────────────────────────────────
    install_attempts: int = Field(default=5, ge=1)
    install_retry_delay: float = Field(default=10.0, ge=0)
    lock_poll_interval: float = Field(default=2.0, gt=0)
    lock_wait_threshold: float = Field(default=60.0, gt=0)

    # ── Downloads ──────────────────────────────────────────────
    download_attempts: int = Field(default=5, ge=1)
    download_initial_delay: float = Field(default=3.0, ge=0)
    connect_timeout: int = Field(default=30, ge=1)
    max_transfer_time: int = Field(default=300, ge=1)
    transport_retries: int = Field(default=3, ge=0)
    transport_retry_delay: int = Field(default=5, ge=0)
    transport_retry_max_time: int = Field(default=60, ge=0)

    # ── Container engine ───────────────────────────────────────
    image: str = "ghcr.io/kodflow/devcontainer-template:latest"
    compose_file: str = "docker-compose.yml"

    @property
    def readiness_budget(self) -> float:
        """Total seconds the readiness probe may poll a fresh start."""
        return self.readiness_attempts * self.readiness_interval
