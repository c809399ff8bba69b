"""
Tests for domain models — Command, Attempt, ModelReference, DownloadTask, settings.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from devinit.core.models import (
    DEFAULT_MODEL,
    Attempt,
    BootstrapOutcome,
    BootstrapSettings,
    Command,
    DownloadTask,
    ModelReference,
    ServiceState,
)

# ── Command ──────────────────────────────────────────────────────────


class TestCommand:
    def test_of(self):
        cmd = Command.of("apt-get", "install", "-y", "curl")
        assert cmd.argv == ("apt-get", "install", "-y", "curl")
        assert cmd.program == "apt-get"

    def test_empty_argv_rejected(self):
        with pytest.raises(ValidationError):
            Command(argv=())

    def test_display_quotes(self):
        assert Command.of("echo", "hello world").display == "echo 'hello world'"
        assert str(Command.of("ls")) == "ls"

    def test_with_prefix_returns_copy(self):
        cmd = Command.of("apt-get", "update")
        sudo = cmd.with_prefix("sudo")
        assert sudo.argv == ("sudo", "apt-get", "update")
        assert cmd.argv == ("apt-get", "update")

    def test_with_empty_prefix_is_identity(self):
        cmd = Command.of("ls")
        assert cmd.with_prefix() is cmd

    def test_frozen(self):
        cmd = Command.of("ls")
        with pytest.raises(ValidationError):
            cmd.argv = ("rm",)


# ── Attempt ──────────────────────────────────────────────────────────


class TestAttempt:
    def test_index_bounds(self):
        with pytest.raises(ValueError):
            Attempt(0, 3)
        with pytest.raises(ValueError):
            Attempt(4, 3)

    def test_flags(self):
        assert Attempt(1, 3).succeeded
        assert not Attempt(1, 3, 2.0, 1).succeeded
        assert Attempt(3, 3).is_last
        assert not Attempt(2, 3).is_last


# ── Service models ───────────────────────────────────────────────────


class TestServiceState:
    def test_str_value(self):
        assert ServiceState.STARTING == "starting"


class TestModelReference:
    def test_default(self):
        assert ModelReference().name == DEFAULT_MODEL == "bge-m3"

    def test_strips_quotes_and_whitespace(self):
        assert ModelReference(name='  "nomic-embed-text" ').name == "nomic-embed-text"

    def test_blank_falls_back_to_default(self):
        assert ModelReference(name="  ").name == DEFAULT_MODEL

    def test_untagged_matches_any_tag(self):
        ref = ModelReference(name="bge-m3")
        assert ref.matches("bge-m3")
        assert ref.matches("bge-m3:latest")
        assert not ref.matches("bge-large:latest")

    def test_tagged_requires_exact(self):
        ref = ModelReference(name="bge-m3:567m")
        assert ref.base_name == "bge-m3"
        assert ref.matches("bge-m3:567m")
        assert not ref.matches("bge-m3:latest")


class TestBootstrapOutcome:
    def test_to_dict(self):
        outcome = BootstrapOutcome(
            state=ServiceState.READY,
            platform="linux",
            transitions=[ServiceState.INSTALLED, ServiceState.READY],
        )
        d = outcome.to_dict()
        assert d["state"] == "ready"
        assert d["transitions"] == ["installed", "ready"]
        assert outcome.ready
        assert not outcome.degraded


# ── Download ─────────────────────────────────────────────────────────


class TestDownloadTask:
    def test_partial_path(self, tmp_path: Path):
        task = DownloadTask(url="https://x/f.tgz", destination=tmp_path / "f.tgz")
        assert task.partial_path == tmp_path / "f.tgz.part"

    def test_refresh_offset(self, tmp_path: Path):
        task = DownloadTask(url="https://x/f", destination=tmp_path / "f")
        assert task.refresh_offset() == 0
        task.partial_path.write_bytes(b"12345")
        assert task.refresh_offset() == 5
        assert task.resume_offset == 5

    def test_budget_must_be_positive(self, tmp_path: Path):
        with pytest.raises(ValidationError):
            DownloadTask(url="u", destination=tmp_path / "f", attempt_budget=0)


# ── Settings ─────────────────────────────────────────────────────────


class TestBootstrapSettings:
    def test_defaults(self):
        s = BootstrapSettings()
        assert s.service_url == "http://localhost:11434"
        assert s.readiness_attempts == 15
        assert s.readiness_interval == 2
        assert s.readiness_budget == 30
        assert s.network_max_wait == 60
        assert s.lock_wait_threshold == 60
        assert s.install_attempts == 5
        assert s.install_retry_delay == 10
        assert s.download_attempts == 5
        assert s.download_initial_delay == 3

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            BootstrapSettings.model_validate({"nope": 1})

    def test_non_positive_interval_rejected(self):
        with pytest.raises(ValidationError):
            BootstrapSettings(network_poll_interval=0)
