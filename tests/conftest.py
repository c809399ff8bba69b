"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from devinit.adapters.mock import MockRunner
from devinit.core.observability.reporter import RecordingSink, Reporter


class SleepRecorder:
    """Stand-in for ``time.sleep`` that only remembers what it was asked."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.calls)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def reporter(sink: RecordingSink) -> Reporter:
    """A debug-enabled reporter writing into ``sink``."""
    return Reporter(debug=True, sink=sink)


@pytest.fixture
def runner() -> MockRunner:
    """A MockRunner where nothing is installed and everything exits 0."""
    return MockRunner(available=[])


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def devcontainer(tmp_path: Path) -> Path:
    """A minimal valid .devcontainer tree with one feature."""
    root = tmp_path / "repo" / ".devcontainer"
    feature = root / "features" / "languages" / "python"
    feature.mkdir(parents=True)
    (feature / "devcontainer-feature.json").write_text('{"id": "python"}\n')
    install = feature / "install.sh"
    install.write_text("#!/bin/sh\nexit 0\n")
    install.chmod(0o755)

    template = root / "hooks" / "shared" / ".env.example"
    template.parent.mkdir(parents=True)
    template.write_text("# Devcontainer env\nFOO=bar\n")
    return root


@pytest.fixture
def as_root(monkeypatch):
    """Pretend to run as root so privileged commands carry no ``sudo``."""
    import os

    monkeypatch.setattr(os, "geteuid", lambda: 0, raising=False)
