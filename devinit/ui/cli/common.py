"""
Shared CLI plumbing — runner, reporter, sleep and paths from ``ctx.obj``.
"""

from __future__ import annotations

import sys
import time
from collections.abc import Callable
from pathlib import Path

import click

from devinit.adapters.base import CommandRunner
from devinit.adapters.mock import MockRunner
from devinit.adapters.shell.command import ShellRunner
from devinit.core.config.loader import ConfigError, find_devcontainer_dir, load_settings
from devinit.core.models.settings import BootstrapSettings
from devinit.core.observability.reporter import RecordingSink, Reporter


def make_runner(ctx: click.Context) -> CommandRunner:
    """Real shell, or a do-nothing MockRunner under ``--dry-run``."""
    if ctx.obj.get("dry_run"):
        runner = MockRunner(runner_name="dry-run", dry_run=True)
        # fuser exits non-zero when nobody holds the file
        runner.set_exit(("fuser",), 1)
        runner.set_exit(("sudo", "fuser"), 1)
        return runner
    return ShellRunner()


def make_sleep(ctx: click.Context) -> Callable[[float], None]:
    if ctx.obj.get("dry_run"):
        return lambda _seconds: None
    return time.sleep


def make_reporter(ctx: click.Context, as_json: bool = False) -> tuple[Reporter, RecordingSink | None]:
    """Reporter for this invocation; JSON mode records lines instead of printing."""
    sink = RecordingSink() if as_json else None
    return Reporter(debug=ctx.obj.get("debug", False), sink=sink), sink


def resolve_devcontainer_dir(ctx: click.Context) -> Path | None:
    explicit: Path | None = ctx.obj.get("devcontainer_dir")
    if explicit is not None:
        return explicit.resolve()
    return find_devcontainer_dir()


def settings_or_exit(devcontainer_dir: Path | None) -> BootstrapSettings:
    """Load settings; a broken ``devinit.yml`` ends the command with exit 1."""
    try:
        return load_settings(devcontainer_dir)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)
