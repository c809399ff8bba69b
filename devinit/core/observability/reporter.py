"""
Reporter — the user-facing status channel.

Five severities, matching what a person watching a lifecycle hook
expects to see scroll by:

    info     [INFO]     blue
    success  [SUCCESS]  green
    warning  [WARNING]  yellow
    error    [ERROR]    red
    debug    [DEBUG]    cyan, only when debug output is enabled

A Reporter is passed explicitly to every component that talks to the
user. Tests swap the sink for a list collector.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Literal

import click

Level = Literal["info", "success", "warning", "error", "debug"]
Sink = Callable[[str, str], None]

LEVELS: tuple[Level, ...] = ("info", "success", "warning", "error", "debug")

_STYLES: dict[str, tuple[str, str]] = {
    "info": ("INFO", "blue"),
    "success": ("SUCCESS", "green"),
    "warning": ("WARNING", "yellow"),
    "error": ("ERROR", "red"),
    "debug": ("DEBUG", "cyan"),
}


def debug_enabled_from_env() -> bool:
    """``DEBUG=1`` in the environment turns on debug lines."""
    return os.environ.get("DEBUG", "0").strip().lower() in ("1", "true", "yes")


def click_sink(level: str, message: str) -> None:
    """Default sink: ``[LEVEL] message`` with a colored tag."""
    tag, color = _STYLES[level]
    err = level in ("warning", "error")
    click.secho(f"[{tag}]", fg=color, nl=False, err=err)
    click.echo(f" {message}", err=err)


class Reporter:
    """Emit status lines at one of five severities.

    Args:
        debug: Whether ``debug()`` lines are emitted.
        sink: ``(level, message)`` callable. Defaults to colored click output.
    """

    def __init__(self, debug: bool = False, sink: Sink | None = None):
        self.debug_enabled = debug
        self._sink = sink or click_sink

    def info(self, message: str) -> None:
        self._sink("info", message)

    def success(self, message: str) -> None:
        self._sink("success", message)

    def warning(self, message: str) -> None:
        self._sink("warning", message)

    def error(self, message: str) -> None:
        self._sink("error", message)

    def debug(self, message: str) -> None:
        if self.debug_enabled:
            self._sink("debug", message)

    def blank(self) -> None:
        """Visual separator between hook phases."""
        if self._sink is click_sink:
            click.echo()


class RecordingSink:
    """Collects ``(level, message)`` pairs instead of printing them."""

    def __init__(self) -> None:
        self.lines: list[tuple[str, str]] = []

    def __call__(self, level: str, message: str) -> None:
        self.lines.append((level, message))

    def messages(self, level: str | None = None) -> list[str]:
        return [m for lvl, m in self.lines if level is None or lvl == level]
