"""
Command model — an immutable external command invocation.

A Command is a value: the same instance can be replayed by any number
of retry attempts without being mutated.
"""

from __future__ import annotations

import shlex
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Command(BaseModel):
    """An argv to execute, with optional environment and working directory."""

    model_config = ConfigDict(frozen=True)

    argv: tuple[str, ...]
    env: dict[str, str] = Field(default_factory=dict)  # overrides on top of os.environ
    cwd: str | None = None

    @field_validator("argv")
    @classmethod
    def _non_empty(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("argv must contain at least the program name")
        return value

    @classmethod
    def of(cls, *argv: str, **kwargs: Any) -> Command:
        """Shorthand: ``Command.of("apt-get", "update")``."""
        return cls(argv=tuple(argv), **kwargs)

    @property
    def program(self) -> str:
        return self.argv[0]

    @property
    def display(self) -> str:
        """Shell-quoted rendering for log lines."""
        return shlex.join(self.argv)

    def with_prefix(self, *prefix: str) -> Command:
        """Return a copy with ``prefix`` prepended to argv (e.g. ``sudo``)."""
        if not prefix:
            return self
        return self.model_copy(update={"argv": tuple(prefix) + self.argv})

    def __str__(self) -> str:
        return self.display
