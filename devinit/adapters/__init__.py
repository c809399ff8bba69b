"""Adapters — bindings to the host OS and external tools.

Public re-exports for convenient access.
"""

from devinit.adapters.base import CapturedOutput, CommandRunner
from devinit.adapters.mock import MockRunner
from devinit.adapters.shell.command import ShellRunner

__all__ = [
    "CapturedOutput",
    "CommandRunner",
    "MockRunner",
    "ShellRunner",
]
