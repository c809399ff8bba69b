"""
L3 Detection — operating system identification.

Resolved once per run; every platform-specific behaviour hangs off
the returned OSKind instead of re-inspecting a string tag.
"""

from __future__ import annotations

import os
import sys
from enum import StrEnum


class OSKind(StrEnum):
    MACOS = "macos"
    LINUX = "linux"
    WINDOWS = "windows"
    UNKNOWN = "unknown"


def detect_os(ostype: str | None = None) -> OSKind:
    """Map a platform identifier to an OSKind.

    Uses ``ostype`` if given, else the ``OSTYPE`` environment variable
    (bash exports it on some hosts), else ``sys.platform``.
    """
    tag = (ostype or os.environ.get("OSTYPE") or sys.platform).lower()

    if tag.startswith("darwin"):
        return OSKind.MACOS
    if tag.startswith("linux"):
        return OSKind.LINUX
    if tag.startswith(("msys", "cygwin", "mingw", "win32")):
        return OSKind.WINDOWS
    return OSKind.UNKNOWN
