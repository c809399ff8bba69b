"""
L0 Data — fixed system knowledge used by the bootstrap core.
"""

from __future__ import annotations

# ── Package manager locks (Debian/Ubuntu) ──────────────────────

DPKG_FRONTEND_LOCK = "/var/lib/dpkg/lock-frontend"
APT_LISTS_LOCK = "/var/lib/apt/lists/lock"
APT_CACHE_LOCK = "/var/cache/apt/archives/lock"

LOCK_PATHS: tuple[str, ...] = (
    DPKG_FRONTEND_LOCK,
    APT_LISTS_LOCK,
    APT_CACHE_LOCK,
)

# ── Local inference service ────────────────────────────────────

SERVICE_NAME = "Ollama"
LIST_ARTIFACTS_PATH = "/api/tags"
LAUNCHD_LABEL = "com.ollama"
LAUNCHD_JOB = "com.ollama.ollama"
SYSTEMD_UNIT = "ollama"

# Archive tools the vendor install script shells out to on Linux
LINUX_INSTALL_PREREQS: dict[str, str] = {
    "curl": "curl",
    "zstd": "zstd",
}

MANUAL_INSTALL_HINTS: dict[str, list[str]] = {
    "windows": [
        "Windows detected. Please install Ollama manually:",
        "  Download from: https://ollama.ai/download/windows",
        "  Or via winget: winget install Ollama.Ollama",
    ],
    "unknown": [
        "Unknown OS. Please install Ollama manually from https://ollama.ai",
    ],
}

ENABLE_HINTS: list[str] = [
    "To enable GPU acceleration, install Ollama manually:",
    "  macOS: brew install ollama",
    "  Linux: curl -fsSL https://ollama.ai/install.sh | sh",
    "  Windows: https://ollama.ai/download/windows",
]
