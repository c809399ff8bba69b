"""
Environment file — compose project name and ``.env`` templating.

The compose project name comes from the git remote so that two clones
of different repositories never share containers.
"""

from __future__ import annotations

import logging
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from devinit.adapters.base import CommandRunner
from devinit.core.models.command import Command

logger = logging.getLogger(__name__)

PROJECT_NAME_KEY = "COMPOSE_PROJECT_NAME"
DEFAULT_PROJECT_NAME = "devcontainer"

_LEADING_JUNK_RE = re.compile(r"^[^a-zA-Z0-9]*")
_INVALID_CHARS_RE = re.compile(r"[^a-z0-9_-]")


def sanitize_project_name(raw: str) -> str:
    """Make ``raw`` acceptable as a Docker Compose project name.

    Must start with a letter or digit; only lowercase alphanumerics,
    hyphens and underscores. Empty results fall back to the default.
    """
    name = _LEADING_JUNK_RE.sub("", raw.strip()).lower()
    name = _INVALID_CHARS_RE.sub("-", name)
    return name or DEFAULT_PROJECT_NAME


def repo_name_from_remote(url: str) -> str:
    """``git@github.com:org/My.Repo.git`` → ``My.Repo``."""
    tail = url.strip().rstrip("/")
    tail = re.split(r"[/:]", tail)[-1] if tail else ""
    return tail.removesuffix(".git")


def resolve_project_name(runner: CommandRunner, cwd: Path | None = None) -> str:
    """Derive the compose project name from ``remote.origin.url``."""
    result = runner.capture(
        Command.of("git", "config", "--get", "remote.origin.url",
                   cwd=str(cwd) if cwd else None),
        timeout=10,
    )
    remote = result.stdout.strip() if result.ok else ""
    if not remote:
        logger.debug("No git remote found; using default project name")
    return sanitize_project_name(repo_name_from_remote(remote))


@dataclass
class EnvFileResult:
    path: Path
    project_name: str
    created: bool = False
    action: str = "unchanged"  # updated | added | unchanged

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "project_name": self.project_name,
            "created": self.created,
            "action": self.action,
        }


def _read_raw(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def _write_atomic(path: Path, content: str) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".env_", suffix=".tmp")
    tmp = Path(tmp_name)
    try:
        with open(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        tmp.replace(path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise


def ensure_env_file(
    env_file: Path,
    template: Path,
    project_name: str,
    dry_run: bool = False,
) -> EnvFileResult:
    """Create ``env_file`` from ``template`` if needed and pin the project name.

    Every ``COMPOSE_PROJECT_NAME=`` line is rewritten in place, keeping its
    own line ending; with none present the line is prepended. Other lines
    are preserved byte for byte. ``dry_run`` computes the result without
    writing anything.
    """
    result = EnvFileResult(path=env_file, project_name=project_name)

    if not env_file.exists():
        if template.is_file():
            content = _read_raw(template)
        else:
            logger.warning("Template %s missing; creating an empty %s", template, env_file.name)
            content = ""
        result.created = True
    else:
        content = _read_raw(env_file)

    line = f"{PROJECT_NAME_KEY}={project_name}"
    lines = content.splitlines(keepends=True)
    matched = False
    for i, existing in enumerate(lines):
        if not existing.startswith(f"{PROJECT_NAME_KEY}="):
            continue
        matched = True
        body = existing.rstrip("\r\n")
        if body != line:
            lines[i] = line + existing[len(body):]
            result.action = "updated"
    if not matched:
        lines.insert(0, line + "\n")
        result.action = "added"

    new_content = "".join(lines)
    if dry_run:
        logger.debug("Dry run: %s left as is (%s)", env_file, result.action)
        return result
    if result.created or new_content != content:
        env_file.parent.mkdir(parents=True, exist_ok=True)
        _write_atomic(env_file, new_content)
    return result
