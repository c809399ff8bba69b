"""
Feature validation — structural checks over ``.devcontainer/features``.

Layout expected::

    features/<category>/<feature>/devcontainer-feature.json
    features/<category>/<feature>/install.sh   (executable)

Missing files are errors (the build would fail later anyway).
A non-executable ``install.sh`` is fixed in place and counted.
No retries: the filesystem either has the file or it does not.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

FEATURE_MANIFEST = "devcontainer-feature.json"
FEATURE_INSTALLER = "install.sh"


@dataclass
class FeatureReport:
    """Outcome of a validation pass."""

    features_dir: Path | None = None
    checked: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    fixed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "features_dir": str(self.features_dir) if self.features_dir else None,
            "ok": self.ok,
            "checked": self.checked,
            "errors": self.errors,
            "fixed": self.fixed,
        }


def _make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def validate_features(features_dir: Path, fix: bool = True) -> FeatureReport:
    """Check every ``<category>/<feature>`` directory under ``features_dir``.

    A missing ``features_dir`` simply means there are no features. With
    ``fix=False`` a non-executable installer is still listed in ``fixed``
    but its mode is left alone.
    """
    report = FeatureReport(features_dir=features_dir)
    if not features_dir.is_dir():
        logger.debug("No features directory at %s", features_dir)
        return report

    for category in sorted(p for p in features_dir.iterdir() if p.is_dir()):
        for feature in sorted(p for p in category.iterdir() if p.is_dir()):
            name = f"{category.name}/{feature.name}"
            report.checked.append(name)

            if not (feature / FEATURE_MANIFEST).is_file():
                report.errors.append(f"{name}: Missing {FEATURE_MANIFEST}")
                continue

            installer = feature / FEATURE_INSTALLER
            if not installer.is_file():
                report.errors.append(f"{name}: Missing {FEATURE_INSTALLER}")
                continue

            if not os.access(installer, os.X_OK):
                if not fix:
                    logger.debug("Would chmod +x %s", installer)
                    report.fixed.append(name)
                    continue
                try:
                    _make_executable(installer)
                except OSError as e:
                    report.errors.append(f"{name}: Cannot make {FEATURE_INSTALLER} executable: {e}")
                    continue
                report.fixed.append(name)

    logger.info(
        "Validated %d features: %d errors, %d fixed",
        len(report.checked), len(report.errors), len(report.fixed),
    )
    return report
