"""
Configuration loader — locate the devcontainer and read its settings.

Two files are read, both optional:

    .devcontainer/devinit.yml                 → BootstrapSettings overrides
    .devcontainer/images/grepai.config.yaml   → the embedding model name

A broken ``devinit.yml`` is an error.
A broken model config is not: the default model is used instead.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from devinit.core.models.service import DEFAULT_MODEL, ModelReference
from devinit.core.models.settings import BootstrapSettings

logger = logging.getLogger(__name__)

DEVCONTAINER_DIR = ".devcontainer"
SETTINGS_FILE = "devinit.yml"


class ConfigError(Exception):
    """Raised when devinit configuration is invalid or missing."""


def find_devcontainer_dir(start_dir: Path | None = None) -> Path | None:
    """Search for a ``.devcontainer`` directory, walking up from ``start_dir``.

    If ``start_dir`` itself is named ``.devcontainer`` it is returned.

    Returns:
        Path to the directory, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()
    if current.name == DEVCONTAINER_DIR and current.is_dir():
        return current

    for _ in range(20):  # safety limit
        candidate = current / DEVCONTAINER_DIR
        if candidate.is_dir():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_settings(devcontainer_dir: Path | None = None) -> BootstrapSettings:
    """Load BootstrapSettings, applying ``devinit.yml`` overrides if present.

    Raises:
        ConfigError: If the settings file exists but is invalid.
    """
    if devcontainer_dir is None:
        return BootstrapSettings()

    path = devcontainer_dir / SETTINGS_FILE
    if not path.is_file():
        logger.debug("No %s in %s — using defaults", SETTINGS_FILE, devcontainer_dir)
        return BootstrapSettings()

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return BootstrapSettings()
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        settings = BootstrapSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {path}: {e}") from e

    logger.info("Loaded settings overrides from %s", path)
    return settings


def load_model_reference(config_path: Path) -> ModelReference:
    """Read the embedding model name from the semantic-search config.

    The first ``model:`` key found inside a nested mapping wins
    (e.g. ``embedder: {provider: ollama, model: bge-m3}``). Missing file,
    unreadable YAML, or no such key all yield the default model.
    """
    if not config_path.is_file():
        logger.debug("No model config at %s — using %s", config_path, DEFAULT_MODEL)
        return ModelReference()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Cannot parse %s (%s) — using %s", config_path, e, DEFAULT_MODEL)
        return ModelReference()

    name = _find_nested_model(data)
    if not name:
        return ModelReference()
    return ModelReference(name=name)


def _find_nested_model(data: Any, depth: int = 0) -> str | None:
    """Depth-first search for a scalar ``model`` key below the top level."""
    if isinstance(data, dict):
        if depth > 0:
            value = data.get("model")
            if isinstance(value, (str, int, float)) and str(value).strip():
                return str(value)
        for value in data.values():
            found = _find_nested_model(value, depth + 1)
            if found:
                return found
    elif isinstance(data, list):
        for item in data:
            found = _find_nested_model(item, depth + 1)
            if found:
                return found
    return None
