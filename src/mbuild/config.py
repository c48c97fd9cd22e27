"""Configuration management with XDG paths and precedence resolution.

This module handles all persistent configuration for mbuild:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.mbuild/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~mbuild.models.MbuildConfig` JSON
  file in the config directory.
* **Project config** -- An optional ``mbuild.json`` next to
  ``Package.swift`` that overrides individual keys for one project.
* **Precedence resolution** -- :func:`resolve_config` merges environment
  variables, project-local config, and global config into the effective
  configuration.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from mbuild.exceptions import ConfigError
from mbuild.models import MbuildConfig

_APP_NAME = "mbuild"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "mbuild.json"

_ENV_OVERRIDES = {
    "MBUILD_HOST": "host_name",
    "MBUILD_INSTALL_DIR": "install_dir",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory path.

    On Linux/BSD: ``$XDG_CONFIG_HOME/mbuild/`` (default ``~/.config/mbuild/``).
    On macOS/Windows: ``~/.mbuild/``.

    The directory is not created; mbuild only ever reads from it.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/mbuild/`` (default ``~/.local/share/mbuild/``).
    On macOS/Windows: ``~/.mbuild/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Config files ---


def _read_json(path: Path, label: str) -> Optional[dict[str, Any]]:
    """Read a JSON object from *path*, or ``None`` if the file does not exist."""
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def load_global_config() -> MbuildConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~mbuild.models.MbuildConfig`. If the file
        does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = get_config_dir() / _CONFIG_FILENAME
    data = _read_json(path, "global config")
    if data is None:
        return MbuildConfig()
    try:
        return MbuildConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def load_project_config(root: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load project-local overrides from ``<root>/mbuild.json``.

    Args:
        root: Project directory; defaults to the current working directory.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a valid JSON object.
    """
    base = root if root is not None else Path.cwd()
    return _read_json(base / _PROJECT_CONFIG_FILENAME, "project config")


# --- Precedence resolution ---


def resolve_config(root: Optional[Path] = None) -> MbuildConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. Environment variables (``MBUILD_HOST``, ``MBUILD_INSTALL_DIR``)
        2. Project config (``./mbuild.json``)
        3. User config (``~/.config/mbuild/config.json``)
        4. Defaults

    Raises:
        ConfigError: If any layer is invalid or the merged result fails
            validation.
    """
    data = load_global_config().model_dump(mode="json")

    project = load_project_config(root)
    if project is not None:
        data.update(project)

    for env_var, key in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data[key] = value

    try:
        return MbuildConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
