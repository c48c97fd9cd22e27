"""Path derivation for a Leaf project.

Everything the pipeline reads or writes is derived here from the project
root, the Leaf name, the build mode and the configuration. Nothing in this
module touches the filesystem, so the same paths can be shown by
``--dry-run`` and used by the real run.

Layout (relative to the project root)::

    Sources/<name>/                      project sources
    Sources/<name>/info.sap              required metadata
    Sources/<name>/<name>Preferences.swift
    .build/<mode>/lib<name>.dylib        build artifact
    LeafContainer/                       staging directory
    <name>.zip                           archive
"""

from __future__ import annotations

import os
import platform
from pathlib import Path

from mbuild.models import BuildMode, MbuildConfig


def library_suffix() -> str:
    """Return the shared library suffix the Swift toolchain uses on this platform."""
    system = platform.system()
    if system == "Darwin":
        return ".dylib"
    if system == "Windows":
        return ".dll"
    return ".so"


def default_install_dir(host_name: str) -> Path:
    """Return the per-user directory the host application loads development Leafs from.

    * macOS: ``~/Library/Application Support/<host>/Development``
    * Windows: ``%APPDATA%/<host>/Development``
    * Linux/BSD: ``$XDG_DATA_HOME/<host>/Development``
      (default ``~/.local/share/<host>/Development``)
    """
    system = platform.system()
    if system == "Darwin":
        base = Path.home() / "Library" / "Application Support"
    elif system == "Windows":
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    else:
        xdg = os.environ.get("XDG_DATA_HOME")
        base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / host_name / "Development"


class LeafLayout:
    """All paths involved in packaging one Leaf.

    Args:
        root: Project root (the directory containing ``Sources``).
        name: Leaf name.
        mode: Build mode; selects the ``.build/<mode>`` directory.
        config: Effective configuration.
    """

    def __init__(self, root: Path, name: str, mode: BuildMode, config: MbuildConfig) -> None:
        self.root = root
        self.name = name
        self.mode = mode
        self.config = config

    @property
    def sources_root(self) -> Path:
        return self.root / self.config.sources_dir

    @property
    def project_dir(self) -> Path:
        return self.sources_root / self.name

    @property
    def artifact(self) -> Path:
        suffix = self.config.library_suffix
        if suffix is None:
            suffix = library_suffix()
        filename = f"{self.config.library_prefix}{self.name}{suffix}"
        return self.root / self.config.build_dir / self.mode.value / filename

    @property
    def metadata(self) -> Path:
        return self.project_dir / self.config.metadata_file

    @property
    def prefs_descriptor(self) -> Path:
        filename = f"{self.name}{self.config.prefs_suffix}{self.config.prefs_extension}"
        return self.project_dir / filename

    @property
    def staging(self) -> Path:
        return self.root / self.config.staging_dir

    @property
    def staged_artifact(self) -> Path:
        # The library is renamed to the bare Leaf name inside the bundle.
        return self.staging / self.name

    @property
    def staged_metadata(self) -> Path:
        return self.staging / self.config.metadata_file

    @property
    def staged_prefs(self) -> Path:
        return self.staging / self.config.prefs_output

    @property
    def archive_name(self) -> str:
        return f"{self.name}.zip"

    @property
    def archive(self) -> Path:
        return self.root / self.archive_name

    @property
    def install_dir(self) -> Path:
        if self.config.install_dir:
            return Path(self.config.install_dir).expanduser()
        return default_install_dir(self.config.host_name)

    @property
    def install_target(self) -> Path:
        return self.install_dir / self.archive_name

    def build_command(self) -> list[str]:
        """Build tool invocation, e.g. ``swift build -c debug``."""
        return [*self.config.build_tool, "-c", self.mode.value]

    def prefs_command(self) -> list[str]:
        """Preferences program invocation: runner, descriptor, output path."""
        return [*self.config.prefs_runner, str(self.prefs_descriptor), str(self.staged_prefs)]

    def archive_command(self) -> list[str]:
        """Archiver invocation, run from the project root with relative paths."""
        return [*self.config.archiver, "-r", self.archive_name, self.config.staging_dir]
