"""Canonical Pydantic models shared across all mbuild modules.

**Configuration model** -- :class:`MbuildConfig`, serialised as JSON in the
user's config directory (``config.json``) and optionally overridden by a
project-local ``mbuild.json``. Its defaults reproduce the stock Swift
Package Manager workflow for Maple Leafs.

**Invocation models** -- :class:`BuildMode` and :class:`PackageRequest`,
built once from the command-line arguments and never mutated afterwards.

All models use Pydantic v2.
"""

from __future__ import annotations

import enum
import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class BuildMode(str, enum.Enum):
    """Build configuration passed to the build tool as ``-c <mode>``."""

    DEBUG = "debug"
    RELEASE = "release"


class MbuildConfig(BaseModel):
    """Tool configuration.

    Every external command is stored as an argument list; the pipeline
    appends its own arguments to it:

    * ``build_tool + ["-c", mode]``
    * ``prefs_runner + [descriptor, staged prefs.json]``
    * ``archiver + ["-r", "<name>.zip", staging_dir]``

    Example::

        MbuildConfig(host_name="Maple", build_tool=["xcrun", "swift", "build"])
    """

    model_config = ConfigDict(extra="forbid")

    host_name: str = Field(
        default="Maple", description="Host application that loads the Leaf"
    )
    sources_dir: str = Field(
        default="Sources", description="Directory holding one sub-directory per target"
    )
    build_dir: str = Field(
        default=".build", description="Build tool output directory"
    )
    staging_dir: str = Field(
        default="LeafContainer", description="Ephemeral directory that is zipped"
    )
    metadata_file: str = Field(
        default="info.sap", description="Required Leaf descriptor inside Sources/<name>"
    )
    prefs_output: str = Field(
        default="prefs.json", description="File the preferences program writes"
    )
    build_tool: list[str] = Field(default_factory=lambda: ["swift", "build"])
    archiver: list[str] = Field(default_factory=lambda: ["zip"])
    prefs_runner: list[str] = Field(default_factory=lambda: ["swift"])
    prefs_suffix: str = "Preferences"
    prefs_extension: str = ".swift"
    library_prefix: str = "lib"
    library_suffix: Optional[str] = Field(
        default=None,
        description="Shared library suffix; platform default when unset",
    )
    install_dir: Optional[str] = Field(
        default=None,
        description="Override for the host's development Leaf directory",
    )
    check_prefs_exit: bool = Field(
        default=True,
        description="Treat a non-zero exit of the preferences program as fatal",
    )

    @field_validator("build_tool", "archiver", "prefs_runner")
    @classmethod
    def _non_empty_command(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("command must contain at least the program name")
        return value

    @field_validator("sources_dir", "build_dir", "staging_dir")
    @classmethod
    def _single_directory_name(cls, value: str) -> str:
        if value in ("", ".", "..") or os.path.isabs(value):
            raise ValueError(f"{value!r} is not a directory name")
        if "/" in value or (os.altsep and os.altsep in value) or os.sep in value:
            raise ValueError(f"{value!r} must be a single directory name, not a path")
        return value

    @model_validator(mode="after")
    def _staging_is_separate(self) -> "MbuildConfig":
        # cleanup removes the staging directory recursively
        if self.staging_dir in (self.sources_dir, self.build_dir):
            raise ValueError(
                f"staging_dir {self.staging_dir!r} must differ from sources_dir and build_dir"
            )
        return self


class PackageRequest(BaseModel):
    """A single packaging run, built from the CLI arguments.

    Attributes:
        name: Leaf name; must match a directory under ``Sources``.
        mode: Debug or release build.
        prefs: Compile ``<name>Preferences.swift`` into ``prefs.json``.
        leaf_destination: Where to copy the release archive, if anywhere.
        dry_run: Only print the planned steps.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    mode: BuildMode = BuildMode.DEBUG
    prefs: bool = False
    leaf_destination: Optional[str] = None
    dry_run: bool = False

    @property
    def release(self) -> bool:
        """Whether this is a release-mode run."""
        return self.mode == BuildMode.RELEASE
