"""Exception hierarchy for mbuild.

All exceptions inherit from :class:`MbuildError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`mbuild.exit_codes`.
There is exactly one class per failure point of the packaging pipeline;
every one of them is fatal. The CLI command in :mod:`mbuild.app` catches
``MbuildError``, prints its message and exits with the matching code.

Subclass hierarchy::

    MbuildError (exit 1)
    +-- ProjectValidationError  (exit 2)
    +-- CompileLaunchFailure    (exit 3)
    +-- BuildFailure            (exit 4)
    |   +-- ArtifactNotFound    (exit 4)
    +-- StagingDirFailure       (exit 5)
    +-- CopyFailure             (exit 5)
    +-- MetadataFailure         (exit 6)
    +-- PreferencesFailure      (exit 7)
    +-- ArchiveLaunchFailure    (exit 3)
    +-- ArchiveFailure          (exit 8)
    +-- InstallFailure          (exit 9)
    +-- ConfigError             (exit 1)
"""

from mbuild.exit_codes import (
    EXIT_ARCHIVE_FAILURE,
    EXIT_BUILD_FAILURE,
    EXIT_GENERIC_FAILURE,
    EXIT_INSTALL_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_LAUNCH_FAILURE,
    EXIT_METADATA_FAILURE,
    EXIT_PREFERENCES_FAILURE,
    EXIT_WRITE_FAILURE,
)


class MbuildError(Exception):
    """Base exception for all mbuild errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`mbuild.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ProjectValidationError(MbuildError):
    """Raised before any side effect when the Leaf name does not match a project."""

    exit_code = EXIT_INVALID_USAGE


class CompileLaunchFailure(MbuildError):
    """Raised when the build tool cannot be started (toolchain missing or misconfigured)."""

    exit_code = EXIT_LAUNCH_FAILURE


class BuildFailure(MbuildError):
    """Raised when the build tool exits with a non-zero status."""

    exit_code = EXIT_BUILD_FAILURE


class ArtifactNotFound(BuildFailure):
    """Raised when the build reported success but the library is not where expected."""


class StagingDirFailure(MbuildError):
    """Raised when the staging directory cannot be created."""

    exit_code = EXIT_WRITE_FAILURE


class CopyFailure(MbuildError):
    """Raised when the built library cannot be copied into the staging directory."""

    exit_code = EXIT_WRITE_FAILURE


class MetadataFailure(MbuildError):
    """Raised when ``info.sap`` is missing or cannot be copied. Every Leaf must ship one."""

    exit_code = EXIT_METADATA_FAILURE


class PreferencesFailure(MbuildError):
    """Raised when the preferences program cannot be started or exits non-zero."""

    exit_code = EXIT_PREFERENCES_FAILURE


class ArchiveLaunchFailure(MbuildError):
    """Raised when the archiver cannot be started."""

    exit_code = EXIT_LAUNCH_FAILURE


class ArchiveFailure(MbuildError):
    """Raised when the archive does not exist after the archiver has finished."""

    exit_code = EXIT_ARCHIVE_FAILURE


class InstallFailure(MbuildError):
    """Raised when the archive cannot be copied to Maple or to the release destination."""

    exit_code = EXIT_INSTALL_FAILURE


class ConfigError(MbuildError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
