"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific failure category and is referenced by the
corresponding :class:`~mbuild.exceptions.MbuildError` subclass.
Build scripts and CI jobs can inspect the exit code to tell which stage of
the pipeline failed without parsing stderr.

Example::

    $ mbuild MyLeaf
    $ echo $?
    4   # EXIT_BUILD_FAILURE -- swift build returned a non-zero status
"""

EXIT_SUCCESS = 0
"""The Leaf was packaged (and installed, in debug mode)."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including configuration problems)."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, or the Leaf name does not match a project under ``Sources``."""

EXIT_LAUNCH_FAILURE = 3
"""An external tool (build tool or archiver) could not be started."""

EXIT_BUILD_FAILURE = 4
"""The build failed or did not produce the expected library."""

EXIT_WRITE_FAILURE = 5
"""The staging directory could not be created or an artifact could not be copied."""

EXIT_METADATA_FAILURE = 6
"""The required ``info.sap`` metadata file is missing or could not be copied."""

EXIT_PREFERENCES_FAILURE = 7
"""The preferences program could not be run or reported failure."""

EXIT_ARCHIVE_FAILURE = 8
"""The archiver did not produce the Leaf archive."""

EXIT_INSTALL_FAILURE = 9
"""The archive could not be copied to its install location."""

EXIT_INTERRUPTED = 130
"""The run was cancelled with Ctrl-C."""
