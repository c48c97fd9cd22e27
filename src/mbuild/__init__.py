"""mbuild -- Compile, package, and install Maple Leafs.

A Leaf is a plugin bundle for the Maple host application. This package
drives the external Swift toolchain to build a Leaf, collects the build
artifact together with its ``info.sap`` metadata (and optionally compiled
preferences) into a staging directory, zips it, and installs the archive
into Maple's development directory.

Typical workflow::

    mbuild MyLeaf                  # debug build, installed into Maple
    mbuild MyLeaf --release-mode   # distributable MyLeaf.zip
    mbuild MyLeaf --prefs          # also compile MyLeafPreferences.swift

Modules:
    app: Typer application and CLI entry point.
    packager: The sequential compile/stage/collect/archive/install pipeline.
    process: Child process execution with live output streaming.
    layout: Path derivation for sources, artifacts, and install targets.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
