"""The Leaf packaging pipeline.

:class:`Packager` runs five stages strictly in order and stops at the
first failure:

1. **compile** -- ``swift build -c <mode>``, output streamed live.
2. **stage** -- create the ``LeafContainer`` staging directory.
3. **collect** -- copy the built library and ``info.sap`` into staging and,
   with ``--prefs``, run the preferences program to write ``prefs.json``.
4. **archive** -- ``zip -r <name>.zip LeafContainer``.
5. **install** -- debug mode copies the archive into the host's development
   directory; release mode leaves it in place or copies it to
   ``--leaf-destination``.

Once the staging directory exists, :meth:`Packager.cleanup` runs exactly
once on every exit path: the staging directory is removed and, in debug
mode, so is the archive in the project root.

Each failure raises the matching :class:`~mbuild.exceptions.MbuildError`
subclass; the CLI prints its message with the ``[-]`` prefix.
"""

from __future__ import annotations

import os
import shlex
import shutil
from pathlib import Path
from typing import Optional

from mbuild.exceptions import (
    ArchiveFailure,
    ArchiveLaunchFailure,
    ArtifactNotFound,
    BuildFailure,
    CompileLaunchFailure,
    CopyFailure,
    InstallFailure,
    MetadataFailure,
    PreferencesFailure,
    ProjectValidationError,
    StagingDirFailure,
)
from mbuild.layout import LeafLayout
from mbuild.models import MbuildConfig, PackageRequest
from mbuild.output import debug, done, info, step, stream, warning
from mbuild.process import run_streaming


def _display(args: list[str]) -> str:
    return shlex.join(args)


class Packager:
    """Package one Leaf.

    Args:
        request: What to build, from the command line.
        config: Effective configuration.
        root: Project root; defaults to the current working directory.
    """

    def __init__(
        self,
        request: PackageRequest,
        config: Optional[MbuildConfig] = None,
        root: Optional[Path] = None,
    ) -> None:
        self.request = request
        self.config = config if config is not None else MbuildConfig()
        self.root = root if root is not None else Path.cwd()
        self.layout = LeafLayout(self.root, request.name, request.mode, self.config)

    # ------------------------------------------------------------------ #
    # Pre-flight
    # ------------------------------------------------------------------ #

    def validate(self) -> None:
        """Check the Leaf name against the project's source directories.

        Raises:
            ProjectValidationError: If there is no ``Sources`` directory or
                none of its entries is a directory named exactly like the Leaf.
        """
        sources = self.layout.sources_root
        try:
            entries = os.listdir(sources)
        except OSError:
            raise ProjectValidationError(
                f"Must run from inside a Swift package folder ({sources} not found)"
            ) from None
        name = self.request.name
        if name not in entries or not (sources / name).is_dir():
            raise ProjectValidationError(
                f"Name argument must exactly match the project's name "
                f"(no directory '{name}' in {sources})"
            )

    # ------------------------------------------------------------------ #
    # Stages
    # ------------------------------------------------------------------ #

    def compile(self) -> None:
        """Stage 1: run the build tool and wait for it."""
        command = self.layout.build_command()
        step(f"Running `{_display(command)}`")
        try:
            returncode = run_streaming(command, on_output=stream, cwd=self.root)
        except OSError as exc:
            raise CompileLaunchFailure(
                f"Failed to run {command[0]}. Ensure developer tools are installed ({exc})"
            ) from exc

        done(f"Finished {command[0]} build with exit code: {returncode}")
        if returncode != 0:
            raise BuildFailure(
                f"Build terminated with a non-zero status ({returncode}). Terminating."
            )

    def stage(self) -> None:
        """Stage 2: create an empty staging directory.

        Leftovers of an earlier run are removed first: a stale staging
        directory, and the ``<name>.zip`` in the project root, which
        ``zip -r`` would otherwise update in place and which would mask a
        failed archive step.
        """
        staging = self.layout.staging
        debug(f"Staging directory: {staging}")
        if staging.parent != self.root or staging.name in (
            "..",
            self.config.sources_dir,
            self.config.build_dir,
        ):
            raise StagingDirFailure(
                f"Refusing to use {staging} as the staging directory. Terminating."
            )
        try:
            if staging.is_dir():
                warning(f"Removing stale {staging}")
                shutil.rmtree(staging)
            self.layout.archive.unlink(missing_ok=True)
            staging.mkdir()
        except OSError as exc:
            raise StagingDirFailure(
                f"Failed to write to {self.root}. Ensure you have write permissions here ({exc})"
            ) from exc

    def collect_artifact(self) -> None:
        """Stage 3a: copy the built library into staging under the Leaf name."""
        artifact = self.layout.artifact
        step("Copying executable to container folder")
        debug(f"Looking for: {artifact}")
        if not artifact.is_file():
            raise ArtifactNotFound(f"New executable not found at {artifact}. Terminating.")
        try:
            shutil.copy2(artifact, self.layout.staged_artifact)
        except OSError as exc:
            raise CopyFailure(
                f"Failed to copy executable file to leaf container ({exc}). Terminating."
            ) from exc
        done("Copied executable to container folder")

    def collect_metadata(self) -> None:
        """Stage 3b: copy ``info.sap`` into staging byte for byte."""
        metadata = self.layout.metadata
        name = self.config.metadata_file
        step(f"Copying {name} from sources directory")
        if not metadata.is_file():
            raise MetadataFailure(
                f"{name} file not found. Must exist at {metadata}. Terminating."
            )
        try:
            shutil.copyfile(metadata, self.layout.staged_metadata)
        except OSError as exc:
            raise MetadataFailure(
                f"Failed to copy {name} to container folder ({exc}). Terminating."
            ) from exc
        done(f"Copied {name} from sources directory")

    def compile_preferences(self) -> None:
        """Stage 3c: run the preferences program, which writes ``prefs.json`` into staging.

        The descriptor's existence is not checked beforehand; the runner
        reports a missing file itself.
        """
        if not self.request.prefs:
            return

        step("Leaf contains preferences. Building")
        command = self.layout.prefs_command()
        debug(f"Preferences command: {_display(command)}")
        step("Compiling preferences")
        try:
            returncode = run_streaming(command, on_output=stream, cwd=self.root)
        except OSError as exc:
            raise PreferencesFailure(
                f"Failed to compile preferences ({exc}). Terminating."
            ) from exc

        if returncode != 0:
            if self.config.check_prefs_exit:
                raise PreferencesFailure(
                    f"Preferences program exited with status {returncode}. Terminating."
                )
            warning(f"Preferences program exited with status {returncode}")
        done("Successfully compiled preferences")

    def archive(self) -> None:
        """Stage 4: zip the staging directory into ``<name>.zip`` in the project root."""
        command = self.layout.archive_command()
        step("Zipping compiled leaf")
        debug(f"Archive command: {_display(command)}")
        try:
            returncode = run_streaming(command, cwd=self.root)
        except OSError as exc:
            raise ArchiveLaunchFailure(
                f"Failed to run {command[0]} command ({exc}). Terminating."
            ) from exc

        debug(f"{command[0]} exited with status {returncode}")
        if returncode != 0 or not self.layout.archive.is_file():
            raise ArchiveFailure(
                f"{command[0]} command failed (exit status {returncode}). Terminating."
            )
        done("Created compiled leaf")

    def install(self) -> Path:
        """Stage 5: deliver the archive.

        Returns:
            Where the Leaf ended up.
        """
        archive = self.layout.archive
        if not self.request.release:
            host = self.config.host_name
            target = self.layout.install_target
            step(f"Installing to {host}")
            debug(f"Install target: {target}")
            self._copy_archive(archive, target, f"Failed to copy leaf to {host}")
            done(f"Installed to {host}")
            return target

        if not self.request.leaf_destination:
            return archive

        target = self._release_target(self.request.leaf_destination)
        step(f"Copying leaf to {target}")
        if target.exists() and target.samefile(archive):
            return archive
        self._copy_archive(archive, target, f"Failed to copy leaf to {target}")
        done(f"Copied leaf to {target}")
        return target

    def cleanup(self) -> None:
        """Remove the staging directory and, outside release mode, the archive.

        Never raises; anything that cannot be removed is reported as a warning.
        """
        staging = self.layout.staging
        debug(f"Removing {staging}")
        try:
            shutil.rmtree(staging)
        except FileNotFoundError:
            pass
        except OSError as exc:
            warning(f"Could not remove {staging}: {exc}")

        if not self.request.release:
            archive = self.layout.archive
            try:
                archive.unlink()
            except FileNotFoundError:
                pass
            except OSError as exc:
                warning(f"Could not remove {archive}: {exc}")

    # ------------------------------------------------------------------ #
    # Orchestration
    # ------------------------------------------------------------------ #

    def run(self) -> Path:
        """Run the whole pipeline.

        Returns:
            The delivered Leaf: the install target in debug mode, the
            destination or the archive in release mode.

        Raises:
            MbuildError: The subclass for whichever stage failed first.
        """
        self.validate()
        if self.request.leaf_destination and not self.request.release:
            warning("--leaf-destination is ignored outside release mode")

        self.compile()
        self.stage()
        try:
            self.collect_artifact()
            self.collect_metadata()
            self.compile_preferences()
            self.archive()
            delivered = self.install()
        finally:
            self.cleanup()

        done("Completed")
        return delivered

    def plan(self) -> list[str]:
        """Describe what :meth:`run` would do, without doing any of it."""
        layout = self.layout
        steps = [
            f"Run `{_display(layout.build_command())}`",
            f"Create {layout.staging}",
            f"Copy {layout.artifact} -> {layout.staged_artifact}",
            f"Copy {layout.metadata} -> {layout.staged_metadata}",
        ]
        if self.request.prefs:
            steps.append(f"Run `{_display(layout.prefs_command())}`")
        steps.append(f"Run `{_display(layout.archive_command())}` in {self.root}")
        if not self.request.release:
            steps.append(f"Copy {layout.archive} -> {layout.install_target}")
        elif self.request.leaf_destination:
            target = self._release_target(self.request.leaf_destination)
            steps.append(f"Copy {layout.archive} -> {target}")
        steps.append(f"Remove {layout.staging}")
        if not self.request.release:
            steps.append(f"Remove {layout.archive}")
        return steps

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _release_target(self, destination: str) -> Path:
        """Resolve ``--leaf-destination``: a directory receives ``<name>.zip``."""
        path = Path(destination).expanduser()
        if not path.is_absolute():
            path = self.root / path
        if path.is_dir() or destination.endswith(("/", os.sep)):
            return path / self.layout.archive_name
        return path

    def _copy_archive(self, archive: Path, target: Path, message: str) -> None:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(archive, target)
        except OSError as exc:
            raise InstallFailure(f"{message} ({exc}). Terminating.") from exc


def describe(packager: Packager) -> None:
    """Print the dry-run plan for *packager*."""
    info(f"Dry run for {packager.request.name} ({packager.request.mode.value}):")
    for number, line in enumerate(packager.plan(), start=1):
        info(f"  {number}. {line}")
