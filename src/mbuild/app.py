"""Typer application and CLI entry point for mbuild.

The CLI is a single command::

    mbuild NAME [--release-mode] [--prefs] [-l PATH] [-n] [-v] [-q] [--no-color]

It resolves the configuration, builds a :class:`~mbuild.models.PackageRequest`
from the arguments, and hands both to :class:`~mbuild.packager.Packager`.
Pipeline failures arrive as :class:`~mbuild.exceptions.MbuildError`
subclasses; the command prints the message and exits with the error's code.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler and writes a crash log for
anything that is not an ``MbuildError``.

See Also:
    :mod:`mbuild.config`: Configuration resolution.
    :mod:`mbuild.output`: Output manager initialised by the command.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from mbuild import __version__
from mbuild.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED


app = typer.Typer(
    name="mbuild",
    help="Install and compile Maple Leafs.",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"mbuild {__version__}")
        raise typer.Exit()


@app.command()
def package(
    name: str = typer.Argument(
        ..., help="The name of this Leaf, matching a directory under Sources."
    ),
    release_mode: bool = typer.Option(
        False, "--release-mode", help="Create a packaged and distributable Leaf."
    ),
    prefs: bool = typer.Option(
        False, "--prefs", help="Include preferences."
    ),
    leaf_destination: Optional[str] = typer.Option(
        None, "--leaf-destination", "-l",
        help="Destination for the compiled Leaf. Ignored if not in release mode.",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Print the planned steps without running them."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress progress and build tool output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Compile a Leaf, bundle it with its info.sap, zip it and install it into Maple.

    In debug mode (the default) the archive is copied into Maple's
    development directory and removed from the project. With
    ``--release-mode`` the archive is kept for distribution.

    Example::

        mbuild MyLeaf
        mbuild MyLeaf --prefs
        mbuild MyLeaf --release-mode -l ~/Desktop/
    """
    from mbuild.config import resolve_config
    from mbuild.exceptions import MbuildError
    from mbuild.models import BuildMode, PackageRequest
    from mbuild.output import OutputManager, debug, error, info, set_output
    from mbuild.packager import Packager, describe

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))

    request = PackageRequest(
        name=name,
        mode=BuildMode.RELEASE if release_mode else BuildMode.DEBUG,
        prefs=prefs,
        leaf_destination=leaf_destination,
        dry_run=dry_run,
    )

    try:
        config = resolve_config()
        debug(f"Configuration: {config.model_dump(mode='json')}")
        packager = Packager(request, config)

        if request.dry_run:
            packager.validate()
            describe(packager)
            return

        delivered = packager.run()
    except MbuildError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code)

    info(f"Leaf: {delivered}")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from mbuild.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``mbuild`` console script.

    Unexpected exceptions (anything other than the ``MbuildError``
    subclasses handled by the command) produce a crash log and a generic
    failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from mbuild.output import error

        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
