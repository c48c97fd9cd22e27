"""Console output with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- the raw output of the external tools (``swift build``, the
  preferences program), forwarded verbatim as it arrives.
* **stderr** -- all of mbuild's own diagnostics: step progress, warnings,
  errors and debug lines.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

Pipeline steps keep the classic prefixes: ``[-]`` when a step starts (or
fails) and ``[+]`` when it has finished.

The module exposes two layers:

1. :class:`OutputManager` -- holds the Rich consoles and the quiet/verbose
   flags. Created once in :func:`~mbuild.app.package` and installed via
   :func:`set_output`.
2. Module-level convenience functions (:func:`step`, :func:`done`,
   :func:`error`, ...) that delegate to the global ``OutputManager`` so
   callers do not need to pass it around.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

from rich.console import Console
from rich.markup import escape

STEP_PREFIX = "[-]"
DONE_PREFIX = "[+]"


class OutputManager:
    """Central manager for all CLI output.

    Args:
        no_color: Disable all colour and Rich markup.
        quiet: Suppress progress messages and forwarded tool output.
        verbose: Enable debug-level messages on stderr.
    """

    def __init__(
        self,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        # Console for diagnostics
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
            highlight=False,
            soft_wrap=True,
        )

    @property
    def is_quiet(self) -> bool:
        """Whether quiet mode is enabled."""
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        """Whether verbose mode is enabled."""
        return self._verbose

    # ------------------------------------------------------------------ #
    # Tool output (stdout)
    # ------------------------------------------------------------------ #

    def stream(self, text: str) -> None:
        """Forward a chunk of child-process output to stdout unchanged.

        No newline is added; the chunk is flushed immediately so output
        appears while the child is still running. Suppressed by ``--quiet``.

        Args:
            text: Decoded output exactly as read from the child's pipe.
        """
        if not self._quiet:
            sys.stdout.write(text)
            sys.stdout.flush()

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def step(self, message: str) -> None:
        """Announce a pipeline step with the ``[-]`` prefix. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(f"{STEP_PREFIX} {message}", style=None)

    def done(self, message: str) -> None:
        """Report a finished step with a green ``[+]`` prefix. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(f"{DONE_PREFIX} {message}", style="green")

    def info(self, message: str) -> None:
        """Print an unprefixed informational message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._emit(message, style=None)

    def warning(self, message: str) -> None:
        """Print a yellow warning. NOT suppressed by ``--quiet``."""
        self._emit(f"{STEP_PREFIX} Warning: {message}", style="yellow")

    def error(self, message: str) -> None:
        """Print a bold-red ``[-]`` error. Never suppressed."""
        self._emit(f"{STEP_PREFIX} {message}", style="bold red")

    def debug(self, message: str) -> None:
        """Print a dimmed debug line. Only shown when ``--verbose`` is active."""
        if self._verbose:
            self._emit(f"[debug] {message}", style="dim")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _emit(self, text: str, style: Optional[str]) -> None:
        if self._no_color:
            print(text, file=sys.stderr, flush=True)
        elif style is None:
            self._stderr.print(escape(text))
        else:
            self._stderr.print(f"[{style}]{escape(text)}[/{style}]")


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _should_disable_color() -> bool:
    """Check if color should be disabled per clig.dev.

    Returns True when NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global :class:`OutputManager` instance."""
    global _output
    _output = output


def reset_output() -> None:
    """Reset the global :class:`OutputManager` to ``None``.

    Primarily useful in test suites to ensure a clean state between tests.
    """
    global _output
    _output = None


# ------------------------------------------------------------------ #
# Convenience functions that use the global instance
# ------------------------------------------------------------------ #


def stream(text: str) -> None:
    """Forward child-process output to stdout via the global OutputManager."""
    get_output().stream(text)


def step(message: str) -> None:
    """Announce a pipeline step via the global OutputManager."""
    get_output().step(message)


def done(message: str) -> None:
    """Report a finished step via the global OutputManager."""
    get_output().done(message)


def info(message: str) -> None:
    """Print info message to stderr via the global OutputManager."""
    get_output().info(message)


def warning(message: str) -> None:
    """Print warning to stderr via the global OutputManager."""
    get_output().warning(message)


def error(message: str) -> None:
    """Print error to stderr via the global OutputManager."""
    get_output().error(message)


def debug(message: str) -> None:
    """Print debug message to stderr via the global OutputManager."""
    get_output().debug(message)
