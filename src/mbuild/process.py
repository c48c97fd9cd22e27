"""Run external tools synchronously while streaming their output.

The pipeline blocks on every child process, but the child's merged
stdout/stderr is drained on a background thread the whole time. Output is
forwarded line by line as it arrives instead of being buffered until exit,
and a chatty child can never stall on a full pipe.
"""

from __future__ import annotations

import subprocess
import threading
from pathlib import Path
from typing import IO, Callable, Optional, Sequence

OutputCallback = Callable[[str], None]


def _drain(pipe: IO[str], on_output: OutputCallback) -> None:
    """Forward every line read from *pipe* until EOF, then close it."""
    try:
        for line in pipe:
            on_output(line)
    finally:
        pipe.close()


def run_streaming(
    args: Sequence[str],
    on_output: Optional[OutputCallback] = None,
    cwd: Optional[Path] = None,
) -> int:
    """Run *args* to completion and return its exit status.

    stdin is closed for the child and stderr is merged into stdout. With an
    *on_output* callback the combined stream is decoded as UTF-8 (invalid
    bytes replaced) and each line is passed to the callback from a reader
    thread while the caller waits. Without a callback the output is
    discarded.

    There is no timeout: a child that never exits blocks the caller.

    Args:
        args: Program and arguments; no shell is involved.
        on_output: Receives each chunk of output, newline included.
        cwd: Working directory for the child.

    Returns:
        The child's exit status (negative for a signal on POSIX).

    Raises:
        OSError: If the program could not be started (missing, not
            executable, bad working directory).
    """
    if on_output is None:
        proc = subprocess.Popen(
            list(args),
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        return proc.wait()

    proc = subprocess.Popen(
        list(args),
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        encoding="utf-8",
        errors="replace",
        bufsize=1,
    )
    reader = threading.Thread(target=_drain, args=(proc.stdout, on_output), daemon=True)
    reader.start()
    returncode = proc.wait()
    reader.join()
    return returncode
