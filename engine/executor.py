from __future__ import annotations

import logging
import subprocess
from typing import Any, TYPE_CHECKING

from .builtins import FAILURE, run_builtin
from .commands import Stage
from .dispatcher import Builtin, NotFound, resolve
from .streams import StageIO, describe_error

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)

CANNOT_EXECUTE = 126
NOT_FOUND = 127


class LaunchError(RuntimeError):
    """Raised when a stage's child process or its redirections cannot be set up."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status


def run_stage(stage: Stage, context: "Context") -> int:
    """Run one built-in or external stage to completion and return its exit status."""
    resolution = resolve(stage.executable, context)
    with StageIO.for_stage(stage, context) as io:
        if isinstance(resolution, Builtin):
            return run_builtin(resolution.name, stage.args, io, context)
        if isinstance(resolution, NotFound):
            io.error(not_found_message(stage))
            return NOT_FOUND

        try:
            process = launch(resolution.path, stage, io, context)
        except LaunchError as exc:
            io.error(str(exc))
            return exc.status
        return wait(process, stage)


def launch(
    path: str,
    stage: Stage,
    io: StageIO,
    context: "Context",
    *,
    stdin: Any = None,
    stdout: Any = None,
) -> subprocess.Popen:
    """
    Start ``stage`` as a child process running ``path``.

    ``stdin``/``stdout`` are the fallbacks used when the stage does not redirect
    that stream (``None`` inherits the interpreter's stream).
    """
    stderr = io.stderr_handle()
    stdin = _open_redirection(io.stdin_handle, io.stdin_file, stage) or stdin
    stdout = _open_redirection(io.stdout_handle, io.stdout_file, stage) or stdout

    argv = [path, *stage.args]
    try:
        process = subprocess.Popen(
            argv,
            cwd=str(context.path),
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
        )
    except (OSError, ValueError) as exc:
        # ValueError covers arguments Popen refuses outright, such as embedded NUL bytes.
        status = NOT_FOUND if isinstance(exc, FileNotFoundError) else CANNOT_EXECUTE
        raise LaunchError(describe_error(stage.executable, exc), status) from exc

    logger.debug("launched pid %s: %s", process.pid, argv)
    return process


def wait(process: subprocess.Popen, stage: Stage) -> int:
    returncode = process.wait()
    logger.debug("%s (pid %s) exited with %s", stage.executable, process.pid, returncode)
    return exit_status(returncode)


def exit_status(returncode: int) -> int:
    # Popen reports death by signal N as -N.
    if returncode < 0:
        return 128 - returncode
    return returncode


def not_found_message(stage: Stage) -> str:
    return f"{stage.executable}: command not found"


def _open_redirection(opener, filename: str | None, stage: Stage):
    try:
        return opener()
    except (OSError, ValueError) as exc:
        raise LaunchError(describe_error(f"{stage.executable}: {filename}", exc), FAILURE) from exc
