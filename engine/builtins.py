from __future__ import annotations

import logging
import signal
from pathlib import Path
from typing import Callable, Dict, Sequence, TYPE_CHECKING

from .streams import StageIO, describe_error

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)

SUCCESS = 0
FAILURE = 1
USAGE = 2
BROKEN_PIPE = 128 + signal.SIGPIPE

BuiltinFunc = Callable[[Sequence[str], StageIO, "Context"], int]


class ExitRequest(Exception):
    """Raised by ``exit`` to ask the driver to terminate with ``code``."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


def run_builtin(name: str, args: Sequence[str], io: StageIO, context: "Context") -> int:
    """Run built-in ``name``; I/O failures become a diagnostic and a failure status."""
    handler = BUILTINS[name]
    try:
        # Built-ins ignore their input, but a missing '<' file still fails the stage.
        io.stdin_handle()
    except (OSError, ValueError) as exc:
        io.error(describe_error(f"{name}: {io.stdin_file}", exc))
        return FAILURE

    try:
        return handler(args, io, context)
    except BrokenPipeError:
        logger.debug("%s: reader went away", name)
        return BROKEN_PIPE
    except OSError as exc:
        target = f"{name}: {exc.filename}" if exc.filename else name
        io.error(describe_error(target, exc))
        return FAILURE
    except ValueError as exc:
        io.error(describe_error(name, exc))
        return FAILURE


def exit_command(args: Sequence[str], io: StageIO, context: "Context") -> int:
    if len(args) > 1:
        io.error("exit: too many arguments")
        return FAILURE
    if not args:
        raise ExitRequest(SUCCESS)
    try:
        code = int(args[0])
    except ValueError:
        io.error(f"exit: {args[0]}: numeric argument required")
        raise ExitRequest(USAGE) from None
    raise ExitRequest(code & 0xFF)


def echo_command(args: Sequence[str], io: StageIO, context: "Context") -> int:
    io.write(f"{' '.join(args)}\n".encode())
    return SUCCESS


def type_command(args: Sequence[str], io: StageIO, context: "Context") -> int:
    """Copy each named file to stdout; bad operands are reported and skipped."""
    if not args:
        io.error("type: missing operand")
        return FAILURE

    status = SUCCESS
    for name in args:
        path = context.resolve(name)
        if not path.exists():
            io.error(f"type: {name}: No such file or directory")
            status = FAILURE
            continue
        if path.is_dir():
            io.error(f"type: {name}: Is a directory")
            status = FAILURE
            continue
        try:
            data = path.read_bytes()
        except OSError as exc:
            io.error(describe_error(f"type: {name}", exc))
            status = FAILURE
            continue
        # The stdout file is opened once, so later files append after the first.
        io.write(data)
    return status


def cd_command(args: Sequence[str], io: StageIO, context: "Context") -> int:
    if len(args) > 1:
        io.error("cd: too many arguments")
        return FAILURE

    target = args[0] if args else "~"
    destination = _expand_home(target, context)
    if not destination.exists():
        io.error(f"cd: {target}: No such file or directory")
        return FAILURE
    if not destination.is_dir():
        io.error(f"cd: {target}: Not a directory")
        return FAILURE

    context.change_directory(destination)
    logger.debug("working directory is now %s", context.path)
    return SUCCESS


def _expand_home(target: str, context: "Context") -> Path:
    if target == "~":
        return context.home
    if target.startswith("~/"):
        return context.resolve(context.home / target[2:])
    return context.resolve(target)


BUILTINS: Dict[str, BuiltinFunc] = {
    "exit": exit_command,
    "echo": echo_command,
    "type": type_command,
    "cd": cd_command,
}
