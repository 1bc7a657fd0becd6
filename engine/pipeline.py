from __future__ import annotations

import logging
import os
import subprocess
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import ExitStack
from dataclasses import dataclass
from typing import BinaryIO, List, Sequence, TYPE_CHECKING

from .builtins import ExitRequest, run_builtin
from .commands import PipelineCommand, Stage
from .dispatcher import Builtin, NotFound, resolve
from .executor import NOT_FOUND, LaunchError, launch, not_found_message, wait
from .streams import StageIO

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass
class _RunningStage:
    """A started (or failed-to-start) stage and the pipe ends the relays use."""

    stage: Stage
    stdin: BinaryIO | None = None
    stdout: BinaryIO | None = None
    process: subprocess.Popen | None = None
    future: Future | None = None
    status: int = NOT_FOUND

    def wait(self) -> int:
        if self.process is not None:
            return wait(self.process, self.stage)
        if self.future is not None:
            return self.future.result()
        return self.status


def run_pipeline(pipeline: PipelineCommand, context: "Context") -> int:
    """
    Run every stage concurrently, relaying each stage's stdout into the next stage's stdin.

    Stages that cannot start still take part: their neighbours see a closed stream.
    Returns the last stage's exit status once all stages and relays are finished.
    """
    stages: Sequence[Stage] = pipeline.stages
    last = len(stages) - 1
    running: List[_RunningStage] = []
    relays: List[Future] = []

    with ExitStack() as stack, ThreadPoolExecutor(
        max_workers=2 * len(stages), thread_name_prefix="minishell-relay"
    ) as pool:
        for index, stage in enumerate(stages):
            started = _start(stage, context, stack, pool, first=index == 0, last=index == last)
            if running:
                relays.append(pool.submit(relay, running[-1].stdout, started.stdin))
            running.append(started)

        statuses = [started.wait() for started in running]
        for future in relays:
            future.result()

    logger.debug("pipeline statuses: %s", statuses)
    return statuses[-1]


def relay(source: BinaryIO | None, destination: BinaryIO | None) -> int:
    """Copy bytes from ``source`` to ``destination`` until EOF, then close both ends."""
    copied = 0
    try:
        if source is None or destination is None:
            return copied
        while True:
            chunk = source.read1(CHUNK_SIZE)
            if not chunk:
                break
            destination.write(chunk)
            destination.flush()
            copied += len(chunk)
    except BrokenPipeError:
        logger.debug("relay stopped after %d bytes: reader closed its input", copied)
    finally:
        _close(destination)
        _close(source)
    logger.debug("relay finished after %d bytes", copied)
    return copied


def _start(
    stage: Stage,
    context: "Context",
    stack: ExitStack,
    pool: ThreadPoolExecutor,
    *,
    first: bool,
    last: bool,
) -> _RunningStage:
    resolution = resolve(stage.executable, context)

    if isinstance(resolution, Builtin):
        return _start_builtin(resolution.name, stage, context, stack, pool, last=last)

    io = stack.enter_context(StageIO.for_stage(stage, context))
    if isinstance(resolution, NotFound):
        io.error(not_found_message(stage))
        return _RunningStage(stage, status=NOT_FOUND)

    try:
        process = launch(
            resolution.path,
            stage,
            io,
            context,
            stdin=subprocess.PIPE,
            stdout=None if last else subprocess.PIPE,
        )
    except LaunchError as exc:
        io.error(str(exc))
        return _RunningStage(stage, status=exc.status)

    started = _RunningStage(stage, stdin=process.stdin, stdout=process.stdout, process=process)
    if first and process.stdin is not None:
        # Nothing feeds the first stage unless it redirected '<'.
        process.stdin.close()
        started.stdin = None
    return started


def _start_builtin(
    name: str,
    stage: Stage,
    context: "Context",
    stack: ExitStack,
    pool: ThreadPoolExecutor,
    *,
    last: bool,
) -> _RunningStage:
    # Built-ins inside a pipeline never touch the interpreter's own state.
    scoped = context.fork()
    if last:
        io = stack.enter_context(StageIO.for_stage(stage, context))
        return _RunningStage(stage, future=pool.submit(_run_builtin_stage, name, stage, io, scoped))

    read_fd, write_fd = os.pipe()
    reader = os.fdopen(read_fd, "rb")
    writer = os.fdopen(write_fd, "wb")
    io = stack.enter_context(StageIO.for_stage(stage, context, stdout=writer))
    future = pool.submit(_run_builtin_stage, name, stage, io, scoped, writer)
    return _RunningStage(stage, stdout=reader, future=future)


def _run_builtin_stage(
    name: str,
    stage: Stage,
    io: StageIO,
    context: "Context",
    writer: BinaryIO | None = None,
) -> int:
    try:
        return run_builtin(name, stage.args, io, context)
    except ExitRequest as request:
        return request.code
    finally:
        _close(writer)


def _close(stream: BinaryIO | None) -> None:
    if stream is None:
        return
    try:
        stream.close()
    except OSError as exc:
        logger.debug("closing %r failed: %s", stream, exc)
