from __future__ import annotations

import logging
from typing import BinaryIO, List, TYPE_CHECKING

from .commands import Stage, appends, stderr_file, stdin_file, stdout_file

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)

ENCODING = "utf-8"


class StageIO:
    """
    Standard stream targets for one stage.

    Redirection files are opened on first use and owned by this object; ``close``
    releases them. A target of ``None`` from the ``*_handle`` methods means the
    stream is inherited from the interpreter. ``stdout`` overrides the inherited
    stdout for built-ins running inside a pipeline.
    """

    def __init__(
        self,
        context: "Context",
        *,
        stdin_file: str | None = None,
        stdout_file: str | None = None,
        stderr_file: str | None = None,
        append: bool = False,
        stdout: BinaryIO | None = None,
    ) -> None:
        self.context = context
        self.stdin_file = stdin_file
        self.stdout_file = stdout_file
        self.stderr_file = stderr_file
        self.append = append
        self._stdout_stream = stdout
        self._stdin: BinaryIO | None = None
        self._stdout: BinaryIO | None = None
        self._stderr: BinaryIO | None = None
        self._stderr_failed = False
        self._owned: List[BinaryIO] = []

    @classmethod
    def for_stage(
        cls,
        stage: Stage,
        context: "Context",
        *,
        stdout: BinaryIO | None = None,
    ) -> "StageIO":
        return cls(
            context,
            stdin_file=stdin_file(stage),
            stdout_file=stdout_file(stage),
            stderr_file=stderr_file(stage),
            append=appends(stage),
            stdout=stdout,
        )

    def __enter__(self) -> "StageIO":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def redirects_stdout(self) -> bool:
        return self.stdout_file is not None

    def stdin_handle(self) -> BinaryIO | None:
        """Open the ``<`` file read-only; raises ``OSError`` when it cannot be opened."""
        if self.stdin_file is None:
            return None
        if self._stdin is None:
            self._stdin = self._open(self.stdin_file, "rb")
        return self._stdin

    def stdout_handle(self) -> BinaryIO | None:
        """Open the ``>``/``>>`` file; raises ``OSError`` when it cannot be opened."""
        if self.stdout_file is None:
            return None
        if self._stdout is None:
            self._stdout = self._open(self.stdout_file, "ab" if self.append else "wb")
        return self._stdout

    def stderr_handle(self) -> BinaryIO | None:
        """Open the ``2>`` file, falling back to the inherited stderr if that fails."""
        if self.stderr_file is None or self._stderr_failed:
            return None
        if self._stderr is None:
            try:
                self._stderr = self._open(self.stderr_file, "wb")
            except (OSError, ValueError) as exc:
                self._stderr_failed = True
                _emit(self.context.stderr, f"{self.stderr_file}: {_describe(exc)}")
                return None
        return self._stderr

    def write(self, data: bytes) -> None:
        target = self.stdout_handle() or self._stdout_stream or self.context.stdout
        target.write(data)
        target.flush()

    def error(self, message: str) -> None:
        """Write one diagnostic line to the stage's stderr target."""
        _emit(self.stderr_handle() or self.context.stderr, message)

    def close(self) -> None:
        while self._owned:
            handle = self._owned.pop()
            try:
                handle.close()
            except OSError as exc:
                logger.debug("closing %r failed: %s", handle, exc)

    def _open(self, name: str, mode: str) -> BinaryIO:
        path = self.context.resolve(name)
        handle = open(path, mode)
        self._owned.append(handle)
        logger.debug("opened %s (%s)", path, mode)
        return handle


def describe_error(name: str, exc: Exception) -> str:
    return f"{name}: {_describe(exc)}"


def _describe(exc: Exception) -> str:
    return getattr(exc, "strerror", None) or str(exc)


def _emit(stream: BinaryIO, message: str) -> None:
    stream.write(f"{message}\n".encode(ENCODING, errors="surrogateescape"))
    stream.flush()
