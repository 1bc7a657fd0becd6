from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple, Union

STDIN_OPERATOR = "<"
STDOUT_OPERATOR = ">"
APPEND_OPERATOR = ">>"
STDERR_OPERATOR = "2>"

REDIRECTION_OPERATORS = frozenset(
    {STDIN_OPERATOR, STDOUT_OPERATOR, APPEND_OPERATOR, STDERR_OPERATOR}
)


@dataclass(frozen=True)
class SimpleCommand:
    """An executable and its positional arguments, nothing redirected."""

    executable: str
    args: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _check_executable(self.executable)
        object.__setattr__(self, "args", tuple(self.args))


@dataclass(frozen=True)
class RedirectedCommand:
    """A simple invocation whose standard streams are bound to files.

    ``append`` only applies to ``stdout_file``; stderr always truncates.
    """

    executable: str
    args: Tuple[str, ...] = ()
    stdin_file: str | None = None
    stdout_file: str | None = None
    stderr_file: str | None = None
    append: bool = False

    def __post_init__(self) -> None:
        _check_executable(self.executable)
        object.__setattr__(self, "args", tuple(self.args))


Stage = Union[SimpleCommand, RedirectedCommand]
STAGE_TYPES = (SimpleCommand, RedirectedCommand)


@dataclass(frozen=True)
class PipelineCommand:
    """Two or more stages whose stdout feeds the next stage's stdin."""

    stages: Tuple[Stage, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        stages = tuple(self.stages)
        if len(stages) < 2:
            raise ValueError("A pipeline needs at least two stages.")
        for stage in stages:
            if not isinstance(stage, STAGE_TYPES):
                raise TypeError(f"Pipeline stage must be a simple or redirected command, got {stage!r}.")
        for stage in stages[1:]:
            if stdin_file(stage) is not None:
                raise ValueError("Only the first pipeline stage may redirect stdin.")
        for stage in stages[:-1]:
            if stdout_file(stage) is not None:
                raise ValueError("Only the last pipeline stage may redirect stdout.")
        object.__setattr__(self, "stages", stages)


Command = Union[SimpleCommand, RedirectedCommand, PipelineCommand]


def stdin_file(stage: Stage) -> str | None:
    return stage.stdin_file if isinstance(stage, RedirectedCommand) else None


def stdout_file(stage: Stage) -> str | None:
    return stage.stdout_file if isinstance(stage, RedirectedCommand) else None


def stderr_file(stage: Stage) -> str | None:
    return stage.stderr_file if isinstance(stage, RedirectedCommand) else None


def appends(stage: Stage) -> bool:
    return isinstance(stage, RedirectedCommand) and stage.append


def _check_executable(executable: str) -> None:
    if not executable:
        raise ValueError("Command executable must not be empty.")
    if executable in REDIRECTION_OPERATORS:
        raise ValueError(f"Redirection operator {executable!r} cannot be an executable.")
