from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from .commands import (
    APPEND_OPERATOR,
    REDIRECTION_OPERATORS,
    STDERR_OPERATOR,
    STDIN_OPERATOR,
    STDOUT_OPERATOR,
    Command,
    PipelineCommand,
    RedirectedCommand,
    SimpleCommand,
    Stage,
)
from .lexer import PIPE, ParseError, split_pipeline, tokenize


class BuildError(ParseError):
    """Raised when tokens do not form a valid command."""


class EmptyInput(BuildError):
    def __init__(self) -> None:
        super().__init__("empty command")


class InvalidExecutable(BuildError):
    def __init__(self, token: str) -> None:
        super().__init__(f"redirection operator '{token}' cannot be used as a command")
        self.token = token


class DanglingRedirection(BuildError):
    def __init__(self, operator: str) -> None:
        super().__init__(f"redirection operator '{operator}' has no target filename")
        self.operator = operator


class EmptyRedirectionTarget(BuildError):
    def __init__(self, operator: str) -> None:
        super().__init__(f"redirection operator '{operator}' has an empty filename")
        self.operator = operator


class EmptyPipelineSegment(BuildError):
    def __init__(self) -> None:
        super().__init__("empty command segment in pipeline")


class MisplacedRedirection(BuildError):
    def __init__(self, operator: str, position: str) -> None:
        super().__init__(f"redirection operator '{operator}' is only allowed on the {position} pipeline stage")
        self.operator = operator


def parse(line: str) -> Command:
    """Build a command from a raw line, recognizing pipes before redirections."""
    segments = split_pipeline(line)
    if len(segments) == 1:
        tokens = tokenize(line)
        if not tokens:
            raise EmptyInput()
        return _StageParser(tokens).parse()

    token_groups: List[List[str]] = []
    for segment in segments:
        if not segment.strip():
            raise EmptyPipelineSegment()
        tokens = tokenize(segment)
        if not tokens:
            raise EmptyPipelineSegment()
        token_groups.append(tokens)
    return _assemble(token_groups)


def build(tokens: Sequence[str]) -> Command:
    """
    Build a command from already-tokenized input, splitting stages on ``|`` tokens.

    A quoted ``|`` cannot be told apart from a pipe once tokenized; use ``parse``
    when starting from a raw line.
    """
    if not tokens:
        raise EmptyInput()

    token_groups: List[List[str]] = [[]]
    for token in tokens:
        if token == PIPE:
            token_groups.append([])
        else:
            token_groups[-1].append(token)

    if len(token_groups) == 1:
        return _StageParser(token_groups[0]).parse()
    if any(not group for group in token_groups):
        raise EmptyPipelineSegment()
    return _assemble(token_groups)


def _assemble(token_groups: Sequence[Sequence[str]]) -> PipelineCommand:
    stages = [_StageParser(tokens).parse() for tokens in token_groups]
    _check_pipeline_redirections(stages)
    return PipelineCommand(tuple(stages))


def _check_pipeline_redirections(stages: Sequence[Stage]) -> None:
    last = len(stages) - 1
    for index, stage in enumerate(stages):
        if not isinstance(stage, RedirectedCommand):
            continue
        if index > 0 and stage.stdin_file is not None:
            raise MisplacedRedirection(STDIN_OPERATOR, "first")
        if index < last and stage.stdout_file is not None:
            operator = APPEND_OPERATOR if stage.append else STDOUT_OPERATOR
            raise MisplacedRedirection(operator, "last")


@dataclass
class _StageParser:
    tokens: Sequence[str]
    pos: int = 0
    args: List[str] = field(default_factory=list)
    targets: Dict[str, str] = field(default_factory=dict)
    append: bool = False
    redirected: bool = False

    def parse(self) -> Stage:
        executable = self._consume()
        if executable in REDIRECTION_OPERATORS:
            raise InvalidExecutable(executable)

        while self._peek() is not None:
            token = self._consume()
            if token in REDIRECTION_OPERATORS:
                self._redirect(token)
            else:
                self.args.append(token)

        if not self.redirected:
            return SimpleCommand(executable, tuple(self.args))
        return RedirectedCommand(
            executable,
            tuple(self.args),
            stdin_file=self.targets.get(STDIN_OPERATOR),
            stdout_file=self.targets.get(STDOUT_OPERATOR),
            stderr_file=self.targets.get(STDERR_OPERATOR),
            append=self.append,
        )

    def _redirect(self, operator: str) -> None:
        filename = self._peek()
        if filename is None:
            raise DanglingRedirection(operator)
        self.pos += 1
        if not filename:
            raise EmptyRedirectionTarget(operator)

        self.redirected = True
        if operator in (STDOUT_OPERATOR, APPEND_OPERATOR):
            # '>' and '>>' share one target; the later one decides the mode.
            self.targets[STDOUT_OPERATOR] = filename
            self.append = operator == APPEND_OPERATOR
        else:
            self.targets[operator] = filename

    def _peek(self) -> str | None:
        if self.pos >= len(self.tokens):
            return None
        return self.tokens[self.pos]

    def _consume(self) -> str:
        token = self._peek()
        if token is None:
            raise EmptyInput()
        self.pos += 1
        return token
