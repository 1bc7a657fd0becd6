from __future__ import annotations

from typing import List

from .engine.commands import Command, PipelineCommand, RedirectedCommand


def visualize(command: Command) -> str:
    """
    Produce a human-readable tree representation of a parsed command.
    """
    lines: List[str] = []
    _render(command, lines, 0)
    return "\n".join(lines)


def _render(command: Command, lines: List[str], depth: int) -> None:
    indent = "  " * depth
    lines.append(f"{indent}{_describe_command(command)}")

    if isinstance(command, PipelineCommand):
        for stage in command.stages:
            _render(stage, lines, depth + 1)


def _describe_command(command: Command) -> str:
    if isinstance(command, PipelineCommand):
        return f"pipeline ({len(command.stages)} stages)"

    base = f"{command.executable} ({command.__class__.__name__})"
    details: List[str] = []

    if command.args:
        details.append(f"args={list(command.args)}")

    if isinstance(command, RedirectedCommand):
        if command.stdin_file is not None:
            details.append(f"stdin={command.stdin_file}")
        if command.stdout_file is not None:
            mode = "append" if command.append else "truncate"
            details.append(f"stdout={command.stdout_file} ({mode})")
        if command.stderr_file is not None:
            details.append(f"stderr={command.stderr_file}")

    if not details:
        return base

    return f"{base} [{' | '.join(details)}]"
