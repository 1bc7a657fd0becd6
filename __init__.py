"""A small command-line interpreter core: lexer, command builder and execution engine."""

from .engine import (
    BuildError,
    Command,
    Context,
    Engine,
    ExitRequest,
    LexError,
    ParseError,
    PipelineCommand,
    RedirectedCommand,
    SimpleCommand,
    build,
    parse,
    resolve,
    run_pipeline,
    run_stage,
    tokenize,
)
from .visualize import visualize

__all__ = [
    "Context",
    "Engine",
    "Command",
    "SimpleCommand",
    "RedirectedCommand",
    "PipelineCommand",
    "ExitRequest",
    "ParseError",
    "LexError",
    "BuildError",
    "tokenize",
    "build",
    "parse",
    "resolve",
    "run_stage",
    "run_pipeline",
    "visualize",
]
