"""Lexer, command builder, dispatcher and execution engine of the interpreter."""

from .builtins import ExitRequest
from .commands import Command, PipelineCommand, RedirectedCommand, SimpleCommand, Stage
from .context import Context
from .dispatcher import Builtin, ExternalPath, NotFound, resolve
from .engine import Engine
from .executor import run_stage
from .lexer import LexError, ParseError, TrailingEscape, UnterminatedQuote, split_pipeline, tokenize
from .parser import (
    BuildError,
    DanglingRedirection,
    EmptyInput,
    EmptyPipelineSegment,
    EmptyRedirectionTarget,
    InvalidExecutable,
    MisplacedRedirection,
    build,
    parse,
)
from .pipeline import relay, run_pipeline

__all__ = [
    "Context",
    "Engine",
    "Command",
    "SimpleCommand",
    "RedirectedCommand",
    "PipelineCommand",
    "Stage",
    "Builtin",
    "ExternalPath",
    "NotFound",
    "ExitRequest",
    "ParseError",
    "LexError",
    "UnterminatedQuote",
    "TrailingEscape",
    "BuildError",
    "EmptyInput",
    "InvalidExecutable",
    "DanglingRedirection",
    "EmptyRedirectionTarget",
    "EmptyPipelineSegment",
    "MisplacedRedirection",
    "tokenize",
    "split_pipeline",
    "build",
    "parse",
    "resolve",
    "run_stage",
    "run_pipeline",
    "relay",
]
