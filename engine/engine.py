from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from .builtins import USAGE
from .commands import Command, PipelineCommand
from .executor import run_stage
from .lexer import ParseError
from .parser import parse
from .pipeline import run_pipeline

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)

PROGRAM_NAME = "minishell"


class Engine:
    """Interpreter core that parses one line into a command and executes it."""

    def run(self, context: "Context", line: str) -> int:
        """
        Parse and execute ``line``, returning its exit status.

        Malformed lines are reported on stderr and nothing runs. ``ExitRequest``
        from the ``exit`` built-in is the only exception that escapes.
        """
        try:
            command = self.parse(context, line)
        except ParseError as exc:
            print(f"{PROGRAM_NAME}: {exc}", file=sys.stderr)
            return USAGE
        return self.execute(context, command)

    def parse(self, context: "Context", line: str) -> Command:
        return parse(line.strip())

    def execute(self, context: "Context", command: Command) -> int:
        if isinstance(command, PipelineCommand):
            status = run_pipeline(command, context)
        else:
            status = run_stage(command, context)
        logger.debug("command finished with status %s", status)
        return status
