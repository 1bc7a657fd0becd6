from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)

BUILTIN_NAMES = frozenset({"exit", "echo", "type", "cd"})


@dataclass(frozen=True)
class Builtin:
    name: str


@dataclass(frozen=True)
class ExternalPath:
    path: str


@dataclass(frozen=True)
class NotFound:
    name: str


Resolution = Union[Builtin, ExternalPath, NotFound]


def resolve(executable: str, context: "Context") -> Resolution:
    """
    Decide how ``executable`` runs.

    Names containing a path separator are checked in place (relative to the
    session directory); bare names are looked up in ``context.search_path`` in
    order, first executable match wins.
    """
    if executable in BUILTIN_NAMES:
        return Builtin(executable)

    if _has_separator(executable):
        candidate = context.resolve(executable)
        if _is_executable(candidate):
            return ExternalPath(str(candidate))
        logger.debug("%s is not an executable file", candidate)
        return NotFound(executable)

    for directory in context.search_path:
        candidate = context.resolve(os.path.join(directory, executable))
        if _is_executable(candidate):
            logger.debug("resolved %s to %s", executable, candidate)
            return ExternalPath(str(candidate))

    return NotFound(executable)


def _has_separator(name: str) -> bool:
    if os.sep in name:
        return True
    return bool(os.altsep) and os.altsep in name


def _is_executable(path: "os.PathLike[str] | str") -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)
