from __future__ import annotations

import copy
import os
import sys
from pathlib import Path
from typing import BinaryIO, List, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .engine import Engine


class Context:
    """Holds interpreter session state: working directory, home, and executable search list."""

    def __init__(
        self,
        path: str | Path | None = None,
        *,
        home: str | Path | None = None,
        search_path: Sequence[str] | None = None,
        engine: "Engine" | None = None,
    ) -> None:
        self.path = Path(path).resolve() if path else Path.cwd()
        self.home = Path(home).expanduser().resolve() if home else Path.home()
        if search_path is None:
            search_path = _search_path_from_env()
        self.search_path: List[str] = [entry for entry in search_path if entry]
        if engine is None:
            from .engine import Engine as EngineClass

            engine = EngineClass()
        self.engine = engine

    @property
    def stdout(self) -> BinaryIO:
        return sys.stdout.buffer

    @property
    def stderr(self) -> BinaryIO:
        return sys.stderr.buffer

    def resolve(self, name: str | Path) -> Path:
        """Resolve a user-supplied path against the session's working directory."""
        candidate = Path(name)
        if not candidate.is_absolute():
            candidate = self.path / candidate
        return Path(os.path.normpath(candidate))

    def change_directory(self, target: Path) -> None:
        self.path = target

    def fork(self) -> "Context":
        """Copy of this context whose directory changes stay local, like a subshell."""
        clone = copy.copy(self)
        clone.search_path = list(self.search_path)
        return clone


def _search_path_from_env() -> List[str]:
    raw = os.environ.get("PATH", os.defpath)
    return raw.split(os.pathsep)
