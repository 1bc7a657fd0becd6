from __future__ import annotations

import stat
from pathlib import Path

import pytest

from minishell import Context


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def context(workdir: Path, home: Path) -> Context:
    return Context(path=workdir, home=home)


@pytest.fixture
def make_script(tmp_path: Path):
    """Write an executable shell script and return its path."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def _make(name: str, body: str, *, executable: bool = True) -> Path:
        script = bin_dir / name
        script.write_text(f"#!/bin/sh\n{body}\n")
        mode = script.stat().st_mode
        if executable:
            script.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        else:
            script.chmod(mode & ~(stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))
        return script

    return _make


@pytest.fixture
def run_line(context: Context):
    """Run one line through the engine the way the REPL driver does."""

    def _run(line: str) -> int:
        return context.engine.run(context, line)

    return _run
