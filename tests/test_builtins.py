from __future__ import annotations

from pathlib import Path

import pytest

from minishell import Context, ExitRequest
from minishell.engine.builtins import BUILTINS
from minishell.engine.dispatcher import BUILTIN_NAMES


def test_echo_to_stdout(run_line, capfd) -> None:
    assert run_line("echo hello   world") == 0
    assert capfd.readouterr().out == "hello world\n"


def test_echo_without_args_prints_newline(run_line, capfd) -> None:
    run_line("echo")
    assert capfd.readouterr().out == "\n"


def test_echo_overwrite_then_append(run_line, workdir: Path) -> None:
    run_line("echo a > f.txt")
    run_line("echo b >> f.txt")
    assert (workdir / "f.txt").read_text() == "a\nb\n"

    run_line("echo c > f.txt")
    assert (workdir / "f.txt").read_text() == "c\n"


def test_echo_into_missing_directory_reports_error(run_line, workdir: Path, capfd) -> None:
    assert run_line("echo hi > nowhere/out.txt 2> err.txt") == 1
    assert "No such file or directory" in (workdir / "err.txt").read_text()
    assert capfd.readouterr().out == ""


def test_type_copies_file(run_line, workdir: Path, capfd) -> None:
    (workdir / "a.txt").write_text("Content A\n")
    assert run_line("type a.txt") == 0
    assert capfd.readouterr().out == "Content A\n"


def test_type_concatenates_into_one_output_file(run_line, workdir: Path) -> None:
    (workdir / "a.txt").write_text("A\n")
    (workdir / "b.txt").write_text("B\n")
    (workdir / "out.txt").write_text("stale\n")

    assert run_line("type a.txt b.txt > out.txt") == 0
    assert (workdir / "out.txt").read_text() == "A\nB\n"


def test_type_append_keeps_existing_content(run_line, workdir: Path) -> None:
    (workdir / "a.txt").write_text("A\n")
    (workdir / "out.txt").write_text("first\n")

    run_line("type a.txt a.txt >> out.txt")
    assert (workdir / "out.txt").read_text() == "first\nA\nA\n"


def test_type_missing_file_goes_to_stderr_file(run_line, workdir: Path, capfd) -> None:
    assert run_line("type missing.txt 2> e.txt") == 1
    assert "missing.txt" in (workdir / "e.txt").read_text()
    assert sorted(p.name for p in workdir.iterdir()) == ["e.txt"]
    assert capfd.readouterr().err == ""


def test_type_does_not_create_stdout_file_when_nothing_is_copied(run_line, workdir: Path) -> None:
    run_line("type missing.txt > out.txt 2> e.txt")
    assert not (workdir / "out.txt").exists()


def test_type_continues_after_bad_operands(run_line, workdir: Path, capfd) -> None:
    (workdir / "good.txt").write_text("good\n")
    (workdir / "folder").mkdir()

    assert run_line("type missing.txt folder good.txt") == 1
    captured = capfd.readouterr()
    assert captured.out == "good\n"
    assert "type: missing.txt: No such file or directory" in captured.err
    assert "type: folder: Is a directory" in captured.err


def test_type_without_operands(run_line, capfd) -> None:
    assert run_line("type") == 1
    assert "type: missing operand" in capfd.readouterr().err


def test_cd_changes_session_directory(run_line, context: Context, workdir: Path) -> None:
    (workdir / "sub" / "nested").mkdir(parents=True)

    assert run_line("cd sub/nested") == 0
    assert context.path == workdir.resolve() / "sub" / "nested"

    assert run_line("cd ..") == 0
    assert context.path == workdir.resolve() / "sub"


def test_cd_affects_later_launches(run_line, workdir: Path) -> None:
    (workdir / "sub").mkdir()
    run_line("cd sub")
    run_line("pwd > where.txt")
    assert (workdir / "sub" / "where.txt").read_text().strip() == str((workdir / "sub").resolve())


def test_cd_home(run_line, context: Context, home: Path) -> None:
    (home / "docs").mkdir()

    run_line("cd ~")
    assert context.path == home.resolve()

    run_line("cd /")
    run_line("cd ~/docs")
    assert context.path == home.resolve() / "docs"

    run_line("cd /")
    run_line("cd")
    assert context.path == home.resolve()


def test_cd_failure_keeps_directory(run_line, context: Context, workdir: Path, capfd) -> None:
    (workdir / "file.txt").write_text("x")
    before = context.path

    assert run_line("cd nope") == 1
    assert run_line("cd file.txt") == 1
    assert context.path == before

    err = capfd.readouterr().err
    assert "cd: nope: No such file or directory" in err
    assert "cd: file.txt: Not a directory" in err


def test_exit_requests_termination(run_line) -> None:
    with pytest.raises(ExitRequest) as excinfo:
        run_line("exit")
    assert excinfo.value.code == 0

    with pytest.raises(ExitRequest) as excinfo:
        run_line("exit 42")
    assert excinfo.value.code == 42


def test_exit_with_non_numeric_argument(run_line, capfd) -> None:
    with pytest.raises(ExitRequest) as excinfo:
        run_line("exit abc")
    assert excinfo.value.code == 2
    assert "exit: abc: numeric argument required" in capfd.readouterr().err


def test_exit_with_too_many_arguments_does_not_exit(run_line, capfd) -> None:
    assert run_line("exit 1 2") == 1
    assert "too many arguments" in capfd.readouterr().err


def test_cd_keeps_symlinked_path(run_line, context: Context, workdir: Path) -> None:
    (workdir / "real").mkdir()
    (workdir / "link").symlink_to(workdir / "real", target_is_directory=True)

    assert run_line("cd link") == 0
    assert context.path == workdir.resolve() / "link"

    assert run_line("cd ..") == 0
    assert context.path == workdir.resolve()


def test_builtin_with_missing_stdin_file_fails(run_line, capfd) -> None:
    assert run_line("echo hi < missing.txt") == 1
    captured = capfd.readouterr()
    assert captured.out == ""
    assert captured.err == "echo: missing.txt: No such file or directory\n"


def test_builtin_reads_nothing_from_existing_stdin_file(run_line, workdir: Path, capfd) -> None:
    (workdir / "in.txt").write_text("ignored\n")
    assert run_line("echo hi < in.txt") == 0
    assert capfd.readouterr().out == "hi\n"


def test_builtin_registry_matches_dispatcher() -> None:
    assert set(BUILTINS) == BUILTIN_NAMES
