from __future__ import annotations

import sys
from pathlib import Path

import pytest

from docsbuild.errors import CommandFailedError
from docsbuild.git import Git
from docsbuild.process import run


def test_run_captures_stripped_stdout(tmp_path: Path) -> None:
    out = run([sys.executable, "-c", "import os; print('  ' + os.getcwd() + '  ')"], cwd=tmp_path)
    assert Path(out).resolve() == tmp_path.resolve()


def test_run_streamed_returns_empty() -> None:
    assert run([sys.executable, "-c", "print('hello')"], stream=True) == ""


def test_run_failure_wraps_output() -> None:
    with pytest.raises(CommandFailedError) as exc:
        run([sys.executable, "-c", "import sys; sys.stderr.write('bad things'); sys.exit(3)"])
    assert exc.value.returncode == 3
    assert "bad things" in str(exc.value)
    assert str(exc.value).startswith("Command failed: ")


def test_run_missing_executable() -> None:
    with pytest.raises(CommandFailedError) as exc:
        run(["definitely-not-a-real-command-docsbuild"])
    assert exc.value.returncode is None


class _ScriptedRunner:
    def __init__(self, outputs: dict[tuple[str, ...], str], failing: set[tuple[str, ...]] = frozenset()):
        self.outputs = outputs
        self.failing = failing
        self.calls: list[tuple[list[str], bool]] = []

    def __call__(self, cmd: list[str], *, cwd: Path | None = None, stream: bool = False) -> str:
        self.calls.append((cmd, stream))
        key = tuple(cmd[1:])
        if key in self.failing:
            raise CommandFailedError(cmd, 1)
        return self.outputs.get(key, "")


def test_git_list_tags_skips_blank_lines(tmp_path: Path) -> None:
    runner = _ScriptedRunner({("tag", "--list"): "v1.0.0\n\nv1.1.0\n"})
    assert Git(tmp_path, runner).list_tags() == ["v1.0.0", "v1.1.0"]


def test_git_boolean_queries(tmp_path: Path) -> None:
    runner = _ScriptedRunner(
        {},
        failing={
            ("show-ref", "--verify", "--quiet", "refs/heads/gone"),
            ("cat-file", "-e", "main:docs/content"),
        },
    )
    git = Git(tmp_path, runner)
    assert git.has_local_ref("refs/heads/main")
    assert not git.has_local_ref("refs/heads/gone")
    assert git.path_exists_in_ref("main", "content")
    assert not git.path_exists_in_ref("main", "docs/content")


def test_git_worktree_commands_stream(tmp_path: Path) -> None:
    runner = _ScriptedRunner({})
    git = Git(tmp_path, runner)
    git.worktree_add(tmp_path / "wt", "refs/tags/v1.0.0")
    git.worktree_remove(tmp_path / "wt")
    git.fetch_branch("origin", "main")
    git.worktree_prune()
    assert runner.calls == [
        (["git", "worktree", "add", "--detach", str(tmp_path / "wt"), "refs/tags/v1.0.0"], True),
        (["git", "worktree", "remove", str(tmp_path / "wt"), "--force"], True),
        (["git", "fetch", "--tags", "--prune", "origin", "main"], True),
        (["git", "worktree", "prune"], False),
    ]
