"""
git.py

Responsibility: Isolate every git invocation docs-build makes.

This module must be the only place that:
- Builds git command lines
- Interprets git output (tag lists, ref names, exit statuses used as booleans)

Worktree lifetime management lives in `worktree.py`; this class only issues commands.
"""

from __future__ import annotations

from pathlib import Path

from docsbuild.errors import CommandFailedError, DocsBuildError
from docsbuild.process import Runner, run


class Git:
    def __init__(self, cwd: Path, runner: Runner = run) -> None:
        self.cwd = Path(cwd)
        self._run = runner

    def _git(self, *args: str, stream: bool = False) -> str:
        return self._run(["git", *args], cwd=self.cwd, stream=stream)

    def toplevel(self) -> Path:
        return Path(self._git("rev-parse", "--show-toplevel")).resolve()

    def list_tags(self) -> list[str]:
        return [line.strip() for line in self._git("tag", "--list").splitlines() if line.strip()]

    def current_branch(self) -> str:
        try:
            return self._git("rev-parse", "--abbrev-ref", "HEAD")
        except CommandFailedError as e:
            raise DocsBuildError("Failed to get current branch") from e

    def has_local_ref(self, ref: str) -> bool:
        try:
            self._git("show-ref", "--verify", "--quiet", ref)
        except CommandFailedError:
            return False
        return True

    def path_exists_in_ref(self, ref: str, path: str) -> bool:
        """
        Return True if `path` (repo-relative, '/'-separated) exists in the tree of `ref`.
        """
        try:
            self._git("cat-file", "-e", f"{ref}:{path}")
        except CommandFailedError:
            return False
        return True

    def fetch_branch(self, remote: str, branch: str) -> None:
        self._git("fetch", "--tags", "--prune", remote, branch, stream=True)

    def worktree_add(self, path: Path, ref: str) -> None:
        self._git("worktree", "add", "--detach", str(path), ref, stream=True)

    def worktree_remove(self, path: Path) -> None:
        self._git("worktree", "remove", str(path), "--force", stream=True)

    def worktree_prune(self) -> None:
        self._git("worktree", "prune")
