from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from docsbuild.config import BuildConfig
from docsbuild.errors import CommandFailedError


class RecordingRunner:
    """Stands in for `docsbuild.process.run`; pretends to be the content build tool."""

    def __init__(self, artifact_dir: str = ".content-collections", produce: bool = True, fail_on: str | None = None):
        self.calls: list[tuple[list[str], Path | None, bool]] = []
        self.artifact_dir = artifact_dir
        self.produce = produce
        self.fail_on = fail_on

    def __call__(self, cmd: list[str], *, cwd: Path | None = None, stream: bool = False) -> str:
        self.calls.append((list(cmd), cwd, stream))
        if self.fail_on and self.fail_on in cmd:
            raise CommandFailedError(cmd, 1)
        if cmd[:2] == ["pnpm", "run"] and self.produce and cwd is not None:
            out = Path(cwd) / self.artifact_dir
            out.mkdir(parents=True, exist_ok=True)
            (out / "index.json").write_text(f'{{"source": "{Path(cwd).name}"}}', encoding="utf-8")
        return ""


class FakeGit:
    """In-memory git: worktrees are plain directories seeded from `refs`."""

    def __init__(self, tags=(), refs=None, branch="main", local_refs=(), tree_paths=None):
        self.tags = list(tags)
        self.refs: dict[str, dict[str, str]] = refs or {}
        self.branch = branch
        self.local_refs = set(local_refs)
        self.tree_paths = tree_paths
        self.calls: list[tuple] = []
        self.fail_remove = False
        self.fail_add = False

    def list_tags(self) -> list[str]:
        self.calls.append(("list_tags",))
        return list(self.tags)

    def current_branch(self) -> str:
        return self.branch

    def has_local_ref(self, ref: str) -> bool:
        self.calls.append(("has_local_ref", ref))
        return ref in self.local_refs

    def path_exists_in_ref(self, ref: str, path: str) -> bool:
        self.calls.append(("path_exists_in_ref", ref, path))
        if self.tree_paths is None:
            return True
        return path in self.tree_paths.get(ref, set())

    def fetch_branch(self, remote: str, branch: str) -> None:
        self.calls.append(("fetch_branch", remote, branch))

    def worktree_add(self, path: Path, ref: str) -> None:
        self.calls.append(("worktree_add", path, ref))
        if self.fail_add:
            raise CommandFailedError(["git", "worktree", "add", str(path), ref], 128)
        path.mkdir(parents=True)
        for rel, text in self.refs.get(ref, {}).items():
            target = path / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")

    def worktree_remove(self, path: Path) -> None:
        self.calls.append(("worktree_remove", path))
        if self.fail_remove:
            raise CommandFailedError(["git", "worktree", "remove", str(path), "--force"], 1)
        shutil.rmtree(path, ignore_errors=True)

    def worktree_prune(self) -> None:
        self.calls.append(("worktree_prune",))


def docs_package(**extra: str) -> dict[str, str]:
    files = {
        "package.json": "{}",
        "pnpm-lock.yaml": "lockfileVersion: 9",
        "content/index.md": "# Hello",
    }
    files.update(extra)
    return files


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    (root / "content").mkdir(parents=True)
    (root / "content" / "index.md").write_text("# Live", encoding="utf-8")
    (root / "package.json").write_text("{}", encoding="utf-8")
    return root


@pytest.fixture
def config(workspace: Path) -> BuildConfig:
    return BuildConfig(
        workspace_root=workspace,
        repo_root=workspace,
        output_dir=workspace / "generated-docs",
        versions_file=workspace / "app" / "utils" / "versions.ts",
    )
