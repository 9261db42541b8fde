from __future__ import annotations

from pathlib import Path

import pytest

from docsbuild.config import BuildConfig
from docsbuild.docs_builder import DocsBuilder, reset_dir
from docsbuild.errors import (
    BuildOutputMissingError,
    CommandFailedError,
    FilesystemError,
    MissingContentError,
    MissingManifestError,
    MissingWorkspaceError,
)

from conftest import RecordingRunner


def _snapshot(root: Path) -> dict[str, bytes]:
    return {str(p.relative_to(root)): p.read_bytes() for p in sorted(root.rglob("*")) if p.is_file()}


def test_missing_workspace_runs_nothing(config: BuildConfig, tmp_path: Path) -> None:
    runner = RecordingRunner()
    with pytest.raises(MissingWorkspaceError, match="workspace not found"):
        DocsBuilder(config, runner).build(tmp_path / "nope", tmp_path / "out")
    assert runner.calls == []
    assert not (tmp_path / "out").exists()


def test_missing_content_dir(config: BuildConfig, workspace: Path, tmp_path: Path) -> None:
    (workspace / "content" / "index.md").unlink()
    (workspace / "content").rmdir()
    runner = RecordingRunner()
    with pytest.raises(MissingContentError, match='"content"'):
        DocsBuilder(config, runner).build(workspace, tmp_path / "out")
    assert runner.calls == []


def test_missing_manifest_only_when_required(config: BuildConfig, workspace: Path, tmp_path: Path) -> None:
    (workspace / "package.json").unlink()
    runner = RecordingRunner()
    with pytest.raises(MissingManifestError, match="package.json"):
        DocsBuilder(config, runner).build(workspace, tmp_path / "out", require_manifest=True)
    assert runner.calls == []

    DocsBuilder(config, runner).build(workspace, tmp_path / "out", require_manifest=False)
    assert len(runner.calls) == 1


def test_build_copies_artifacts(config: BuildConfig, workspace: Path, tmp_path: Path) -> None:
    out = tmp_path / "out" / "current"
    (out / "stale").mkdir(parents=True)
    runner = RecordingRunner()

    dest = DocsBuilder(config, runner).build(workspace, out)

    assert runner.calls == [(["pnpm", "run", "content-collections:build"], workspace, True)]
    assert dest == out / ".content-collections"
    assert (dest / "index.json").read_text(encoding="utf-8") == '{"source": "repo"}'
    assert not (out / "stale").exists()


def test_build_without_output_is_distinct_error(config: BuildConfig, workspace: Path, tmp_path: Path) -> None:
    runner = RecordingRunner(produce=False)
    with pytest.raises(BuildOutputMissingError, match="Build output missing") as exc:
        DocsBuilder(config, runner).build(workspace, tmp_path / "out")
    assert not isinstance(exc.value, CommandFailedError)


def test_build_command_failure_propagates(config: BuildConfig, workspace: Path, tmp_path: Path) -> None:
    runner = RecordingRunner(fail_on="content-collections:build")
    with pytest.raises(CommandFailedError):
        DocsBuilder(config, runner).build(workspace, tmp_path / "out")


def test_rebuild_is_idempotent(config: BuildConfig, workspace: Path, tmp_path: Path) -> None:
    out = tmp_path / "out" / "current"
    builder = DocsBuilder(config, RecordingRunner())
    builder.build(workspace, out)
    first = _snapshot(out)
    builder.build(workspace, out)
    assert _snapshot(out) == first


def test_reset_dir(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b"
    reset_dir(target)
    (target / "f.txt").write_text("x", encoding="utf-8")
    reset_dir(target)
    assert target.is_dir()
    assert list(target.iterdir()) == []


def test_output_dir_under_a_file_raises_filesystem_error(config: BuildConfig, workspace: Path, tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    runner = RecordingRunner()
    with pytest.raises(FilesystemError, match="blocker") as exc:
        DocsBuilder(config, runner).build(workspace, blocker / "current")
    assert exc.value.path == blocker / "current"
    assert runner.calls == []
