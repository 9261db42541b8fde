"""
worktree.py

Responsibility: Give a build an isolated, detached checkout of a ref and always take it away.

`provision_worktree` is a context manager. The checkout lives in `<mkdtemp>/<safe-label>`
and shares the object store of the caller's repository, so the caller's own checkout is
never touched. On every exit path the worktree is deregistered and the temporary parent
is deleted; cleanup problems are logged and never replace the error that ended the build.
"""

from __future__ import annotations

import logging
import re
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from docsbuild.errors import CommandFailedError, FilesystemError
from docsbuild.git import Git

logger = logging.getLogger(__name__)

_UNSAFE_LABEL_RE = re.compile(r"[^\w.-]+", re.ASCII)


def safe_label(label: str) -> str:
    """Replace every run of characters outside [A-Za-z0-9_.-] with a single underscore."""
    return _UNSAFE_LABEL_RE.sub("_", label)


def resolve_source_dir(checkout: Path, workspace_relative_path: str) -> Path:
    """Map the caller's workspace subdirectory (relative to the repo root) into `checkout`."""
    if not workspace_relative_path:
        return checkout
    return (checkout / workspace_relative_path).resolve()


def _cleanup(git: Git, worktree_path: Path, tmp_base: Path) -> None:
    try:
        git.worktree_remove(worktree_path)
    except CommandFailedError as e:
        logger.warning("Failed to remove worktree %s: %s", worktree_path, e)
        removed = False
    else:
        removed = True
    shutil.rmtree(tmp_base, ignore_errors=True)
    if tmp_base.exists():
        logger.warning("Temporary worktree directory still present: %s", tmp_base)
    elif not removed:
        # git still lists the deleted checkout under .git/worktrees until pruned.
        try:
            git.worktree_prune()
        except CommandFailedError as e:
            logger.warning("Failed to prune worktree metadata: %s", e)


@contextmanager
def provision_worktree(git: Git, ref: str, label: str, *, tmp_root: Path | None = None) -> Iterator[Path]:
    """
    Check out `ref` detached into a fresh temporary directory and yield its path.
    """
    try:
        tmp_base = Path(tempfile.mkdtemp(prefix="docs-wt-", dir=str(tmp_root) if tmp_root else None)).resolve()
    except OSError as e:
        raise FilesystemError("create temporary worktree directory in", Path(tmp_root or tempfile.gettempdir()), e) from e
    worktree_path = tmp_base / safe_label(label)

    try:
        git.worktree_add(worktree_path, ref)
    except BaseException:
        shutil.rmtree(tmp_base, ignore_errors=True)
        raise

    logger.debug("Created worktree for %s at %s", ref, worktree_path)
    try:
        yield worktree_path
    finally:
        _cleanup(git, worktree_path, tmp_base)
