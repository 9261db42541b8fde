"""
deps.py

Responsibility: Install a checkout's dependencies before its docs are built.

Locked installs are used whenever the lockfile is present so a tag rebuilds against the
dependency versions it was released with. Failures propagate; the build step never runs
against missing or stale dependencies.
"""

from __future__ import annotations

import logging
from pathlib import Path

from docsbuild.config import PackageManagerConfig
from docsbuild.process import Runner, run

logger = logging.getLogger(__name__)


def install_dependencies(
    checkout_root: Path,
    workspace_dir: Path | None = None,
    *,
    package_manager: PackageManagerConfig,
    runner: Runner = run,
) -> list[Path]:
    """
    Install dependencies at `checkout_root` and, when it is a distinct nested package with
    its own lockfile, at `workspace_dir` too. Returns the directories that were installed.
    """
    installed: list[Path] = []
    root = Path(checkout_root)

    if (root / package_manager.manifest).exists():
        locked = (root / package_manager.lockfile).exists()
        cmd = package_manager.install_locked if locked else package_manager.install_unlocked
        logger.info("Installing dependencies in %s (%s)", root, "locked" if locked else "resolving")
        runner(list(cmd), cwd=root, stream=True)
        installed.append(root)
    else:
        logger.debug("No %s in %s; skipping install", package_manager.manifest, root)

    if workspace_dir is not None:
        nested = Path(workspace_dir)
        if nested.resolve() != root.resolve():
            if (nested / package_manager.manifest).exists() and (nested / package_manager.lockfile).exists():
                logger.info("Installing dependencies in nested workspace %s (locked)", nested)
                runner(list(package_manager.install_locked), cwd=nested, stream=True)
                installed.append(nested)

    return installed
