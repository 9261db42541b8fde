"""
docs_builder.py

Responsibility: Turn one source directory into one labeled output directory.

Rules:
- Validate inputs before anything is deleted or executed.
- Reset the output directory, then run the content build with live output.
- Copy the build tool's artifact directory into `<out_dir>/<artifact_dir>`.

This module intentionally does NOT know about git, tags, or worktrees.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from docsbuild.config import BuildConfig
from docsbuild.errors import (
    BuildOutputMissingError,
    FilesystemError,
    MissingContentError,
    MissingManifestError,
    MissingWorkspaceError,
)
from docsbuild.process import Runner, run

logger = logging.getLogger(__name__)


def reset_dir(path: Path) -> None:
    try:
        if path.exists():
            shutil.rmtree(path)
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError("reset directory", path, e) from e


class DocsBuilder:
    def __init__(self, config: BuildConfig, runner: Runner = run) -> None:
        self._config = config
        self._run = runner

    def validate(self, source_dir: Path, *, require_manifest: bool) -> None:
        if not source_dir.exists():
            raise MissingWorkspaceError(
                f"Documentation workspace not found at: {source_dir}\n"
                "   Cannot build documentation without a valid workspace directory."
            )

        content_dir = self._config.content_dir
        content_path = source_dir / content_dir
        if not content_path.exists():
            raise MissingContentError(
                f'Content directory "{content_dir}" not found at: {content_path}\n'
                "   Cannot build documentation without content files.\n"
                f'   Please ensure you have a "{content_dir}/" directory with your documentation content.'
            )

        manifest = self._config.package_manager.manifest
        manifest_path = source_dir / manifest
        if require_manifest and not manifest_path.exists():
            raise MissingManifestError(
                f"{manifest} not found at: {manifest_path}\n"
                f"   Cannot build documentation without {manifest}.\n"
                f"   Please ensure your workspace has a valid {manifest} file."
            )

    def build(self, source_dir: Path, out_dir: Path, *, require_manifest: bool = True) -> Path:
        """
        Build docs from `source_dir` into `out_dir` and return the copied artifact directory.
        """
        source_dir = Path(source_dir)
        out_dir = Path(out_dir)
        self.validate(source_dir, require_manifest=require_manifest)

        logger.info("Building docs from: %s -> %s", source_dir, out_dir)
        reset_dir(out_dir)
        self._run(list(self._config.build_command), cwd=source_dir, stream=True)

        artifact = self._config.artifact_dir
        artifact_src = source_dir / artifact
        if not artifact_src.exists():
            raise BuildOutputMissingError(
                f"Build output missing at: {artifact_src}\n"
                "   The build command exited successfully but did not produce output.\n"
                "   Please check the build logs above for errors."
            )

        artifact_dest = out_dir / artifact
        try:
            # copytree creates the destination itself; clearing it first keeps reruns exact.
            if artifact_dest.exists():
                shutil.rmtree(artifact_dest)
            shutil.copytree(artifact_src, artifact_dest, symlinks=True)
        except OSError as e:
            raise FilesystemError(f"copy build output {artifact_src} to", artifact_dest, e) from e
        logger.info("Built docs -> %s", artifact_dest)
        return artifact_dest
