"""
orchestrator.py

Responsibility: Decide which versions to build, build them in order, then write the manifest.

High-level flow:
1) Resolve the `--versions` spec against local tags (highest first)
2) Build the current label, from the live workspace or from the fetched default branch
3) Build each matched tag inside its own temporary worktree
4) Write the versions manifest: current label first, then tags in resolved order

Everything runs sequentially. The first failure aborts the run and no manifest is written.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from docsbuild.config import BuildConfig, NoMatchPolicy, RunMode
from docsbuild.deps import install_dependencies
from docsbuild.docs_builder import DocsBuilder
from docsbuild.errors import EmptySpecError, MissingArgumentError, MissingContentError, NoTagsMatchedError
from docsbuild.git import Git
from docsbuild.manifest import write_versions_manifest
from docsbuild.process import Runner, run
from docsbuild.versions import parse_version_spec, resolve_tags_from_spec
from docsbuild.worktree import provision_worktree, resolve_source_dir, safe_label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildReport:
    """Outcome of a successful run."""

    versions: list[str]
    tags: list[str] = field(default_factory=list)
    fell_back: bool = False
    manifest_path: Path | None = None


class BuildOrchestrator:
    def __init__(
        self,
        config: BuildConfig,
        *,
        git: Git | None = None,
        builder: DocsBuilder | None = None,
        installer: Callable[..., object] = install_dependencies,
        manifest_writer: Callable[..., Path] = write_versions_manifest,
        runner: Runner = run,
        tmp_root: Path | None = None,
    ) -> None:
        self.config = config
        self._runner = runner
        self.git = git or Git(config.workspace_root, runner=runner)
        self.builder = builder or DocsBuilder(config, runner=runner)
        self._install = installer
        self._write_manifest = manifest_writer
        self._tmp_root = tmp_root

    # -- version resolution -------------------------------------------------

    def resolve_tags(self, spec: str) -> tuple[list[str], bool]:
        """
        Return (tags, fell_back). A spec with no tokens (blank, only commas) requests no tags.
        """
        try:
            tokens = parse_version_spec(spec)
        except EmptySpecError:
            return [], False
        spec = ", ".join(tokens)
        tags = resolve_tags_from_spec(spec, self.git.list_tags())
        if tags:
            return tags, False
        if self.config.on_no_match is NoMatchPolicy.FALLBACK:
            logger.warning('No tags matched spec "%s"; building %s only.', spec, self.config.current_label)
            return [], True
        raise NoTagsMatchedError(spec)

    # -- builds -------------------------------------------------------------

    def _out_dir(self, label: str) -> Path:
        return self.config.output_dir / safe_label(label)

    def build_ref(self, ref: str, label: str) -> None:
        with provision_worktree(self.git, ref, label, tmp_root=self._tmp_root) as checkout:
            source_dir = resolve_source_dir(checkout, self.config.workspace_relative_path)
            self._install(
                checkout,
                source_dir if source_dir != checkout else None,
                package_manager=self.config.package_manager,
                runner=self._runner,
            )
            self.builder.build(source_dir, self._out_dir(label), require_manifest=True)

    def build_tag(self, tag: str) -> None:
        # Tags are expected to be present locally already (e.g. fetched by CI).
        self.build_ref(f"refs/tags/{tag}", tag)

    def build_branch(self, branch: str, label: str) -> None:
        self.git.fetch_branch(self.config.remote, branch)
        local_ref = f"refs/heads/{branch}"
        target = local_ref if self.git.has_local_ref(local_ref) else f"{self.config.remote}/{branch}"

        rel = self.config.workspace_relative_path
        content_path = f"{rel}/{self.config.content_dir}" if rel else self.config.content_dir
        if not self.git.path_exists_in_ref(target, content_path):
            raise MissingContentError(
                f'Content directory "{content_path}" not found on branch "{branch}" ({target}).'
            )
        self.build_ref(target, label)

    def build_workspace(self, label: str) -> None:
        self.builder.build(self.config.workspace_root, self._out_dir(label), require_manifest=False)

    def build_current(self) -> None:
        label = self.config.current_label
        if self.config.mode is RunMode.PRODUCTION:
            branch = self.config.default_branch
            if not branch:
                raise MissingArgumentError(
                    "Missing required --branch flag in production mode.\n"
                    "   Please specify the default branch name (e.g., --branch main)."
                )
            checked_out = self.git.current_branch()
            if checked_out != branch:
                logger.info("Checkout is on '%s'; the default branch is built from a fresh fetch", checked_out)
            logger.info("Building default branch '%s' -> %s", branch, label)
            self.build_branch(branch, label)
        else:
            logger.info("Building current workspace -> %s", label)
            self.build_workspace(label)

    # -- entry point --------------------------------------------------------

    def run(self, versions_spec: str = "") -> BuildReport:
        logger.info("Docs workspace root: %s", self.config.workspace_root)
        logger.info("Output directory: %s (mode: %s)", self.config.output_dir, self.config.mode.value)

        tags, fell_back = self.resolve_tags(versions_spec)
        if tags:
            logger.info("Building tags: %s", ", ".join(tags))

        self.build_current()
        for tag in tags:
            logger.info("Building tag %s", tag)
            self.build_tag(tag)

        versions = [safe_label(self.config.current_label), *(safe_label(t) for t in tags)]
        manifest_path = self._write_manifest(
            self.config.versions_file,
            versions,
            template_path=self.config.manifest_template,
        )
        return BuildReport(versions=versions, tags=tags, fell_back=fell_back, manifest_path=manifest_path)
