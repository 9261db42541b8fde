"""
docsbuild package

This package implements docs-build, a CLI that builds versioned documentation.

Key responsibilities are split across modules:
- `config.py`: capture cwd/env/docs-build.yaml into a frozen `BuildConfig`
- `semver.py` / `versions.py`: semantic versions, ranges, and tag selection
- `git.py` / `worktree.py`: git commands and scoped temporary worktrees
- `deps.py` / `docs_builder.py`: dependency install and the content build itself
- `manifest.py`: the generated versions file consumed by the documentation site
- `orchestrator.py` / `cli.py`: per-version pipeline and the CLI entrypoint
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
