"""
cli.py

Responsibility: CLI entrypoint for docs-build.

High-level flow:
1) Capture cwd, environment and docs-build.yaml into a `BuildConfig`
2) Resolve `--versions` against local tags
3) Build the current label and every matched tag
4) Write the versions manifest for the documentation site

Concerns stay isolated:
- Configuration / run mode: `config.py`
- Tag matching: `versions.py`
- Per-version pipeline and ordering: `orchestrator.py`
"""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from docsbuild import __version__
from docsbuild.config import NoMatchPolicy, RunMode, load_config
from docsbuild.errors import DocsBuildError, MissingArgumentError
from docsbuild.orchestrator import BuildOrchestrator

logger = logging.getLogger(__name__)

err_console = Console(stderr=True)
console = Console()


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(level=level, format="%(message)s")


def build_cmd(args: argparse.Namespace, *, env: Mapping[str, str], cwd: Path) -> int:
    config = load_config(
        cwd=cwd,
        env=env,
        config_path=Path(args.config) if args.config else None,
        overrides={
            "default_branch": args.branch,
            "mode": args.mode,
            "output_dir": args.output_dir,
            "versions_file": args.versions_file,
            "on_no_match": args.on_no_match,
        },
    )
    report = BuildOrchestrator(config).run(args.versions or "")

    if report.fell_back:
        console.print(f"[yellow]No tags matched; built {config.current_label} only.[/yellow]")
    console.print(f"[green]✔ Wrote versions manifest → {escape(str(report.manifest_path))}[/green]")
    console.print(f"[green]✅ Done: {', '.join(report.versions)}[/green]")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="docs-build",
        description="Build versioned documentation from the workspace and matching git tags",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument(
        "--versions",
        default=None,
        help='Comma-separated semver ranges or exact tags to build in addition to current (e.g. ">=1.0.0, v0.9.2")',
    )
    p.add_argument("--branch", default=None, help="Default branch name (e.g. main); required in production mode")
    p.add_argument(
        "--mode",
        choices=[m.value for m in RunMode],
        default=None,
        help="Run mode (default: $DOCS_BUILD_MODE or detected from the CI environment)",
    )
    p.add_argument("--config", default=None, help="Path to a docs-build.yaml config file")
    p.add_argument("--output-dir", default=None, help="Directory for built versions (default: generated-docs)")
    p.add_argument("--versions-file", default=None, help="Generated versions file (default: app/utils/versions.ts)")
    p.add_argument(
        "--on-no-match",
        choices=[m.value for m in NoMatchPolicy],
        default=None,
        help="What to do when --versions matches no tags (default: error)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Show debug output, including every command run")
    p.add_argument("-q", "--quiet", action="store_true", help="Only show warnings and errors")
    return p


def main(
    argv: list[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    try:
        return build_cmd(args, env=os.environ if env is None else env, cwd=cwd or Path.cwd())
    except MissingArgumentError as e:
        parser.print_usage(err_console.file)
        err_console.print(f"[red]❌ {escape(str(e))}[/red]", highlight=False)
        return 2
    except DocsBuildError as e:
        err_console.print(f"[red]❌ Build failed:[/red] {escape(str(e))}", highlight=False)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
