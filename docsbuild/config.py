"""
config.py

Responsibility: Capture everything docs-build reads from its surroundings exactly once.

The working directory, environment variables, repository root lookup and the optional
`docs-build.yaml` file are folded into a frozen `BuildConfig` at startup. Every other
module receives that value instead of consulting `os.environ` or `os.getcwd()`.

`docs-build.yaml` (all keys optional):

    output_dir: generated-docs
    versions_file: app/utils/versions.ts
    content_dir: content
    artifact_dir: .content-collections
    build_command: pnpm run content-collections:build
    current_label: current
    default_branch: main
    remote: origin
    on_no_match: error            # or: fallback
    manifest_template: null       # path to a Jinja2 template for the versions file
    package_manager:
      manifest: package.json
      lockfile: pnpm-lock.yaml
      install_locked: pnpm install --frozen-lockfile
      install_unlocked: pnpm install --no-frozen-lockfile
"""

from __future__ import annotations

import enum
import logging
import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from docsbuild.errors import CommandFailedError, ConfigError
from docsbuild.git import Git

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "docs-build.yaml"

_TRUTHY = {"1", "true", "yes", "on"}

_KNOWN_KEYS = {
    "output_dir",
    "versions_file",
    "content_dir",
    "artifact_dir",
    "build_command",
    "current_label",
    "default_branch",
    "remote",
    "on_no_match",
    "manifest_template",
    "package_manager",
}


class RunMode(str, enum.Enum):
    DEVELOPMENT = "development"
    PULL_REQUEST = "pull_request"
    PRODUCTION = "production"


class NoMatchPolicy(str, enum.Enum):
    ERROR = "error"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class PackageManagerConfig:
    manifest: str = "package.json"
    lockfile: str = "pnpm-lock.yaml"
    install_locked: tuple[str, ...] = ("pnpm", "install", "--frozen-lockfile")
    install_unlocked: tuple[str, ...] = ("pnpm", "install", "--no-frozen-lockfile")


@dataclass(frozen=True)
class BuildConfig:
    """Immutable run configuration shared by every component."""

    workspace_root: Path
    repo_root: Path
    workspace_relative_path: str = ""
    output_dir: Path = Path("generated-docs")
    versions_file: Path = Path("app/utils/versions.ts")
    content_dir: str = "content"
    artifact_dir: str = ".content-collections"
    build_command: tuple[str, ...] = ("pnpm", "run", "content-collections:build")
    current_label: str = "current"
    default_branch: str | None = None
    remote: str = "origin"
    mode: RunMode = RunMode.DEVELOPMENT
    on_no_match: NoMatchPolicy = NoMatchPolicy.ERROR
    manifest_template: Path | None = None
    package_manager: PackageManagerConfig = field(default_factory=PackageManagerConfig)


def detect_run_mode(env: Mapping[str, str]) -> RunMode:
    """
    Pick the run mode from CI environment variables.

    DOCS_BUILD_MODE wins; otherwise pull/merge request events map to `pull_request`,
    any other CI run to `production`, and everything else to `development`.
    """
    explicit = (env.get("DOCS_BUILD_MODE") or "").strip()
    if explicit:
        return _enum_value(RunMode, explicit.replace("-", "_"), "DOCS_BUILD_MODE")
    if env.get("GITHUB_EVENT_NAME") in ("pull_request", "pull_request_target"):
        return RunMode.PULL_REQUEST
    if env.get("CI_MERGE_REQUEST_IID"):
        return RunMode.PULL_REQUEST
    if (env.get("CI") or "").strip().lower() in _TRUTHY:
        return RunMode.PRODUCTION
    return RunMode.DEVELOPMENT


def _enum_value(enum_cls: type[enum.Enum], raw: Any, key: str) -> Any:
    try:
        return enum_cls(str(raw).strip())
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigError(f"`{key}` must be one of: {allowed} (got {raw!r})") from e


def _command(raw: Any, key: str) -> tuple[str, ...]:
    if isinstance(raw, str):
        parts = shlex.split(raw)
    elif isinstance(raw, list) and all(isinstance(p, str) for p in raw):
        parts = list(raw)
    else:
        raise ConfigError(f"`{key}` must be a string or a list of strings.")
    if not parts:
        raise ConfigError(f"`{key}` must not be empty.")
    return tuple(parts)


def _str(raw: Any, key: str) -> str:
    if not isinstance(raw, (str, int, float)) or isinstance(raw, bool):
        raise ConfigError(f"`{key}` must be a string.")
    value = str(raw).strip()
    if not value:
        raise ConfigError(f"`{key}` must not be empty.")
    return value


def read_config_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML config file. Returns {} for an empty file.
    """
    if not path.exists():
        raise ConfigError(f"Config file does not exist: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {path}\n{e}") from e
    if not isinstance(data, dict):
        raise ConfigError("Config file must be a mapping/object at the top level.")
    return data


def _apply_file_values(config: BuildConfig, data: Mapping[str, Any]) -> BuildConfig:
    base = config.workspace_root
    changes: dict[str, Any] = {}

    if data.get("output_dir") is not None:
        changes["output_dir"] = (base / _str(data["output_dir"], "output_dir")).resolve()
    if data.get("versions_file") is not None:
        changes["versions_file"] = (base / _str(data["versions_file"], "versions_file")).resolve()
    if data.get("manifest_template") is not None:
        changes["manifest_template"] = (base / _str(data["manifest_template"], "manifest_template")).resolve()
    for key in ("content_dir", "artifact_dir", "current_label", "default_branch", "remote"):
        if data.get(key) is not None:
            changes[key] = _str(data[key], key)
    if data.get("build_command") is not None:
        changes["build_command"] = _command(data["build_command"], "build_command")
    if data.get("on_no_match") is not None:
        changes["on_no_match"] = _enum_value(NoMatchPolicy, data["on_no_match"], "on_no_match")

    pm_raw = data.get("package_manager") or {}
    if not isinstance(pm_raw, dict):
        raise ConfigError("`package_manager` must be an object/mapping when provided.")
    if pm_raw:
        pm = config.package_manager
        pm_changes: dict[str, Any] = {}
        for key in ("manifest", "lockfile"):
            if pm_raw.get(key) is not None:
                pm_changes[key] = _str(pm_raw[key], f"package_manager.{key}")
        for key in ("install_locked", "install_unlocked"):
            if pm_raw.get(key) is not None:
                pm_changes[key] = _command(pm_raw[key], f"package_manager.{key}")
        changes["package_manager"] = replace(pm, **pm_changes)

    unknown = sorted(str(k) for k in set(data) - _KNOWN_KEYS)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
    return replace(config, **changes)


def _locate_repo(workspace_root: Path, git: Git) -> tuple[Path, str]:
    try:
        repo_root = git.toplevel()
    except CommandFailedError:
        # Not a git checkout (or git missing): treat the workspace as the repository root.
        logger.debug("git rev-parse failed; using workspace root as repository root")
        return workspace_root, ""
    if repo_root == workspace_root:
        return repo_root, ""
    try:
        rel = workspace_root.relative_to(repo_root).as_posix()
    except ValueError:
        return workspace_root, ""
    return repo_root, rel


def load_config(
    *,
    cwd: Path,
    env: Mapping[str, str],
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    git: Git | None = None,
) -> BuildConfig:
    """
    Build the run configuration.

    Precedence (lowest to highest): built-in defaults, `docs-build.yaml` (or `config_path`),
    environment (run mode), explicit `overrides` from the command line. Override values
    that are None are ignored.
    """
    workspace_root = Path(cwd).resolve()
    git = git or Git(workspace_root)
    repo_root, rel = _locate_repo(workspace_root, git)

    config = BuildConfig(
        workspace_root=workspace_root,
        repo_root=repo_root,
        workspace_relative_path=rel,
        output_dir=(workspace_root / "generated-docs").resolve(),
        versions_file=(workspace_root / "app" / "utils" / "versions.ts").resolve(),
        mode=detect_run_mode(env),
    )

    if config_path is not None:
        path = config_path if config_path.is_absolute() else workspace_root / config_path
        config = _apply_file_values(config, read_config_file(path))
    elif (workspace_root / CONFIG_FILENAME).exists():
        config = _apply_file_values(config, read_config_file(workspace_root / CONFIG_FILENAME))

    changes: dict[str, Any] = {}
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if key in ("output_dir", "versions_file"):
            changes[key] = (workspace_root / value).resolve()
        elif key == "mode":
            changes[key] = _enum_value(RunMode, value, "mode")
        elif key == "on_no_match":
            changes[key] = _enum_value(NoMatchPolicy, value, "on_no_match")
        elif key == "default_branch":
            changes[key] = str(value).strip() or None
        else:
            raise ConfigError(f"Unknown override: {key}")
    return replace(config, **changes)
