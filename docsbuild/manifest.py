"""
manifest.py

Responsibility: Render the generated versions file the documentation site imports.

Rules:
- The file is overwritten on every successful run, never merged.
- Label order is written verbatim; the site's version picker relies on it.
- Rendering uses Jinja2 with StrictUndefined so a custom template cannot silently drop data.

Templates receive:
- `versions`: the ordered list of labels
- `versions_json`: the same list as 2-space indented JSON
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path

from jinja2 import Environment, StrictUndefined, TemplateError

from docsbuild.errors import ManifestError

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = """\
// Auto-generated file. Do not edit manually.
export const versions = {{ versions_json }} as const
"""


def _environment() -> Environment:
    return Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def render_versions_manifest(labels: Sequence[str], template: str | None = None) -> str:
    versions = list(labels)
    if not versions:
        raise ManifestError("Refusing to write a versions manifest with no versions.")
    try:
        tpl = _environment().from_string(template if template is not None else DEFAULT_TEMPLATE)
        return tpl.render(versions=versions, versions_json=json.dumps(versions, indent=2))
    except TemplateError as e:
        raise ManifestError(f"Failed rendering versions manifest template: {e}") from e


def write_versions_manifest(path: Path, labels: Sequence[str], *, template_path: Path | None = None) -> Path:
    """
    Write the versions manifest to `path` (parent directories are created).
    """
    template = None
    if template_path is not None:
        try:
            template = Path(template_path).read_text(encoding="utf-8")
        except OSError as e:
            raise ManifestError(f"Cannot read manifest template {template_path}: {e}") from e

    text = render_versions_manifest(labels, template)
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8", newline="\n")
    except OSError as e:
        raise ManifestError(f"Cannot write versions manifest {path}: {e}") from e
    logger.info("Wrote versions manifest -> %s", path)
    return path
