"""
process.py

Responsibility: Run external commands for the rest of the package.

Two modes:
- captured (default): stdout/stderr are collected and stdout is returned stripped
- streamed: the child inherits our standard streams so build progress shows up live;
  only the exit status is observed

There is no timeout: a hung command hangs the run.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol

from docsbuild.errors import CommandFailedError

logger = logging.getLogger(__name__)


class Runner(Protocol):
    def __call__(self, cmd: list[str], *, cwd: Path | None = None, stream: bool = False) -> str: ...


def run(cmd: list[str], *, cwd: Path | None = None, stream: bool = False) -> str:
    """
    Run `cmd` and return its stripped stdout ("" when streamed).

    Raises CommandFailedError on a non-zero exit or when the executable is missing.
    """
    logger.debug("$ %s (cwd=%s)", " ".join(cmd), cwd or ".")
    try:
        if stream:
            subprocess.run(cmd, cwd=str(cwd) if cwd else None, check=True)
            return ""
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except subprocess.CalledProcessError as e:
        output = "\n".join(part for part in (e.stdout, e.stderr) if part).strip()
        raise CommandFailedError(cmd, e.returncode, output) from e
    except OSError as e:
        raise CommandFailedError(cmd, None, str(e)) from e
    return (proc.stdout or "").strip()
