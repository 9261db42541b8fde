"""
errors.py

Responsibility: Error kinds raised by docs-build.

Every failure is fatal to the run; the CLI catches `DocsBuildError` at the top
level and turns it into a red message and a non-zero exit code.
"""

from __future__ import annotations

from pathlib import Path


class DocsBuildError(RuntimeError):
    pass


class ConfigError(DocsBuildError):
    pass


class MissingArgumentError(DocsBuildError):
    pass


class EmptySpecError(DocsBuildError):
    pass


class NoTagsMatchedError(DocsBuildError):
    def __init__(self, spec: str) -> None:
        super().__init__(f'No tags matched spec "{spec}".')
        self.spec = spec


class MissingWorkspaceError(DocsBuildError):
    pass


class MissingContentError(DocsBuildError):
    pass


class MissingManifestError(DocsBuildError):
    pass


class BuildOutputMissingError(DocsBuildError):
    pass


class ManifestError(DocsBuildError):
    pass


class CommandFailedError(DocsBuildError):
    """A shelled-out command exited non-zero (or could not be started)."""

    def __init__(self, cmd: list[str], returncode: int | None = None, output: str = "") -> None:
        message = f"Command failed: {' '.join(cmd)}"
        if returncode is not None:
            message += f" (exit code {returncode})"
        if output:
            message += f"\n\n{output}"
        super().__init__(message)
        self.cmd = list(cmd)
        self.returncode = returncode
        self.output = output


class FilesystemError(DocsBuildError):
    """Creating, clearing or copying a directory failed."""

    def __init__(self, action: str, path: Path, error: OSError) -> None:
        super().__init__(f"Failed to {action}: {path}\n   {error}")
        self.path = path
