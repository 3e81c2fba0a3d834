"""Exception hierarchy for create-pika-app.

Every failure the scaffolder can report derives from ``ScaffoldError`` so the
CLI can catch a single type and turn it into a non-zero exit status.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from create_pika_app.process import CommandResult


class ScaffoldError(Exception):
    """Base class for all create-pika-app errors."""


class MissingProjectName(ScaffoldError):
    """Raised when no ``<project-directory>`` argument was supplied."""

    def __init__(self) -> None:
        super().__init__("No app name was provided.")


class PipelineAborted(ScaffoldError):
    """Raised when a pipeline stage fails irrecoverably.

    Attributes:
        stage: Name of the failing stage (e.g. ``"install-dependencies"``).
        message: Human-readable reason.
        command: The ``CommandResult`` of the failing subprocess, if any.
    """

    def __init__(
        self,
        stage: str,
        message: str,
        command: CommandResult | None = None,
    ) -> None:
        self.stage = stage
        self.message = message
        self.command = command
        detail = f"Stage '{stage}' failed: {message}"
        if command is not None:
            detail += f" (command: {command.display}, exit code {command.returncode})"
        super().__init__(detail)


class CopyFailed(PipelineAborted):
    """Raised when a template file or directory cannot be copied."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        super().__init__("copy-templates", f"{self.path}: {reason}")
