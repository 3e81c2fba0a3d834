"""Subprocess capability used by every pipeline stage.

Stages never spawn processes directly; they call a ``CommandRunner`` and get
back a ``CommandResult`` whose exit status they are expected to check.  Tests
swap in a fake runner so the pipeline can be exercised without a real
package manager.
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from create_pika_app.utils import run_command

logger = logging.getLogger(__name__)

# Shell conventions for "command not found" and "found but not executable".
NOT_FOUND_EXIT_CODE = 127
NOT_EXECUTABLE_EXIT_CODE = 126


class CommandResult(BaseModel):
    """Outcome of a single external command."""

    command: list[str] = Field(default_factory=list)
    cwd: str | None = None
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def timed_out(self) -> bool:
        return self.returncode == -1

    @property
    def display(self) -> str:
        """The command as a copy-pasteable shell string."""
        return shlex.join(self.command)

    def error_summary(self, max_chars: int = 500) -> str:
        """Short description of why the command failed."""
        text = self.stderr or self.stdout
        if not text:
            return f"exited with status {self.returncode}"
        if len(text) > max_chars:
            text = "..." + text[-max_chars:]
        return text


@runtime_checkable
class CommandRunner(Protocol):
    """Anything that can run an argv list and report the result."""

    async def run(self, cmd: list[str], cwd: str | Path | None = None) -> CommandResult:
        ...


class SubprocessRunner:
    """``CommandRunner`` backed by :func:`create_pika_app.utils.run_command`."""

    def __init__(self, timeout: int = 600) -> None:
        self.timeout = timeout

    async def run(self, cmd: list[str], cwd: str | Path | None = None) -> CommandResult:
        logger.debug("$ %s (cwd=%s)", shlex.join(cmd), cwd or ".")
        try:
            returncode, stdout, stderr = await run_command(
                cmd, cwd=cwd, timeout=self.timeout
            )
        except FileNotFoundError as exc:
            # The executable itself is missing; report it like a shell would.
            returncode, stdout, stderr = NOT_FOUND_EXIT_CODE, "", str(exc)
        except OSError as exc:
            # Present but cannot be started, e.g. permission denied.
            returncode, stdout, stderr = NOT_EXECUTABLE_EXIT_CODE, "", str(exc)

        result = CommandResult(
            command=list(cmd),
            cwd=str(cwd) if cwd is not None else None,
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
        )
        logger.debug("exit %d: %s", result.returncode, result.display)
        if stdout:
            logger.debug("stdout:\n%s", stdout)
        if stderr:
            logger.debug("stderr:\n%s", stderr)
        return result
