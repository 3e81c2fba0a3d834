"""Runtime and development dependency installation.

Each installer invokes the package manager once with a fixed package list,
shows a spinner while it runs, and checks the exit status.
"""

from __future__ import annotations

from pathlib import Path

from create_pika_app.config import DEPENDENCIES, DEV_DEPENDENCIES
from create_pika_app.errors import PipelineAborted
from create_pika_app.process import CommandResult, CommandRunner
from create_pika_app.utils import console, create_progress, format_package_list


class DependencyInstaller:
    """Installs runtime dependencies (``<pm> install --silent --save ...``)."""

    stage = "install-dependencies"
    flags: tuple[str, ...] = ("--silent", "--save")
    remainder_label = "other dependencies"

    def __init__(
        self,
        runner: CommandRunner,
        package_manager: str = "npm",
        packages: list[str] | None = None,
    ) -> None:
        self.runner = runner
        self.package_manager = package_manager
        self.packages = list(self.default_packages() if packages is None else packages)

    @staticmethod
    def default_packages() -> list[str]:
        return DEPENDENCIES

    def build_command(self) -> list[str]:
        return [self.package_manager, "install", *self.flags, *self.packages]

    async def install(self, app_directory: str | Path) -> CommandResult:
        """Run the install command inside *app_directory*.

        Raises:
            PipelineAborted: If the package manager exits non-zero, times
                out or cannot be started.
        """
        description = (
            f" [bold white]create-pika-app[/bold white] installing... "
            f"{format_package_list(self.packages, remainder=self.remainder_label)}"
        )
        with create_progress() as progress:
            progress.add_task(description, total=None)
            result = await self.runner.run(self.build_command(), cwd=app_directory)

        if not result.ok:
            console.print(f"[red]✖[/red]{description}")
            raise PipelineAborted(self.stage, result.error_summary(), command=result)

        console.print(f"[green]✔[/green]{description}")
        return result


class DevDependencyInstaller(DependencyInstaller):
    """Installs development tooling (``<pm> install --silent -D ...``)."""

    stage = "install-dev-dependencies"
    flags = ("--silent", "-D")
    remainder_label = "other dev dependencies"

    @staticmethod
    def default_packages() -> list[str]:
        return DEV_DEPENDENCIES
