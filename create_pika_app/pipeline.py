"""create-pika-app pipeline orchestrator.

Runs the scaffolding stages strictly in order:

1. create-directory          -- make the project directory.
2. init-manifest             -- ``npm init --yes`` plus script injection.
3. copy-templates            -- copy the bundled starter files.
4. install-dependencies      -- runtime packages.
5. install-dev-dependencies  -- build and lint tooling.

The first failing stage stops the run unless it is listed in
``Config.best_effort_stages``.  There is no retry and no rollback.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.markup import escape
from rich.panel import Panel

from create_pika_app.config import VERSION, Config
from create_pika_app.errors import PipelineAborted
from create_pika_app.installer import DependencyInstaller, DevDependencyInstaller
from create_pika_app.manifest import ManifestInitializer
from create_pika_app.process import CommandRunner, SubprocessRunner
from create_pika_app.templates import TemplateCopier, TemplateSource, template_source_for
from create_pika_app.utils import (
    console,
    format_duration,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)

STAGES: list[str] = [
    "create-directory",
    "init-manifest",
    "copy-templates",
    "install-dependencies",
    "install-dev-dependencies",
]


class Pipeline:
    """Scaffolds one project directory.

    Attributes:
        config: Global configuration.
        app_name: Name as given on the command line, shown in the banner.
            Templates are rendered with the directory basename, which is
            also what the package manager names the package after.
        app_directory: Fully resolved target directory.
        runner: Subprocess capability shared by every stage.
        template_source: Where the starter files are copied from.
        state: Accumulates per-stage results; returned by :meth:`run`.
    """

    _STAGE_METHODS: dict[str, str] = {
        "create-directory": "create_directory",
        "init-manifest": "init_manifest",
        "copy-templates": "copy_templates",
        "install-dependencies": "install_dependencies",
        "install-dev-dependencies": "install_dev_dependencies",
    }

    def __init__(
        self,
        config: Config,
        app_directory: str | Path,
        app_name: str | None = None,
        runner: CommandRunner | None = None,
        template_source: TemplateSource | None = None,
    ) -> None:
        self.config = config
        self.app_directory = Path(app_directory)
        self.app_name = app_name or self.app_directory.name
        self.runner = runner or SubprocessRunner(timeout=config.command_timeout)
        self.template_source = template_source or template_source_for(config.template_dir)
        self.state: dict[str, Any] = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "project_dir": str(self.app_directory),
            "stages_completed": [],
            "stages_failed": [],
            "success": False,
        }

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    async def run(self) -> dict[str, Any]:
        """Execute every stage in order.

        Returns:
            The state dictionary, including a top-level ``success`` boolean.
        """
        pipeline_start = time.monotonic()
        all_success = True
        durations: dict[str, str] = {}

        for stage in STAGES:
            method = getattr(self, self._STAGE_METHODS[stage])
            stage_start = time.monotonic()
            try:
                result = await method()
            except PipelineAborted as exc:
                elapsed = time.monotonic() - stage_start
                durations[stage] = format_duration(elapsed)
                self.state["stages_failed"].append(stage)
                self.state[f"{stage}_error"] = str(exc)
                if stage in self.config.best_effort_stages:
                    print_warning(f"Stage {stage} failed (continuing): {escape(str(exc))}")
                    continue
                all_success = False
                self._report_failure(exc)
                break

            elapsed = time.monotonic() - stage_start
            durations[stage] = format_duration(elapsed)
            self.state[stage] = result
            self.state["stages_completed"].append(stage)

        total_elapsed = time.monotonic() - pipeline_start
        self.state["success"] = all_success
        self.state["durations"] = durations
        self.state["total_duration"] = format_duration(total_elapsed)
        self.state["finished_at"] = datetime.now(timezone.utc).isoformat()

        if all_success:
            self._print_completion(durations)
        return self.state

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def create_directory(self) -> dict[str, Any]:
        """Create the project directory; an existing one aborts the run."""
        try:
            await asyncio.to_thread(self.app_directory.mkdir, parents=True, exist_ok=False)
        except FileExistsError as exc:
            raise PipelineAborted(
                "create-directory", f"{self.app_directory} already exists"
            ) from exc
        except OSError as exc:
            raise PipelineAborted(
                "create-directory", f"cannot create {self.app_directory}: {exc.strerror or exc}"
            ) from exc

        console.print()
        console.print(
            Panel(
                f"[bold green]Welcome to create-pika-app[/bold green] [dim]v{VERSION}[/dim]",
                border_style="green",
                expand=False,
            )
        )
        console.print(f"Creating app: [bold cyan]{escape(self.app_name)}[/bold cyan]\n")
        return {"path": str(self.app_directory)}

    async def init_manifest(self) -> dict[str, Any]:
        initializer = ManifestInitializer(
            self.runner,
            package_manager=self.config.package_manager,
            scripts=self.config.scripts,
            web_dependencies=self.config.web_dependencies,
        )
        manifest = await initializer.initialize(self.app_directory)
        return {
            "manifest": str(self.app_directory / "package.json"),
            "scripts": sorted(manifest.get("scripts", {})),
        }

    async def copy_templates(self) -> dict[str, Any]:
        """Copy the template tree.  Runs synchronously; the walk is small."""
        copier = TemplateCopier(
            self.template_source,
            context={"app_name": self.app_directory.name, "version": VERSION},
        )
        written = copier.copy(self.app_directory)
        return {"files": [str(p.relative_to(self.app_directory)) for p in written]}

    async def install_dependencies(self) -> dict[str, Any]:
        installer = DependencyInstaller(
            self.runner,
            package_manager=self.config.package_manager,
            packages=self.config.dependencies,
        )
        result = await installer.install(self.app_directory)
        return {"packages": installer.packages, "command": result.display}

    async def install_dev_dependencies(self) -> dict[str, Any]:
        installer = DevDependencyInstaller(
            self.runner,
            package_manager=self.config.package_manager,
            packages=self.config.dev_dependencies,
        )
        result = await installer.install(self.app_directory)
        return {"packages": installer.packages, "command": result.display}

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _report_failure(self, exc: PipelineAborted) -> None:
        console.print()
        print_error(
            "Something went wrong while trying to create a new Preact app "
            "using create-pika-app"
        )
        print_error(f"  Stage   : {exc.stage}")
        print_error(f"  Reason  : {escape(exc.message)}")
        if exc.command is not None:
            print_error(f"  Command : {escape(exc.command.display)}")
            print_error(f"  Exit    : {exc.command.returncode}")

    def _print_completion(self, durations: dict[str, str]) -> None:
        console.print()
        print_summary_table(durations, title="Stages")
        console.print(f"Application ready at [bold]{escape(str(self.app_directory))}[/bold]!")
        console.print()
        print_success("✔️  Complete!")
