"""Command-line entry point for ``create-pika-app``.

Usage::

    create-pika-app my-app
    create-pika-app /abs/path/to/app --verbose
    create-pika-app --info
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from create_pika_app.config import ISSUES_URL, VERSION, Config, ProjectRequest
from create_pika_app.errors import MissingProjectName
from create_pika_app.info import collect_environment_info
from create_pika_app.pipeline import Pipeline
from create_pika_app.process import CommandRunner, SubprocessRunner
from create_pika_app.templates import TemplateSource
from create_pika_app.utils import console, print_error, setup_logging

logger = logging.getLogger(__name__)

PROG = "create-pika-app"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        usage=f"{PROG} <project-directory> [options]",
        description="Create a Preact + Pika web app with no build configuration.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "    Only <project-directory> is required.\n"
            "\n"
            "    If you have any problems, do not hesitate to file an issue:\n"
            f"      {ISSUES_URL}\n"
        ),
    )
    parser.add_argument(
        "project_directory",
        nargs="?",
        default=None,
        metavar="<project-directory>",
        help="Name of (or absolute path to) the app to create",
    )
    parser.add_argument("--verbose", action="store_true", help="print additional logs")
    parser.add_argument("--info", action="store_true", help="print environment debug info")
    parser.add_argument("-V", "--version", action="version", version=VERSION)
    return parser


def parse_request(argv: Sequence[str] | None = None) -> ProjectRequest:
    """Turn an argument vector into a ``ProjectRequest``.

    Unknown options are ignored rather than rejected.
    """
    parser = build_parser()
    args, unknown = parser.parse_known_args(argv)
    if unknown:
        logger.debug("Ignoring unknown arguments: %s", " ".join(unknown))
    return ProjectRequest.from_name(
        args.project_directory,
        verbose=args.verbose,
        show_info=args.info,
    )


def print_usage_hint() -> None:
    """Guidance shown when no project name is given."""
    print_error("\nNo app name was provided.")
    console.print("Please specify the project name:")
    console.print(f"  [cyan]{PROG}[/cyan] [green]<project-directory>[/green]")
    console.print()
    console.print("For example:")
    console.print(f"  [cyan]{PROG}[/cyan] [green]my-pika-app[/green]")
    console.print()
    console.print(f"Run [cyan]{PROG} --help[/cyan] to see all options.")


async def print_environment_info(config: Config, runner: CommandRunner | None = None) -> str:
    """Collect and print the ``--info`` report.  Returns the rendered text."""
    runner = runner or SubprocessRunner(timeout=config.command_timeout)
    console.print("\n[bold]Environment Info:[/bold]\n")
    report = await collect_environment_info(
        runner, cwd=Path.cwd(), package_manager=config.package_manager
    )
    text = report.format()
    console.print(text, markup=False, highlight=False)
    console.print()
    return text


async def run(
    argv: Sequence[str] | None = None,
    *,
    cwd: str | Path | None = None,
    runner: CommandRunner | None = None,
    template_source: TemplateSource | None = None,
) -> int:
    """Parse *argv* and run the requested action.  Returns an exit code."""
    request = parse_request(argv)
    config = Config.from_env(**({"verbose": True} if request.verbose else {}))
    setup_logging(config.verbose)

    if request.show_info:
        await print_environment_info(config, runner)
        return 0

    try:
        app_directory = request.target_directory(cwd)
    except MissingProjectName:
        print_usage_hint()
        return 1

    pipeline = Pipeline(
        config,
        app_directory,
        app_name=request.name,
        runner=runner,
        template_source=template_source,
    )
    state = await pipeline.run()
    return 0 if state["success"] else 1


def main(argv: Sequence[str] | None = None) -> None:
    """Console-script entry point."""
    try:
        code = asyncio.run(run(argv))
    except KeyboardInterrupt:
        print_error("\nAborted.")
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
