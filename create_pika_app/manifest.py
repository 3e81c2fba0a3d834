"""package.json initialisation and script injection.

The overwrite policy is expressed as pure functions over a parsed manifest
(:func:`apply_scripts`, :func:`apply_web_dependencies`,
:func:`apply_desired_state`) so it can be tested without touching disk.
``ManifestInitializer`` wires them to ``npm init`` and the filesystem.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from create_pika_app.config import DEFAULT_SCRIPTS, WEB_DEPENDENCIES
from create_pika_app.errors import PipelineAborted
from create_pika_app.process import CommandRunner
from create_pika_app.utils import load_json, save_json

MANIFEST_NAME = "package.json"
PIKA_WEB_KEY = "@pika/web"
STAGE = "init-manifest"


# ---------------------------------------------------------------------------
# Desired-state merge
# ---------------------------------------------------------------------------


def apply_scripts(
    manifest: Mapping[str, Any],
    scripts: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return a copy of *manifest* with the fixed scripts written in.

    Keys from *scripts* replace whatever was there before.  Unrelated script
    entries (npm's default ``test`` for example) are kept.
    """
    desired = DEFAULT_SCRIPTS if scripts is None else scripts
    result = copy.deepcopy(dict(manifest))
    existing = result.get("scripts")
    merged: dict[str, Any] = dict(existing) if isinstance(existing, Mapping) else {}
    merged.update(desired)
    result["scripts"] = merged
    return result


def apply_web_dependencies(
    manifest: Mapping[str, Any],
    web_dependencies: list[str] | None = None,
) -> dict[str, Any]:
    """Return a copy of *manifest* with the ``@pika/web`` block replaced."""
    desired = WEB_DEPENDENCIES if web_dependencies is None else web_dependencies
    result = copy.deepcopy(dict(manifest))
    result[PIKA_WEB_KEY] = {"webDependencies": list(desired)}
    return result


def apply_desired_state(
    manifest: Mapping[str, Any],
    scripts: Mapping[str, str] | None = None,
    web_dependencies: list[str] | None = None,
) -> dict[str, Any]:
    """Apply both overwrites in one go."""
    return apply_web_dependencies(apply_scripts(manifest, scripts), web_dependencies)


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def read_manifest(app_directory: str | Path) -> dict[str, Any]:
    """Load ``package.json`` from *app_directory*.

    Raises:
        PipelineAborted: If the file is missing or is not a JSON object.
    """
    path = Path(app_directory) / MANIFEST_NAME
    try:
        return load_json(path)
    except FileNotFoundError as exc:
        raise PipelineAborted(STAGE, f"{path} was not created") from exc
    except (json.JSONDecodeError, ValueError) as exc:
        raise PipelineAborted(STAGE, f"{path} is not a valid manifest: {exc}") from exc


async def write_manifest(app_directory: str | Path, manifest: Mapping[str, Any]) -> Path:
    """Write *manifest* to ``package.json`` with two-space indentation."""
    path = Path(app_directory) / MANIFEST_NAME
    try:
        await save_json(dict(manifest), path)
    except OSError as exc:
        raise PipelineAborted(STAGE, f"cannot write {path}: {exc}") from exc
    return path


# ---------------------------------------------------------------------------
# ManifestInitializer
# ---------------------------------------------------------------------------


class ManifestInitializer:
    """Runs ``<pm> init --yes`` and rewrites the resulting manifest."""

    def __init__(
        self,
        runner: CommandRunner,
        package_manager: str = "npm",
        scripts: Mapping[str, str] | None = None,
        web_dependencies: list[str] | None = None,
    ) -> None:
        self.runner = runner
        self.package_manager = package_manager
        self.scripts = dict(DEFAULT_SCRIPTS if scripts is None else scripts)
        self.web_dependencies = list(
            WEB_DEPENDENCIES if web_dependencies is None else web_dependencies
        )

    async def initialize(self, app_directory: str | Path) -> dict[str, Any]:
        """Create and rewrite ``package.json`` inside *app_directory*.

        The scripts and the ``@pika/web`` block are persisted as two
        sequential writes.

        Returns:
            The final manifest as written to disk.
        """
        result = await self.runner.run(
            [self.package_manager, "init", "--yes"], cwd=app_directory
        )
        if not result.ok:
            raise PipelineAborted(STAGE, result.error_summary(), command=result)

        manifest = apply_scripts(read_manifest(app_directory), self.scripts)
        await write_manifest(app_directory, manifest)

        manifest = apply_web_dependencies(read_manifest(app_directory), self.web_dependencies)
        await write_manifest(app_directory, manifest)
        return manifest
