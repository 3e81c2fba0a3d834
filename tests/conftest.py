"""Shared pytest fixtures for the create-pika-app test suite.

Provides reusable fixtures for:
- A fake ``CommandRunner`` that records commands and simulates ``npm init``
- A synthetic template tree with a nested subdirectory
- Mock asyncio subprocess helpers
- A ``Config`` pointing at the synthetic tree
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from create_pika_app.config import Config
from create_pika_app.process import CommandResult
from create_pika_app.templates import DirectoryTemplateSource


# ---------------------------------------------------------------------------
# Fake package manager
# ---------------------------------------------------------------------------

def npm_default_manifest(name: str) -> dict[str, Any]:
    """What ``npm init --yes`` writes for a fresh directory."""
    return {
        "name": name,
        "version": "1.0.0",
        "description": "",
        "main": "index.js",
        "scripts": {
            "test": 'echo "Error: no test specified" && exit 1',
        },
        "keywords": [],
        "author": "",
        "license": "ISC",
    }


class FakeRunner:
    """In-memory ``CommandRunner``.

    Every call is recorded in ``calls`` as ``(argv, cwd)``.  ``init`` writes
    an npm-style ``package.json`` into *cwd*.  ``failures`` maps a
    subcommand (``"init"``, ``"install"``, ...) or a package flag (``"-D"``)
    to the return code that command should report.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], str | None]] = []
        self.failures: dict[str, int] = {}
        self.outputs: dict[str, str] = {}
        self.write_manifest = True

    async def run(self, cmd: list[str], cwd: str | Path | None = None) -> CommandResult:
        self.calls.append((list(cmd), str(cwd) if cwd is not None else None))
        sub = cmd[1] if len(cmd) > 1 else ""

        returncode = 0
        for key, code in self.failures.items():
            if key == sub or key in cmd[2:]:
                returncode = code
                break

        if returncode == 0 and sub == "init" and cwd is not None and self.write_manifest:
            manifest = npm_default_manifest(Path(cwd).name)
            (Path(cwd) / "package.json").write_text(
                json.dumps(manifest, indent=2) + "\n", encoding="utf-8"
            )

        return CommandResult(
            command=list(cmd),
            cwd=str(cwd) if cwd is not None else None,
            returncode=returncode,
            stdout=self.outputs.get(sub, ""),
            stderr="npm ERR! simulated failure" if returncode else "",
        )

    def commands(self) -> list[list[str]]:
        return [argv for argv, _ in self.calls]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------

@pytest.fixture
def template_tree(tmp_path: Path) -> Path:
    """A small template tree with a nested directory and one Jinja2 file.

    Layout::

        templates/
            .babelrc
            README.md.j2
            src/
                index.tsx
                components/
                    App.tsx
    """
    root = tmp_path / "templates"
    (root / "src" / "components").mkdir(parents=True)
    (root / ".babelrc").write_text('{"presets": []}\n', encoding="utf-8")
    (root / "README.md.j2").write_text("# {{ app_name }}\n", encoding="utf-8")
    (root / "src" / "index.tsx").write_text("import App from './components/App'\n", encoding="utf-8")
    (root / "src" / "components" / "App.tsx").write_text(
        "export default () => null\n", encoding="utf-8"
    )
    return root


@pytest.fixture
def template_source(template_tree: Path) -> DirectoryTemplateSource:
    return DirectoryTemplateSource(template_tree)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

@pytest.fixture
def config(template_tree: Path) -> Config:
    """Default config with the synthetic template tree."""
    return Config(template_dir=template_tree)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """An empty directory to create projects in."""
    work = tmp_path / "work"
    work.mkdir()
    return work


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
