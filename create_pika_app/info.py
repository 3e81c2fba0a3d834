"""Environment diagnostics for ``create-pika-app --info``.

Collects an envinfo-style report: operating system and CPU, package manager
binaries, installed browsers, and the versions of the packages a Pika app
depends on.  Anything that cannot be located is reported as ``Not Found``.
Nothing here writes to disk.
"""

from __future__ import annotations

import json
import os
import platform
import shutil
import sys
from pathlib import Path

from pydantic import BaseModel, Field

from create_pika_app.process import CommandRunner

NOT_FOUND = "Not Found"

BINARIES: dict[str, str] = {
    "Node": "node",
    "npm": "npm",
    "Yarn": "yarn",
}

# Candidate executables per browser, tried in order.
BROWSERS: dict[str, list[str]] = {
    "Chrome": ["google-chrome", "google-chrome-stable", "chromium", "chromium-browser"],
    "Edge": ["microsoft-edge", "microsoft-edge-stable"],
    "Internet Explorer": [],
    "Firefox": ["firefox"],
    "Safari": [],
}

NPM_PACKAGES: list[str] = ["preact", "preact-compat", "@pika/web", "preact-emotion"]

NPM_GLOBAL_PACKAGES: list[str] = ["create-pika-app"]


class EnvironmentReport(BaseModel):
    """Ordered sections of ``{label: value}`` pairs."""

    system: dict[str, str] = Field(default_factory=dict)
    binaries: dict[str, str] = Field(default_factory=dict)
    browsers: dict[str, str] = Field(default_factory=dict)
    npm_packages: dict[str, str] = Field(default_factory=dict)
    npm_global_packages: dict[str, str] = Field(default_factory=dict)

    def sections(self) -> list[tuple[str, dict[str, str]]]:
        return [
            ("System", self.system),
            ("Binaries", self.binaries),
            ("Browsers", self.browsers),
            ("npmPackages", self.npm_packages),
            ("npmGlobalPackages", self.npm_global_packages),
        ]

    def format(self) -> str:
        """Render the report as indented plain text."""
        lines: list[str] = []
        for title, entries in self.sections():
            lines.append(f"  {title}:")
            for label, value in entries.items():
                lines.append(f"    {label}: {value}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------


def _cpu_model() -> str:
    cpuinfo = Path("/proc/cpuinfo")
    if cpuinfo.is_file():
        try:
            for line in cpuinfo.read_text(encoding="utf-8", errors="replace").splitlines():
                if line.lower().startswith("model name"):
                    return line.split(":", 1)[1].strip()
        except OSError:
            pass
    return platform.processor() or "Unknown CPU"


def collect_system() -> dict[str, str]:
    """OS, CPU, memory (where available) and shell."""
    system: dict[str, str] = {
        "OS": f"{platform.system()} {platform.release()}".strip() or NOT_FOUND,
        "CPU": f"({os.cpu_count() or 1}) {platform.machine()} {_cpu_model()}".strip(),
    }
    if hasattr(os, "sysconf"):
        try:
            total = os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES")
            system["Memory"] = f"{total / 1024 ** 3:.2f} GB"
        except (ValueError, OSError):
            pass
    shell = os.environ.get("SHELL") or os.environ.get("COMSPEC")
    system["Shell"] = shell or NOT_FOUND
    system["Python"] = f"{platform.python_version()} - {sys.executable}"
    return system


# ---------------------------------------------------------------------------
# Binaries & browsers
# ---------------------------------------------------------------------------


async def _version_of(runner: CommandRunner, executable: str) -> str:
    path = shutil.which(executable)
    if path is None:
        return NOT_FOUND
    result = await runner.run([path, "--version"])
    if not result.ok or not result.stdout:
        return NOT_FOUND
    version = result.stdout.splitlines()[0].strip()
    return f"{version} - {path}"


async def collect_binaries(runner: CommandRunner) -> dict[str, str]:
    return {label: await _version_of(runner, exe) for label, exe in BINARIES.items()}


async def collect_browsers(runner: CommandRunner) -> dict[str, str]:
    browsers: dict[str, str] = {}
    for label, candidates in BROWSERS.items():
        value = NOT_FOUND
        for exe in candidates:
            value = await _version_of(runner, exe)
            if value != NOT_FOUND:
                break
        browsers[label] = value
    return browsers


# ---------------------------------------------------------------------------
# npm packages
# ---------------------------------------------------------------------------


def _read_json(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def collect_npm_packages(cwd: str | Path, packages: list[str] | None = None) -> dict[str, str]:
    """Wanted (from ``package.json``) and installed (from ``node_modules``) versions."""
    base = Path(cwd)
    manifest = _read_json(base / "package.json")
    wanted: dict[str, str] = {}
    for section in ("devDependencies", "dependencies"):
        if isinstance(manifest.get(section), dict):
            wanted.update(manifest[section])

    found: dict[str, str] = {}
    for name in packages or NPM_PACKAGES:
        installed = _read_json(base / "node_modules" / name / "package.json").get("version")
        if name in wanted and installed:
            found[name] = f"{wanted[name]} => {installed}"
        elif installed:
            found[name] = installed
        elif name in wanted:
            found[name] = f"{wanted[name]} => {NOT_FOUND}"
        else:
            found[name] = NOT_FOUND
    return found


async def collect_npm_global_packages(
    runner: CommandRunner,
    package_manager: str = "npm",
    packages: list[str] | None = None,
) -> dict[str, str]:
    names = packages or NPM_GLOBAL_PACKAGES
    result = await runner.run([package_manager, "ls", "-g", "--depth=0", "--json"])
    installed: dict = {}
    if result.stdout:
        try:
            installed = json.loads(result.stdout).get("dependencies", {}) or {}
        except (json.JSONDecodeError, AttributeError):
            installed = {}

    found: dict[str, str] = {}
    for name in names:
        entry = installed.get(name)
        found[name] = entry.get("version", NOT_FOUND) if isinstance(entry, dict) else NOT_FOUND
    return found


async def collect_environment_info(
    runner: CommandRunner,
    cwd: str | Path | None = None,
    package_manager: str = "npm",
) -> EnvironmentReport:
    """Gather every section of the report."""
    return EnvironmentReport(
        system=collect_system(),
        binaries=await collect_binaries(runner),
        browsers=await collect_browsers(runner),
        npm_packages=collect_npm_packages(cwd if cwd is not None else Path.cwd()),
        npm_global_packages=await collect_npm_global_packages(runner, package_manager),
    )
