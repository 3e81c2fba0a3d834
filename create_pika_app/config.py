"""create-pika-app configuration.

Typed configuration for the scaffolding pipeline. All settings use Pydantic v2
models so they are validated at construction time and can be built from
environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from create_pika_app.errors import MissingProjectName

VERSION = "1.0.0"

ISSUES_URL = "https://github.com/ndom91/create-pika-app/issues/new"

# ---------------------------------------------------------------------------
# Fixed project contents
# ---------------------------------------------------------------------------

DEFAULT_SCRIPTS: dict[str, str] = {
    "build": "pika-web --dest dist/web_modules",
    "build:esm": (
        "npm run build:ts && npm run build:esm && npm run build:js && npm run copy"
    ),
    "build:js": "babel dist -d dist --ignore 'dist/web_modules/*.js'",
    "build:js:watch": "babel dist -d dist --ignore 'dist/web_modules/*.js' --watch",
    "build:ts": "rm -rf dist && tsc",
    "build:ts:watch": "tsc -w",
    "copy": "copyfiles 'src/*.html' 'src/**/*.gif' 'src/*.css' dist -u 1",
    "dev": (
        "npm run build && concurrently 'npm run build:ts:watch' "
        "'npm run build:js:watch' 'serve -s dist'"
    ),
    "lint": "eslint --ext .ts,.tsx src --ignore 'web_modules/**/*.js'",
    "prestart": "npm run build",
    "start": "serve -s dist",
}

WEB_DEPENDENCIES: list[str] = [
    "emotion",
    "preact",
    "preact-compat",
    "preact-emotion",
    "preact-router",
]

DEPENDENCIES: list[str] = [
    "preact",
    "preact-compat",
    "preact-emotion",
    "preact-router",
    "emotion",
]

DEV_DEPENDENCIES: list[str] = [
    "@babel/cli",
    "@babel/core",
    "@babel/plugin-proposal-class-properties",
    "@babel/plugin-proposal-object-rest-spread",
    "@babel/plugin-transform-react-jsx",
    "@babel/preset-env",
    "@babel/preset-react",
    "@babel/preset-typescript",
    "@pika/web",
    "@typescript-eslint/eslint-plugin",
    "@typescript-eslint/parser",
    "babel-plugin-import-pika-web",
    "babel-plugin-module-resolver",
    "concurrently",
    "copyfiles",
    "prettier",
    "eslint",
    "eslint-config-airbnb-typescript",
    "eslint-config-prettier",
    "eslint-plugin-import",
    "eslint-plugin-jsx-a11y",
    "eslint-plugin-prettier",
    "eslint-plugin-react",
    "serve",
    "typescript",
]


# ---------------------------------------------------------------------------
# Request model
# ---------------------------------------------------------------------------


class ProjectRequest(BaseModel):
    """What the user asked for on the command line.

    Built once by the argument parser and never modified afterwards.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    is_absolute_path: bool = False
    verbose: bool = False
    show_info: bool = False

    @classmethod
    def from_name(cls, name: str | None, **flags: Any) -> "ProjectRequest":
        """Build a request, deriving ``is_absolute_path`` from *name*."""
        is_absolute = bool(name) and os.path.isabs(name)
        return cls(name=name, is_absolute_path=is_absolute, **flags)

    def target_directory(self, cwd: str | Path | None = None) -> Path:
        """Resolve the directory the project will be created in.

        Absolute names are used verbatim; anything else is placed under
        *cwd* (defaults to the current working directory).

        Raises:
            MissingProjectName: If the request carries no name.
        """
        if not self.name:
            raise MissingProjectName()
        if self.is_absolute_path:
            return Path(self.name)
        base = Path(cwd) if cwd is not None else Path.cwd()
        return base / self.name


# ---------------------------------------------------------------------------
# Global configuration
# ---------------------------------------------------------------------------


class Config(BaseModel):
    """Global create-pika-app configuration.

    Instances are created once by the CLI entry point (usually via
    :meth:`from_env`) and passed to the ``Pipeline``.
    """

    package_manager: str = Field(default="npm", min_length=1)
    command_timeout: int = Field(
        default=600, ge=10, description="Per-command timeout in seconds"
    )
    template_dir: Path | None = Field(
        default=None, description="Override for the bundled template tree"
    )
    scripts: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_SCRIPTS))
    web_dependencies: list[str] = Field(default_factory=lambda: list(WEB_DEPENDENCIES))
    dependencies: list[str] = Field(default_factory=lambda: list(DEPENDENCIES))
    dev_dependencies: list[str] = Field(default_factory=lambda: list(DEV_DEPENDENCIES))

    # Stages whose failure is reported as a warning instead of aborting the run.
    best_effort_stages: list[str] = Field(default_factory=list)
    verbose: bool = False

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            CREATE_PIKA_APP_PACKAGE_MANAGER, CREATE_PIKA_APP_TIMEOUT,
            CREATE_PIKA_APP_TEMPLATE_DIR, CREATE_PIKA_APP_BEST_EFFORT,
            CREATE_PIKA_APP_VERBOSE.

        Keyword *overrides* win over the environment.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("CREATE_PIKA_APP_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["CREATE_PIKA_APP_PACKAGE_MANAGER"]
        if os.environ.get("CREATE_PIKA_APP_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["CREATE_PIKA_APP_TIMEOUT"])
        if os.environ.get("CREATE_PIKA_APP_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["CREATE_PIKA_APP_TEMPLATE_DIR"])
        if os.environ.get("CREATE_PIKA_APP_BEST_EFFORT"):
            raw = os.environ["CREATE_PIKA_APP_BEST_EFFORT"]
            kwargs["best_effort_stages"] = [s.strip() for s in raw.split(",") if s.strip()]
        if os.environ.get("CREATE_PIKA_APP_VERBOSE", "").lower() in ("1", "true", "yes"):
            kwargs["verbose"] = True

        kwargs.update(overrides)
        return cls(**kwargs)
