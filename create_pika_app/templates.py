"""Template tree copying for new projects.

The starter files live in ``create_pika_app/assets/templates/`` and are
copied verbatim into every new project.  Files ending in ``.j2`` are rendered
with Jinja2 first (the suffix is dropped), so the number of files produced
always equals the number of files shipped.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from create_pika_app.errors import CopyFailed

logger = logging.getLogger(__name__)

_DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent / "assets" / "templates"

TEMPLATE_SUFFIX = ".j2"


# ---------------------------------------------------------------------------
# Template sources
# ---------------------------------------------------------------------------


@runtime_checkable
class TemplateSource(Protocol):
    """Provides the root of a directory tree to copy from."""

    @property
    def root(self) -> Path:
        ...


class DirectoryTemplateSource:
    """A template tree rooted at an arbitrary directory."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self._root)!r})"


class BundledTemplateSource(DirectoryTemplateSource):
    """The template tree shipped inside the installed package."""

    def __init__(self) -> None:
        super().__init__(_DEFAULT_TEMPLATE_DIR)


def template_source_for(template_dir: str | Path | None) -> TemplateSource:
    """Return the bundled source, or a directory source when overridden."""
    if template_dir is None:
        return BundledTemplateSource()
    return DirectoryTemplateSource(template_dir)


# ---------------------------------------------------------------------------
# TemplateCopier
# ---------------------------------------------------------------------------


class TemplateCopier:
    """Recursively copies a template tree into a project directory.

    The walk is depth-first in sorted order.  Destination directories are
    created on demand and existing destination files are overwritten.
    """

    def __init__(
        self,
        source: TemplateSource | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.source = source or BundledTemplateSource()
        self.context = context or {}
        self.env = Environment(
            loader=FileSystemLoader(str(self.source.root)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
        )

    def copy(self, destination: str | Path, move: bool = False) -> list[Path]:
        """Copy (or move, when *move* is true) the tree into *destination*.

        Returns:
            Every file written, in walk order.

        Raises:
            CopyFailed: If the source is not a directory or any entry cannot
                be created, read, rendered or written.
        """
        root = self.source.root
        if not root.is_dir():
            raise CopyFailed(root, "template directory does not exist")

        written: list[Path] = []
        self._copy_directory(root, Path(destination), move, written)
        return written

    def list_files(self) -> list[Path]:
        """Every file in the tree, relative to the source root."""
        root = self.source.root
        if not root.is_dir():
            return []
        return sorted(p.relative_to(root) for p in root.rglob("*") if p.is_file())

    # -- Internal walk -----------------------------------------------------

    def _copy_directory(
        self, source: Path, target: Path, move: bool, written: list[Path]
    ) -> None:
        try:
            target.mkdir(parents=True, exist_ok=True)
            entries = sorted(source.iterdir())
        except OSError as exc:
            raise CopyFailed(exc.filename or target, exc.strerror or str(exc)) from exc

        for entry in entries:
            if entry.is_dir():
                self._copy_directory(entry, target / entry.name, move, written)
            else:
                written.append(self._copy_file(entry, target, move))

    def _copy_file(self, source: Path, target_dir: Path, move: bool) -> Path:
        if source.name.endswith(TEMPLATE_SUFFIX):
            target = target_dir / source.name[: -len(TEMPLATE_SUFFIX)]
            self._render(source, target)
            if move:
                self._remove(source)
        else:
            target = target_dir / source.name
            try:
                if move:
                    shutil.move(str(source), str(target))
                else:
                    shutil.copyfile(source, target)
            except OSError as exc:
                raise CopyFailed(exc.filename or source, exc.strerror or str(exc)) from exc

        logger.debug("wrote %s", target)
        return target

    def _render(self, source: Path, target: Path) -> None:
        name = source.relative_to(self.source.root).as_posix()
        try:
            content = self.env.get_template(name).render(**self.context)
        except TemplateError as exc:
            raise CopyFailed(source, f"template error: {exc}") from exc
        except OSError as exc:
            raise CopyFailed(source, exc.strerror or str(exc)) from exc
        try:
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise CopyFailed(target, exc.strerror or str(exc)) from exc

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            path.unlink()
        except OSError as exc:
            raise CopyFailed(path, exc.strerror or str(exc)) from exc
