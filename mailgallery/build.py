"""Static gallery generation.

This module writes every page of a gallery to a directory so it can be
published on any static host.

Output layout::

    index.html
    <preview path>/index.html
    <preview path>/preview.html
    <preview path>/attachments/<index>/<filename>

Key functions:
- build_gallery: Render and write the whole gallery.
- load_config: Load project configuration from mailgallery.yaml.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .attachments import attachments_of, read_attachment_at
from .errors import GalleryError
from .evaluator import resolve_preview
from .gallery import GallerySnapshot
from .templates import TemplateEngine, attachment_filename

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "mailgallery.yaml"

DEFAULT_CONFIG = {
    "gallery": None,
    "output_dir": "_build/emails",
    "port": 4000,
    "base_path": "",
}


class BuildError(GalleryError):
    """Error while building a preview's pages.

    Attributes:
        preview_path: Path of the preview that failed.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        preview_path: str,
        message: str,
        original_error: Exception | None = None,
    ):
        self.preview_path = preview_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{preview_path}: {message}")


@dataclass
class BuildResult:
    """Result of a gallery build.

    Attributes:
        gallery: Snapshot with every preview fully resolved.
        output_dir: Directory the pages were written to.
        files: Files written, relative to ``output_dir``.
    """

    gallery: GallerySnapshot
    output_dir: Path
    files: list[Path]


def load_config(project_root: Path) -> dict[str, Any]:
    """Load configuration from mailgallery.yaml.

    Args:
        project_root: Directory containing the config file.

    Returns:
        Configuration values, with defaults applied.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update(loaded)
            else:
                logger.warning("Ignoring %s: expected a mapping at top level", config_path)
    return config


def ensure_clean_dir(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)


def build_gallery(
    gallery: GallerySnapshot,
    output_dir: Path,
    base_path: str = "",
    clean_output: bool = True,
) -> BuildResult:
    """Write the static pages of a gallery.

    Args:
        gallery: Gallery snapshot, evaluated or not.
        output_dir: Directory to write into.
        base_path: URL prefix the pages will be served under.
        clean_output: Whether to wipe ``output_dir`` first.

    Returns:
        BuildResult with the resolved gallery and the files written.

    Raises:
        BuildError: If a preview cannot be produced or rendered.
    """
    if clean_output:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)

    engine = TemplateEngine(base_path)
    previews = []
    for preview in gallery.previews:
        try:
            previews.append(resolve_preview(preview))
        except Exception as exc:
            raise BuildError(preview.path, _format_error_message(exc), exc) from exc
    resolved = GallerySnapshot(
        previews=tuple(previews),
        groups=gallery.groups,
        sort=gallery.sort,
        title=gallery.title,
    )

    files = [_write(output_dir, Path("index.html"), engine.render_index(resolved))]
    for preview in resolved.previews:
        target = Path(preview.path)
        try:
            files.append(
                _write(output_dir, target / "index.html", engine.render_preview(resolved, preview))
            )
            files.append(_write(output_dir, target / "preview.html", engine.render_body(preview)))
            for index, attachment in enumerate(attachments_of(preview.artifact)):
                content = read_attachment_at(preview, index)
                name = attachment_filename(attachment, index)
                files.append(
                    _write(output_dir, target / "attachments" / str(index) / name, content.data)
                )
        except Exception as exc:
            raise BuildError(preview.path, _format_error_message(exc), exc) from exc
        logger.info("Built preview %s", preview.path)

    return BuildResult(gallery=resolved, output_dir=output_dir, files=files)


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message."""
    error_type = type(exc).__name__
    error_msg = str(exc).strip()
    if isinstance(exc, GalleryError):
        return error_msg
    if isinstance(exc, OSError):
        return f"Cannot read file: {error_msg}"
    return f"{error_type}: {error_msg}"


def _write(output_dir: Path, relative: Path, content: str | bytes) -> Path:
    path = output_dir / relative
    if not path.resolve().is_relative_to(output_dir.resolve()):
        raise GalleryError(f"Refusing to write {relative} outside {output_dir}")
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return relative
