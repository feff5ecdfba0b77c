"""Locating a gallery from the command line or config.

Galleries are referenced with an import string such as
``myapp.mailer.gallery:gallery``. The attribute may be a Gallery, a
GallerySnapshot, or a zero-argument callable returning either.
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path
from typing import Any

from .errors import GalleryLoadError
from .gallery import Gallery, GallerySnapshot

logger = logging.getLogger(__name__)

DEFAULT_ATTRIBUTE = "gallery"


def load_gallery(reference: str, search_path: Path | None = None) -> GallerySnapshot:
    """Import a gallery and return its frozen snapshot.

    Args:
        reference: ``module`` or ``module:attribute``; the attribute defaults
            to ``gallery``.
        search_path: Directory prepended to ``sys.path`` before importing,
            usually the project root.

    Returns:
        The gallery's unevaluated snapshot.

    Raises:
        GalleryLoadError: If the module or attribute cannot be found, or the
            attribute is not a gallery.
    """
    module_name, _, attribute = reference.partition(":")
    attribute = attribute or DEFAULT_ATTRIBUTE
    if not module_name:
        raise GalleryLoadError(f"Invalid gallery reference {reference!r}; use module:attribute")

    if search_path is not None and str(search_path) not in sys.path:
        sys.path.insert(0, str(search_path))

    try:
        module = importlib.import_module(module_name)
    except ModuleNotFoundError as exc:
        if exc.name != module_name and not module_name.startswith(f"{exc.name}."):
            raise
        raise GalleryLoadError(f"Cannot import gallery module {module_name!r}") from exc

    try:
        value: Any = getattr(module, attribute)
    except AttributeError:
        raise GalleryLoadError(f"Module {module_name!r} has no attribute {attribute!r}") from None

    if callable(value) and not isinstance(value, (Gallery, GallerySnapshot)):
        value = value()
    if isinstance(value, Gallery):
        value = value.freeze()
    if not isinstance(value, GallerySnapshot):
        raise GalleryLoadError(f"{reference!r} is not a Gallery (got {type(value).__name__})")

    logger.debug("Loaded gallery %s with %d previews", reference, len(value.previews))
    return value
