"""Error types raised by mailgallery.

Every error derives from GalleryError so callers can catch the whole family
in one place (the CLI does). File read failures on path-backed attachments are
not wrapped: they surface as the OSError raised by the filesystem.
"""

from __future__ import annotations


class GalleryError(Exception):
    """Base class for all mailgallery errors."""


class DefinitionError(GalleryError):
    """Raised while a gallery is being declared.

    Covers nested groups, unusable paths or options, targets missing the
    preview functions, invalid sort values and declarations after freeze.
    """


class ValidationError(GalleryError):
    """Raised when preview details do not have the expected shape."""


class MissingTitleError(ValidationError):
    """Raised when preview details do not include a title."""

    hint = (
        "The `title` is required in preview_details(). "
        "Make sure it's being returned:\n\n"
        "    def preview_details(self):\n"
        '        return {"title": "Welcome email"}\n'
    )

    def __init__(self, target_name: str | None = None):
        self.target_name = target_name
        where = f" (returned by {target_name})" if target_name else ""
        super().__init__(f"Preview details are missing a title{where}.\n\n{self.hint}")


class NotFoundError(GalleryError):
    """Raised when a preview or attachment does not exist."""


class InvalidAttachmentError(GalleryError):
    """Raised when an attachment has neither inline data nor a file path."""


class GalleryLoadError(GalleryError):
    """Raised when a gallery cannot be imported from a ``module:attribute`` string."""
