"""mailgallery: preview the emails your application sends.

Register previews on a Gallery, group them, and browse them on a local
server or publish them as static HTML pages::

    from mailgallery import Gallery

    gallery = Gallery()
    gallery.preview("/welcome", WelcomeEmail)

Previews are evaluated lazily: listing pages only call ``preview_details``,
and an email is produced only when its page or attachments are requested.
"""

from .attachments import AttachmentContent, read_attachment_at
from .errors import (
    DefinitionError,
    GalleryError,
    GalleryLoadError,
    InvalidAttachmentError,
    MissingTitleError,
    NotFoundError,
    ValidationError,
)
from .evaluator import (
    call_with_fallback,
    resolve_artifact,
    resolve_metadata,
    resolve_preview,
    validate_metadata,
)
from .gallery import Gallery, GallerySnapshot, sort_previews
from .message import Attachment, Email
from .models import UNSET, CallRef, Capability, Group, Metadata, Preview
from .options import merge_options, normalize_options, options_dict
from .paths import build_path, normalize_path

__all__ = [
    "__version__",
    "Attachment",
    "AttachmentContent",
    "CallRef",
    "Capability",
    "DefinitionError",
    "Email",
    "Gallery",
    "GalleryError",
    "GalleryLoadError",
    "GallerySnapshot",
    "Group",
    "InvalidAttachmentError",
    "Metadata",
    "MissingTitleError",
    "NotFoundError",
    "Preview",
    "UNSET",
    "ValidationError",
    "build_path",
    "call_with_fallback",
    "merge_options",
    "normalize_options",
    "normalize_path",
    "options_dict",
    "read_attachment_at",
    "resolve_artifact",
    "resolve_metadata",
    "resolve_preview",
    "sort_previews",
    "validate_metadata",
]
__version__ = "0.1.0"
