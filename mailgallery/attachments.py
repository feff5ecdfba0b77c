"""Reading preview attachments.

Key items:
- AttachmentContent: Content type, bytes and filename of one attachment.
- read_attachment_at: Resolve a preview and read one of its attachments.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import InvalidAttachmentError, NotFoundError
from .evaluator import resolve_artifact
from .models import Preview
from .protocols import HasAttachments

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class AttachmentContent:
    """Attachment payload ready to be served or written.

    Attributes:
        content_type: MIME type declared on the attachment.
        data: Attachment bytes.
        filename: Declared filename, when the attachment has one.
    """

    content_type: str
    data: bytes
    filename: str | None = None


def attachments_of(artifact: Any) -> list[Any]:
    """Return the attachments of an artifact, or an empty list."""
    if isinstance(artifact, Mapping):
        attachments = artifact.get("attachments")
    elif isinstance(artifact, HasAttachments):
        attachments = artifact.attachments
    else:
        attachments = None
    return list(attachments or [])


def read_attachment_at(preview: Preview, index: int) -> AttachmentContent:
    """Read the attachment at ``index`` of a preview's email.

    The preview's email is produced first if needed. Inline data is returned
    as is (text is encoded as UTF-8); file-backed attachments are read from
    disk on every call.

    Args:
        preview: The preview whose email holds the attachment.
        index: Zero-based position of the attachment.

    Returns:
        AttachmentContent with the declared content type and the bytes.

    Raises:
        NotFoundError: If the email has no attachments or ``index`` is out of
            range.
        InvalidAttachmentError: If the attachment has neither data nor path.
        OSError: If a file-backed attachment cannot be read.
    """
    preview = resolve_artifact(preview)
    attachments = attachments_of(preview.artifact)
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(attachments):
        raise NotFoundError(f"Preview {preview.path!r} has no attachment at index {index!r}")

    attachment = attachments[index]
    content_type = _field(attachment, "content_type") or DEFAULT_CONTENT_TYPE
    filename = _field(attachment, "filename")

    data = _field(attachment, "data")
    if data is not None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        return AttachmentContent(content_type=content_type, data=bytes(data), filename=filename)

    path = _field(attachment, "path")
    if path is not None:
        logger.debug("Reading attachment %d of %s from %s", index, preview.path, path)
        return AttachmentContent(
            content_type=content_type,
            data=Path(path).read_bytes(),
            filename=filename or Path(path).name,
        )

    raise InvalidAttachmentError(
        f"Attachment {index} of preview {preview.path!r} has neither data nor a path"
    )


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)
