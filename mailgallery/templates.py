"""Template rendering for gallery pages.

This module uses Jinja2 to render the listing page and the per-preview pages
shared by the static build and the server.

Key items:
- TemplateEngine: Renders gallery pages with the bundled templates.
- MessageView: Display-ready view of a preview's email.
- message_view: Build a MessageView from whatever a producer returned.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

from .attachments import attachments_of
from .gallery import GallerySnapshot
from .message import Email, format_address, format_addresses
from .models import Preview

_TEMPLATES_DIR = Path(__file__).parent / "templates"

# Header fields read from artifacts that are not Email instances.
_GENERIC_HEADERS = (
    ("From", "sender"),
    ("To", "to"),
    ("Cc", "cc"),
    ("Bcc", "bcc"),
    ("Reply-To", "reply_to"),
    ("Subject", "subject"),
)


@dataclass
class AttachmentLink:
    index: int
    filename: str
    content_type: str
    url: str


@dataclass
class MessageView:
    """Display-ready parts of a generated email.

    Attributes:
        headers: ``(name, value)`` pairs shown above the body.
        html_body: HTML body, if any.
        text_body: Plain text body, if any.
        attachments: Links to the attachments.
    """

    headers: list[tuple[str, str]] = field(default_factory=list)
    html_body: str | None = None
    text_body: str | None = None
    attachments: list[AttachmentLink] = field(default_factory=list)


def attachment_filename(attachment: Any, index: int) -> str:
    """Return the filename used in an attachment's URL."""
    if isinstance(attachment, Mapping):
        name = attachment.get("filename") or attachment.get("path")
    else:
        name = getattr(attachment, "filename", None) or getattr(attachment, "path", None)
    return Path(str(name)).name if name else f"attachment-{index}"


def message_view(artifact: Any, attachment_url=None) -> MessageView:
    """Build the view of a produced email.

    Args:
        artifact: An Email, a mapping, or an object with Email-like fields.
        attachment_url: Optional callable ``(index, filename) -> url``.

    Returns:
        MessageView for the preview template.
    """
    if isinstance(artifact, Email):
        headers = artifact.header_lines()
    else:
        headers = []
        for label, name in _GENERIC_HEADERS:
            value = _get(artifact, name)
            if not value:
                continue
            if isinstance(value, (list, tuple)) and not _is_named_address(value):
                headers.append((label, format_addresses(value)))
            else:
                headers.append((label, format_address(value) if name != "subject" else value))

    links = []
    for index, attachment in enumerate(attachments_of(artifact)):
        filename = attachment_filename(attachment, index)
        content_type = _get(attachment, "content_type") or "application/octet-stream"
        url = attachment_url(index, filename) if attachment_url else ""
        links.append(AttachmentLink(index, filename, content_type, url))

    return MessageView(
        headers=headers,
        html_body=_get(artifact, "html_body"),
        text_body=_get(artifact, "text_body"),
        attachments=links,
    )


def _get(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _is_named_address(value: Any) -> bool:
    return (
        isinstance(value, tuple)
        and len(value) == 2
        and all(isinstance(part, str) for part in value)
        and "@" in value[1]
    )


class TemplateEngine:
    """Render gallery pages with Jinja2.

    Attributes:
        base_path: URL prefix the gallery is mounted under (``""`` for root).
        env: Jinja2 environment loading the bundled templates.
    """

    def __init__(self, base_path: str = "", templates_dir: Path | None = None):
        self.base_path = "/" + base_path.strip("/") if base_path.strip("/") else ""
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir or _TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
        )
        self.env.globals["url_for"] = self.url_for

    def url_for(self, path: str, *parts: str) -> str:
        """Return the URL of a gallery page.

        Examples:
            >>> TemplateEngine("/gallery").url_for("auth.reset_password")
            '/gallery/auth.reset_password/'
            >>> TemplateEngine().url_for("welcome", "preview.html")
            '/welcome/preview.html'
        """
        segments = [quote(s, safe="") for s in (path, *parts) if s != ""]
        url = "/".join([self.base_path, *segments])
        if not parts:
            url += "/"
        return url or "/"

    def attachment_url(self, preview: Preview, index: int, filename: str) -> str:
        return self.url_for(preview.path, "attachments", str(index), filename)

    def render_index(self, gallery: GallerySnapshot) -> str:
        """Render the listing page. Previews without metadata are listed by path."""
        template = self.env.get_template("index.html.jinja")
        return template.render(gallery=gallery, current=None)

    def render_preview(self, gallery: GallerySnapshot, preview: Preview) -> str:
        """Render the detail page of a fully resolved preview."""
        message = message_view(
            preview.artifact,
            lambda index, filename: self.attachment_url(preview, index, filename),
        )
        template = self.env.get_template("preview.html.jinja")
        return template.render(gallery=gallery, current=preview, message=message)

    @staticmethod
    def render_body(preview: Preview) -> str:
        """Return the email's HTML body, or its text body wrapped in ``<pre>``."""
        html_body = _get(preview.artifact, "html_body")
        if html_body:
            return str(html_body)
        text_body = _get(preview.artifact, "text_body") or ""
        return str(Markup("<pre>{}</pre>").format(escape(text_body)))
