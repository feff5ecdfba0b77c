"""Email message model returned by preview functions.

Preview functions may return any object; the gallery pages understand the
fields of Email below, and the attachment reader understands anything with
an ``attachments`` list. Email is a plain container for applications that do
not already have their own message type.

Key classes:
- Attachment: File attached to an email, inline or backed by a path.
- Email: Headers, bodies and attachments of a generated email.
"""

from __future__ import annotations

import mimetypes
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

Address = Union[str, tuple[str, str]]


def format_address(address: Address) -> str:
    """Format an address as it appears in an email header.

    Examples:
        >>> format_address(("Test User", "user@sample.test"))
        'Test User <user@sample.test>'
        >>> format_address("noreply@sample.test")
        'noreply@sample.test'
    """
    if isinstance(address, tuple):
        name, email = address
        return f"{name} <{email}>" if name else email
    return address


def format_addresses(addresses: Iterable[Address]) -> str:
    return ", ".join(format_address(a) for a in addresses)


@dataclass
class Attachment:
    """A file attached to an email.

    Exactly one of ``data`` and ``path`` is normally set. Path-backed
    attachments are read when the attachment is served.

    Attributes:
        filename: Name shown to the recipient.
        content_type: MIME type.
        data: Inline content.
        path: File holding the content.
    """

    filename: str
    content_type: str = "application/octet-stream"
    data: bytes | None = None
    path: str | None = None

    @classmethod
    def from_path(
        cls, path: str | Path, filename: str | None = None, content_type: str | None = None
    ) -> Attachment:
        """Create an attachment backed by a file, guessing its content type."""
        path = Path(path)
        guessed, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=filename or path.name,
            content_type=content_type or guessed or "application/octet-stream",
            path=str(path),
        )

    @classmethod
    def from_data(
        cls, data: bytes, filename: str, content_type: str | None = None
    ) -> Attachment:
        guessed, _ = mimetypes.guess_type(filename)
        return cls(
            filename=filename,
            content_type=content_type or guessed or "application/octet-stream",
            data=data,
        )


@dataclass
class Email:
    """A generated email.

    Attributes:
        subject: Subject line.
        sender: From address, either ``"email"`` or ``("Name", "email")``.
        to: Recipient addresses.
        cc: Carbon copy addresses.
        bcc: Blind carbon copy addresses.
        reply_to: Reply-To address.
        html_body: HTML body.
        text_body: Plain text body.
        headers: Extra headers.
        attachments: Attached files.
    """

    subject: str = ""
    sender: Address | None = None
    to: list[Address] = field(default_factory=list)
    cc: list[Address] = field(default_factory=list)
    bcc: list[Address] = field(default_factory=list)
    reply_to: Address | None = None
    html_body: str | None = None
    text_body: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    attachments: list[Attachment] = field(default_factory=list)

    def header_lines(self) -> list[tuple[str, str]]:
        """Return the headers shown on a preview page, in display order."""
        lines: list[tuple[str, str]] = []
        if self.sender:
            lines.append(("From", format_address(self.sender)))
        if self.to:
            lines.append(("To", format_addresses(self.to)))
        if self.cc:
            lines.append(("Cc", format_addresses(self.cc)))
        if self.bcc:
            lines.append(("Bcc", format_addresses(self.bcc)))
        if self.reply_to:
            lines.append(("Reply-To", format_address(self.reply_to)))
        lines.append(("Subject", self.subject))
        lines.extend(self.headers.items())
        return lines
