"""Protocol definitions for mailgallery.

These describe what the gallery expects from the objects handed to it,
without requiring them to inherit from anything:

- PreviewTarget: a module, class or object exposing ``preview`` and
  ``preview_details``.
- HasAttachments: an artifact carrying attachments.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PreviewTarget(Protocol):
    """Protocol for objects registered with ``Gallery.preview``.

    Both functions may be declared either without arguments, or with a
    single ``options`` parameter. Without a default, the preview must be
    declared with options::

        class WelcomeEmail:
            @staticmethod
            def preview(options=None):
                ...

            @staticmethod
            def preview_details(options=None):
                return {"title": "Welcome"}
    """

    def preview(self, *args: Any) -> Any:
        """Build the email from in-memory fixture data."""
        ...

    def preview_details(self, *args: Any) -> Any:
        """Return a mapping with ``title`` and optional ``description`` and ``tags``."""
        ...


@runtime_checkable
class HasAttachments(Protocol):
    """Protocol for artifacts that carry attachments."""

    attachments: Sequence[Any]
