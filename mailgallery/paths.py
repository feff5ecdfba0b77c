"""Preview path helpers.

Key functions:
- normalize_path: Turn a declared path into the stored local path.
- build_path: Join a group path and a local path.
"""

from __future__ import annotations

import os
from enum import Enum

from .errors import DefinitionError

PATH_SEPARATOR = "."


def normalize_path(path: object) -> str:
    """Resolve a declared path to the string stored on a group or preview.

    A single leading ``/`` is dropped so ``"/welcome"`` and ``"welcome"``
    register the same preview.

    Args:
        path: Declared path. Strings, enum members and path-like objects are
            accepted.

    Returns:
        The normalized local path.

    Raises:
        DefinitionError: If the path cannot be resolved to a non-empty string,
            or contains ``.`` or ``..`` segments.

    Examples:
        >>> normalize_path("/reset_password")
        'reset_password'
    """
    if isinstance(path, Enum):
        value = path.value
        resolved = value if isinstance(value, str) else path.name
    elif isinstance(path, str):
        resolved = path
    elif isinstance(path, os.PathLike):
        resolved = os.fspath(path)
        if not isinstance(resolved, str):
            raise DefinitionError(f"Preview path must be text, got {path!r}")
    else:
        raise DefinitionError(
            f"Preview path must be a string, enum member or path-like, got {path!r}"
        )

    if resolved.startswith("/"):
        resolved = resolved[1:]
    if not resolved:
        raise DefinitionError(f"Preview path cannot be empty (got {path!r})")
    if any(part in (".", "..") for part in resolved.replace("\\", "/").split("/")):
        raise DefinitionError(f"Preview path cannot contain relative segments (got {path!r})")
    return resolved


def build_path(group_path: str | None, local_path: str) -> str:
    """Return the full path of a preview.

    Examples:
        >>> build_path(None, "welcome")
        'welcome'
        >>> build_path("auth", "reset_password")
        'auth.reset_password'
    """
    if group_path is None:
        return local_path
    return f"{group_path}{PATH_SEPARATOR}{local_path}"
