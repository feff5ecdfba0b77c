"""Preview options.

Options are kept as ordered tuples of ``(key, value)`` pairs rather than
dicts, so a preview declared inside a group can repeat a key the group
already sets without losing either entry.

Key functions:
- normalize_options: Accept None, a mapping or pairs and return a tuple.
- merge_options: Concatenate group options and preview options.
- options_dict: Read an options tuple as a dict (last write wins).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .errors import DefinitionError

Options = tuple[tuple[Any, Any], ...]


def normalize_options(options: Mapping[Any, Any] | Iterable[Any] | None) -> Options:
    """Convert declared options into an ordered tuple of pairs.

    Args:
        options: None, a mapping, or an iterable of 2-item sequences.

    Returns:
        Tuple of ``(key, value)`` pairs in declaration order.

    Raises:
        DefinitionError: If an entry is not a pair, or options is a string.
    """
    if options is None:
        return ()
    if isinstance(options, Mapping):
        return tuple(options.items())
    if isinstance(options, (str, bytes)):
        raise DefinitionError(f"Options must be a mapping or a list of pairs, got {options!r}")

    pairs = []
    try:
        entries = list(options)
    except TypeError:
        raise DefinitionError(
            f"Options must be a mapping or a list of pairs, got {options!r}"
        ) from None
    for entry in entries:
        if isinstance(entry, (str, bytes)) or not isinstance(entry, Iterable):
            raise DefinitionError(f"Option entries must be (key, value) pairs, got {entry!r}")
        item = tuple(entry)
        if len(item) != 2:
            raise DefinitionError(f"Option entries must be (key, value) pairs, got {entry!r}")
        pairs.append(item)
    return tuple(pairs)


def merge_options(group_options: Iterable[Any], local_options: Iterable[Any]) -> Options:
    """Merge group options with preview options.

    Group options come first, preview options after them. Duplicate keys are
    kept; consumers doing a first-match lookup see the group value, consumers
    using options_dict see the preview value.
    """
    return tuple(group_options) + tuple(local_options)


def options_dict(options: Iterable[tuple[Any, Any]]) -> dict[Any, Any]:
    """Return the options as a dict where later entries override earlier ones."""
    return dict(options)
