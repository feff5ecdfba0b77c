"""Lazy evaluation of previews.

Previews are declared with deferred calls (CallRef) to the ``preview`` and
``preview_details`` functions of their target. This module performs those
calls on demand and validates what ``preview_details`` returns.

Whether a function accepts the preview options is decided once, when the
preview is declared (see detect_capability), instead of by trying the call
and catching errors. Every exception raised inside a preview function
therefore reaches the caller unchanged.

Key functions:
- detect_capability: Inspect a preview function's signature.
- call_with_fallback: Invoke a CallRef in the form the function supports.
- resolve_artifact: Produce the email of a preview.
- resolve_metadata: Produce and validate the details of a preview.
- resolve_preview: Both of the above.
- validate_metadata: Check the shape of preview details.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from .errors import DefinitionError, MissingTitleError, ValidationError
from .models import Capability, CallRef, Metadata, Preview
from .options import Options

logger = logging.getLogger(__name__)

METADATA_KEYS = ("title", "description", "tags")

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def detect_capability(
    func: Callable[..., Any],
    declared: Capability | str | None = None,
    options: Options = (),
) -> Capability:
    """Work out which call form a preview function supports.

    A function that can be called without arguments and also accepts one
    positional argument is CONFIGURABLE; one that takes no positional
    argument is SIMPLE. A function whose only required parameter is a single
    positional ``options`` argument is CONFIGURABLE too, provided the
    preview has options to pass. Functions whose signature cannot be
    inspected (builtins, some C extensions) are assumed SIMPLE unless
    declared.

    Args:
        func: The ``preview`` or ``preview_details`` callable.
        declared: Capability given at registration, checked against the
            signature when one is available.
        options: Merged options the preview will be called with.

    Returns:
        The capability to use when calling ``func``.

    Raises:
        DefinitionError: If ``func`` cannot be called in the form its options
            require, or does not support the declared capability.
    """
    try:
        capability = Capability(declared) if declared is not None else None
    except ValueError:
        raise DefinitionError(
            f"Unknown capability {declared!r} for {_name_of(func)}; "
            f"expected one of {[c.value for c in Capability]}"
        ) from None
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return capability or Capability.SIMPLE

    params = list(signature.parameters.values())
    required = [
        p for p in params if p.kind in _POSITIONAL and p.default is inspect.Parameter.empty
    ]
    required += [
        p
        for p in params
        if p.kind is inspect.Parameter.KEYWORD_ONLY and p.default is inspect.Parameter.empty
    ]
    if required:
        names = ", ".join(p.name for p in required)
        options_only = len(required) == 1 and required[0].kind in _POSITIONAL
        if options_only and options and capability is not Capability.SIMPLE:
            return Capability.CONFIGURABLE
        if options_only and capability is not Capability.SIMPLE:
            raise DefinitionError(
                f"{_name_of(func)} requires options (required parameters: {names}) "
                f"but the preview has none; pass options or give the parameter a default"
            )
        raise DefinitionError(
            f"{_name_of(func)} must be callable without arguments "
            f"(required parameters: {names}); give the options parameter a default"
        )

    accepts_options = any(
        p.kind in _POSITIONAL or p.kind is inspect.Parameter.VAR_POSITIONAL for p in params
    )
    if capability is Capability.CONFIGURABLE and not accepts_options:
        raise DefinitionError(
            f"{_name_of(func)} is declared configurable but takes no options argument"
        )
    if capability is not None:
        return capability
    return Capability.CONFIGURABLE if accepts_options else Capability.SIMPLE


def _name_of(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or repr(func)


def call_with_fallback(ref: CallRef) -> Any:
    """Invoke a deferred preview call.

    Empty options always use the zero-argument form. Non-empty options are
    passed to CONFIGURABLE functions and dropped for SIMPLE ones, which keeps
    targets written without options support working inside option-carrying
    groups.
    """
    func = getattr(ref.target, ref.function_name)
    if ref.options and ref.capability is Capability.CONFIGURABLE:
        return func(ref.options)
    if ref.options:
        logger.debug("%s takes no options; calling without %r", ref.qualified_name, ref.options)
    return func()


def resolve_artifact(preview: Preview) -> Preview:
    """Return the preview with its email produced.

    Args:
        preview: Preview to evaluate.

    Returns:
        ``preview`` itself when the artifact is already present, otherwise a
        copy with ``artifact`` set.
    """
    if preview.has_artifact:
        return preview
    logger.debug("Producing preview %s via %s", preview.path, preview.producer.qualified_name)
    artifact = call_with_fallback(preview.producer)
    return dataclasses.replace(preview, artifact=artifact)


def resolve_metadata(preview: Preview) -> Preview:
    """Return the preview with its details resolved and validated.

    Args:
        preview: Preview to evaluate.

    Returns:
        ``preview`` itself when metadata is already present, otherwise a copy
        with ``metadata`` set.

    Raises:
        ValidationError: If the details have unknown keys or the wrong shape.
        MissingTitleError: If the details have no title.
    """
    if preview.metadata is not None:
        return preview
    details = call_with_fallback(preview.details)
    metadata = validate_metadata(details, source=preview.details.qualified_name)
    return dataclasses.replace(preview, metadata=metadata)


def resolve_preview(preview: Preview) -> Preview:
    """Resolve both the email and the details of a preview."""
    return resolve_metadata(resolve_artifact(preview))


def validate_metadata(details: Any, source: str | None = None) -> Metadata:
    """Validate the value returned by ``preview_details``.

    Args:
        details: A Metadata, a mapping, or an iterable of ``(key, value)``
            pairs with the keys ``title``, ``description`` and ``tags``.
        source: Name of the function that returned ``details``, used in
            error messages.

    Returns:
        Metadata with ``tags`` defaulting to an empty tuple.

    Raises:
        ValidationError: On unknown keys or a value that is not mapping-like.
        MissingTitleError: When ``title`` is absent or empty.
    """
    if isinstance(details, Metadata):
        if not details.title:
            raise MissingTitleError(source)
        return details

    values = dict(_metadata_items(details, source))
    unknown = [key for key in values if key not in METADATA_KEYS]
    if unknown:
        raise ValidationError(
            f"Unknown preview details key(s) {unknown!r}"
            f"{_from(source)}; expected any of {list(METADATA_KEYS)!r}"
        )

    title = values.get("title")
    if title is None or title == "":
        raise MissingTitleError(source)
    if not isinstance(title, str):
        raise ValidationError(f"Preview title must be a string{_from(source)}, got {title!r}")

    description = values.get("description")
    if description is not None and not isinstance(description, str):
        raise ValidationError(
            f"Preview description must be a string{_from(source)}, got {description!r}"
        )

    return Metadata(
        title=title,
        description=description,
        tags=_normalize_tags(values.get("tags"), source),
    )


def _metadata_items(details: Any, source: str | None) -> list[tuple[Any, Any]]:
    if isinstance(details, Mapping):
        return list(details.items())
    if isinstance(details, (str, bytes)) or not isinstance(details, Iterable):
        raise ValidationError(
            f"Preview details must be a mapping{_from(source)}, got {details!r}"
        )
    items = []
    for entry in details:
        if not isinstance(entry, tuple) or len(entry) != 2:
            raise ValidationError(
                f"Preview details must be a mapping{_from(source)}, got entry {entry!r}"
            )
        items.append(entry)
    return items


def _normalize_tags(tags: Any, source: str | None) -> tuple[tuple[Any, Any], ...]:
    if tags is None:
        return ()
    if isinstance(tags, Mapping):
        return tuple(tags.items())
    if isinstance(tags, (str, bytes)) or not isinstance(tags, Iterable):
        raise ValidationError(f"Preview tags must be key/value pairs{_from(source)}, got {tags!r}")
    pairs = []
    for entry in tags:
        if not isinstance(entry, tuple) or len(entry) != 2:
            raise ValidationError(
                f"Preview tags must be key/value pairs{_from(source)}, got entry {entry!r}"
            )
        pairs.append(entry)
    return tuple(pairs)


def _from(source: str | None) -> str:
    return f" in {source}" if source else ""
