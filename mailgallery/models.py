"""Data model for mailgallery.

Key classes:
- Capability: Which call form a preview function supports.
- CallRef: A deferred call to a preview function on a target.
- Group: A named group of previews.
- Metadata: Validated preview details.
- Preview: A registered preview, evaluated or not.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .options import Options


class Capability(str, Enum):
    """Call form supported by a ``preview`` or ``preview_details`` function.

    SIMPLE functions take no arguments. CONFIGURABLE functions accept the
    preview options as their single positional argument.
    """

    SIMPLE = "simple"
    CONFIGURABLE = "configurable"


class _Unset:
    """Marker for a preview whose artifact has not been produced yet."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


def describe_target(target: Any) -> str:
    """Return a readable name for a preview target (module, class or instance)."""
    if inspect.ismodule(target):
        return target.__name__
    if inspect.isclass(target):
        return f"{target.__module__}.{target.__qualname__}"
    cls = type(target)
    return f"{cls.__module__}.{cls.__qualname__} instance"


@dataclass(frozen=True)
class CallRef:
    """Deferred call of ``target.<function_name>`` with the preview options.

    Attributes:
        target: Module, class or object exposing the function.
        function_name: ``"preview"`` or ``"preview_details"``.
        options: Merged group and preview options.
        capability: Call form the function supports.
    """

    target: Any
    function_name: str
    options: Options = ()
    capability: Capability = Capability.SIMPLE

    @property
    def qualified_name(self) -> str:
        return f"{describe_target(self.target)}.{self.function_name}"

    def __repr__(self) -> str:
        return (
            f"CallRef({self.qualified_name}, options={self.options!r}, "
            f"capability={self.capability.value})"
        )


@dataclass(frozen=True)
class Group:
    """A group of previews.

    Attributes:
        path: Group path, used as prefix of the preview paths.
        title: Human-readable group title.
        options: Options inherited by every preview in the group.
    """

    path: str
    title: str
    options: Options = ()


@dataclass(frozen=True)
class Metadata:
    """Details describing a preview on listing and detail pages."""

    title: str
    description: str | None = None
    tags: tuple[tuple[Any, Any], ...] = ()


@dataclass(frozen=True)
class Preview:
    """A registered preview.

    Previews are created unevaluated. The evaluator returns copies with
    ``artifact`` and ``metadata`` filled in; once set they are never recomputed
    for that copy.

    Attributes:
        group: Path of the enclosing group, or None.
        path: Full preview path (group path and local path joined by ``.``).
        producer: Deferred call producing the email.
        details: Deferred call producing the preview details.
        artifact: Producer result, UNSET until resolved.
        metadata: Validated details, None until resolved.
    """

    group: str | None
    path: str
    producer: CallRef
    details: CallRef
    artifact: Any = field(default=UNSET, compare=False)
    metadata: Metadata | None = field(default=None, compare=False)

    @property
    def has_artifact(self) -> bool:
        return self.artifact is not UNSET

    @property
    def title(self) -> str:
        """Title from the resolved metadata, falling back to the path."""
        if self.metadata is None:
            return self.path
        return self.metadata.title
