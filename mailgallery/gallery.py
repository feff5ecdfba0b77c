"""Gallery declaration.

A Gallery collects preview and group declarations in source order and turns
them into an immutable GallerySnapshot::

    gallery = Gallery()

    with gallery.group("/auth", title="Auth"):
        gallery.preview("/reset_password", ResetPasswordEmail)

    gallery.preview("/welcome", WelcomeEmail)

Declarations are validated as they are made, so a broken gallery fails when
its module is imported rather than when a page is first rendered.

Key classes:
- Gallery: Builder collecting groups and previews.
- GallerySnapshot: Frozen view of a gallery handed to renderers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, Union

from .errors import DefinitionError, NotFoundError
from .evaluator import detect_capability, resolve_metadata
from .models import Capability, CallRef, Group, Preview, describe_target
from .options import merge_options, normalize_options
from .paths import build_path, normalize_path
from .protocols import PreviewTarget

logger = logging.getLogger(__name__)

SortOption = Union[bool, Callable[[list[Preview]], Iterable[Preview]]]

DEFAULT_TITLE = "Mail Gallery"


def sort_previews(previews: Iterable[Preview], sort: SortOption) -> list[Preview]:
    """Order previews for display.

    Args:
        previews: Previews in declaration order.
        sort: True to sort alphabetically by path, False to keep declaration
            order, or a callable receiving the list and returning it sorted.

    Returns:
        New list of previews.
    """
    previews = list(previews)
    if sort is True:
        return sorted(previews, key=lambda p: p.path)
    if sort is False:
        return previews
    return list(sort(previews))


def _validate_sort(sort: Any) -> SortOption:
    if sort is True or sort is False or callable(sort):
        return sort
    raise DefinitionError(f"sort must be True, False or a callable, got {sort!r}")


@dataclass(frozen=True)
class GallerySnapshot:
    """Immutable view of a declared gallery.

    Attributes:
        previews: Previews in declaration order.
        groups: Groups in declaration order.
        sort: Sorting configuration (see sort_previews).
        title: Gallery title shown on the listing page.
    """

    previews: tuple[Preview, ...]
    groups: tuple[Group, ...]
    sort: SortOption = True
    title: str = DEFAULT_TITLE

    def sorted_previews(self) -> list[Preview]:
        return sort_previews(self.previews, self.sort)

    def previews_in(self, group: Group | str | None) -> list[Preview]:
        """Return the sorted previews of a group, or the ungrouped ones for None."""
        group_path = group.path if isinstance(group, Group) else group
        return [p for p in self.sorted_previews() if p.group == group_path]

    def find(self, path: str) -> Preview:
        """Return the preview registered at ``path``.

        Raises:
            NotFoundError: If no preview has that path.
        """
        for preview in self.previews:
            if preview.path == path:
                return preview
        raise NotFoundError(f"No preview at {path!r}")

    def with_metadata(self) -> GallerySnapshot:
        """Return a copy whose previews all have their details resolved."""
        return replace(self, previews=tuple(resolve_metadata(p) for p in self.previews))


class Gallery:
    """Builder for a gallery of email previews.

    Attributes:
        sort: True (alphabetical by path, the default), False (declaration
            order) or a callable sorting a list of previews.
        title: Title shown on the gallery listing page.
    """

    def __init__(self, sort: SortOption = True, title: str = DEFAULT_TITLE):
        self.sort = _validate_sort(sort)
        self.title = title
        self._previews: list[Preview] = []
        self._groups: list[Group] = []
        self._current_group: Group | None = None
        self._snapshot: GallerySnapshot | None = None

    def __len__(self) -> int:
        return len(self._previews)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        state = "frozen" if self.frozen else "open"
        return f"Gallery({len(self._previews)} previews, {len(self._groups)} groups, {state})"

    @property
    def frozen(self) -> bool:
        return self._snapshot is not None

    @contextmanager
    def group(
        self,
        path: Any,
        title: str,
        options: Mapping[Any, Any] | Iterable[Any] | None = None,
    ) -> Iterator[Group]:
        """Declare a group; previews declared inside the block belong to it.

        Args:
            path: Group path, prefixed to the path of every preview inside.
            title: Group title.
            options: Options passed to every preview in the group.

        Yields:
            The declared Group.

        Raises:
            DefinitionError: If called inside another group, or if the path
                or title is invalid or the path is already used by a group.
        """
        self._ensure_open()
        if self._current_group is not None:
            raise DefinitionError(
                f"group() cannot be nested (already inside group {self._current_group.path!r})"
            )
        group_path = normalize_path(path)
        if not isinstance(title, str) or not title:
            raise DefinitionError(f"Group {group_path!r} needs a non-empty title")
        if any(g.path == group_path for g in self._groups):
            raise DefinitionError(f"Group {group_path!r} is already declared")

        group = Group(path=group_path, title=title, options=normalize_options(options))
        self._groups.append(group)
        self._current_group = group
        logger.debug("Declared group %s (%s)", group.path, group.title)
        try:
            yield group
        finally:
            self._current_group = None

    def preview(
        self,
        path: Any,
        target: Any,
        options: Mapping[Any, Any] | Iterable[Any] | None = None,
        *,
        producer: Capability | str | None = None,
        details: Capability | str | None = None,
    ) -> Preview:
        """Declare a preview.

        ``target`` must expose ``preview`` and ``preview_details``. Each may
        take no arguments, or one ``options`` argument; which form is used
        is detected from the signature unless ``producer`` or ``details``
        declares it. A required ``options`` argument needs non-empty options.

        Args:
            path: Preview path, joined to the current group's path.
            target: Module, class or object implementing the preview.
            options: Options for this preview, appended after group options.
            producer: Capability of ``target.preview``.
            details: Capability of ``target.preview_details``.

        Returns:
            The declared, unevaluated Preview.

        Raises:
            DefinitionError: If the path, options or target are invalid, or
                the path is already registered.
        """
        self._ensure_open()
        local_path = normalize_path(path)
        producer_fn, details_fn = _validate_target(target)

        group = self._current_group
        merged = merge_options(group.options if group else (), normalize_options(options))
        full_path = build_path(group.path if group else None, local_path)
        if any(p.path == full_path for p in self._previews):
            raise DefinitionError(f"Preview path {full_path!r} is already registered")

        preview = Preview(
            group=group.path if group else None,
            path=full_path,
            producer=CallRef(
                target, "preview", merged, detect_capability(producer_fn, producer, merged)
            ),
            details=CallRef(
                target, "preview_details", merged, detect_capability(details_fn, details, merged)
            ),
        )
        self._previews.append(preview)
        logger.debug("Declared preview %s -> %s", full_path, describe_target(target))
        return preview

    def freeze(self) -> GallerySnapshot:
        """End the declaration phase and return the unevaluated snapshot.

        Calling it again returns the same snapshot.
        """
        if self._current_group is not None:
            raise DefinitionError(
                f"Cannot freeze gallery inside group {self._current_group.path!r}"
            )
        if self._snapshot is None:
            self._snapshot = GallerySnapshot(
                previews=tuple(self._previews),
                groups=tuple(self._groups),
                sort=self.sort,
                title=self.title,
            )
        return self._snapshot

    build = freeze

    def get(self) -> GallerySnapshot:
        """Return the snapshot with the details of every preview resolved.

        Details are evaluated again on every call; producers are not called.
        """
        return self.freeze().with_metadata()

    def _ensure_open(self) -> None:
        if self._snapshot is not None:
            raise DefinitionError("Gallery is frozen; declare previews before freeze()")


def _validate_target(target: Any) -> tuple[Callable[..., Any], Callable[..., Any]]:
    if target is None:
        raise DefinitionError("Preview target cannot be None")
    if not isinstance(target, PreviewTarget):
        raise DefinitionError(
            f"{describe_target(target)} must define preview() and preview_details()"
        )
    for func in (target.preview, target.preview_details):
        if not callable(func):
            raise DefinitionError(f"{describe_target(target)}: {func!r} is not callable")
    return target.preview, target.preview_details
