"""Capability interfaces the timeline handlers depend on.

The handlers never reach for global state: the content store, the status
transformer, the active app and the extension hooks are all passed in.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Protocol

from mastodon_api.models import ContentItem, DiscussionItem, FilterSpec, IdBounds, Status


class TransformError(Exception):
    """Raised by a status transformer that cannot build a status for an object."""


class ContentStore(Protocol):
    """Read access to posts and comments."""

    def resolve_bounds(self, min_id: Optional[int], max_id: Optional[int]) -> IdBounds:
        ...

    def fetch_posts(self, spec: FilterSpec, bounds: IdBounds) -> Iterable[ContentItem]:
        ...

    def fetch_discussions(
        self, protocol: str, bounds: IdBounds, limit: Optional[int] = None
    ) -> Iterable[DiscussionItem]:
        ...


class StatusTransformer(Protocol):
    """Maps an object id to a status; `None` means there is nothing to show."""

    def __call__(self, object_id: int, data: Mapping[str, Any]) -> Optional[Status]:
        ...


class FilterAugmenter(Protocol):
    """Extension hook run on the finished filter spec."""

    def __call__(self, spec: FilterSpec, params: Mapping[str, Any]) -> FilterSpec:
        ...


class AppContext(Protocol):
    """The registered client app a request was made on behalf of."""

    def modify_filter(self, spec: FilterSpec) -> FilterSpec:
        ...


class PinnedLookup(Protocol):
    def __call__(self) -> list[int]:
        ...


class CommentIdRemapper(Protocol):
    def __call__(self, comment_id: int) -> int:
        ...
