"""Domain models shared by the timeline handlers and the storage adapters.

None of these types know about peewee or Flask, so the handlers can be driven
by any store that satisfies the ports in `mastodon_api.ports`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

# post__in value that can never match a stored post
NOTHING_ID = -1


@dataclass(frozen=True)
class FilterSpec:
    """Query options for one listing request.

    Built once per request by the query builder; augmenters hand back modified
    copies via `dataclasses.replace` instead of mutating it.
    """

    limit: int = 20
    post_types: tuple[str, ...] = ('post',)
    post_statuses: tuple[str, ...] = ('publish', 'private')
    pinned: bool = False
    include_ids: Optional[tuple[int, ...]] = None
    post_formats: Optional[tuple[str, ...]] = None
    post_id: Optional[int] = None
    author_id: Optional[int] = None


@dataclass(frozen=True)
class IdBounds:
    """Exclusive bounds applied to a single fetch.

    `min_id`/`max_id` narrow posts by id. `after`/`before` carry the creation
    time of the cursor status; comments are always narrowed by them, posts only
    when the cursor has no id in the post sequence (a remapped comment).
    """

    min_id: Optional[int] = None
    max_id: Optional[int] = None
    after: Optional[datetime] = None
    before: Optional[datetime] = None

    @property
    def ascending(self) -> bool:
        # with a lower bound we want the items right after it, oldest first
        return self.min_id is not None or self.after is not None


@dataclass(frozen=True)
class ContentItem:
    id: int
    created_at: datetime
    author_id: int = 0
    title: str = ''
    content: str = ''
    post_format: Optional[str] = None
    status: str = 'publish'
    sticky: bool = False


@dataclass(frozen=True)
class DiscussionItem:
    id: int
    created_at: datetime
    post_id: int
    author_name: str = ''
    content: str = ''
    protocol: Optional[str] = None


@dataclass(frozen=True)
class Status:
    """A Mastodon status as handed back by a status transformer."""

    id: str
    created_at: datetime
    content: str = ''
    url: Optional[str] = None
    in_reply_to_id: Optional[str] = None
    language: Optional[str] = None
    visibility: str = 'public'
    pinned: bool = False
    account: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'created_at': self.created_at.isoformat(),
            'content': self.content,
            'url': self.url,
            'uri': self.url,
            'in_reply_to_id': self.in_reply_to_id,
            'language': self.language,
            'visibility': self.visibility,
            'pinned': self.pinned,
            'account': dict(self.account),
            'media_attachments': [],
            'mentions': [],
            'tags': [],
            'emojis': [],
        }


@dataclass(frozen=True)
class TimelinePage:
    """Statuses for one response, newest first, with their cursor links."""

    statuses: tuple[Status, ...] = ()
    next_url: Optional[str] = None
    prev_url: Optional[str] = None

    @property
    def links(self) -> Optional[str]:
        parts = []
        if self.next_url:
            parts.append(f'<{self.next_url}>; rel="next"')
        if self.prev_url:
            parts.append(f'<{self.prev_url}>; rel="prev"')
        return ', '.join(parts) or None

    def to_list(self) -> list[dict[str, Any]]:
        return [status.to_dict() for status in self.statuses]
