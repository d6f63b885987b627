from datetime import datetime
from typing import Any, Mapping, Optional

from mastodon_api import config
from mastodon_api.handlers.links import pagination_links
from mastodon_api.logger import logger
from mastodon_api.models import FilterSpec, IdBounds, Status, TimelinePage
from mastodon_api.ports import CommentIdRemapper, ContentStore, StatusTransformer, TransformError

# (source timestamp, discovery sequence)
OrderingKey = tuple[datetime, int]


class TimelineAssembler:
    """Merges posts and federated comments into one newest-first page."""

    def __init__(
        self,
        store: ContentStore,
        transformer: StatusTransformer,
        remapper: CommentIdRemapper,
        protocol: str = config.DISCUSSION_PROTOCOL,
        bound_discussions: bool = config.BOUND_DISCUSSIONS,
    ) -> None:
        self._store = store
        self._transformer = transformer
        self._remapper = remapper
        self._protocol = protocol
        self._bound_discussions = bound_discussions

    def _transform(self, object_id: int, data: Mapping[str, Any]) -> Optional[Status]:
        try:
            status = self._transformer(object_id, data)
        except TransformError as e:
            logger.debug(f'Skipping {object_id}: {e}')
            return None

        if not status:
            logger.debug(f'Skipping {object_id}: no status')
            return None
        return status

    def assemble(
        self,
        spec: FilterSpec,
        request_url: str,
        min_id: Optional[int] = None,
        max_id: Optional[int] = None,
    ) -> TimelinePage:
        bounds = self._store.resolve_bounds(min_id, max_id)

        k = 0
        statuses: dict[OrderingKey, Status] = {}

        # 1) Posts, in store order (ascending when a min_id is given)
        for item in self._store.fetch_posts(spec, bounds):
            status = self._transform(item.id, {})
            if status:
                k += 1
                statuses[(item.created_at, k)] = status

        # 2) Comments cannot be pinned
        if not spec.pinned:
            if self._bound_discussions:
                comments = self._store.fetch_discussions(self._protocol, bounds, limit=self._page_size(spec))
            else:
                comments = self._store.fetch_discussions(self._protocol, IdBounds())

            for comment in comments:
                object_id = self._remapper(comment.id)
                status = self._transform(object_id, {'in_reply_to_id': comment.post_id})
                if status:
                    k += 1
                    statuses[(comment.created_at, k)] = status

        # 3) Keep the page that sits right next to the cursor
        keys = sorted(statuses, reverse=not bounds.ascending)
        page_size = self._page_size(spec)
        if self._bound_discussions and page_size is not None:
            keys = keys[:page_size]

        # 4) Newest first; the sequence breaks ties between equal timestamps
        ordered = tuple(statuses[key] for key in sorted(keys, reverse=True))

        next_url, prev_url = pagination_links(request_url, ordered)
        return TimelinePage(statuses=ordered, next_url=next_url, prev_url=prev_url)

    @staticmethod
    def _page_size(spec: FilterSpec) -> Optional[int]:
        # a single requested post is not paged
        return None if spec.post_id is not None else spec.limit
