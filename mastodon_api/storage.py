"""peewee implementation of the content store, pinned lookup and id remapping."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import peewee

from mastodon_api.database import COMMENT_ID_POST_TYPE, Comment, CommentIdMap, Post, db
from mastodon_api.logger import logger
from mastodon_api.models import ContentItem, DiscussionItem, FilterSpec, IdBounds


def _to_content_item(post: Post) -> ContentItem:
    return ContentItem(
        id=post.id,
        created_at=post.created_at,
        author_id=post.author_id,
        title=post.title,
        content=post.content,
        post_format=post.post_format,
        status=post.status,
        sticky=post.sticky,
    )


def _to_discussion_item(comment: Comment) -> DiscussionItem:
    return DiscussionItem(
        id=comment.id,
        created_at=comment.created_at,
        post_id=comment.post_id,
        author_name=comment.author_name,
        content=comment.content,
        protocol=comment.protocol,
    )


class PeeweeContentStore:
    """Satisfies the ContentStore port on top of the peewee models."""

    def _locate(self, object_id: int) -> tuple[Optional[int], Optional[datetime]]:
        """Return the (post id bound, time bound) a status id stands for as a cursor."""
        post = Post.get_or_none(Post.id == object_id)
        if post is None:
            return object_id, None
        if post.post_type != COMMENT_ID_POST_TYPE:
            return object_id, post.created_at

        comment_id = resolve_comment_id(object_id)
        comment = Comment.get_or_none(Comment.id == comment_id) if comment_id is not None else None
        if comment is None:
            return object_id, None

        # placeholder ids say nothing about order, only the comment's time does
        return None, comment.created_at

    def resolve_bounds(self, min_id: Optional[int], max_id: Optional[int]) -> IdBounds:
        bounds = IdBounds()
        if min_id is not None:
            lower_id, after = self._locate(min_id)
            bounds = replace(bounds, min_id=lower_id, after=after)
        if max_id is not None:
            upper_id, before = self._locate(max_id)
            bounds = replace(bounds, max_id=upper_id, before=before)
        return bounds

    def posts_query(self, spec: FilterSpec, bounds: IdBounds) -> peewee.ModelSelect:
        query = Post.select().where(
            Post.post_type.in_(spec.post_types),
            Post.status.in_(spec.post_statuses),
        )

        if spec.include_ids is not None:
            query = query.where(Post.id.in_(spec.include_ids))
        if spec.post_formats:
            query = query.where(Post.post_format.in_(spec.post_formats))
        if spec.author_id is not None:
            query = query.where(Post.author_id == spec.author_id)

        if bounds.min_id is not None:
            query = query.where(Post.id > bounds.min_id)
        elif bounds.after is not None:
            query = query.where(Post.created_at > bounds.after)
        if bounds.max_id is not None:
            query = query.where(Post.id < bounds.max_id)
        elif bounds.before is not None:
            query = query.where(Post.created_at < bounds.before)

        if bounds.ascending:
            query = query.order_by(Post.created_at.asc(), Post.id.asc())
        else:
            query = query.order_by(Post.created_at.desc(), Post.id.desc())

        # a single requested post ignores the page size
        if spec.post_id is not None:
            return query.where(Post.id == spec.post_id)
        return query.limit(spec.limit)

    def fetch_posts(self, spec: FilterSpec, bounds: IdBounds) -> list[ContentItem]:
        items = [_to_content_item(post) for post in self.posts_query(spec, bounds)]
        logger.debug(f'Fetched {len(items)} posts (min_id={bounds.min_id}, max_id={bounds.max_id})')
        return items

    def fetch_discussions(
        self, protocol: str, bounds: IdBounds, limit: Optional[int] = None
    ) -> list[DiscussionItem]:
        query = Comment.select().where(Comment.protocol == protocol)
        if bounds.after is not None:
            query = query.where(Comment.created_at > bounds.after)
        if bounds.before is not None:
            query = query.where(Comment.created_at < bounds.before)

        if bounds.ascending:
            query = query.order_by(Comment.created_at.asc(), Comment.id.asc())
        else:
            query = query.order_by(Comment.created_at.desc(), Comment.id.desc())
        if limit is not None:
            query = query.limit(limit)

        items = [_to_discussion_item(comment) for comment in query]
        logger.debug(f'Fetched {len(items)} {protocol} comments')
        return items


def sticky_post_ids() -> list[int]:
    query = Post.select(Post.id).where(Post.sticky == True).order_by(Post.id)  # noqa: E712
    return [post.id for post in query]


def remap_comment_id(comment_id: int) -> int:
    """Return the post-space id a comment is exposed under, allocating it on first use."""
    mapping = CommentIdMap.get_or_none(CommentIdMap.comment_id == comment_id)
    if mapping:
        return mapping.post_id

    try:
        with db.atomic():
            placeholder = Post.create(post_type=COMMENT_ID_POST_TYPE, status='publish', content=str(comment_id))
            CommentIdMap.create(post=placeholder, comment_id=comment_id)
    except peewee.IntegrityError:
        # another request mapped it first; its placeholder wins
        return CommentIdMap.get(CommentIdMap.comment_id == comment_id).post_id

    logger.debug(f'Remapped comment {comment_id} to {placeholder.id}')
    return placeholder.id


def resolve_comment_id(object_id: int) -> Optional[int]:
    mapping = CommentIdMap.get_or_none(CommentIdMap.post == object_id)
    return mapping.comment_id if mapping else None
