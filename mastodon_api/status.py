from typing import Any, Mapping, Optional

from mastodon_api import config
from mastodon_api.database import COMMENT_ID_POST_TYPE, Comment, Post
from mastodon_api.language import get_mastodon_language
from mastodon_api.models import FilterSpec, Status
from mastodon_api.ports import TransformError
from mastodon_api.storage import resolve_comment_id


class DefaultStatusTransformer:
    """Builds statuses straight from the post and comment tables."""

    def __init__(
        self,
        base_url: str = config.BASE_URL,
        language: str = config.SITE_LANGUAGE,
        post_statuses: tuple[str, ...] = FilterSpec.post_statuses,
    ) -> None:
        self._base_url = base_url
        self._language = get_mastodon_language(language)
        self._post_statuses = post_statuses

    def _account(self, account_id: Any, username: str) -> dict[str, Any]:
        return {
            'id': str(account_id),
            'username': username,
            'acct': username,
            'display_name': username,
            'url': f'{self._base_url}/author/{username}',
        }

    def _post_status(self, post: Post) -> Status:
        content = post.content
        if post.title and post.post_format != 'status':
            content = f'<p><strong>{post.title}</strong></p>{content}'

        return Status(
            id=str(post.id),
            created_at=post.created_at,
            content=content,
            url=f'{self._base_url}/?p={post.id}',
            language=self._language,
            visibility='private' if post.status == 'private' else 'public',
            pinned=post.sticky,
            account=self._account(post.author_id, f'user{post.author_id}'),
        )

    def _comment_status(self, object_id: int, comment_id: int, in_reply_to_id: Any) -> Status:
        comment = Comment.get_or_none(Comment.id == comment_id)
        if comment is None:
            raise TransformError(f'comment {comment_id} behind {object_id} no longer exists')

        return Status(
            id=str(object_id),
            created_at=comment.created_at,
            content=comment.content,
            url=f'{self._base_url}/?p={comment.post_id}#comment-{comment.id}',
            in_reply_to_id=str(in_reply_to_id or comment.post_id),
            language=self._language,
            account=self._account(comment.author_name, comment.author_name),
        )

    def __call__(self, object_id: int, data: Mapping[str, Any]) -> Optional[Status]:
        post = Post.get_or_none(Post.id == object_id)
        if post is None or post.status not in self._post_statuses:
            return None

        if post.post_type == COMMENT_ID_POST_TYPE:
            comment_id = resolve_comment_id(object_id)
            if comment_id is None:
                raise TransformError(f'placeholder {object_id} is not mapped to a comment')
            return self._comment_status(object_id, comment_id, data.get('in_reply_to_id'))

        return self._post_status(post)
