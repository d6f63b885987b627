from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

import peewee

from mastodon_api.models import FilterSpec

# initialised by init_db() so tests and the app can point it at different files
db = peewee.SqliteDatabase(None)

# post type of the placeholder rows that give comments an id in the post id space
COMMENT_ID_POST_TYPE = 'comment-id'


def utc_now() -> datetime:
    # stored naive (UTC): DateTimeField only parses offset-free values back
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseModel(peewee.Model):
    class Meta:
        database = db


class Post(BaseModel):
    author_id = peewee.IntegerField(default=0, index=True)
    title = peewee.CharField(default='')
    content = peewee.TextField(default='')
    post_type = peewee.CharField(default='post', index=True)
    post_format = peewee.CharField(null=True, index=True)
    status = peewee.CharField(default='publish', index=True)
    sticky = peewee.BooleanField(default=False)
    created_at = peewee.DateTimeField(default=utc_now, index=True)


class Comment(BaseModel):
    post = peewee.ForeignKeyField(Post, backref='comments', on_delete='CASCADE')
    author_name = peewee.CharField(default='')
    content = peewee.TextField(default='')
    protocol = peewee.CharField(null=True, index=True)
    created_at = peewee.DateTimeField(default=utc_now, index=True)


class CommentIdMap(BaseModel):
    """Links a comment to the placeholder post whose id it is exposed under."""

    post = peewee.ForeignKeyField(Post, primary_key=True, on_delete='CASCADE')
    comment_id = peewee.IntegerField(unique=True)


def _split(value: Optional[str]) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(',') if part.strip())


class MastodonApp(BaseModel):
    """A registered client app and the content it wants to see."""

    client_id = peewee.CharField(unique=True)
    name = peewee.CharField(default='')
    # comma separated, empty means "no restriction"
    post_formats = peewee.CharField(default='')
    post_types = peewee.CharField(default='')
    created_at = peewee.DateTimeField(default=utc_now)

    def get_post_formats(self) -> tuple[str, ...]:
        return _split(self.post_formats)

    def get_post_types(self) -> tuple[str, ...]:
        return _split(self.post_types)

    def modify_filter(self, spec: FilterSpec) -> FilterSpec:
        post_formats = self.get_post_formats()
        spec = replace(spec, post_formats=post_formats or None)

        post_types = self.get_post_types()
        if post_types:
            spec = replace(spec, post_types=post_types)

        return spec


MODELS = [Post, Comment, CommentIdMap, MastodonApp]


def init_db(path: str) -> peewee.SqliteDatabase:
    if not db.is_closed():
        db.close()
    db.init(path, pragmas={'foreign_keys': 1})
    with db.connection_context():
        db.create_tables(MODELS)
    return db


def get_app(client_id: Optional[str]) -> Optional[MastodonApp]:
    if not client_id:
        return None
    return MastodonApp.get_or_none(MastodonApp.client_id == client_id)
