from dataclasses import replace
from typing import Iterable, Optional

from flask import Flask, Response, current_app, jsonify, request

from mastodon_api import config
from mastodon_api.database import db, get_app, init_db
from mastodon_api.handlers.query import build_filter_spec, parse_int
from mastodon_api.handlers.timeline import TimelineAssembler
from mastodon_api.language import get_mastodon_language
from mastodon_api.logger import logger
from mastodon_api.models import FilterSpec
from mastodon_api.ports import FilterAugmenter, StatusTransformer, TransformError
from mastodon_api.status import DefaultStatusTransformer
from mastodon_api.storage import PeeweeContentStore, remap_comment_id, sticky_post_ids


class StatusesHandler:
    """Wires the query builder and the timeline assembler to their collaborators."""

    def __init__(
        self,
        transformer: Optional[StatusTransformer] = None,
        augmenters: Iterable[FilterAugmenter] = (),
    ) -> None:
        self.store = PeeweeContentStore()
        self.transformer = transformer or DefaultStatusTransformer()
        self.augmenters = list(augmenters)
        self.assembler = TimelineAssembler(self.store, self.transformer, remap_comment_id)

    def get_posts_query_args(self, extra: Iterable[FilterAugmenter] = ()) -> FilterSpec:
        app_context = get_app(request.args.get('client_id'))
        return build_filter_spec(
            request.args,
            sticky_post_ids,
            app=app_context,
            augmenters=[*extra, *self.augmenters],
        )

    def get_posts(self, spec: FilterSpec) -> Response:
        min_id = _get_cursor('min_id')
        max_id = _get_cursor('max_id')

        page = self.assembler.assemble(spec, request.url, min_id=min_id, max_id=max_id)

        response = jsonify(page.to_list())
        if page.links:
            response.headers['Link'] = page.links
        return response


def _get_cursor(name: str) -> Optional[int]:
    value = request.args.get(name)
    if not value:
        return None

    cursor = parse_int(value)
    if cursor is None:
        raise ValueError(f'Malformed {name}')
    # 0 is not a usable bound
    if not cursor:
        return None
    return cursor


def _handler() -> StatusesHandler:
    return current_app.extensions['statuses']


def create_app(
    database_path: Optional[str] = None,
    transformer: Optional[StatusTransformer] = None,
    augmenters: Iterable[FilterAugmenter] = (),
) -> Flask:
    app = Flask(__name__)
    init_db(database_path or config.DATABASE_PATH)
    app.extensions['statuses'] = StatusesHandler(transformer=transformer, augmenters=augmenters)

    @app.before_request
    def _db_connect():
        db.connect(reuse_if_open=True)

    @app.teardown_request
    def _db_close(_exc):
        if not db.is_closed():
            db.close()

    @app.route('/')
    def index():
        return 'Mastodon-compatible statuses API for blog posts and their federated comments.'

    @app.route('/api/v1/instance', methods=['GET'])
    def instance():
        return jsonify({
            'uri': config.HOSTNAME,
            'title': config.HOSTNAME,
            'languages': [get_mastodon_language(config.SITE_LANGUAGE)],
        })

    @app.route('/api/v1/timelines/home', methods=['GET'])
    @app.route('/api/v1/timelines/public', methods=['GET'])
    def timeline():
        handler = _handler()
        try:
            return handler.get_posts(handler.get_posts_query_args())
        except ValueError:
            return 'Malformed cursor', 400

    @app.route('/api/v1/accounts/<int:account_id>/statuses', methods=['GET'])
    def account_statuses(account_id: int):
        def by_author(spec, _params):
            return replace(spec, author_id=account_id)

        handler = _handler()
        try:
            return handler.get_posts(handler.get_posts_query_args(extra=[by_author]))
        except ValueError:
            return 'Malformed cursor', 400

    @app.route('/api/v1/statuses/<int:post_id>', methods=['GET'])
    def status(post_id: int):
        try:
            found = _handler().transformer(post_id, {})
        except TransformError as e:
            logger.debug(f'Status {post_id} unavailable: {e}')
            found = None

        if not found:
            return 'Record not found', 404
        return jsonify(found.to_dict())

    return app
