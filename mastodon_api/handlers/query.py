from dataclasses import replace
from typing import Any, Iterable, Mapping, Optional

from mastodon_api import config
from mastodon_api.models import NOTHING_ID, FilterSpec
from mastodon_api.ports import AppContext, FilterAugmenter, PinnedLookup

TRUTHY = {'1', 'true', 't', 'yes', 'y', 'on'}


def parse_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY


def build_filter_spec(
    params: Mapping[str, Any],
    pinned_lookup: PinnedLookup,
    app: Optional[AppContext] = None,
    augmenters: Iterable[FilterAugmenter] = (),
) -> FilterSpec:
    """Translate listing request parameters into a FilterSpec.

    Malformed values fall back to defaults rather than failing the request.
    """
    limit = parse_int(params.get('limit'))
    if limit is None or limit < 1:
        limit = config.DEFAULT_LIMIT

    spec = FilterSpec(limit=limit)

    if parse_bool(params.get('pinned')):
        # no pinned posts must find nothing, not everything
        pinned_ids = tuple(pinned_lookup()) or (NOTHING_ID,)
        spec = replace(spec, pinned=True, include_ids=pinned_ids)

    if app is not None:
        spec = app.modify_filter(spec)
    else:
        spec = replace(spec, post_formats=(config.DEFAULT_POST_FORMAT,))

    post_id = parse_int(params.get('post_id'))
    if post_id:
        spec = replace(spec, post_id=post_id)

    for augmenter in augmenters:
        spec = augmenter(spec, params)

    return spec
