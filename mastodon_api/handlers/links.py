from typing import Iterable, Mapping, Optional, Sequence
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from mastodon_api.models import Status


def replace_query_args(url: str, set_args: Mapping[str, object], remove: Iterable[str] = ()) -> str:
    """Return `url` with `set_args` set and `remove` dropped from its query string."""
    parts = urlsplit(url)
    dropped = set(remove) | set(set_args)
    query = [(key, value) for key, value in parse_qsl(parts.query, keep_blank_values=True) if key not in dropped]
    query.extend((key, str(value)) for key, value in set_args.items())
    return urlunsplit(parts._replace(query=urlencode(query)))


def pagination_links(url: str, statuses: Sequence[Status]) -> tuple[Optional[str], Optional[str]]:
    """Build the (next, prev) links for a page ordered newest first."""
    if not statuses:
        return None, None

    next_url = replace_query_args(url, {'max_id': statuses[-1].id}, remove=['min_id'])
    prev_url = replace_query_args(url, {'min_id': statuses[0].id}, remove=['max_id'])
    return next_url, prev_url
