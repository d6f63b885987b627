import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _get_bool_env_var(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default

    normalized_value = value.strip().lower()
    return normalized_value in {'1', 'true', 't', 'yes', 'y', 'on'}


def _get_int_env_var(value: Optional[str], default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


HOSTNAME = os.environ.get('HOSTNAME', 'localhost')
BASE_URL = os.environ.get('BASE_URL', f'https://{HOSTNAME}').rstrip('/')

DATABASE_PATH = os.environ.get('DATABASE_PATH', 'statuses_database.db')

# page size used when `limit` is missing or below 1
DEFAULT_LIMIT = _get_int_env_var(os.environ.get('DEFAULT_LIMIT'), 20)

# comments carrying this protocol marker are merged into timelines
DISCUSSION_PROTOCOL = os.environ.get('DISCUSSION_PROTOCOL', 'activitypub')

# post format shown to clients that are not registered apps
DEFAULT_POST_FORMAT = os.environ.get('DEFAULT_POST_FORMAT', 'status')

SITE_LANGUAGE = os.environ.get('SITE_LANGUAGE', 'en')

BOUND_DISCUSSIONS = _get_bool_env_var(os.environ.get('BOUND_DISCUSSIONS'), default=True)

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
