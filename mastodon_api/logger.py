import logging

from mastodon_api import config

logger = logging.getLogger('mastodon_api')
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
