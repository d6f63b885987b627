from datetime import datetime, timedelta

import pytest

from mastodon_api.app import create_app
from mastodon_api.database import db, init_db

T0 = datetime(2024, 1, 1, 12, 0, 0)


def at(minutes: int) -> datetime:
    return T0 + timedelta(minutes=minutes)


@pytest.fixture
def database(tmp_path):
    init_db(str(tmp_path / 'statuses.db'))
    yield db
    if not db.is_closed():
        db.close()


@pytest.fixture
def client(tmp_path):
    app = create_app(database_path=str(tmp_path / 'statuses.db'))
    app.config['TESTING'] = True
    with app.test_client() as test_client:
        yield test_client
    if not db.is_closed():
        db.close()
