from urllib.parse import parse_qs, urlsplit

from mastodon_api.database import Comment, MastodonApp, Post

from tests.conftest import at


def links(response) -> dict:
    parsed = {}
    for part in response.headers.get('Link', '').split(','):
        if not part.strip():
            continue
        url, rel = part.split(';')
        parsed[rel.strip().split('=')[1].strip('"')] = parse_qs(urlsplit(url.strip()[1:-1]).query)
    return parsed


def test_home_timeline_two_posts(client) -> None:
    Post.create(id=10, post_format='status', created_at=at(1))
    Post.create(id=11, post_format='status', created_at=at(2))

    response = client.get('/api/v1/timelines/home?limit=2')

    assert response.status_code == 200
    assert [status['id'] for status in response.get_json()] == ['11', '10']
    page_links = links(response)
    assert page_links['next'] == {'limit': ['2'], 'max_id': ['10']}
    assert page_links['prev'] == {'limit': ['2'], 'min_id': ['11']}


def test_timeline_merges_federated_comments(client) -> None:
    post = Post.create(post_format='status', created_at=at(1))
    Comment.create(post=post, author_name='bob', content='hello', protocol='activitypub', created_at=at(2))
    Comment.create(post=post, content='local only', created_at=at(3))

    body = client.get('/api/v1/timelines/public').get_json()

    assert len(body) == 2
    assert body[0]['content'] == 'hello'
    assert body[0]['in_reply_to_id'] == str(post.id)
    assert body[1]['id'] == str(post.id)


def test_pinned_without_sticky_posts_is_empty(client) -> None:
    post = Post.create(post_format='status', created_at=at(1))
    Comment.create(post=post, protocol='activitypub', created_at=at(2))

    response = client.get('/api/v1/timelines/home?pinned=true')

    assert response.get_json() == []
    assert 'Link' not in response.headers


def test_pinned_returns_sticky_posts_only(client) -> None:
    Post.create(id=1, post_format='status', sticky=True, created_at=at(1))
    Post.create(id=2, post_format='status', created_at=at(2))

    body = client.get('/api/v1/timelines/home?pinned=true').get_json()

    assert [status['id'] for status in body] == ['1']
    assert body[0]['pinned'] is True


def test_client_app_changes_formats(client) -> None:
    MastodonApp.create(client_id='reader', post_formats='standard')
    Post.create(id=1, post_format='status', created_at=at(1))
    Post.create(id=2, post_format='standard', created_at=at(2))

    default = client.get('/api/v1/timelines/home').get_json()
    reader = client.get('/api/v1/timelines/home?client_id=reader').get_json()

    assert [status['id'] for status in default] == ['1']
    assert [status['id'] for status in reader] == ['2']


def test_account_statuses(client) -> None:
    Post.create(id=1, post_format='status', author_id=3, created_at=at(1))
    Post.create(id=2, post_format='status', author_id=4, created_at=at(2))

    body = client.get('/api/v1/accounts/3/statuses?pinned=false').get_json()

    assert [status['id'] for status in body] == ['1']


def test_malformed_cursor(client) -> None:
    response = client.get('/api/v1/timelines/home?max_id=abc')

    assert response.status_code == 400


def test_single_status(client) -> None:
    Post.create(id=5, post_format='status', content='hi', created_at=at(1))

    assert client.get('/api/v1/statuses/5').get_json()['content'] == 'hi'
    assert client.get('/api/v1/statuses/6').status_code == 404


def test_instance_languages(client) -> None:
    assert client.get('/api/v1/instance').get_json()['languages'] == ['en_EN']


def test_create_app_runs_augmenters(tmp_path) -> None:
    from dataclasses import replace

    from mastodon_api.app import create_app

    def only_first(spec, params):
        return replace(spec, include_ids=(1,))

    app = create_app(database_path=str(tmp_path / 'hooks.db'), augmenters=[only_first])
    Post.create(id=1, post_format='status', created_at=at(1))
    Post.create(id=2, post_format='status', created_at=at(2))

    with app.test_client() as test_client:
        body = test_client.get('/api/v1/timelines/home').get_json()

    assert [status['id'] for status in body] == ['1']


def link_urls(response) -> dict:
    urls = {}
    for part in response.headers.get('Link', '').split(','):
        if not part.strip():
            continue
        url, rel = part.split(';')
        urls[rel.strip().split('=')[1].strip('"')] = url.strip()[1:-1]
    return urls


def page_ids(response) -> list:
    return [status['id'] for status in response.get_json()]


def walk_older(client, url: str) -> list:
    """Follow `next` links until an empty page, returning each page's ids."""
    pages = []
    response = client.get(url)
    while page_ids(response):
        pages.append(page_ids(response))
        response = client.get(link_urls(response)['next'])
    return pages


def test_next_and_prev_links_round_trip(client) -> None:
    for i in range(1, 6):
        Post.create(id=i, post_format='status', created_at=at(i))

    pages = walk_older(client, '/api/v1/timelines/home?limit=2')

    assert pages == [['5', '4'], ['3', '2'], ['1']]

    second = client.get('/api/v1/timelines/home?limit=2&max_id=4')
    back = client.get(link_urls(second)['prev'])

    assert page_ids(back) == ['5', '4']


def test_paging_with_older_comment_does_not_repeat_posts(client) -> None:
    first_post = Post.create(id=1, post_format='status', created_at=at(3))
    Post.create(id=2, post_format='status', created_at=at(4))
    Comment.create(post=first_post, protocol='activitypub', created_at=at(1))

    pages = walk_older(client, '/api/v1/timelines/home?limit=2')
    seen = [status_id for page in pages for status_id in page]

    assert pages[0] == ['2', '1']
    assert len(seen) == len(set(seen)) == 3

    last = client.get(f'/api/v1/timelines/home?limit=2&max_id={pages[0][-1]}')
    back = client.get(link_urls(last)['prev'])

    assert page_ids(back) == ['2', '1']


def test_paging_with_newer_comments_does_not_repeat_comments(client) -> None:
    post = Post.create(id=1, post_format='status', created_at=at(1))
    Comment.create(post=post, content='first', protocol='activitypub', created_at=at(4))
    Comment.create(post=post, content='second', protocol='activitypub', created_at=at(5))

    response = client.get('/api/v1/timelines/home')
    newer = client.get(link_urls(response)['prev'])
    pages = walk_older(client, '/api/v1/timelines/home?limit=2')
    seen = [status_id for page in pages for status_id in page]

    assert [status['content'] for status in response.get_json()][:2] == ['second', 'first']
    assert page_ids(newer) == []
    assert len(pages) == 2
    assert pages[1] == ['1']
    assert len(seen) == len(set(seen)) == 3


def test_zero_min_id_is_ignored(client) -> None:
    for i in range(1, 4):
        Post.create(id=i, post_format='status', created_at=at(i))

    response = client.get('/api/v1/timelines/home?limit=2&min_id=0')

    assert page_ids(response) == ['3', '2']


def test_draft_status_is_not_found(client) -> None:
    Post.create(id=7, post_format='status', status='draft', content='secret', created_at=at(1))

    response = client.get('/api/v1/statuses/7')

    assert response.status_code == 404
