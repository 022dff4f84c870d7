"""Tests for the sync HTTP endpoints."""

from unittest.mock import patch

import pytest

from tests.conftest import RouteTransport


@pytest.fixture()
def routed_client(app, default_routes):
    """Client whose sync requests are answered by the default routes."""
    app.config['SYNC_TRANSPORT'] = RouteTransport(default_routes)
    return app.test_client()


class TestHealth:
    def test_health(self, client):
        resp = client.get('/api/health')
        assert resp.status_code == 200
        data = resp.get_json()
        assert data['success'] is True
        assert data['version']
        assert data['timestamp'].endswith('Z')


class TestSyncPlatform:
    def test_unknown_platform(self, client):
        resp = client.post('/api/sync/atcoder', json={'username': 'alice'})
        assert resp.status_code == 404
        assert resp.get_json()['success'] is False

    @pytest.mark.parametrize('body', [{}, {'username': ''}, {'username': '   '}, {'username': 7}])
    def test_username_required(self, client, body):
        resp = client.post('/api/sync/cses', json=body)
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'Username is required'

    def test_sync_codeforces(self, routed_client, store):
        resp = routed_client.post('/api/sync/codeforces', json={'username': 'alice'})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data['success'] is True
        assert data['rating'] == 1500
        assert data['contests'] == 1
        assert [p['id'] for p in data['dailySolves']['Tue Jan 02 2024']] == ['1700B']

        stored = store.load()
        assert stored['codeforces']['maxRating'] == 1620
        assert stored['platforms']['codeforces']['username'] == 'alice'

    def test_sync_cses_updates_categories(self, routed_client, store):
        resp = routed_client.post('/api/sync/cses', json={'username': 'alice'})
        data = resp.get_json()
        assert data['totalSolved'] == 3
        assert data['categories']['dp']['solved'] == 1
        assert store.load()['cses']['dp']['solved'] == 1

    def test_failed_sync_returns_failure_and_keeps_store(self, routed_client, store):
        resp = routed_client.post('/api/sync/vjudge', json={'username': 'nobody'})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data['success'] is False
        assert data['totalSolved'] == 0
        assert 'vjudge' not in store.load()['platforms']


class TestSyncAll:
    def test_usernames_object_required(self, client):
        resp = client.post('/api/sync/all', json={'usernames': 'alice'})
        assert resp.status_code == 400

    def test_at_least_one_username(self, client):
        resp = client.post('/api/sync/all', json={'usernames': {'cses': '', 'vjudge': None}})
        assert resp.status_code == 400
        assert resp.get_json()['error'] == 'At least one platform username is required'

    def test_sync_all(self, routed_client, store):
        resp = routed_client.post('/api/sync/all', json={
            'usernames': {'codeforces': 'alice', 'vjudge': 'alice'},
        })
        assert resp.status_code == 200
        data = resp.get_json()
        assert data['message'] == 'Multi-platform sync completed'
        results = data['results']
        assert results['cses'] is None
        assert results['codeforces']['problemsSolved'] == 2
        assert results['vjudge']['totalSolved'] == 42
        assert results['syncTime']

        stored = store.load()
        assert stored['lastAutoSync'] == results['syncTime']
        assert stored['platforms']['vjudge']['totalSubmitted'] == 100

    def test_partial_failure(self, app, store, default_routes):
        routes = dict(default_routes)
        routes['cses.fi/user/alice'] = (500, 'oops')
        app.config['SYNC_TRANSPORT'] = RouteTransport(routes)
        resp = app.test_client().post('/api/sync/all', json={
            'usernames': {'cses': 'alice', 'codeforces': 'alice'},
        })
        results = resp.get_json()['results']
        assert results['cses']['success'] is False
        assert results['codeforces']['success'] is True
        stored = store.load()
        assert stored['cses']['intro']['solved'] == 0
        assert stored['platforms']['cses']['success'] is False


class TestTopics:
    def test_live_topics(self, routed_client):
        data = routed_client.get('/api/cses/topics').get_json()
        assert data['success'] is True
        assert data['topics'][1]['title'] == 'Sorting and Searching'

    def test_fallback_topics(self, app):
        app.config['SYNC_TRANSPORT'] = RouteTransport({})
        data = app.test_client().get('/api/cses/topics').get_json()
        assert data['fromCache'] is True
        assert len(data['topics']) == 11


class TestStatusAndSettings:
    def test_status_before_any_sync(self, client):
        data = client.get('/api/sync/status').get_json()
        assert data['success'] is True
        assert data['status']['lastAutoSync'] is None
        assert data['status']['platforms']['cses']['configured'] is False

    def test_status_after_sync(self, routed_client):
        routed_client.post('/api/sync/codeforces', json={'username': 'alice'})
        status = routed_client.get('/api/sync/status').get_json()['status']
        assert status['platforms']['codeforces']['configured'] is True
        assert status['platforms']['codeforces']['currentRating'] == 1500

    def test_toggle_auto_sync(self, client, store):
        resp = client.post('/api/auto-sync/toggle', json={'enabled': True})
        assert resp.get_json()['autoSyncEnabled'] is True
        assert store.load()['autoSyncEnabled'] is True

        resp = client.post('/api/auto-sync/toggle', json={})
        assert resp.get_json()['message'] == 'Auto-sync disabled'

    def test_journey(self, client):
        data = client.get('/api/journey').get_json()
        assert data['success'] is True
        assert data['data']['cses']['intro']['total'] == 19

    def test_store_failure_returns_500(self, routed_client):
        with patch(
            'app.services.journey_store.JourneyStore.merge_snapshot',
            side_effect=OSError('disk full'),
        ):
            resp = routed_client.post('/api/sync/codeforces', json={'username': 'alice'})
        assert resp.status_code == 500
        data = resp.get_json()
        assert data['success'] is False
        assert data['error'] == 'Failed to save data: disk full'
        assert data['result']['rating'] == 1500


class TestCorruptJourneyFile:
    @pytest.fixture()
    def corrupt_dir(self, tmp_path):
        data_dir = tmp_path / 'data'
        data_dir.mkdir()
        (data_dir / 'journey.json').write_text('{not json', encoding='utf-8')
        return data_dir

    @pytest.fixture()
    def corrupt_app(self, corrupt_dir, default_routes):
        from app import create_app
        application = create_app('testing', config_overrides={
            'JOURNEY_DATA_DIR': str(corrupt_dir),
        })
        application.config['SYNC_TRANSPORT'] = RouteTransport(default_routes)
        return application

    def test_app_starts(self, corrupt_app):
        assert corrupt_app.extensions['journey_store'] is not None

    def test_sync_platform_keeps_result(self, corrupt_app):
        resp = corrupt_app.test_client().post('/api/sync/codeforces', json={'username': 'alice'})
        assert resp.status_code == 500
        data = resp.get_json()
        assert data['success'] is False
        assert data['error'].startswith('Failed to save data')
        assert data['result']['success'] is True
        assert data['result']['problemsSolved'] == 2

    def test_sync_all_keeps_results(self, corrupt_app):
        resp = corrupt_app.test_client().post('/api/sync/all', json={
            'usernames': {'codeforces': 'alice'},
        })
        assert resp.status_code == 500
        data = resp.get_json()
        assert data['success'] is False
        assert data['results']['codeforces']['rating'] == 1500

    def test_read_endpoints_return_json_errors(self, corrupt_app):
        client = corrupt_app.test_client()
        for method, url in [('get', '/api/journey'), ('get', '/api/sync/status'),
                            ('post', '/api/auto-sync/toggle')]:
            resp = getattr(client, method)(url, json={} if method == 'post' else None)
            assert resp.status_code == 500
            assert resp.get_json()['success'] is False
