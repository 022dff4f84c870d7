"""Shared test fixtures for the CP Journey sync test suite."""

import json
from datetime import timezone

import httpx
import pytest

from app import create_app
from app.services.sync_service import SyncContext


CSES_PROBLEMSET_HTML = """
<html><head><title>CSES - CSES Problem Set - Tasks</title></head>
<body><div class="content">
<h1>CSES Problem Set</h1>
<h2>General</h2>
<ul class="task-list"><li class="link"><a href="/problemset/list/">Introduction</a></li></ul>
<h2>Introductory Problems</h2>
<ul class="task-list">
  <li class="task"><a href="/problemset/task/1068">Weird Algorithm</a></li>
  <li class="task"><a href="/problemset/task/1083">Missing Number</a></li>
</ul>
<h2>Sorting and Searching</h2>
<ul class="task-list">
  <li class="task"><a href="/problemset/task/1621">Distinct Numbers</a></li>
</ul>
</div></body></html>
"""

CSES_PROFILE_HTML = """
<html><body><table class="narrow">
<tr><td class="task-name"><a href="/problemset/task/1068/">Weird Algorithm</a></td>
    <td class="task-score icon full"></td></tr>
<tr><td class="task-name"><a href="/problemset/task/1633/">Dice Combinations</a></td>
    <td class="task-score icon full"></td></tr>
<tr><td class="task-name"><a href="/problemset/task/9999/">Brand New Task</a></td>
    <td class="task-score icon full"></td></tr>
<tr><td class="task-name"><a href="/problemset/task/1083/">Missing Number</a></td>
    <td class="task-score icon zero"></td></tr>
</table></body></html>
"""

VJUDGE_PROFILE_HTML = """
<html><body>
<div class="stats"><span id="solved">42</span><span id="submitted">100 </span></div>
<div class="calendar">
  <div class="activity-cell" data-date="Mon Jan 01 2024">3</div>
  <div class="activity-cell" data-date="Tue Jan 02 2024">0</div>
  <div class="activity-cell">5</div>
</div>
</body></html>
"""

VJUDGE_SUBMISSIONS_HTML = """
<html><body><table>
<tr class="submission-row"><td class="problem-title">CodeForces-1700A</td>
    <td class="status">Accepted</td><td class="timestamp">2024-01-01 10:00:00</td></tr>
<tr class="submission-row"><td class="problem-title">CodeForces-1700B</td>
    <td class="status">Accepted</td><td class="timestamp">2024-01-01 12:30:00</td></tr>
<tr class="submission-row"><td class="problem-title">CodeForces-1700C</td>
    <td class="status">Wrong Answer</td><td class="timestamp">2024-01-01 13:00:00</td></tr>
</table></body></html>
"""

# 2024-01-01 10:00:00 UTC
DAY1 = 1704103200
DAY = 86400


def cf_submission(contest_id, index, created, verdict='OK',
                  participant_type='PRACTICE', name=None, rating=800):
    return {
        'contestId': contest_id,
        'creationTimeSeconds': created,
        'verdict': verdict,
        'problem': {
            'contestId': contest_id,
            'index': index,
            'name': name or f'Problem {index}',
            'rating': rating,
        },
        'author': {'participantType': participant_type},
    }


def cf_ok(result):
    return json.dumps({'status': 'OK', 'result': result})


class RouteTransport(httpx.MockTransport):
    """MockTransport answering by ``host + path``; unknown routes get 404.

    A route value is ``(status, body)``, or an exception instance to raise.
    Every request is recorded in ``self.requests``.
    """

    def __init__(self, routes):
        self.routes = dict(routes)
        self.requests = []
        super().__init__(self._handle)

    def _handle(self, request):
        self.requests.append(request)
        key = f"{request.url.host}{request.url.path}"
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, text='Not Found')
        if isinstance(route, Exception):
            raise route
        status, body = route
        return httpx.Response(status, text=body)


@pytest.fixture()
def make_context():
    """Build a SyncContext (UTC date keys) around a RouteTransport."""
    def _make(routes):
        transport = RouteTransport(routes)
        context = SyncContext(tz=timezone.utc, transport=transport)
        return context, transport
    return _make


@pytest.fixture()
def default_routes():
    return {
        'cses.fi/user/alice': (200, CSES_PROFILE_HTML),
        'cses.fi/problemset/': (200, CSES_PROBLEMSET_HTML),
        'codeforces.com/api/user.info': (200, cf_ok([{'handle': 'alice', 'rating': 1500, 'maxRating': 1620}])),
        'codeforces.com/api/user.status': (200, cf_ok([
            cf_submission(1700, 'A', DAY1 + 2 * DAY),
            cf_submission(1700, 'B', DAY1 + DAY, participant_type='CONTESTANT'),
            cf_submission(1700, 'A', DAY1 + DAY),
            cf_submission(1700, 'A', DAY1),
        ])),
        'vjudge.net/user/alice': (200, VJUDGE_PROFILE_HTML),
        'vjudge.net/user/alice/submissions': (200, VJUDGE_SUBMISSIONS_HTML),
    }


@pytest.fixture()
def app(tmp_path):
    """Create a Flask application configured for testing."""
    application = create_app('testing', config_overrides={
        'JOURNEY_DATA_DIR': str(tmp_path / 'data'),
    })
    yield application


@pytest.fixture()
def client(app):
    """Provide a Flask test client."""
    return app.test_client()


@pytest.fixture()
def store(app):
    return app.extensions['journey_store']
