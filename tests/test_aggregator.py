"""Tests for folding per-platform results into a Journey snapshot."""

from app.scrapers.common import (
    CodeforcesResult, CSESResult, SolvedProblemRecord, VJudgeResult,
)
from app.services.aggregator import aggregate
from app.services.classifier import categorize

SYNC_TIME = '2024-01-01T06:00:00Z'


def _cses():
    records = [SolvedProblemRecord('1068', 'Weird Algorithm'), SolvedProblemRecord('1633', 'Dice')]
    return CSESResult(
        username='alice', total_solved=2, categories=categorize(records),
        last_updated=SYNC_TIME,
    )


def _codeforces():
    return CodeforcesResult(
        username='alice', rating=1500, max_rating=1620, problems_solved=2, contests=1,
        daily_solves={'Mon Jan 01 2024': [SolvedProblemRecord('1700A', 'Problem A', 800)]},
        last_updated=SYNC_TIME,
    )


def _vjudge():
    return VJudgeResult(
        username='alice', total_solved=42, total_submitted=100,
        daily_activity={'Mon Jan 01 2024': 3},
        recent_solves={'Mon Jan 01 2024': [{'problem': 'X', 'timestamp': '2024-01-01 10:00:00'}]},
        last_updated=SYNC_TIME,
    )


class TestAggregate:
    def test_full_snapshot(self):
        snapshot = aggregate(
            {'cses': _cses(), 'codeforces': _codeforces(), 'vjudge': _vjudge()}, SYNC_TIME,
        )
        assert snapshot['lastAutoSync'] == SYNC_TIME
        assert snapshot['cses']['intro'] == {'solved': 1, 'total': 19}
        assert snapshot['cses']['dp'] == {'solved': 1, 'total': 19}
        assert snapshot['codeforces'] == {
            'rating': 1500, 'maxRating': 1620, 'problemsSolved': 2, 'contests': 1,
        }
        platforms = snapshot['platforms']
        assert platforms['cses']['totalSolved'] == 2
        assert platforms['codeforces']['dailySolves']['Mon Jan 01 2024'][0]['id'] == '1700A'
        assert platforms['vjudge']['dailyActivity'] == {'Mon Jan 01 2024': 3}
        assert platforms['vjudge']['lastSync'] == SYNC_TIME
        assert all(p['success'] for p in platforms.values())

    def test_idempotent(self):
        results = {'cses': _cses(), 'codeforces': _codeforces()}
        assert aggregate(results, SYNC_TIME) == aggregate(results, SYNC_TIME)

    def test_order_independent(self):
        forward = {'cses': _cses(), 'codeforces': _codeforces(), 'vjudge': _vjudge()}
        backward = dict(reversed(list(forward.items())))
        assert aggregate(forward, SYNC_TIME) == aggregate(backward, SYNC_TIME)

    def test_failed_platform_contributes_status_only(self):
        failed = CodeforcesResult(username='bob', success=False, error='User not found on Codeforces')
        snapshot = aggregate({'codeforces': failed, 'cses': _cses()})
        assert 'codeforces' not in snapshot
        assert snapshot['platforms']['codeforces'] == {
            'username': 'bob', 'success': False, 'error': 'User not found on Codeforces',
        }
        assert 'cses' in snapshot

    def test_missing_platforms_skipped(self):
        snapshot = aggregate({'cses': None, 'codeforces': None, 'vjudge': _vjudge()})
        assert set(snapshot['platforms']) == {'vjudge'}
        assert 'cses' not in snapshot
        assert 'lastAutoSync' not in snapshot

    def test_does_not_mutate_results(self):
        result = _codeforces()
        before = result.to_dict()
        snapshot = aggregate({'codeforces': result}, SYNC_TIME)
        snapshot['platforms']['codeforces']['dailySolves'].clear()
        assert result.to_dict() == before
