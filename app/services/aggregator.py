"""Combine per-platform sync results into one Journey snapshot.

The snapshot has the shape of the stored Journey record::

    {
        'cses': {'intro': {'solved': 3, 'total': 19}, ...},
        'codeforces': {'rating': 1500, 'maxRating': 1600,
                       'problemsSolved': 120, 'contests': 14},
        'platforms': {'cses': {'username': ..., 'success': True, ...}, ...},
        'lastAutoSync': '2024-01-01T06:00:00Z',
    }

Only successful platforms contribute data fields.  A failed platform gets a
status entry (``success``/``error``) and nothing else, so merging the
snapshot never overwrites previously stored values with zeros.
"""

from __future__ import annotations

import logging
from typing import Mapping

from app.scrapers.common import (
    CodeforcesResult, CSESResult, PlatformResult, VJudgeResult,
)

logger = logging.getLogger(__name__)


def _cses_fields(result: CSESResult, snapshot: dict) -> dict:
    snapshot['cses'] = {
        name: category.to_dict() for name, category in result.categories.items()
    }
    return {'totalSolved': result.total_solved}


def _codeforces_fields(result: CodeforcesResult, snapshot: dict) -> dict:
    data = result.to_dict()
    snapshot['codeforces'] = {
        'rating': data['rating'],
        'maxRating': data['maxRating'],
        'problemsSolved': data['problemsSolved'],
        'contests': data['contests'],
    }
    return {'maxRating': data['maxRating'], 'dailySolves': data['dailySolves']}


def _vjudge_fields(result: VJudgeResult, snapshot: dict) -> dict:
    data = result.to_dict()
    return {
        'totalSolved': data['totalSolved'],
        'totalSubmitted': data['totalSubmitted'],
        'dailyActivity': data['dailyActivity'],
        'recentSolves': data['recentSolves'],
    }


_FIELD_MERGERS = {
    'cses': _cses_fields,
    'codeforces': _codeforces_fields,
    'vjudge': _vjudge_fields,
}


def aggregate(results: Mapping[str, PlatformResult | None], sync_time: str = None) -> dict:
    """Build a fresh snapshot from ``results`` (platform name → result).

    Pure function of its arguments: the same results and ``sync_time`` give
    an equal snapshot, independent of the mapping's order.
    """
    snapshot: dict = {'platforms': {}}

    for name in sorted(results):
        result = results[name]
        if result is None:
            continue
        merger = _FIELD_MERGERS.get(result.platform)
        if merger is None:
            logger.warning(f"No snapshot fields defined for platform {result.platform}")
            continue

        status = {
            'username': result.username,
            'success': result.success,
            'error': result.error,
        }
        if result.success:
            status['lastSync'] = result.last_updated
            status.update(merger(result, snapshot))
        snapshot['platforms'][name] = status

    if sync_time is not None:
        snapshot['lastAutoSync'] = sync_time
    return snapshot
