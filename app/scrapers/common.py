from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


class SyncError(Exception):
    """Base class for failures inside the platform sync layer."""


class TransportError(SyncError):
    """Network failure, timeout or non-2xx status."""

    def __init__(self, message: str, url: str = '', cause: BaseException | None = None,
                 status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.cause = cause
        self.status_code = status_code


class ParseFailure(SyncError):
    """Payload arrived but did not have the expected shape."""


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


@dataclass
class SolvedProblemRecord:
    id: str
    name: str
    rating: int | str | None = None

    def to_dict(self) -> dict:
        data = {'id': self.id, 'name': self.name}
        if self.rating is not None:
            data['rating'] = self.rating
        return data


@dataclass
class TopicCatalogEntry:
    title: str
    slug: str
    count: int | None
    url: str
    description: str = ''
    problems: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {
            'title': self.title,
            'slug': self.slug,
            'count': self.count,
            'url': self.url,
            'description': self.description,
        }
        if self.problems:
            data['problems'] = list(self.problems)
        return data


@dataclass
class PlatformResult:
    """Common part of every per-platform sync result.

    Concrete results are discriminated by ``platform``.  A failed result
    keeps ``success=False`` plus ``error`` and the platform's zeroed fields.
    """

    platform: str = ''
    username: str = ''
    success: bool = True
    error: str | None = None
    last_updated: str | None = None

    def _failure_dict(self) -> dict:
        return {'success': False, 'error': self.error}

    def _success_dict(self) -> dict:
        return {}

    def to_dict(self) -> dict:
        if not self.success:
            return self._failure_dict()
        data = {'success': True, 'username': self.username}
        data.update(self._success_dict())
        data['lastUpdated'] = self.last_updated
        return data


@dataclass
class CSESResult(PlatformResult):
    platform: str = 'cses'
    total_solved: int = 0
    categories: dict = field(default_factory=dict)

    def _failure_dict(self) -> dict:
        return {'success': False, 'error': self.error, 'totalSolved': 0}

    def _success_dict(self) -> dict:
        return {
            'totalSolved': self.total_solved,
            'categories': {
                name: category.to_dict(include_problems=True)
                for name, category in self.categories.items()
            },
        }


@dataclass
class CodeforcesResult(PlatformResult):
    platform: str = 'codeforces'
    rating: int | str = 'Unrated'
    max_rating: int = 0
    problems_solved: int = 0
    contests: int = 0
    daily_solves: dict[str, list[SolvedProblemRecord]] = field(default_factory=dict)

    def _failure_dict(self) -> dict:
        return {
            'success': False,
            'error': self.error,
            'rating': 'Error',
            'problemsSolved': 0,
            'contests': 0,
        }

    def _success_dict(self) -> dict:
        return {
            'rating': self.rating,
            'maxRating': self.max_rating,
            'problemsSolved': self.problems_solved,
            'contests': self.contests,
            'dailySolves': {
                day: [record.to_dict() for record in records]
                for day, records in self.daily_solves.items()
            },
        }


@dataclass
class VJudgeResult(PlatformResult):
    platform: str = 'vjudge'
    total_solved: int = 0
    total_submitted: int = 0
    daily_activity: dict[str, int] = field(default_factory=dict)
    recent_solves: dict[str, list[dict]] = field(default_factory=dict)

    def _failure_dict(self) -> dict:
        return {'success': False, 'error': self.error, 'totalSolved': 0}

    def _success_dict(self) -> dict:
        return {
            'totalSolved': self.total_solved,
            'totalSubmitted': self.total_submitted,
            'dailyActivity': dict(self.daily_activity),
            'recentSolves': {
                day: [dict(entry) for entry in entries]
                for day, entries in self.recent_solves.items()
            },
        }
