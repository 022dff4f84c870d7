from __future__ import annotations

from .base import BaseScraper, epoch_date_key
from .common import CodeforcesResult, ParseFailure, SolvedProblemRecord
from . import register_scraper

ACCEPTED_VERDICT = 'OK'
CONTESTANT = 'CONTESTANT'
STATUS_PAGE_SIZE = 10000


def _problem_key(problem: dict) -> str | None:
    contest_id = problem.get('contestId')
    index = problem.get('index')
    if contest_id is None or not index:
        return None
    return f"{contest_id}{index}"


def summarize_submissions(submissions: list[dict], tz=None) -> tuple[int, int, dict]:
    """Reduce a ``user.status`` result to (problems solved, contests, daily solves).

    * a problem is keyed by ``(contestId, index)`` and counted once;
    * it is listed in ``daily_solves`` only on the date of its earliest
      accepted submission; same-date order follows the payload;
    * a contest counts once if any of its submissions was made as a
      ``CONTESTANT``, whatever the verdict.
    """
    first_accepted: dict[str, tuple[int, int]] = {}
    for position, sub in enumerate(submissions):
        if sub.get('verdict') != ACCEPTED_VERDICT:
            continue
        key = _problem_key(sub.get('problem') or {})
        if key is None:
            continue
        stamp = (int(sub.get('creationTimeSeconds') or 0), position)
        if key not in first_accepted or stamp < first_accepted[key]:
            first_accepted[key] = stamp

    daily_solves: dict[str, list[SolvedProblemRecord]] = {}
    for position, sub in enumerate(submissions):
        if sub.get('verdict') != ACCEPTED_VERDICT:
            continue
        problem = sub.get('problem') or {}
        key = _problem_key(problem)
        if key is None or first_accepted[key][1] != position:
            continue
        day = epoch_date_key(first_accepted[key][0], tz)
        daily_solves.setdefault(day, []).append(SolvedProblemRecord(
            id=key,
            name=problem.get('name', ''),
            rating=problem.get('rating') or 'Unrated',
        ))

    contests = set()
    for sub in submissions:
        author = sub.get('author') or {}
        if author.get('participantType') == CONTESTANT and sub.get('contestId') is not None:
            contests.add(sub['contestId'])

    return len(first_accepted), len(contests), daily_solves


@register_scraper
class CodeforcesScraper(BaseScraper):
    PLATFORM_NAME = "codeforces"
    PLATFORM_DISPLAY = "Codeforces"
    RESULT_CLASS = CodeforcesResult

    async def _api(self, method: str, timeout: float, error: str, **params):
        payload = await self._get(
            f"{self.base_url}/{method}", timeout=timeout, html=False, **params,
        )
        data = payload.json()
        if not isinstance(data, dict) or data.get('status') != 'OK':
            comment = data.get('comment') if isinstance(data, dict) else None
            self.logger.warning(f"Codeforces API {method} failed: {comment or data}")
            raise ParseFailure(error)
        return data.get('result')

    async def _fetch_progress(self, username: str) -> CodeforcesResult:
        users = await self._api(
            'user.info', self.context.profile_timeout,
            'User not found on Codeforces', handles=username,
        )
        if not users:
            raise ParseFailure('User not found on Codeforces')
        info = users[0]
        rating = info.get('rating') or 'Unrated'
        max_rating = info.get('maxRating') or (rating if isinstance(rating, int) else 0)

        submissions = await self._api(
            'user.status', self.context.bulk_timeout, 'Failed to fetch submissions',
            handle=username, **{'from': 1, 'count': STATUS_PAGE_SIZE},
        )
        if not isinstance(submissions, list):
            raise ParseFailure('Failed to fetch submissions')

        problems_solved, contests, daily_solves = summarize_submissions(
            submissions, self.context.tz,
        )
        self.logger.debug(
            f"Codeforces {username}: {len(submissions)} submissions, "
            f"{problems_solved} solved, {contests} contests"
        )
        return CodeforcesResult(
            username=username,
            rating=rating,
            max_rating=max_rating,
            problems_solved=problems_solved,
            contests=contests,
            daily_solves=daily_solves,
        )
