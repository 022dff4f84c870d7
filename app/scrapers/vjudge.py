from __future__ import annotations

from datetime import datetime, timezone

from bs4 import BeautifulSoup

from .base import BaseScraper, date_key, parse_leading_int
from .common import VJudgeResult
from . import register_scraper

ACCEPTED_STATUS = 'Accepted'

# Timestamp layouts seen in the submissions table
_TIMESTAMP_FORMATS = (
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
    '%Y/%m/%d %H:%M:%S',
    '%Y-%m-%dT%H:%M:%S%z',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%d',
)


def parse_timestamp(text: str) -> datetime | None:
    text = (text or '').strip()
    if not text:
        return None
    if text.isdigit():
        # epoch seconds or milliseconds
        value = int(text)
        try:
            return datetime.fromtimestamp(
                value / 1000 if value > 10 ** 11 else value, tz=timezone.utc,
            )
        except (OverflowError, OSError, ValueError):
            return None
    cleaned = text.replace('Z', '+0000')
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    return None


def parse_profile(html: str) -> tuple[int, int, dict[str, int]]:
    """Solved/submitted totals and the activity calendar of a profile page."""
    soup = BeautifulSoup(html, 'html.parser')

    solved_el = soup.select_one('#solved')
    submitted_el = soup.select_one('#submitted')
    solved = parse_leading_int(solved_el.get_text() if solved_el else None)
    submitted = parse_leading_int(submitted_el.get_text() if submitted_el else None)

    daily_activity: dict[str, int] = {}
    for cell in soup.select('.activity-cell'):
        count = parse_leading_int(cell.get_text())
        day = cell.get('data-date')
        if count > 0 and day:
            daily_activity[day] = count
    return solved, submitted, daily_activity


def parse_recent_solves(html: str, tz=None, logger=None) -> dict[str, list[dict]]:
    """Accepted rows of the submissions page, grouped by calendar date."""
    soup = BeautifulSoup(html, 'html.parser')
    recent: dict[str, list[dict]] = {}
    for row in soup.select('tr.submission-row'):
        status_el = row.select_one('.status')
        if status_el is None or status_el.get_text(strip=True) != ACCEPTED_STATUS:
            continue
        problem_el = row.select_one('.problem-title')
        time_el = row.select_one('.timestamp')
        problem = problem_el.get_text(strip=True) if problem_el else ''
        time_str = time_el.get_text(strip=True) if time_el else ''

        moment = parse_timestamp(time_str)
        if moment is None:
            if logger is not None:
                logger.debug(f"Skipping VJudge row with unreadable timestamp {time_str!r}")
            continue
        recent.setdefault(date_key(moment, tz), []).append({
            'problem': problem,
            'timestamp': time_str,
        })
    return recent


@register_scraper
class VJudgeScraper(BaseScraper):
    PLATFORM_NAME = "vjudge"
    PLATFORM_DISPLAY = "VJudge"
    RESULT_CLASS = VJudgeResult

    async def _fetch_progress(self, username: str) -> VJudgeResult:
        profile = await self._get(
            f"{self.base_url}/{username}", timeout=self.context.profile_timeout,
        )
        solved, submitted, daily_activity = parse_profile(profile.text)

        # The calendar and the submissions list are reported side by side,
        # never cross-checked.
        submissions = await self._get(
            f"{self.base_url}/{username}/submissions", timeout=self.context.profile_timeout,
        )
        recent_solves = parse_recent_solves(submissions.text, self.context.tz, self.logger)

        return VJudgeResult(
            username=username,
            total_solved=solved,
            total_submitted=submitted,
            daily_activity=daily_activity,
            recent_solves=recent_solves,
        )
