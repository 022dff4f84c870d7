from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup

from .common import PlatformResult, SyncError, utc_now_iso
from .fetcher import Fetcher, PlatformTarget, RawPayload

if TYPE_CHECKING:
    from app.services.sync_service import SyncContext

_LEADING_INT_RE = re.compile(r'^\s*([+-]?\d+)')


def parse_leading_int(text: str | None, default: int = 0) -> int:
    """Integer prefix of ``text`` ("12 solved" -> 12), or ``default``."""
    if not text:
        return default
    m = _LEADING_INT_RE.match(text)
    return int(m.group(1)) if m else default


def date_key(moment: datetime, tz: timezone | None = None) -> str:
    """Calendar-date key such as ``Mon Jan 01 2024``.

    Aware datetimes are converted to ``tz`` (local time when ``tz`` is None);
    naive ones are taken as already being in that zone.
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    return moment.strftime('%a %b %d %Y')


def epoch_date_key(seconds: float, tz: timezone | None = None) -> str:
    return date_key(datetime.fromtimestamp(seconds, tz=timezone.utc), tz)


class BaseScraper(ABC):
    PLATFORM_NAME: str = ""
    PLATFORM_DISPLAY: str = ""
    RESULT_CLASS: type[PlatformResult] = PlatformResult

    def __init__(self, context: SyncContext, fetcher: Fetcher = None):
        self.context = context
        self.fetcher = fetcher or Fetcher(context.user_agent, transport=context.transport)
        self.logger = logging.getLogger(f'scraper.{self.PLATFORM_NAME}')

    @property
    def base_url(self) -> str:
        return self.context.base_urls[self.PLATFORM_NAME].rstrip('/')

    @abstractmethod
    async def _fetch_progress(self, username: str) -> PlatformResult:
        ...

    async def fetch_progress(self, username: str) -> PlatformResult:
        """Fetch and parse one user's progress.

        Never raises: transport and parse problems come back as a failure
        result carrying the platform's zeroed fields.
        """
        self.logger.info(f"Fetching {self.PLATFORM_DISPLAY} progress for {username}...")
        try:
            result = await self._fetch_progress(username)
        except SyncError as e:
            self.logger.error(f"{self.PLATFORM_DISPLAY} fetch error for {username}: {e}")
            return self.failure(username, str(e))
        except Exception as e:
            self.logger.exception(f"Unexpected {self.PLATFORM_DISPLAY} error for {username}")
            return self.failure(username, str(e) or e.__class__.__name__)

        result.last_updated = utc_now_iso()
        return result

    def failure(self, username: str, error: str) -> PlatformResult:
        return self.RESULT_CLASS(username=username, success=False, error=error)

    async def _get(self, url: str, timeout: float, html: bool = True, **params) -> RawPayload:
        return await self.fetcher.fetch(
            PlatformTarget(url=url, timeout=timeout, params=params, html=html)
        )

    @staticmethod
    def _soup(payload: RawPayload) -> BeautifulSoup:
        return BeautifulSoup(payload.text, 'html.parser')
