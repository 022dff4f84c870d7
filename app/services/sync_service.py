from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import timedelta, timezone, tzinfo
from typing import Mapping

import httpx

from app.scrapers import get_scraper_instance
from app.scrapers.common import PlatformResult, utc_now_iso
from app.scrapers.fetcher import Fetcher
from app.services.aggregator import aggregate
from app.services.classifier import CATEGORY_TOTALS, CSES_CATEGORY_TABLE

logger = logging.getLogger(__name__)

PLATFORMS: tuple[str, ...] = ('cses', 'codeforces', 'vjudge')

DEFAULT_BASE_URLS = {
    'cses': 'https://cses.fi',
    'codeforces': 'https://codeforces.com/api',
    'vjudge': 'https://vjudge.net/user',
}

DEFAULT_USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36'


@dataclass
class SyncContext:
    """Everything the sync layer needs, passed explicitly per call."""

    base_urls: dict = field(default_factory=lambda: dict(DEFAULT_BASE_URLS))
    user_agent: str = DEFAULT_USER_AGENT
    profile_timeout: float = 10.0
    bulk_timeout: float = 15.0
    catalog_timeout: float = 20.0
    category_table: Mapping = field(default_factory=lambda: CSES_CATEGORY_TABLE)
    category_totals: Mapping = field(default_factory=lambda: dict(CATEGORY_TOTALS))
    tz: tzinfo | None = None
    transport: httpx.AsyncBaseTransport | None = None

    @classmethod
    def from_config(cls, config: Mapping, transport=None) -> SyncContext:
        offset = config.get('SYNC_TIMEZONE_OFFSET')
        tz = timezone(timedelta(hours=float(offset))) if offset not in (None, '') else None
        return cls(
            base_urls={
                'cses': config.get('CSES_BASE_URL', DEFAULT_BASE_URLS['cses']),
                'codeforces': config.get('CODEFORCES_API_URL', DEFAULT_BASE_URLS['codeforces']),
                'vjudge': config.get('VJUDGE_BASE_URL', DEFAULT_BASE_URLS['vjudge']),
            },
            user_agent=config.get('SYNC_USER_AGENT', DEFAULT_USER_AGENT),
            profile_timeout=float(config.get('SYNC_PROFILE_TIMEOUT', 10)),
            bulk_timeout=float(config.get('SYNC_BULK_TIMEOUT', 15)),
            catalog_timeout=float(config.get('SYNC_CATALOG_TIMEOUT', 20)),
            tz=tz,
            transport=transport if transport is not None else config.get('SYNC_TRANSPORT'),
        )


@dataclass
class SyncReport:
    """Outcome of one multi-platform sync; unrequested platforms stay None."""

    results: dict[str, PlatformResult | None]
    sync_time: str

    def snapshot(self) -> dict:
        return aggregate(self.results, self.sync_time)

    def to_dict(self) -> dict:
        return {
            name: result.to_dict() if result is not None else None
            for name, result in self.results.items()
        } | {'syncTime': self.sync_time}


class SyncService:
    def __init__(self, context: SyncContext = None):
        self.context = context or SyncContext()

    def _fetcher(self) -> Fetcher:
        return Fetcher(self.context.user_agent, transport=self.context.transport)

    async def sync_platform(self, platform: str, username: str) -> PlatformResult:
        """Sync one platform.  Raises ValueError only for an unknown platform."""
        async with self._fetcher() as fetcher:
            scraper = get_scraper_instance(platform, self.context, fetcher=fetcher)
            return await scraper.fetch_progress(username)

    async def sync_all_platforms(self, usernames: Mapping[str, str | None]) -> SyncReport:
        """Fetch every platform that has a username, concurrently.

        Waits for all of them to settle; one platform failing never hides or
        delays another platform's result.
        """
        sync_time = utc_now_iso()
        results: dict[str, PlatformResult | None] = {name: None for name in PLATFORMS}
        requested = [
            (name, usernames[name].strip())
            for name in PLATFORMS
            if isinstance(usernames.get(name), str) and usernames[name].strip()
        ]
        logger.info(f"Starting sync for platforms: {[name for name, _ in requested]}")

        async with self._fetcher() as fetcher:
            scrapers = [
                get_scraper_instance(name, self.context, fetcher=fetcher)
                for name, _ in requested
            ]
            outcomes = await asyncio.gather(
                *(scraper.fetch_progress(username)
                  for scraper, (_, username) in zip(scrapers, requested)),
                return_exceptions=True,
            )

        for scraper, (name, username), outcome in zip(scrapers, requested, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Sync task for {name} crashed: {outcome!r}")
                outcome = scraper.failure(username, str(outcome) or outcome.__class__.__name__)
            results[name] = outcome

        failed = [name for name, r in results.items() if r is not None and not r.success]
        logger.info(
            f"Sync completed for all platforms "
            f"({len(requested) - len(failed)} ok, failed={failed})"
        )
        return SyncReport(results=results, sync_time=sync_time)

    async def fetch_topics(self) -> dict:
        async with self._fetcher() as fetcher:
            scraper = get_scraper_instance('cses', self.context, fetcher=fetcher)
            return await scraper.fetch_topics()
