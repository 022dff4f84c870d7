from __future__ import annotations

import re
from typing import Callable, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from app.services.classifier import categorize
from app.services.topic_catalog import fallback_topics, slugify, topic_description

from .base import BaseScraper
from .common import CSESResult, SolvedProblemRecord, SyncError, TopicCatalogEntry
from . import register_scraper

TASK_LINK_SELECTOR = 'a[href*="/task/"]'

# Words that mark an element as a topic heading when no <h2> structure exists
TOPIC_KEYWORDS: tuple[str, ...] = ('Problems',)

_MAX_HEADING_LEN = 50
_MAX_TOPIC_TITLE_LEN = 60
_PREVIEW_PROBLEMS = 10

_SKIP_TAGS = frozenset({'html', 'head', 'body', 'title', 'script', 'style'})

TopicStrategy = Callable[[BeautifulSoup, str, str], Optional[list]]


def _task_links(node: Tag) -> list[Tag]:
    links = list(node.select(TASK_LINK_SELECTOR))
    if node.name == 'a' and '/task/' in (node.get('href') or ''):
        links.insert(0, node)
    return links


def parse_topics_by_headings(soup: BeautifulSoup, page_url: str, base_url: str):
    """Each <h2> is a topic; its task links are in the siblings up to the next <h2>."""
    topics = []
    for heading in soup.find_all('h2'):
        title = heading.get_text(strip=True)
        if not title or len(title) > _MAX_HEADING_LEN:
            continue

        links = []
        for sibling in heading.find_next_siblings():
            if sibling.name == 'h2':
                break
            links.extend(_task_links(sibling))

        if not links:
            continue

        problems = []
        for link in links[:_PREVIEW_PROBLEMS]:
            href = link.get('href')
            problem_title = link.get_text(strip=True)
            if href and problem_title:
                problems.append({'title': problem_title, 'url': urljoin(base_url, href)})

        slug = slugify(title)
        topics.append(TopicCatalogEntry(
            title=title,
            slug=slug,
            count=len(links),
            url=f"{page_url}#{slug}",
            problems=problems,
        ))
    return topics or None


def parse_topics_by_keyword(soup: BeautifulSoup, page_url: str, base_url: str):
    """Short elements mentioning a topic keyword, with task links under their parent."""
    topics = []
    for element in soup.find_all(True):
        if element.name in _SKIP_TAGS or element.parent is None:
            continue
        # a heading never wraps the task links it introduces
        if element.name == 'a' or element.select_one(TASK_LINK_SELECTOR) is not None:
            continue
        text = element.get_text(' ', strip=True)
        text = ' '.join(text.split())
        if not text or len(text) > _MAX_TOPIC_TITLE_LEN or len(text.split(' ')) < 2:
            continue
        if not any(keyword in text for keyword in TOPIC_KEYWORDS):
            continue

        count = len(element.parent.select(TASK_LINK_SELECTOR))
        if count:
            slug = slugify(text)
            topics.append(TopicCatalogEntry(
                title=text, slug=slug, count=count, url=f"{page_url}#{slug}",
            ))
    return topics or None


TOPIC_STRATEGIES: tuple[TopicStrategy, ...] = (
    parse_topics_by_headings,
    parse_topics_by_keyword,
)


def clean_topics(topics) -> list[TopicCatalogEntry]:
    """Drop duplicate (case-insensitive), empty and implausible titles."""
    seen = set()
    cleaned = []
    for topic in topics or ():
        key = topic.title.lower()
        if key in seen or not topic.count:
            continue
        seen.add(key)
        if not re.search(r'[a-z]', topic.title, re.IGNORECASE):
            continue
        if len(topic.title) >= _MAX_TOPIC_TITLE_LEN:
            continue
        topic.description = topic_description(topic.title)
        cleaned.append(topic)
    return cleaned


def parse_topic_catalog(html: str, page_url: str, base_url: str) -> list[TopicCatalogEntry]:
    """Run the strategies in order; first non-empty cleaned result wins."""
    soup = BeautifulSoup(html, 'html.parser')
    for strategy in TOPIC_STRATEGIES:
        topics = clean_topics(strategy(soup, page_url, base_url))
        if topics:
            return topics
    return []


def parse_solved_tasks(html: str) -> list[SolvedProblemRecord]:
    """Rows of a CSES user page whose score cell is marked fully solved."""
    soup = BeautifulSoup(html, 'html.parser')
    solved = []
    seen = set()
    for marker in soup.select('.task-score.full'):
        row = marker.find_parent('tr')
        if row is None:
            continue
        link = row.select_one('.task-name a')
        if link is None:
            continue
        name = link.get_text(strip=True)
        href = link.get('href') or ''
        task_id = href.rstrip('/').split('/')[-1]
        if not name or not task_id or task_id in seen:
            continue
        seen.add(task_id)
        solved.append(SolvedProblemRecord(id=task_id, name=name))
    return solved


@register_scraper
class CSESScraper(BaseScraper):
    PLATFORM_NAME = "cses"
    PLATFORM_DISPLAY = "CSES"
    RESULT_CLASS = CSESResult

    @property
    def problemset_url(self) -> str:
        return f"{self.base_url}/problemset/"

    async def _fetch_progress(self, username: str) -> CSESResult:
        payload = await self._get(
            f"{self.base_url}/user/{username}", timeout=self.context.profile_timeout,
        )
        solved = parse_solved_tasks(payload.text)
        categories = categorize(
            solved, self.context.category_table, self.context.category_totals,
        )
        self.logger.debug(f"CSES user {username}: {len(solved)} fully solved rows")
        return CSESResult(
            username=username,
            total_solved=len(solved),
            categories=categories,
        )

    async def fetch_topics(self) -> dict:
        """Problem-set topic catalog; degrades to the fallback list, never fails."""
        url = self.problemset_url
        self.logger.info(f"Fetching CSES topics from: {url}")
        try:
            payload = await self._get(url, timeout=self.context.catalog_timeout)
            topics = parse_topic_catalog(payload.text, url, self.base_url)
        except SyncError as e:
            self.logger.error(f"CSES topics fetch error: {e}")
            return {
                'success': True,
                'fromCache': True,
                'error': str(e),
                'topics': [t.to_dict() for t in fallback_topics(url)],
            }

        if not topics:
            self.logger.warning("No CSES topics parsed, using fallback topics list")
            return {
                'success': True,
                'fromCache': True,
                'topics': [t.to_dict() for t in fallback_topics(url)],
            }

        self.logger.info(f"Found {len(topics)} CSES topics")
        return {'success': True, 'topics': [t.to_dict() for t in topics]}
