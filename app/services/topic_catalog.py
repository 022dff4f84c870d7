"""Static CSES problem-set topic data.

``FALLBACK_TOPICS`` is served whenever the live problem-set page cannot be
parsed.  Bump ``FALLBACK_TOPICS_VERSION`` when the list is edited.
"""

from __future__ import annotations

import re

from app.scrapers.common import TopicCatalogEntry

FALLBACK_TOPICS_VERSION = '2024.1'

DEFAULT_TOPIC_DESCRIPTION = 'Programming problems and algorithms'

TOPIC_DESCRIPTIONS: dict[str, str] = {
    'Introductory Problems': 'Basic programming problems to get started',
    'Sorting and Searching': 'Fundamental algorithms for sorting and searching',
    'Dynamic Programming': 'Optimization problems using DP techniques',
    'Graph Algorithms': 'Tree and graph traversal algorithms',
    'Range Queries': 'Efficient range query data structures',
    'Tree Algorithms': 'Advanced tree manipulation algorithms',
    'Mathematics': 'Number theory and mathematical problems',
    'String Algorithms': 'String processing and pattern matching',
    'Geometry': 'Computational geometry problems',
    'Advanced Techniques': 'Complex algorithmic techniques',
    'Additional Problems': 'Extra challenging problems',
}

# (title, task count)
FALLBACK_TOPICS: tuple[tuple[str, int], ...] = (
    ('Introductory Problems', 19),
    ('Sorting and Searching', 35),
    ('Dynamic Programming', 19),
    ('Graph Algorithms', 36),
    ('Range Queries', 19),
    ('Tree Algorithms', 16),
    ('Mathematics', 31),
    ('String Algorithms', 17),
    ('Geometry', 7),
    ('Advanced Techniques', 24),
    ('Additional Problems', 77),
)


def slugify(title: str) -> str:
    return re.sub(r'[^a-z0-9]+', '-', title.lower()).strip('-')


def topic_description(title: str) -> str:
    return TOPIC_DESCRIPTIONS.get(title, DEFAULT_TOPIC_DESCRIPTION)


def fallback_topics(url: str) -> list[TopicCatalogEntry]:
    """Fresh copies of the fallback catalog, all pointing at ``url``."""
    return [
        TopicCatalogEntry(
            title=title,
            slug=slugify(title),
            count=count,
            url=url,
            description=topic_description(title),
        )
        for title, count in FALLBACK_TOPICS
    ]
