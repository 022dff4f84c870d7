"""CSES task id → topic category classification.

CSES identifies tasks by integer id (``/problemset/task/1068``).  The
dashboard tracks six categories, each with a fixed number of tasks.  A
solved task is bucketed by a static lookup table:

1. Ids listed in a bucket map to that category; buckets are scanned in
   ``CATEGORY_ORDER`` so an id listed twice goes to the earlier category.
2. Unknown ids (the catalog grows faster than this table) classify to
   ``None`` and are left out of every category count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping

logger = logging.getLogger(__name__)

CATEGORY_ORDER: tuple[str, ...] = ('intro', 'sort', 'dp', 'graph', 'range', 'tree')

CATEGORY_TOTALS: dict[str, int] = {
    'intro': 19,
    'sort': 35,
    'dp': 19,
    'graph': 36,
    'range': 19,
    'tree': 16,
}

CATEGORY_NAMES: dict[str, str] = {
    'intro': 'Introductory Problems',
    'sort': 'Sorting and Searching',
    'dp': 'Dynamic Programming',
    'graph': 'Graph Algorithms',
    'range': 'Range Queries',
    'tree': 'Tree Algorithms',
}

# ---------------------------------------------------------------------------
# Static table: category → CSES task ids
# ---------------------------------------------------------------------------

CSES_CATEGORY_TABLE: dict[str, frozenset[int]] = {
    'intro': frozenset({
        1068, 1083, 1069, 1094, 1070, 1071, 1072, 1617, 2165, 1618,
        1754, 1755, 1624, 1092, 1622, 1623, 1073, 1619, 2431,
    }),
    'sort': frozenset({
        1621, 1084, 1090, 1091, 1619, 1629, 1640, 1643, 1074, 2162,
        2183, 2168, 1642, 1645, 1141, 1076, 1630, 1631, 1641, 1662,
        1085, 1097, 1620, 2216, 2217, 2428, 1632, 1628,
    }),
    'dp': frozenset({
        1633, 1634, 1635, 1636, 1637, 1638, 1158, 1746, 2413, 1639,
        2181, 2220, 1653, 2442, 1097, 1644,
    }),
    'graph': frozenset(range(1666, 1702)),
    'range': frozenset({
        1646, 1647, 1648, 1649, 1650, 1651, 1652, 1143, 1749, 2166,
        2206, 2401, 2416, 1734, 1190,
    }),
    'tree': frozenset({
        1674, 1130, 1131, 1132, 1133, 1134, 1135, 1136, 1137, 1138,
        1139, 1702, 2079, 1703, 2134, 1704,
    }),
}


def classify(problem_id, table: Mapping[str, frozenset[int]] = None) -> str | None:
    """Return the category whose bucket lists ``problem_id``, else ``None``."""
    table = CSES_CATEGORY_TABLE if table is None else table
    try:
        pid = int(str(problem_id).strip())
    except (TypeError, ValueError):
        return None

    for category, ids in table.items():
        if pid in ids:
            return category
    return None


@dataclass
class TopicCategory:
    """Per-category progress; ``solved`` never exceeds ``total``."""

    name: str
    total: int
    solved: int = 0
    problems: list = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.solved >= self.total

    def add_solved_problem(self, record) -> bool:
        """Count ``record`` once.  Returns False when it was a no-op."""
        if self.is_complete:
            logger.debug(f"Category {self.name} already complete, skipping {record.id}")
            return False
        if any(p.id == record.id for p in self.problems):
            return False
        self.problems.append(record)
        self.solved += 1
        return True

    def to_dict(self, include_problems: bool = False) -> dict:
        data = {'solved': self.solved, 'total': self.total}
        if include_problems:
            data['problems'] = [p.to_dict() for p in self.problems]
        return data


def empty_categories(totals: Mapping[str, int] = None) -> dict[str, TopicCategory]:
    totals = CATEGORY_TOTALS if totals is None else totals
    return {name: TopicCategory(name=name, total=total) for name, total in totals.items()}


def categorize(records, table: Mapping[str, frozenset[int]] = None,
               totals: Mapping[str, int] = None) -> dict[str, TopicCategory]:
    """Bucket solved records into fresh categories.

    Unclassified ids are counted nowhere; they are logged so the table can
    be extended.
    """
    categories = empty_categories(totals)
    unmatched = []
    for record in records:
        category = classify(record.id, table)
        if category is None or category not in categories:
            unmatched.append(record.id)
            continue
        categories[category].add_solved_problem(record)

    if unmatched:
        logger.info(f"Unclassified CSES tasks (solved but uncategorized): {unmatched}")
    return categories
