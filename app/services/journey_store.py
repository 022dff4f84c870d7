"""JSON-file persistence for the Journey record.

The sync layer only produces snapshots; this store owns the file and the
read-modify-write that folds a snapshot into it.  Fields a sync does not
produce (streaks, USACO counters, revision counts) are left alone.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import threading
from datetime import datetime, tzinfo

from app.scrapers.base import date_key
from app.scrapers.common import utc_now_iso
from app.services.classifier import CATEGORY_TOTALS

logger = logging.getLogger(__name__)

JOURNEY_FILE = 'journey.json'
JOURNEY_VERSION = '1.0.0'


def default_journey() -> dict:
    return {
        'journeyStarted': False,
        'startDate': None,
        'currentStreak': 0,
        'bestStreak': 0,
        'lastActiveDate': None,
        'cses': {
            name: {'solved': 0, 'total': total} for name, total in CATEGORY_TOTALS.items()
        },
        'usaco': {'bronze': 0, 'silver': 0, 'gold': 0, 'platinum': 0},
        'codeforces': {
            'rating': 'Unrated',
            'maxRating': 0,
            'problemsSolved': 0,
            'contests': 0,
        },
        'revision': {'problems': 0},
        'platforms': {},
        'autoSyncEnabled': False,
        'lastAutoSync': None,
        'lastUpdated': utc_now_iso(),
        'version': JOURNEY_VERSION,
    }


class JourneyStore:
    def __init__(self, data_dir: str, tz: tzinfo | None = None):
        self.data_dir = data_dir
        self.path = os.path.join(data_dir, JOURNEY_FILE)
        self.tz = tz
        self._lock = threading.Lock()

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return default_journey()
        with open(self.path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _write(self, data: dict) -> None:
        os.makedirs(self.data_dir, exist_ok=True)
        data['lastUpdated'] = utc_now_iso()
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def load(self) -> dict:
        with self._lock:
            return self._read()

    def save(self, data: dict) -> dict:
        with self._lock:
            self._write(data)
            return data

    def initialize(self) -> dict:
        """Create the journey file with defaults if it does not exist yet."""
        with self._lock:
            data = self._read()
            if not os.path.exists(self.path):
                self._write(data)
                logger.info(f"Initialized journey data at {self.path}")
            return data

    def set_auto_sync(self, enabled: bool) -> dict:
        with self._lock:
            data = self._read()
            data['autoSyncEnabled'] = bool(enabled)
            self._write(data)
            return data

    def usernames(self) -> dict[str, str | None]:
        platforms = self.load().get('platforms') or {}
        return {
            name: (platforms.get(name) or {}).get('username')
            for name in ('cses', 'codeforces', 'vjudge')
        }

    def merge_snapshot(self, snapshot: dict) -> dict:
        """Fold a sync snapshot into the stored record and persist it.

        CSES ``solved`` only moves up (manual increments survive a sync) and
        is capped at the category total; per-platform entries are updated key
        by key, so a failed platform keeps its previous data.
        """
        with self._lock:
            data = self._read()

            if 'cses' in snapshot:
                stored = data.setdefault('cses', {})
                for name, synced in snapshot['cses'].items():
                    previous = stored.get(name) or {}
                    total = synced['total']
                    solved = max(previous.get('solved', 0), synced['solved'])
                    stored[name] = {**previous, 'total': total, 'solved': min(total, solved)}

            if 'codeforces' in snapshot:
                data.setdefault('codeforces', {}).update(copy.deepcopy(snapshot['codeforces']))

            platforms = data.setdefault('platforms', {})
            for name, status in snapshot.get('platforms', {}).items():
                platforms.setdefault(name, {}).update(copy.deepcopy(status))

            if snapshot.get('lastAutoSync'):
                data['lastAutoSync'] = snapshot['lastAutoSync']

            vjudge = snapshot.get('platforms', {}).get('vjudge') or {}
            today = date_key(datetime.now(self.tz))
            if vjudge.get('success') and (vjudge.get('dailyActivity') or {}).get(today, 0) > 0:
                data['lastActiveDate'] = today

            self._write(data)
            return data

    def sync_status(self) -> dict:
        data = self.load()
        platforms = data.get('platforms') or {}
        status = {'lastAutoSync': data.get('lastAutoSync'), 'platforms': {}}
        for name in ('cses', 'codeforces', 'vjudge'):
            entry = platforms.get(name) or {}
            status['platforms'][name] = {
                'configured': bool(entry.get('username')),
                'username': entry.get('username'),
                'lastSync': entry.get('lastSync'),
                'success': bool(entry.get('success', False)),
                'error': entry.get('error'),
            }
        status['platforms']['codeforces']['currentRating'] = (
            (data.get('codeforces') or {}).get('rating') or 'Unrated'
        )
        status['platforms']['vjudge']['totalSolved'] = (
            (platforms.get('vjudge') or {}).get('totalSolved') or 0
        )
        return status
