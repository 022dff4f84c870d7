"""Sync blueprint: per-platform and multi-platform sync, topics, status."""
from __future__ import annotations

import asyncio
import logging

from flask import Blueprint, current_app, jsonify, request

from app.scrapers.common import utc_now_iso
from app.services.aggregator import aggregate
from app.services.sync_service import PLATFORMS, SyncContext, SyncService

logger = logging.getLogger(__name__)

sync_bp = Blueprint('sync', __name__, url_prefix='/api')


def _store():
    return current_app.extensions['journey_store']


def _service() -> SyncService:
    return SyncService(SyncContext.from_config(current_app.config))


def _error(message, status, **extra):
    return jsonify({'success': False, 'error': message, **extra}), status


@sync_bp.route('/sync/<platform>', methods=['POST'])
def sync_platform(platform):
    if platform not in PLATFORMS:
        return _error(f'Unknown platform: {platform}', 404)

    payload = request.get_json(silent=True) or {}
    username = payload.get('username')
    if not isinstance(username, str) or not username.strip():
        return _error('Username is required', 400)
    username = username.strip()

    service = _service()
    result = asyncio.run(service.sync_platform(platform, username))

    if result.success:
        try:
            _store().merge_snapshot(aggregate({platform: result}))
        except (OSError, ValueError) as e:
            # keep the fetched result in the response
            logger.error(f"Failed to persist {platform} sync for {username}: {e}")
            return _error(f'Failed to save data: {e}', 500, result=result.to_dict())

    return jsonify(result.to_dict())


@sync_bp.route('/sync/all', methods=['POST'])
def sync_all():
    payload = request.get_json(silent=True) or {}
    usernames = payload.get('usernames')
    if not isinstance(usernames, dict):
        return _error(
            'Usernames object is required with cses, codeforces, and/or vjudge properties',
            400,
        )
    if not any(isinstance(usernames.get(p), str) and usernames[p].strip() for p in PLATFORMS):
        return _error('At least one platform username is required', 400)

    report = asyncio.run(_service().sync_all_platforms(usernames))

    try:
        _store().merge_snapshot(report.snapshot())
    except (OSError, ValueError) as e:
        logger.error(f"Failed to persist multi-platform sync: {e}")
        return _error(f'Failed to save data: {e}', 500, results=report.to_dict())

    return jsonify({
        'success': True,
        'message': 'Multi-platform sync completed',
        'results': report.to_dict(),
        'timestamp': utc_now_iso(),
    })


@sync_bp.route('/cses/topics', methods=['GET'])
def cses_topics():
    return jsonify(asyncio.run(_service().fetch_topics()))


@sync_bp.route('/sync/status', methods=['GET'])
def sync_status():
    try:
        status = _store().sync_status()
    except (OSError, ValueError) as e:
        return _error(str(e), 500)
    return jsonify({'success': True, 'status': status})


@sync_bp.route('/auto-sync/toggle', methods=['POST'])
def toggle_auto_sync():
    payload = request.get_json(silent=True) or {}
    enabled = bool(payload.get('enabled'))
    try:
        _store().set_auto_sync(enabled)
    except (OSError, ValueError) as e:
        return _error(f'Failed to update settings: {e}', 500)
    return jsonify({
        'success': True,
        'message': f"Auto-sync {'enabled' if enabled else 'disabled'}",
        'autoSyncEnabled': enabled,
    })


@sync_bp.route('/journey', methods=['GET'])
def journey():
    try:
        data = _store().load()
    except (OSError, ValueError) as e:
        return _error(f'Failed to read data: {e}', 500)
    return jsonify({'success': True, 'data': data})
