import asyncio
import logging

from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)
scheduler = BackgroundScheduler()

AUTO_SYNC_JOB_ID = 'auto_sync'


def run_auto_sync(app):
    """Sync every stored platform username if auto-sync is switched on.

    Returns the merged journey record, or None when nothing was synced.
    """
    from app.services.sync_service import SyncContext, SyncService

    store = app.extensions['journey_store']
    journey = store.load()
    if not journey.get('autoSyncEnabled'):
        logger.debug("Auto-sync disabled, skipping scheduled run")
        return None

    usernames = store.usernames()
    if not any(usernames.values()):
        logger.info("Auto-sync enabled but no platform usernames stored")
        return None

    logger.info("Starting scheduled auto-sync...")
    service = SyncService(SyncContext.from_config(app.config))
    report = asyncio.run(service.sync_all_platforms(usernames))
    merged = store.merge_snapshot(report.snapshot())
    logger.info(f"Auto-sync completed at {report.sync_time}")
    return merged


def init_scheduler(app):
    """Register the daily auto-sync job and start the scheduler."""
    if not app.config.get('SCHEDULER_ENABLED', False):
        logger.info("Scheduler disabled by config")
        return None

    hour = app.config.get('AUTO_SYNC_HOUR', 6)

    def auto_sync_job():
        try:
            run_auto_sync(app)
        except Exception as e:
            logger.error(f"Auto-sync failed: {e}")

    job = scheduler.add_job(
        auto_sync_job, 'cron', hour=hour, minute=0,
        id=AUTO_SYNC_JOB_ID, replace_existing=True,
    )

    try:
        if not scheduler.running:
            scheduler.start()
        logger.info(f"Scheduler started, auto-sync daily at {hour:02d}:00")
    except Exception as e:
        logger.error(f"Scheduler failed to start: {e}")
    return job


def shutdown_scheduler():
    """Cancel the auto-sync job and stop the scheduler."""
    if scheduler.get_job(AUTO_SYNC_JOB_ID):
        scheduler.remove_job(AUTO_SYNC_JOB_ID)
    if scheduler.running:
        scheduler.shutdown(wait=False)
