"""
Background scheduler for periodic maintenance.

Uses APScheduler's BackgroundScheduler. The only job today is the
expired-event sweep, which deletes events whose end time has passed.
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

from models.config import settings
from repositories.database import session_scope

EVENT_REAPER_JOB_ID = "reap_expired_events"

scheduler: BackgroundScheduler | None = None


def reap_expired_events_job() -> int:
    """
    Scheduled sweep of expired events.

    Runs in its own session. Failures are logged and the job simply runs
    again at the next interval.
    """
    from services.event_service import EventService

    with session_scope() as db:
        try:
            return EventService.reap_expired_events(db)
        except Exception as e:
            db.rollback()
            logger.error(f"Expired event sweep failed: {e!r}")
            return 0


def setup_scheduler() -> None:
    """
    Configure and start the background scheduler.

    The sweep runs every EVENT_REAPER_INTERVAL_MINUTES; 0 disables it.
    """
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already initialized")
        return

    interval = settings.EVENT_REAPER_INTERVAL_MINUTES
    if interval <= 0:
        logger.info("Expired event sweep disabled (EVENT_REAPER_INTERVAL_MINUTES=0)")
        return

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        reap_expired_events_job,
        IntervalTrigger(minutes=interval),
        id=EVENT_REAPER_JOB_ID,
        name="Expired event sweep",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    scheduler.start()
    logger.info(f"Background scheduler started; expired event sweep every {interval} min")


def shutdown_scheduler() -> None:
    """Stop the scheduler if it is running."""
    global scheduler

    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Background scheduler stopped")
    scheduler = None


def get_scheduler_status() -> dict:
    """Jobs and their next run times, for the health endpoint."""
    if scheduler is None:
        return {"running": False, "jobs": []}

    return {
        "running": scheduler.running,
        "jobs": [
            {
                "id": job.id,
                "name": job.name,
                "next_run_time": (
                    job.next_run_time.isoformat() if job.next_run_time else None
                ),
            }
            for job in scheduler.get_jobs()
        ],
    }
