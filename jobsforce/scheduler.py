"""APScheduler setup: periodic and bootstrap job syncs."""

import logging
import traceback
from datetime import datetime, timezone

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, EVENT_JOB_MISSED
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from jobsforce.pipeline import sync_jobs

logger = logging.getLogger("jobsforce.scheduler")

SCHEDULED_SYNC_JOB = "scheduled_job_sync"
BOOTSTRAP_SYNC_JOB = "bootstrap_job_sync"

_scheduler: BackgroundScheduler | None = None


def collect_skill_union(users) -> list[str]:
    """Fresh union of every user's skills. Reads the directory each call."""
    return users.all_skills()


def run_scheduled_sync(services) -> dict | None:
    """One periodic cycle. Returns the sync result, or None when there was nothing to do."""
    skills = collect_skill_union(services.users)
    if not skills:
        logger.info("No skills found for scheduled job sync")
        return None

    logger.info("Running scheduled job sync for %d unique skills", len(skills))
    result = sync_jobs(
        services.score_client, services.reconciler, skills, services.config.sync.scheduled_limit
    )
    logger.info("Scheduled job sync completed: %s", result)
    return result


def run_bootstrap_sync(services) -> dict | None:
    """Seed a cold store once at startup."""
    sync_config = services.config.sync
    listing_count = services.store.count()
    if listing_count >= sync_config.bootstrap_min_listings:
        logger.info("Store already has %d listings. Skipping initial sync.", listing_count)
        return None

    skills = collect_skill_union(services.users)[: services.config.ml_service.max_skills]
    if not skills:
        logger.info("Low listing count (%d) but no user skills found for initial sync", listing_count)
        return None

    logger.info("Low listing count (%d), running initial sync for %d skills", listing_count, len(skills))
    result = sync_jobs(services.score_client, services.reconciler, skills, sync_config.bootstrap_limit)
    logger.info("Initial job sync completed: %s", result)
    return result


def _job_listener(event):
    """Log scheduler job events for debugging."""
    if event.exception:
        logger.error("Scheduled job %s FAILED: %s", event.job_id, event.exception)
        logger.error("Traceback: %s", event.traceback)
    elif event.code == EVENT_JOB_MISSED:
        logger.warning("Scheduled job %s MISSED its fire time", event.job_id)
    else:
        logger.info("Scheduled job %s executed successfully", event.job_id)


def _run_sync_wrapper(name: str, func, services) -> None:
    """Entry/exit logging around a scheduled sync. Failures are re-raised for the listener."""
    logger.info("=== SCHEDULER FIRING %s ===", name)
    try:
        func(services)
        logger.info("=== SCHEDULER COMPLETED %s ===", name)
    except Exception:
        logger.error("=== SCHEDULER FAILED %s ===\n%s", name, traceback.format_exc())
        raise


def init_scheduler(services, bootstrap: bool = True) -> BackgroundScheduler:
    """Start the background scheduler with the periodic sync and (optionally) the bootstrap sync."""
    global _scheduler
    if _scheduler is not None:
        return _scheduler

    sync_config = services.config.sync
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_listener(_job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR | EVENT_JOB_MISSED)

    if sync_config.enabled and sync_config.interval_hours > 0:
        scheduler.add_job(
            _run_sync_wrapper,
            trigger=IntervalTrigger(hours=sync_config.interval_hours, timezone="UTC"),
            args=["scheduled sync", run_scheduled_sync, services],
            id=SCHEDULED_SYNC_JOB,
            name="Periodic job sync",
            misfire_grace_time=3600,
            coalesce=True,
            max_instances=1,
            replace_existing=True,
        )
        logger.info("Scheduled job sync every %.1f hours", sync_config.interval_hours)
    else:
        logger.warning("Periodic job sync disabled")

    if bootstrap:
        scheduler.add_job(
            _run_sync_wrapper,
            trigger=DateTrigger(run_date=datetime.now(timezone.utc), timezone="UTC"),
            args=["bootstrap sync", run_bootstrap_sync, services],
            id=BOOTSTRAP_SYNC_JOB,
            name="Bootstrap job sync",
            misfire_grace_time=None,
            replace_existing=True,
        )

    scheduler.start()
    _scheduler = scheduler
    logger.info("APScheduler started")
    return scheduler


def shutdown_scheduler() -> None:
    global _scheduler
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        logger.info("APScheduler stopped")


def get_next_run_time():
    """Next fire time of the periodic sync, or None."""
    if _scheduler is None:
        return None
    job = _scheduler.get_job(SCHEDULED_SYNC_JOB)
    return job.next_run_time if job else None


def get_scheduler_info() -> dict:
    """Return diagnostic info about the scheduler state."""
    if _scheduler is None:
        return {"running": False, "jobs": []}
    jobs = []
    for job in _scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run_time": str(job.next_run_time) if job.next_run_time else None,
            "trigger": str(job.trigger),
        })
    return {
        "running": _scheduler.running,
        "jobs": jobs,
    }
