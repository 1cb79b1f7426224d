from datetime import datetime, timezone
from apscheduler.schedulers.asyncio import AsyncIOScheduler
import structlog

logger = structlog.get_logger()

scheduler = AsyncIOScheduler()


def start_scheduler():
    if not scheduler.running:
        scheduler.start()
        logger.info("scheduler_started")


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")


def add_interval_job(func, seconds: float, job_id: str, run_now: bool = True):
    """Register a single-flight interval job.

    With ``run_now`` the first run fires immediately instead of one interval
    after start. A fire that lands while the previous run is still going is
    skipped by APScheduler (``max_instances=1``), and a backlog of missed
    fires collapses into one (``coalesce``).
    """
    kwargs = {}
    if run_now:
        # Passing next_run_time=None would add the job paused
        kwargs["next_run_time"] = datetime.now(timezone.utc)
    return scheduler.add_job(
        func,
        "interval",
        seconds=seconds,
        id=job_id,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
        **kwargs,
    )
