# gymtrack/core/scheduler.py

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from gymtrack.core.config import settings
from gymtrack.core.constants import REMINDER_INTERVAL_DAYS, REMINDER_WORK_NAME
from gymtrack.domains.device.reminder import run_reminder_job
import logging

logger = logging.getLogger(__name__)


def create_scheduler(jobstore_url: str = None) -> AsyncIOScheduler:
    """Scheduler with a persistent job store so periodic work survives restarts"""
    url = jobstore_url or settings.SCHEDULER_JOBSTORE_URL
    return AsyncIOScheduler(jobstores={"default": SQLAlchemyJobStore(url=url)})


def schedule_daily_reminder(scheduler, work_name: str = REMINDER_WORK_NAME):
    """
    Enqueue the daily reminder unless a job with the same name exists (keep existing).
    Call on a started scheduler so jobs restored from the job store are visible.
    """
    existing = scheduler.get_job(work_name)
    if existing is not None:
        logger.info(f"⏰ Reminder job {work_name} already scheduled, keeping it")
        return existing

    job = scheduler.add_job(
        run_reminder_job,
        "interval",
        days=REMINDER_INTERVAL_DAYS,
        id=work_name,
        name=work_name,
        replace_existing=False,
    )
    logger.info(f"⏰ Reminder job {work_name} scheduled every {REMINDER_INTERVAL_DAYS} day(s)")
    return job
