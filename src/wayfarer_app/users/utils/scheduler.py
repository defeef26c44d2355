import logging
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from wayfarer_app.core.config import BAN_SWEEP_CRON
from wayfarer_app.users.utils.ban_expiry import auto_unban_users

logger = logging.getLogger(__name__)

scheduler: Optional[AsyncIOScheduler] = None


def init_scheduler(cron: str = BAN_SWEEP_CRON) -> AsyncIOScheduler:
    global scheduler
    if scheduler is not None and scheduler.running:
        logger.info("Scheduler already initialized and running.")
        return scheduler

    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        auto_unban_users,
        trigger=CronTrigger.from_crontab(cron, timezone="UTC"),
        id="auto_unban_users",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    scheduler.start()
    logger.info(f"Scheduler started, ban sweep at '{cron}' UTC")
    return scheduler


def shutdown_scheduler():
    global scheduler
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down.")
    scheduler = None
