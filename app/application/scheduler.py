"""
Background scheduler for periodic jobs inside the FastAPI process.

Jobs:
  - Chat history pruning (03:00 UTC): keep the newest CHAT_HISTORY_KEEP
    messages per user
"""
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(daemon=True)


def _run_chat_pruning():
    from app.config import get_settings
    from app.infrastructure.db.session import session_scope
    from app.application.chat import prune_all_users

    try:
        with session_scope() as db:
            deleted = prune_all_users(db, keep=get_settings().CHAT_HISTORY_KEEP)
        logger.info("Chat pruning removed %d messages", deleted)
    except Exception:
        logger.exception("Chat pruning job failed")


def start_scheduler():
    """Register jobs and start the scheduler (no-op if already running)."""
    if scheduler.running:
        return
    scheduler.add_job(
        _run_chat_pruning,
        CronTrigger(hour=3, minute=0, timezone="UTC"),
        id="chat_pruning",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Scheduler started: chat_pruning (03:00 UTC)")


def shutdown_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
