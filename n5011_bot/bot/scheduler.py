from __future__ import annotations

import logging
from typing import Set

from telegram.ext import Application, ContextTypes

from n5011_bot.core.throttle import RefreshScheduler
from n5011_bot.directory.refresh import DirectoryRefresher

logger = logging.getLogger(__name__)


def _job_name(user_id: int) -> str:
    return f"directory_refresh:{user_id}"


async def refresh_directory_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    refresher: DirectoryRefresher = context.job.data["refresher"]
    user_id: int = context.job.data["user_id"]
    in_flight: Set[int] = context.job.data.get("in_flight", set())
    try:
        await refresher.refresh(user_id)
    finally:
        in_flight.discard(user_id)


def make_refresh_scheduler(app: Application, refresher: DirectoryRefresher) -> RefreshScheduler:
    """
    Hand directory lookups to the PTB JobQueue so the update handler that
    triggered them returns immediately.

    At most one lookup per user is queued or running at a time.
    """
    in_flight: Set[int] = set()

    def _schedule(user_id: int) -> None:
        if user_id in in_flight or app.job_queue.get_jobs_by_name(_job_name(user_id)):
            logger.debug("Directory refresh already pending for user=%s", user_id)
            return
        in_flight.add(user_id)
        try:
            app.job_queue.run_once(
                callback=refresh_directory_job,
                when=0,
                data={"refresher": refresher, "user_id": user_id, "in_flight": in_flight},
                name=_job_name(user_id),
            )
        except Exception:
            in_flight.discard(user_id)
            raise
        logger.debug("Directory refresh scheduled for user=%s", user_id)

    return _schedule
