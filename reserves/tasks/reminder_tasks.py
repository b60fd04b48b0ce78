"""
Reminder Tasks

The hourly reminder sweep as an ARQ job. Scheduled by the worker's
cron and can also be enqueued by name: enqueue_job('process_reminders').
"""

import logging
from typing import Any, Dict

from reserves.core.config import settings
from reserves.db.database import Database
from reserves.services.reminder_service import ReminderProcessor

logger = logging.getLogger(__name__)


async def process_reminders(ctx: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run every reminder domain once.

    Args:
        ctx: ARQ context; ``database`` is put there by the worker startup hook

    Returns:
        Per-domain counts, stored by ARQ as the job result
    """
    job_id = ctx.get("job_id", "unknown")
    database: Database = ctx["database"]

    logger.info(f"[Job {job_id}] Processing reminders")
    summary = await ReminderProcessor(database, ctx.get("settings", settings)).run()

    if summary.success:
        logger.info(f"[Job {job_id}] Reminders processed")
    else:
        logger.warning(
            f"[Job {job_id}] Reminder domains failed: {', '.join(summary.failed_domains)}"
        )
    return summary.as_dict()
