"""
ARQ Worker Configuration

This module configures the ARQ background worker that runs the
reminder sweep every hour.

Running the Worker:
------------------
    # From project root directory
    arq reserves.worker.WorkerSettings

    # With verbose logging
    arq reserves.worker.WorkerSettings --verbose

Worker Lifecycle:
----------------
1. Worker starts and connects to Redis
2. Worker calls startup(), which creates the Database
3. At minute REMINDER_CRON_MINUTE of every hour the cron job runs
   process_reminders; the same function can also be enqueued by name
4. On shutdown, worker calls shutdown(), which disposes the engine

Scaling Workers:
---------------
Several workers may run at once. ARQ runs each cron tick on one
worker only, and reminders are unique per (entity, user, kind,
occurrence) in the database, so overlapping sweeps never send a
reminder twice.
"""

import logging
from typing import Any, Dict

from arq import cron

from reserves.core.config import settings
from reserves.db.database import Database
from reserves.db.redis import get_arq_redis_settings
from reserves.tasks.reminder_tasks import process_reminders

# ============================================================
# Logging Configuration
# ============================================================

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# ============================================================
# Startup and Shutdown Hooks
# ============================================================

async def startup(ctx: Dict[str, Any]) -> None:
    """
    Called when worker starts.

    One Database per worker process, shared by every job through ctx.
    """
    logger.info("ARQ Worker starting up...")

    database = Database.from_settings(settings)
    ctx["database"] = database
    ctx["settings"] = settings

    if await database.check_connection():
        logger.info("Database connection established successfully")
    else:
        logger.warning("Database connection check failed; reminder jobs will fail until it recovers")

    logger.info("ARQ Worker ready to process jobs")


async def shutdown(ctx: Dict[str, Any]) -> None:
    """
    Called when worker shuts down.

    Clean up resources.
    """
    logger.info("ARQ Worker shutting down...")

    database = ctx.get("database")
    if database is not None:
        await database.dispose()

    logger.info("ARQ Worker shutdown complete")


# ============================================================
# Worker Configuration Class
# ============================================================

class WorkerSettings:
    """
    ARQ Worker settings.

    This class is discovered by ARQ when you run:
        arq reserves.worker.WorkerSettings
    """

    # ========================================
    # Task Functions
    # ========================================
    functions = [
        process_reminders,
    ]

    # ========================================
    # Scheduled Jobs
    # ========================================
    cron_jobs = [
        cron(
            process_reminders,
            minute=settings.REMINDER_CRON_MINUTE,
            run_at_startup=False,
            unique=True,
        ),
    ]

    # ========================================
    # Redis Connection
    # ========================================
    redis_settings = get_arq_redis_settings()

    # ========================================
    # Lifecycle Hooks
    # ========================================
    on_startup = startup
    on_shutdown = shutdown

    # ========================================
    # Job Settings
    # ========================================
    job_timeout = 600      # 10 minutes
    keep_result = 3600     # 1 hour
    max_tries = 1          # The next hourly run picks up whatever was missed

    # ========================================
    # Concurrency Settings
    # ========================================
    max_jobs = 2
    poll_delay = 0.5

    # ========================================
    # Queue Settings
    # ========================================
    queue_name = "arq:queue"
    health_check_interval = 10
