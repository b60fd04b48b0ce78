"""
Redis Connection Module

Redis is only used as the ARQ broker: the reminder worker keeps its
cron schedule and job queue there.
"""

import logging

from redis.asyncio import Redis
from arq.connections import RedisSettings

from reserves.core.config import Settings, settings

# ============================================================
# Logging Setup
# ============================================================
logger = logging.getLogger(__name__)


# ============================================================
# ARQ Redis Settings (for task queue)
# ============================================================

def get_arq_redis_settings(config: Settings = settings) -> RedisSettings:
    """
    Get Redis settings for the ARQ worker.

    Returns:
        RedisSettings configured from REDIS_URL
    """
    redis_settings = RedisSettings.from_dsn(config.REDIS_URL)
    # Connection retry settings
    redis_settings.conn_timeout = 10
    redis_settings.conn_retries = 5
    redis_settings.conn_retry_delay = 1
    return redis_settings


# ============================================================
# Health Check
# ============================================================

async def check_redis_connection(config: Settings = settings) -> bool:
    """
    Check if Redis is reachable.

    Returns:
        True if Redis responds to PING, False otherwise
    """
    redis = Redis.from_url(config.REDIS_URL, socket_connect_timeout=2)
    try:
        return bool(await redis.ping())
    except Exception as e:
        logger.error(f"Redis health check failed: {e}")
        return False
    finally:
        await redis.aclose()
