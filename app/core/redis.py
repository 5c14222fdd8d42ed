"""
Redis connection factory for the message log.
The process owns exactly one pooled client, created in the app lifespan.
"""
import logging
from typing import Optional

import redis.asyncio as redis

from app.core.config import settings

logger = logging.getLogger(__name__)


def create_redis_client(
    url: Optional[str] = None,
    max_connections: Optional[int] = None,
    socket_timeout: Optional[float] = None,
) -> redis.Redis:
    """
    Build a pooled asyncio Redis client. No connection is opened until
    the first command.

    Args:
        url: Redis connection string (default: settings.REDIS_URL)
        max_connections: Pool size (default: settings.REDIS_MAX_CONNECTIONS)
        socket_timeout: Per-command network timeout in seconds

    Raises:
        ValueError: if url is not a valid redis:// / rediss:// / unix:// URL
    """
    url = url or settings.REDIS_URL
    if max_connections is None:
        max_connections = settings.REDIS_MAX_CONNECTIONS
    if socket_timeout is None:
        socket_timeout = settings.REDIS_SOCKET_TIMEOUT

    pool = redis.ConnectionPool.from_url(
        url,
        max_connections=max_connections,
        # raw bytes: LogStore decodes per field so a bad value skips one entry
        decode_responses=False,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
    )
    # from_pool hands pool ownership to the client, aclose() disconnects it
    client = redis.Redis.from_pool(pool)
    logger.info(f"Redis client created (max_connections={max_connections})")
    return client
