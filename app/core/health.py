"""
Health check utilities
"""
from typing import Dict, Any
import logging

from app.core.config import settings
from app.services.log_store import LogStore

logger = logging.getLogger(__name__)


async def check_redis(log_store: LogStore) -> Dict[str, Any]:
    """
    Check Redis connectivity.

    Returns:
        Dictionary with status and details
    """
    if await log_store.ping():
        return {
            "status": "healthy",
            "message": "Redis connection successful"
        }
    logger.warning("Redis health check failed")
    return {
        "status": "unhealthy",
        "message": "Redis connection failed"
    }


async def get_health_status(log_store: LogStore) -> Dict[str, Any]:
    """
    Get overall health status.

    Returns:
        Dictionary with health status of all components
    """
    redis_status = await check_redis(log_store)

    return {
        "status": redis_status["status"],
        "version": "0.1.0",
        "environment": settings.ENVIRONMENT,
        "components": {
            "redis": redis_status,
        }
    }
