"""
FastAPI dependencies for the message log API
"""
import time

from fastapi import HTTPException, Request

from app.services.log_store import LogStore


def get_log_store(request: Request) -> LogStore:
    """
    Shared LogStore created by the application lifespan.
    Overridden in tests with a store over an in-memory fake.
    """
    log_store = getattr(request.app.state, "log_store", None)
    if log_store is None:
        raise HTTPException(status_code=503, detail="Message store is not initialised")
    return log_store


def get_timestamp_ms() -> int:
    """Server-assigned append timestamp, wall-clock milliseconds"""
    return time.time_ns() // 1_000_000
