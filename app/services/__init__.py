"""
Message log services - stream naming and the Redis-backed log store
"""
from app.services.exceptions import (
    DuplicateEntry,
    InvalidIdentifier,
    LogStoreError,
    StoreUnavailable,
    ValidationError,
)
from app.services.log_store import LogStore

__all__ = [
    "LogStore",
    "LogStoreError",
    "StoreUnavailable",
    "DuplicateEntry",
    "ValidationError",
    "InvalidIdentifier",
]
