"""
Log Store - per-(user, session) message log on Redis streams

Each log is one stream. Appends run XADD with an explicit, timestamp
derived id and EXPIRE in one transaction, so an idle log is dropped by
Redis itself. Queries are a single XRANGE from a timestamp-derived id.
"""
from datetime import timedelta
from typing import TYPE_CHECKING, Any, List, Optional, Union
from uuid import UUID
import logging

from redis.exceptions import RedisError, ResponseError

from app.services import stream_keys
from app.services.exceptions import DuplicateEntry, StoreUnavailable

if TYPE_CHECKING:
    from app.models.message import Message

logger = logging.getLogger(__name__)

MESSAGE_FIELD = "message"
DEFAULT_TTL = timedelta(hours=1)

# Redis reply for an XADD id that is not above the stream's last id
_NON_INCREASING_ID = "equal or smaller than the target stream top item"

# The client is built with decode_responses=False, so fields come back as bytes
_MESSAGE_FIELD_RAW = MESSAGE_FIELD.encode()


def _decode(value: Any) -> Optional[str]:
    """UTF-8 text of a raw reply value, None when it is absent or not UTF-8"""
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return None
    return value if isinstance(value, str) else None


class LogStore:
    """
    Append/range-scan access to message streams.

    Safe to share across concurrent requests: every operation is a single
    Redis command or MULTI/EXEC transaction and no state is
    cached here. Log existence and expiry live only in Redis.
    """

    def __init__(self, client: Any, ttl: Union[timedelta, int] = DEFAULT_TTL):
        """
        Args:
            client: redis.asyncio.Redis (or a compatible fake) created with
                decode_responses=False
            ttl: Sliding expiry applied to a log on every append
        """
        if isinstance(ttl, int):
            ttl = timedelta(seconds=ttl)
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        self._client = client
        self._ttl = ttl
        self._closed = False

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def append(self, message: "Message") -> str:
        """
        Append a message to its (user, session) log and refresh the log TTL.

        Args:
            message: Message with server-assigned timestamp

        Returns:
            Entry id assigned by Redis ("<timestamp>-0")

        Raises:
            DuplicateEntry: another message already took this millisecond
            StoreUnavailable: Redis unreachable or failed
        """
        key = stream_keys.log_key(message.user_id, message.session_id)
        entry_id = stream_keys.entry_id(message.timestamp)
        self._ensure_open("append", key)

        try:
            # XADD and EXPIRE in one MULTI/EXEC: a log never exists without a TTL
            async with self._client.pipeline(transaction=True) as pipe:
                assigned, _ = await (
                    pipe.xadd(key, {MESSAGE_FIELD: message.text}, id=entry_id)
                    .expire(key, self._ttl)
                    .execute()
                )
        except ResponseError as e:
            if _NON_INCREASING_ID in str(e):
                raise DuplicateEntry(
                    f"entry id {entry_id} is not after the last entry",
                    operation="append",
                    log_key=key,
                    entry_id=entry_id,
                ) from e
            raise StoreUnavailable(str(e), operation="append", log_key=key) from e
        except RedisError as e:
            raise StoreUnavailable(str(e), operation="append", log_key=key) from e

        return _decode(assigned)

    async def query_since(
        self,
        user_id: UUID,
        session_id: UUID,
        timestamp: int
    ) -> List[str]:
        """
        Messages appended to a log at or after timestamp, oldest first.

        A missing or expired log yields an empty list. Entries whose
        "message" field is missing or not valid UTF-8 are skipped.

        Raises:
            StoreUnavailable: Redis unreachable or failed
        """
        key = stream_keys.log_key(user_id, session_id)
        lower = stream_keys.lower_bound_entry_id(timestamp)
        self._ensure_open("query", key)

        try:
            entries = await self._client.xrange(key, min=lower, max="+")
        except RedisError as e:
            raise StoreUnavailable(str(e), operation="query", log_key=key) from e

        messages: List[str] = []
        for entry_id, fields in entries:
            value = fields.get(_MESSAGE_FIELD_RAW) if isinstance(fields, dict) else None
            text = _decode(value)
            if text is None:
                logger.warning(f"Skipping malformed entry {entry_id!r} in stream '{key}'")
                continue
            messages.append(text)
        return messages

    async def ping(self) -> bool:
        """Health probe, True when Redis answers PING"""
        if self._closed:
            return False
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    async def close(self):
        """Release the Redis connection pool. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._client.aclose()
        logger.info("Redis connection closed")

    def _ensure_open(self, operation: str, key: str):
        if self._closed:
            raise StoreUnavailable("log store is closed", operation=operation, log_key=key)
